"""
Configuration settings for the Users API
"""

import os
import logging

logger = logging.getLogger(__name__)

# Database configuration
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", 5432))
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_NAME = os.getenv("DB_NAME")
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 0))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Password hashing cost factor
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 10))

# CORS settings - every origin is allowed unless narrowed explicitly
ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]

if not DB_NAME:
    logger.warning("DB_NAME not set - connecting with the server's default database")
