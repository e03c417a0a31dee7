"""
Entry point for the Users API
"""

import logging
from dotenv import load_dotenv

# Load environment variables from .env file before settings are read
load_dotenv()

from users_api.config.settings import HOST, PORT, LOG_LEVEL
from users_api.app import app

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Server is running on http://localhost:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
