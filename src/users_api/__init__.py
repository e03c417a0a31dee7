"""
Users API - CRUD service over the tbl_users table
"""

__version__ = "1.0.0"
