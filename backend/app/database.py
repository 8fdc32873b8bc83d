"""
Database session dependency for the API.

Database initialization is handled in main.py startup, not at import time.
"""

from stockapp.db import db, get_db

__all__ = ["db", "get_db"]
