"""
Database module - MongoDB connection and startup migrations.
"""
from app.db.mongodb import get_db, get_mongo_db, test_mongo_connection

__all__ = [
    "get_db",
    "get_mongo_db",
    "test_mongo_connection"
]
