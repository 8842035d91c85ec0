"""
MongoDB Connection Utility

MongoDB stores:
- One account collection per role (students, faculties, tpos, admins)
- The shared activity log (logins)
- Applied startup migrations (migrations)

Collection names match the ones the existing deployment uses, so
existing data is picked up as-is.
"""
import logging
from typing import Optional

from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.core.config import get_settings
from app.models.roles import ROLES

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the configured database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def get_db() -> Database:
    """
    Dependency for FastAPI route injection.
    Usage:
        @router.post("/login")
        def login(db: Database = Depends(get_db)):
            ...
    """
    return get_mongo_db()


def close_mongo_client() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "students": "students",
    "faculty": "faculties",
    "tpo": "tpos",
    "admin": "admins",
    "logins": "logins",
    "migrations": "migrations"
}


def init_mongo_indexes(db: Optional[Database] = None):
    """
    Create indexes for better query performance.
    Call this once during app startup.

    Email indexes are deliberately NOT unique: uniqueness is checked across
    all four role collections in the application, and legacy data may already
    hold duplicates.
    """
    db = db if db is not None else get_mongo_db()

    for role in ROLES:
        db[role.collection].create_index([("email", ASCENDING)])
        # Reset redemption looks accounts up by token digest
        db[role.collection].create_index([("resetPasswordToken", ASCENDING)], sparse=True)

    db[COLLECTIONS["logins"]].create_index([("email", ASCENDING)])

    logger.info("MongoDB indexes created successfully")
