"""
Startup migrations for the account collections.

Each migration is a plain function taking the database. Applied migrations
are recorded in the `migrations` collection (one document per migration,
keyed by revision id) and skipped on later boots. The migrations themselves
are idempotent, so re-running one after a lost marker is harmless.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Tuple

from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.db.mongodb import COLLECTIONS
from app.models.roles import ADMIN, TPO

logger = logging.getLogger(__name__)

Migration = Callable[[Database], Dict[str, int]]


def admin_drop_department_backfill_access_level(db: Database) -> Dict[str, int]:
    """Admins carry no department and always have an accessLevel."""
    admins = db[ADMIN.collection]
    unset_res = admins.update_many({"department": {"$exists": True}}, {"$unset": {"department": ""}})
    set_res = admins.update_many(
        {"accessLevel": {"$exists": False}},
        {"$set": {"accessLevel": ADMIN.defaults["accessLevel"]}}
    )
    if unset_res.modified_count:
        logger.info("Removed 'department' from %d admin document(s)", unset_res.modified_count)
    if set_res.modified_count:
        logger.info("Set accessLevel='Full' on %d admin document(s)", set_res.modified_count)
    return {"department_removed": unset_res.modified_count, "access_level_set": set_res.modified_count}


def tpo_drop_experience(db: Database) -> Dict[str, int]:
    """TPO documents never carry `experience`."""
    res = db[TPO.collection].update_many({"experience": {"$exists": True}}, {"$unset": {"experience": ""}})
    if res.modified_count:
        logger.info("Removed 'experience' from %d TPO document(s)", res.modified_count)
    return {"experience_removed": res.modified_count}


# Ordered by revision id
MIGRATIONS: List[Tuple[str, Migration]] = [
    ("0001_admin_drop_department_backfill_access_level", admin_drop_department_backfill_access_level),
    ("0002_tpo_drop_experience", tpo_drop_experience),
]


def applied_revisions(db: Database) -> List[str]:
    return [doc["_id"] for doc in db[COLLECTIONS["migrations"]].find({}, {"_id": 1})]


def run_migrations(db: Database, migrations: List[Tuple[str, Migration]] = None) -> List[str]:
    """
    Apply every migration not yet recorded.

    Returns:
        Revision ids applied during this call.
    """
    migrations = migrations if migrations is not None else MIGRATIONS
    done = set(applied_revisions(db))
    applied = []

    for revision, migrate in migrations:
        if revision in done:
            continue
        try:
            result = migrate(db)
        except PyMongoError as e:
            # Leave it unrecorded so the next boot retries
            logger.warning("Migration %s failed: %s", revision, e)
            continue
        db[COLLECTIONS["migrations"]].insert_one({
            "_id": revision,
            "result": result,
            "appliedAt": datetime.now(timezone.utc).replace(tzinfo=None)
        })
        applied.append(revision)
        logger.info("Applied migration %s", revision)

    return applied
