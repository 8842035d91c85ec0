"""
MongoDB Service - CRUD operations for the account collections.

Collections in this database:
1. students / faculties / tpos / admins - one account collection per role
2. logins                               - append-only activity log

The role collections share most fields but not all of them (see
app.models.roles). Passwords are hashed on every write path here, the same
way for register, profile update and password reset.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pymongo import ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database

from app.core.auth import hash_password
from app.db.mongodb import COLLECTIONS
from app.models.roles import RESET_FIELDS, ROLES, RoleSpec

logger = logging.getLogger(__name__)

ACTIVITY_SIGNUP = "signup"
ACTIVITY_LOGIN = "login"
ACTIVITY_PROFILE_UPDATE = "profile_update"

# Never leaves the server
PRIVATE_FIELDS = ("password",) + RESET_FIELDS


def utcnow() -> datetime:
    """Naive UTC timestamp, the form pymongo hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert an account document to a JSON-serializable dict without secrets."""
    if doc is None:
        return None
    safe = {k: v for k, v in doc.items() if k not in PRIVATE_FIELDS}
    if "_id" in safe:
        safe["_id"] = str(safe["_id"])
    return safe


# ============================================================
# ACCOUNT COLLECTIONS
# One store per role; all share the same write rules
# ============================================================

class AccountStore:
    """
    Handles account storage for one role.
    Documents returned here are raw (password included); sanitize with
    serialize_doc before they leave the service layer.
    """

    def __init__(self, role: RoleSpec, db: Database):
        self.role = role
        self.collection: Collection = db[role.collection]

    def _prepare(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        prepared = dict(changes)
        if prepared.get("password"):
            prepared["password"] = hash_password(prepared["password"])
        return prepared

    def find_by_email(self, email: str) -> Optional[dict]:
        return self.collection.find_one({"email": email})

    def exists(self, email: str) -> bool:
        return self.collection.find_one({"email": email}, {"_id": 1}) is not None

    def create(self, data: Dict[str, Any]) -> dict:
        """
        Insert a new account. `role` and role defaults are applied here so a
        stored document always matches the collection it lives in.
        """
        now = utcnow()
        doc = {**self.role.defaults, **self._prepare(data)}
        doc["role"] = self.role.key
        doc["createdAt"] = now
        doc["updatedAt"] = now
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    def update(self, filter_: Dict[str, Any], changes: Dict[str, Any],
               unset: Iterable[str] = ()) -> Optional[dict]:
        """Apply changes to the first matching account and return it, or None."""
        update: Dict[str, Any] = {"$set": {**self._prepare(changes), "updatedAt": utcnow()}}
        unset = list(unset)
        if unset:
            update["$unset"] = {name: "" for name in unset}
        return self.collection.find_one_and_update(
            filter_,
            update,
            return_document=ReturnDocument.AFTER
        )

    def update_by_email(self, email: str, changes: Dict[str, Any]) -> Optional[dict]:
        return self.update({"email": email}, changes)

    def set_reset_token(self, account_id: Any, digest: str, expires_at: datetime) -> Optional[dict]:
        return self.update(
            {"_id": account_id},
            {"resetPasswordToken": digest, "resetPasswordExpire": expires_at}
        )

    def clear_reset_token(self, account_id: Any) -> Optional[dict]:
        return self.update({"_id": account_id}, {}, unset=RESET_FIELDS)

    def find_by_reset_digest(self, digest: str, now: Optional[datetime] = None) -> Optional[dict]:
        """Account holding this digest whose reset window is still open."""
        return self.collection.find_one({
            "resetPasswordToken": digest,
            "resetPasswordExpire": {"$gt": now or utcnow()}
        })


def get_account_stores(db: Database) -> List[AccountStore]:
    """Stores for every role, in lookup order."""
    return [AccountStore(role, db) for role in ROLES]


def email_exists(email: Optional[str], stores: Iterable[AccountStore]) -> bool:
    """
    Check the single global email namespace.

    Probes each role collection in turn and stops at the first hit. This is a
    plain read: two registrations racing on the same email can both pass.
    """
    if not email:
        return False
    return any(store.exists(email) for store in stores)


# ============================================================
# ACTIVITY LOG COLLECTION
# Signup / login / profile update events, best-effort
# ============================================================

class ActivityLogService:
    """
    Appends activity records. A failed write is logged and otherwise ignored:
    it must never fail the request that triggered it.
    """

    def __init__(self, db: Database):
        self.collection: Collection = db[COLLECTIONS["logins"]]

    def record(self, email: str, role: str, activity: str) -> bool:
        now = utcnow()
        try:
            self.collection.insert_one({
                "email": email,
                "role": role,
                "activity": activity,
                "createdAt": now,
                "updatedAt": now
            })
            return True
        except Exception as e:
            logger.warning("Failed to record %s activity for %s: %s", activity, role, e)
            return False
