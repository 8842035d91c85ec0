"""
Account Auth Service - register, login, profile update and password reset.

One class serves all four roles; everything role-specific comes from the
RoleSpec it is built with (collection, field set, server-owned fields).

Flow for every operation:
1. Validate input
2. (register only) check the email against every role collection
3. Read/write the role collection (passwords are hashed by the store)
4. Append an activity record (best-effort)
5. Return the account without password or reset fields
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.core.auth import digest_reset_token, generate_reset_token, verify_password
from app.core.config import Settings, get_settings
from app.core.errors import (
    AuthError, DependencyError, InvalidTokenError, NotFoundError, StoreError, ValidationError
)
from app.models.roles import ROLES, RoleSpec
from app.services.mail_service import Mailer
from app.services.mongo_service import (
    ACTIVITY_LOGIN, ACTIVITY_PROFILE_UPDATE, ACTIVITY_SIGNUP,
    AccountStore, ActivityLogService, email_exists, get_account_stores, serialize_doc, utcnow
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Credential operations for one role."""

    def __init__(self, role: RoleSpec, db: Database, mailer: Optional[Mailer] = None,
                 settings: Optional[Settings] = None):
        self.role = role
        self.db = db
        self.store = AccountStore(role, db)
        self.activity = ActivityLogService(db)
        self.settings = settings or get_settings()
        self.mailer = mailer or Mailer(self.settings)

    def _response(self, message: str, account: dict) -> Dict[str, Any]:
        return {"message": message, self.role.key: serialize_doc(account)}

    # --------------------------------------------------------
    # register
    # --------------------------------------------------------

    def register(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        email = payload.get("email")
        if not email:
            raise ValidationError("Email is required")

        try:
            if email_exists(email, get_account_stores(self.db)):
                raise ValidationError("Email already in use")

            data = self.role.filter_payload(payload)
            account = self.store.create(data)
        except PyMongoError as e:
            raise StoreError("Registration failed", str(e), status_code=400) from e

        logger.info("Registered %s account", self.role.key)
        self.activity.record(email, self.role.key, ACTIVITY_SIGNUP)
        return self._response("Registration successful", account)

    # --------------------------------------------------------
    # login
    # --------------------------------------------------------

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Email and password are required")

        try:
            account = self.store.find_by_email(email)
        except PyMongoError as e:
            raise StoreError("Login error", str(e)) from e

        # same message for unknown email and wrong password
        if not account or not verify_password(password, account.get("password")):
            raise AuthError(INVALID_CREDENTIALS)

        self.activity.record(account["email"], self.role.key, ACTIVITY_LOGIN)
        return self._response("Login successful", account)

    # --------------------------------------------------------
    # update
    # --------------------------------------------------------

    def update(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Partial profile update. The account is identified by `email`, which
        itself cannot be changed here. `role`, the admin `accessLevel` and
        other server-owned fields are silently dropped.
        """
        changes = dict(payload)
        email = changes.pop("email", None)
        if not email:
            raise ValidationError("Email is required to identify the user")

        changes = self.role.filter_payload(changes)
        if not changes.get("password"):
            # an empty password would lock the account out
            changes.pop("password", None)
        try:
            account = self.store.update_by_email(email, changes)
        except PyMongoError as e:
            raise StoreError("Update failed", str(e), status_code=400) from e
        if not account:
            raise NotFoundError("User not found")

        self.activity.record(email, self.role.key, ACTIVITY_PROFILE_UPDATE)
        return self._response("Changes Saved", account)

    # --------------------------------------------------------
    # password reset
    # --------------------------------------------------------

    def _reset_message(self, token: str) -> str:
        reset_url = f"{self.settings.client_url.rstrip('/')}/reset-password/{token}"
        return f"You requested a password reset. Use this token or visit the link: {reset_url}"

    def forgot_password(self, email: Optional[str]) -> Dict[str, Any]:
        """
        Issue a reset token and mail it. Only the token digest is stored.
        The raw token is also returned in the response outside production or
        when mail is not configured, so the flow can be used locally.
        """
        if not email:
            raise ValidationError("Email is required")

        try:
            account = self.store.find_by_email(email)
            if not account:
                raise NotFoundError("No user with that email")

            token, digest, expires_at = generate_reset_token(
                utcnow(), self.settings.reset_token_expire_minutes
            )
            self.store.set_reset_token(account["_id"], digest, expires_at)

            try:
                self.mailer.send(to=account["email"], subject="Password Reset", text=self._reset_message(token))
            except Exception as e:
                # No usable token may outlive a failed send, whatever the cause
                self.store.clear_reset_token(account["_id"])
                raise DependencyError("Failed to send reset email", str(e)) from e
        except PyMongoError as e:
            raise StoreError("Forgot password error", str(e)) from e

        if not self.settings.email_configured or not self.settings.is_production:
            return {"message": "Reset token generated (dev)", "resetToken": token}
        return {"message": "Reset token sent"}

    def reset_password(self, token: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not token:
            raise ValidationError("Token is required")
        if not password:
            raise ValidationError("New password is required")

        try:
            account = self.store.find_by_reset_digest(digest_reset_token(token), utcnow())
            if not account:
                raise InvalidTokenError("Invalid or expired token")

            # same write path as a profile update: the store hashes the password
            self.store.update(
                {"_id": account["_id"]},
                {"password": password},
                unset=("resetPasswordToken", "resetPasswordExpire")
            )
        except PyMongoError as e:
            raise StoreError("Reset password error", str(e)) from e

        logger.info("Password reset completed for a %s account", self.role.key)
        self.activity.record(account["email"], self.role.key, ACTIVITY_PROFILE_UPDATE)
        return {"message": "Password reset successful"}


def get_auth_services(db: Database, mailer: Optional[Mailer] = None) -> List[AuthService]:
    """One service per role, in lookup order."""
    return [AuthService(role, db, mailer) for role in ROLES]


def login_any_role(db: Database, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
    """
    Log in without knowing the role.

    Collections are probed in ROLES order. The first collection holding the
    email decides: a wrong password there fails immediately, later
    collections are never checked.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    for service in get_auth_services(db):
        try:
            account = service.store.find_by_email(email)
        except PyMongoError as e:
            raise StoreError("Login error", str(e)) from e
        if not account:
            continue

        if not verify_password(password, account.get("password")):
            raise AuthError(INVALID_CREDENTIALS)

        service.activity.record(account["email"], service.role.key, ACTIVITY_LOGIN)
        return {"message": "Login successful", "role": service.role.key, "user": serialize_doc(account)}

    raise AuthError(INVALID_CREDENTIALS)
