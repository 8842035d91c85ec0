"""
Authentication Utility - password and reset-token handling.

Provides:
- Password hashing with bcrypt (passlib)
- Legacy plaintext comparison for rows created before hashing was introduced
- Opaque reset tokens, of which only the SHA-256 digest is ever stored
"""

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from passlib.context import CryptContext

from app.core.config import get_settings

settings = get_settings()

# Password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.password_hash_rounds
)

# Every bcrypt variant ($2a$, $2b$, $2y$) shares this prefix
HASH_PREFIX = "$2"

RESET_TOKEN_BYTES = 20


def is_password_hash(value: Optional[str]) -> bool:
    """True when the stored value carries the bcrypt format marker."""
    return bool(value) and value.startswith(HASH_PREFIX)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, stored_password: Optional[str]) -> bool:
    """
    Verify password against the stored value.

    Hashed values go through bcrypt. Anything else is a legacy plaintext
    row and is compared by exact match.
    """
    if not plain_password or not stored_password:
        return False
    if is_password_hash(stored_password):
        try:
            return pwd_context.verify(plain_password, stored_password)
        except ValueError:
            # malformed hash
            return False
    return secrets.compare_digest(plain_password.encode("utf-8"), stored_password.encode("utf-8"))


def digest_reset_token(token: str) -> str:
    """One-way digest stored in place of the raw reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_reset_token(now: datetime, expire_minutes: Optional[int] = None) -> Tuple[str, str, datetime]:
    """
    Create a new reset token.

    Returns:
        (raw_token, digest, expires_at). Only the digest and expiry are persisted;
        the raw token goes to the user.
    """
    minutes = expire_minutes if expire_minutes is not None else settings.reset_token_expire_minutes
    token = secrets.token_hex(RESET_TOKEN_BYTES)
    return token, digest_reset_token(token), now + timedelta(minutes=minutes)
