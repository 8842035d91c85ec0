"""
Error taxonomy for the account API.

Every error carries the HTTP status it maps to, a human readable message and,
where available, the underlying error text. `app.main` renders them as
{"message": ..., "error": ...}.
"""

from typing import Optional


class PlacementError(Exception):
    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.error = error
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.error:
            body["error"] = self.error
        return body


class ValidationError(PlacementError):
    """Missing or malformed input."""
    status_code = 400


class AuthError(PlacementError):
    """Unknown account or wrong password."""
    status_code = 401


class InvalidTokenError(PlacementError):
    status_code = 400


class NotFoundError(PlacementError):
    status_code = 404


class DependencyError(PlacementError):
    """An external collaborator (mail) failed."""
    status_code = 500


class StoreError(PlacementError):
    """Unexpected database failure. Status depends on the operation."""
    status_code = 500
