"""
Account Routes - built once per role.

POST /{role}/register - Register account
POST /{role}/login - Login
POST /{role}/update - Update profile (identified by email)
POST /{role}/forgot - Request password reset token
POST /{role}/reset/{token} - Redeem reset token

{role} is one of: students, faculty, tpo, admin
"""

from fastapi import APIRouter, Depends
from pymongo.database import Database

from app.db.mongodb import get_db
from app.models.roles import RoleSpec
from app.services.auth_service import AuthService
from app.services.mail_service import Mailer, get_mailer
from app.schemas.schemas import (
    AccountPayload, LoginRequest, ForgotPasswordRequest, ResetPasswordRequest,
    MessageResponse, ForgotPasswordResponse, ErrorResponse
)


def build_role_router(role: RoleSpec) -> APIRouter:
    """Create the router for one role. All logic lives in AuthService."""
    router = APIRouter(
        prefix=f"/{role.path}",
        tags=[role.path.capitalize()],
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
    )

    def get_service(db: Database = Depends(get_db), mailer: Mailer = Depends(get_mailer)) -> AuthService:
        return AuthService(role, db, mailer)

    @router.post("/register")
    def register(payload: AccountPayload, service: AuthService = Depends(get_service)):
        """Register a new account. The email must not exist under any role."""
        return service.register(payload.model_dump(exclude_unset=True))

    @router.post("/login", responses={401: {"model": ErrorResponse}})
    def login(payload: LoginRequest, service: AuthService = Depends(get_service)):
        """Login with email + password."""
        return service.login(payload.email, payload.password)

    @router.post("/update", responses={404: {"model": ErrorResponse}})
    def update(payload: AccountPayload, service: AuthService = Depends(get_service)):
        """Update profile fields. Only provided fields are changed."""
        return service.update(payload.model_dump(exclude_unset=True))

    @router.post(
        "/forgot",
        response_model=ForgotPasswordResponse,
        response_model_exclude_none=True,
        responses={404: {"model": ErrorResponse}}
    )
    def forgot_password(payload: ForgotPasswordRequest, service: AuthService = Depends(get_service)):
        """Issue a reset token and email the reset link."""
        return service.forgot_password(payload.email)

    @router.post("/reset/{token}", response_model=MessageResponse)
    def reset_password(token: str, payload: ResetPasswordRequest, service: AuthService = Depends(get_service)):
        """Set a new password using a reset token."""
        return service.reset_password(token, payload.password)

    return router
