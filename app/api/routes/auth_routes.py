"""
Authentication Routes

POST /login - Login without knowing the role
"""

from fastapi import APIRouter, Depends
from pymongo.database import Database

from app.db.mongodb import get_db
from app.services.auth_service import login_any_role
from app.schemas.schemas import LoginRequest, LoginAnyRoleResponse, ErrorResponse

router = APIRouter(tags=["Authentication"])


@router.post(
    "/login",
    response_model=LoginAnyRoleResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}}
)
def login(request: LoginRequest, db: Database = Depends(get_db)):
    """
    Login with email + password only.

    Collections are searched student -> faculty -> tpo -> admin and the
    role of the matching account is returned with it.
    """
    return login_any_role(db, request.email, request.password)
