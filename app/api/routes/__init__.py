"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.account_routes import build_role_router
from app.models.roles import ROLES

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
for role in ROLES:
    api_router.include_router(build_role_router(role))
