"""
Placement Management System - Main Application

FastAPI backend with:
- MongoDB for accounts (one collection per role) and activity logs
- bcrypt password hashing with legacy plaintext support
- Token-based password reset over SMTP

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import PlacementError
from app.db.migrations import run_migrations
from app.db.mongodb import close_mongo_client, get_mongo_db, init_mongo_indexes, test_mongo_connection

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Placement Management System",
    description="""
    Role-based account API for the placement dashboards.

    ## Roles
    - **Students**, **Faculty**, **TPO**, **Admin**: register, login, update profile, reset password
    - **Role-agnostic login**: `/api/login` finds the role from the email

    ## Database
    - MongoDB: students, faculties, tpos, admins, logins
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")

# Malformed bodies report the same message the operation uses for its own failures
BODY_ERROR_MESSAGES = {
    "register": "Registration failed",
    "update": "Update failed",
}


@app.exception_handler(PlacementError)
async def placement_error_handler(request: Request, exc: PlacementError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    action = request.url.path.rstrip("/").rsplit("/", 1)[-1]
    message = BODY_ERROR_MESSAGES.get(action, "Invalid request body")
    return JSONResponse(status_code=400, content={"message": message, "error": errors})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error", "error": str(exc)})


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes and apply pending migrations."""
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
        if settings.run_migrations:
            applied = run_migrations(get_mongo_db())
            logger.info("Migrations applied: %s", ", ".join(applied) or "none")
    except Exception as e:
        logger.warning("MongoDB startup tasks failed: %s", e)


@app.on_event("shutdown")
async def shutdown_event():
    close_mongo_client()


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Placement Management System", "message": "API is running."}


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
