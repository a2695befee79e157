"""
Starterskalender Backend - Main Application Entry Point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from app.api.router import api_router
from app.core.config import settings
from app.core.constants import SERVICE_TITLE
from app.core.errors import (
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from app.core.logging import setup_logging
from app.core.security import hash_password
from app.db.session import SessionLocal
from app.models.user import User, Role

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme.startswith("sqlite"):
            return url  # Safe to log path
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


# Create FastAPI app
app = FastAPI(
    title=SERVICE_TITLE,
    description="Meeting-room bookings and new-hire onboarding tracker",
    version=settings.VERSION or "1.0.0"
)

# Configure CORS - must be before other middleware
origins = settings.get_allowed_origins_list()
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    # Browsers reject credentials with a wildcard origin
    allow_credentials=origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    masked = _mask_database_url(settings.DATABASE_URL)
    logger.info("DATABASE_URL (app): %s", masked)
    if not settings.is_graph_configured():
        logger.info("Calendar integration not configured; bookings are confirmed locally")
    if not settings.is_email_configured():
        logger.info("Email not configured; outgoing mail will be skipped")


@app.on_event("startup")
def bootstrap_initial_admin() -> None:
    """
    Create the initial HR admin if no admin exists yet.
    This ensures the system always has at least one admin user.
    """
    db = SessionLocal()
    try:
        admin_exists = db.query(User).filter(User.role == Role.HR_ADMIN.value).first()
        if admin_exists:
            logger.info("Admin user already exists, skipping initial bootstrap")
            return

        email = settings.INITIAL_ADMIN_EMAIL.strip().lower()
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            existing.role = Role.HR_ADMIN.value
            existing.active = True
            logger.info("Promoted existing user %s to HR_ADMIN", email)
        else:
            db.add(User(
                email=email,
                name="System Administrator",
                role=Role.HR_ADMIN.value,
                password_hash=hash_password(settings.INITIAL_ADMIN_PASSWORD),
                active=True,
            ))
            logger.info("Initial admin user created: %s", email)
            logger.info("Password: [set via INITIAL_ADMIN_PASSWORD environment variable]")
        db.commit()
    except OperationalError as e:
        # Handle database not ready yet (tables might not exist)
        db.rollback()
        if "no such table" in str(e).lower():
            logger.warning("Database tables not ready yet, skipping initial bootstrap")
        else:
            logger.error("Database error during admin bootstrap: %s", e)
    finally:
        db.close()
