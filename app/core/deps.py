"""
Dependencies and guards for FastAPI endpoints
"""
import hmac
import logging
from typing import Generator, Optional

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import decode_token
from app.db.session import SessionLocal
from app.models.user import User
from app.services.access_service import Capability, has_capability
from app.services.settings_service import SettingsSnapshot, load_snapshot

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 rather than FastAPI's default 403
security = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token

    401 when no/invalid token is presented, 403 when the account is inactive.
    """
    if credentials is None:
        raise _unauthenticated("Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
        sub_value = payload.get("sub")
        if sub_value is None:
            raise _unauthenticated("Invalid authentication credentials")
        # Convert string sub back to integer
        user_id: int = int(sub_value)
    except (ValueError, TypeError):
        raise _unauthenticated("Invalid authentication credentials")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _unauthenticated("User not found")

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user


def require_capability(capability: Capability):
    """
    Dependency factory for capability-based access control

    Usage:
        @router.get("/admin-only")
        async def admin_endpoint(user: User = Depends(require_capability(Capability.ADMINISTER))):
            ...
    """
    def capability_checker(current_user: User = Depends(get_current_user)) -> User:
        if not has_capability(current_user, capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required capability: {capability.value}"
            )
        return current_user
    return capability_checker


require_admin = require_capability(Capability.ADMINISTER)


def get_settings_snapshot(db: Session = Depends(get_db)) -> SettingsSnapshot:
    """Versioned system settings, loaded once per request"""
    return load_snapshot(db)


def verify_cron_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    secret: Optional[str] = Query(default=None, description="Alternative to the bearer header"),
) -> None:
    """
    Guard for scheduled-job endpoints (shared secret, independent of user tokens)

    Without a configured CRON_SECRET the endpoints stay open outside production.
    """
    expected = settings.CRON_SECRET
    if not expected:
        logger.warning("CRON_SECRET is not set; cron endpoint called without authentication")
        return

    provided = credentials.credentials if credentials is not None else secret
    if not provided or not hmac.compare_digest(provided, expected):
        logger.warning("Rejected cron request with missing or invalid secret")
        raise _unauthenticated("Invalid cron secret")
