"""
Health check endpoints
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.constants import SERVICE_NAME
from app.core.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Liveness check

    Always ok while the process serves requests.
    """
    return {
        "status": "ok",
        "service": SERVICE_NAME,
    }


@router.get("/health/ready")
async def readiness_check(db: Session = Depends(get_db)):
    """Readiness check: the database must answer a trivial query"""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "service": SERVICE_NAME, "database": "unreachable"},
        )
    return {"status": "ready", "service": SERVICE_NAME, "database": "ok"}
