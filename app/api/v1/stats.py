"""
Dashboard statistics endpoints
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user
from app.models.user import User
from app.schemas.stats import YtdStatsOut
from app.services import stats_service

router = APIRouter()


@router.get("/ytd", response_model=YtdStatsOut)
async def ytd_stats_endpoint(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Year-to-date starter counts for the entities the user can see"""
    return stats_service.ytd_stats(db, current_user, year=year)
