"""
Blocked period endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user, require_admin
from app.models.user import User
from app.schemas.blocked_period import (
    BlockedPeriodCreate,
    BlockedPeriodUpdate,
    BlockedPeriodOut,
    BlockedPeriodCheck,
    BlockedPeriodCheckResult,
)
from app.services import blocked_period_service
from app.utils.datetime_utils import to_local_naive

router = APIRouter()


@router.get("", response_model=List[BlockedPeriodOut])
async def list_blocked_periods_endpoint(
    entity_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Active periods (admin only)"""
    return blocked_period_service.list_periods(db, entity_id=entity_id)


@router.post("/check", response_model=BlockedPeriodCheckResult)
async def check_blocked_period_endpoint(
    data: BlockedPeriodCheck,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Whether a starter with this entity, role and start date would be blocked"""
    day = to_local_naive(data.start_date).date()
    period = blocked_period_service.find_blocking_period(db, data.entity_id, data.role_title, day)
    return blocked_period_service.describe(period)


@router.post("", response_model=BlockedPeriodOut, status_code=201)
async def create_blocked_period_endpoint(
    data: BlockedPeriodCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return blocked_period_service.create_period(db, data, current_user.id)


@router.patch("/{period_id}", response_model=BlockedPeriodOut)
async def update_blocked_period_endpoint(
    period_id: int,
    data: BlockedPeriodUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return blocked_period_service.update_period(db, period_id, data, current_user.id)


@router.delete("/{period_id}", status_code=204)
async def delete_blocked_period_endpoint(
    period_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    blocked_period_service.delete_period(db, period_id, current_user.id)
    return None
