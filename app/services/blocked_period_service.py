"""
Blocked period service - date ranges in which an entity accepts no starters
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.blocked_period import BlockedPeriod
from app.models.entity import Entity
from app.models.job_role import JobRole
from app.schemas.blocked_period import BlockedPeriodCreate, BlockedPeriodUpdate
from app.services.audit_service import log_audit
from app.utils.json_serializer import to_json_safe

logger = logging.getLogger(__name__)

ALL_ROLES_LABEL = "Alle functies"
DEFAULT_REASON = "Deze periode is geblokkeerd"


def get_period_or_404(db: Session, period_id: int) -> BlockedPeriod:
    period = db.query(BlockedPeriod).filter(BlockedPeriod.id == period_id).first()
    if not period:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Blocked period with id {period_id} not found"
        )
    return period


def _check_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date"
        )


def list_periods(db: Session, entity_id: Optional[int] = None) -> List[BlockedPeriod]:
    """Active periods, most recent first"""
    query = db.query(BlockedPeriod).filter(BlockedPeriod.is_active.is_(True))
    if entity_id is not None:
        query = query.filter(BlockedPeriod.entity_id == entity_id)
    return query.order_by(BlockedPeriod.start_date.desc(), BlockedPeriod.id).all()


def create_period(db: Session, data: BlockedPeriodCreate, actor_id: int) -> BlockedPeriod:
    """
    Raises:
        HTTPException: 400 for an inverted range or a job role of another
            entity, 404 unknown entity
    """
    _check_range(data.start_date, data.end_date)
    if not db.query(Entity).filter(Entity.id == data.entity_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entity with id {data.entity_id} not found"
        )
    if data.job_role_id is not None:
        job_role = db.query(JobRole).filter(JobRole.id == data.job_role_id).first()
        if not job_role or job_role.entity_id != data.entity_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Job role does not belong to this entity"
            )

    period = BlockedPeriod(
        entity_id=data.entity_id,
        job_role_id=data.job_role_id,
        start_date=data.start_date,
        end_date=data.end_date,
        reason=data.reason,
        is_active=data.is_active,
        created_by=actor_id,
    )
    db.add(period)
    db.commit()
    db.refresh(period)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="CREATE",
        target_type="blocked_period",
        target_id=period.id,
        meta={
            "entity_id": period.entity_id,
            "job_role_id": period.job_role_id,
            "start_date": period.start_date,
            "end_date": period.end_date,
        }
    )
    return period


def update_period(db: Session, period_id: int, data: BlockedPeriodUpdate, actor_id: int) -> BlockedPeriod:
    period = get_period_or_404(db, period_id)
    update_data = data.model_dump(exclude_unset=True)
    start_date = update_data.get("start_date") or period.start_date
    end_date = update_data.get("end_date") or period.end_date
    _check_range(start_date, end_date)

    for field, value in update_data.items():
        if value is None and field != "reason":
            continue
        setattr(period, field, value)
    db.commit()
    db.refresh(period)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE",
        target_type="blocked_period",
        target_id=period.id,
        meta={"changes": sorted(update_data)}
    )
    return period


def delete_period(db: Session, period_id: int, actor_id: int) -> None:
    period = get_period_or_404(db, period_id)
    entity_id = period.entity_id
    db.delete(period)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="DELETE",
        target_type="blocked_period",
        target_id=period_id,
        meta={"entity_id": entity_id}
    )


def find_blocking_period(
    db: Session,
    entity_id: Optional[int],
    role_title: Optional[str],
    day: date,
) -> Optional[BlockedPeriod]:
    """
    First active period of the entity covering ``day`` that applies to the role

    Periods without a job role apply to every role.
    """
    if entity_id is None:
        return None
    role_filter = [BlockedPeriod.job_role_id.is_(None)]
    if role_title:
        role_filter.append(BlockedPeriod.job_role.has(JobRole.title == role_title))
    return db.query(BlockedPeriod).filter(
        BlockedPeriod.entity_id == entity_id,
        BlockedPeriod.is_active.is_(True),
        BlockedPeriod.start_date <= day,
        BlockedPeriod.end_date >= day,
        or_(*role_filter),
    ).order_by(BlockedPeriod.start_date, BlockedPeriod.id).first()


def describe(period: Optional[BlockedPeriod]) -> Dict[str, Any]:
    if period is None:
        return {"blocked": False}
    return {
        "blocked": True,
        "reason": period.reason or DEFAULT_REASON,
        "start_date": period.start_date,
        "end_date": period.end_date,
        "job_role": period.job_role.title if period.job_role else ALL_ROLES_LABEL,
    }


def ensure_not_blocked(db: Session, entity_id: Optional[int], role_title: Optional[str], day: date) -> None:
    """
    Raises:
        HTTPException: 409 describing the period when the start day is blocked
    """
    period = find_blocking_period(db, entity_id, role_title, day)
    if period is not None:
        logger.info(f"Start date {day} blocked by period {period.id} for entity {entity_id}")
        detail = to_json_safe(describe(period))
        detail["message"] = "Start date falls in a blocked period"
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
