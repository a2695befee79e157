"""
Starter service - new-hire records, cancellation and cancellation notices
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models.entity import Entity
from app.models.membership import Membership
from app.models.starter import Starter
from app.models.user import User, Role
from app.schemas.starter import StarterCreate, StarterUpdate
from app.services import email_service
from app.services.access_service import (
    apply_visibility,
    can_create_starter,
    ensure_can_edit,
    ensure_can_view,
    is_admin,
)
from app.services.audit_service import log_audit
from app.services.blocked_period_service import ensure_not_blocked
from app.services.email_template_service import (
    STARTER_CANCELLED_SUBJECT,
    STARTER_CANCELLED_BODY,
    render_pair,
)
from app.services.settings_service import SettingsSnapshot, load_snapshot
from app.services.task_automation import create_automatic_tasks
from app.utils.datetime_utils import iso_week, now_utc, to_local_naive
from app.utils.text import normalize_text

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("name", "region", "role_title", "via", "notes")


def _normalize_fields(values: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize free-text fields and derive week/year from start_date"""
    for field in _TEXT_FIELDS:
        if field in values:
            values[field] = normalize_text(values[field])
    if "name" in values and not values["name"]:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Starter name cannot be empty"
        )
    if values.get("start_date") is not None:
        start_date = to_local_naive(values["start_date"])
        values["start_date"] = start_date
        values["year"], values["week_number"] = iso_week(start_date)
    return values


def _check_entity_exists(db: Session, entity_id: Optional[int]) -> Optional[Entity]:
    if entity_id is None:
        return None
    entity = db.query(Entity).filter(Entity.id == entity_id).first()
    if not entity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entity with id {entity_id} not found"
        )
    return entity


def _get_starter_or_404(db: Session, starter_id: int) -> Starter:
    starter = db.query(Starter).filter(Starter.id == starter_id).first()
    if not starter:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Starter with id {starter_id} not found"
        )
    return starter


def list_starters(
    db: Session,
    user: User,
    year: Optional[int] = None,
    entity_id: Optional[int] = None,
    search: Optional[str] = None,
    include_cancelled: bool = True,
) -> List[Starter]:
    """Starters visible to the user, ordered by start date"""
    query = apply_visibility(db.query(Starter), user, Starter.entity_id)

    if year is not None:
        query = query.filter(Starter.year == year)
    if entity_id is not None:
        query = query.filter(Starter.entity_id == entity_id)
    if not include_cancelled:
        query = query.filter(Starter.is_cancelled.is_(False))
    search = normalize_text(search)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Starter.name.ilike(pattern),
            Starter.role_title.ilike(pattern),
            Starter.region.ilike(pattern),
        ))

    return query.order_by(Starter.start_date, Starter.id).all()


def get_starter(db: Session, user: User, starter_id: int) -> Starter:
    starter = _get_starter_or_404(db, starter_id)
    ensure_can_view(user, starter.entity_id)
    return starter


def create_starter(
    db: Session,
    user: User,
    data: StarterCreate,
    snapshot: Optional[SettingsSnapshot] = None,
) -> Starter:
    """
    Create a starter and generate its onboarding tasks

    Raises:
        HTTPException: 403 without an editable membership on the entity
            (entity-less starters are admin-only), 404 unknown entity,
            409 when the start day falls in a blocked period
    """
    if not can_create_starter(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted to create starters")
    _check_entity_exists(db, data.entity_id)
    ensure_can_edit(user, data.entity_id)

    values = _normalize_fields(data.model_dump())
    ensure_not_blocked(db, values["entity_id"], values.get("role_title"), values["start_date"].date())
    starter = Starter(**values, is_cancelled=False, created_by=user.id)
    db.add(starter)
    db.commit()
    db.refresh(starter)

    log_audit(
        db=db,
        actor_id=user.id,
        action="CREATE",
        target_type="starter",
        target_id=starter.id,
        meta={"name": starter.name, "entity_id": starter.entity_id, "start_date": starter.start_date}
    )

    create_automatic_tasks(db, starter, snapshot=snapshot)
    db.refresh(starter)
    return starter


def update_starter(db: Session, user: User, starter_id: int, data: StarterUpdate) -> Starter:
    starter = _get_starter_or_404(db, starter_id)
    ensure_can_edit(user, starter.entity_id)

    update_data = data.model_dump(exclude_unset=True)
    if "entity_id" in update_data and update_data["entity_id"] != starter.entity_id:
        _check_entity_exists(db, update_data["entity_id"])
        ensure_can_edit(user, update_data["entity_id"])
    if "start_date" in update_data and update_data["start_date"] is None:
        update_data.pop("start_date")

    update_data = _normalize_fields(update_data)
    if {"start_date", "entity_id", "role_title"} & update_data.keys():
        ensure_not_blocked(
            db,
            update_data.get("entity_id", starter.entity_id),
            update_data.get("role_title", starter.role_title),
            update_data.get("start_date", starter.start_date).date(),
        )
    old_values = {field: getattr(starter, field) for field in update_data}
    for field, value in update_data.items():
        setattr(starter, field, value)
    db.commit()
    db.refresh(starter)

    log_audit(
        db=db,
        actor_id=user.id,
        action="UPDATE",
        target_type="starter",
        target_id=starter.id,
        meta={"old": old_values, "new": update_data}
    )
    return starter


def delete_starter(db: Session, user: User, starter_id: int) -> None:
    """Hard delete (admin only); regular users cancel instead"""
    if not is_admin(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can delete starters; cancel the starter instead"
        )
    starter = _get_starter_or_404(db, starter_id)
    meta = {"name": starter.name, "entity_id": starter.entity_id, "start_date": starter.start_date}
    db.delete(starter)
    db.commit()

    log_audit(
        db=db,
        actor_id=user.id,
        action="DELETE",
        target_type="starter",
        target_id=starter_id,
        meta=meta
    )


def cancellation_recipients(db: Session, starter: Starter) -> List[str]:
    """
    Admins, global viewers, members of the starter's entity and the entity's
    notify addresses; deduplicated case-insensitively, in that order
    """
    addresses: List[str] = []

    privileged = db.query(User).filter(
        User.role.in_([Role.HR_ADMIN.value, Role.GLOBAL_VIEWER.value]),
        User.active.is_(True)
    ).order_by(User.id).all()
    addresses.extend(u.email for u in privileged)

    if starter.entity_id is not None:
        members = db.query(User).join(Membership, Membership.user_id == User.id).filter(
            Membership.entity_id == starter.entity_id,
            User.active.is_(True)
        ).order_by(User.id).all()
        addresses.extend(u.email for u in members)
        if starter.entity is not None:
            addresses.extend(starter.entity.notify_emails or [])

    unique: List[str] = []
    for address in addresses:
        address = (address or "").strip().lower()
        if address and address not in unique:
            unique.append(address)
    return unique


def cancel_starter(
    db: Session,
    user: User,
    starter_id: int,
    reason: Optional[str],
    snapshot: Optional[SettingsSnapshot] = None,
) -> Starter:
    """
    Soft-cancel a starter and notify everyone concerned

    Email failures are logged and never undo the cancellation.

    Raises:
        HTTPException: 403 without edit rights, 400 if already cancelled
    """
    starter = _get_starter_or_404(db, starter_id)
    ensure_can_edit(user, starter.entity_id)
    if starter.is_cancelled:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Starter is already cancelled"
        )

    reason = normalize_text(reason)
    starter.is_cancelled = True
    starter.cancelled_at = now_utc()
    starter.cancelled_by = user.id
    starter.cancel_reason = reason
    db.commit()
    db.refresh(starter)

    entity_name = starter.entity.name if starter.entity else None
    log_audit(
        db=db,
        actor_id=user.id,
        action="CANCEL_STARTER",
        target_type="starter",
        target_id=starter.id,
        meta={"name": starter.name, "entity_name": entity_name, "cancel_reason": reason}
    )

    recipients = cancellation_recipients(db, starter)
    if recipients:
        subject, html = render_pair(STARTER_CANCELLED_SUBJECT, STARTER_CANCELLED_BODY, {
            "starter_name": starter.name,
            "role_title": starter.role_title,
            "entity_name": entity_name,
            "start_date": starter.start_date.strftime("%d/%m/%Y"),
            "reason": reason,
            "cancelled_by": user.name or user.email,
            "app_url": (snapshot or load_snapshot(db)).app_url(),
        })
        if email_service.send_email_safely(recipients, subject, html):
            log_audit(
                db=db,
                actor_id=user.id,
                action="SEND_MAIL",
                target_type="starter",
                target_id=starter.id,
                meta={"kind": "cancellation", "recipient_count": len(recipients)}
            )
    return starter
