"""
Entity service - business logic for organizational units
"""
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.blocked_period import BlockedPeriod
from app.models.entity import Entity
from app.models.job_role import JobRole
from app.models.membership import Membership
from app.models.starter import Starter
from app.models.task import Task, TaskAssignment
from app.models.user import User
from app.schemas.entity import EntityCreate, EntityUpdate
from app.services.access_service import apply_visibility, is_admin
from app.services.audit_service import log_audit


def _check_unique_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Entity).filter(func.lower(Entity.name) == func.lower(name.strip()))
    if exclude_id is not None:
        query = query.filter(Entity.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Entity with name '{name}' already exists"
        )


def get_entity(db: Session, entity_id: int) -> Optional[Entity]:
    return db.query(Entity).filter(Entity.id == entity_id).first()


def get_entity_or_404(db: Session, entity_id: int) -> Entity:
    entity = get_entity(db, entity_id)
    if not entity:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entity with id {entity_id} not found"
        )
    return entity


def list_entities(db: Session, user: User, include_inactive: bool = False) -> List[Entity]:
    """
    Entities visible to the user

    Inactive entities are only listed for admins who ask for them.
    """
    query = apply_visibility(db.query(Entity), user, Entity.id)
    if not (include_inactive and is_admin(user)):
        query = query.filter(Entity.is_active.is_(True))
    return query.order_by(Entity.name).all()


def create_entity(db: Session, entity_data: EntityCreate, actor_id: int) -> Entity:
    _check_unique_name(db, entity_data.name)

    entity = Entity(
        name=entity_data.name.strip(),
        color_hex=entity_data.color_hex,
        notify_emails=list(entity_data.notify_emails),
        is_active=entity_data.is_active,
    )
    db.add(entity)
    db.commit()
    db.refresh(entity)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="CREATE",
        target_type="entity",
        target_id=entity.id,
        meta={"name": entity.name, "color_hex": entity.color_hex}
    )
    return entity


def update_entity(db: Session, entity_id: int, entity_data: EntityUpdate, actor_id: int) -> Entity:
    entity = get_entity_or_404(db, entity_id)

    update_data = entity_data.model_dump(exclude_unset=True)
    if update_data.get("name") is not None:
        _check_unique_name(db, update_data["name"], exclude_id=entity_id)
        update_data["name"] = update_data["name"].strip()

    old_values = {
        "name": entity.name,
        "color_hex": entity.color_hex,
        "notify_emails": list(entity.notify_emails or []),
        "is_active": entity.is_active,
    }
    for field, value in update_data.items():
        if value is None:
            continue
        setattr(entity, field, list(value) if field == "notify_emails" else value)
    db.commit()
    db.refresh(entity)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE",
        target_type="entity",
        target_id=entity.id,
        meta={"old": old_values, "new": update_data}
    )
    return entity


def delete_entity(db: Session, entity_id: int, actor_id: int) -> None:
    """
    Delete an unreferenced entity

    Raises:
        HTTPException: 409 with blocking reference counts when still in use
    """
    entity = get_entity_or_404(db, entity_id)

    blocking = {
        "starters": db.query(Starter).filter(Starter.entity_id == entity_id).count(),
        "tasks": db.query(Task).filter(Task.entity_id == entity_id).count(),
        "memberships": db.query(Membership).filter(Membership.entity_id == entity_id).count(),
        "task_assignments": db.query(TaskAssignment).filter(TaskAssignment.entity_id == entity_id).count(),
        "job_roles": db.query(JobRole).filter(JobRole.entity_id == entity_id).count(),
        "blocked_periods": db.query(BlockedPeriod).filter(BlockedPeriod.entity_id == entity_id).count(),
    }
    if any(blocking.values()):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Entity is still referenced", "blocking": blocking}
        )

    name = entity.name
    db.delete(entity)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="DELETE",
        target_type="entity",
        target_id=entity_id,
        meta={"name": name}
    )
