"""
Task-assignment resolver: (entity, task type) -> responsible user

Resolution order is the exact (entity, type) row, then the global (NULL, type)
row, else unassigned.
"""
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.entity import Entity
from app.models.task import TaskAssignment, TaskType, NotifyChannel
from app.models.user import User
from app.schemas.task import TaskAssignmentSet
from app.services.audit_service import log_audit
from app.utils.enums import enum_to_str


def _find(db: Session, entity_id: Optional[int], task_type) -> Optional[TaskAssignment]:
    """Exact lookup on the conflict target; NULL entity is compared with IS NULL"""
    query = db.query(TaskAssignment).filter(TaskAssignment.task_type == enum_to_str(task_type))
    if entity_id is None:
        query = query.filter(TaskAssignment.entity_id.is_(None))
    else:
        query = query.filter(TaskAssignment.entity_id == entity_id)
    return query.first()


def resolve_assignment(db: Session, entity_id: Optional[int], task_type) -> Optional[TaskAssignment]:
    """Entity-specific assignment first, then the global fallback"""
    if entity_id is not None:
        specific = _find(db, entity_id, task_type)
        if specific:
            return specific
    return _find(db, None, task_type)


def resolve_assignee(db: Session, entity_id: Optional[int], task_type) -> Optional[int]:
    """User id responsible for the task type in this entity, or None (unassigned)"""
    assignment = resolve_assignment(db, entity_id, task_type)
    return assignment.assigned_to_id if assignment else None


def is_responsible(db: Session, user_id: int, entity_id: Optional[int], task_type) -> bool:
    """True if the entity-specific or the global assignment names the user"""
    candidates = [_find(db, None, task_type)]
    if entity_id is not None:
        candidates.append(_find(db, entity_id, task_type))
    return any(a is not None and a.assigned_to_id == user_id for a in candidates)


def list_assignments(
    db: Session,
    entity_id: Optional[int] = None,
    task_type: Optional[TaskType] = None
) -> List[TaskAssignment]:
    query = db.query(TaskAssignment)
    if entity_id is not None:
        query = query.filter(TaskAssignment.entity_id == entity_id)
    if task_type is not None:
        query = query.filter(TaskAssignment.task_type == enum_to_str(task_type))
    return query.order_by(TaskAssignment.task_type, TaskAssignment.id).all()


def set_assignment(db: Session, data: TaskAssignmentSet, actor_id: int) -> TaskAssignment:
    """
    Set the responsible user for (entity or NULL, task type)

    An existing row for the same conflict target gets its assignee replaced.

    Raises:
        HTTPException: 404 unknown entity or user, 400 inactive user
    """
    if data.entity_id is not None and not db.query(Entity).filter(Entity.id == data.entity_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entity with id {data.entity_id} not found"
        )
    assignee = db.query(User).filter(User.id == data.assigned_to_id).first()
    if not assignee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {data.assigned_to_id} not found"
        )
    if not assignee.active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot assign tasks to an inactive user"
        )

    assignment = _find(db, data.entity_id, data.task_type)
    previous_assignee = assignment.assigned_to_id if assignment else None
    if assignment is None:
        assignment = TaskAssignment(
            entity_id=data.entity_id,
            task_type=enum_to_str(data.task_type),
        )
        db.add(assignment)
    assignment.assigned_to_id = data.assigned_to_id
    assignment.notify_channel = enum_to_str(data.notify_channel or NotifyChannel.IN_APP)
    db.commit()
    db.refresh(assignment)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="SET_ASSIGNMENT",
        target_type="task_assignment",
        target_id=assignment.id,
        meta={
            "entity_id": data.entity_id,
            "task_type": enum_to_str(data.task_type),
            "previous_assignee": previous_assignee,
            "assigned_to_id": data.assigned_to_id,
            "notify_channel": assignment.notify_channel,
        }
    )
    return assignment


def delete_assignment(db: Session, assignment_id: int, actor_id: int) -> None:
    assignment = db.query(TaskAssignment).filter(TaskAssignment.id == assignment_id).first()
    if not assignment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task assignment with id {assignment_id} not found"
        )
    meta = {
        "entity_id": assignment.entity_id,
        "task_type": assignment.task_type,
        "assigned_to_id": assignment.assigned_to_id,
    }
    db.delete(assignment)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="DELETE_ASSIGNMENT",
        target_type="task_assignment",
        target_id=assignment_id,
        meta=meta
    )
