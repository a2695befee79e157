"""
Task assignment (responsibility) endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user, require_admin
from app.models.task import TaskType
from app.models.user import User
from app.schemas.task import TaskAssignmentSet, TaskAssignmentOut, ResponsibilityOut
from app.services import task_assignment_service

router = APIRouter()


@router.get("", response_model=List[TaskAssignmentOut])
async def list_assignments_endpoint(
    entity_id: Optional[int] = None,
    task_type: Optional[TaskType] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return task_assignment_service.list_assignments(db, entity_id=entity_id, task_type=task_type)


@router.put("", response_model=TaskAssignmentOut)
async def set_assignment_endpoint(
    data: TaskAssignmentSet,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Set the responsible user for (entity or global, task type); replaces an existing assignee"""
    return task_assignment_service.set_assignment(db, data, current_user.id)


@router.delete("/{assignment_id}", status_code=204)
async def delete_assignment_endpoint(
    assignment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    task_assignment_service.delete_assignment(db, assignment_id, current_user.id)
    return None


@router.get("/check-responsibility", response_model=ResponsibilityOut)
async def check_responsibility_endpoint(
    task_type: TaskType,
    entity_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Is the current user responsible for this task type (entity-specific or global)?"""
    return ResponsibilityOut(
        user_id=current_user.id,
        entity_id=entity_id,
        task_type=task_type,
        responsible=task_assignment_service.is_responsible(db, current_user.id, entity_id, task_type),
    )
