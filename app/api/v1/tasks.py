"""
Task endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user
from app.models.task import TaskStatus, TaskType
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate, TaskComplete, TaskOut
from app.services import task_service

router = APIRouter()


@router.get("", response_model=List[TaskOut])
async def list_tasks_endpoint(
    status: Optional[TaskStatus] = Query(None),
    assigned_to_me: bool = False,
    starter_id: Optional[int] = None,
    entity_id: Optional[int] = None,
    type: Optional[TaskType] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Tasks assigned to the current user or belonging to entities they can see"""
    return task_service.list_tasks(
        db,
        current_user,
        status_filter=status,
        assigned_to_me=assigned_to_me,
        starter_id=starter_id,
        entity_id=entity_id,
        task_type=type,
    )


@router.get("/{task_id}", response_model=TaskOut)
async def get_task_endpoint(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.get_task(db, current_user, task_id)


@router.post("", response_model=TaskOut, status_code=201)
async def create_task_endpoint(
    data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a task manually; unassigned tasks go through the assignment resolver"""
    return task_service.create_task(db, current_user, data)


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task_endpoint(
    task_id: int,
    data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return task_service.update_task(db, current_user, task_id, data)


@router.post("/{task_id}/complete", response_model=TaskOut)
async def complete_task_endpoint(
    task_id: int,
    data: TaskComplete,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Complete a task (assignee or admin)"""
    return task_service.complete_task(db, current_user, task_id, data.completion_notes)


@router.delete("/{task_id}", status_code=204)
async def delete_task_endpoint(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a task (admin or its creator)"""
    task_service.delete_task(db, current_user, task_id)
    return None
