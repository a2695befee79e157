"""
Task template administration
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, require_admin
from app.models.user import User
from app.schemas.task import TaskTemplateCreate, TaskTemplateUpdate, TaskTemplateOut
from app.services import task_service

router = APIRouter()


@router.get("", response_model=List[TaskTemplateOut])
async def list_task_templates_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return task_service.list_templates(db)


@router.post("", response_model=TaskTemplateOut, status_code=201)
async def create_task_template_endpoint(
    data: TaskTemplateCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return task_service.create_template(db, data, current_user.id)


@router.patch("/{template_id}", response_model=TaskTemplateOut)
async def update_task_template_endpoint(
    template_id: int,
    data: TaskTemplateUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return task_service.update_template(db, template_id, data, current_user.id)
