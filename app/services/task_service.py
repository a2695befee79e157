"""
Task service - task listing, manual tasks, completion and task templates
"""
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import or_, false
from sqlalchemy.orm import Session

from app.models.starter import Starter
from app.models.task import Task, TaskTemplate, TaskStatus, TaskType
from app.models.user import User
from app.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskTemplateCreate,
    TaskTemplateUpdate,
)
from app.services.access_service import (
    Capability,
    can_edit_entity,
    can_view_entity,
    has_capability,
    is_admin,
    visible_entity_ids,
)
from app.services.audit_service import log_audit
from app.services.job_role_service import check_titles_exist
from app.services.notification_service import create_notification
from app.services.task_assignment_service import resolve_assignee
from app.utils.datetime_utils import now_utc, to_local_naive
from app.utils.enums import enum_to_str

logger = logging.getLogger(__name__)


def _get_task_or_404(db: Session, task_id: int) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task with id {task_id} not found"
        )
    return task


def _can_view_task(user: User, task: Task) -> bool:
    return is_admin(user) or task.assigned_to_id == user.id or can_view_entity(user, task.entity_id)


def _can_update_task(user: User, task: Task) -> bool:
    return is_admin(user) or task.assigned_to_id == user.id or can_edit_entity(user, task.entity_id)


def list_tasks(
    db: Session,
    user: User,
    status_filter: Optional[TaskStatus] = None,
    assigned_to_me: bool = False,
    starter_id: Optional[int] = None,
    entity_id: Optional[int] = None,
    task_type: Optional[TaskType] = None,
) -> List[Task]:
    """
    Tasks visible to the user

    Admins see everything; everyone else sees tasks assigned to them plus tasks
    whose entity they can see. Entity-less tasks only show up for their assignee.
    """
    query = db.query(Task)

    if not is_admin(user):
        if has_capability(user, Capability.VIEW_ALL):
            entity_clause = Task.entity_id.isnot(None)
        else:
            allowed = visible_entity_ids(user) or set()
            entity_clause = Task.entity_id.in_(allowed) if allowed else false()
        query = query.filter(or_(Task.assigned_to_id == user.id, entity_clause))

    if status_filter is not None:
        query = query.filter(Task.status == enum_to_str(status_filter))
    if assigned_to_me:
        query = query.filter(Task.assigned_to_id == user.id)
    if starter_id is not None:
        query = query.filter(Task.starter_id == starter_id)
    if entity_id is not None:
        query = query.filter(Task.entity_id == entity_id)
    if task_type is not None:
        query = query.filter(Task.type == enum_to_str(task_type))

    return query.order_by(Task.due_date.is_(None), Task.due_date, Task.id).all()


def get_task(db: Session, user: User, task_id: int) -> Task:
    task = _get_task_or_404(db, task_id)
    if not _can_view_task(user, task):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted to view this task")
    return task


def create_task(db: Session, user: User, data: TaskCreate) -> Task:
    """
    Create a task by hand

    The entity defaults to the starter's entity. Non-admins need an editable
    membership on it; entity-less tasks are admin-only.
    """
    entity_id = data.entity_id
    if data.starter_id is not None:
        starter = db.query(Starter).filter(Starter.id == data.starter_id).first()
        if not starter:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Starter with id {data.starter_id} not found"
            )
        if entity_id is None:
            entity_id = starter.entity_id
        elif starter.entity_id is not None and starter.entity_id != entity_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Task entity must match the starter's entity"
            )

    if not can_edit_entity(user, entity_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted to create tasks for this entity")

    assigned_to_id = data.assigned_to_id
    if assigned_to_id is None:
        assigned_to_id = resolve_assignee(db, entity_id, data.type)
    elif not db.query(User).filter(User.id == assigned_to_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {assigned_to_id} not found"
        )

    task = Task(
        type=enum_to_str(data.type),
        title=data.title.strip(),
        description=data.description,
        status=TaskStatus.PENDING.value,
        priority=enum_to_str(data.priority),
        starter_id=data.starter_id,
        entity_id=entity_id,
        assigned_to_id=assigned_to_id,
        assigned_at=now_utc() if assigned_to_id else None,
        due_date=to_local_naive(data.due_date),
        created_by_id=user.id,
    )
    db.add(task)
    db.flush()

    if assigned_to_id and assigned_to_id != user.id:
        create_notification(
            db,
            user_id=assigned_to_id,
            type="TASK_ASSIGNED",
            title="Nieuwe taak toegewezen",
            message=f'Je hebt een nieuwe taak: "{task.title}"',
            task_id=task.id,
            starter_id=task.starter_id,
            link_url=f"/taken/{task.id}",
        )
    db.commit()
    db.refresh(task)

    log_audit(
        db=db,
        actor_id=user.id,
        action="CREATE",
        target_type="task",
        target_id=task.id,
        meta={"title": task.title, "entity_id": entity_id, "assigned_to_id": assigned_to_id}
    )
    return task


def update_task(db: Session, user: User, task_id: int, data: TaskUpdate) -> Task:
    """Admin, assignee or an editor of the task's entity"""
    task = _get_task_or_404(db, task_id)
    if not _can_update_task(user, task):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted to modify this task")

    update_data = data.model_dump(exclude_unset=True)
    old_values = {field: getattr(task, field) for field in update_data}

    if "assigned_to_id" in update_data and update_data["assigned_to_id"] != task.assigned_to_id:
        new_assignee = update_data["assigned_to_id"]
        if new_assignee is not None:
            if not db.query(User).filter(User.id == new_assignee).first():
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"User with id {new_assignee} not found"
                )
            create_notification(
                db,
                user_id=new_assignee,
                type="TASK_ASSIGNED",
                title="Taak toegewezen",
                message=f'De taak "{task.title}" is aan jou toegewezen',
                task_id=task.id,
                starter_id=task.starter_id,
                link_url=f"/taken/{task.id}",
            )
        task.assigned_at = now_utc() if new_assignee else None

    for field, value in update_data.items():
        if field in ("status", "priority"):
            if value is None:
                continue
            value = enum_to_str(value)
        elif field == "due_date":
            value = to_local_naive(value)
        elif field == "title":
            if value is None:
                continue
            value = value.strip()
        setattr(task, field, value)

    if update_data.get("status") == TaskStatus.COMPLETED and task.completed_at is None:
        task.completed_at = now_utc()
        task.completed_by_id = user.id

    db.commit()
    db.refresh(task)

    log_audit(
        db=db,
        actor_id=user.id,
        action="UPDATE",
        target_type="task",
        target_id=task.id,
        meta={"old": old_values, "new": update_data}
    )
    return task


def complete_task(db: Session, user: User, task_id: int, completion_notes: Optional[str]) -> Task:
    """
    Mark a task completed (assignee or admin only) and notify its creator

    Raises:
        HTTPException: 403 for anyone else, 400 when already completed/cancelled
    """
    task = _get_task_or_404(db, task_id)
    if not (is_admin(user) or task.assigned_to_id == user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the assignee or an admin can complete this task"
        )
    if task.status in (TaskStatus.COMPLETED.value, TaskStatus.CANCELLED.value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Task is already {task.status.lower()}"
        )

    task.status = TaskStatus.COMPLETED.value
    task.completed_at = now_utc()
    task.completed_by_id = user.id
    task.completion_notes = completion_notes

    if task.created_by_id and task.created_by_id != user.id:
        create_notification(
            db,
            user_id=task.created_by_id,
            type="TASK_COMPLETED",
            title="Taak voltooid",
            message=f'{user.name or user.email} heeft "{task.title}" voltooid',
            task_id=task.id,
            starter_id=task.starter_id,
            link_url=f"/taken/{task.id}",
        )
    db.commit()
    db.refresh(task)

    log_audit(
        db=db,
        actor_id=user.id,
        action="COMPLETE",
        target_type="task",
        target_id=task.id,
        meta={"completion_notes": completion_notes}
    )
    return task


def delete_task(db: Session, user: User, task_id: int) -> None:
    """
    Raises:
        HTTPException: 403 unless the user is an admin or created the task
    """
    task = _get_task_or_404(db, task_id)
    if not (is_admin(user) or (task.created_by_id is not None and task.created_by_id == user.id)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins or the task creator can delete tasks"
        )

    meta = {"title": task.title, "starter_id": task.starter_id}
    db.delete(task)
    db.commit()

    log_audit(
        db=db,
        actor_id=user.id,
        action="TASK_DELETED",
        target_type="task",
        target_id=task_id,
        meta=meta
    )


def list_templates(db: Session) -> List[TaskTemplate]:
    return db.query(TaskTemplate).order_by(TaskTemplate.type, TaskTemplate.id).all()


def create_template(db: Session, data: TaskTemplateCreate, actor_id: int) -> TaskTemplate:
    check_titles_exist(db, data.for_job_role_titles)
    template = TaskTemplate(
        type=enum_to_str(data.type),
        title=data.title.strip(),
        description=data.description,
        priority=enum_to_str(data.priority),
        days_until_due=data.days_until_due,
        is_active=data.is_active,
        auto_assign=data.auto_assign,
        for_entity_ids=list(data.for_entity_ids),
        for_job_role_titles=list(data.for_job_role_titles),
    )
    db.add(template)
    db.commit()
    db.refresh(template)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="CREATE",
        target_type="task_template",
        target_id=template.id,
        meta={"type": template.type, "title": template.title}
    )
    return template


def update_template(db: Session, template_id: int, data: TaskTemplateUpdate, actor_id: int) -> TaskTemplate:
    template = db.query(TaskTemplate).filter(TaskTemplate.id == template_id).first()
    if not template:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task template with id {template_id} not found"
        )

    update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if "for_job_role_titles" in update_data:
        check_titles_exist(db, update_data["for_job_role_titles"])
    for field, value in update_data.items():
        if field in ("type", "priority"):
            value = enum_to_str(value)
        elif field in ("for_entity_ids", "for_job_role_titles"):
            value = list(value)
        setattr(template, field, value)
    db.commit()
    db.refresh(template)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE",
        target_type="task_template",
        target_id=template.id,
        meta=update_data
    )
    return template
