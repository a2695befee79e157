"""
Task automation: generate onboarding tasks from templates when a starter is created
"""
import logging
import re
from datetime import timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.starter import Starter
from app.models.task import Task, TaskTemplate, TaskStatus, NotifyChannel
from app.models.user import User
from app.services import email_service
from app.services.audit_service import log_audit
from app.services.email_template_service import TASK_ASSIGNED_SUBJECT, TASK_ASSIGNED_BODY, render_pair
from app.services.notification_service import create_notification
from app.services.settings_service import SettingsSnapshot, load_snapshot
from app.services.task_assignment_service import resolve_assignment
from app.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")
_UNKNOWN = "Onbekend"


def render_placeholders(text: str, variables: Dict[str, str]) -> str:
    """Replace {{name}} placeholders; unknown placeholders are left as-is"""
    return _PLACEHOLDER.sub(lambda m: variables.get(m.group(1), m.group(0)), text)


def template_applies(template: TaskTemplate, starter: Starter) -> bool:
    """
    Entity and job-role filters of a template

    An empty filter matches everything, and a filter is ignored when the
    starter has no value for it.
    """
    entity_ids = template.for_entity_ids or []
    if entity_ids and starter.entity_id is not None and starter.entity_id not in entity_ids:
        return False
    role_titles = template.for_job_role_titles or []
    if role_titles and starter.role_title and starter.role_title not in role_titles:
        return False
    return True


def starter_variables(starter: Starter) -> Dict[str, str]:
    return {
        "starterName": starter.name,
        "entityName": starter.entity.name if starter.entity else _UNKNOWN,
        "roleTitle": starter.role_title or _UNKNOWN,
        "startDate": starter.start_date.strftime("%d/%m/%Y"),
    }


def _send_assignment_email(assignee: User, task: Task, starter: Starter, app_url: str) -> None:
    subject, html = render_pair(TASK_ASSIGNED_SUBJECT, TASK_ASSIGNED_BODY, {
        "assignee_name": assignee.name or assignee.email,
        "task_title": task.title,
        "task_id": task.id,
        "priority": task.priority,
        "due_date": task.due_date.strftime("%d/%m/%Y") if task.due_date else "Geen deadline",
        "starter_name": starter.name,
        "entity_name": starter.entity.name if starter.entity else _UNKNOWN,
        "start_date": starter.start_date.strftime("%d/%m/%Y"),
        "app_url": app_url,
    })
    email_service.send_email_safely(assignee.email, subject, html)


def create_automatic_tasks(
    db: Session,
    starter: Starter,
    snapshot: Optional[SettingsSnapshot] = None,
) -> List[Task]:
    """
    Create tasks for every active auto-assign template matching the starter

    Each task is assigned through the resolver; the assignee gets an in-app
    notification and, when the assignment's channel asks for it, an email.
    Email failures never undo the created tasks.
    """
    templates = db.query(TaskTemplate).filter(
        TaskTemplate.is_active.is_(True),
        TaskTemplate.auto_assign.is_(True)
    ).order_by(TaskTemplate.id).all()

    if not templates:
        logger.debug("No active task templates found")
        return []

    variables = starter_variables(starter)
    created = []
    for template in templates:
        if not template_applies(template, starter):
            continue

        assignment = resolve_assignment(db, starter.entity_id, template.type)
        assigned_to_id = assignment.assigned_to_id if assignment else None
        title = render_placeholders(template.title, variables)

        task = Task(
            type=template.type,
            title=title,
            description=render_placeholders(template.description, variables) if template.description else None,
            status=TaskStatus.PENDING.value,
            priority=template.priority,
            starter_id=starter.id,
            entity_id=starter.entity_id,
            template_id=template.id,
            assigned_to_id=assigned_to_id,
            assigned_at=now_utc() if assigned_to_id else None,
            due_date=starter.start_date + timedelta(days=template.days_until_due or 0),
            created_by_id=starter.created_by,
        )
        db.add(task)
        db.flush()

        if assigned_to_id:
            create_notification(
                db,
                user_id=assigned_to_id,
                type="TASK_ASSIGNED",
                title="Nieuwe taak toegewezen",
                message=f'Je hebt een nieuwe taak: "{title}" voor starter {starter.name}',
                task_id=task.id,
                starter_id=starter.id,
                link_url=f"/taken/{task.id}",
            )
        created.append((task, assignment))

    db.commit()

    app_url = (snapshot or load_snapshot(db)).app_url()
    tasks = []
    for task, assignment in created:
        db.refresh(task)
        tasks.append(task)
        log_audit(
            db=db,
            actor_id=starter.created_by,
            action="CREATE",
            target_type="task",
            target_id=task.id,
            meta={"starter_id": starter.id, "template_id": task.template_id, "assigned_to_id": task.assigned_to_id, "automatic": True}
        )
        if assignment and assignment.notify_channel in (NotifyChannel.EMAIL.value, NotifyChannel.BOTH.value):
            assignee = db.query(User).filter(User.id == task.assigned_to_id).first()
            if assignee:
                _send_assignment_email(assignee, task, starter, app_url)

    logger.info(f"Created {len(tasks)} automatic task(s) for starter {starter.id}")
    return tasks
