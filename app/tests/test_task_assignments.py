"""
Tests for responsibility assignments and automatic task generation
"""
from fastapi import status
from app.models.audit_log import AuditLog
from app.models.notification import Notification
from app.models.task import Task, TaskAssignment, TaskTemplate, TaskType, NotifyChannel
from app.models.user import Role
from app.schemas.task import TaskAssignmentSet
from app.services.task_assignment_service import (
    is_responsible,
    resolve_assignee,
    set_assignment,
)
from app.services.task_automation import render_placeholders


def _assign(db, admin, entity, task_type, user, channel=NotifyChannel.IN_APP):
    return set_assignment(
        db,
        TaskAssignmentSet(
            entity_id=entity.id if entity else None,
            task_type=task_type,
            assigned_to_id=user.id,
            notify_channel=channel,
        ),
        admin.id,
    )


def test_specific_assignment_beats_global(db, admin, user_factory, entity_a, entity_b):
    it_global = user_factory("it-global@example.com", Role.ENTITY_EDITOR)
    it_acme = user_factory("it-acme@example.com", Role.ENTITY_EDITOR)
    _assign(db, admin, None, TaskType.IT_SETUP, it_global)
    _assign(db, admin, entity_a, TaskType.IT_SETUP, it_acme)

    assert resolve_assignee(db, entity_a.id, TaskType.IT_SETUP) == it_acme.id
    assert resolve_assignee(db, entity_b.id, TaskType.IT_SETUP) == it_global.id
    assert resolve_assignee(db, None, TaskType.IT_SETUP) == it_global.id
    assert resolve_assignee(db, entity_a.id, TaskType.FACILITIES) is None


def test_set_assignment_replaces_existing_row(db, admin, user_factory, entity_a):
    first = user_factory("first@example.com")
    second = user_factory("second@example.com")
    _assign(db, admin, entity_a, TaskType.HR_ADMIN, first)
    _assign(db, admin, entity_a, TaskType.HR_ADMIN, second)
    _assign(db, admin, None, TaskType.HR_ADMIN, first)
    _assign(db, admin, None, TaskType.HR_ADMIN, second)

    assert db.query(TaskAssignment).count() == 2
    assert resolve_assignee(db, entity_a.id, TaskType.HR_ADMIN) == second.id
    audit = db.query(AuditLog).filter(AuditLog.action == "SET_ASSIGNMENT").order_by(AuditLog.id).all()
    assert audit[1].meta_json["previous_assignee"] == first.id


def test_is_responsible_checks_specific_and_global(db, admin, user_factory, entity_a, entity_b):
    facilities = user_factory("facilities@example.com")
    _assign(db, admin, None, TaskType.FACILITIES, facilities)

    assert is_responsible(db, facilities.id, entity_a.id, TaskType.FACILITIES)
    assert is_responsible(db, facilities.id, None, TaskType.FACILITIES)
    assert not is_responsible(db, admin.id, entity_b.id, TaskType.FACILITIES)


def test_assignment_endpoints(client, admin_headers, user_factory, entity_a, auth_headers):
    it_user = user_factory("it@example.com", Role.ENTITY_EDITOR)

    response = client.put(
        "/api/v1/task-assignments",
        json={"entity_id": entity_a.id, "task_type": "IT_SETUP", "assigned_to_id": it_user.id, "notify_channel": "BOTH"},
        headers=admin_headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["notify_channel"] == "BOTH"

    response = client.get(
        "/api/v1/task-assignments/check-responsibility",
        params={"task_type": "IT_SETUP", "entity_id": entity_a.id},
        headers=auth_headers(it_user)
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["responsible"] is True

    response = client.get("/api/v1/task-assignments", headers=auth_headers(it_user))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_assignment_to_inactive_user_rejected(client, admin_headers, user_factory):
    gone = user_factory("gone@example.com", active=False)

    response = client.put(
        "/api/v1/task-assignments",
        json={"task_type": "IT_SETUP", "assigned_to_id": gone.id},
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_assignment_unknown_entity_404(client, admin, admin_headers):
    response = client.put(
        "/api/v1/task-assignments",
        json={"entity_id": 4242, "task_type": "IT_SETUP", "assigned_to_id": admin.id},
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_render_placeholders_leaves_unknown_names():
    text = render_placeholders("Laptop voor {{ starterName }} ({{unknown}})", {"starterName": "Alice"})

    assert text == "Laptop voor Alice ({{unknown}})"


def test_new_starter_generates_assigned_tasks(client, db, admin, editor, entity_a, entity_b, user_factory, auth_headers, sent_emails):
    it_user = user_factory("it@example.com", Role.ENTITY_EDITOR)
    _assign(db, admin, None, TaskType.IT_SETUP, it_user, NotifyChannel.EMAIL)
    db.add_all([
        TaskTemplate(type="IT_SETUP", title="Laptop voor {{starterName}}", days_until_due=-3,
                     for_entity_ids=[], for_job_role_titles=[]),
        TaskTemplate(type="FACILITIES", title="Badge", for_entity_ids=[entity_b.id], for_job_role_titles=[]),
        TaskTemplate(type="HR_ADMIN", title="Contract", is_active=False, for_entity_ids=[], for_job_role_titles=[]),
    ])
    db.commit()

    response = client.post(
        "/api/v1/starters",
        json={"name": "Alice Peeters", "entity_id": entity_a.id, "role_title": "Developer", "start_date": "2026-11-02T09:00:00"},
        headers=auth_headers(editor)
    )
    assert response.status_code == status.HTTP_201_CREATED
    starter_id = response.json()["id"]

    tasks = db.query(Task).filter(Task.starter_id == starter_id).all()
    assert [t.title for t in tasks] == ["Laptop voor Alice Peeters"]
    task = tasks[0]
    assert task.assigned_to_id == it_user.id
    assert task.entity_id == entity_a.id
    assert task.due_date.day == 30 and task.due_date.month == 10

    notification = db.query(Notification).filter(Notification.user_id == it_user.id).one()
    assert notification.task_id == task.id
    assert len(sent_emails) == 1
    assert sent_emails[0]["to"] == "it@example.com"


def test_unassigned_template_creates_unassigned_task(client, db, editor, entity_a, auth_headers):
    db.add(TaskTemplate(type="MANAGER_ACTION", title="Welkomstwoord", for_entity_ids=[], for_job_role_titles=["Sales"]))
    db.commit()

    response = client.post(
        "/api/v1/starters",
        json={"name": "Bram", "entity_id": entity_a.id, "start_date": "2026-11-02T09:00:00"},
        headers=auth_headers(editor)
    )

    assert response.status_code == status.HTTP_201_CREATED
    task = db.query(Task).one()
    assert task.assigned_to_id is None
    assert db.query(Notification).count() == 0
