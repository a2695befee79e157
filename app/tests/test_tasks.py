"""
Tests for manual tasks, task visibility and completion
"""
import pytest
from fastapi import status
from app.models.audit_log import AuditLog
from app.models.notification import Notification
from app.models.task import Task
from app.models.user import Role


@pytest.fixture
def it_user(user_factory):
    return user_factory("it@example.com", Role.ENTITY_VIEWER)


def _create_task(client, headers, **overrides):
    payload = {"type": "IT_SETUP", "title": "Laptop klaarzetten"}
    payload.update(overrides)
    return client.post("/api/v1/tasks", json=payload, headers=headers)


def test_editor_creates_task_for_own_entity(client, db, editor, entity_a, it_user, auth_headers):
    response = _create_task(client, auth_headers(editor), entity_id=entity_a.id, assigned_to_id=it_user.id)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "PENDING"
    assert data["assigned_to_id"] == it_user.id
    assert data["assigned_at"] is not None
    assert db.query(Notification).filter(Notification.user_id == it_user.id).count() == 1


def test_task_entity_defaults_to_starter_entity(client, admin_headers, entity_a):
    starter = client.post(
        "/api/v1/starters",
        json={"name": "Alice", "entity_id": entity_a.id, "start_date": "2026-11-02T09:00:00"},
        headers=admin_headers
    ).json()

    response = _create_task(client, admin_headers, starter_id=starter["id"])

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["entity_id"] == entity_a.id


def test_viewer_cannot_create_task(client, viewer, entity_a, auth_headers):
    response = _create_task(client, auth_headers(viewer), entity_id=entity_a.id)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_unassigned_manual_task_uses_resolver(client, admin, admin_headers, entity_a, it_user):
    client.put(
        "/api/v1/task-assignments",
        json={"task_type": "IT_SETUP", "assigned_to_id": it_user.id},
        headers=admin_headers
    )

    response = _create_task(client, admin_headers, entity_id=entity_a.id)

    assert response.json()["assigned_to_id"] == it_user.id


def test_assignee_sees_task_outside_own_entities(client, admin_headers, entity_b, it_user, auth_headers):
    task_id = _create_task(client, admin_headers, entity_id=entity_b.id, assigned_to_id=it_user.id).json()["id"]

    mine = client.get("/api/v1/tasks", params={"assigned_to_me": True}, headers=auth_headers(it_user))
    assert [t["id"] for t in mine.json()] == [task_id]
    assert client.get(f"/api/v1/tasks/{task_id}", headers=auth_headers(it_user)).status_code == 200


def test_task_list_respects_entity_visibility(client, admin_headers, viewer, entity_a, entity_b, auth_headers):
    _create_task(client, admin_headers, entity_id=entity_a.id, title="Acme task")
    _create_task(client, admin_headers, entity_id=entity_b.id, title="Beta task")

    response = client.get("/api/v1/tasks", headers=auth_headers(viewer))

    assert [t["title"] for t in response.json()] == ["Acme task"]


def test_only_assignee_or_admin_completes(client, db, admin, admin_headers, editor, entity_a, it_user, auth_headers):
    task_id = _create_task(client, admin_headers, entity_id=entity_a.id, assigned_to_id=it_user.id).json()["id"]

    response = client.post(f"/api/v1/tasks/{task_id}/complete", json={}, headers=auth_headers(editor))
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = client.post(
        f"/api/v1/tasks/{task_id}/complete",
        json={"completion_notes": "Laptop geleverd"},
        headers=auth_headers(it_user)
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "COMPLETED"
    assert data["completed_by_id"] == it_user.id
    assert data["completion_notes"] == "Laptop geleverd"

    # The creator hears about it
    notification = db.query(Notification).filter(Notification.user_id == admin.id).one()
    assert notification.type == "TASK_COMPLETED"

    response = client.post(f"/api/v1/tasks/{task_id}/complete", json={}, headers=admin_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_reassignment_notifies_new_assignee(client, db, admin_headers, entity_a, it_user, user_factory):
    other = user_factory("other@example.com", Role.ENTITY_VIEWER)
    task_id = _create_task(client, admin_headers, entity_id=entity_a.id, assigned_to_id=it_user.id).json()["id"]

    response = client.patch(f"/api/v1/tasks/{task_id}", json={"assigned_to_id": other.id}, headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["assigned_to_id"] == other.id
    assert db.query(Notification).filter(Notification.user_id == other.id).count() == 1


def test_task_template_admin(client, admin_headers, editor, auth_headers):
    response = client.post(
        "/api/v1/admin/task-templates",
        json={"type": "FACILITIES", "title": "Badge voor {{starterName}}", "days_until_due": -2},
        headers=admin_headers
    )
    assert response.status_code == status.HTTP_201_CREATED
    template_id = response.json()["id"]

    response = client.patch(
        f"/api/v1/admin/task-templates/{template_id}",
        json={"is_active": False},
        headers=admin_headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_active"] is False

    assert client.get("/api/v1/admin/task-templates", headers=auth_headers(editor)).status_code == 403


def test_creator_deletes_own_task(client, db, editor, entity_a, auth_headers):
    task_id = _create_task(client, auth_headers(editor), entity_id=entity_a.id).json()["id"]

    response = client.delete(f"/api/v1/tasks/{task_id}", headers=auth_headers(editor))

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert db.query(Task).filter(Task.id == task_id).first() is None
    entry = db.query(AuditLog).filter(AuditLog.action == "TASK_DELETED").one()
    assert (entry.actor_id, entry.target_id) == (editor.id, task_id)
    assert entry.meta_json["title"] == "Laptop klaarzetten"


def test_only_creator_or_admin_deletes_task(client, db, admin_headers, editor, entity_a, user_factory, auth_headers):
    other_editor = user_factory("editor2@example.com", Role.ENTITY_EDITOR, memberships={entity_a: True})
    task_id = _create_task(client, auth_headers(editor), entity_id=entity_a.id).json()["id"]

    assert client.delete(f"/api/v1/tasks/{task_id}", headers=auth_headers(other_editor)).status_code == 403
    assert client.delete(f"/api/v1/tasks/{task_id}", headers=admin_headers).status_code == 204
    assert client.delete(f"/api/v1/tasks/{task_id}", headers=admin_headers).status_code == 404


def test_template_rejects_unknown_job_role_titles(client, admin_headers, entity_a):
    client.post("/api/v1/job-roles", json={"entity_id": entity_a.id, "title": "Sales"}, headers=admin_headers)

    rejected = client.post(
        "/api/v1/admin/task-templates",
        json={"type": "IT_SETUP", "title": "CRM account", "for_job_role_titles": ["Sales", "Astronaut"]},
        headers=admin_headers
    )
    accepted = client.post(
        "/api/v1/admin/task-templates",
        json={"type": "IT_SETUP", "title": "CRM account", "for_job_role_titles": ["Sales"]},
        headers=admin_headers
    )

    assert rejected.status_code == status.HTTP_400_BAD_REQUEST
    assert rejected.json()["detail"]["titles"] == ["Astronaut"]
    assert accepted.status_code == status.HTTP_201_CREATED
    assert accepted.json()["for_job_role_titles"] == ["Sales"]
