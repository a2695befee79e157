"""
Tests for user and membership administration
"""
from fastapi import status
from app.models.notification_preference import NotificationPreference


def test_admin_creates_user(client, admin_headers):
    response = client.post(
        "/api/v1/users",
        json={"email": "New.User@Example.com", "name": "New User", "role": "ENTITY_EDITOR", "password": "secret123"},
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["email"] == "new.user@example.com"
    assert data["role"] == "ENTITY_EDITOR"
    assert data["memberships"] == []

    login = client.post("/api/v1/auth/login", json={"email": "new.user@example.com", "password": "secret123"})
    assert login.status_code == status.HTTP_200_OK


def test_duplicate_email_conflicts(client, admin_headers, editor):
    response = client.post("/api/v1/users", json={"email": "editor@example.com"}, headers=admin_headers)

    assert response.status_code == status.HTTP_409_CONFLICT


def test_admin_cannot_deactivate_or_delete_self(client, admin, admin_headers):
    response = client.patch(f"/api/v1/users/{admin.id}", json={"active": False}, headers=admin_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    response = client.delete(f"/api/v1/users/{admin.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_role_change(client, admin_headers, viewer):
    response = client.patch(f"/api/v1/users/{viewer.id}", json={"role": "GLOBAL_VIEWER"}, headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["role"] == "GLOBAL_VIEWER"


def test_add_membership_seeds_default_preference(client, db, admin_headers, outsider, entity_b):
    response = client.post(
        f"/api/v1/users/{outsider.id}/memberships",
        json={"entity_id": entity_b.id, "can_edit": True},
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_201_CREATED
    pref = db.query(NotificationPreference).filter(NotificationPreference.user_id == outsider.id).one()
    assert pref.entity_id == entity_b.id
    assert pref.weekly_reminder is True

    duplicate = client.post(
        f"/api/v1/users/{outsider.id}/memberships",
        json={"entity_id": entity_b.id},
        headers=admin_headers
    )
    assert duplicate.status_code == status.HTTP_409_CONFLICT


def test_remove_membership_revokes_access(client, admin_headers, editor, entity_a, auth_headers):
    response = client.delete(f"/api/v1/users/{editor.id}/memberships/{entity_a.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = client.get("/api/v1/entities", headers=auth_headers(editor))
    assert response.json() == []


def test_delete_user(client, admin_headers, outsider):
    response = client.delete(f"/api/v1/users/{outsider.id}", headers=admin_headers)

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert [u["email"] for u in client.get("/api/v1/users", headers=admin_headers).json()] == ["admin@example.com"]
