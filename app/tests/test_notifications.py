"""
Tests for in-app notifications and digest preferences
"""
from fastapi import status
from app.models.notification import Notification
from app.models.notification_preference import NotificationPreference
from app.services.notification_service import create_notification


def _notify(db, user, title="Hallo"):
    notification = create_notification(db, user_id=user.id, type="TASK_ASSIGNED", title=title, message="Bericht")
    db.commit()
    return notification


def test_list_and_mark_read(client, db, editor, auth_headers):
    first = _notify(db, editor, "Eerste")
    _notify(db, editor, "Tweede")
    headers = auth_headers(editor)

    assert client.get("/api/v1/notifications/unread-count", headers=headers).json()["unread"] == 2

    response = client.post(f"/api/v1/notifications/{first.id}/read", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_read"] is True
    assert response.json()["read_at"] is not None
    assert client.get("/api/v1/notifications/unread-count", headers=headers).json()["unread"] == 1

    client.post("/api/v1/notifications/mark-all-read", headers=headers)
    assert client.get("/api/v1/notifications/unread-count", headers=headers).json()["unread"] == 0


def test_cannot_read_someone_elses_notification(client, db, editor, viewer, auth_headers):
    notification = _notify(db, editor)

    response = client.post(f"/api/v1/notifications/{notification.id}/read", headers=auth_headers(viewer))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert db.query(Notification).filter(Notification.id == notification.id).one().is_read is False


def test_preferences_default_to_enabled_for_memberships(client, editor, entity_a, auth_headers):
    response = client.get("/api/v1/notifications/preferences", headers=auth_headers(editor))

    assert response.status_code == status.HTTP_200_OK
    prefs = response.json()
    assert [p["entity_id"] for p in prefs] == [entity_a.id]
    assert prefs[0]["weekly_reminder"] is True
    assert prefs[0]["yearly_summary"] is True


def test_set_preference_updates_single_flag(client, db, editor, entity_a, auth_headers):
    response = client.put(
        "/api/v1/notifications/preferences",
        json={"entity_id": entity_a.id, "weekly_reminder": False},
        headers=auth_headers(editor)
    )

    assert response.status_code == status.HTTP_200_OK
    pref = db.query(NotificationPreference).filter(NotificationPreference.user_id == editor.id).one()
    assert pref.weekly_reminder is False
    assert pref.monthly_summary is True


def test_non_member_cannot_subscribe(client, editor, entity_b, auth_headers):
    response = client.put(
        "/api/v1/notifications/preferences",
        json={"entity_id": entity_b.id, "weekly_reminder": True},
        headers=auth_headers(editor)
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_admin_can_subscribe_without_membership(client, admin_headers, entity_b):
    response = client.put(
        "/api/v1/notifications/preferences",
        json={"entity_id": entity_b.id, "monthly_summary": False},
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["monthly_summary"] is False
    assert response.json()["weekly_reminder"] is True
