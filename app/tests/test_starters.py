"""
Tests for starter creation, cancellation and deletion
"""
from fastapi import status
from app.models.audit_log import AuditLog
from app.models.starter import Starter


def _create(client, headers, **overrides):
    payload = {"name": "Alice Peeters", "role_title": "Developer", "start_date": "2026-11-02T09:00:00"}
    payload.update(overrides)
    return client.post("/api/v1/starters", json=payload, headers=headers)


def test_create_starter_derives_week_and_year(client, editor, entity_a, auth_headers):
    response = _create(client, auth_headers(editor), entity_id=entity_a.id, start_date="2026-12-28T09:00:00")

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["week_number"] == 53
    assert data["year"] == 2026
    assert data["is_cancelled"] is False
    assert data["created_by"] == editor.id


def test_iso_week_year_can_differ_from_calendar_year(client, admin_headers):
    response = _create(client, admin_headers, start_date="2027-01-01T09:00:00")

    data = response.json()
    assert (data["year"], data["week_number"]) == (2026, 53)


def test_start_date_with_offset_is_stored_as_local_wall_clock(client, db, admin_headers):
    response = _create(client, admin_headers, start_date="2026-11-02T08:00:00Z")

    starter = db.query(Starter).filter(Starter.id == response.json()["id"]).one()
    assert (starter.start_date.hour, starter.start_date.minute) == (9, 0)


def test_create_requires_editable_membership(client, viewer, editor, entity_a, entity_b, auth_headers):
    assert _create(client, auth_headers(viewer), entity_id=entity_a.id).status_code == status.HTTP_403_FORBIDDEN
    assert _create(client, auth_headers(editor), entity_id=entity_b.id).status_code == status.HTTP_403_FORBIDDEN
    # Starters without an entity are admin-only
    assert _create(client, auth_headers(editor)).status_code == status.HTTP_403_FORBIDDEN


def test_create_with_unknown_entity_404(client, admin_headers):
    response = _create(client, admin_headers, entity_id=999)

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_blank_name_rejected(client, admin_headers):
    response = _create(client, admin_headers, name="   ")

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_update_moves_week(client, editor, entity_a, auth_headers):
    headers = auth_headers(editor)
    starter_id = _create(client, headers, entity_id=entity_a.id).json()["id"]

    response = client.patch(
        f"/api/v1/starters/{starter_id}",
        json={"start_date": "2026-11-09T09:00:00", "notes": "  laptop ordered  "},
        headers=headers
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["week_number"] == 46
    assert data["notes"] == "laptop ordered"


def test_cancel_starter_notifies_everyone_concerned(
    client, db, admin, global_viewer, editor, entity_a, auth_headers, sent_emails
):
    starter_id = _create(client, auth_headers(editor), entity_id=entity_a.id).json()["id"]

    response = client.post(
        f"/api/v1/starters/{starter_id}/cancel",
        json={"reason": "Accepted another offer"},
        headers=auth_headers(editor)
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["is_cancelled"] is True
    assert data["cancelled_by"] == editor.id
    assert data["cancel_reason"] == "Accepted another offer"
    assert data["cancelled_at"] is not None

    assert len(sent_emails) == 1
    assert sent_emails[0]["to"] == [
        "admin@example.com",
        "global@example.com",
        "editor@example.com",
        "hr@acme.test",
    ]
    assert "Accepted another offer" in sent_emails[0]["html"]
    actions = [a.action for a in db.query(AuditLog).filter(AuditLog.target_type == "starter").order_by(AuditLog.id)]
    assert actions == ["CREATE", "CANCEL_STARTER", "SEND_MAIL"]


def test_cancel_survives_email_failure(client, db, admin_headers, entity_a, monkeypatch):
    from app.services import email_service

    def failing_send_email(to, subject, html, text=None):
        raise email_service.EmailError("provider unreachable")

    monkeypatch.setattr("app.services.email_service.send_email", failing_send_email)
    starter_id = _create(client, admin_headers, entity_id=entity_a.id).json()["id"]

    response = client.post(f"/api/v1/starters/{starter_id}/cancel", json={}, headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert db.query(Starter).filter(Starter.id == starter_id).one().is_cancelled is True
    assert db.query(AuditLog).filter(AuditLog.action == "SEND_MAIL").count() == 0


def test_cancel_twice_is_400(client, admin_headers, entity_a, sent_emails):
    starter_id = _create(client, admin_headers, entity_id=entity_a.id).json()["id"]
    client.post(f"/api/v1/starters/{starter_id}/cancel", json={}, headers=admin_headers)

    response = client.post(f"/api/v1/starters/{starter_id}/cancel", json={}, headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_viewer_cannot_cancel(client, admin_headers, viewer, entity_a, auth_headers):
    starter_id = _create(client, admin_headers, entity_id=entity_a.id).json()["id"]

    response = client.post(f"/api/v1/starters/{starter_id}/cancel", json={}, headers=auth_headers(viewer))

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_cancelled_starters_can_be_filtered_out(client, admin_headers, entity_a, sent_emails):
    first = _create(client, admin_headers, entity_id=entity_a.id, name="Gone").json()["id"]
    _create(client, admin_headers, entity_id=entity_a.id, name="Staying")
    client.post(f"/api/v1/starters/{first}/cancel", json={}, headers=admin_headers)

    everyone = client.get("/api/v1/starters", headers=admin_headers).json()
    active = client.get("/api/v1/starters", params={"include_cancelled": False}, headers=admin_headers).json()

    assert {s["name"] for s in everyone} == {"Gone", "Staying"}
    assert [s["name"] for s in active] == ["Staying"]


def test_only_admin_can_hard_delete(client, db, editor, entity_a, auth_headers, admin_headers):
    starter_id = _create(client, auth_headers(editor), entity_id=entity_a.id).json()["id"]

    assert client.delete(f"/api/v1/starters/{starter_id}", headers=auth_headers(editor)).status_code == 403
    assert client.delete(f"/api/v1/starters/{starter_id}", headers=admin_headers).status_code == 204
    assert db.query(Starter).count() == 0


def test_cancellation_email_links_to_configured_app_url(client, admin_headers, entity_a, sent_emails):
    client.put(
        "/api/v1/admin/system/settings",
        json={"key": "app_base_url", "value": "https://kalender.example.com/"},
        headers=admin_headers
    )
    starter_id = _create(client, admin_headers, entity_id=entity_a.id).json()["id"]

    client.post(f"/api/v1/starters/{starter_id}/cancel", json={}, headers=admin_headers)

    assert len(sent_emails) == 1
    assert 'href="https://kalender.example.com/starters"' in sent_emails[0]["html"]


def test_app_url_falls_back_to_environment_setting():
    from app.core.config import settings
    from app.services.settings_service import SettingsSnapshot

    assert SettingsSnapshot(version=0).app_url() == settings.APP_BASE_URL.rstrip("/")
    assert SettingsSnapshot(version=3, values={"app_base_url": "https://x.test/"}).app_url() == "https://x.test"
