"""
Tests for audit logging and versioned system settings
"""
from datetime import datetime, timezone

from fastapi import status
from app.models.audit_log import AuditLog
from app.services.audit_service import log_audit


def test_audit_meta_is_json_safe(db, admin):
    entry = log_audit(
        db,
        admin.id,
        "UPDATE",
        "booking",
        1,
        {"start": datetime(2099, 1, 5, 9, tzinfo=timezone.utc), "ids": {3, 1}}
    )

    assert isinstance(entry.meta_json["start"], str)
    assert entry.meta_json["start"].startswith("2099-01-05T09:00:00")


def test_admin_lists_audit_logs_newest_first(client, db, admin, admin_headers):
    log_audit(db, admin.id, "CREATE", "starter", 1)
    log_audit(db, None, "EMAIL_SENT", "digest", admin.id)

    response = client.get("/api/v1/admin/audit-logs", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert [a["action"] for a in response.json()] == ["EMAIL_SENT", "CREATE"]

    response = client.get("/api/v1/admin/audit-logs", params={"target_type": "starter"}, headers=admin_headers)
    assert [a["action"] for a in response.json()] == ["CREATE"]


def test_audit_logs_require_admin(client, editor, auth_headers):
    response = client.get("/api/v1/admin/audit-logs", headers=auth_headers(editor))

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_settings_version_increases_per_write(client, db, admin_headers, editor, auth_headers):
    empty = client.get("/api/v1/system/settings", headers=auth_headers(editor)).json()
    assert empty == {"version": 0, "values": {}}

    client.put("/api/v1/admin/system/settings", json={"key": "company_name", "value": "Acme"}, headers=admin_headers)
    response = client.put("/api/v1/admin/system/settings", json={"key": "company_name", "value": "Acme NV"}, headers=admin_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"version": 2, "values": {"company_name": "Acme NV"}}
    assert db.query(AuditLog).filter(AuditLog.action == "UPDATE_SETTING").count() == 2


def test_settings_write_requires_admin(client, editor, auth_headers):
    response = client.put(
        "/api/v1/admin/system/settings",
        json={"key": "company_name", "value": "Mine"},
        headers=auth_headers(editor)
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
