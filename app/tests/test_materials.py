"""
Tests for the material catalogue and per-starter handouts
"""
from datetime import datetime

import pytest
from fastapi import status
from app.models.audit_log import AuditLog
from app.models.job_role import JobRole
from app.models.material import JobRoleMaterial, Material, StarterMaterial
from app.models.starter import Starter


@pytest.fixture
def developer_role(db, entity_a):
    """Developer role on entity A needing a laptop and a (retired) pager"""
    role = JobRole(entity_id=entity_a.id, title="Developer")
    laptop = Material(name="Laptop", sort_order=1)
    pager = Material(name="Pager", is_active=False)
    db.add_all([role, laptop, pager])
    db.commit()
    db.add_all([
        JobRoleMaterial(job_role_id=role.id, material_id=laptop.id, notes="15 inch"),
        JobRoleMaterial(job_role_id=role.id, material_id=pager.id),
    ])
    db.commit()
    db.refresh(role)
    return role


@pytest.fixture
def starter(db, entity_a):
    starter = Starter(
        name="Alice", entity_id=entity_a.id, role_title="Developer",
        start_date=datetime(2026, 11, 2, 9), week_number=45, year=2026,
    )
    db.add(starter)
    db.commit()
    db.refresh(starter)
    return starter


def test_admin_creates_material(client, admin_headers):
    response = client.post(
        "/api/v1/admin/materials",
        json={"name": " Laptop ", "category": "IT"},
        headers=admin_headers
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert (response.json()["name"], response.json()["category"]) == ("Laptop", "IT")
    duplicate = client.post("/api/v1/admin/materials", json={"name": "laptop"}, headers=admin_headers)
    assert duplicate.status_code == status.HTTP_409_CONFLICT


def test_material_admin_requires_admin(client, editor, auth_headers):
    assert client.get("/api/v1/admin/materials", headers=auth_headers(editor)).status_code == 403


def test_material_list_reports_usage(client, admin_headers, developer_role, starter, editor, auth_headers):
    client.post(f"/api/v1/starters/{starter.id}/materials", headers=auth_headers(editor))

    materials = client.get("/api/v1/admin/materials", headers=admin_headers).json()
    active = client.get("/api/v1/admin/materials", params={"active_only": True}, headers=admin_headers).json()

    usage = {m["name"]: (m["job_roles_count"], m["starters_count"]) for m in materials}
    assert usage == {"Laptop": (1, 1), "Pager": (1, 0)}
    assert [m["name"] for m in active] == ["Laptop"]


def test_material_in_use_cannot_be_deleted(client, db, admin_headers, developer_role):
    laptop = db.query(Material).filter(Material.name == "Laptop").one()

    response = client.delete(f"/api/v1/admin/materials/{laptop.id}", headers=admin_headers)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"]["blocking"] == {"job_roles": 1, "starters": 0}


def test_unused_material_deleted(client, db, admin_headers):
    material_id = client.post("/api/v1/admin/materials", json={"name": "Badge"}, headers=admin_headers).json()["id"]

    response = client.delete(f"/api/v1/admin/materials/{material_id}", headers=admin_headers)

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert db.query(Material).count() == 0


def test_deactivate_material(client, admin_headers):
    material_id = client.post("/api/v1/admin/materials", json={"name": "Badge"}, headers=admin_headers).json()["id"]

    response = client.patch(f"/api/v1/admin/materials/{material_id}", json={"is_active": False}, headers=admin_headers)

    assert response.json()["is_active"] is False


def test_assign_copies_active_role_materials_once(client, db, developer_role, starter, editor, auth_headers):
    url = f"/api/v1/starters/{starter.id}/materials"

    first = client.post(url, headers=auth_headers(editor))
    second = client.post(url, headers=auth_headers(editor))

    assert [(m["material"]["name"], m["notes"]) for m in first.json()] == [("Laptop", "15 inch")]
    assert second.json() == []
    assert db.query(StarterMaterial).count() == 1
    entry = db.query(AuditLog).filter(AuditLog.action == "ASSIGN_MATERIALS").one()
    assert entry.meta_json["count"] == 1


def test_assign_needs_role_and_entity(client, db, admin_headers, starter):
    starter.role_title = None
    db.commit()

    response = client.post(f"/api/v1/starters/{starter.id}/materials", headers=admin_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_assign_requires_edit_rights(client, developer_role, starter, viewer, auth_headers):
    response = client.post(f"/api/v1/starters/{starter.id}/materials", headers=auth_headers(viewer))

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_mark_material_provided(client, db, developer_role, starter, editor, viewer, auth_headers):
    client.post(f"/api/v1/starters/{starter.id}/materials", headers=auth_headers(editor))
    laptop_id = db.query(Material).filter(Material.name == "Laptop").one().id
    url = f"/api/v1/starters/{starter.id}/materials/{laptop_id}"

    provided = client.patch(url, json={"is_provided": True}, headers=auth_headers(editor)).json()
    assert provided["is_provided"] is True
    assert provided["provided_by"] == editor.id
    assert provided["provided_at"] is not None
    assert provided["notes"] == "15 inch"

    reverted = client.patch(url, json={"is_provided": False, "notes": None}, headers=auth_headers(editor)).json()
    assert (reverted["is_provided"], reverted["provided_by"], reverted["provided_at"], reverted["notes"]) == (
        False, None, None, None
    )

    listing = client.get(f"/api/v1/starters/{starter.id}/materials", headers=auth_headers(viewer))
    assert [m["material"]["name"] for m in listing.json()] == ["Laptop"]


def test_starter_materials_hidden_from_outsiders(client, starter, outsider, auth_headers):
    response = client.get(f"/api/v1/starters/{starter.id}/materials", headers=auth_headers(outsider))

    assert response.status_code == status.HTTP_403_FORBIDDEN
