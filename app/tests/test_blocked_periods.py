"""
Tests for blocked periods and their effect on starter planning
"""
from datetime import date

import pytest
from fastapi import status
from app.models.blocked_period import BlockedPeriod
from app.models.job_role import JobRole


@pytest.fixture
def sales_role(db, entity_a):
    role = JobRole(entity_id=entity_a.id, title="Sales")
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


def _period(client, headers, entity_id, **overrides):
    payload = {"entity_id": entity_id, "start_date": "2026-12-21", "end_date": "2027-01-03", "reason": "Kerstsluiting"}
    payload.update(overrides)
    return client.post("/api/v1/blocked-periods", json=payload, headers=headers)


def _starter(client, headers, entity_id, start_date, **overrides):
    payload = {"name": "Alice", "entity_id": entity_id, "start_date": start_date}
    payload.update(overrides)
    return client.post("/api/v1/starters", json=payload, headers=headers)


def test_admin_creates_period(client, admin, admin_headers, entity_a):
    response = _period(client, admin_headers, entity_a.id)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert (data["start_date"], data["end_date"]) == ("2026-12-21", "2027-01-03")
    assert data["job_role_id"] is None
    assert data["created_by"] == admin.id


def test_inverted_range_rejected(client, admin_headers, entity_a):
    response = _period(client, admin_headers, entity_a.id, start_date="2027-01-03", end_date="2026-12-21")

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_single_day_period_allowed(client, admin_headers, entity_a):
    response = _period(client, admin_headers, entity_a.id, start_date="2026-11-11", end_date="2026-11-11")

    assert response.status_code == status.HTTP_201_CREATED


def test_job_role_must_belong_to_entity(client, admin_headers, entity_b, sales_role):
    response = _period(client, admin_headers, entity_b.id, job_role_id=sales_role.id)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_periods_are_admin_only(client, editor, entity_a, auth_headers):
    assert _period(client, auth_headers(editor), entity_a.id).status_code == status.HTTP_403_FORBIDDEN
    assert client.get("/api/v1/blocked-periods", headers=auth_headers(editor)).status_code == status.HTTP_403_FORBIDDEN


def test_list_shows_active_periods_newest_first(client, db, admin_headers, entity_a, entity_b):
    _period(client, admin_headers, entity_a.id, start_date="2026-07-01", end_date="2026-07-31")
    _period(client, admin_headers, entity_a.id)
    _period(client, admin_headers, entity_b.id, is_active=False)

    listed = client.get("/api/v1/blocked-periods", headers=admin_headers).json()
    for_b = client.get("/api/v1/blocked-periods", params={"entity_id": entity_b.id}, headers=admin_headers).json()

    assert [p["start_date"] for p in listed] == ["2026-12-21", "2026-07-01"]
    assert for_b == []


def test_starter_inside_period_rejected(client, admin_headers, entity_a):
    _period(client, admin_headers, entity_a.id)

    inside = _starter(client, admin_headers, entity_a.id, "2027-01-03T09:00:00")
    after = _starter(client, admin_headers, entity_a.id, "2027-01-04T09:00:00")

    assert inside.status_code == status.HTTP_409_CONFLICT
    detail = inside.json()["detail"]
    assert detail["reason"] == "Kerstsluiting"
    assert detail["job_role"] == "Alle functies"
    assert (detail["start_date"], detail["end_date"]) == ("2026-12-21", "2027-01-03")
    assert after.status_code == status.HTTP_201_CREATED


def test_role_period_only_blocks_that_role(client, admin_headers, entity_a, entity_b, sales_role):
    _period(client, admin_headers, entity_a.id, job_role_id=sales_role.id)

    sales = _starter(client, admin_headers, entity_a.id, "2026-12-28T09:00:00", role_title="Sales")
    developer = _starter(client, admin_headers, entity_a.id, "2026-12-28T09:00:00", role_title="Developer")
    other_entity = _starter(client, admin_headers, entity_b.id, "2026-12-28T09:00:00", role_title="Sales")

    assert sales.status_code == status.HTTP_409_CONFLICT
    assert sales.json()["detail"]["job_role"] == "Sales"
    assert developer.status_code == status.HTTP_201_CREATED
    assert other_entity.status_code == status.HTTP_201_CREATED


def test_inactive_period_does_not_block(client, admin_headers, entity_a):
    _period(client, admin_headers, entity_a.id, is_active=False)

    assert _starter(client, admin_headers, entity_a.id, "2026-12-28T09:00:00").status_code == status.HTTP_201_CREATED


def test_moving_starter_into_period_rejected(client, admin_headers, entity_a):
    starter_id = _starter(client, admin_headers, entity_a.id, "2026-12-14T09:00:00").json()["id"]
    _period(client, admin_headers, entity_a.id)

    moved = client.patch(f"/api/v1/starters/{starter_id}", json={"start_date": "2026-12-22T09:00:00"}, headers=admin_headers)
    renamed = client.patch(f"/api/v1/starters/{starter_id}", json={"notes": "laptop besteld"}, headers=admin_headers)

    assert moved.status_code == status.HTTP_409_CONFLICT
    assert renamed.status_code == status.HTTP_200_OK


def test_check_endpoint(client, admin_headers, viewer, entity_a, sales_role, auth_headers):
    _period(client, admin_headers, entity_a.id, job_role_id=sales_role.id, reason=None)

    blocked = client.post(
        "/api/v1/blocked-periods/check",
        json={"entity_id": entity_a.id, "role_title": "Sales", "start_date": "2026-12-24T09:00:00"},
        headers=auth_headers(viewer)
    ).json()
    free = client.post(
        "/api/v1/blocked-periods/check",
        json={"entity_id": entity_a.id, "role_title": "Developer", "start_date": "2026-12-24T09:00:00"},
        headers=auth_headers(viewer)
    ).json()

    assert blocked["blocked"] is True
    assert blocked["reason"] == "Deze periode is geblokkeerd"
    assert blocked["job_role"] == "Sales"
    assert free["blocked"] is False


def test_update_and_delete_period(client, db, admin_headers, entity_a):
    period_id = _period(client, admin_headers, entity_a.id).json()["id"]

    inverted = client.patch(f"/api/v1/blocked-periods/{period_id}", json={"end_date": "2026-12-01"}, headers=admin_headers)
    moved = client.patch(f"/api/v1/blocked-periods/{period_id}", json={"end_date": "2026-12-31"}, headers=admin_headers)
    deleted = client.delete(f"/api/v1/blocked-periods/{period_id}", headers=admin_headers)

    assert inverted.status_code == status.HTTP_400_BAD_REQUEST
    assert moved.json()["end_date"] == "2026-12-31"
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert db.query(BlockedPeriod).count() == 0


def test_blocked_period_blocks_entity_delete(client, db, admin_headers, entity_b):
    db.add(BlockedPeriod(entity_id=entity_b.id, start_date=date(2026, 8, 1), end_date=date(2026, 8, 15)))
    db.commit()

    response = client.delete(f"/api/v1/entities/{entity_b.id}", headers=admin_headers)

    assert response.json()["detail"]["blocking"]["blocked_periods"] == 1
