"""
Tests for year-to-date starter statistics
"""
from datetime import date, datetime

import pytest
from app.models.starter import Starter


@pytest.fixture
def frozen_today(monkeypatch):
    monkeypatch.setattr("app.services.stats_service.today_local", lambda: date(2026, 6, 15))


@pytest.fixture
def starters(db, entity_a, entity_b):
    def add(name, entity, start, **kwargs):
        db.add(Starter(
            name=name, entity_id=entity.id if entity else None, start_date=start,
            week_number=start.isocalendar()[1], year=start.isocalendar()[0], **kwargs
        ))

    add("Alice", entity_a, datetime(2026, 1, 5, 9))
    add("Bob", entity_a, datetime(2026, 6, 15, 18))
    add("Carol", entity_b, datetime(2026, 3, 2, 9))
    add("Dave", entity_a, datetime(2026, 6, 16, 9))
    add("Erin", entity_a, datetime(2026, 2, 2, 9), is_cancelled=True)
    add("Frank", entity_a, datetime(2025, 11, 3, 9))
    add("Gina", None, datetime(2026, 4, 6, 9))
    db.commit()


def test_ytd_counts_started_non_cancelled_starters(client, admin_headers, frozen_today, starters):
    data = client.get("/api/v1/stats/ytd", headers=admin_headers).json()

    assert data["year"] == 2026
    assert data["total_ytd"] == 4
    assert [(e["entity_name"], e["entity_color"], e["count"]) for e in data["entities"]] == [
        ("Acme", "#ff0000", 2),
        ("Beta", "#00ff00", 1),
    ]


def test_ytd_respects_entity_visibility(client, viewer, frozen_today, starters, auth_headers):
    data = client.get("/api/v1/stats/ytd", headers=auth_headers(viewer)).json()

    assert data["total_ytd"] == 2
    assert [e["entity_name"] for e in data["entities"]] == ["Acme"]


def test_ytd_for_earlier_year(client, admin_headers, frozen_today, starters):
    data = client.get("/api/v1/stats/ytd", params={"year": 2025}, headers=admin_headers).json()

    assert data["total_ytd"] == 1
    assert data["entities"][0]["count"] == 1


def test_ytd_without_memberships_is_empty(client, outsider, frozen_today, starters, auth_headers):
    data = client.get("/api/v1/stats/ytd", headers=auth_headers(outsider)).json()

    assert (data["total_ytd"], data["entities"]) == (0, [])
