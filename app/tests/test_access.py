"""
Tests for the role/capability table and entity-scoped authorization
"""
from datetime import datetime

import pytest
from fastapi import status
from app.models.starter import Starter
from app.models.user import Role
from app.services.access_service import (
    Action,
    Capability,
    ROLE_CAPABILITIES,
    authorize,
    can_create_starter,
    editable_entity_ids,
    has_capability,
    visible_entity_ids,
)


def _starter(db, name, entity):
    starter = Starter(
        name=name,
        entity_id=entity.id if entity else None,
        start_date=datetime(2026, 3, 2, 9, 0),
        week_number=10,
        year=2026,
        is_cancelled=False,
    )
    db.add(starter)
    db.commit()
    db.refresh(starter)
    return starter


def test_every_role_has_capabilities():
    assert set(ROLE_CAPABILITIES) == set(Role)
    assert ROLE_CAPABILITIES[Role.HR_ADMIN] >= {Capability.VIEW_ALL, Capability.EDIT_ALL, Capability.ADMINISTER}
    assert Capability.ADMINISTER not in ROLE_CAPABILITIES[Role.GLOBAL_VIEWER]
    assert Capability.VIEW_ALL in ROLE_CAPABILITIES[Role.GLOBAL_VIEWER]


def test_unknown_stored_role_degrades_to_none(db, user_factory):
    user = user_factory("weird@example.com", Role.NONE)
    user.role = "SUPERUSER"

    assert not has_capability(user, Capability.ADMINISTER)
    assert visible_entity_ids(user) == set()


def test_admin_sees_and_edits_everything(admin, entity_a):
    assert visible_entity_ids(admin) is None
    assert editable_entity_ids(admin) is None
    assert authorize(admin, Action.EDIT, entity_a.id)
    assert authorize(admin, Action.EDIT, None)


def test_global_viewer_sees_all_but_edits_only_editable_memberships(user_factory, entity_a, entity_b):
    user = user_factory("gv@example.com", Role.GLOBAL_VIEWER, memberships={entity_a: True})

    assert authorize(user, Action.VIEW, entity_b.id)
    assert authorize(user, Action.EDIT, entity_a.id)
    assert not authorize(user, Action.EDIT, entity_b.id)


@pytest.mark.parametrize("role", [Role.ENTITY_EDITOR, Role.ENTITY_VIEWER, Role.NONE])
def test_edit_requires_can_edit_membership(user_factory, entity_a, entity_b, role):
    user = user_factory(f"{role.value.lower()}@example.com", role, memberships={entity_a: True, entity_b: False})

    assert visible_entity_ids(user) == {entity_a.id, entity_b.id}
    assert editable_entity_ids(user) == {entity_a.id}
    assert authorize(user, Action.EDIT, entity_a.id)
    assert not authorize(user, Action.EDIT, entity_b.id)
    assert can_create_starter(user)


def test_entityless_records_are_admin_only(admin, global_viewer, editor):
    assert authorize(admin, Action.VIEW, None)
    assert not authorize(global_viewer, Action.VIEW, None)
    assert not authorize(editor, Action.VIEW, None)
    assert not authorize(editor, Action.EDIT, None)


def test_viewer_cannot_create_starters(viewer, outsider):
    assert not can_create_starter(viewer)
    assert not can_create_starter(outsider)


def test_starter_list_respects_visibility(
    client, db, admin_headers, global_viewer, editor, outsider, entity_a, entity_b, auth_headers
):
    _starter(db, "Alice", entity_a)
    _starter(db, "Bob", entity_b)
    _starter(db, "Nobody", None)

    def names(user_headers):
        response = client.get("/api/v1/starters", headers=user_headers)
        assert response.status_code == status.HTTP_200_OK
        return sorted(s["name"] for s in response.json())

    assert names(admin_headers) == ["Alice", "Bob", "Nobody"]
    assert names(auth_headers(global_viewer)) == ["Alice", "Bob"]
    assert names(auth_headers(editor)) == ["Alice"]
    assert names(auth_headers(outsider)) == []


def test_get_invisible_starter_is_403(client, db, editor, entity_b, auth_headers):
    starter = _starter(db, "Bob", entity_b)

    response = client.get(f"/api/v1/starters/{starter.id}", headers=auth_headers(editor))

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_viewer_cannot_update_starter(client, db, viewer, entity_a, auth_headers):
    starter = _starter(db, "Alice", entity_a)

    response = client.patch(
        f"/api/v1/starters/{starter.id}",
        json={"notes": "changed"},
        headers=auth_headers(viewer)
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
