"""
Access control: closed role set, capability table and the single authorization decision

Every visibility/mutation check in the services goes through ``authorize`` (or
the helpers built on it) instead of comparing role strings in place.
"""
import enum
import logging
from typing import Dict, FrozenSet, Optional, Set

from fastapi import HTTPException, status
from sqlalchemy import false
from sqlalchemy.orm import Query

from app.models.user import User, Role

logger = logging.getLogger(__name__)


class Capability(str, enum.Enum):
    VIEW_ALL = "VIEW_ALL"
    EDIT_ALL = "EDIT_ALL"
    VIEW_OWN_ENTITIES = "VIEW_OWN_ENTITIES"
    EDIT_OWN_ENTITIES = "EDIT_OWN_ENTITIES"
    ADMINISTER = "ADMINISTER"


class Action(str, enum.Enum):
    VIEW = "view"
    EDIT = "edit"


_ENTITY_SCOPED: FrozenSet[Capability] = frozenset({
    Capability.VIEW_OWN_ENTITIES,
    Capability.EDIT_OWN_ENTITIES,
})

# EDIT_OWN_ENTITIES is always gated by the membership's can_edit flag
ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    Role.HR_ADMIN: frozenset({Capability.VIEW_ALL, Capability.EDIT_ALL, Capability.ADMINISTER}),
    Role.GLOBAL_VIEWER: frozenset({Capability.VIEW_ALL, Capability.EDIT_OWN_ENTITIES}),
    Role.ENTITY_EDITOR: _ENTITY_SCOPED,
    Role.ENTITY_VIEWER: _ENTITY_SCOPED,
    Role.NONE: _ENTITY_SCOPED,
}


def user_role(user: User) -> Role:
    """Role of a user; unknown stored values degrade to Role.NONE"""
    try:
        return Role(user.role)
    except ValueError:
        logger.warning(f"User {user.id} has unknown role {user.role!r}, treating as NONE")
        return Role.NONE


def has_capability(user: Optional[User], capability: Capability) -> bool:
    if user is None:
        return False
    return capability in ROLE_CAPABILITIES[user_role(user)]


def is_admin(user: Optional[User]) -> bool:
    return has_capability(user, Capability.ADMINISTER)


def membership_map(user: User) -> Dict[int, bool]:
    """entity_id -> can_edit for all memberships of the user"""
    return {m.entity_id: bool(m.can_edit) for m in user.memberships}


def visible_entity_ids(user: User) -> Optional[Set[int]]:
    """
    Entity ids the user may see.

    Returns:
        None when the user sees every entity, otherwise the (possibly empty) membership set
    """
    if has_capability(user, Capability.VIEW_ALL):
        return None
    if has_capability(user, Capability.VIEW_OWN_ENTITIES):
        return set(membership_map(user).keys())
    return set()


def editable_entity_ids(user: User) -> Optional[Set[int]]:
    """Entity ids the user may mutate records of (None = all)"""
    if has_capability(user, Capability.EDIT_ALL):
        return None
    if has_capability(user, Capability.EDIT_OWN_ENTITIES):
        return {entity_id for entity_id, can_edit in membership_map(user).items() if can_edit}
    return set()


def authorize(user: User, action: Action, entity_id: Optional[int]) -> bool:
    """
    Single authorization decision for records scoped by an entity.

    Records without an entity are admin-only for both viewing and editing.
    """
    if entity_id is None:
        return is_admin(user)

    if action == Action.VIEW:
        allowed = visible_entity_ids(user)
    else:
        allowed = editable_entity_ids(user)
    return allowed is None or entity_id in allowed


def can_view_entity(user: User, entity_id: Optional[int]) -> bool:
    return authorize(user, Action.VIEW, entity_id)


def can_edit_entity(user: User, entity_id: Optional[int]) -> bool:
    return authorize(user, Action.EDIT, entity_id)


def can_mutate_record(user: User, entity_id: Optional[int]) -> bool:
    """Mutation right over a starter/task belonging to ``entity_id``"""
    return authorize(user, Action.EDIT, entity_id)


def can_create_starter(user: User) -> bool:
    """Admins, or anyone holding at least one editable membership"""
    editable = editable_entity_ids(user)
    return editable is None or len(editable) > 0


def apply_visibility(query: Query, user: User, entity_column) -> Query:
    """Restrict a query to rows whose ``entity_column`` the user may see"""
    if is_admin(user):
        return query

    allowed = visible_entity_ids(user)
    if allowed is None:
        # Global view never includes entity-less records
        return query.filter(entity_column.isnot(None))
    if not allowed:
        return query.filter(false())
    return query.filter(entity_column.in_(allowed))


def ensure_can_view(user: User, entity_id: Optional[int]) -> None:
    if not can_view_entity(user, entity_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted to view this record")


def ensure_can_edit(user: User, entity_id: Optional[int]) -> None:
    if not can_edit_entity(user, entity_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted to modify this record")
