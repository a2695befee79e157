"""
User service - user accounts and entity memberships
"""
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.security import hash_password, validate_password
from app.models.entity import Entity
from app.models.membership import Membership
from app.models.user import User, Role
from app.schemas.user import UserCreate, UserUpdate, MembershipCreate
from app.services.audit_service import log_audit
from app.services.notification_preference_service import ensure_default_preference
from app.utils.enums import enum_to_str

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found"
        )
    return user


def _hash_or_400(password: Optional[str]) -> str:
    try:
        return hash_password(validate_password(password))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def list_users(db: Session, skip: int = 0, limit: int = 100) -> List[User]:
    return db.query(User).order_by(User.email).offset(skip).limit(limit).all()


def create_user(db: Session, user_data: UserCreate, actor_id: Optional[int]) -> User:
    """
    Create a user

    Raises:
        HTTPException: 409 if the email is already taken
    """
    if get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"User with email '{user_data.email}' already exists"
        )

    user = User(
        email=user_data.email,
        name=user_data.name,
        role=enum_to_str(user_data.role),
        active=user_data.active,
        password_hash=_hash_or_400(user_data.password) if user_data.password else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="CREATE",
        target_type="user",
        target_id=user.id,
        meta={"email": user.email, "role": user.role}
    )
    return user


def register_user(db: Session, email: str, password: str, name: Optional[str]) -> User:
    """
    Self-registration. The first account in an empty system becomes HR_ADMIN,
    later ones ENTITY_VIEWER without memberships.
    """
    if get_user_by_email(db, email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists"
        )

    is_first = db.query(User).count() == 0
    role = Role.HR_ADMIN if is_first else Role.ENTITY_VIEWER
    user = User(
        email=email.strip().lower(),
        name=name,
        role=role.value,
        active=True,
        password_hash=_hash_or_400(password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    log_audit(
        db=db,
        actor_id=user.id,
        action="REGISTER",
        target_type="user",
        target_id=user.id,
        meta={"email": user.email, "role": user.role, "first_user": is_first}
    )
    if is_first:
        logger.info(f"First registered user {user.email} promoted to HR_ADMIN")
    return user


def update_user(db: Session, user_id: int, user_data: UserUpdate, actor_id: int) -> User:
    user = _get_user_or_404(db, user_id)

    old_values = {"name": user.name, "role": user.role, "active": user.active, "locale": user.locale}
    update_data = user_data.model_dump(exclude_unset=True)
    if "role" in update_data and update_data["role"] is None:
        update_data.pop("role")
    if "role" in update_data:
        update_data["role"] = enum_to_str(update_data["role"])

    if user_id == actor_id and update_data.get("active") is False:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate your own account"
        )

    for field, value in update_data.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE",
        target_type="user",
        target_id=user.id,
        meta={"old": old_values, "new": update_data}
    )
    return user


def delete_user(db: Session, user_id: int, actor_id: int) -> None:
    """
    Raises:
        HTTPException: 400 when deleting yourself, 404 if not found
    """
    if user_id == actor_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account"
        )
    user = _get_user_or_404(db, user_id)
    email = user.email
    db.delete(user)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="DELETE",
        target_type="user",
        target_id=user_id,
        meta={"email": email}
    )


def list_memberships(db: Session, user_id: int) -> List[Membership]:
    _get_user_or_404(db, user_id)
    return db.query(Membership).filter(Membership.user_id == user_id).order_by(Membership.id).all()


def add_membership(db: Session, user_id: int, data: MembershipCreate, actor_id: int) -> Membership:
    """
    Grant a user access to an entity; also seeds the default notification preference

    Raises:
        HTTPException: 404 unknown user/entity, 409 duplicate membership
    """
    _get_user_or_404(db, user_id)
    if not db.query(Entity).filter(Entity.id == data.entity_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entity with id {data.entity_id} not found"
        )

    existing = db.query(Membership).filter(
        Membership.user_id == user_id,
        Membership.entity_id == data.entity_id
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User is already a member of this entity"
        )

    membership = Membership(user_id=user_id, entity_id=data.entity_id, can_edit=data.can_edit)
    db.add(membership)
    ensure_default_preference(db, user_id, data.entity_id)
    db.commit()
    db.refresh(membership)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="ADD_MEMBERSHIP",
        target_type="membership",
        target_id=membership.id,
        meta={"user_id": user_id, "entity_id": data.entity_id, "can_edit": data.can_edit}
    )
    return membership


def remove_membership(db: Session, user_id: int, entity_id: int, actor_id: int) -> None:
    membership = db.query(Membership).filter(
        Membership.user_id == user_id,
        Membership.entity_id == entity_id
    ).first()
    if not membership:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membership not found"
        )
    membership_id = membership.id
    db.delete(membership)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="REMOVE_MEMBERSHIP",
        target_type="membership",
        target_id=membership_id,
        meta={"user_id": user_id, "entity_id": entity_id}
    )
