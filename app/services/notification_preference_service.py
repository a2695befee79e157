"""
Per-entity digest preferences
"""
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.entity import Entity
from app.models.notification_preference import NotificationPreference
from app.models.user import User
from app.schemas.notification import NotificationPreferenceSet
from app.services.access_service import is_admin, membership_map

_FLAGS = ("weekly_reminder", "monthly_summary", "quarterly_summary", "yearly_summary")


def ensure_default_preference(db: Session, user_id: int, entity_id: int) -> NotificationPreference:
    """Create the all-enabled preference row if missing (does not commit)"""
    pref = db.query(NotificationPreference).filter(
        NotificationPreference.user_id == user_id,
        NotificationPreference.entity_id == entity_id
    ).first()
    if pref is None:
        pref = NotificationPreference(
            user_id=user_id,
            entity_id=entity_id,
            weekly_reminder=True,
            monthly_summary=True,
            quarterly_summary=True,
            yearly_summary=True,
        )
        db.add(pref)
        db.flush()
    return pref


def get_preferences(db: Session, user: User) -> List[NotificationPreference]:
    """All preference rows of the user, lazily creating defaults for memberships lacking one"""
    existing = {
        p.entity_id for p in db.query(NotificationPreference).filter(
            NotificationPreference.user_id == user.id
        ).all()
    }
    created = False
    for entity_id in membership_map(user):
        if entity_id not in existing:
            ensure_default_preference(db, user.id, entity_id)
            created = True
    if created:
        db.commit()

    return db.query(NotificationPreference).filter(
        NotificationPreference.user_id == user.id
    ).order_by(NotificationPreference.entity_id).all()


def set_preference(db: Session, user: User, data: NotificationPreferenceSet) -> NotificationPreference:
    """
    Upsert the preference row keyed on (user, entity)

    Raises:
        HTTPException: 404 unknown entity, 403 non-admin without membership
    """
    if not db.query(Entity).filter(Entity.id == data.entity_id).first():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entity with id {data.entity_id} not found"
        )
    if not is_admin(user) and data.entity_id not in membership_map(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not a member of this entity"
        )

    pref = ensure_default_preference(db, user.id, data.entity_id)
    for flag in _FLAGS:
        value = getattr(data, flag)
        if value is not None:
            setattr(pref, flag, value)
    db.commit()
    db.refresh(pref)
    return pref
