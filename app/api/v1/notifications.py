"""
In-app notification and notification preference endpoints
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user
from app.models.user import User
from app.schemas.notification import (
    NotificationOut,
    NotificationPreferenceOut,
    NotificationPreferenceSet,
)
from app.services import notification_preference_service, notification_service

router = APIRouter()


@router.get("", response_model=List[NotificationOut])
async def list_notifications_endpoint(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return notification_service.list_notifications(db, current_user.id, unread_only=unread_only, limit=limit)


@router.get("/unread-count")
async def unread_count_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"unread": notification_service.unread_count(db, current_user.id)}


@router.post("/mark-all-read")
async def mark_all_read_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"updated": notification_service.mark_all_read(db, current_user.id)}


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read_endpoint(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return notification_service.mark_read(db, current_user.id, notification_id)


@router.get("/preferences", response_model=List[NotificationPreferenceOut])
async def get_preferences_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Digest preferences per entity (defaults are created for memberships lacking one)"""
    return notification_preference_service.get_preferences(db, current_user)


@router.put("/preferences", response_model=NotificationPreferenceOut)
async def set_preference_endpoint(
    data: NotificationPreferenceSet,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return notification_preference_service.set_preference(db, current_user, data)
