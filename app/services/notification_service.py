"""
In-app notifications
"""
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.notification import Notification
from app.utils.datetime_utils import now_utc


def create_notification(
    db: Session,
    user_id: int,
    type: str,
    title: str,
    message: str,
    task_id: Optional[int] = None,
    starter_id: Optional[int] = None,
    link_url: Optional[str] = None,
) -> Notification:
    """Add a notification to the session; the caller commits"""
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        task_id=task_id,
        starter_id=starter_id,
        link_url=link_url,
        is_read=False,
    )
    db.add(notification)
    return notification


def list_notifications(
    db: Session,
    user_id: int,
    unread_only: bool = False,
    limit: int = 50
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.id.desc()).limit(limit).all()


def unread_count(db: Session, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False)
    ).count()


def mark_read(db: Session, user_id: int, notification_id: int) -> Notification:
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    # Other users' notifications are reported as missing
    if not notification or notification.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Notification with id {notification_id} not found"
        )
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = now_utc()
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    """Returns the number of notifications that were unread"""
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False)
    ).update({Notification.is_read: True, Notification.read_at: now_utc()}, synchronize_session=False)
    db.commit()
    return updated
