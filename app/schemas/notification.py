"""
Notification preference and in-app notification schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_serializer, ConfigDict

from app.schemas.common import ser_utc


class NotificationPreferenceSet(BaseModel):
    entity_id: int
    weekly_reminder: Optional[bool] = None
    monthly_summary: Optional[bool] = None
    quarterly_summary: Optional[bool] = None
    yearly_summary: Optional[bool] = None


class NotificationPreferenceOut(BaseModel):
    id: int
    user_id: int
    entity_id: int
    weekly_reminder: bool
    monthly_summary: bool
    quarterly_summary: bool
    yearly_summary: bool

    model_config = ConfigDict(from_attributes=True)


class NotificationOut(BaseModel):
    id: int
    type: str
    title: str
    message: str
    task_id: Optional[int] = None
    starter_id: Optional[int] = None
    link_url: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("read_at", "created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return ser_utc(dt)
