"""
Starter schemas

start_date is local wall-clock time in the business timezone; offsets in the
input are converted to it.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_serializer, ConfigDict

from app.schemas.common import ser_utc


class StarterCreate(BaseModel):
    """Schema for creating a starter"""
    name: str = Field(..., min_length=1, max_length=200)
    entity_id: Optional[int] = None
    region: Optional[str] = Field(None, max_length=200)
    role_title: Optional[str] = Field(None, max_length=200)
    via: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    start_date: datetime


class StarterUpdate(BaseModel):
    """Schema for updating a starter"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    entity_id: Optional[int] = None
    region: Optional[str] = Field(None, max_length=200)
    role_title: Optional[str] = Field(None, max_length=200)
    via: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = None
    start_date: Optional[datetime] = None


class StarterCancel(BaseModel):
    reason: Optional[str] = Field(None, max_length=2000)


class StarterOut(BaseModel):
    id: int
    name: str
    entity_id: Optional[int] = None
    region: Optional[str] = None
    role_title: Optional[str] = None
    via: Optional[str] = None
    notes: Optional[str] = None
    start_date: datetime
    week_number: int
    year: int
    is_cancelled: bool
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[int] = None
    cancel_reason: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("cancelled_at", "created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return ser_utc(dt)
