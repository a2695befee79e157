"""
Room and booking schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, field_serializer, model_validator, ConfigDict

from app.models.room import BookingStatus
from app.schemas.common import check_email, ser_utc
from app.utils.datetime_utils import ensure_utc


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    capacity: int = Field(default=1, ge=1)
    location: Optional[str] = Field(None, max_length=200)
    ms_resource_email: Optional[str] = None
    hourly_rate_cents: int = Field(default=0, ge=0)
    active: bool = True

    @field_validator("ms_resource_email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v) if v else None


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    capacity: Optional[int] = Field(None, ge=1)
    location: Optional[str] = Field(None, max_length=200)
    ms_resource_email: Optional[str] = None
    hourly_rate_cents: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None

    @field_validator("ms_resource_email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v) if v else None


class RoomOut(BaseModel):
    id: int
    name: str
    capacity: int
    location: Optional[str] = None
    ms_resource_email: Optional[str] = None
    hourly_rate_cents: int
    active: bool

    model_config = ConfigDict(from_attributes=True)


class RoomWithCountOut(RoomOut):
    confirmed_bookings_count: int = 0


class BookingCreate(BaseModel):
    room_id: int
    title: str = Field(..., min_length=3, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    start: datetime
    end: datetime
    external_email: Optional[str] = None

    @field_validator("external_email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return check_email(v) if v else None

    @model_validator(mode="after")
    def _check_range(self):
        if ensure_utc(self.start) >= ensure_utc(self.end):
            raise ValueError("start must be before end")
        return self


class BookingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class BookingOut(BaseModel):
    id: int
    room_id: int
    user_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    start: datetime
    end: datetime
    status: BookingStatus
    external_email: Optional[str] = None
    ms_event_id: Optional[str] = None
    ms_ical_uid: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start", "end", "created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return ser_utc(dt)
