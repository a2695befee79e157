"""
Entity schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, field_serializer, ConfigDict

from app.schemas.common import COLOR_HEX_RE, check_email, ser_utc


def _check_color(v: Optional[str]) -> Optional[str]:
    if v is not None and not COLOR_HEX_RE.match(v):
        raise ValueError("color_hex must look like #RRGGBB")
    return v


def _check_emails(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    cleaned = []
    for email in v:
        email = check_email(email)
        if email not in cleaned:
            cleaned.append(email)
    return cleaned


class EntityCreate(BaseModel):
    """Schema for creating an entity"""
    name: str = Field(..., min_length=1, max_length=200)
    color_hex: str = Field(default="#3b82f6")
    notify_emails: List[str] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("color_hex")
    @classmethod
    def _color(cls, v):
        return _check_color(v)

    @field_validator("notify_emails")
    @classmethod
    def _emails(cls, v):
        return _check_emails(v)


class EntityUpdate(BaseModel):
    """Schema for updating an entity"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    color_hex: Optional[str] = None
    notify_emails: Optional[List[str]] = None
    is_active: Optional[bool] = None

    @field_validator("color_hex")
    @classmethod
    def _color(cls, v):
        return _check_color(v)

    @field_validator("notify_emails")
    @classmethod
    def _emails(cls, v):
        return _check_emails(v)


class EntityOut(BaseModel):
    id: int
    name: str
    color_hex: str
    notify_emails: List[str] = []
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return ser_utc(dt)
