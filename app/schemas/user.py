"""
User and membership schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, field_serializer, ConfigDict

from app.models.user import Role
from app.schemas.common import check_email, ser_utc


class MembershipCreate(BaseModel):
    entity_id: int
    can_edit: bool = False


class MembershipOut(BaseModel):
    id: int
    user_id: int
    entity_id: int
    can_edit: bool

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    """Schema for creating a user (admin)"""
    email: str = Field(..., description="Email address (unique, case-insensitive)")
    name: Optional[str] = Field(None, max_length=200)
    role: Role = Field(default=Role.NONE)
    password: Optional[str] = Field(None, description="Optional initial password")
    active: bool = True

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v)


class UserUpdate(BaseModel):
    """Schema for updating a user (admin)"""
    name: Optional[str] = Field(None, max_length=200)
    role: Optional[Role] = None
    active: Optional[bool] = None
    locale: Optional[str] = Field(None, pattern="^(nl|fr)$")


class UserOut(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: Role
    active: bool
    locale: str
    last_login_at: Optional[datetime] = None
    created_at: datetime
    memberships: List[MembershipOut] = []

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "last_login_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return ser_utc(dt)
