"""
Authentication schemas
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.schemas.common import check_email


class LoginRequest(BaseModel):
    """Login request schema"""
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v)


class RegisterRequest(BaseModel):
    """Self-registration; the very first account becomes HR_ADMIN"""
    email: str = Field(..., description="Email address")
    password: str = Field(..., min_length=6, description="Password")
    name: Optional[str] = Field(None, max_length=200)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return check_email(v)


class TokenResponse(BaseModel):
    """Token response schema"""
    access_token: str
    token_type: str = "bearer"
