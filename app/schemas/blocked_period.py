"""
Blocked period schemas

Dates are whole days in the business timezone; both ends are inclusive.
"""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class BlockedPeriodCreate(BaseModel):
    entity_id: int
    job_role_id: Optional[int] = None
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=500)
    is_active: bool = True


class BlockedPeriodUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reason: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None


class BlockedPeriodOut(BaseModel):
    id: int
    entity_id: int
    job_role_id: Optional[int] = None
    start_date: date
    end_date: date
    reason: Optional[str] = None
    is_active: bool
    created_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class BlockedPeriodCheck(BaseModel):
    entity_id: int
    role_title: Optional[str] = None
    start_date: datetime


class BlockedPeriodCheckResult(BaseModel):
    blocked: bool
    reason: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    job_role: Optional[str] = None
