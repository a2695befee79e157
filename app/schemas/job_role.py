"""
Job role and material schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_serializer, ConfigDict

from app.schemas.common import ser_utc


class JobRoleCreate(BaseModel):
    entity_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0


class JobRoleUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class JobRoleOut(BaseModel):
    id: int
    entity_id: int
    title: str
    description: Optional[str] = None
    is_active: bool
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class MaterialCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    is_active: bool = True
    sort_order: int = 0


class MaterialUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class MaterialOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool
    sort_order: int

    model_config = ConfigDict(from_attributes=True)


class MaterialWithUsageOut(MaterialOut):
    job_roles_count: int = 0
    starters_count: int = 0


class JobRoleMaterialAdd(BaseModel):
    material_id: int
    is_required: bool = True
    notes: Optional[str] = None


class JobRoleMaterialUpdate(BaseModel):
    is_required: Optional[bool] = None
    notes: Optional[str] = None


class JobRoleMaterialOut(BaseModel):
    id: int
    job_role_id: int
    material_id: int
    is_required: bool
    notes: Optional[str] = None
    material: MaterialOut

    model_config = ConfigDict(from_attributes=True)


class StarterMaterialUpdate(BaseModel):
    is_provided: bool
    notes: Optional[str] = None


class StarterMaterialOut(BaseModel):
    id: int
    starter_id: int
    material_id: int
    is_provided: bool
    provided_at: Optional[datetime] = None
    provided_by: Optional[int] = None
    notes: Optional[str] = None
    material: MaterialOut

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("provided_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return ser_utc(dt)
