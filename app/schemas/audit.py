"""
Audit log schemas
"""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, field_serializer, ConfigDict

from app.schemas.common import ser_utc


class AuditLogOut(BaseModel):
    id: int
    actor_id: Optional[int] = None
    action: str
    target_type: str
    target_id: Optional[int] = None
    meta_json: Optional[Any] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        return ser_utc(dt)
