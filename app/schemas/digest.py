"""
Digest (scheduled email summary) and email template schemas
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from app.services.digest_windows import DigestType


class DigestPreviewRequest(BaseModel):
    type: DigestType
    today: Optional[date] = Field(None, description="Override 'today' (business timezone)")


class RecipientOut(BaseModel):
    email: str
    name: Optional[str] = None
    count: int
    entity_names: List[str]


class DigestPreviewOut(BaseModel):
    type: DigestType
    window_start: datetime
    window_end: datetime
    starter_count: int
    recipients: List[RecipientOut]


class DigestSendResult(BaseModel):
    type: DigestType
    sent: int
    failed: int
    recipients: int


class EmailTemplateUpsert(BaseModel):
    subject: str = Field(..., min_length=1, max_length=300)
    body: str = Field(..., min_length=1)
    description: Optional[str] = None
    is_active: bool = True


class EmailTemplateOut(BaseModel):
    id: Optional[int] = None
    type: DigestType
    subject: str
    body: str
    description: Optional[str] = None
    is_active: bool
    is_default: bool = False

    model_config = ConfigDict(from_attributes=True)
