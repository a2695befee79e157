"""
System settings schemas
"""
from typing import Dict, Optional
from pydantic import BaseModel, Field


class SettingsSnapshotOut(BaseModel):
    version: int
    values: Dict[str, Optional[str]]


class SettingSet(BaseModel):
    key: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z0-9_.\-]+$")
    value: Optional[str] = None
