"""
Dashboard statistics schemas
"""
from typing import List
from pydantic import BaseModel


class EntityCount(BaseModel):
    entity_id: int
    entity_name: str
    entity_color: str
    count: int


class YtdStatsOut(BaseModel):
    year: int
    total_ytd: int
    entities: List[EntityCount] = []
