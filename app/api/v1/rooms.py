"""
Public room listing
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db
from app.schemas.room import RoomWithCountOut
from app.services import room_service

router = APIRouter()


@router.get("", response_model=List[RoomWithCountOut])
async def list_rooms_endpoint(db: Session = Depends(get_db)):
    """Active rooms with their number of confirmed bookings"""
    return room_service.list_active_rooms_with_counts(db)
