"""
Room administration
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.deps import get_db, require_admin
from app.models.user import User
from app.schemas.room import RoomCreate, RoomUpdate, RoomOut
from app.services import room_service

router = APIRouter()


@router.get("", response_model=List[RoomOut])
async def list_rooms_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """All rooms, including inactive ones"""
    return room_service.list_rooms(db, include_inactive=True)


@router.post("", response_model=RoomOut, status_code=201)
async def create_room_endpoint(
    data: RoomCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return room_service.create_room(db, data, current_user.id)


@router.patch("/{room_id}", response_model=RoomOut)
async def update_room_endpoint(
    room_id: int,
    data: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    return room_service.update_room(db, room_id, data, current_user.id)


@router.delete("/{room_id}", status_code=204)
async def delete_room_endpoint(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """409 with active_bookings_count while pending/confirmed bookings exist"""
    room_service.delete_room(db, room_id, current_user.id)
    return None
