"""
Booking endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.core.deps import get_db, get_current_user
from app.models.room import BookingStatus
from app.models.user import User
from app.schemas.room import BookingCreate, BookingUpdate, BookingOut
from app.services import booking_service

router = APIRouter()


@router.post("", response_model=BookingOut, status_code=201)
def create_booking_endpoint(
    data: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Book a room

    409 when the slot overlaps a pending/confirmed booking, 502 when the
    calendar sync fails (nothing is kept in that case).
    """
    return booking_service.create_booking(db, current_user, data)


@router.get("", response_model=List[BookingOut])
async def list_my_bookings_endpoint(
    status: Optional[BookingStatus] = Query(None),
    room_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The current user's bookings"""
    return booking_service.list_my_bookings(db, current_user, status_filter=status, room_id=room_id)


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking_endpoint(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return booking_service.get_booking(db, current_user, booking_id)


@router.patch("/{booking_id}", response_model=BookingOut)
def update_booking_endpoint(
    booking_id: int,
    data: BookingUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return booking_service.update_booking(db, current_user, booking_id, data)


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking_endpoint(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return booking_service.cancel_booking(db, current_user, booking_id)
