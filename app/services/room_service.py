"""
Room service - bookable rooms
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.room import Room, Booking, BookingStatus, BLOCKING_STATUSES
from app.schemas.room import RoomCreate, RoomUpdate
from app.services.audit_service import log_audit


def _check_unique_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Room).filter(func.lower(Room.name) == func.lower(name.strip()))
    if exclude_id is not None:
        query = query.filter(Room.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Room with name '{name}' already exists"
        )


def get_room_or_404(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Room with id {room_id} not found"
        )
    return room


def list_rooms(db: Session, include_inactive: bool = False) -> List[Room]:
    query = db.query(Room)
    if not include_inactive:
        query = query.filter(Room.active.is_(True))
    return query.order_by(Room.name).all()


def list_active_rooms_with_counts(db: Session) -> List[Dict[str, Any]]:
    """Active rooms with their number of confirmed bookings"""
    counts = dict(
        db.query(Booking.room_id, func.count(Booking.id)).filter(
            Booking.status == BookingStatus.CONFIRMED.value
        ).group_by(Booking.room_id).all()
    )
    result = []
    for room in list_rooms(db):
        result.append({
            "id": room.id,
            "name": room.name,
            "capacity": room.capacity,
            "location": room.location,
            "ms_resource_email": room.ms_resource_email,
            "hourly_rate_cents": room.hourly_rate_cents,
            "active": room.active,
            "confirmed_bookings_count": counts.get(room.id, 0),
        })
    return result


def create_room(db: Session, data: RoomCreate, actor_id: int) -> Room:
    _check_unique_name(db, data.name)
    room = Room(
        name=data.name.strip(),
        capacity=data.capacity,
        location=data.location,
        ms_resource_email=data.ms_resource_email,
        hourly_rate_cents=data.hourly_rate_cents,
        active=data.active,
    )
    db.add(room)
    db.commit()
    db.refresh(room)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="CREATE",
        target_type="room",
        target_id=room.id,
        meta=data.model_dump()
    )
    return room


def update_room(db: Session, room_id: int, data: RoomUpdate, actor_id: int) -> Room:
    room = get_room_or_404(db, room_id)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("name") is not None:
        _check_unique_name(db, update_data["name"], exclude_id=room_id)
        update_data["name"] = update_data["name"].strip()

    old_values = {field: getattr(room, field) for field in update_data}
    for field, value in update_data.items():
        if value is None and field not in ("location", "ms_resource_email"):
            continue
        setattr(room, field, value)
    db.commit()
    db.refresh(room)

    log_audit(
        db=db,
        actor_id=actor_id,
        action="UPDATE",
        target_type="room",
        target_id=room.id,
        meta={"old": old_values, "new": update_data}
    )
    return room


def delete_room(db: Session, room_id: int, actor_id: int) -> None:
    """
    Raises:
        HTTPException: 409 with active_bookings_count while pending/confirmed bookings exist
    """
    room = get_room_or_404(db, room_id)
    active_count = db.query(Booking).filter(
        Booking.room_id == room_id,
        Booking.status.in_(BLOCKING_STATUSES)
    ).count()
    if active_count:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "Room has active bookings; deactivate it instead",
                "active_bookings_count": active_count,
            }
        )

    name = room.name
    # Cancelled bookings only keep history for this room
    db.query(Booking).filter(Booking.room_id == room_id).delete(synchronize_session=False)
    db.delete(room)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor_id,
        action="DELETE",
        target_type="room",
        target_id=room_id,
        meta={"name": name}
    )
