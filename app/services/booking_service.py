"""
Booking service - room reservations with calendar sync

Creation is serialized per room: the room row is locked (SELECT ... FOR UPDATE)
for the overlap check and the insert of the PENDING row. PENDING bookings
already block their slot, so the calendar call runs after the commit and ends
in either a confirm or a compensating delete.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.room import Room, Booking, BookingStatus, BLOCKING_STATUSES
from app.models.user import User
from app.schemas.room import BookingCreate, BookingUpdate
from app.services import calendar_client
from app.services.access_service import is_admin
from app.services.audit_service import log_audit
from app.services.calendar_client import CalendarError
from app.services.room_service import get_room_or_404
from app.utils.datetime_utils import ensure_utc, now_utc
from app.utils.enums import enum_to_str

logger = logging.getLogger(__name__)


def _lock_room(db: Session, room_id: int) -> Room:
    """Row lock on the room; held until the surrounding transaction ends"""
    return db.query(Room).filter(Room.id == room_id).with_for_update().one()


def find_overlap(
    db: Session,
    room_id: int,
    start: datetime,
    end: datetime,
    exclude_id: Optional[int] = None
) -> Optional[Booking]:
    """First pending/confirmed booking with existing.start <= end and existing.end >= start"""
    query = db.query(Booking).filter(
        Booking.room_id == room_id,
        Booking.status.in_(BLOCKING_STATUSES),
        Booking.start <= end,
        Booking.end >= start,
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.order_by(Booking.start).first()


def _slot_taken() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Time slot already booked")


def _get_booking_or_404(db: Session, booking_id: int) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking with id {booking_id} not found"
        )
    return booking


def _ensure_owner_or_admin(user: User, booking: Booking) -> None:
    if not (is_admin(user) or booking.user_id == user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted to access this booking")


def _discard_pending(db: Session, booking: Booking, actor_id: int, error: str) -> int:
    """Remove a PENDING booking whose calendar sync did not complete"""
    booking_id = booking.id
    meta = {"room_id": booking.room_id, "start": booking.start, "end": booking.end, "error": error}
    db.delete(booking)
    db.commit()
    log_audit(
        db=db,
        actor_id=actor_id,
        action="BOOKING_SYNC_FAILED",
        target_type="booking",
        target_id=booking_id,
        meta=meta
    )
    return booking_id


def create_booking(db: Session, user: User, data: BookingCreate) -> Booking:
    """
    Reserve a room

    Raises:
        HTTPException: 404/400 for unknown or inactive rooms, 400 for past or
            inverted ranges, 409 when the slot is taken, 502 when the calendar
            sync fails (the pending row is removed again)
    """
    room = get_room_or_404(db, data.room_id)
    if not room.active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Room is not active")

    start = ensure_utc(data.start)
    end = ensure_utc(data.end)
    if start >= end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start must be before end")
    if start < now_utc():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot book in the past")

    calendar = calendar_client.get_calendar_client()
    if calendar is not None and not room.ms_resource_email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Room not linked to a calendar resource")

    # Remote free/busy runs before the room lock is taken
    if calendar is not None:
        try:
            free = calendar.is_slot_free(room.ms_resource_email, start, end)
        except CalendarError as e:
            logger.warning(f"Free/busy lookup for room {room.id} failed, relying on local check: {e}")
            free = True
        if not free:
            raise _slot_taken()

    room = _lock_room(db, room.id)
    if find_overlap(db, room.id, start, end):
        db.rollback()
        raise _slot_taken()

    booking = Booking(
        room_id=room.id,
        user_id=user.id,
        title=data.title.strip(),
        description=data.description,
        start=start,
        end=end,
        status=BookingStatus.PENDING.value,
        external_email=data.external_email,
        created_by=user.id,
        updated_by=user.id,
    )
    db.add(booking)
    db.commit()
    db.refresh(booking)

    if calendar is None:
        booking.status = BookingStatus.CONFIRMED.value
        db.commit()
        db.refresh(booking)
    else:
        try:
            event = calendar.create_event(
                room.ms_resource_email,
                subject=booking.title,
                start=start,
                end=end,
                body=booking.description,
                location=room.name,
                attendees=[booking.external_email] if booking.external_email else [],
            )
        except CalendarError as e:
            booking_id = _discard_pending(db, booking, user.id, str(e))
            logger.error(f"Calendar sync failed for booking {booking_id}, pending booking removed: {e}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to create booking in calendar"
            )
        except Exception as e:
            booking_id = _discard_pending(db, booking, user.id, repr(e))
            logger.exception(f"Unexpected error syncing booking {booking_id}, pending booking removed")
            raise

        booking.status = BookingStatus.CONFIRMED.value
        booking.ms_event_id = event.id
        booking.ms_ical_uid = event.ical_uid
        db.commit()
        db.refresh(booking)

    log_audit(
        db=db,
        actor_id=user.id,
        action="CREATE",
        target_type="booking",
        target_id=booking.id,
        meta={"room_id": room.id, "title": booking.title, "start": start, "end": end, "ms_event_id": booking.ms_event_id}
    )
    return booking


def list_my_bookings(
    db: Session,
    user: User,
    status_filter: Optional[BookingStatus] = None,
    room_id: Optional[int] = None
) -> List[Booking]:
    query = db.query(Booking).filter(Booking.user_id == user.id)
    if status_filter is not None:
        query = query.filter(Booking.status == enum_to_str(status_filter))
    if room_id is not None:
        query = query.filter(Booking.room_id == room_id)
    return query.order_by(Booking.start.desc()).all()


def get_booking(db: Session, user: User, booking_id: int) -> Booking:
    booking = _get_booking_or_404(db, booking_id)
    _ensure_owner_or_admin(user, booking)
    return booking


def update_booking(db: Session, user: User, booking_id: int, data: BookingUpdate) -> Booking:
    """
    Change title/description/time of a booking (owner or admin)

    A new time range is checked against other bookings under the same room lock.
    The external event is patched best-effort.
    """
    booking = _get_booking_or_404(db, booking_id)
    _ensure_owner_or_admin(user, booking)
    if booking.status == BookingStatus.CANCELLED.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Booking is cancelled")

    update_data = data.model_dump(exclude_unset=True)
    new_start = ensure_utc(update_data.get("start") or booking.start)
    new_end = ensure_utc(update_data.get("end") or booking.end)
    time_changed = new_start != ensure_utc(booking.start) or new_end != ensure_utc(booking.end)

    if time_changed:
        if new_start >= new_end:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start must be before end")
        if new_start < now_utc():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot book in the past")
        _lock_room(db, booking.room_id)
        if find_overlap(db, booking.room_id, new_start, new_end, exclude_id=booking.id):
            db.rollback()
            raise _slot_taken()

    old_values = {"title": booking.title, "start": booking.start, "end": booking.end}
    if update_data.get("title"):
        booking.title = update_data["title"].strip()
    if "description" in update_data:
        booking.description = update_data["description"]
    booking.start = new_start
    booking.end = new_end
    booking.updated_by = user.id
    db.commit()
    db.refresh(booking)

    calendar = calendar_client.get_calendar_client()
    if calendar is not None and booking.ms_event_id and booking.room.ms_resource_email:
        try:
            calendar.update_event(
                booking.room.ms_resource_email,
                booking.ms_event_id,
                subject=booking.title,
                start=new_start if time_changed else None,
                end=new_end if time_changed else None,
                body=booking.description,
            )
        except CalendarError as e:
            logger.warning(f"Calendar update for booking {booking.id} failed: {e}")

    log_audit(
        db=db,
        actor_id=user.id,
        action="UPDATE",
        target_type="booking",
        target_id=booking.id,
        meta={"old": old_values, "new": update_data}
    )
    return booking


def cancel_booking(db: Session, user: User, booking_id: int) -> Booking:
    """Cancel a booking (owner or admin); the external event is removed best-effort"""
    booking = _get_booking_or_404(db, booking_id)
    _ensure_owner_or_admin(user, booking)
    if booking.status == BookingStatus.CANCELLED.value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Booking is already cancelled")

    booking.status = BookingStatus.CANCELLED.value
    booking.updated_by = user.id
    db.commit()
    db.refresh(booking)

    calendar = calendar_client.get_calendar_client()
    if calendar is not None and booking.ms_event_id and booking.room.ms_resource_email:
        try:
            calendar.cancel_event(booking.room.ms_resource_email, booking.ms_event_id)
        except CalendarError as e:
            logger.warning(f"Calendar cancel for booking {booking.id} failed: {e}")

    log_audit(
        db=db,
        actor_id=user.id,
        action="CANCEL",
        target_type="booking",
        target_id=booking.id,
        meta={"room_id": booking.room_id, "ms_event_id": booking.ms_event_id}
    )
    return booking
