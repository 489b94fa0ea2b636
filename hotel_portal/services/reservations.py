"""
Reservation lifecycle: create, update and delete reservations together with the
room status changes they imply.

Each operation runs in a single transaction. The room row is locked before the
availability check so that two concurrent bookings of the same room serialize
(SELECT ... FOR UPDATE on PostgreSQL, BEGIN IMMEDIATE on SQLite, see db.py).
Notifications are sent after commit.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..errors import BookingConflict, NotFound, ValidationFailed
from ..models import Reservation, ReservationStatus, Room, RoomStatus, User
from ..models.reservation import ACTIVE_STATUSES, BLOCKING_STATUSES, CLOSED_STATUSES
from ..models.room import UNBOOKABLE_STATUSES
from . import notifications
from .availability import find_conflicts

logger = logging.getLogger(__name__)


def _lock_room(db: Session, room_id: int) -> Optional[Room]:
    return db.query(Room).filter(Room.id == room_id).with_for_update().one_or_none()


def _load_parties(db: Session, user_id: int, room_id: int, check_in: date, check_out: date) -> tuple[User, Room]:
    errors: dict[str, str] = {}
    if check_in >= check_out:
        errors["checkOut"] = "Check-out date must be after check-in date"
    user = db.get(User, user_id)
    if user is None:
        errors["userId"] = f"User with ID {user_id} not found"
    room = _lock_room(db, room_id)
    if room is None:
        errors["roomId"] = f"Room with ID {room_id} not found"
    if errors:
        raise ValidationFailed(errors)
    return user, room


def _ensure_bookable(room: Room) -> None:
    if room.status in UNBOOKABLE_STATUSES:
        reason = f"Room is currently under {room.status.value.lower()}"
        raise ValidationFailed({"roomId": reason}, message=reason)


def _release_room(db: Session, room_id: int, reservation_id: int, holding_statuses) -> None:
    """Revert an occupied room to AVAILABLE when no other reservation in `holding_statuses` holds it."""
    others = (
        db.query(func.count(Reservation.id))
        .filter(
            Reservation.room_id == room_id,
            Reservation.id != reservation_id,
            Reservation.status.in_(holding_statuses),
        )
        .scalar()
    )
    room = db.get(Room, room_id)
    if room is not None and not others and room.status == RoomStatus.OCCUPIED:
        room.mark_available()
        logger.info("Room %s released", room.number)


def list_all(db: Session) -> list[Reservation]:
    return db.query(Reservation).order_by(Reservation.created_at.desc(), Reservation.id.desc()).all()


def get(db: Session, reservation_id: int) -> Reservation:
    reservation = db.get(Reservation, reservation_id)
    if reservation is None:
        raise NotFound("Reservation not found")
    return reservation


def create(
    db: Session,
    user_id: int,
    room_id: int,
    check_in: date,
    check_out: date,
    status: ReservationStatus = ReservationStatus.PENDING,
) -> Reservation:
    status = ReservationStatus(status)
    try:
        user, room = _load_parties(db, user_id, room_id, check_in, check_out)
        _ensure_bookable(room)
        conflicts = find_conflicts(db, room.id, check_in, check_out)
        if conflicts:
            raise BookingConflict(conflicts)

        reservation = Reservation(user_id=user.id, room_id=room.id, check_in=check_in, check_out=check_out, status=status)
        db.add(reservation)
        if status in BLOCKING_STATUSES:
            room.mark_occupied()
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(reservation)
    logger.info("Reservation %s created for room %s (%s)", reservation.id, room.number, status.value)
    if status is ReservationStatus.CONFIRMED:
        notifications.notify_booking_confirmed(db, reservation.user_id, reservation.id, room.number, reservation.check_in)
    else:
        notifications.notify_new_booking(db, reservation.user_id, reservation.id, room.number, reservation.check_in, reservation.check_out)
    return reservation


def update(db: Session, reservation_id: int, fields: dict) -> Reservation:
    """
    Apply a partial update. `fields` may carry user_id, room_id, check_in,
    check_out and status; missing or None values keep the current ones.
    """
    reservation = get(db, reservation_id)
    previous_status = reservation.status
    previous_room_id = reservation.room_id

    def pick(key):
        value = fields.get(key)
        return getattr(reservation, key) if value is None else value

    user_id, room_id = pick("user_id"), pick("room_id")
    check_in, check_out = pick("check_in"), pick("check_out")
    status = ReservationStatus(pick("status"))

    try:
        user, room = _load_parties(db, user_id, room_id, check_in, check_out)
        room_changed = room.id != previous_room_id
        if room_changed or (status in BLOCKING_STATUSES and previous_status not in BLOCKING_STATUSES):
            _ensure_bookable(room)
        if status not in CLOSED_STATUSES:
            conflicts = find_conflicts(db, room.id, check_in, check_out, exclude_reservation_id=reservation.id)
            if conflicts:
                raise BookingConflict(conflicts)

        reservation.user_id = user.id
        reservation.room_id = room.id
        reservation.check_in = check_in
        reservation.check_out = check_out
        reservation.status = status
        db.flush()

        if previous_status is ReservationStatus.CHECKED_IN and status is not ReservationStatus.CHECKED_IN:
            _release_room(db, previous_room_id, reservation.id, (ReservationStatus.CHECKED_IN,))
        elif room_changed:
            _release_room(db, previous_room_id, reservation.id, ACTIVE_STATUSES)
        if status in BLOCKING_STATUSES:
            room.mark_occupied()
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(reservation)
    logger.info("Reservation %s updated (%s -> %s)", reservation.id, previous_status.value, status.value)
    if status is ReservationStatus.CONFIRMED and previous_status is not ReservationStatus.CONFIRMED:
        notifications.notify_booking_confirmed(db, reservation.user_id, reservation.id, room.number, reservation.check_in)
    return reservation


def remove(db: Session, reservation_id: int) -> None:
    """Hard delete. A room held by the deleted reservation is released when nothing else holds it."""
    reservation = get(db, reservation_id)
    room_id = reservation.room_id
    held_room = reservation.status in BLOCKING_STATUSES
    try:
        db.delete(reservation)
        db.flush()
        if held_room:
            _release_room(db, room_id, reservation_id, ACTIVE_STATUSES)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Reservation %s deleted", reservation_id)
