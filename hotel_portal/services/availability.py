from datetime import date
from typing import Optional

from sqlalchemy import and_, exists
from sqlalchemy.orm import Session

from ..models import Reservation, Room, RoomStatus
from ..models.reservation import BLOCKING_STATUSES


def overlaps(a_in: date, a_out: date, b_in: date, b_out: date) -> bool:
    """
    Half-open overlap test on [check_in, check_out).
    A stay ending on the day another begins does not overlap it.
    """
    return a_in < b_out and a_out > b_in


def _conflict_clause(check_in: date, check_out: date):
    return and_(
        Reservation.status.in_(BLOCKING_STATUSES),
        Reservation.check_in < check_out,
        Reservation.check_out > check_in,
    )


def find_conflicts(
    db: Session,
    room_id: int,
    check_in: date,
    check_out: date,
    exclude_reservation_id: Optional[int] = None,
) -> list[Reservation]:
    """Confirmed or checked-in reservations on the room that overlap the requested stay."""
    q = db.query(Reservation).filter(Reservation.room_id == room_id, _conflict_clause(check_in, check_out))
    if exclude_reservation_id is not None:
        q = q.filter(Reservation.id != exclude_reservation_id)
    return q.order_by(Reservation.check_in.asc()).all()


def list_available_rooms(db: Session, check_in: date, check_out: date) -> list[Room]:
    """Rooms marked AVAILABLE with no blocking reservation in the requested range."""
    booked = exists().where(Reservation.room_id == Room.id, _conflict_clause(check_in, check_out))
    return (
        db.query(Room)
        .filter(Room.status == RoomStatus.AVAILABLE, ~booked)
        .order_by(Room.number.asc())
        .all()
    )
