from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import NotFound, ValidationFailed
from ..models import Room, RoomStatus, Reservation
from ..models.reservation import BLOCKING_STATUSES
from ..schemas import RoomIn, RoomUpdateIn, RoomOut, RoomDetailOut, RoomBrief, ConflictOut
from ..security import require_admin
from ..services.availability import list_available_rooms

router = APIRouter(prefix="/api/admin/rooms", tags=["admin-rooms"], dependencies=[Depends(require_admin)])


def _get_room(db: Session, room_id: int) -> Room:
    room = db.get(Room, room_id)
    if not room:
        raise NotFound("Room not found")
    return room


def _ensure_unique_number(db: Session, number: str, room_id: int | None = None):
    q = db.query(Room).filter(Room.number == number)
    if room_id is not None:
        q = q.filter(Room.id != room_id)
    if q.first():
        raise ValidationFailed({"number": "Room number already exists"}, message="Room number already exists")


@router.get("", response_model=List[RoomOut])
def rooms_index(db: Session = Depends(get_db)):
    return db.query(Room).order_by(Room.number.asc()).all()


@router.get("/available", response_model=List[RoomBrief])
def rooms_available(check_in: date = Query(alias="checkIn"), check_out: date = Query(alias="checkOut"), db: Session = Depends(get_db)):
    if check_in >= check_out:
        raise ValidationFailed({"checkOut": "Check-out date must be after check-in date"})
    return list_available_rooms(db, check_in, check_out)


@router.get("/{room_id}", response_model=RoomDetailOut)
def rooms_show(room_id: int, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    next_reservation = (
        db.query(Reservation)
        .filter(
            Reservation.room_id == room.id,
            Reservation.status.in_(BLOCKING_STATUSES),
            Reservation.check_out >= date.today(),
        )
        .order_by(Reservation.check_in.asc())
        .first()
    )
    detail = RoomDetailOut.model_validate(room)
    if next_reservation:
        detail.next_reservation = ConflictOut.model_validate(next_reservation)
    return detail


@router.post("", response_model=RoomOut, status_code=201)
def rooms_create(payload: RoomIn, db: Session = Depends(get_db)):
    number = payload.number.strip()
    _ensure_unique_number(db, number)
    room = Room(
        number=number,
        type=payload.type,
        price=payload.price,
        capacity=payload.capacity,
        floor=payload.floor,
        description=payload.description,
        status=payload.status,
        available=payload.available and payload.status == RoomStatus.AVAILABLE,
    )
    room.amenities = payload.amenities
    db.add(room)
    db.commit()
    db.refresh(room)
    return room


@router.put("/{room_id}", response_model=RoomOut)
def rooms_update(room_id: int, payload: RoomUpdateIn, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    if payload.number is not None:
        number = payload.number.strip()
        if not number:
            raise ValidationFailed({"number": "Room number is required"}, message="Room number is required")
        _ensure_unique_number(db, number, room.id)
        room.number = number
    for field in ("type", "price", "capacity", "floor", "description", "status", "available"):
        value = getattr(payload, field)
        if value is not None:
            setattr(room, field, value)
    if payload.amenities is not None:
        room.amenities = payload.amenities
    db.commit()
    db.refresh(room)
    return room


@router.delete("/{room_id}", status_code=204)
def rooms_delete(room_id: int, db: Session = Depends(get_db)):
    room = _get_room(db, room_id)
    db.delete(room)
    db.commit()
    return Response(status_code=204)
