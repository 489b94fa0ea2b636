from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..db import get_db
from ..errors import ValidationFailed
from ..models import User
from ..schemas import ReservationCreateIn, ReservationUpdateIn, ReservationOut, ReservationOptionsOut
from ..security import require_admin
from ..services import reservations
from ..services.availability import list_available_rooms

router = APIRouter(prefix="/api/admin/reservations", tags=["admin-reservations"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[ReservationOut])
def reservations_index(db: Session = Depends(get_db)):
    return reservations.list_all(db)


@router.get("/options", response_model=ReservationOptionsOut)
def reservations_options(
    check_in: Optional[date] = Query(default=None, alias="checkIn"),
    check_out: Optional[date] = Query(default=None, alias="checkOut"),
    db: Session = Depends(get_db),
):
    """Dropdown data for the booking form: active users and rooms free for the dates."""
    check_in = check_in or date.today()
    check_out = check_out or check_in + timedelta(days=1)
    if check_in >= check_out:
        raise ValidationFailed({"checkOut": "Check-out date must be after check-in date"})
    users = db.query(User).filter(User.is_active == True).order_by(User.name.asc()).all()
    return {
        "users": users,
        "rooms": list_available_rooms(db, check_in, check_out),
        "check_in": check_in,
        "check_out": check_out,
    }


@router.get("/{reservation_id}", response_model=ReservationOut)
def reservations_show(reservation_id: int, db: Session = Depends(get_db)):
    return reservations.get(db, reservation_id)


@router.post("", response_model=ReservationOut, status_code=201)
def reservations_create(payload: ReservationCreateIn, db: Session = Depends(get_db)):
    return reservations.create(
        db,
        user_id=payload.user_id,
        room_id=payload.room_id,
        check_in=payload.check_in,
        check_out=payload.check_out,
        status=payload.status,
    )


@router.put("/{reservation_id}", response_model=ReservationOut)
def reservations_update(reservation_id: int, payload: ReservationUpdateIn, db: Session = Depends(get_db)):
    return reservations.update(db, reservation_id, payload.model_dump(exclude_none=True))


@router.delete("/{reservation_id}", status_code=204)
def reservations_delete(reservation_id: int, db: Session = Depends(get_db)):
    reservations.remove(db, reservation_id)
    return Response(status_code=204)
