from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..db import get_db
from ..errors import NotFound
from ..models import User, Notification, Reservation
from ..schemas import NotificationOut, MessageOut
from ..security import require_admin
from ..services import reporting
from ..services.dashboard import compute_stats

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats")
def admin_stats(db: Session = Depends(get_db)):
    return compute_stats(db)


# ==== Notifications addressed to the signed-in admin ====

@router.get("/notifications", response_model=List[NotificationOut])
def admin_notifications(db: Session = Depends(get_db), admin_user: User = Depends(require_admin)):
    return (
        db.query(Notification)
        .filter(Notification.user_id == admin_user.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


@router.put("/notifications/read-all", response_model=MessageOut)
def admin_read_all(db: Session = Depends(get_db), admin_user: User = Depends(require_admin)):
    (
        db.query(Notification)
        .filter(Notification.user_id == admin_user.id, Notification.is_read == False)
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return {"message": "All notifications marked as read"}


@router.put("/notifications/{notification_id}/read", response_model=MessageOut)
def admin_read_notification(notification_id: int, db: Session = Depends(get_db), admin_user: User = Depends(require_admin)):
    updated = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == admin_user.id)
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    if not updated:
        raise NotFound("Notification not found")
    db.commit()
    return {"message": "Notification marked as read"}


@router.delete("/notifications/{notification_id}", response_model=MessageOut)
def admin_delete_notification(notification_id: int, db: Session = Depends(get_db), admin_user: User = Depends(require_admin)):
    deleted = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == admin_user.id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        raise NotFound("Notification not found")
    db.commit()
    return {"message": "Notification deleted successfully"}


@router.delete("/notifications", response_model=MessageOut)
def admin_clear_notifications(db: Session = Depends(get_db), admin_user: User = Depends(require_admin)):
    db.query(Notification).filter(Notification.user_id == admin_user.id).delete(synchronize_session=False)
    db.commit()
    return {"message": "All notifications deleted successfully"}


# ==== Reports ====

def _report_rows(db: Session, start: Optional[date], end: Optional[date]) -> list[Reservation]:
    q = db.query(Reservation).options(joinedload(Reservation.user), joinedload(Reservation.room))
    if start:
        q = q.filter(Reservation.check_out > start)
    if end:
        q = q.filter(Reservation.check_in < end)
    return q.order_by(Reservation.check_in.asc()).all()


@router.get("/reports/reservations.csv")
def admin_report_csv(start: Optional[date] = None, end: Optional[date] = None, db: Session = Depends(get_db)):
    body = reporting.generate_csv_report(_report_rows(db, start, end))
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="reservations.csv"'},
    )


@router.get("/reports/reservations.pdf")
def admin_report_pdf(start: Optional[date] = None, end: Optional[date] = None, db: Session = Depends(get_db)):
    body = reporting.generate_pdf_report(_report_rows(db, start, end), settings.APP_NAME, start, end)
    return Response(
        content=body,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="reservations.pdf"'},
    )
