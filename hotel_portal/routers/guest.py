from typing import List, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from ..errors import NotFound, ValidationFailed
from ..models import User, Reservation, Invoice, MenuItem, ServiceRequest, RequestStatus, Notification
from ..schemas import (
    GuestDashboardOut, GuestBookingOut, InvoiceOut, RequestOut, RequestCreateIn,
    MenuItemOut, NotificationOut, MessageOut,
)
from ..security import require_guest
from ..services import notifications
from ..services.dashboard import guest_summary

router = APIRouter(prefix="/api/guest", tags=["guest"])


@router.get("/dashboard", response_model=GuestDashboardOut)
def guest_dashboard(db: Session = Depends(get_db), user: User = Depends(require_guest)):
    return guest_summary(db, user)


@router.get("/bookings", response_model=List[GuestBookingOut])
def guest_bookings(db: Session = Depends(get_db), user: User = Depends(require_guest)):
    bookings = (
        db.query(Reservation)
        .options(joinedload(Reservation.room))
        .filter(Reservation.user_id == user.id)
        .order_by(Reservation.check_in.desc())
        .all()
    )
    return [
        {
            "id": b.id,
            "room": f"{b.room.number} • {b.room.type}",
            "check_in": b.check_in,
            "check_out": b.check_out,
            "status": b.status,
        }
        for b in bookings
    ]


@router.get("/payments", response_model=List[InvoiceOut])
def guest_payments(db: Session = Depends(get_db), user: User = Depends(require_guest)):
    return db.query(Invoice).filter(Invoice.user_id == user.id).order_by(Invoice.created_at.desc()).all()


@router.get("/requests", response_model=List[RequestOut])
def guest_requests(db: Session = Depends(get_db), user: User = Depends(require_guest)):
    return (
        db.query(ServiceRequest)
        .options(joinedload(ServiceRequest.menu_item))
        .filter(ServiceRequest.user_id == user.id)
        .order_by(ServiceRequest.created_at.desc())
        .all()
    )


@router.post("/requests", response_model=RequestOut, status_code=201)
def guest_create_request(payload: RequestCreateIn, db: Session = Depends(get_db), user: User = Depends(require_guest)):
    item = db.get(MenuItem, payload.menu_item_id)
    if not item:
        raise ValidationFailed({"menuItemId": "Menu item not found"}, message="Menu item not found")
    if not item.available:
        raise ValidationFailed({"menuItemId": "Menu item is not available"}, message="Menu item is not available")

    req = ServiceRequest(
        user_id=user.id,
        menu_item_id=item.id,
        quantity=payload.quantity,
        special_instructions=payload.special_instructions,
        status=RequestStatus.PENDING,
    )
    db.add(req)
    db.commit()
    db.refresh(req)
    notifications.notify_admin_new_order(db, user.name, item.name, req.quantity, req.id)
    return req


@router.get("/menu", response_model=Dict[str, List[MenuItemOut]])
def guest_menu(db: Session = Depends(get_db), user: User = Depends(require_guest)):
    """Available menu items grouped by category."""
    items = (
        db.query(MenuItem)
        .filter(MenuItem.available == True)
        .order_by(MenuItem.category.asc(), MenuItem.name.asc())
        .all()
    )
    grouped: dict[str, list[MenuItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


# ==== Notifications ====

def _own_notifications(db: Session, user: User):
    return db.query(Notification).filter(Notification.user_id == user.id)


@router.get("/notifications", response_model=List[NotificationOut])
def guest_notifications(db: Session = Depends(get_db), user: User = Depends(require_guest)):
    return _own_notifications(db, user).order_by(Notification.created_at.desc(), Notification.id.desc()).all()


@router.put("/notifications/read-all", response_model=MessageOut)
def guest_read_all(db: Session = Depends(get_db), user: User = Depends(require_guest)):
    _own_notifications(db, user).filter(Notification.is_read == False).update(
        {Notification.is_read: True}, synchronize_session=False
    )
    db.commit()
    return {"message": "All notifications marked as read"}


@router.put("/notifications/{notification_id}/read", response_model=MessageOut)
def guest_read_notification(notification_id: int, db: Session = Depends(get_db), user: User = Depends(require_guest)):
    updated = (
        _own_notifications(db, user)
        .filter(Notification.id == notification_id)
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    if not updated:
        raise NotFound("Notification not found")
    db.commit()
    return {"message": "Notification marked as read"}


@router.delete("/notifications/{notification_id}", response_model=MessageOut)
def guest_delete_notification(notification_id: int, db: Session = Depends(get_db), user: User = Depends(require_guest)):
    deleted = _own_notifications(db, user).filter(Notification.id == notification_id).delete(synchronize_session=False)
    if not deleted:
        raise NotFound("Notification not found")
    db.commit()
    return {"message": "Notification deleted successfully"}


@router.delete("/notifications", response_model=MessageOut)
def guest_clear_notifications(db: Session = Depends(get_db), user: User = Depends(require_guest)):
    _own_notifications(db, user).delete(synchronize_session=False)
    db.commit()
    return {"message": "All notifications deleted successfully"}
