"""
Notification fan-out.

Every notifier writes one row per recipient and commits on its own. Failures
are logged and swallowed: a notification must never fail or roll back the
business operation that triggered it, so callers invoke these only after their
own commit.
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ..models import Notification, NotificationType, User, UserRole, InvoiceStatus, RequestStatus
from . import mail

logger = logging.getLogger(__name__)


def _write(db: Session, user_ids: list[int], title: str, message: str, type_: NotificationType, related_id: Optional[int] = None) -> int:
    rows = [
        Notification(user_id=uid, title=title, message=message, type=type_, related_id=related_id)
        for uid in user_ids
    ]
    db.add_all(rows)
    db.commit()
    return len(rows)


def _user_ids_with_role(db: Session, role: UserRole) -> list[int]:
    return [uid for (uid,) in db.query(User.id).filter(User.role == role).all()]


def _fmt_date(d: date) -> str:
    return f"{d.month}/{d.day}/{d.year}"


def create_notification(db: Session, user_id: int, title: str, message: str, type_: NotificationType, related_id: Optional[int] = None) -> None:
    try:
        _write(db, [user_id], title, message, type_, related_id)
    except Exception:
        db.rollback()
        logger.exception("Failed to create %s notification for user %s", type_.value, user_id)


def notify_booking_confirmed(db: Session, user_id: int, reservation_id: int, room_number: str, check_in: date) -> None:
    create_notification(
        db,
        user_id,
        "Booking Confirmed!",
        f"Your booking for Room {room_number} starting {_fmt_date(check_in)} has been confirmed.",
        NotificationType.BOOKING_CONFIRMED,
        reservation_id,
    )


def notify_new_booking(db: Session, user_id: int, reservation_id: int, room_number: str, check_in: date, check_out: date) -> None:
    create_notification(
        db,
        user_id,
        "Booking Created!",
        f"Your booking for Room {room_number} from {_fmt_date(check_in)} to {_fmt_date(check_out)} "
        "has been created and is pending confirmation.",
        NotificationType.BOOKING_CONFIRMED,
        reservation_id,
    )


_REQUEST_MESSAGES = {
    RequestStatus.CONFIRMED: ("Request Confirmed!", 'Your request for "{item}" has been confirmed and is being prepared.'),
    RequestStatus.COMPLETED: ("Request Completed!", 'Your request for "{item}" has been completed and is ready!'),
    RequestStatus.CANCELLED: ("Request Cancelled", 'Your request for "{item}" has been cancelled. Please contact us if you have questions.'),
}


def notify_request_status_change(db: Session, user_id: int, request_id: int, new_status: RequestStatus, menu_item_name: str) -> None:
    if new_status not in _REQUEST_MESSAGES:
        return
    title, template = _REQUEST_MESSAGES[new_status]
    create_notification(db, user_id, title, template.format(item=menu_item_name), NotificationType.REQUEST_STATUS, request_id)


_PAYMENT_MESSAGES = {
    InvoiceStatus.PAID: ("Payment Received!", "Your payment of ${amount:.2f} has been successfully processed."),
    InvoiceStatus.UNPAID: ("Payment Due", "You have an outstanding payment of ${amount:.2f}. Please settle your bill."),
}


def notify_payment_update(db: Session, user_id: int, invoice_id: int, amount: float, status: InvoiceStatus) -> None:
    if status not in _PAYMENT_MESSAGES:
        return
    title, template = _PAYMENT_MESSAGES[status]
    create_notification(db, user_id, title, template.format(amount=float(amount)), NotificationType.PAYMENT_UPDATE, invoice_id)


def notify_menu_update(db: Session, menu_item_name: str, is_new_item: bool = False) -> None:
    """Tell every guest about a new or changed menu item."""
    if is_new_item:
        title = "New Menu Item Added!"
        message = f'New item "{menu_item_name}" has been added to our menu. Check it out!'
    else:
        title = "Menu Item Updated!"
        message = f'"{menu_item_name}" has been updated. Check out the changes!'
    try:
        count = _write(db, _user_ids_with_role(db, UserRole.GUEST), title, message, NotificationType.MENU_UPDATE)
        logger.info("Created menu update notifications for %d guests", count)
    except Exception:
        db.rollback()
        logger.exception("Failed to create menu update notifications")


def notify_admin_new_order(db: Session, guest_name: str, menu_item_name: str, quantity: int, request_id: int) -> None:
    """Tell every admin about a new guest food order, and e-mail the front desk if configured."""
    title = "New Food Order!"
    message = f'{guest_name} has ordered {quantity}x "{menu_item_name}". Please review and confirm the request.'
    try:
        count = _write(db, _user_ids_with_role(db, UserRole.ADMIN), title, message, NotificationType.NEW_ORDER, request_id)
        logger.info("Created new order notifications for %d admins", count)
    except Exception:
        db.rollback()
        logger.exception("Failed to create new order notifications for admins")
    mail.send_admin_order_email(title, message)
