from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..models import Room, RoomStatus, Reservation, ReservationStatus, Invoice, InvoiceStatus, MenuItem, ServiceRequest, User
from ..models.reservation import ACTIVE_STATUSES

REVENUE_MONTHS = 6


def _month_offset(today: date, d: date) -> int:
    return (today.year - d.year) * 12 + today.month - d.month


def _months_back(today: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the month's last day."""
    total = today.year * 12 + (today.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    next_month = date(year + (month // 12), month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return date(year, month, min(today.day, last_day))


def compute_stats(db: Session, now: Optional[datetime] = None) -> dict:
    """
    Admin dashboard figures, recomputed from scratch on every call.

    monthlyRevenue is oldest month first and sums the room's current price for
    every reservation (any status) checking in during that month. It is an
    occupancy-weighted approximation, not invoiced revenue.
    """
    now = now or datetime.now()
    today = now.date()

    # Room status tally
    status_counts = dict(db.query(Room.status, func.count(Room.id)).group_by(Room.status).all())
    total_rooms = sum(status_counts.values())
    occupied_rooms = status_counts.get(RoomStatus.OCCUPIED, 0)

    # Reservations whose stay covers today
    active = (
        db.query(Reservation)
        .filter(
            Reservation.status.in_(ACTIVE_STATUSES),
            Reservation.check_in <= today,
            Reservation.check_out >= today,
        )
        .all()
    )
    by_status: dict[ReservationStatus, int] = {}
    for r in active:
        by_status[r.status] = by_status.get(r.status, 0) + 1

    pending_invoice_count, pending_amount = (
        db.query(func.count(Invoice.id), func.coalesce(func.sum(Invoice.amount), 0))
        .filter(Invoice.status == InvoiceStatus.UNPAID)
        .one()
    )
    total_invoices = db.query(func.count(Invoice.id)).scalar() or 0
    menu_item_count = db.query(func.count(MenuItem.id)).scalar() or 0

    monthly_revenue = [0.0] * REVENUE_MONTHS
    recent = (
        db.query(Reservation)
        .options(joinedload(Reservation.room))
        .filter(Reservation.check_in >= _months_back(today, REVENUE_MONTHS))
        .all()
    )
    for r in recent:
        offset = _month_offset(today, r.check_in)
        if 0 <= offset < REVENUE_MONTHS and r.room is not None:
            monthly_revenue[REVENUE_MONTHS - 1 - offset] += float(r.room.price or 0)

    return {
        "totalRooms": total_rooms,
        "availableRooms": status_counts.get(RoomStatus.AVAILABLE, 0),
        "occupiedRooms": occupied_rooms,
        "maintenanceRooms": status_counts.get(RoomStatus.MAINTENANCE, 0),
        "cleaningRooms": status_counts.get(RoomStatus.CLEANING, 0),
        "occupancyPercent": round(occupied_rooms / total_rooms * 100) if total_rooms else 0,
        "activeReservations": len(active),
        "confirmedCount": by_status.get(ReservationStatus.CONFIRMED, 0),
        "pendingCount": by_status.get(ReservationStatus.PENDING, 0),
        "checkedInCount": by_status.get(ReservationStatus.CHECKED_IN, 0),
        "pendingInvoiceCount": pending_invoice_count,
        "totalInvoices": total_invoices,
        "totalPendingAmount": round(float(pending_amount), 2),
        "menuItemCount": menu_item_count,
        "monthlyRevenue": [round(v, 2) for v in monthly_revenue],
    }


def guest_summary(db: Session, user: User, today: Optional[date] = None) -> dict:
    """Guest home screen: next confirmed stay, this week's meal requests, this month's spend."""
    today = today or date.today()

    upcoming = (
        db.query(Reservation)
        .options(joinedload(Reservation.room))
        .filter(
            Reservation.user_id == user.id,
            Reservation.status == ReservationStatus.CONFIRMED,
            Reservation.check_out >= today,
        )
        .order_by(Reservation.check_in.asc())
        .first()
    )

    # Week starts on Sunday
    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    week_end = week_start + timedelta(days=7)
    meal_requests = (
        db.query(func.count(ServiceRequest.id))
        .filter(
            ServiceRequest.user_id == user.id,
            ServiceRequest.created_at >= datetime.combine(week_start, datetime.min.time()),
            ServiceRequest.created_at < datetime.combine(week_end, datetime.min.time()),
        )
        .scalar()
        or 0
    )

    month_start = today.replace(day=1)
    month_end = (month_start + timedelta(days=32)).replace(day=1)
    total_spent = (
        db.query(func.coalesce(func.sum(Invoice.amount), 0))
        .filter(
            Invoice.user_id == user.id,
            Invoice.created_at >= datetime.combine(month_start, datetime.min.time()),
            Invoice.created_at < datetime.combine(month_end, datetime.min.time()),
        )
        .scalar()
    )

    return {
        "upcoming_stay": {
            "room": upcoming.room,
            "check_in_date": upcoming.check_in,
            "check_out_date": upcoming.check_out,
            "nights": upcoming.nights,
        } if upcoming else None,
        "meal_requests": meal_requests,
        "total_spent": round(float(total_spent or 0), 2),
    }
