"""
Tests for the admin statistics and the guest home summary.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

from hotel_portal.models import Invoice, InvoiceStatus, MenuItem, ReservationStatus, RoomStatus, ServiceRequest
from hotel_portal.services.dashboard import compute_stats, guest_summary, _months_back

NOW = datetime(2024, 6, 15, 12, 0)


def _invoice(db, user, amount, status, created_at=None):
    invoice = Invoice(user_id=user.id, amount=Decimal(amount), status=status, created_at=created_at or NOW)
    db.add(invoice)
    db.commit()
    return invoice


class TestComputeStats:

    def test_empty_hotel(self, db):
        stats = compute_stats(db, now=NOW)
        assert stats["totalRooms"] == 0
        assert stats["occupancyPercent"] == 0
        assert stats["totalPendingAmount"] == 0
        assert stats["monthlyRevenue"] == [0.0] * 6

    def test_room_tally_and_occupancy(self, db, make_room):
        make_room("101", status=RoomStatus.OCCUPIED)
        make_room("102", status=RoomStatus.OCCUPIED)
        make_room("103")
        make_room("104", status=RoomStatus.MAINTENANCE)
        make_room("105", status=RoomStatus.CLEANING)
        make_room("106")

        stats = compute_stats(db, now=NOW)
        assert stats["totalRooms"] == 6
        assert stats["availableRooms"] == 2
        assert stats["occupiedRooms"] == 2
        assert stats["maintenanceRooms"] == 1
        assert stats["cleaningRooms"] == 1
        assert stats["occupancyPercent"] == 33
        assert 0 <= stats["occupancyPercent"] <= 100

    def test_fully_occupied(self, db, make_room):
        make_room("101", status=RoomStatus.OCCUPIED)
        assert compute_stats(db, now=NOW)["occupancyPercent"] == 100

    def test_active_reservations_cover_today(self, db, guest_user, make_room, make_reservation):
        room = make_room()
        today = NOW.date()
        make_reservation(guest_user, room, today - timedelta(days=1), today + timedelta(days=1), ReservationStatus.CONFIRMED)
        make_reservation(guest_user, room, today, today + timedelta(days=2), ReservationStatus.PENDING)
        make_reservation(guest_user, room, today - timedelta(days=3), today, ReservationStatus.CHECKED_IN)
        make_reservation(guest_user, room, today - timedelta(days=3), today + timedelta(days=3), ReservationStatus.CANCELLED)
        make_reservation(guest_user, room, today + timedelta(days=5), today + timedelta(days=6), ReservationStatus.CONFIRMED)

        stats = compute_stats(db, now=NOW)
        assert stats["activeReservations"] == 3
        assert stats["confirmedCount"] == 1
        assert stats["pendingCount"] == 1
        assert stats["checkedInCount"] == 1

    def test_pending_amount_is_unpaid_sum_and_idempotent(self, db, guest_user):
        _invoice(db, guest_user, "100.10", InvoiceStatus.UNPAID)
        _invoice(db, guest_user, "49.95", InvoiceStatus.UNPAID)
        _invoice(db, guest_user, "500.00", InvoiceStatus.PAID)

        first = compute_stats(db, now=NOW)
        second = compute_stats(db, now=NOW)
        assert first["totalPendingAmount"] == 150.05
        assert first["pendingInvoiceCount"] == 2
        assert first["totalInvoices"] == 3
        assert first == second

    def test_menu_item_count(self, db):
        db.add_all([MenuItem(name="Soup", category="Starters", price=Decimal("6")), MenuItem(name="Tea", category="Drinks", price=Decimal("2"))])
        db.commit()
        assert compute_stats(db, now=NOW)["menuItemCount"] == 2

    def test_monthly_revenue_buckets_oldest_first(self, db, guest_user, make_room, make_reservation):
        room = make_room(price="100.00")
        make_reservation(guest_user, room, date(2024, 6, 1), date(2024, 6, 3))
        make_reservation(guest_user, room, date(2024, 6, 10), date(2024, 6, 11), ReservationStatus.CANCELLED)
        make_reservation(guest_user, room, date(2024, 3, 20), date(2024, 3, 22))
        make_reservation(guest_user, room, date(2024, 1, 5), date(2024, 1, 6))
        # Outside the window
        make_reservation(guest_user, room, date(2023, 12, 20), date(2023, 12, 22))

        revenue = compute_stats(db, now=NOW)["monthlyRevenue"]
        assert revenue == [100.0, 0.0, 100.0, 0.0, 0.0, 200.0]


class TestMonthsBack:

    def test_clamps_to_month_end(self):
        assert _months_back(date(2024, 8, 31), 6) == date(2024, 2, 29)

    def test_crosses_year(self):
        assert _months_back(date(2024, 3, 15), 6) == date(2023, 9, 15)


class TestGuestSummary:

    def test_empty(self, db, guest_user):
        summary = guest_summary(db, guest_user, today=date(2024, 6, 12))
        assert summary == {"upcoming_stay": None, "meal_requests": 0, "total_spent": 0.0}

    def test_upcoming_stay_is_next_confirmed(self, db, guest_user, make_room, make_reservation):
        room = make_room("201")
        make_reservation(guest_user, room, date(2024, 6, 1), date(2024, 6, 5))
        make_reservation(guest_user, room, date(2024, 6, 20), date(2024, 6, 23), ReservationStatus.PENDING)
        upcoming = make_reservation(guest_user, room, date(2024, 7, 1), date(2024, 7, 4))
        make_reservation(guest_user, room, date(2024, 8, 1), date(2024, 8, 4))

        summary = guest_summary(db, guest_user, today=date(2024, 6, 12))
        stay = summary["upcoming_stay"]
        assert stay["check_in_date"] == upcoming.check_in
        assert stay["nights"] == 3
        assert stay["room"].number == "201"

    def test_meal_requests_this_week_and_spend_this_month(self, db, guest_user):
        # Wednesday; the week runs Sunday 2024-06-09 to Saturday 2024-06-15
        today = date(2024, 6, 12)
        for created in (datetime(2024, 6, 9, 8), datetime(2024, 6, 12, 13), datetime(2024, 6, 8, 20)):
            db.add(ServiceRequest(user_id=guest_user.id, quantity=1, created_at=created))
        db.commit()
        _invoice(db, guest_user, "80.00", InvoiceStatus.PAID, datetime(2024, 6, 2))
        _invoice(db, guest_user, "20.50", InvoiceStatus.UNPAID, datetime(2024, 6, 11))
        _invoice(db, guest_user, "999.00", InvoiceStatus.PAID, datetime(2024, 5, 31))

        summary = guest_summary(db, guest_user, today=today)
        assert summary["meal_requests"] == 2
        assert summary["total_spent"] == 100.5
