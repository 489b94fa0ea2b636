"""
Tests for the reservation lifecycle: validation, conflicts and room status side effects.
"""

from datetime import date

import pytest

from hotel_portal.errors import BookingConflict, NotFound, ValidationFailed
from hotel_portal.models import Notification, Reservation, ReservationStatus, RoomStatus
from hotel_portal.services import reservations


def _confirmed_notifications(db, user_id):
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.title == "Booking Confirmed!")
        .all()
    )


class TestCreateValidation:
    """Input checks that run before any conflict detection."""

    @pytest.mark.parametrize("check_in,check_out", [
        (date(2024, 3, 5), date(2024, 3, 5)),
        (date(2024, 3, 6), date(2024, 3, 5)),
    ])
    def test_check_out_must_follow_check_in(self, db, guest_user, make_room, check_in, check_out):
        room = make_room()
        with pytest.raises(ValidationFailed) as exc:
            reservations.create(db, guest_user.id, room.id, check_in, check_out, ReservationStatus.CONFIRMED)
        assert "checkOut" in exc.value.errors
        assert db.query(Reservation).count() == 0

    def test_invalid_dates_fail_even_when_room_is_free_of_conflicts(self, db, guest_user, make_room, make_reservation):
        room = make_room()
        make_reservation(guest_user, room, date(2024, 1, 1), date(2024, 1, 3))
        with pytest.raises(ValidationFailed):
            reservations.create(db, guest_user.id, room.id, date(2024, 6, 2), date(2024, 6, 1))

    def test_unknown_user_and_room_are_reported_together(self, db):
        with pytest.raises(ValidationFailed) as exc:
            reservations.create(db, 999, 888, date(2024, 3, 1), date(2024, 3, 2))
        assert set(exc.value.errors) == {"userId", "roomId"}

    @pytest.mark.parametrize("status", [RoomStatus.MAINTENANCE, RoomStatus.CLEANING])
    def test_out_of_service_room_is_rejected(self, db, guest_user, make_room, status):
        room = make_room(status=status)
        with pytest.raises(ValidationFailed) as exc:
            reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 2))
        assert exc.value.message == f"Room is currently under {status.value.lower()}"


class TestCreateConflicts:
    """Double booking of a room is refused, back-to-back stays are not."""

    def test_overlapping_stay_is_refused_with_conflicts_attached(self, db, guest_user, make_user, make_room):
        room = make_room("101")
        first = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 5), ReservationStatus.CONFIRMED)
        other = make_user()

        with pytest.raises(BookingConflict) as exc:
            reservations.create(db, other.id, room.id, date(2024, 3, 3), date(2024, 3, 6))

        conflicts = exc.value.payload()["conflictingReservations"]
        assert [c["id"] for c in conflicts] == [first.id]
        assert conflicts[0]["checkIn"] == "2024-03-01"
        assert conflicts[0]["checkOut"] == "2024-03-05"
        assert db.query(Reservation).count() == 1

    def test_stay_starting_on_prior_checkout_is_accepted(self, db, guest_user, make_room):
        room = make_room("101")
        reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 5), ReservationStatus.CONFIRMED)
        second = reservations.create(db, guest_user.id, room.id, date(2024, 3, 5), date(2024, 3, 8))
        assert second.id is not None
        assert second.status is ReservationStatus.PENDING

    def test_refused_booking_leaves_room_untouched(self, db, guest_user, make_room, make_reservation):
        room = make_room("101")
        make_reservation(guest_user, room, date(2024, 3, 1), date(2024, 3, 5), ReservationStatus.CONFIRMED)
        with pytest.raises(BookingConflict):
            reservations.create(db, guest_user.id, room.id, date(2024, 3, 2), date(2024, 3, 3), ReservationStatus.CONFIRMED)
        db.refresh(room)
        assert room.status is RoomStatus.AVAILABLE


class TestCreateRoomStatus:
    """Room status follows the status a reservation is created with."""

    @pytest.mark.parametrize("status", [ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN])
    def test_blocking_status_occupies_room(self, db, guest_user, make_room, status):
        room = make_room()
        reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 2), status)
        db.refresh(room)
        assert room.status is RoomStatus.OCCUPIED
        assert room.available is False

    def test_pending_leaves_room_available(self, db, guest_user, make_room):
        room = make_room()
        reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 2))
        db.refresh(room)
        assert room.status is RoomStatus.AVAILABLE

    def test_confirmed_create_notifies_guest(self, db, guest_user, make_room):
        room = make_room()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 2), ReservationStatus.CONFIRMED)
        rows = _confirmed_notifications(db, guest_user.id)
        assert len(rows) == 1
        assert rows[0].related_id == reservation.id

    def test_pending_create_sends_booking_created(self, db, guest_user, make_room):
        room = make_room()
        reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 2))
        titles = [n.title for n in db.query(Notification).filter(Notification.user_id == guest_user.id)]
        assert titles == ["Booking Created!"]


class TestUpdate:
    """Status transitions and reassignments."""

    def test_pending_to_confirmed_occupies_room_and_notifies(self, db, guest_user, make_room):
        room = make_room("101")
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4))

        reservations.update(db, reservation.id, {"status": ReservationStatus.CONFIRMED})

        db.refresh(room)
        assert room.status is RoomStatus.OCCUPIED
        rows = _confirmed_notifications(db, guest_user.id)
        assert [n.related_id for n in rows] == [reservation.id]
        assert "Room 101" in rows[0].message

    def test_confirmed_to_confirmed_does_not_notify_again(self, db, guest_user, make_room):
        room = make_room()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4), ReservationStatus.CONFIRMED)
        reservations.update(db, reservation.id, {"check_out": date(2024, 3, 5)})
        assert len(_confirmed_notifications(db, guest_user.id)) == 1

    def test_checked_in_to_cancelled_releases_room(self, db, guest_user, make_room):
        room = make_room()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4), ReservationStatus.CHECKED_IN)

        reservations.update(db, reservation.id, {"status": ReservationStatus.CANCELLED})

        db.refresh(room)
        assert room.status is RoomStatus.AVAILABLE
        assert room.available is True

    def test_checked_in_to_completed_keeps_room_held_by_another_guest(self, db, guest_user, make_user, make_room, make_reservation):
        room = make_room()
        other = make_user()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4), ReservationStatus.CHECKED_IN)
        make_reservation(other, room, date(2024, 3, 10), date(2024, 3, 12), ReservationStatus.CHECKED_IN)

        reservations.update(db, reservation.id, {"status": ReservationStatus.COMPLETED})

        db.refresh(room)
        assert room.status is RoomStatus.OCCUPIED

    def test_release_does_not_override_maintenance(self, db, guest_user, make_room):
        room = make_room()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4), ReservationStatus.CHECKED_IN)
        room.status = RoomStatus.MAINTENANCE
        db.commit()

        reservations.update(db, reservation.id, {"status": ReservationStatus.COMPLETED})

        db.refresh(room)
        assert room.status is RoomStatus.MAINTENANCE

    @pytest.mark.parametrize("blocked", [RoomStatus.MAINTENANCE, RoomStatus.CLEANING])
    @pytest.mark.parametrize("target", [ReservationStatus.CONFIRMED, ReservationStatus.CHECKED_IN])
    def test_confirming_on_blocked_room_is_refused(self, db, guest_user, make_room, blocked, target):
        room = make_room()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4))
        room.status = blocked
        db.commit()

        with pytest.raises(ValidationFailed) as exc:
            reservations.update(db, reservation.id, {"status": target})

        assert "roomId" in exc.value.errors
        db.refresh(room)
        db.refresh(reservation)
        assert room.status is blocked
        assert reservation.status is ReservationStatus.PENDING

    def test_already_confirmed_stay_survives_maintenance(self, db, guest_user, make_room):
        room = make_room()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4), ReservationStatus.CONFIRMED)
        room.status = RoomStatus.MAINTENANCE
        db.commit()

        reservations.update(db, reservation.id, {"check_out": date(2024, 3, 5)})

        db.refresh(room)
        assert room.status is RoomStatus.MAINTENANCE

    def test_mark_occupied_keeps_unbookable_status(self, make_room):
        room = make_room(status=RoomStatus.CLEANING)
        room.mark_occupied()
        assert room.status is RoomStatus.CLEANING

    def test_update_into_conflict_is_refused(self, db, guest_user, make_room):
        room = make_room()
        reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 5), ReservationStatus.CONFIRMED)
        later = reservations.create(db, guest_user.id, room.id, date(2024, 3, 5), date(2024, 3, 8), ReservationStatus.CONFIRMED)

        with pytest.raises(BookingConflict):
            reservations.update(db, later.id, {"check_in": date(2024, 3, 4)})

        db.refresh(later)
        assert later.check_in == date(2024, 3, 5)

    def test_closing_a_reservation_skips_conflict_check(self, db, guest_user, make_room, make_reservation):
        room = make_room()
        make_reservation(guest_user, room, date(2024, 3, 1), date(2024, 3, 5), ReservationStatus.CONFIRMED)
        clash = make_reservation(guest_user, room, date(2024, 3, 2), date(2024, 3, 4), ReservationStatus.CONFIRMED)

        updated = reservations.update(db, clash.id, {"status": ReservationStatus.CANCELLED})
        assert updated.status is ReservationStatus.CANCELLED

    def test_invalid_dates_on_update(self, db, guest_user, make_room):
        room = make_room()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4))
        with pytest.raises(ValidationFailed) as exc:
            reservations.update(db, reservation.id, {"check_out": date(2024, 3, 1)})
        assert "checkOut" in exc.value.errors

    def test_moving_to_another_room_releases_the_old_one(self, db, guest_user, make_room):
        old_room = make_room("101")
        new_room = make_room("102")
        reservation = reservations.create(db, guest_user.id, old_room.id, date(2024, 3, 1), date(2024, 3, 4), ReservationStatus.CONFIRMED)

        reservations.update(db, reservation.id, {"room_id": new_room.id})

        db.refresh(old_room)
        db.refresh(new_room)
        assert old_room.status is RoomStatus.AVAILABLE
        assert new_room.status is RoomStatus.OCCUPIED

    def test_moving_to_room_under_maintenance_is_refused(self, db, guest_user, make_room):
        room = make_room("101")
        broken = make_room("102", status=RoomStatus.MAINTENANCE)
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4))
        with pytest.raises(ValidationFailed):
            reservations.update(db, reservation.id, {"room_id": broken.id})

    def test_unknown_reservation(self, db):
        with pytest.raises(NotFound):
            reservations.update(db, 404, {"status": ReservationStatus.CONFIRMED})


class TestRemove:
    """Hard delete."""

    def test_deleting_the_only_holder_releases_room(self, db, guest_user, make_room):
        room = make_room()
        reservation = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4), ReservationStatus.CONFIRMED)

        reservations.remove(db, reservation.id)

        db.refresh(room)
        assert room.status is RoomStatus.AVAILABLE
        assert db.get(Reservation, reservation.id) is None

    def test_deleting_pending_leaves_room_alone(self, db, guest_user, make_room):
        room = make_room()
        holder = reservations.create(db, guest_user.id, room.id, date(2024, 3, 1), date(2024, 3, 4), ReservationStatus.CONFIRMED)
        pending = reservations.create(db, guest_user.id, room.id, date(2024, 3, 10), date(2024, 3, 12))

        reservations.remove(db, pending.id)

        db.refresh(room)
        assert room.status is RoomStatus.OCCUPIED
        assert db.get(Reservation, holder.id) is not None

    def test_unknown_reservation(self, db):
        with pytest.raises(NotFound):
            reservations.remove(db, 404)
