from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.errors import InvalidStateError, NotFoundError, ValidationError
from app.models.booking import Booking
from app.schemas.booking import BookingCreate
from app.services.booking_lifecycle_service import booking_lifecycle_service, total_pages

PASSENGER_ID = 1001


def _create(db, user_id=PASSENGER_ID, **overrides):
    data = {
        "booking_type": "passenger",
        "travel_date": date(2024, 6, 1),
        "travel_time": "09:00",
        "route": "Likoni - Mtongwe",
        "num_passengers": 2,
    }
    data.update(overrides)
    return booking_lifecycle_service.create_booking(user_id, BookingCreate(**data), db)


def _set(db, booking, **fields):
    db.query(Booking).filter(Booking.id == booking.id).update(fields, synchronize_session=False)
    db.commit()


class TestCreateBooking:

    def test_unpaid_booking_is_pending(self, test_db):
        booking = _create(test_db)

        assert booking.user_id == PASSENGER_ID
        assert booking.payment_status == "pending"
        assert booking.booking_status == "pending"
        assert booking.ferry_name is None

    def test_paid_upfront(self, test_db):
        booking = _create(test_db, amount_paid=Decimal("450"), transaction_id="TX123")

        assert booking.payment_status == "paid"

    @pytest.mark.parametrize("booking_type,missing", [
        ("passenger", "num_passengers"),
        ("vehicle", "vehicle_type"),
        ("cargo", "cargo_description"),
    ])
    def test_type_specific_details_required(self, test_db, booking_type, missing):
        with pytest.raises(ValidationError, match=missing):
            _create(test_db, booking_type=booking_type, num_passengers=None)

    def test_vehicle_booking(self, test_db):
        booking = _create(test_db, booking_type="vehicle", num_passengers=None, vehicle_type="Pickup", vehicle_plate="KDA123A")

        assert booking.booking_type == "vehicle"
        assert booking.vehicle_type == "Pickup"


class TestBookingTransitions:

    def test_finance_flow_to_completion(self, test_db):
        booking = _create(test_db)

        paid, already = booking_lifecycle_service.approve_payment(booking.id, test_db)
        assert (paid.payment_status, already) == ("paid", False)

        approved, _ = booking_lifecycle_service.approve_booking(booking.id, test_db)
        assert approved.booking_status == "approved"

        assigned, _ = booking_lifecycle_service.assign_ferry(booking.id, "MV Likoni", test_db)
        assert (assigned.booking_status, assigned.ferry_name) == ("assigned", "MV Likoni")

        completed, _ = booking_lifecycle_service.complete_booking(booking.id, test_db)
        assert completed.booking_status == "completed"

    def test_repeated_approval_is_already_done(self, test_db):
        booking = _create(test_db)
        booking_lifecycle_service.approve_payment(booking.id, test_db)

        _, already = booking_lifecycle_service.approve_payment(booking.id, test_db)

        assert already is True

    def test_rejected_payment_cannot_be_approved(self, test_db):
        booking = _create(test_db)
        booking_lifecycle_service.reject_payment(booking.id, test_db)

        with pytest.raises(InvalidStateError):
            booking_lifecycle_service.approve_payment(booking.id, test_db)

    def test_assign_requires_approved_booking(self, test_db):
        booking = _create(test_db)

        with pytest.raises(InvalidStateError):
            booking_lifecycle_service.assign_ferry(booking.id, "MV Likoni", test_db)

    def test_assign_requires_ferry_name(self, test_db):
        booking = _create(test_db)

        with pytest.raises(ValidationError):
            booking_lifecycle_service.assign_ferry(booking.id, "  ", test_db)

    def test_reassigning_same_ferry_is_a_no_op(self, test_db):
        booking = _create(test_db)
        _set(test_db, booking, booking_status="approved")
        booking_lifecycle_service.assign_ferry(booking.id, "MV Likoni", test_db)

        _, already = booking_lifecycle_service.assign_ferry(booking.id, "MV Likoni", test_db)
        assert already is True

        with pytest.raises(InvalidStateError, match="MV Likoni"):
            booking_lifecycle_service.assign_ferry(booking.id, "MV Harambee", test_db)

    def test_complete_requires_assignment(self, test_db):
        booking = _create(test_db)

        with pytest.raises(InvalidStateError):
            booking_lifecycle_service.complete_booking(booking.id, test_db)

    def test_missing_booking(self, test_db):
        with pytest.raises(NotFoundError):
            booking_lifecycle_service.approve_booking(999, test_db)


class TestCancelBooking:

    def test_owner_cancels(self, test_db):
        booking = _create(test_db)

        cancelled, already = booking_lifecycle_service.cancel_booking(booking.id, PASSENGER_ID, test_db)

        assert (cancelled.booking_status, already) == ("cancelled", False)

    def test_cancel_twice(self, test_db):
        booking = _create(test_db)
        booking_lifecycle_service.cancel_booking(booking.id, PASSENGER_ID, test_db)

        _, already = booking_lifecycle_service.cancel_booking(booking.id, PASSENGER_ID, test_db)

        assert already is True

    def test_other_passenger_cannot_cancel(self, test_db):
        booking = _create(test_db)

        with pytest.raises(NotFoundError):
            booking_lifecycle_service.cancel_booking(booking.id, 2002, test_db)

        assert booking_lifecycle_service.get_booking(booking.id, test_db).booking_status == "pending"

    def test_completed_booking_cannot_be_cancelled(self, test_db):
        booking = _create(test_db)
        _set(test_db, booking, booking_status="completed")

        with pytest.raises(InvalidStateError):
            booking_lifecycle_service.cancel_booking(booking.id, PASSENGER_ID, test_db)


class TestBookingQueries:

    def test_user_bookings_are_paginated(self, test_db):
        for _ in range(3):
            _create(test_db)
        _create(test_db, user_id=2002)

        bookings, total = booking_lifecycle_service.list_user_bookings(PASSENGER_ID, test_db, page=2, limit=2)

        assert total == 3
        assert len(bookings) == 1
        assert total_pages(total, 2) == 2

    def test_paid_bookings_scope_by_role(self, test_db):
        mine = _create(test_db, amount_paid=Decimal("100"))
        _create(test_db, user_id=2002, amount_paid=Decimal("100"))
        _create(test_db)

        own, own_total = booking_lifecycle_service.list_paid_bookings(PASSENGER_ID, "passenger", test_db)
        _, crew_total = booking_lifecycle_service.list_paid_bookings(1, "crew", test_db)

        assert [b.id for b in own] == [mine.id]
        assert own_total == 1
        assert crew_total == 2

    def test_finance_summary(self, test_db):
        _create(test_db, amount_paid=Decimal("300"))
        pending = _create(test_db)
        _set(test_db, pending, amount_paid=Decimal("120"))
        rejected = _create(test_db)
        _set(test_db, rejected, amount_paid=Decimal("80"), payment_status="rejected")

        summary = booking_lifecycle_service.finance_summary(test_db)

        assert summary["total_bookings"] == 3
        assert summary["total_revenue"] == Decimal("300")
        assert summary["pending_amount"] == Decimal("120")
        assert summary["rejected_amount"] == Decimal("80")

    def test_dashboard(self, test_db):
        start = date(2024, 6, 1)
        for offset in range(6):
            _create(test_db, travel_date=start + timedelta(days=offset))
        done = _create(test_db, travel_date=start - timedelta(days=30))
        _set(test_db, done, booking_status="completed")

        data = booking_lifecycle_service.dashboard(PASSENGER_ID, test_db)

        assert data["stats"] == {"total_bookings": 7, "pending_bookings": 6, "completed_bookings": 1}
        assert len(data["recent_bookings"]) == 5
        assert data["recent_bookings"][0].travel_date == start + timedelta(days=5)
