"""
Booking Lifecycle Service - payment and booking status of ferry bookings.

Mirrors the order lifecycle: every transition is a conditional UPDATE, and
repeating a transition that already happened is reported as already done
instead of failing.
"""
import logging
import math
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import InvalidStateError, NotFoundError, StoreError, ValidationError
from app.models.booking import Booking
from app.schemas.booking import BookingCreate
from app.schemas.statuses import BookingStatus, BookingType, PaymentStatus, Role

logger = logging.getLogger(__name__)

# Booking type -> field that must be present
REQUIRED_DETAILS = {
    BookingType.PASSENGER.value: "num_passengers",
    BookingType.VEHICLE.value: "vehicle_type",
    BookingType.CARGO.value: "cargo_description",
}

CANCELLABLE = (
    BookingStatus.PENDING,
    BookingStatus.APPROVED,
    BookingStatus.ASSIGNED,
)


class BookingLifecycleService:
    """Service for creating bookings and moving them through their statuses"""

    def create_booking(self, user_id: int, data: BookingCreate, db: Session) -> Booking:
        booking_type = data.booking_type
        required = REQUIRED_DETAILS.get(booking_type)
        if required and getattr(data, required) in (None, ""):
            raise ValidationError(f"{required} is required for {booking_type} bookings")

        values = data.model_dump()
        amount_paid = values.get("amount_paid") or Decimal("0")

        booking = Booking(
            user_id=user_id,
            **values,
            payment_status=(PaymentStatus.PAID if amount_paid > 0 else PaymentStatus.PENDING).value,
            booking_status=BookingStatus.PENDING.value,
            ferry_name=None,
        )
        db.add(booking)
        self._commit(db, f"create booking for user {user_id}")
        db.refresh(booking)

        logger.info(f"Created {booking_type} booking {booking.id} for user {user_id} ({booking.payment_status})")
        return booking

    def get_booking(self, booking_id: int, db: Session, user_id: Optional[int] = None) -> Booking:
        query = db.query(Booking).filter(Booking.id == booking_id)
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)

        booking = query.first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def list_bookings(self, db: Session) -> List[Booking]:
        return db.query(Booking).order_by(Booking.created_at.desc(), Booking.id.desc()).all()

    def list_user_bookings(
        self,
        user_id: int,
        db: Session,
        booking_status: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[Booking], int]:
        filters = [Booking.user_id == user_id]
        if booking_status:
            filters.append(Booking.booking_status == booking_status)
        return self._page(db, filters, page, limit)

    def list_paid_bookings(
        self,
        user_id: int,
        role: str,
        db: Session,
        page: int = 1,
        limit: int = 10
    ) -> Tuple[List[Booking], int]:
        """Passengers see their own paid bookings; crew and finance see all"""
        filters = [Booking.payment_status == PaymentStatus.PAID.value]
        if role == Role.PASSENGER.value:
            filters.append(Booking.user_id == user_id)
        return self._page(db, filters, page, limit)

    def cancel_booking(self, booking_id: int, user_id: int, db: Session) -> Tuple[Booking, bool]:
        return self._transition(
            booking_id, db,
            axis="booking_status",
            allowed_from=CANCELLABLE,
            to_state=BookingStatus.CANCELLED,
            conditions=[Booking.user_id == user_id],
        )

    def approve_payment(self, booking_id: int, db: Session) -> Tuple[Booking, bool]:
        return self._transition(
            booking_id, db,
            axis="payment_status",
            allowed_from=(PaymentStatus.PENDING,),
            to_state=PaymentStatus.PAID,
        )

    def reject_payment(self, booking_id: int, db: Session) -> Tuple[Booking, bool]:
        return self._transition(
            booking_id, db,
            axis="payment_status",
            allowed_from=(PaymentStatus.PENDING,),
            to_state=PaymentStatus.REJECTED,
        )

    def approve_booking(self, booking_id: int, db: Session) -> Tuple[Booking, bool]:
        return self._transition(
            booking_id, db,
            axis="booking_status",
            allowed_from=(BookingStatus.PENDING,),
            to_state=BookingStatus.APPROVED,
        )

    def assign_ferry(self, booking_id: int, ferry_name: Optional[str], db: Session) -> Tuple[Booking, bool]:
        """
        Place an approved booking on a ferry.

        Status and ferry name change in the same UPDATE. Re-assigning the
        same ferry is a no-op; a different ferry needs a fresh approval.
        """
        ferry_name = (ferry_name or "").strip()
        if not ferry_name:
            raise ValidationError("ferry_name is required")

        booking, already = self._transition(
            booking_id, db,
            axis="booking_status",
            allowed_from=(BookingStatus.APPROVED,),
            to_state=BookingStatus.ASSIGNED,
            values={"ferry_name": ferry_name},
        )
        if already and booking.ferry_name != ferry_name:
            raise InvalidStateError(f"Booking is already assigned to {booking.ferry_name}")
        return booking, already

    def complete_booking(self, booking_id: int, db: Session) -> Tuple[Booking, bool]:
        return self._transition(
            booking_id, db,
            axis="booking_status",
            allowed_from=(BookingStatus.ASSIGNED,),
            to_state=BookingStatus.COMPLETED,
        )

    def finance_summary(self, db: Session) -> dict:
        total_bookings = db.query(func.count(Booking.id)).scalar() or 0
        return {
            "total_bookings": total_bookings,
            "total_revenue": self._sum_paid(db, PaymentStatus.PAID),
            "pending_amount": self._sum_paid(db, PaymentStatus.PENDING),
            "rejected_amount": self._sum_paid(db, PaymentStatus.REJECTED),
        }

    def dashboard(self, user_id: int, db: Session) -> dict:
        base = db.query(func.count(Booking.id)).filter(Booking.user_id == user_id)
        recent = (
            db.query(Booking)
            .filter(Booking.user_id == user_id)
            .order_by(Booking.travel_date.desc(), Booking.travel_time.desc())
            .limit(5)
            .all()
        )
        return {
            "stats": {
                "total_bookings": base.scalar() or 0,
                "pending_bookings": base.filter(Booking.booking_status == BookingStatus.PENDING.value).scalar() or 0,
                "completed_bookings": base.filter(Booking.booking_status == BookingStatus.COMPLETED.value).scalar() or 0,
            },
            "recent_bookings": recent,
        }

    def _transition(
        self,
        booking_id: int,
        db: Session,
        axis: str,
        allowed_from: Iterable,
        to_state,
        conditions: Optional[list] = None,
        values: Optional[dict] = None
    ) -> Tuple[Booking, bool]:
        """
        Conditional UPDATE of one status axis.

        Returns:
            (booking, already_done) tuple

        Raises:
            NotFoundError: no booking in the caller's scope
            InvalidStateError: current state does not allow the transition
        """
        column = getattr(Booking, axis)
        filters = [Booking.id == booking_id, column.in_([s.value for s in allowed_from])]
        filters.extend(conditions or [])

        changes = {axis: to_state.value}
        changes.update(values or {})

        try:
            matched = (
                db.query(Booking)
                .filter(*filters)
                .update(changes, synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to set {axis}={to_state.value} on booking {booking_id}: {str(e)}")
            raise StoreError(str(e))

        query = db.query(Booking).filter(Booking.id == booking_id, *(conditions or []))
        booking = query.first()
        if not booking:
            raise NotFoundError("Booking not found")

        if matched:
            logger.info(f"Booking {booking_id}: {axis} -> {to_state.value}")
            return booking, False

        current = getattr(booking, axis)
        if current == to_state.value:
            logger.info(f"Booking {booking_id} already {to_state.value}")
            return booking, True

        logger.warning(f"Booking {booking_id}: cannot set {axis} to {to_state.value} from {current}")
        raise InvalidStateError(f"Cannot change {axis.replace('_', ' ')} from {current} to {to_state.value}")

    def _page(self, db: Session, filters: list, page: int, limit: int) -> Tuple[List[Booking], int]:
        page = max(page, 1)
        query = db.query(Booking).filter(*filters)
        total = query.count()
        bookings = (
            query.order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return bookings, total

    def _sum_paid(self, db: Session, status: PaymentStatus) -> Decimal:
        total = (
            db.query(func.sum(Booking.amount_paid))
            .filter(Booking.payment_status == status.value)
            .scalar()
        )
        return Decimal(str(total or 0))

    def _commit(self, db: Session, action: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to {action}: {str(e)}")
            raise StoreError(str(e))


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


# Singleton instance
booking_lifecycle_service = BookingLifecycleService()
