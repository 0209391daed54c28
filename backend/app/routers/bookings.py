from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config import settings
from app.database import get_db
from app.schemas.booking import (
    BookingActionResponse,
    BookingCreate,
    BookingPage,
    BookingResponse,
    DashboardResponse,
    RecentBooking
)
from app.schemas.statuses import Role
from app.security import Identity, require_role
from app.services.booking_lifecycle_service import booking_lifecycle_service, total_pages

router = APIRouter(prefix="/api/bookings", tags=["bookings"])

passenger_only = require_role(Role.PASSENGER.value)


def _page_response(bookings, total: int, page: int, limit: int) -> BookingPage:
    return BookingPage(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        total_pages=total_pages(total, limit)
    )


@router.post("", response_model=BookingActionResponse, status_code=201)
def create_booking(
    booking_data: BookingCreate,
    passenger: Identity = Depends(passenger_only),
    db: Session = Depends(get_db)
):
    booking = booking_lifecycle_service.create_booking(passenger.id, booking_data, db)
    return BookingActionResponse(
        message="Booking created successfully",
        booking=BookingResponse.model_validate(booking)
    )


@router.get("/mine", response_model=BookingPage)
def list_my_bookings(
    booking_status: Optional[str] = Query(None, description="Filter by booking status"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    passenger: Identity = Depends(passenger_only),
    db: Session = Depends(get_db)
):
    bookings, total = booking_lifecycle_service.list_user_bookings(
        passenger.id, db, booking_status=booking_status, page=page, limit=limit
    )
    return _page_response(bookings, total, page, limit)


@router.get("/paid", response_model=BookingPage)
def list_paid_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    identity: Identity = Depends(require_role(Role.PASSENGER.value, Role.CREW.value, Role.FINANCE.value)),
    db: Session = Depends(get_db)
):
    """Paid bookings: passengers get their own, crew and finance get all"""
    bookings, total = booking_lifecycle_service.list_paid_bookings(
        identity.id, identity.role, db, page=page, limit=limit
    )
    return _page_response(bookings, total, page, limit)


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    passenger: Identity = Depends(passenger_only),
    db: Session = Depends(get_db)
):
    data = booking_lifecycle_service.dashboard(passenger.id, db)
    return DashboardResponse(
        stats=data["stats"],
        recent_bookings=[RecentBooking.model_validate(b) for b in data["recent_bookings"]]
    )


@router.patch("/{booking_id}/cancel", response_model=BookingActionResponse)
def cancel_booking(
    booking_id: int,
    passenger: Identity = Depends(passenger_only),
    db: Session = Depends(get_db)
):
    booking, already = booking_lifecycle_service.cancel_booking(booking_id, passenger.id, db)
    return BookingActionResponse(
        message="Booking already cancelled" if already else "Booking cancelled successfully",
        booking=BookingResponse.model_validate(booking),
        already_done=already
    )


@router.patch("/{booking_id}/complete", response_model=BookingActionResponse)
def complete_booking(
    booking_id: int,
    crew: Identity = Depends(require_role(Role.CREW.value)),
    db: Session = Depends(get_db)
):
    """Crew marks an assigned booking as travelled"""
    booking, already = booking_lifecycle_service.complete_booking(booking_id, db)
    return BookingActionResponse(
        message="Booking already completed" if already else "Booking completed successfully",
        booking=BookingResponse.model_validate(booking),
        already_done=already
    )
