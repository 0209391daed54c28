from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.schemas.booking import BookingActionResponse, BookingResponse, FerryAssignment, FinanceSummary
from app.schemas.order import OrderActionResponse, OrderListResponse, OrderResponse
from app.schemas.statuses import Role
from app.security import Identity, require_role
from app.services.booking_lifecycle_service import booking_lifecycle_service
from app.services.order_lifecycle_service import order_lifecycle_service

router = APIRouter(prefix="/api/finance", tags=["finance"])

finance_only = require_role(Role.FINANCE.value)


# Orders

@router.get("/orders", response_model=OrderListResponse)
def list_orders(
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    """List all orders for finance review"""
    orders = order_lifecycle_service.list_orders(db)
    return OrderListResponse(orders=[OrderResponse.model_validate(o) for o in orders])


@router.post("/orders/{order_id}/approve-payment", response_model=OrderActionResponse)
def approve_order_payment(
    order_id: int,
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    order = order_lifecycle_service.approve_finance(order_id, db)
    return OrderActionResponse(message="Order payment approved successfully", order=OrderResponse.model_validate(order))


@router.post("/orders/{order_id}/reject-payment", response_model=OrderActionResponse)
def reject_order_payment(
    order_id: int,
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    order = order_lifecycle_service.reject_finance(order_id, db)
    return OrderActionResponse(message="Order payment rejected successfully", order=OrderResponse.model_validate(order))


# Bookings

@router.get("/bookings", response_model=List[BookingResponse])
def list_bookings(
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    return booking_lifecycle_service.list_bookings(db)


def _booking_action(result, done_message: str, already_message: str) -> BookingActionResponse:
    booking, already = result
    return BookingActionResponse(
        message=already_message if already else done_message,
        booking=BookingResponse.model_validate(booking),
        already_done=already
    )


@router.post("/bookings/{booking_id}/approve-payment", response_model=BookingActionResponse)
def approve_booking_payment(
    booking_id: int,
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    return _booking_action(
        booking_lifecycle_service.approve_payment(booking_id, db),
        "Payment approved successfully.",
        "Payment already approved."
    )


@router.post("/bookings/{booking_id}/reject-payment", response_model=BookingActionResponse)
def reject_booking_payment(
    booking_id: int,
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    return _booking_action(
        booking_lifecycle_service.reject_payment(booking_id, db),
        "Payment rejected successfully.",
        "Payment already rejected."
    )


@router.post("/bookings/{booking_id}/approve", response_model=BookingActionResponse)
def approve_booking(
    booking_id: int,
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    return _booking_action(
        booking_lifecycle_service.approve_booking(booking_id, db),
        "Booking approved successfully.",
        "Booking already approved."
    )


@router.post("/bookings/{booking_id}/assign-ferry", response_model=BookingActionResponse)
def assign_ferry(
    booking_id: int,
    assignment: FerryAssignment,
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    """Place an approved booking on a ferry"""
    return _booking_action(
        booking_lifecycle_service.assign_ferry(booking_id, assignment.ferry_name, db),
        "Booking placed on ferry successfully",
        "Booking already placed on this ferry"
    )


@router.get("/summary", response_model=FinanceSummary)
def finance_summary(
    identity: Identity = Depends(finance_only),
    db: Session = Depends(get_db)
):
    return booking_lifecycle_service.finance_summary(db)
