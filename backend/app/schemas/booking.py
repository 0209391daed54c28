from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from app.schemas.statuses import BookingType, PaymentMethod


class BookingResponse(BaseModel):
    id: int
    user_id: Optional[int]
    booking_type: str
    travel_date: date
    travel_time: str
    route: str
    num_passengers: Optional[int] = None
    vehicle_type: Optional[str] = None
    vehicle_plate: Optional[str] = None
    cargo_description: Optional[str] = None
    cargo_weight_kg: Optional[Decimal] = None
    amount_paid: Decimal
    payment_method: str
    transaction_id: Optional[str] = None
    payment_status: str
    booking_status: str
    ferry_name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BookingCreate(BaseModel):
    booking_type: BookingType
    travel_date: date
    travel_time: str
    route: str
    num_passengers: Optional[int] = Field(None, ge=1)
    vehicle_type: Optional[str] = None
    vehicle_plate: Optional[str] = None
    cargo_description: Optional[str] = None
    cargo_weight_kg: Optional[Decimal] = Field(None, ge=0)
    amount_paid: Decimal = Field(Decimal("0"), ge=0)
    payment_method: PaymentMethod = PaymentMethod.MPESA
    transaction_id: Optional[str] = None

    class Config:
        use_enum_values = True


class BookingActionResponse(BaseModel):
    message: str
    booking: BookingResponse
    already_done: bool = False


class BookingPage(BaseModel):
    bookings: List[BookingResponse]
    total: int
    page: int
    total_pages: int


class FerryAssignment(BaseModel):
    ferry_name: Optional[str] = None


class FinanceSummary(BaseModel):
    total_bookings: int
    total_revenue: Decimal
    pending_amount: Decimal
    rejected_amount: Decimal


class DashboardStats(BaseModel):
    total_bookings: int
    pending_bookings: int
    completed_bookings: int


class RecentBooking(BaseModel):
    id: int
    route: str
    booking_type: str
    travel_date: date
    travel_time: str
    booking_status: str

    class Config:
        from_attributes = True


class DashboardResponse(BaseModel):
    stats: DashboardStats
    recent_bookings: List[RecentBooking]
