from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime
from app.database import Base
from app.utils.clock import utcnow


class Booking(Base):
    """Passenger, vehicle or cargo booking on a ferry route"""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)  # passenger identity from the token
    booking_type = Column(String(20), nullable=False)  # passenger, vehicle, cargo

    travel_date = Column(Date, nullable=False)
    travel_time = Column(String, nullable=False)
    route = Column(String, nullable=False)

    # Type-specific details
    num_passengers = Column(Integer, nullable=True)
    vehicle_type = Column(String, nullable=True)
    vehicle_plate = Column(String, nullable=True)
    cargo_description = Column(String, nullable=True)
    cargo_weight_kg = Column(Numeric(10, 2), nullable=True)

    # Payment
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(10), nullable=False, default="mpesa")  # mpesa, card, cash, bank
    transaction_id = Column(String, nullable=True)

    payment_status = Column(String(20), nullable=False, default="pending", index=True)  # pending, paid, rejected
    booking_status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, assigned, cancelled, completed
    ferry_name = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
