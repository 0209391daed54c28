from app.schemas.order import OrderCreate, OrderResponse, OrderActionResponse, SupplySubmit
from app.schemas.delivery import DeliveryRecord, DeliveryGroup
from app.schemas.booking import BookingCreate, BookingResponse, BookingActionResponse, BookingPage

__all__ = [
    "OrderCreate",
    "OrderResponse",
    "OrderActionResponse",
    "SupplySubmit",
    "DeliveryRecord",
    "DeliveryGroup",
    "BookingCreate",
    "BookingResponse",
    "BookingActionResponse",
    "BookingPage",
]
