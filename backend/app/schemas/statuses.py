from enum import Enum


class OrderStatus(str, Enum):
    """Supplier's acceptance of a supply request"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class FinanceStatus(str, Enum):
    """Finance approval of the supplied amount"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DeliveryStatus(str, Enum):
    """Physical fulfillment of an order"""
    PENDING = "pending"
    DELIVERED = "delivered"
    RECEIVED = "received"


class SupplierStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REJECTED = "rejected"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ASSIGNED = "assigned"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class BookingType(str, Enum):
    PASSENGER = "passenger"
    VEHICLE = "vehicle"
    CARGO = "cargo"


class PaymentMethod(str, Enum):
    MPESA = "mpesa"
    CARD = "card"
    CASH = "cash"
    BANK = "bank"


class FerryStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class Role(str, Enum):
    """Role claims carried by identity tokens"""
    SUPPLIER = "supplier"
    INVENTORY = "inventory"
    FINANCE = "finance"
    PASSENGER = "passenger"
    CREW = "crew"
    ADMIN = "admin"
