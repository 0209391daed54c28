"""
Transition rules for the three order status axes.

    status:          pending --accept--> approved
                     pending --reject--> rejected            (terminal)
    finance_status:  any     --approve/reject--> approved/rejected
                     any     --submit supply--> pending      (re-opens review)
    delivery_status: pending --supplier marks delivered--> delivered
                     delivered --inventory confirms--> received  (terminal)

The axes are loose: finance may decide before the supplier accepts, and a
supplier may deliver before finance approves. The only hard couplings are
submit supply (needs status approved) and confirm received (needs
delivery_status delivered).
"""
from datetime import datetime
from typing import List, Optional, Tuple

from app.schemas.statuses import DeliveryStatus, FinanceStatus, OrderStatus

# Operation -> (axis, from-state, to-state)
TRANSITIONS = {
    "accept": ("status", OrderStatus.PENDING, OrderStatus.APPROVED),
    "reject": ("status", OrderStatus.PENDING, OrderStatus.REJECTED),
    "approve_finance": ("finance_status", None, FinanceStatus.APPROVED),
    "reject_finance": ("finance_status", None, FinanceStatus.REJECTED),
    "submit_supply": ("finance_status", None, FinanceStatus.PENDING),
    "mark_delivered": ("delivery_status", DeliveryStatus.PENDING, DeliveryStatus.DELIVERED),
    "confirm_received": ("delivery_status", DeliveryStatus.DELIVERED, DeliveryStatus.RECEIVED),
}


def is_reachable(status: str, finance_status: str, delivery_status: str) -> bool:
    """
    Whether a (status, finance_status, delivery_status) triple can be produced
    by some sequence of lifecycle operations.

    Every combination of valid enum values is reachable: finance decisions
    are not gated on acceptance and delivery is not gated on either.
    Raises ValueError for values outside the enums.
    """
    OrderStatus(status)
    FinanceStatus(finance_status)
    DeliveryStatus(delivery_status)
    return True


def reachable_combinations() -> List[Tuple[str, str, str]]:
    """Enumerate the reachable status triples (the documented table)"""
    return [
        (s.value, f.value, d.value)
        for s in OrderStatus
        for f in FinanceStatus
        for d in DeliveryStatus
        if is_reachable(s.value, f.value, d.value)
    ]


def check_timestamps(
    delivery_status: str,
    delivered_at: Optional[datetime],
    received_at: Optional[datetime],
) -> bool:
    """
    delivered_at is set iff delivery_status is delivered or received;
    received_at is set iff delivery_status is received.
    """
    status = DeliveryStatus(delivery_status)
    delivered_expected = status in (DeliveryStatus.DELIVERED, DeliveryStatus.RECEIVED)
    received_expected = status == DeliveryStatus.RECEIVED
    return (delivered_at is not None) == delivered_expected and (received_at is not None) == received_expected


def coerce_quantity(quantity) -> int:
    """Quantity to add to stock; anything non-numeric counts as zero"""
    try:
        value = int(quantity)
    except (TypeError, ValueError):
        return 0
    return value if value > 0 else 0
