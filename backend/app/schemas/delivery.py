from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class DeliveryRecord(BaseModel):
    """Flat view of an order for the deliveries screen and exports"""
    order_id: int
    item_name: Optional[str] = None
    supplier_name: Optional[str] = None
    quantity: int
    amount: Optional[Decimal] = None
    delivered_at: Optional[datetime] = None
    delivery_status: str


class DeliveryGroup(BaseModel):
    item_name: Optional[str] = None
    total_quantity: int
    total_amount: Decimal
    delivery_count: int
    deliveries: List[DeliveryRecord] = []
