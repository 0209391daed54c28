from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class OrderResponse(BaseModel):
    id: int
    supplier_id: int
    supplier_name: str
    item_id: int
    item_name: str
    quantity: int
    amount: Optional[Decimal] = None
    status: str
    finance_status: str
    delivery_status: str
    created_at: datetime
    delivered_at: Optional[datetime] = None
    received_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderActionResponse(BaseModel):
    """Result of a lifecycle operation: the order plus what happened"""
    message: str
    order: OrderResponse
    already_done: bool = False


class OrderCreate(BaseModel):
    item_id: int
    supplier_id: int
    quantity: int = Field(..., ge=0)
    amount: Optional[Decimal] = Field(None, ge=0)


class SupplySubmit(BaseModel):
    amount: Optional[Decimal] = None


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
