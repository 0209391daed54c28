from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class InventoryItemResponse(BaseModel):
    id: int
    item_name: str
    category: Optional[str] = None
    unit: str
    current_stock: int
    reorder_level: int
    created_at: datetime

    class Config:
        from_attributes = True


class InventoryItemCreate(BaseModel):
    item_name: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    current_stock: int = Field(0, ge=0)
    reorder_level: int = Field(0, ge=0)


class InventoryItemUpdate(BaseModel):
    item_name: Optional[str] = None
    category: Optional[str] = None
    unit: Optional[str] = None
    current_stock: Optional[int] = Field(None, ge=0)
    reorder_level: Optional[int] = Field(None, ge=0)
