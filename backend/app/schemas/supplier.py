from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class SupplierResponse(BaseModel):
    id: int
    name: str
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


class SupplierCreate(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class SupplierStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(pending|active|suspended)$")
