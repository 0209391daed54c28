from pydantic import BaseModel, Field
from datetime import datetime


class FerryResponse(BaseModel):
    id: int
    name: str
    capacity: int
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class FerryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    capacity: int = Field(..., ge=1)


class FerryStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(available|unavailable)$")
