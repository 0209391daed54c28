from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ChatMessageResponse(BaseModel):
    id: int
    room_id: str
    sender: str
    message: str
    timestamp: datetime

    class Config:
        from_attributes = True


class ChatMessageCreate(BaseModel):
    room_id: Optional[str] = None
    sender: Optional[str] = None
    message: Optional[str] = None
