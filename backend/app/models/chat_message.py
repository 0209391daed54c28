from sqlalchemy import Column, Integer, String, Text, DateTime
from app.database import Base
from app.utils.clock import utcnow


class ChatMessage(Base):
    """A persisted supplier/inventory chat message"""
    __tablename__ = "inventory_chat_messages"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(String, nullable=False, index=True)
    sender = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, index=True)
