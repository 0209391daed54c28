from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base
from app.utils.clock import utcnow


class Ferry(Base):
    __tablename__ = "ferries"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    capacity = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="available")  # available, unavailable
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
