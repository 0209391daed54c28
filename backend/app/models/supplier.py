from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.clock import utcnow


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    email = Column(String, unique=True, nullable=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default="pending")  # pending, active, suspended
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # Relationships
    orders = relationship("Order", back_populates="supplier")
