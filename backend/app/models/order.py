from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.clock import utcnow


class Order(Base):
    """A supply request from inventory to a supplier"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    item_id = Column(Integer, ForeignKey("inventory_items.id"), nullable=False, index=True)

    # Snapshot of the names at creation time; renames are not propagated
    supplier_name = Column(String, nullable=False)
    item_name = Column(String, nullable=False)

    quantity = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=True)  # set by the supplier on supply

    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected
    finance_status = Column(String(20), nullable=False, default="pending", index=True)  # pending, approved, rejected
    delivery_status = Column(String(20), nullable=False, default="pending", index=True)  # pending, delivered, received

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    received_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    supplier = relationship("Supplier", back_populates="orders")
    item = relationship("InventoryItem", back_populates="orders")
