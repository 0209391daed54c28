from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.database import get_db
from app.errors import InvalidStateError, NotFoundError, StoreError, ValidationError
from app.models.inventory_item import InventoryItem
from app.models.order import Order
from app.models.supplier import Supplier
from app.schemas.delivery import DeliveryGroup, DeliveryRecord
from app.schemas.inventory import InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate
from app.schemas.order import OrderActionResponse, OrderCreate, OrderResponse
from app.schemas.statuses import Role
from app.schemas.supplier import SupplierResponse
from app.security import Identity, require_role
from app.services.delivery_projection_service import delivery_projection_service
from app.services.order_lifecycle_service import order_lifecycle_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

inventory_only = require_role(Role.INVENTORY.value)


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to {action}: {str(e)}")
        raise StoreError(str(e))


# Items

@router.get("/items", response_model=List[InventoryItemResponse])
def list_items(
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    return db.query(InventoryItem).order_by(InventoryItem.created_at.desc(), InventoryItem.id.desc()).all()


@router.post("/items", response_model=InventoryItemResponse, status_code=201)
def create_item(
    item_data: InventoryItemCreate,
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    """Create a new inventory item"""
    if not item_data.item_name or not item_data.unit:
        raise ValidationError("Item name and unit are required.")

    item = InventoryItem(**item_data.model_dump())
    db.add(item)
    _commit(db, "create inventory item")
    db.refresh(item)

    logger.info(f"Created inventory item {item.id} ({item.item_name})")
    return item


@router.put("/items/{item_id}", response_model=InventoryItemResponse)
def update_item(
    item_id: int,
    item_data: InventoryItemUpdate,
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    """Edit an item; orders keep the item name they were placed with"""
    item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
    if not item:
        raise NotFoundError("Inventory item not found")

    for field, value in item_data.model_dump(exclude_unset=True).items():
        setattr(item, field, value)

    _commit(db, f"update inventory item {item_id}")
    db.refresh(item)
    return item


@router.delete("/items/{item_id}")
def delete_item(
    item_id: int,
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
    if not item:
        raise NotFoundError("Inventory item not found")

    if db.query(Order).filter(Order.item_id == item_id).first():
        raise InvalidStateError("Inventory item has orders and cannot be deleted")

    db.delete(item)
    _commit(db, f"delete inventory item {item_id}")
    return {"message": "Inventory item deleted successfully"}


# Suppliers

@router.get("/suppliers", response_model=List[SupplierResponse])
def list_suppliers(
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    return db.query(Supplier).order_by(Supplier.created_at.desc(), Supplier.id.desc()).all()


# Orders

@router.post("/orders", response_model=OrderActionResponse, status_code=201)
def create_order(
    order_data: OrderCreate,
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    order = order_lifecycle_service.create_order(
        order_data.item_id,
        order_data.supplier_id,
        order_data.quantity,
        db,
        amount=order_data.amount
    )
    return OrderActionResponse(message="Order placed successfully", order=OrderResponse.model_validate(order))


@router.get("/orders", response_model=List[OrderResponse])
def list_orders(
    supplier_id: Optional[int] = Query(None, description="Filter by supplier ID"),
    status: Optional[str] = Query(None, description="Filter by acceptance status"),
    finance_status: Optional[str] = Query(None, description="Filter by finance status"),
    delivery_status: Optional[str] = Query(None, description="Filter by delivery status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    return order_lifecycle_service.list_orders(
        db,
        supplier_id=supplier_id,
        status=status,
        finance_status=finance_status,
        delivery_status=delivery_status,
        skip=skip,
        limit=limit
    )


# Deliveries

@router.get("/deliveries", response_model=List[DeliveryRecord])
def list_deliveries(
    search: Optional[str] = Query(None, description="Item or supplier name contains"),
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    """All orders as delivery records, newest first"""
    return delivery_projection_service.list_deliveries(db, search=search)


@router.get("/deliveries/grouped", response_model=List[DeliveryGroup])
def list_deliveries_by_item(
    search: Optional[str] = Query(None, description="Item or supplier name contains"),
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    """Deliveries grouped per item with delivered totals"""
    records = delivery_projection_service.list_deliveries(db, search=search)
    return delivery_projection_service.group_by_item(records)


@router.get("/deliveries/export")
def export_deliveries(
    search: Optional[str] = Query(None, description="Item or supplier name contains"),
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    records = delivery_projection_service.list_deliveries(db, search=search)
    return Response(
        content=delivery_projection_service.export_csv(records),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="deliveries.csv"'}
    )


@router.patch("/deliveries/{order_id}/confirm-received", response_model=OrderActionResponse)
def confirm_received(
    order_id: int,
    identity: Identity = Depends(inventory_only),
    db: Session = Depends(get_db)
):
    """Confirm a delivered order arrived and add it to stock (idempotent)"""
    order, already = order_lifecycle_service.confirm_received(order_id, db)
    message = (
        "Delivery already confirmed as received"
        if already
        else "Delivery confirmed as received and inventory updated"
    )
    return OrderActionResponse(message=message, order=OrderResponse.model_validate(order), already_done=already)
