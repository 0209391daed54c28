from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.database import get_db
from app.errors import ForbiddenError
from app.models.supplier import Supplier
from app.schemas.delivery import DeliveryRecord
from app.schemas.order import OrderActionResponse, OrderResponse, SupplySubmit
from app.schemas.statuses import Role, SupplierStatus
from app.security import Identity, require_role
from app.services.delivery_projection_service import delivery_projection_service
from app.services.order_lifecycle_service import order_lifecycle_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/suppliers", tags=["suppliers"])


def get_active_supplier(
    identity: Identity = Depends(require_role(Role.SUPPLIER.value)),
    db: Session = Depends(get_db)
) -> Identity:
    """Supplier accounts must be approved (active) before they can work on orders"""
    supplier = db.query(Supplier).filter(Supplier.id == identity.id).first()
    if not supplier or supplier.status != SupplierStatus.ACTIVE.value:
        logger.warning(f"Supplier {identity.id} is not active")
        raise ForbiddenError("Your account is not active.")
    return identity


@router.get("/orders", response_model=List[OrderResponse])
def list_my_orders(
    status: Optional[str] = Query(None, description="Filter by acceptance status"),
    delivery_status: Optional[str] = Query(None, description="Filter by delivery status"),
    supplier: Identity = Depends(get_active_supplier),
    db: Session = Depends(get_db)
):
    """List the calling supplier's orders, newest first"""
    return order_lifecycle_service.list_orders(
        db,
        supplier_id=supplier.id,
        status=status,
        delivery_status=delivery_status
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_my_order(
    order_id: int,
    supplier: Identity = Depends(get_active_supplier),
    db: Session = Depends(get_db)
):
    return order_lifecycle_service.get_order(order_id, db, supplier_id=supplier.id)


@router.put("/orders/{order_id}/accept", response_model=OrderActionResponse)
def accept_order(
    order_id: int,
    supplier: Identity = Depends(get_active_supplier),
    db: Session = Depends(get_db)
):
    order = order_lifecycle_service.accept_order(order_id, supplier.id, db)
    return OrderActionResponse(message="Order accepted successfully", order=OrderResponse.model_validate(order))


@router.put("/orders/{order_id}/reject", response_model=OrderActionResponse)
def reject_order(
    order_id: int,
    supplier: Identity = Depends(get_active_supplier),
    db: Session = Depends(get_db)
):
    order = order_lifecycle_service.reject_order(order_id, supplier.id, db)
    return OrderActionResponse(message="Order rejected successfully", order=OrderResponse.model_validate(order))


@router.put("/supply/{order_id}", response_model=OrderActionResponse)
def submit_supply(
    order_id: int,
    supply: SupplySubmit,
    supplier: Identity = Depends(get_active_supplier),
    db: Session = Depends(get_db)
):
    """Record the supplied amount; finance review starts over"""
    order = order_lifecycle_service.submit_supply(order_id, supplier.id, supply.amount, db)
    return OrderActionResponse(message="Supply submitted. Awaiting finance approval.", order=OrderResponse.model_validate(order))


@router.put("/mark-delivered/{order_id}", response_model=OrderActionResponse)
def mark_delivered(
    order_id: int,
    supplier: Identity = Depends(get_active_supplier),
    db: Session = Depends(get_db)
):
    order = order_lifecycle_service.mark_delivered(order_id, supplier.id, db)
    return OrderActionResponse(message="Marked as delivered", order=OrderResponse.model_validate(order))


@router.get("/deliveries", response_model=List[DeliveryRecord])
def list_my_deliveries(
    search: Optional[str] = Query(None, description="Item or supplier name contains"),
    supplier: Identity = Depends(get_active_supplier),
    db: Session = Depends(get_db)
):
    return delivery_projection_service.list_deliveries(db, supplier_id=supplier.id, search=search)
