from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.errors import NotFoundError, ValidationError
from app.models.supplier import Supplier
from app.schemas.statuses import Role, SupplierStatus
from app.schemas.supplier import SupplierCreate, SupplierResponse, SupplierStatusUpdate
from app.security import Identity, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

admin_only = require_role(Role.ADMIN.value)


@router.post("/suppliers", response_model=SupplierResponse, status_code=201)
def register_supplier(
    supplier_data: SupplierCreate,
    identity: Identity = Depends(admin_only),
    db: Session = Depends(get_db)
):
    """Register a supplier; it stays pending until activated"""
    supplier = Supplier(**supplier_data.model_dump(), status=SupplierStatus.PENDING.value)
    db.add(supplier)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError("Email already registered.")
    db.refresh(supplier)

    logger.info(f"Registered supplier {supplier.id} ({supplier.name})")
    return supplier


@router.put("/suppliers/{supplier_id}/status", response_model=SupplierResponse)
def update_supplier_status(
    supplier_id: int,
    status_update: SupplierStatusUpdate,
    identity: Identity = Depends(admin_only),
    db: Session = Depends(get_db)
):
    supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
    if not supplier:
        raise NotFoundError("Supplier not found")

    previous = supplier.status
    supplier.status = status_update.status
    db.commit()
    db.refresh(supplier)

    logger.info(f"Supplier {supplier_id} status {previous} -> {supplier.status}")
    return supplier
