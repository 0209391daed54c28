from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List
import logging

from app.database import get_db
from app.errors import NotFoundError, ValidationError
from app.models.ferry import Ferry
from app.schemas.ferry import FerryCreate, FerryResponse, FerryStatusUpdate
from app.schemas.statuses import Role
from app.security import Identity, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ferries", tags=["ferries"])

admin_only = require_role(Role.ADMIN.value)


@router.get("", response_model=List[FerryResponse])
def list_ferries(
    identity: Identity = Depends(require_role(Role.ADMIN.value, Role.FINANCE.value, Role.CREW.value)),
    db: Session = Depends(get_db)
):
    return db.query(Ferry).order_by(Ferry.name).all()


@router.post("", response_model=FerryResponse, status_code=201)
def create_ferry(
    ferry_data: FerryCreate,
    identity: Identity = Depends(admin_only),
    db: Session = Depends(get_db)
):
    ferry = Ferry(name=ferry_data.name.strip(), capacity=ferry_data.capacity)
    db.add(ferry)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError(f"Ferry {ferry_data.name} already exists")
    db.refresh(ferry)

    logger.info(f"Registered ferry {ferry.name} (capacity {ferry.capacity})")
    return ferry


@router.put("/{ferry_id}/status", response_model=FerryResponse)
def update_ferry_status(
    ferry_id: int,
    status_update: FerryStatusUpdate,
    identity: Identity = Depends(admin_only),
    db: Session = Depends(get_db)
):
    ferry = db.query(Ferry).filter(Ferry.id == ferry_id).first()
    if not ferry:
        raise NotFoundError("Ferry not found")

    ferry.status = status_update.status
    db.commit()
    db.refresh(ferry)
    return ferry
