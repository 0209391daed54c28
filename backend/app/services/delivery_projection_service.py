"""
Delivery Projection Service - read-only delivery view built from orders.

Deliveries are never stored; every call rebuilds them from the orders table.
"""
import csv
import io
import logging
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.models.order import Order
from app.schemas.delivery import DeliveryGroup, DeliveryRecord
from app.schemas.statuses import DeliveryStatus

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "order_id",
    "item_name",
    "supplier_name",
    "quantity",
    "amount",
    "delivery_status",
    "delivered_at",
]

_FULFILLED = {DeliveryStatus.DELIVERED.value, DeliveryStatus.RECEIVED.value}


class DeliveryProjectionService:
    """Builds, filters, groups and exports delivery records"""

    def list_deliveries(
        self,
        db: Session,
        supplier_id: Optional[int] = None,
        search: Optional[str] = None
    ) -> List[DeliveryRecord]:
        """
        Project orders into delivery records, newest first.

        Args:
            db: Database session
            supplier_id: Only this supplier's orders
            search: Case-insensitive substring of item or supplier name

        Returns:
            List of DeliveryRecord
        """
        query = db.query(Order).options(
            joinedload(Order.item),
            joinedload(Order.supplier)
        )
        if supplier_id is not None:
            query = query.filter(Order.supplier_id == supplier_id)

        orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
        records = [self._to_record(order) for order in orders]

        if search:
            records = self.filter_records(records, search)

        return records

    def filter_records(self, records: List[DeliveryRecord], search: str) -> List[DeliveryRecord]:
        """Keep records whose item or supplier name contains `search`; order is preserved"""
        needle = search.strip().lower()
        if not needle:
            return list(records)

        return [
            record for record in records
            if needle in (record.item_name or "").lower()
            or needle in (record.supplier_name or "").lower()
        ]

    def group_by_item(self, records: List[DeliveryRecord]) -> List[DeliveryGroup]:
        """
        Group records by item name in first-seen order.

        Totals only count records that have actually been delivered
        (delivered or received); every record is still listed in its group.
        """
        groups: Dict[Optional[str], DeliveryGroup] = {}

        for record in records:
            group = groups.get(record.item_name)
            if group is None:
                group = DeliveryGroup(
                    item_name=record.item_name,
                    total_quantity=0,
                    total_amount=Decimal("0"),
                    delivery_count=0,
                    deliveries=[]
                )
                groups[record.item_name] = group

            group.deliveries.append(record)
            if record.delivery_status in _FULFILLED:
                group.total_quantity += record.quantity or 0
                group.total_amount += record.amount or Decimal("0")
                group.delivery_count += 1

        return list(groups.values())

    def export_csv(self, records: List[DeliveryRecord]) -> str:
        """Render records as CSV; values are written exactly as stored"""
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_COLUMNS)

        for record in records:
            writer.writerow([
                record.order_id,
                record.item_name or "",
                record.supplier_name or "",
                record.quantity,
                "" if record.amount is None else str(record.amount),
                record.delivery_status,
                record.delivered_at.isoformat() if record.delivered_at else "",
            ])

        return buffer.getvalue()

    def _to_record(self, order: Order) -> DeliveryRecord:
        # Denormalized names win; the join only fills gaps
        item_name = order.item_name or (order.item.item_name if order.item else None)
        supplier_name = order.supplier_name or (order.supplier.name if order.supplier else None)

        return DeliveryRecord(
            order_id=order.id,
            item_name=item_name,
            supplier_name=supplier_name,
            quantity=order.quantity,
            amount=order.amount,
            delivered_at=order.delivered_at,
            delivery_status=order.delivery_status,
        )


# Singleton instance
delivery_projection_service = DeliveryProjectionService()
