"""
Order Lifecycle Service - drives an order through supplier acceptance,
finance approval and delivery/receipt.

Each transition is a single conditional UPDATE whose WHERE clause carries the
precondition (current state, and ownership for supplier operations), so two
concurrent requests cannot both perform the same transition.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import InvalidStateError, NotFoundError, StoreError, ValidationError
from app.models.inventory_item import InventoryItem
from app.models.order import Order
from app.models.supplier import Supplier
from app.schemas.statuses import DeliveryStatus, FinanceStatus, OrderStatus
from app.utils.clock import utcnow
from app.utils.order_rules import TRANSITIONS, coerce_quantity

logger = logging.getLogger(__name__)


class OrderLifecycleService:
    """Service for supply orders and their status transitions"""

    def create_order(
        self,
        item_id: int,
        supplier_id: int,
        quantity: int,
        db: Session,
        amount: Optional[Decimal] = None
    ) -> Order:
        """
        Place a new order with every status axis pending.

        Supplier and item names are copied onto the order as they are now.
        """
        if quantity is None or quantity < 0:
            raise ValidationError("Quantity must be zero or more")

        supplier = db.query(Supplier).filter(Supplier.id == supplier_id).first()
        if not supplier:
            raise NotFoundError("Supplier not found")

        item = db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
        if not item:
            raise NotFoundError("Inventory item not found")

        order = Order(
            item_id=item.id,
            item_name=item.item_name,
            supplier_id=supplier.id,
            supplier_name=supplier.name or "Unknown",
            quantity=quantity,
            amount=amount,
            status=OrderStatus.PENDING.value,
            finance_status=FinanceStatus.PENDING.value,
            delivery_status=DeliveryStatus.PENDING.value,
        )
        db.add(order)
        self._commit(db, f"create order for item {item_id}")
        db.refresh(order)

        logger.info(f"Created order {order.id}: {quantity} x {item.item_name} from supplier {supplier.id}")
        return order

    def get_order(self, order_id: int, db: Session, supplier_id: Optional[int] = None) -> Order:
        query = db.query(Order).filter(Order.id == order_id)
        if supplier_id is not None:
            query = query.filter(Order.supplier_id == supplier_id)

        order = query.first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    def list_orders(
        self,
        db: Session,
        supplier_id: Optional[int] = None,
        status: Optional[str] = None,
        finance_status: Optional[str] = None,
        delivery_status: Optional[str] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Order]:
        """
        List orders newest first.

        Args:
            db: Database session
            supplier_id: Restrict to one supplier's orders
            status: Filter by supplier acceptance status
            finance_status: Filter by finance status
            delivery_status: Filter by delivery status
            skip: Pagination offset
            limit: Max results

        Returns:
            List of Order objects
        """
        query = db.query(Order)

        if supplier_id is not None:
            query = query.filter(Order.supplier_id == supplier_id)
        if status:
            query = query.filter(Order.status == status)
        if finance_status:
            query = query.filter(Order.finance_status == finance_status)
        if delivery_status:
            query = query.filter(Order.delivery_status == delivery_status)

        query = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip)
        if limit:
            query = query.limit(limit)
        return query.all()

    def accept_order(self, order_id: int, caller_id: int, db: Session) -> Order:
        order = self._transition(
            "accept", order_id, db,
            conditions=[Order.supplier_id == caller_id],
        )
        if not order:
            raise NotFoundError("Order not found or already processed")
        return order

    def reject_order(self, order_id: int, caller_id: int, db: Session) -> Order:
        order = self._transition(
            "reject", order_id, db,
            conditions=[Order.supplier_id == caller_id],
        )
        if not order:
            raise NotFoundError("Order not found or already processed")
        return order

    def submit_supply(self, order_id: int, caller_id: int, amount: Optional[Decimal], db: Session) -> Order:
        """
        Record the supplied amount and send it (back) to finance review.

        finance_status is reset to pending even if finance already decided.
        """
        if amount is None or amount <= 0:
            raise ValidationError("Amount is required")

        order = self._transition(
            "submit_supply", order_id, db,
            conditions=[
                Order.supplier_id == caller_id,
                Order.status == OrderStatus.APPROVED.value,
            ],
            values={"amount": amount},
        )
        if not order:
            raise NotFoundError("Order not found or unauthorized")
        return order

    def approve_finance(self, order_id: int, db: Session) -> Order:
        order = self._transition("approve_finance", order_id, db)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def reject_finance(self, order_id: int, db: Session) -> Order:
        order = self._transition("reject_finance", order_id, db)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def mark_delivered(self, order_id: int, caller_id: int, db: Session) -> Order:
        # Not gated on finance approval: delivery and payment are tracked independently
        order = self._transition(
            "mark_delivered", order_id, db,
            conditions=[Order.supplier_id == caller_id],
            values={"delivered_at": utcnow()},
        )
        if not order:
            raise NotFoundError("Order not found or unauthorized")
        return order

    def confirm_received(self, order_id: int, db: Session) -> Tuple[Order, bool]:
        """
        Inventory confirms the goods arrived, then adds the quantity to stock.

        Idempotent: confirming an already received order changes nothing.

        Args:
            order_id: Order ID
            db: Database session

        Returns:
            (order, already_received) tuple

        Raises:
            NotFoundError: order does not exist
            InvalidStateError: supplier has not delivered yet
        """
        order = self.get_order(order_id, db)

        if order.delivery_status == DeliveryStatus.PENDING.value:
            logger.warning(f"Order {order_id} cannot be confirmed: supplier has not delivered")
            raise InvalidStateError("Cannot confirm receipt. Supplier has not delivered yet.")

        if order.delivery_status == DeliveryStatus.RECEIVED.value:
            logger.info(f"Order {order_id} already confirmed as received")
            return order, True

        updated = self._transition(
            "confirm_received", order_id, db,
            values={"received_at": utcnow()},
        )
        if not updated:
            # Another request changed the row between our read and the update
            order = self.get_order(order_id, db)
            if order.delivery_status == DeliveryStatus.RECEIVED.value:
                logger.info(f"Order {order_id} was confirmed by a concurrent request")
                return order, True
            raise InvalidStateError("Cannot confirm receipt for this delivery status")

        self._increment_stock(updated, db)
        return self.get_order(order_id, db), False

    def _transition(
        self,
        operation: str,
        order_id: int,
        db: Session,
        conditions: Optional[list] = None,
        values: Optional[dict] = None
    ) -> Optional[Order]:
        """
        Apply one entry of TRANSITIONS as a conditional UPDATE.

        Returns:
            The reloaded order, or None when no row matched the precondition
        """
        axis, from_state, to_state = TRANSITIONS[operation]
        column = getattr(Order, axis)

        filters = [Order.id == order_id]
        if from_state is not None:
            filters.append(column == from_state.value)
        filters.extend(conditions or [])

        changes = {axis: to_state.value}
        changes.update(values or {})

        try:
            matched = (
                db.query(Order)
                .filter(*filters)
                .update(changes, synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to {operation} order {order_id}: {str(e)}")
            raise StoreError(str(e))

        if not matched:
            logger.warning(f"{operation} rejected for order {order_id}: precondition not met")
            return None

        logger.info(f"Order {order_id}: {axis} -> {to_state.value} ({operation})")
        return db.query(Order).filter(Order.id == order_id).first()

    def _increment_stock(self, order: Order, db: Session) -> None:
        """
        Add the order quantity to the item's stock.

        Failures are logged and swallowed; the order stays received and the
        stock count catches up only through manual correction.
        """
        quantity = coerce_quantity(order.quantity)
        item_id = order.item_id
        order_id = order.id
        try:
            matched = (
                db.query(InventoryItem)
                .filter(InventoryItem.id == item_id)
                .update(
                    {InventoryItem.current_stock: InventoryItem.current_stock + quantity},
                    synchronize_session=False
                )
            )
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to update stock for item {item_id} (order {order_id}): {str(e)}", exc_info=True)
            return

        if not matched:
            logger.error(f"Inventory item {item_id} for order {order_id} no longer exists; stock not updated")
            return

        logger.info(f"Added {quantity} to stock of item {item_id} (order {order_id})")

    def _commit(self, db: Session, action: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to {action}: {str(e)}")
            raise StoreError(str(e))


# Singleton instance
order_lifecycle_service = OrderLifecycleService()
