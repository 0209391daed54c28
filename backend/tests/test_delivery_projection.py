import csv
import io
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from app.models.inventory_item import InventoryItem
from app.models.order import Order
from app.schemas.delivery import DeliveryRecord
from app.services.delivery_projection_service import CSV_COLUMNS, delivery_projection_service
from conftest import make_order

BASE_TIME = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


def _record(order_id, item_name, quantity, status, amount=None, supplier_name="Coast Marine Supplies"):
    return DeliveryRecord(
        order_id=order_id,
        item_name=item_name,
        supplier_name=supplier_name,
        quantity=quantity,
        amount=amount,
        delivery_status=status,
    )


class TestListDeliveries:

    def test_newest_first(self, test_db, supplier, item):
        older = make_order(test_db, supplier, item, created_at=BASE_TIME)
        newer = make_order(test_db, supplier, item, created_at=BASE_TIME + timedelta(days=1))

        records = delivery_projection_service.list_deliveries(test_db)

        assert [r.order_id for r in records] == [newer.id, older.id]

    def test_scoped_to_supplier(self, test_db, supplier, other_supplier, item):
        mine = make_order(test_db, supplier, item)
        make_order(test_db, other_supplier, item)

        records = delivery_projection_service.list_deliveries(test_db, supplier_id=supplier.id)

        assert [r.order_id for r in records] == [mine.id]

    def test_denormalized_names_win_over_current_names(self, test_db, supplier, item):
        make_order(test_db, supplier, item)
        item.item_name = "Renamed Item"
        test_db.commit()

        records = delivery_projection_service.list_deliveries(test_db)

        assert records[0].item_name == "Life Jackets"

    def test_falls_back_to_joined_names(self, test_db, supplier, item):
        order = make_order(test_db, supplier, item)
        # Legacy rows were written without the snapshot columns filled in
        test_db.query(Order).filter(Order.id == order.id).update(
            {"item_name": "", "supplier_name": ""}, synchronize_session=False
        )
        test_db.commit()

        record = delivery_projection_service.list_deliveries(test_db)[0]

        assert record.item_name == "Life Jackets"
        assert record.supplier_name == "Coast Marine Supplies"

    def test_search_matches_item_or_supplier_case_insensitively(self, test_db, supplier, other_supplier, item):
        fuel = InventoryItem(item_name="Diesel Fuel", unit="litres")
        test_db.add(fuel)
        test_db.commit()

        jackets = make_order(test_db, supplier, item, created_at=BASE_TIME)
        diesel = make_order(test_db, other_supplier, fuel, created_at=BASE_TIME + timedelta(hours=1))

        assert [r.order_id for r in delivery_projection_service.list_deliveries(test_db, search="JACKET")] == [jackets.id]
        assert [r.order_id for r in delivery_projection_service.list_deliveries(test_db, search="lamu")] == [diesel.id]
        assert len(delivery_projection_service.list_deliveries(test_db, search="  ")) == 2

    def test_projection_does_not_mutate_orders(self, test_db, supplier, item):
        order = make_order(test_db, supplier, item, delivery_status="delivered")

        delivery_projection_service.list_deliveries(test_db)

        test_db.expire_all()
        assert test_db.query(Order).filter(Order.id == order.id).one().delivery_status == "delivered"


class TestGroupByItem:

    def test_totals_only_count_fulfilled_records(self):
        records = [
            _record(1, "Life Jackets", 10, "received", Decimal("100.00")),
            _record(2, "Diesel Fuel", 500, "delivered", Decimal("750.50")),
            _record(3, "Life Jackets", 5, "pending", Decimal("40.00")),
            _record(4, "Life Jackets", 2, "delivered", None),
        ]

        groups = delivery_projection_service.group_by_item(records)

        assert [g.item_name for g in groups] == ["Life Jackets", "Diesel Fuel"]
        jackets = groups[0]
        assert jackets.total_quantity == 12
        assert jackets.total_amount == Decimal("100.00")
        assert jackets.delivery_count == 2
        assert [r.order_id for r in jackets.deliveries] == [1, 3, 4]

    def test_empty_input(self):
        assert delivery_projection_service.group_by_item([]) == []


class TestExportCsv:

    def test_header_and_values_as_stored(self):
        delivered_at = datetime(2024, 3, 2, 14, 30, tzinfo=timezone.utc)
        records = [
            DeliveryRecord(
                order_id=7,
                item_name="Mooring Rope",
                supplier_name="Lamu Chandlers",
                quantity=25,
                amount=Decimal("1250.00"),
                delivered_at=delivered_at,
                delivery_status="delivered",
            ),
            _record(8, "Engine Oil", 3, "pending"),
        ]

        rows = list(csv.reader(io.StringIO(delivery_projection_service.export_csv(records))))

        assert rows[0] == CSV_COLUMNS
        assert rows[1] == ["7", "Mooring Rope", "Lamu Chandlers", "25", "1250.00", "delivered", delivered_at.isoformat()]
        assert rows[2] == ["8", "Engine Oil", "Coast Marine Supplies", "3", "", "pending", ""]

    def test_names_with_commas_are_quoted(self):
        records = [_record(1, "Rope, nylon", 1, "pending", supplier_name="Smith, Sons & Co")]

        rows = list(csv.reader(io.StringIO(delivery_projection_service.export_csv(records))))

        assert rows[1][1:3] == ["Rope, nylon", "Smith, Sons & Co"]
