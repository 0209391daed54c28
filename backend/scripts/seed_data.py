"""
Seed script to generate synthetic suppliers, inventory, orders, ferries and bookings for demo purposes
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from app.database import SessionLocal, engine, Base
from app.models.supplier import Supplier
from app.models.inventory_item import InventoryItem
from app.models.order import Order
from app.models.ferry import Ferry
from app.models.booking import Booking
from app.models.chat_message import ChatMessage
from app.security import create_access_token
from app.utils.clock import utcnow
from decimal import Decimal
from datetime import date, timedelta
from faker import Faker

fake = Faker()

ITEMS = [
    ("Life Jackets", "Safety", "pcs"),
    ("Diesel Fuel", "Fuel", "litres"),
    ("Engine Oil", "Maintenance", "litres"),
    ("Mooring Rope", "Deck", "m"),
    ("First Aid Kits", "Safety", "pcs"),
    ("Bottled Water", "Catering", "crates"),
]

ROUTES = ["Likoni - Mtongwe", "Mombasa - Lamu", "Kisumu - Mbita", "Lamu - Manda"]


def create_suppliers(db: Session, count: int = 4) -> list[Supplier]:
    """Create synthetic suppliers; the last one is left pending approval"""
    suppliers = []
    for i in range(count):
        supplier = Supplier(
            name=fake.company(),
            email=fake.unique.company_email(),
            phone=fake.phone_number(),
            address=fake.address().replace("\n", ", "),
            status="pending" if i == count - 1 else "active"
        )
        db.add(supplier)
        suppliers.append(supplier)
    db.commit()
    return suppliers


def create_inventory_items(db: Session) -> list[InventoryItem]:
    items = []
    for item_name, category, unit in ITEMS:
        item = InventoryItem(
            item_name=item_name,
            category=category,
            unit=unit,
            current_stock=fake.random_int(min=0, max=200),
            reorder_level=fake.random_int(min=10, max=50)
        )
        db.add(item)
        items.append(item)
    db.commit()
    return items


def create_orders(db: Session, suppliers: list[Supplier], items: list[InventoryItem]) -> list[Order]:
    """Create orders covering every stage of the order lifecycle"""
    active = [s for s in suppliers if s.status == "active"]

    # (status, finance_status, delivery_status, has_amount)
    stages = [
        ("pending", "pending", "pending", False),
        ("rejected", "pending", "pending", False),
        ("approved", "pending", "pending", False),
        ("approved", "pending", "pending", True),
        ("approved", "approved", "pending", True),
        ("approved", "rejected", "pending", True),
        ("approved", "approved", "delivered", True),
        ("approved", "approved", "received", True),
    ]

    orders = []
    for status, finance_status, delivery_status, has_amount in stages:
        supplier = fake.random_element(elements=active)
        item = fake.random_element(elements=items)
        created_at = utcnow() - timedelta(days=fake.random_int(min=3, max=30))

        order = Order(
            supplier_id=supplier.id,
            supplier_name=supplier.name,
            item_id=item.id,
            item_name=item.item_name,
            quantity=fake.random_int(min=5, max=100),
            amount=Decimal(str(round(fake.random.uniform(100.0, 5000.0), 2))) if has_amount else None,
            status=status,
            finance_status=finance_status,
            delivery_status=delivery_status,
            created_at=created_at
        )
        if delivery_status in ("delivered", "received"):
            order.delivered_at = created_at + timedelta(days=1)
        if delivery_status == "received":
            order.received_at = created_at + timedelta(days=2)

        db.add(order)
        orders.append(order)

    db.commit()
    return orders


def create_ferries(db: Session) -> list[Ferry]:
    ferries = []
    for name, capacity in (("MV Likoni", 400), ("MV Harambee", 250), ("MV Kilindini", 600)):
        ferry = Ferry(name=name, capacity=capacity, status="available")
        db.add(ferry)
        ferries.append(ferry)
    db.commit()
    return ferries


def create_bookings(db: Session, ferries: list[Ferry], passenger_ids: list[int], count: int = 10) -> list[Booking]:
    bookings = []
    for _ in range(count):
        booking_type = fake.random_element(elements=("passenger", "vehicle", "cargo"))
        booking_status = fake.random_element(elements=("pending", "approved", "assigned", "completed", "cancelled"))
        amount_paid = Decimal(str(fake.random_int(min=0, max=3000)))

        booking = Booking(
            user_id=fake.random_element(elements=passenger_ids),
            booking_type=booking_type,
            travel_date=date.today() + timedelta(days=fake.random_int(min=-10, max=20)),
            travel_time=f"{fake.random_int(min=6, max=20):02d}:00",
            route=fake.random_element(elements=ROUTES),
            num_passengers=fake.random_int(min=1, max=6) if booking_type == "passenger" else None,
            vehicle_type=fake.random_element(elements=("Saloon", "Pickup", "Lorry")) if booking_type == "vehicle" else None,
            vehicle_plate=fake.bothify(text="K??###?").upper() if booking_type == "vehicle" else None,
            cargo_description=fake.catch_phrase() if booking_type == "cargo" else None,
            cargo_weight_kg=Decimal(str(fake.random_int(min=50, max=2000))) if booking_type == "cargo" else None,
            amount_paid=amount_paid,
            payment_method=fake.random_element(elements=("mpesa", "card", "cash", "bank")),
            transaction_id=fake.bothify(text="TX########") if amount_paid > 0 else None,
            payment_status="paid" if amount_paid > 0 else "pending",
            booking_status=booking_status,
            ferry_name=fake.random_element(elements=ferries).name if booking_status in ("assigned", "completed") else None
        )
        db.add(booking)
        bookings.append(booking)
    db.commit()
    return bookings


def create_chat_messages(db: Session, suppliers: list[Supplier]) -> int:
    count = 0
    for supplier in suppliers[:2]:
        room_id = f"supplier-{supplier.id}"
        for sender, text in (
            (supplier.name, "Hello, we have received your order."),
            ("Inventory", "Great, please share the expected delivery date."),
        ):
            db.add(ChatMessage(room_id=room_id, sender=sender, message=text))
            count += 1
    db.commit()
    return count


def main():
    """Main seeding function"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        print("Creating suppliers...")
        suppliers = create_suppliers(db, count=4)
        print(f"Created {len(suppliers)} suppliers")

        print("Creating inventory items...")
        items = create_inventory_items(db)
        print(f"Created {len(items)} inventory items")

        print("Creating orders...")
        orders = create_orders(db, suppliers, items)
        print(f"Created {len(orders)} orders")

        print("Creating ferries...")
        ferries = create_ferries(db)
        print(f"Created {len(ferries)} ferries")

        passenger_ids = [1001, 1002, 1003]
        print("Creating bookings...")
        bookings = create_bookings(db, ferries, passenger_ids, count=10)
        print(f"Created {len(bookings)} bookings")

        messages = create_chat_messages(db, suppliers)

        print("\nSeeding complete!")
        print(f"Summary:")
        print(f"  - Suppliers: {len(suppliers)} (1 pending approval)")
        print(f"  - Inventory Items: {len(items)}")
        print(f"  - Orders: {len(orders)}")
        print(f"  - Ferries: {len(ferries)}")
        print(f"  - Bookings: {len(bookings)}")
        print(f"  - Chat Messages: {messages}")

        print("\nDemo tokens:")
        print(f"  supplier  ({suppliers[0].name}): {create_access_token(suppliers[0].id, 'supplier')}")
        print(f"  inventory: {create_access_token(1, 'inventory')}")
        print(f"  finance:   {create_access_token(2, 'finance')}")
        print(f"  crew:      {create_access_token(3, 'crew')}")
        print(f"  admin:     {create_access_token(4, 'admin')}")
        print(f"  passenger: {create_access_token(passenger_ids[0], 'passenger')}")

    except Exception as e:
        print(f"Error during seeding: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
