import os

# Settings are read on import, so point them at a throwaway database first
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_ferry.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import Base, get_db
from app.models.inventory_item import InventoryItem
from app.models.order import Order
from app.models.supplier import Supplier
from app.routers.chat import get_session_factory
from app.security import create_access_token
from app.main import app


@pytest.fixture
def test_engine(tmp_path):
    # File-backed so that several sessions (and threads) see the same data
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30}
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def test_db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_header(role: str, user_id=1) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


@pytest.fixture
def supplier(test_db):
    supplier = Supplier(name="Coast Marine Supplies", email="orders@coastmarine.example", status="active")
    test_db.add(supplier)
    test_db.commit()
    test_db.refresh(supplier)
    return supplier


@pytest.fixture
def other_supplier(test_db):
    supplier = Supplier(name="Lamu Chandlers", email="sales@lamuchandlers.example", status="active")
    test_db.add(supplier)
    test_db.commit()
    test_db.refresh(supplier)
    return supplier


@pytest.fixture
def item(test_db):
    item = InventoryItem(item_name="Life Jackets", category="Safety", unit="pcs", current_stock=10, reorder_level=5)
    test_db.add(item)
    test_db.commit()
    test_db.refresh(item)
    return item


def make_order(db, supplier, item, quantity=5, **fields) -> Order:
    """Insert an order directly, bypassing the lifecycle, in any state"""
    order = Order(
        supplier_id=supplier.id,
        supplier_name=supplier.name,
        item_id=item.id,
        item_name=item.item_name,
        quantity=quantity,
        **fields
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    return order
