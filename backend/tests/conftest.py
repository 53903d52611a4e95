"""
Pytest configuration and fixtures for the fulfillment workflow API
"""
import os

# The app module creates its tables on import; keep that away from the working copy database
os.environ.setdefault("DATABASE_URL", "sqlite://")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.manufacturer import Manufacturer, UserManufacturerAssociation
from models.manufacturing import ManufacturingRecord, ManufacturingUpdate
from models.order import Order, OrderLineItem, OrderLineItemManufacturer
from models.product import Product, ProductVariant
from models.users import User
from services import snapshots, workflow
from services.tenant_scope import Actor, normalize_role, resolve_manufacturer_id
from utils.tokenJWT import create_access_token


@pytest.fixture(scope="function")
def db_session():
    """
    Isolated in-memory database per test. StaticPool keeps one connection so the
    TestClient worker thread sees the same data as the test.
    """
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(db_session):
    """TestClient bound to the test session"""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def world(db_session):
    """
    Users for every role, two manufacturers and order 42 with three line items:
    the first two assigned to Alpha, the third to Bravo.
    """
    db = db_session

    admin = User(email="admin@example.com", role="admin", first_name="Ada", last_name="Admin")
    ops = User(email="ops@example.com", role="OPS")
    maker_a_user = User(email="maker-a@example.com", role="manufacturer")
    maker_b_user = User(email="maker-b@example.com", role="manufacturer")
    orphan = User(email="orphan@example.com", role="manufacturer")
    sales = User(email="sales@example.com", role="sales")
    maker_a = Manufacturer(name="Alpha Apparel", lead_time_days=10)
    maker_b = Manufacturer(name="Bravo Garments")
    db.add_all([admin, ops, maker_a_user, maker_b_user, orphan, sales, maker_a, maker_b])
    db.flush()

    db.add_all([
        UserManufacturerAssociation(user_id=maker_a_user.id, manufacturer_id=maker_a.id),
        UserManufacturerAssociation(user_id=maker_b_user.id, manufacturer_id=maker_b.id),
    ])

    product = Product(sku="TEE-100", name="Heavyweight Tee", base_price=12.5,
                      image_url="https://cdn.example.com/tee.png")
    variant = ProductVariant(product=product, variant_code="TEE-100-BLK", color="Black", msrp=30, cost=8,
                             image_url="https://cdn.example.com/tee-black.png")
    order = Order(id=42, order_code="ORD-42", order_name="Spring League Kits",
                  subtotal=1000, tax_amount=80, total=1080, invoice_url="https://billing.example.com/inv/42")
    tee = OrderLineItem(variant=variant, s=10, m=20, l=5, unit_price=12.5)
    polo = OrderLineItem(variant=variant, item_name="Coach Polo", image_url="https://cdn.example.com/polo.png",
                         m=2, xl=1, unit_price=22)
    blank = OrderLineItem(unit_price=5, yxs=None)
    order.line_items = [tee, polo, blank]
    db.add_all([product, variant, order])
    db.flush()

    db.add_all([
        OrderLineItemManufacturer(line_item_id=tee.id, manufacturer_id=maker_a.id, unit_cost=6),
        OrderLineItemManufacturer(line_item_id=polo.id, manufacturer_id=maker_a.id, unit_cost=11),
        OrderLineItemManufacturer(line_item_id=blank.id, manufacturer_id=maker_b.id),
    ])
    db.commit()

    return SimpleNamespace(
        admin=admin, ops=ops, maker_a_user=maker_a_user, maker_b_user=maker_b_user, orphan=orphan,
        sales=sales, maker_a=maker_a, maker_b=maker_b, product=product, variant=variant, order=order,
        tee=tee, polo=polo, blank=blank,
    )


@pytest.fixture
def auth():
    """Returns a function building bearer headers for a user"""

    def _headers(user):
        token = create_access_token({"sub": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def actor_for(db_session):
    """Returns a function building the Actor the auth dependency would build"""

    def _actor(user):
        role = normalize_role(user.role)
        manufacturer_id = resolve_manufacturer_id(db_session, user.id) if role == "manufacturer" else None
        return Actor(user_id=user.id, role=role, manufacturer_id=manufacturer_id)

    return _actor


@pytest.fixture
def record(db_session, world):
    """Manufacturing record for order 42 assigned to Alpha, with its initial update snapshotted"""
    db = db_session
    rec = ManufacturingRecord(order_id=world.order.id, manufacturer_id=world.maker_a.id)
    db.add(rec)
    db.flush()
    update = ManufacturingUpdate(manufacturing_id=rec.id, order_id=world.order.id,
                                 status=rec.status, updated_by=world.admin.id)
    db.add(update)
    db.flush()
    snapshots.create_snapshot(db, update.id, world.order.id)
    db.commit()
    return SimpleNamespace(record=rec, update=update)


@pytest.fixture
def job(db_session, world, record, actor_for):
    """Portal job for the record, created by an admin"""
    return workflow.create_job(
        db_session,
        {"manufacturing_id": record.record.id, "order_id": world.order.id},
        actor_for(world.admin),
    )
