"""
Shared fixtures for the DropX API tests.

The application engine points at a throwaway SQLite file; every test gets
freshly created tables, a seeded catalog and an authenticated user.
"""
import os
import tempfile
from decimal import Decimal

_tmp_dir = tempfile.mkdtemp(prefix="dropx-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp_dir, 'test.db')}"
os.environ["MEDIA_ROOT"] = os.path.join(_tmp_dir, "media")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event

from dropx.main import app
from dropx.models.user import Base, SessionLocal, User, engine
from dropx.models.merchant import Merchant, MenuItem
import dropx.models.cart  # noqa: F401
import dropx.models.address  # noqa: F401
import dropx.models.order  # noqa: F401
import dropx.models.activity  # noqa: F401
from dropx.utils.security import create_access_token, hash_password

SESSION_KEY = "test-session-key"


# pysqlite defers BEGIN, which breaks SAVEPOINT; emit it ourselves
@event.listens_for(engine, "connect")
def _sqlite_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    # keep attributes loaded after commit so no read transaction stays open
    session = SessionLocal(expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db):
    """Two active merchants and their menus, plus one inactive merchant."""
    pizza = Merchant(
        name="Pizza Place",
        category="Restaurants",
        delivery_fee=Decimal("150.00"),
        min_order_amount=Decimal("2500.00"),
        rating=4.5,
        is_active=True,
    )
    grocer = Merchant(
        name="Corner Grocer",
        category="Groceries",
        delivery_fee=Decimal("100.00"),
        min_order_amount=Decimal("0.00"),
        rating=4.0,
        is_active=True,
    )
    closed = Merchant(name="Closed Kitchen", category="Restaurants", is_active=False)
    db.add_all([pizza, grocer, closed])
    db.flush()

    margherita = MenuItem(
        merchant_id=pizza.id, name="Margherita", description="Tomato and mozzarella",
        price=Decimal("1000.00"), image_url="margherita.jpg", in_stock=True,
    )
    pepperoni = MenuItem(
        merchant_id=pizza.id, name="Pepperoni", price=Decimal("1200.00"),
        discounted_price=Decimal("999.50"), image_url="https://cdn.example.com/pepperoni.jpg",
    )
    milk = MenuItem(merchant_id=grocer.id, name="Milk 1L", price=Decimal("250.00"))
    db.add_all([margherita, pepperoni, milk])
    db.commit()

    return {
        "pizza": pizza.id,
        "grocer": grocer.id,
        "closed": closed.id,
        "margherita": margherita.id,
        "pepperoni": pepperoni.id,
        "milk": milk.id,
    }


@pytest.fixture
def user(db):
    u = User(full_name="Amina Test", email="amina@example.com", phone="0991000000", password=hash_password("secret1"))
    db.add(u)
    db.commit()
    return u


@pytest.fixture
def auth_headers(user):
    token = create_access_token(subject=user.id)
    return {"Authorization": f"Bearer {token}", "X-Cart-Session": SESSION_KEY}


@pytest.fixture
def test_client():
    with TestClient(app) as client:
        yield client
