"""
Pytest fixtures for API tests.

Each test gets its own in-memory SQLite database; the app's get_db
dependency is overridden to use it.
"""

from types import SimpleNamespace
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db
from app.events import bus


ACTOR = {"X-User-Email": "Ops@Example.com"}


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clean_bus():
    bus.reset()
    yield
    bus.reset()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def warehouse(client):
    response = client.post("/warehouses/", json={"name": "Main", "location": "Pune"})
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def make_item(client, warehouse):
    def _make(**overrides):
        payload = {
            "warehouseId": warehouse["id"],
            "name": "Widget",
            "category": "Hardware",
            "quantity": 20,
            "price": "100",
            "minThreshold": 5,
        }
        payload.update(overrides)
        response = client.post("/stock/inventory/", json=payload, headers=ACTOR)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


def make_stock(id="item-1", price="100", quantity=20, min_threshold=5,
               category="General", name="Widget", warehouse_id="wh-1"):
    return SimpleNamespace(
        id=id,
        name=name,
        category=category,
        warehouse_id=warehouse_id,
        quantity=quantity,
        price=Decimal(price),
        min_threshold=min_threshold,
    )


def make_tx(item_id="item-1", type="OUT", quantity=1, price="0", cost_price=None,
            tax_percent=None, date=None, id=None):
    return SimpleNamespace(
        id=id or f"{item_id}-{type}-{quantity}",
        item_id=item_id,
        type=type,
        quantity=quantity,
        price=Decimal(price),
        cost_price=None if cost_price is None else Decimal(cost_price),
        tax_percent=None if tax_percent is None else Decimal(tax_percent),
        date=date,
    )
