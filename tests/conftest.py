from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from smartware.core.ledger import Ledger
from smartware.core.rate_limiter import limiter
from smartware.core.store import LedgerPersister, SqlBlobStore
from smartware.database import init_db
from smartware.main import app
from smartware.models.product import Location, Product


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return SqlBlobStore(session_factory)


@pytest.fixture
def persister(store):
    return LedgerPersister(store, "swp_products", sync_window=0.5)


@pytest.fixture
def stock():
    return [
        Product(
            id="p-milk",
            sku="MILK-1",
            name="Sữa tươi Vinamilk 1L",
            category="Sữa",
            price=Decimal("32000"),
            cost=Decimal("25000"),
            quantity=3,
            min_stock=5,
            max_stock=100,
            lot="L01",
            expiry_date=date(2026, 10, 1),
        ),
        Product(
            id="p-rice",
            sku="RICE-5",
            name="Gạo ST25 5kg",
            category="Gạo",
            price=Decimal("180000"),
            cost=Decimal("150000"),
            quantity=40,
            min_stock=10,
            max_stock=30,
            location=Location(warehouse="Kho A", shelf="Kệ 02", tier="Tầng 2", box="Hộp 07"),
        ),
        Product(
            id="p-yogurt",
            sku="YOG-4",
            name="Sữa chua",
            category="Sữa",
            price=Decimal("7000"),
            cost=Decimal("5000"),
            quantity=12,
            min_stock=5,
            max_stock=50,
            expiry_date=date(2026, 11, 10),
        ),
    ]


@pytest.fixture
def ledger(stock, persister):
    return Ledger(stock, on_change=persister)


@pytest.fixture
def client(ledger, persister):
    app.state.ledger = ledger
    app.state.persister = persister
    limiter.reset()
    return TestClient(app)


@pytest.fixture
def staff_headers():
    return {"X-Role": "STAFF"}
