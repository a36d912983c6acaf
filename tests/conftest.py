from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from retail_pos.core.config import Settings
from retail_pos.main import create_app
from retail_pos.services.contact_service import create_customer, create_supplier
from retail_pos.services.product_service import create_product
from retail_pos.store.memory import MemoryStore
from retail_pos.store.sql import SqlStore


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Every service test runs against both backends."""
    if request.param == "memory":
        yield MemoryStore()
        return
    sql_store = SqlStore("sqlite://")
    sql_store.init_schema()
    yield sql_store
    sql_store.dispose()


@pytest.fixture
def customer(store):
    return create_customer(store, {"name": "Walk-in Customer"})


@pytest.fixture
def supplier(store):
    return create_supplier(store, {"name": "Acme Wholesale"})


@pytest.fixture
def plain_product(store):
    """Product P: no variants, stock 10, sells at 15.00, costs 9.00."""
    return create_product(store, {
        "name": "Notebook",
        "cost_price": Decimal("9.00"),
        "sell_price": Decimal("15.00"),
        "stock": 10,
    })


@pytest.fixture
def variant_product(store):
    """Product with V1 (stock 10) and V2 (stock 5, +2.00); product stock 15."""
    return create_product(store, {
        "name": "T-Shirt",
        "cost_price": Decimal("8.00"),
        "sell_price": Decimal("20.00"),
        "has_variants": True,
        "variants": [
            {"name": "V1", "stock": 10},
            {"name": "V2", "stock": 5, "price_adjustment": Decimal("2.00")},
        ],
    })


@pytest.fixture
def stock_of(store):
    def _stock(table, row_id):
        with store.transaction() as tx:
            return tx.select_one(table, {"id": row_id})["stock"]
    return _stock


@pytest.fixture
def client():
    app = create_app(Settings(STORE_BACKEND="memory"))
    with TestClient(app) as c:
        yield c
