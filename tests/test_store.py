from decimal import Decimal

import pytest

from retail_pos.common.exceptions import StoreError
from retail_pos.core.config import Settings
from retail_pos.store import MemoryStore, SqlStore, build_store


def _add_customers(store, *names):
    with store.transaction() as tx:
        return tx.insert("customers", [{"name": name} for name in names])


def test_insert_generates_prefixed_ids_and_timestamps(store):
    rows = _add_customers(store, "Ann", "Bob")

    assert [r["name"] for r in rows] == ["Ann", "Bob"]
    assert all(r["id"].startswith("CUS-") for r in rows)
    assert all(r["created_at"] is not None for r in rows)
    assert rows[0]["id"] != rows[1]["id"]


def test_filters_and_order(store):
    _add_customers(store, "Ann", "Bob", "Annabel", "Carl")

    with store.transaction() as tx:
        names = [r["name"] for r in tx.select("customers", {"name__icontains": "ann"}, order="name")]
        desc = [r["name"] for r in tx.select("customers", {"name__in": ["Bob", "Carl"]}, order="-name")]
        ranged = [r["name"] for r in tx.select("customers", {"name__gte": "B", "name__lt": "C"})]

    assert names == ["Ann", "Annabel"]
    assert desc == ["Carl", "Bob"]
    assert ranged == ["Bob"]


def test_update_and_delete_return_counts(store):
    ann, bob = _add_customers(store, "Ann", "Bob")

    with store.transaction() as tx:
        assert tx.update("customers", {"id": ann["id"]}, {"phone": "555"}) == 1
        assert tx.delete("customers", {"id": bob["id"]}) == 1
        assert tx.delete("customers", {"id": "CUS-MISSING0"}) == 0

    with store.transaction() as tx:
        rows = tx.select("customers")
    assert [(r["name"], r["phone"]) for r in rows] == [("Ann", "555")]


def test_products_get_updated_at_on_update(store):
    with store.transaction() as tx:
        product = tx.insert("products", [{"name": "Cup", "cost_price": Decimal("1.00"),
                                          "sell_price": Decimal("2.00"), "stock": 0,
                                          "has_variants": False}])[0]
    assert product["updated_at"] is not None

    with store.transaction() as tx:
        tx.update("products", {"id": product["id"]}, {"stock": 3})
        stored = tx.select_one("products", {"id": product["id"]})
    assert stored["stock"] == 3
    assert stored["updated_at"] >= product["updated_at"]


def test_exception_rolls_back_unit_of_work(store):
    with pytest.raises(RuntimeError):
        with store.transaction() as tx:
            tx.insert("customers", [{"name": "Ghost"}])
            raise RuntimeError("boom")

    with store.transaction() as tx:
        assert tx.select("customers") == []


def test_unknown_table_and_operator(store):
    with store.transaction() as tx:
        with pytest.raises(StoreError):
            tx.select("widgets")
        with pytest.raises(StoreError):
            tx.select("customers", {"name__startswith": "A"})


def test_duplicate_id_is_a_store_error(store):
    ann = _add_customers(store, "Ann")[0]
    with pytest.raises(StoreError):
        with store.transaction() as tx:
            tx.insert("customers", [{"id": ann["id"], "name": "Ann again"}])


def test_sql_foreign_keys_are_enforced():
    sql_store = SqlStore("sqlite://")
    sql_store.init_schema()
    try:
        with pytest.raises(StoreError):
            with sql_store.transaction() as tx:
                tx.insert("variants", [{"product_id": "PRD-MISSING0", "name": "Orphan", "stock": 0,
                                        "price_adjustment": Decimal("0")}])
    finally:
        sql_store.dispose()


def test_build_store_follows_settings():
    assert isinstance(build_store(Settings(STORE_BACKEND="memory")), MemoryStore)

    sql_store = build_store(Settings(STORE_BACKEND="sql", DATABASE_URL="sqlite://"))
    assert isinstance(sql_store, SqlStore)
    sql_store.dispose()


def test_settings_reject_unknown_backend():
    with pytest.raises(ValueError):
        Settings(STORE_BACKEND="redis")


def test_settings_build_postgres_url():
    cfg = Settings(DATABASE_URL=None, DB_NAME="shop", DB_USER="app", DB_PASSWORD="p@ss", DB_HOST="db")
    assert cfg.database_url == "postgresql://app:p%40ss@db:5432/shop"


def test_unknown_columns_are_store_errors(store):
    ann = _add_customers(store, "Ann")[0]
    with store.transaction() as tx:
        with pytest.raises(StoreError):
            tx.select("customers", {"nickname": "A"})
        with pytest.raises(StoreError):
            tx.select("customers", order="-nickname")
        with pytest.raises(StoreError):
            tx.update("customers", {"id": ann["id"]}, {"nickname": "Annie"})
        with pytest.raises(StoreError):
            tx.delete("customers", {"nickname": "Annie"})


def test_unknown_insert_column_is_a_store_error(store):
    with pytest.raises(StoreError):
        with store.transaction() as tx:
            tx.insert("customers", [{"name": "Ann", "nickname": "Annie"}])

    with store.transaction() as tx:
        assert tx.select("customers") == []
