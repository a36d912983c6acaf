from retail_pos.seed import seed_demo_data
from retail_pos.services.dashboard_service import DashboardService


def test_seed_builds_consistent_demo_data(store):
    summary = seed_demo_data(store, seed=7, customers=3, suppliers=2, products=6, sales=5, expenses=2)

    assert summary["customers"] == 3
    assert summary["products"] == 6
    assert summary["sales_orders"] == 5

    with store.transaction() as tx:
        products = tx.select("products")
        variants = tx.select("variants")
        assert len(tx.select("sales_orders")) == 5
        assert len(tx.select("expenses")) == 2

    for product in products:
        own = [v for v in variants if v["product_id"] == product["id"]]
        if product["has_variants"]:
            assert product["stock"] == sum(v["stock"] for v in own)
        assert product["stock"] >= 0

    assert DashboardService(store).get_kpis()["order_count"] == 5


def test_seed_replaces_previous_data(store):
    seed_demo_data(store, seed=1, customers=2, suppliers=1, products=3, sales=2, expenses=1)
    seed_demo_data(store, seed=2, customers=2, suppliers=1, products=3, sales=2, expenses=1)

    with store.transaction() as tx:
        assert len(tx.select("customers")) == 2
        assert len(tx.select("products")) == 3
