from decimal import Decimal

import pytest

from retail_pos.common.exceptions import NotFoundError, ValidationError
from retail_pos.services.product_service import (
    create_product,
    delete_product,
    get_all_products,
    get_product_by_id,
    update_product,
)
from retail_pos.services.sales_service import SalesService


def _payload(product, **overrides):
    data = {
        "name": product["name"],
        "sku": product.get("sku"),
        "description": product.get("description"),
        "cost_price": product["cost_price"],
        "sell_price": product["sell_price"],
        "stock": product["stock"],
        "has_variants": product["has_variants"],
        "supplier_id": product.get("supplier_id"),
        "variants": [
            {"id": v["id"], "name": v["name"], "stock": v["stock"], "price_adjustment": v["price_adjustment"]}
            for v in product["variants"]
        ],
    }
    data.update(overrides)
    return data


def test_update_reconciles_variants_and_rederives_stock(store, variant_product):
    v1, v2 = variant_product["variants"]
    updated = update_product(store, variant_product["id"], _payload(variant_product, variants=[
        {"id": v1["id"], "name": "V1", "stock": 7},
        {"name": "V3", "stock": 4, "price_adjustment": Decimal("1.50")},
    ]))

    assert {v["name"]: v["stock"] for v in updated["variants"]} == {"V1": 7, "V3": 4}
    assert updated["stock"] == 11

    with store.transaction() as tx:
        assert tx.select_one("variants", {"id": v2["id"]}) is None
        stored = tx.select_one("products", {"id": variant_product["id"]})
        variants = tx.select("variants", {"product_id": variant_product["id"]})
    assert stored["stock"] == sum(v["stock"] for v in variants) == 11


def test_update_plain_product_fields(store, plain_product, supplier):
    updated = update_product(store, plain_product["id"], _payload(
        plain_product, name="Notebook A5", stock=25, sell_price=Decimal("16.00"), supplier_id=supplier["id"],
    ))

    assert updated["name"] == "Notebook A5"
    assert updated["stock"] == 25
    assert updated["sell_price"] == Decimal("16.00")
    assert updated["supplier_id"] == supplier["id"]
    assert updated["variants"] == []


def test_update_with_unknown_supplier_writes_nothing(store, plain_product):
    with pytest.raises(NotFoundError):
        update_product(store, plain_product["id"], _payload(
            plain_product, name="Renamed", supplier_id="SUP-MISSING0",
        ))

    product = get_product_by_id(store, plain_product["id"])
    assert product["name"] == "Notebook"
    assert product["supplier_id"] is None


def test_create_with_unknown_supplier(store):
    with pytest.raises(NotFoundError):
        create_product(store, {"name": "Orphan", "supplier_id": "SUP-MISSING0"})


def test_update_rejects_variant_of_another_product(store, variant_product):
    other = create_product(store, {
        "name": "Hoodie",
        "has_variants": True,
        "variants": [{"name": "XL", "stock": 2}],
    })
    foreign = other["variants"][0]

    with pytest.raises(NotFoundError):
        update_product(store, variant_product["id"], _payload(variant_product, variants=[
            {"id": foreign["id"], "name": "XL", "stock": 2},
        ]))

    assert get_product_by_id(store, other["id"])["variants"][0]["stock"] == 2
    assert get_product_by_id(store, variant_product["id"])["stock"] == 15


def test_update_keeps_variants_with_order_history(store, customer, variant_product):
    v1, v2 = variant_product["variants"]
    SalesService(store).create_sale(customer["id"], [
        {"product_id": variant_product["id"], "variant_id": v2["id"], "quantity": 1},
    ])

    with pytest.raises(ValidationError, match="order history"):
        update_product(store, variant_product["id"], _payload(variant_product, variants=[
            {"id": v1["id"], "name": "V1", "stock": 10},
        ]))

    product = get_product_by_id(store, variant_product["id"])
    assert [v["id"] for v in product["variants"]] == [v1["id"], v2["id"]]
    assert product["stock"] == 14


def test_update_unknown_product(store):
    with pytest.raises(NotFoundError):
        update_product(store, "PRD-MISSING0", {"name": "Ghost"})


def test_delete_product_removes_variants(store, variant_product):
    delete_product(store, variant_product["id"])

    with pytest.raises(NotFoundError):
        get_product_by_id(store, variant_product["id"])
    with store.transaction() as tx:
        assert tx.select("variants", {"product_id": variant_product["id"]}) == []


def test_delete_product_with_history_is_refused(store, customer, plain_product):
    SalesService(store).create_sale(customer["id"], [{"product_id": plain_product["id"], "quantity": 1}])

    with pytest.raises(ValidationError):
        delete_product(store, plain_product["id"])
    assert get_product_by_id(store, plain_product["id"])["stock"] == 9


def test_search_by_name(store, plain_product, variant_product):
    assert [p["id"] for p in get_all_products(store, search="shirt")] == [variant_product["id"]]
    assert len(get_all_products(store)) == 2
