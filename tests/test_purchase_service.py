from decimal import Decimal

import pytest

from retail_pos.common.exceptions import NotFoundError, ValidationError
from retail_pos.services.contact_service import create_supplier
from retail_pos.services.product_service import get_product_by_id
from retail_pos.services.purchase_service import PurchaseService


def test_create_adds_stock_and_computes_total(store, supplier, plain_product, variant_product, stock_of):
    v1 = variant_product["variants"][0]
    order = PurchaseService(store).create_purchase_order(supplier["id"], [
        {"product_id": plain_product["id"], "quantity": 4, "unit_amount": Decimal("9.50")},
        {"product_id": variant_product["id"], "variant_id": v1["id"], "quantity": 5,
         "unit_amount": Decimal("2.00")},
    ])

    assert [i["line_total"] for i in order["items"]] == [Decimal("38.00"), Decimal("10.00")]
    assert order["total_amount"] == Decimal("48.00")
    assert order["supplier"]["name"] == "Acme Wholesale"

    assert stock_of("products", plain_product["id"]) == 14
    assert stock_of("variants", v1["id"]) == 15
    assert stock_of("products", variant_product["id"]) == 20


def test_delete_takes_stock_back_out(store, supplier, variant_product, stock_of):
    v1 = variant_product["variants"][0]
    service = PurchaseService(store)
    order = service.create_purchase_order(supplier["id"], [
        {"product_id": variant_product["id"], "variant_id": v1["id"], "quantity": 5,
         "unit_amount": Decimal("2.00")},
    ])

    service.delete_purchase_order(order["id"])

    assert stock_of("variants", v1["id"]) == 10
    assert stock_of("products", variant_product["id"]) == 15
    assert service.get_purchase_orders() == []
    with pytest.raises(NotFoundError):
        service.get_purchase_order(order["id"])


def test_line_with_only_a_name_creates_the_product(store, supplier):
    service = PurchaseService(store)
    order = service.create_purchase_order(supplier["id"], [
        {"product_name": "Desk Lamp", "quantity": 10, "unit_amount": Decimal("12.50")},
    ])

    product = get_product_by_id(store, order["items"][0]["product_id"])
    assert product["name"] == "Desk Lamp"
    assert product["stock"] == 10
    assert product["cost_price"] == Decimal("12.50")
    assert product["sell_price"] == Decimal("16.25")
    assert product["supplier_id"] == supplier["id"]


def test_unknown_supplier(store, plain_product):
    with pytest.raises(NotFoundError):
        PurchaseService(store).create_purchase_order("SUP-MISSING0", [
            {"product_id": plain_product["id"], "quantity": 1, "unit_amount": Decimal("1.00")},
        ])


@pytest.mark.parametrize("items", [
    [],
    [{"product_id": "PRD-X", "quantity": 1}],
    [{"quantity": 1, "unit_amount": "1.00"}],
    [{"product_id": "PRD-X", "quantity": -1, "unit_amount": "1.00"}],
])
def test_invalid_lines(store, supplier, items):
    with pytest.raises(ValidationError):
        PurchaseService(store).create_purchase_order(supplier["id"], items)


def test_failed_line_rolls_back_inline_products(store, supplier):
    service = PurchaseService(store)
    with pytest.raises(NotFoundError):
        service.create_purchase_order(supplier["id"], [
            {"product_name": "Stapler", "quantity": 3, "unit_amount": Decimal("4.00")},
            {"product_id": "PRD-MISSING0", "quantity": 1, "unit_amount": Decimal("1.00")},
        ])

    with store.transaction() as tx:
        assert tx.select("products") == []
        assert tx.select("purchase_orders") == []


def test_list_filters_by_supplier(store, supplier, plain_product):
    other = create_supplier(store, {"name": "Other Supplies"})
    service = PurchaseService(store)
    line = {"product_id": plain_product["id"], "quantity": 1, "unit_amount": Decimal("9.00")}
    mine = service.create_purchase_order(supplier["id"], [line])
    service.create_purchase_order(other["id"], [line])

    orders = service.get_purchase_orders(supplier_id=supplier["id"])
    assert [o["id"] for o in orders] == [mine["id"]]
    assert len(service.get_purchase_orders()) == 2


def test_inline_product_with_first_variant(store):
    service = PurchaseService(store, default_markup=Decimal("2"))
    ids = service.create_inline_product("Mug", Decimal("3.00"), variant_name="Blue")

    product = get_product_by_id(store, ids["product_id"])
    assert product["has_variants"] is True
    assert product["sell_price"] == Decimal("6.00")
    assert [v["id"] for v in product["variants"]] == [ids["variant_id"]]
    assert product["stock"] == 0


def test_inline_variant_on_plain_product(store, supplier, stock_of):
    service = PurchaseService(store)
    ids = service.create_inline_product("Pen", Decimal("1.00"))
    assert ids["variant_id"] is None

    variant = service.create_inline_variant(ids["product_id"], "Red", price_adjustment=Decimal("0.50"))
    assert variant["product_id"] == ids["product_id"]

    service.create_purchase_order(supplier["id"], [
        {"product_id": ids["product_id"], "variant_id": variant["id"], "quantity": 7,
         "unit_amount": Decimal("1.00")},
    ])
    assert stock_of("products", ids["product_id"]) == 7


def test_inline_variant_refused_while_plain_stock_on_hand(store, plain_product):
    with pytest.raises(ValidationError):
        PurchaseService(store).create_inline_variant(plain_product["id"], "Blue")


def test_delete_unknown_purchase_order(store):
    with pytest.raises(NotFoundError):
        PurchaseService(store).delete_purchase_order("PO-MISSING0")
