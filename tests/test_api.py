def _create_customer(client, name="Jane Doe"):
    r = client.post("/api/v1/customers", json={"name": name})
    assert r.status_code == 201
    return r.json()


def _create_supplier(client, name="Acme Wholesale"):
    r = client.post("/api/v1/suppliers", json={"name": name})
    assert r.status_code == 201
    return r.json()


def _create_product(client, **overrides):
    payload = {"name": "Notebook", "cost_price": 9.00, "sell_price": 15.00, "stock": 10}
    payload.update(overrides)
    r = client.post("/api/v1/products", json=payload)
    assert r.status_code == 201, r.json()
    return r.json()


def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["store"] == "memory"


def test_sale_lifecycle(client):
    customer = _create_customer(client)
    product = _create_product(client)

    r = client.post("/api/v1/sales", json={
        "customer_id": customer["id"],
        "items": [{"product_id": product["id"], "quantity": 3}],
    })
    assert r.status_code == 201
    order = r.json()
    assert order["status"] == "completed"
    assert order["total_amount"] == "45.00"
    assert order["items"][0]["unit_price"] == "15.00"
    assert order["customer"]["name"] == "Jane Doe"

    assert client.get(f"/api/v1/products/{product['id']}").json()["stock"] == 7

    listing = client.get("/api/v1/sales").json()
    assert listing["total"] == 1
    assert listing["orders"][0]["id"] == order["id"]

    r = client.delete(f"/api/v1/sales/{order['id']}")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert client.get(f"/api/v1/products/{product['id']}").json()["stock"] == 10
    assert client.get(f"/api/v1/sales/{order['id']}").status_code == 404


def test_update_sale(client):
    customer = _create_customer(client)
    product = _create_product(client)
    order = client.post("/api/v1/sales", json={
        "customer_id": customer["id"],
        "items": [{"product_id": product["id"], "quantity": 2}],
    }).json()

    r = client.put(f"/api/v1/sales/{order['id']}", json={
        "customer_id": customer["id"],
        "items": [{"product_id": product["id"], "quantity": 5, "unit_amount": 14.00}],
    })
    assert r.status_code == 200
    assert r.json()["total_amount"] == "70.00"
    assert client.get(f"/api/v1/products/{product['id']}").json()["stock"] == 5


def test_insufficient_stock_is_a_conflict(client):
    customer = _create_customer(client)
    product = _create_product(client)

    r = client.post("/api/v1/sales", json={
        "customer_id": customer["id"],
        "items": [{"product_id": product["id"], "quantity": 11}],
    })
    assert r.status_code == 409
    body = r.json()
    assert body["success"] is False
    assert {"item": "Notebook", "available": 10, "requested": 11} in body["errors"]
    assert client.get(f"/api/v1/products/{product['id']}").json()["stock"] == 10


def test_check_stock_endpoint(client):
    product = _create_product(client)
    r = client.post("/api/v1/sales/check-stock", json={
        "items": [{"product_id": product["id"], "quantity": 10}],
    })
    assert r.status_code == 200
    assert r.json()["available"] is True

    r = client.post("/api/v1/sales/check-stock", json={
        "items": [{"product_id": product["id"], "quantity": 11}],
    })
    assert r.status_code == 409


def test_unknown_references_are_not_found(client):
    customer = _create_customer(client)
    r = client.post("/api/v1/sales", json={
        "customer_id": customer["id"],
        "items": [{"product_id": "PRD-MISSING0", "quantity": 1}],
    })
    assert r.status_code == 404
    assert r.json()["success"] is False

    assert client.delete("/api/v1/sales/SO-MISSING0").status_code == 404
    assert client.get("/api/v1/purchases/PO-MISSING0").status_code == 404


def test_request_validation(client):
    r = client.post("/api/v1/sales", json={"customer_id": "CUS-X", "items": [{"product_id": "P", "quantity": 0}]})
    assert r.status_code == 422
    assert r.json()["message"] == "Validation error"

    r = client.post("/api/v1/products", json={"name": "Shirt", "has_variants": True})
    assert r.status_code == 422


def test_purchase_lifecycle(client):
    supplier = _create_supplier(client)
    product = _create_product(client, has_variants=True, stock=0, variants=[
        {"name": "V1", "stock": 10},
        {"name": "V2", "stock": 5},
    ])
    assert product["stock"] == 15
    v1 = product["variants"][0]

    r = client.post("/api/v1/purchases", json={
        "supplier_id": supplier["id"],
        "items": [
            {"product_id": product["id"], "variant_id": v1["id"], "quantity": 5, "unit_amount": 2.00},
            {"product_name": "Desk Lamp", "quantity": 4, "unit_amount": 12.50},
        ],
    })
    assert r.status_code == 201
    order = r.json()
    assert order["total_amount"] == "60.00"

    refreshed = client.get(f"/api/v1/products/{product['id']}").json()
    assert refreshed["stock"] == 20
    assert refreshed["variants"][0]["stock"] == 15

    lamp_id = order["items"][1]["product_id"]
    assert client.get(f"/api/v1/products/{lamp_id}").json()["stock"] == 4

    assert client.delete(f"/api/v1/purchases/{order['id']}").status_code == 200
    assert client.get(f"/api/v1/products/{product['id']}").json()["stock"] == 15


def test_purchase_line_needs_unit_cost(client):
    supplier = _create_supplier(client)
    r = client.post("/api/v1/purchases", json={
        "supplier_id": supplier["id"],
        "items": [{"product_id": "PRD-X", "quantity": 1}],
    })
    assert r.status_code == 422


def test_inline_product_and_variant(client):
    r = client.post("/api/v1/purchases/inline-products", json={"name": "Mug", "unit_cost": 3.00})
    assert r.status_code == 201
    product_id = r.json()["product_id"]
    assert r.json()["variant_id"] is None

    r = client.post(f"/api/v1/purchases/inline-products/{product_id}/variants", json={"name": "Blue"})
    assert r.status_code == 201
    assert r.json()["product_id"] == product_id

    product = client.get(f"/api/v1/products/{product_id}").json()
    assert product["has_variants"] is True
    assert product["sell_price"] == "3.90"


def test_dashboard(client):
    customer = _create_customer(client)
    product = _create_product(client)
    client.post("/api/v1/sales", json={
        "customer_id": customer["id"],
        "items": [{"product_id": product["id"], "quantity": 3}],
    })
    client.post("/api/v1/expenses", json={"category": "Utilities", "amount": 10})

    kpis = client.get("/api/v1/dashboard/kpis").json()
    assert kpis["sales_total"] == "45.00"
    assert kpis["cogs"] == "27.00"
    assert kpis["net_profit"] == "8.00"
    assert kpis["order_count"] == 1

    today = kpis["period_end"]
    report = client.get("/api/v1/dashboard/profit-loss", params={"date_from": today, "date_to": today})
    assert report.status_code == 200
    assert report.json()["gross_profit"] == "18.00"

    r = client.get("/api/v1/dashboard/kpis", params={"period_start": "2030-01-02", "period_end": "2030-01-01"})
    assert r.status_code == 400


def test_expenses(client):
    client.post("/api/v1/expenses", json={"category": "Rent", "amount": 100, "vendor": "Landlord",
                                          "expense_date": "2024-01-05"})
    client.post("/api/v1/expenses", json={"category": "Utilities", "amount": 25.5,
                                          "expense_date": "2024-01-10"})

    body = client.get("/api/v1/expenses", params={"sort_by": "amount", "sort_order": "asc"}).json()
    assert body["total"] == 2
    assert body["total_amount"] == "125.50"
    assert [e["category"] for e in body["expenses"]] == ["Utilities", "Rent"]

    body = client.get("/api/v1/expenses", params={"start_date": "2024-01-06"}).json()
    assert [e["category"] for e in body["expenses"]] == ["Utilities"]

    expense_id = body["expenses"][0]["id"]
    assert client.delete(f"/api/v1/expenses/{expense_id}").status_code == 200
    assert client.delete(f"/api/v1/expenses/{expense_id}").status_code == 404


def test_contacts_with_history_cannot_be_deleted(client):
    customer = _create_customer(client)
    product = _create_product(client)
    client.post("/api/v1/sales", json={
        "customer_id": customer["id"],
        "items": [{"product_id": product["id"], "quantity": 1}],
    })

    assert client.delete(f"/api/v1/customers/{customer['id']}").status_code == 400
    assert client.delete(f"/api/v1/products/{product['id']}").status_code == 400

    spare = _create_customer(client, "Spare")
    assert client.delete(f"/api/v1/customers/{spare['id']}").status_code == 200
    assert client.get(f"/api/v1/customers/{spare['id']}").status_code == 404
