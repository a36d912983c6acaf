"""
Demo data: suppliers, customers, a catalog with and without variants,
purchase orders that bring stock in, sales that take it out, and a few
expenses. Everything goes through the services, so stock stays consistent.

    python -m retail_pos.seed
"""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Optional

from faker import Faker

from retail_pos.logger_config import logger
from retail_pos.services.contact_service import create_customer, create_supplier
from retail_pos.services.expense_service import create_expense
from retail_pos.services.product_service import create_product
from retail_pos.services.purchase_service import PurchaseService
from retail_pos.services.sales_service import SalesService
from retail_pos.store.base import DataStore

# Children before parents
CLEAR_ORDER = (
    "sales_items",
    "sales_orders",
    "purchase_items",
    "purchase_orders",
    "variants",
    "products",
    "expenses",
    "customers",
    "suppliers",
)

EXPENSE_CATEGORIES = ("Rent", "Utilities", "Salaries", "Transport", "Marketing")
SIZES = ("S", "M", "L")


def clear_data(store: DataStore) -> None:
    with store.transaction() as tx:
        for table in CLEAR_ORDER:
            tx.delete(table, {})


def _money(rng: random.Random, low: float, high: float) -> Decimal:
    return Decimal(str(round(rng.uniform(low, high), 2)))


def seed_demo_data(
    store: DataStore,
    seed: Optional[int] = None,
    customers: int = 8,
    suppliers: int = 4,
    products: int = 10,
    sales: int = 15,
    expenses: int = 6,
) -> Dict[str, int]:
    """Wipe the store and fill it with demo records. Returns row counts per kind."""
    fake = Faker()
    rng = random.Random(seed)
    if seed is not None:
        Faker.seed(seed)

    print("🔄 Clearing existing data...")
    clear_data(store)
    print("✅ Data cleared.")

    print("🔄 Creating suppliers and customers...")
    supplier_rows = [
        create_supplier(store, {
            "name": fake.company(),
            "contact_person": fake.name(),
            "email": fake.company_email(),
            "phone": ''.join(filter(str.isdigit, fake.phone_number()))[:20],
        })
        for _ in range(suppliers)
    ]
    customer_rows = [
        create_customer(store, {
            "name": fake.name(),
            "email": fake.email(),
            "phone": ''.join(filter(str.isdigit, fake.phone_number()))[:20],
            "address": fake.address().replace('\n', ', '),
        })
        for _ in range(customers)
    ]
    print(f"✅ Seeded {len(supplier_rows)} suppliers")
    print(f"✅ Seeded {len(customer_rows)} customers")

    print("🔄 Creating products...")
    product_rows = []
    for idx in range(products):
        cost = _money(rng, 2, 60)
        data = {
            "name": f"{fake.word().capitalize()} {fake.word()}",
            "sku": f"SKU-{idx + 1:04d}",
            "cost_price": cost,
            "sell_price": (cost * Decimal("1.5")).quantize(Decimal("0.01")),
            "supplier_id": rng.choice(supplier_rows)["id"],
            "has_variants": idx % 3 == 0,
        }
        if data["has_variants"]:
            data["variants"] = [
                {"name": f"Size: {size}", "sku": f"{data['sku']}-{size}", "stock": 0,
                 "price_adjustment": Decimal("1.00") if size == "L" else Decimal("0.00")}
                for size in SIZES
            ]
        product_rows.append(create_product(store, data))
    print(f"✅ Seeded {len(product_rows)} products")

    print("🔄 Creating purchase orders...")
    purchases = PurchaseService(store)
    purchase_count = 0
    for supplier in supplier_rows:
        lines = []
        for product in product_rows:
            if product["supplier_id"] != supplier["id"]:
                continue
            targets = product["variants"] or [None]
            for variant in targets:
                lines.append({
                    "product_id": product["id"],
                    "variant_id": variant["id"] if variant else None,
                    "quantity": rng.randint(50, 100),
                    "unit_amount": product["cost_price"],
                })
        if lines:
            purchases.create_purchase_order(supplier["id"], lines)
            purchase_count += 1
    print(f"✅ Seeded {purchase_count} purchase orders")

    print("🔄 Creating sales...")
    sales_service = SalesService(store)
    sale_count = 0
    for _ in range(sales):
        product = rng.choice(product_rows)
        variant = rng.choice(product["variants"]) if product["variants"] else None
        line = {
            "product_id": product["id"],
            "variant_id": variant["id"] if variant else None,
            "quantity": rng.randint(1, 3),
        }
        sales_service.create_sale(rng.choice(customer_rows)["id"], [line])
        sale_count += 1
    print(f"✅ Seeded {sale_count} sales")

    print("🔄 Creating expenses...")
    today = datetime.now(timezone.utc).date()
    for _ in range(expenses):
        create_expense(
            store,
            amount=_money(rng, 20, 500),
            category=rng.choice(EXPENSE_CATEGORIES),
            description=fake.sentence(nb_words=6),
            vendor=fake.company(),
            expense_date=today - timedelta(days=rng.randint(0, today.day - 1)),
        )
    print(f"✅ Seeded {expenses} expenses")

    summary = {
        "suppliers": len(supplier_rows),
        "customers": len(customer_rows),
        "products": len(product_rows),
        "purchase_orders": purchase_count,
        "sales_orders": sale_count,
        "expenses": expenses,
    }
    logger.info(f"Demo data seeded: {summary}")
    return summary


if __name__ == "__main__":
    from retail_pos.core.config import settings
    from retail_pos.store import build_store

    store = build_store(settings)
    store.init_schema()
    try:
        seed_demo_data(store)
        print("🎉 Demo data ready.")
    except Exception as e:
        print(f"❌ Error during seeding: {e}")
        raise
    finally:
        store.dispose()
