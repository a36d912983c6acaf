from collections import defaultdict
from typing import Any, Dict, List, Optional

from retail_pos.common.exceptions import NotFoundError, ValidationError
from retail_pos.common.money import quantize_money
from retail_pos.logger_config import logger
from retail_pos.services.stock_ledger import StockLedger
from retail_pos.store.base import DataStore, Row, UnitOfWork


def _with_variants(tx: UnitOfWork, products: List[Row]) -> List[Row]:
    if not products:
        return []
    by_product: Dict[str, List[Row]] = defaultdict(list)
    for v in tx.select("variants", {"product_id__in": [p["id"] for p in products]}, order="created_at"):
        by_product[v["product_id"]].append(v)
    return [{**p, "variants": by_product[p["id"]]} for p in products]


def _is_referenced(tx: UnitOfWork, column: str, value: str) -> bool:
    return bool(
        tx.select("sales_items", {column: value}) or tx.select("purchase_items", {column: value})
    )


def _variant_rows(variants: List[Dict[str, Any]]) -> List[Row]:
    rows = []
    for v in variants:
        if not v.get("name"):
            raise ValidationError("Every variant needs a name")
        stock = int(v.get("stock") or 0)
        if stock < 0:
            raise ValidationError(f"Variant {v['name']} stock cannot be negative")
        rows.append({
            "id": v.get("id"),
            "name": v["name"],
            "sku": v.get("sku"),
            "stock": stock,
            "price_adjustment": quantize_money(v.get("price_adjustment")),
        })
    return rows


def get_all_products(store: DataStore, search: Optional[str] = None) -> List[Row]:
    """Products with their variants, most recently updated first."""
    filters = {"name__icontains": search.strip()} if search and search.strip() else None
    with store.transaction() as tx:
        products = tx.select("products", filters, order="-updated_at")
        return _with_variants(tx, products)


def get_product_by_id(store: DataStore, product_id: str) -> Row:
    with store.transaction() as tx:
        product = StockLedger(tx).get_product(product_id)
        return _with_variants(tx, [product])[0]


def create_product(store: DataStore, data: Dict[str, Any]) -> Row:
    """
    Create a product and its variants. With variants, product stock is
    the sum of the variants' stock; otherwise it's taken as given.
    """
    has_variants = bool(data.get("has_variants"))
    variants = _variant_rows(data.get("variants") or []) if has_variants else []
    if has_variants and not variants:
        raise ValidationError("has_variants is set but no variants were given")

    stock = sum(v["stock"] for v in variants) if has_variants else int(data.get("stock") or 0)
    if stock < 0:
        raise ValidationError("Stock cannot be negative")

    with store.transaction() as tx:
        if data.get("supplier_id") and not tx.select_one("suppliers", {"id": data["supplier_id"]}):
            raise NotFoundError(f"Supplier {data['supplier_id']} not found")

        product = tx.insert("products", [{
            "name": data["name"],
            "sku": data.get("sku"),
            "description": data.get("description"),
            "cost_price": quantize_money(data.get("cost_price")),
            "sell_price": quantize_money(data.get("sell_price")),
            "stock": stock,
            "has_variants": has_variants,
            "supplier_id": data.get("supplier_id"),
        }])[0]

        if variants:
            tx.insert("variants", [{**v, "id": None, "product_id": product["id"]} for v in variants])

        result = _with_variants(tx, [product])[0]

    logger.info(f"Product created: {product['id']} - {product['name']} - Stock: {stock}, Variants: {len(variants)}")
    return result


def update_product(store: DataStore, product_id: str, data: Dict[str, Any]) -> Row:
    """
    Update product fields and reconcile its variant set: variants with an
    id are updated, new ones inserted, missing ones removed (unless orders
    still reference them).
    """
    has_variants = bool(data.get("has_variants"))
    variants = _variant_rows(data.get("variants") or []) if has_variants else []
    if has_variants and not variants:
        raise ValidationError("has_variants is set but no variants were given")

    with store.transaction() as tx:
        ledger = StockLedger(tx)
        ledger.get_product(product_id)
        if data.get("supplier_id") and not tx.select_one("suppliers", {"id": data["supplier_id"]}):
            raise NotFoundError(f"Supplier {data['supplier_id']} not found")

        existing = {v["id"]: v for v in tx.select("variants", {"product_id": product_id})}
        keep_ids = {v["id"] for v in variants if v["id"]}

        unknown = keep_ids - set(existing)
        if unknown:
            raise NotFoundError(f"Variants not found on product {product_id}: {', '.join(sorted(unknown))}")

        for variant_id in set(existing) - keep_ids:
            if _is_referenced(tx, "variant_id", variant_id):
                raise ValidationError(
                    f"Variant {existing[variant_id]['name']} has order history and cannot be removed"
                )
            tx.delete("variants", {"id": variant_id})

        for v in variants:
            fields = {k: v[k] for k in ("name", "sku", "stock", "price_adjustment")}
            if v["id"]:
                tx.update("variants", {"id": v["id"]}, fields)
            else:
                tx.insert("variants", [{**fields, "product_id": product_id}])

        patch = {
            "name": data["name"],
            "sku": data.get("sku"),
            "description": data.get("description"),
            "cost_price": quantize_money(data.get("cost_price")),
            "sell_price": quantize_money(data.get("sell_price")),
            "has_variants": has_variants,
            "supplier_id": data.get("supplier_id"),
        }
        if not has_variants:
            stock = int(data.get("stock") or 0)
            if stock < 0:
                raise ValidationError("Stock cannot be negative")
            patch["stock"] = stock
        tx.update("products", {"id": product_id}, patch)

        if has_variants:
            ledger.recompute_product_stock(product_id)

        result = _with_variants(tx, [tx.select_one("products", {"id": product_id})])[0]

    logger.info(f"Product updated: {product_id} - Stock: {result['stock']}, Variants: {len(result['variants'])}")
    return result


def delete_product(store: DataStore, product_id: str) -> None:
    """Delete a product and its variants. Products with order history are kept."""
    with store.transaction() as tx:
        product = StockLedger(tx).get_product(product_id)
        if _is_referenced(tx, "product_id", product_id):
            raise ValidationError(f"Product {product['name']} has order history and cannot be deleted")
        tx.delete("variants", {"product_id": product_id})
        tx.delete("products", {"id": product_id})
    logger.info(f"Product deleted: {product_id}")
