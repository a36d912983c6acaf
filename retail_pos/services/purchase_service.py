# retail_pos/services/purchase_service.py

from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from retail_pos.common.exceptions import NotFoundError, ValidationError
from retail_pos.common.money import money_sum, quantize_money, to_decimal
from retail_pos.logger_config import logger
from retail_pos.schemas.line_item import LineItem, coerce_line_items
from retail_pos.services.stock_ledger import StockDirection, StockLedger, StockTarget
from retail_pos.store.base import DataStore, Row, UnitOfWork

DEFAULT_MARKUP = Decimal("1.30")


class PurchaseService:
    """
    Purchase orders and the stock they bring in. Mirrors SalesService with
    the sign inverted: creation adds stock, deletion takes it back out.
    """

    def __init__(self, store: DataStore, default_markup: Decimal = DEFAULT_MARKUP):
        self.store = store
        self.default_markup = to_decimal(default_markup)

    # ==================== INLINE CATALOG CREATION ====================

    def _insert_product(
        self,
        tx: UnitOfWork,
        name: str,
        unit_cost: Any,
        sku: Optional[str] = None,
        sell_price: Any = None,
        has_variants: bool = False,
        supplier_id: Optional[str] = None,
    ) -> Row:
        if not name or not name.strip():
            raise ValidationError("Product name is required for new products")
        cost = quantize_money(unit_cost)
        if cost < 0:
            raise ValidationError("unit_cost cannot be negative")

        price = quantize_money(sell_price) if sell_price is not None else quantize_money(cost * self.default_markup)
        product = tx.insert("products", [{
            "name": name.strip(),
            "sku": sku,
            "cost_price": cost,
            "sell_price": price,
            "stock": 0,
            "has_variants": has_variants,
            "supplier_id": supplier_id,
        }])[0]
        logger.info(f"Inline product created: {product['id']} - {product['name']} - Cost: {cost}, Price: {price}")
        return product

    def _insert_variant(
        self,
        tx: UnitOfWork,
        product: Row,
        name: str,
        sku: Optional[str] = None,
        price_adjustment: Any = None,
    ) -> Row:
        if not name or not name.strip():
            raise ValidationError("Variant name is required")

        if not product["has_variants"]:
            # Stock on a plain product can't be attributed to any variant
            if int(product["stock"]) != 0:
                raise ValidationError(
                    f"Product {product['name']} holds {product['stock']} units without variants; "
                    f"clear its stock before adding variants"
                )
            tx.update("products", {"id": product["id"]}, {"has_variants": True})

        variant = tx.insert("variants", [{
            "product_id": product["id"],
            "name": name.strip(),
            "sku": sku,
            "stock": 0,
            "price_adjustment": quantize_money(price_adjustment),
        }])[0]
        StockLedger(tx).recompute_product_stock(product["id"])
        logger.info(f"Inline variant created: {variant['id']} - {variant['name']} on {product['id']}")
        return variant

    def create_inline_product(
        self,
        name: str,
        unit_cost: Any,
        sku: Optional[str] = None,
        sell_price: Any = None,
        variant_name: Optional[str] = None,
        variant_sku: Optional[str] = None,
        supplier_id: Optional[str] = None,
    ) -> Dict[str, Optional[str]]:
        """
        Create a product (and optionally its first variant) while a purchase
        order is being drafted. The caller puts the returned ids on the line.
        """
        with self.store.transaction() as tx:
            product = self._insert_product(
                tx, name, unit_cost, sku=sku, sell_price=sell_price,
                has_variants=bool(variant_name), supplier_id=supplier_id,
            )
            variant_id = None
            if variant_name:
                variant_id = self._insert_variant(tx, product, variant_name, sku=variant_sku)["id"]
        return {"product_id": product["id"], "variant_id": variant_id}

    def create_inline_variant(
        self,
        product_id: str,
        name: str,
        sku: Optional[str] = None,
        price_adjustment: Any = None,
    ) -> Row:
        with self.store.transaction() as tx:
            product = StockLedger(tx).get_product(product_id)
            return self._insert_variant(tx, product, name, sku=sku, price_adjustment=price_adjustment)

    # ==================== QUERIES ====================

    def _attach(self, tx: UnitOfWork, orders: List[Row]) -> List[Row]:
        if not orders:
            return []
        order_ids = [o["id"] for o in orders]
        items_by_order: Dict[str, List[Row]] = defaultdict(list)
        for item in tx.select("purchase_items", {"purchase_order_id__in": order_ids}, order="line_no"):
            items_by_order[item["purchase_order_id"]].append(item)

        supplier_ids = list({o["supplier_id"] for o in orders})
        suppliers = {s["id"]: s for s in tx.select("suppliers", {"id__in": supplier_ids})}

        return [
            {**o, "supplier": suppliers.get(o["supplier_id"]), "items": items_by_order[o["id"]]}
            for o in orders
        ]

    def get_purchase_orders(self, supplier_id: Optional[str] = None) -> List[Row]:
        """Purchase orders with supplier and items, newest first."""
        filters = {"supplier_id": supplier_id} if supplier_id else None
        with self.store.transaction() as tx:
            orders = tx.select("purchase_orders", filters, order="-created_at")
            result = self._attach(tx, orders)
        logger.info(f"Retrieved {len(result)} purchase orders")
        return result

    def get_purchase_order(self, order_id: str) -> Row:
        with self.store.transaction() as tx:
            order = tx.select_one("purchase_orders", {"id": order_id})
            if not order:
                logger.warning(f"Purchase order not found: {order_id}")
                raise NotFoundError(f"Purchase order {order_id} not found")
            return self._attach(tx, [order])[0]

    # ==================== CREATE / DELETE ====================

    def _validate_request(self, supplier_id: Optional[str], items: Iterable[Any]) -> List[LineItem]:
        if not supplier_id or not str(supplier_id).strip():
            logger.error("Purchase order rejected: supplier_id is required")
            raise ValidationError("supplier_id is required")

        lines = coerce_line_items(items)
        if not lines:
            logger.error("No items provided for purchase order")
            raise ValidationError("At least one item is required")

        for idx, line in enumerate(lines):
            if line.unit_amount is None:
                raise ValidationError(f"Item {idx + 1} is missing unit cost")
            if not line.product_id and not line.product_name:
                raise ValidationError(f"Item {idx + 1} needs product_id or product_name")
            if not line.product_id and line.variant_id:
                raise ValidationError(f"Item {idx + 1} names a variant but no product")
        return lines

    def create_purchase_order(self, supplier_id: str, items: Iterable[Any]) -> Row:
        """
        Create a purchase order and add its quantities to stock.

        Process:
            1. Validate supplier and lines
            2. Create products for lines that only carry a product_name
            3. Total = Σ quantity × unit_cost (never taken from the caller)
            4. Insert order and items, then add stock through the ledger
        """
        lines = self._validate_request(supplier_id, items)
        logger.info(f"Starting purchase order creation - Supplier: {supplier_id}, Items: {len(lines)}")

        with self.store.transaction() as tx:
            supplier = tx.select_one("suppliers", {"id": supplier_id})
            if not supplier:
                logger.error(f"Supplier not found: {supplier_id}")
                raise NotFoundError(f"Supplier {supplier_id} not found")

            ledger = StockLedger(tx)
            item_rows = []
            for line_no, line in enumerate(lines, start=1):
                if line.product_id:
                    product, variant = ledger.resolve(StockTarget.of(line))
                else:
                    product = self._insert_product(
                        tx, line.product_name, line.unit_amount, supplier_id=supplier["id"]
                    )
                    variant = None

                unit_cost = quantize_money(line.unit_amount)
                item_rows.append({
                    "line_no": line_no,
                    "product_id": product["id"],
                    "variant_id": variant["id"] if variant is not None else None,
                    "quantity": line.quantity,
                    "unit_cost": unit_cost,
                    "line_total": quantize_money(line.quantity * unit_cost),
                })
                logger.debug(
                    f"Line {line_no}: {product['name']} - Qty: {line.quantity}, Cost: {unit_cost}"
                )

            total_amount = quantize_money(money_sum(r["line_total"] for r in item_rows))

            order = tx.insert("purchase_orders", [{
                "supplier_id": supplier["id"],
                "total_amount": total_amount,
            }])[0]
            stored_items = tx.insert(
                "purchase_items", [{**row, "purchase_order_id": order["id"]} for row in item_rows]
            )
            ledger.apply_batch(stored_items, StockDirection.ADD)

        logger.info(
            f"✅ Purchase order completed: {order['id']} - Supplier: {supplier['name']} - "
            f"Amount: {total_amount} - Items: {len(stored_items)}"
        )
        return {**order, "supplier": supplier, "items": stored_items}

    def delete_purchase_order(self, order_id: str) -> None:
        """Take the order's quantities back out of stock, then remove it."""
        logger.info(f"Starting purchase order deletion: {order_id}")

        with self.store.transaction() as tx:
            order = tx.select_one("purchase_orders", {"id": order_id})
            if not order:
                logger.error(f"Purchase order not found: {order_id}")
                raise NotFoundError(f"Purchase order {order_id} not found")

            items = tx.select("purchase_items", {"purchase_order_id": order_id}, order="line_no")
            StockLedger(tx).apply_batch(items, StockDirection.DEDUCT)

            tx.delete("purchase_items", {"purchase_order_id": order_id})
            tx.delete("purchase_orders", {"id": order_id})

        logger.info(f"✅ Purchase order deleted: {order_id} - Stock rolled back for {len(items)} items")
