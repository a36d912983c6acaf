# retail_pos/services/sales_service.py

from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from retail_pos.common.exceptions import InsufficientStockError, NotFoundError, ValidationError
from retail_pos.common.money import money_sum, quantize_money, to_decimal
from retail_pos.logger_config import logger
from retail_pos.models.orders import SaleStatus
from retail_pos.schemas.line_item import LineItem, coerce_line_items
from retail_pos.services.stock_ledger import StockDirection, StockLedger, StockTarget
from retail_pos.store.base import DataStore, Row, UnitOfWork

Resolved = Tuple[LineItem, Row, Optional[Row]]


def effective_unit_price(product: Row, variant: Optional[Row]) -> Decimal:
    """Product sell price plus the variant's adjustment, if any."""
    price = to_decimal(product["sell_price"])
    if variant is not None:
        price += to_decimal(variant["price_adjustment"])
    return quantize_money(price)


def _display_name(product: Row, variant: Optional[Row]) -> str:
    if variant is not None:
        return f"{product['name']} ({variant['name']})"
    return product["name"]


class SalesService:
    """
    Sales orders and the stock they consume.

    An order goes Draft (the request) → Completed (persisted, stock
    deducted) → Deleted (stock restored, rows removed). Each operation runs
    in a single unit of work.
    """

    def __init__(self, store: DataStore):
        self.store = store

    # ==================== VALIDATION ====================

    def _validate_request(self, customer_id: Optional[str], items: Iterable[Any]) -> List[LineItem]:
        if not customer_id or not str(customer_id).strip():
            logger.error("Sale rejected: customer_id is required")
            raise ValidationError("customer_id is required")

        lines = coerce_line_items(items)
        if not lines:
            logger.error("Sale rejected: no items provided")
            raise ValidationError("At least one item is required")

        for idx, line in enumerate(lines):
            if not line.product_id:
                raise ValidationError(f"Item {idx + 1} is missing product_id")
        return lines

    def _get_customer(self, tx: UnitOfWork, customer_id: str) -> Row:
        customer = tx.select_one("customers", {"id": customer_id})
        if not customer:
            logger.error(f"Customer not found: {customer_id}")
            raise NotFoundError(f"Customer {customer_id} not found")
        return customer

    def _resolve_lines(self, tx: UnitOfWork, lines: List[LineItem]) -> List[Resolved]:
        ledger = StockLedger(tx)
        resolved = []
        for line in lines:
            product, variant = ledger.resolve(StockTarget.of(line))
            resolved.append((line, product, variant))
        return resolved

    @staticmethod
    def _check_resolved_stock(resolved: List[Resolved]) -> None:
        # Lines hitting the same product/variant are checked against their combined quantity
        requested: Dict[str, int] = defaultdict(int)
        available: Dict[str, int] = {}
        names: Dict[str, str] = {}
        for line, product, variant in resolved:
            key = StockTarget.of(line).key
            requested[key] += line.quantity
            available[key] = int(variant["stock"] if variant is not None else product["stock"])
            names[key] = _display_name(product, variant)

        for key, qty in requested.items():
            if qty > available[key]:
                logger.warning(
                    f"Insufficient stock for {names[key]}: requested {qty}, available {available[key]}"
                )
                raise InsufficientStockError(names[key], available[key], qty)

    def check_stock(self, items: Iterable[Any]) -> None:
        """
        Pre-submission availability check. Raises InsufficientStockError
        naming the first line that cannot be served.
        """
        lines = coerce_line_items(items)
        with self.store.transaction() as tx:
            self._check_resolved_stock(self._resolve_lines(tx, lines))

    # ==================== QUERIES ====================

    def _attach(self, tx: UnitOfWork, orders: List[Row]) -> List[Row]:
        """Join customer and items onto order rows."""
        if not orders:
            return []
        order_ids = [o["id"] for o in orders]
        items_by_order: Dict[str, List[Row]] = defaultdict(list)
        for item in tx.select("sales_items", {"sales_order_id__in": order_ids}, order="line_no"):
            items_by_order[item["sales_order_id"]].append(item)

        customer_ids = list({o["customer_id"] for o in orders})
        customers = {c["id"]: c for c in tx.select("customers", {"id__in": customer_ids})}

        return [
            {**o, "customer": customers.get(o["customer_id"]), "items": items_by_order[o["id"]]}
            for o in orders
        ]

    def get_sales(self) -> List[Row]:
        """All sales orders with customer and items, most recent first."""
        with self.store.transaction() as tx:
            orders = tx.select("sales_orders", order="-created_at")
            result = self._attach(tx, orders)
        logger.info(f"Retrieved {len(result)} sales orders")
        return result

    def get_sale(self, order_id: str) -> Row:
        with self.store.transaction() as tx:
            order = tx.select_one("sales_orders", {"id": order_id})
            if not order:
                logger.warning(f"Sales order not found: {order_id}")
                raise NotFoundError(f"Sales order {order_id} not found")
            return self._attach(tx, [order])[0]

    # ==================== MUTATIONS ====================

    @staticmethod
    def _build_item_rows(resolved: List[Resolved]) -> List[Row]:
        rows = []
        for line_no, (line, product, variant) in enumerate(resolved, start=1):
            # Price is a snapshot; later catalog changes don't touch past sales
            unit_price = (
                quantize_money(line.unit_amount)
                if line.unit_amount is not None
                else effective_unit_price(product, variant)
            )
            rows.append({
                "line_no": line_no,
                "product_id": product["id"],
                "variant_id": variant["id"] if variant is not None else None,
                "quantity": line.quantity,
                "unit_price": unit_price,
                "subtotal": quantize_money(line.quantity * unit_price),
            })
        return rows

    @staticmethod
    def _order_total(item_rows: List[Row], total_amount: Any) -> Decimal:
        if total_amount is None:
            return quantize_money(money_sum(r["subtotal"] for r in item_rows))
        total = quantize_money(total_amount)
        if total < 0:
            raise ValidationError("total_amount cannot be negative")
        return total

    def create_sale(
        self,
        customer_id: str,
        items: Iterable[Any],
        total_amount: Any = None,
    ) -> Row:
        """
        Create a completed sales order and deduct its stock.

        Process:
            1. Validate request (customer, items, quantities)
            2. Resolve every product/variant and check availability
            3. Insert order (subtotal = total, no tax) and its items
            4. Deduct stock through the ledger
        """
        lines = self._validate_request(customer_id, items)
        logger.info(f"Starting sale creation - Customer: {customer_id}, Items: {len(lines)}")

        with self.store.transaction() as tx:
            customer = self._get_customer(tx, customer_id)
            resolved = self._resolve_lines(tx, lines)
            self._check_resolved_stock(resolved)

            item_rows = self._build_item_rows(resolved)
            total = self._order_total(item_rows, total_amount)

            order = tx.insert("sales_orders", [{
                "customer_id": customer["id"],
                "status": SaleStatus.completed.value,
                "subtotal": total,
                "total_amount": total,
            }])[0]

            stored_items = tx.insert(
                "sales_items", [{**row, "sales_order_id": order["id"]} for row in item_rows]
            )
            StockLedger(tx).apply_batch(stored_items, StockDirection.DEDUCT)

        logger.info(
            f"✅ Sale completed: {order['id']} - Customer: {customer['name']} - "
            f"Amount: {total} - Items: {len(stored_items)}"
        )
        return {**order, "customer": customer, "items": stored_items}

    def update_sale(
        self,
        order_id: str,
        customer_id: str,
        items: Iterable[Any],
        total_amount: Any = None,
    ) -> Row:
        """
        Edit an order: restore old stock → replace items → deduct again.
        Availability is checked after the old quantities are back on hand.
        """
        lines = self._validate_request(customer_id, items)
        logger.info(f"Starting sale update: {order_id} - Items: {len(lines)}")

        with self.store.transaction() as tx:
            order = tx.select_one("sales_orders", {"id": order_id})
            if not order:
                logger.error(f"Sales order not found: {order_id}")
                raise NotFoundError(f"Sales order {order_id} not found")

            customer = self._get_customer(tx, customer_id)
            ledger = StockLedger(tx)

            old_items = tx.select("sales_items", {"sales_order_id": order_id}, order="line_no")
            ledger.apply_batch(old_items, StockDirection.ADD)
            tx.delete("sales_items", {"sales_order_id": order_id})

            resolved = self._resolve_lines(tx, lines)
            self._check_resolved_stock(resolved)

            item_rows = self._build_item_rows(resolved)
            total = self._order_total(item_rows, total_amount)
            tx.update("sales_orders", {"id": order_id}, {
                "customer_id": customer["id"],
                "subtotal": total,
                "total_amount": total,
            })

            stored_items = tx.insert(
                "sales_items", [{**row, "sales_order_id": order_id} for row in item_rows]
            )
            ledger.apply_batch(stored_items, StockDirection.DEDUCT)
            order = tx.select_one("sales_orders", {"id": order_id})

        logger.info(
            f"✅ Sale updated: {order_id} - Items: {len(old_items)} → {len(stored_items)} - "
            f"Amount: {total}"
        )
        return {**order, "customer": customer, "items": stored_items}

    def delete_sale(self, order_id: str) -> None:
        """Restore every item's stock, then remove the items and the order."""
        logger.info(f"Starting sale deletion: {order_id}")

        with self.store.transaction() as tx:
            order = tx.select_one("sales_orders", {"id": order_id})
            if not order:
                logger.error(f"Sales order not found: {order_id}")
                raise NotFoundError(f"Sales order {order_id} not found")

            # Original quantities from the persisted rows
            items = tx.select("sales_items", {"sales_order_id": order_id}, order="line_no")
            StockLedger(tx).apply_batch(items, StockDirection.ADD)

            tx.delete("sales_items", {"sales_order_id": order_id})
            tx.delete("sales_orders", {"id": order_id})

        logger.info(f"✅ Sale deleted: {order_id} - Stock restored for {len(items)} items")
