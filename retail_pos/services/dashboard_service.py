from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from retail_pos.common.exceptions import ValidationError
from retail_pos.common.money import money_sum, quantize_money, to_decimal
from retail_pos.logger_config import logger
from retail_pos.models.orders import SaleStatus
from retail_pos.store.base import DataStore, Row, UnitOfWork

DEFAULT_LOW_STOCK_THRESHOLD = 5


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """[start 00:00, day after end 00:00) in UTC."""
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc)
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
    return lower, upper


class DashboardService:
    """
    Read-only KPIs over orders, expenses and the catalog.

    COGS is valued at each product's current cost price, not the cost at
    the time of sale.
    """

    def __init__(self, store: DataStore, low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD):
        self.store = store
        self.low_stock_threshold = low_stock_threshold

    # ==================== BUILDING BLOCKS ====================

    @staticmethod
    def _completed_orders(tx: UnitOfWork, start: date, end: date) -> List[Row]:
        lower, upper = _day_bounds(start, end)
        return tx.select("sales_orders", {
            "created_at__gte": lower,
            "created_at__lt": upper,
            "status": SaleStatus.completed.value,
        })

    @staticmethod
    def _cogs(tx: UnitOfWork, orders: List[Row]) -> Decimal:
        if not orders:
            return Decimal("0")
        items = tx.select("sales_items", {"sales_order_id__in": [o["id"] for o in orders]})
        if not items:
            return Decimal("0")

        product_ids = list({i["product_id"] for i in items})
        cost_by_product = {
            p["id"]: to_decimal(p["cost_price"])
            for p in tx.select("products", {"id__in": product_ids})
        }

        total = Decimal("0")
        for item in items:
            cost = cost_by_product.get(item["product_id"])
            if cost is None:
                logger.warning(f"COGS: product {item['product_id']} no longer exists, valued at 0")
                continue
            total += int(item["quantity"]) * cost
        return total

    @staticmethod
    def _expenses_total(tx: UnitOfWork, start: date, end: date) -> Decimal:
        expenses = tx.select("expenses", {"expense_date__gte": start, "expense_date__lte": end})
        return money_sum(e["amount"] for e in expenses)

    def _low_stock_count(self, products: List[Row], variants: List[Row]) -> int:
        variants_by_product: Dict[str, List[Row]] = defaultdict(list)
        for v in variants:
            variants_by_product[v["product_id"]].append(v)

        count = 0
        for p in products:
            product_variants = variants_by_product.get(p["id"])
            if p["has_variants"] and product_variants:
                # Each variant is restocked on its own
                count += sum(1 for v in product_variants if int(v["stock"]) < self.low_stock_threshold)
            elif int(p["stock"]) < self.low_stock_threshold:
                count += 1
        return count

    @staticmethod
    def _resolve_period(period_start: Optional[date], period_end: Optional[date]) -> Tuple[date, date]:
        today = _today()
        start = period_start or today.replace(day=1)
        end = period_end or today
        if start > end:
            raise ValidationError(f"period_start {start} is after period_end {end}")
        return start, end

    # ==================== KPIs ====================

    def get_kpis(self, period_start: Optional[date] = None, period_end: Optional[date] = None) -> dict:
        """Dashboard metrics for a period; month to date when no period is given."""
        start, end = self._resolve_period(period_start, period_end)
        today = _today()

        with self.store.transaction() as tx:
            orders = self._completed_orders(tx, start, end)
            sales_total = money_sum(o["total_amount"] for o in orders)
            sales_today = money_sum(o["total_amount"] for o in self._completed_orders(tx, today, today))
            cogs = self._cogs(tx, orders)
            expenses_total = self._expenses_total(tx, start, end)

            products = tx.select("products")
            variants = tx.select("variants")

        gross_profit = sales_total - cogs
        net_profit = gross_profit - expenses_total
        margin = (net_profit / sales_total) if sales_total != 0 else Decimal("0")

        inventory_value = money_sum(
            int(p["stock"]) * to_decimal(p["cost_price"]) for p in products
        )

        kpis = {
            "period_start": start,
            "period_end": end,
            "sales_total": quantize_money(sales_total),
            "sales_today": quantize_money(sales_today),
            "order_count": len(orders),
            "cogs": quantize_money(cogs),
            "expenses_total": quantize_money(expenses_total),
            "gross_profit": quantize_money(gross_profit),
            "net_profit": quantize_money(net_profit),
            "margin": margin.quantize(Decimal("0.0001")),
            "inventory_value": quantize_money(inventory_value),
            "low_stock_count": self._low_stock_count(products, variants),
            "low_stock_threshold": self.low_stock_threshold,
        }
        logger.info(
            f"KPIs {start} → {end}: sales={kpis['sales_total']}, cogs={kpis['cogs']}, "
            f"expenses={kpis['expenses_total']}, net={kpis['net_profit']}"
        )
        return kpis

    def get_profit_loss(self, date_from: date, date_to: date) -> dict:
        """Profit and loss statement for an explicit date range."""
        if date_from is None or date_to is None:
            raise ValidationError("Both date_from and date_to are required")
        start, end = self._resolve_period(date_from, date_to)

        with self.store.transaction() as tx:
            orders = self._completed_orders(tx, start, end)
            total_sales = money_sum(o["total_amount"] for o in orders)
            cogs = self._cogs(tx, orders)
            total_expenses = self._expenses_total(tx, start, end)

        gross_profit = total_sales - cogs
        return {
            "date_from": start,
            "date_to": end,
            "total_sales": quantize_money(total_sales),
            "cogs": quantize_money(cogs),
            "gross_profit": quantize_money(gross_profit),
            "total_expenses": quantize_money(total_expenses),
            "net_profit": quantize_money(gross_profit - total_expenses),
        }
