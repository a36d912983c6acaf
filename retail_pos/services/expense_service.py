from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from retail_pos.common.exceptions import NotFoundError, ValidationError
from retail_pos.common.money import money_sum, quantize_money
from retail_pos.logger_config import logger
from retail_pos.store.base import DataStore, Row

SORTABLE_COLUMNS = ("expense_date", "amount", "vendor", "category")


def _today() -> date:
    return datetime.now(timezone.utc).date()


def create_expense(
    store: DataStore,
    amount: Decimal,
    category: str,
    description: Optional[str] = None,
    payment_mode: Optional[str] = None,
    reference: Optional[str] = None,
    vendor: Optional[str] = None,
    expense_date: Optional[date] = None,
) -> Row:
    """Create a single expense; date defaults to today."""
    if amount is None or quantize_money(amount) <= 0:
        raise ValidationError("Expense amount must be greater than 0")
    if not category or not category.strip():
        raise ValidationError("Expense category is required")

    with store.transaction() as tx:
        expense = tx.insert("expenses", [{
            "expense_date": expense_date or _today(),
            "category": category.strip(),
            "amount": quantize_money(amount),
            "description": description,
            "payment_mode": payment_mode,
            "reference": reference,
            "vendor": vendor,
        }])[0]
    logger.info(f"Expense created: {expense['id']} - {expense['category']} - {expense['amount']}")
    return expense


def get_all_expenses(
    store: DataStore,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    vendor: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: str = "desc",
) -> Tuple[List[Row], Decimal]:
    """List expenses with filters. Returns (rows, total_amount)."""
    filters = {}
    if start_date is not None:
        filters["expense_date__gte"] = start_date
    if end_date is not None:
        filters["expense_date__lte"] = end_date
    if vendor:
        filters["vendor"] = vendor
    if category:
        filters["category"] = category
    if search and search.strip():
        filters["description__icontains"] = search.strip()

    if sort_by and sort_by not in SORTABLE_COLUMNS:
        raise ValidationError(f"sort_by must be one of {', '.join(SORTABLE_COLUMNS)}")
    if sort_order not in ("asc", "desc"):
        raise ValidationError("sort_order must be 'asc' or 'desc'")

    column = sort_by or "expense_date"
    order = [column if sort_order == "asc" else f"-{column}", "-created_at"]

    with store.transaction() as tx:
        rows = tx.select("expenses", filters, order=order)
    return rows, quantize_money(money_sum(r["amount"] for r in rows))


def delete_expense(store: DataStore, expense_id: str) -> None:
    with store.transaction() as tx:
        if not tx.delete("expenses", {"id": expense_id}):
            logger.warning(f"Expense not found: {expense_id}")
            raise NotFoundError(f"Expense {expense_id} not found")
    logger.info(f"Expense deleted: {expense_id}")
