from datetime import date
from decimal import Decimal
from pydantic import BaseModel


class KPIResponse(BaseModel):
    period_start: date
    period_end: date
    sales_total: Decimal
    sales_today: Decimal
    order_count: int
    cogs: Decimal
    expenses_total: Decimal
    gross_profit: Decimal
    net_profit: Decimal
    margin: Decimal
    inventory_value: Decimal
    low_stock_count: int
    low_stock_threshold: int


class ProfitLossResponse(BaseModel):
    date_from: date
    date_to: date
    total_sales: Decimal
    cogs: Decimal
    gross_profit: Decimal
    total_expenses: Decimal
    net_profit: Decimal
