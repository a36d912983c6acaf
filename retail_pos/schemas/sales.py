"""
Sales Module Schemas
Request validation and response serialization for sales orders
"""

from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from retail_pos.models.orders import SaleStatus
from retail_pos.schemas.contact import CustomerResponse
from retail_pos.schemas.line_item import LineItem


# ============================================================================
# Request Schemas
# ============================================================================

class SaleCreate(BaseModel):
    """Schema for creating (or replacing the contents of) a sales order"""
    customer_id: str = Field(..., min_length=1, description="Customer id")
    items: List[LineItem] = Field(
        ...,
        min_length=1,
        description="Cart lines (at least one required)"
    )
    total_amount: Optional[Decimal] = Field(
        None,
        ge=0,
        description="Order total; defaults to the sum of line subtotals"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "CUS-AB12CD34",
                "items": [
                    {"product_id": "PRD-AB12CD34", "quantity": 3, "unit_amount": 15.00}
                ],
                "total_amount": 45.00
            }
        }


class StockCheckRequest(BaseModel):
    items: List[LineItem] = Field(..., min_length=1)


# ============================================================================
# Response Schemas
# ============================================================================

class SalesItemResponse(BaseModel):
    id: str
    line_no: int
    product_id: str
    variant_id: Optional[str] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class SalesOrderResponse(BaseModel):
    id: str
    customer_id: str
    status: SaleStatus
    subtotal: Decimal
    total_amount: Decimal
    created_at: datetime
    customer: Optional[CustomerResponse] = None
    items: List[SalesItemResponse] = []

    class Config:
        from_attributes = True


class SalesOrderListResponse(BaseModel):
    total: int
    orders: List[SalesOrderResponse]


class StockCheckResponse(BaseModel):
    available: bool
    message: str
