"""
Purchase Module Schemas
Request validation and response serialization for purchase orders
"""

from decimal import Decimal
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator

from retail_pos.schemas.contact import SupplierResponse
from retail_pos.schemas.line_item import LineItem


# ============================================================================
# Request Schemas
# ============================================================================

class PurchaseOrderCreate(BaseModel):
    """Schema for creating a new purchase order. The total is computed server-side."""
    supplier_id: str = Field(..., min_length=1, description="Supplier id")
    items: List[LineItem] = Field(
        ...,
        min_length=1,
        description="Lines to receive (at least one required)"
    )

    @model_validator(mode='after')
    def validate_lines(self):
        """Every line needs a unit cost and a product reference or a new product name"""
        for idx, item in enumerate(self.items):
            if item.unit_amount is None:
                raise ValueError(f"items[{idx}].unit_amount (unit cost) is required")
            if not item.product_id and not item.product_name:
                raise ValueError(f"items[{idx}] needs product_id or product_name")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "supplier_id": "SUP-AB12CD34",
                "items": [
                    {"product_id": "PRD-AB12CD34", "variant_id": "VAR-EF56GH78", "quantity": 5, "unit_amount": 2.00},
                    {"product_name": "Desk Lamp", "quantity": 10, "unit_amount": 12.50}
                ]
            }
        }


# ============================================================================
# Response Schemas
# ============================================================================

class PurchaseItemResponse(BaseModel):
    id: str
    line_no: int
    product_id: str
    variant_id: Optional[str] = None
    quantity: int
    unit_cost: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True


class PurchaseOrderResponse(BaseModel):
    id: str
    supplier_id: str
    total_amount: Decimal
    created_at: datetime
    supplier: Optional[SupplierResponse] = None
    items: List[PurchaseItemResponse] = []

    class Config:
        from_attributes = True


class PurchaseOrderListResponse(BaseModel):
    total: int
    orders: List[PurchaseOrderResponse]
