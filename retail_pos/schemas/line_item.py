from decimal import Decimal
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from retail_pos.common.exceptions import ValidationError


class LineItem(BaseModel):
    """One order line: which product/variant, how many, at what unit amount."""
    product_id: Optional[str] = Field(None, description="Existing product id")
    variant_id: Optional[str] = Field(None, description="Variant id when the product has variants")
    quantity: int = Field(..., gt=0, description="Quantity (must be positive)")
    unit_amount: Optional[Decimal] = Field(
        None, ge=0, description="Unit price for sales, unit cost for purchases"
    )
    # Purchase orders only: create the product on the fly when product_id is missing
    product_name: Optional[str] = Field(None, max_length=200)

    @field_validator('product_id', 'variant_id', 'product_name')
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "product_id": "PRD-AB12CD34",
                "variant_id": None,
                "quantity": 3,
                "unit_amount": 15.00
            }
        }


def coerce_line_items(items: Optional[Iterable[Any]]) -> List[LineItem]:
    """Turn raw dicts (or LineItems) into validated LineItems."""
    lines = []
    for idx, item in enumerate(items or []):
        if isinstance(item, LineItem):
            lines.append(item)
            continue
        try:
            lines.append(LineItem.model_validate(item))
        except PydanticValidationError as e:
            problems = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise ValidationError(f"Invalid line item at position {idx + 1}", errors=problems)
    return lines
