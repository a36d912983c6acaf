from decimal import Decimal
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from datetime import datetime


class VariantIn(BaseModel):
    id: Optional[str] = Field(None, description="Existing variant id; omit for a new variant")
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=64)
    stock: int = Field(0, ge=0)
    price_adjustment: Decimal = Field(Decimal("0.00"))


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    cost_price: Decimal = Field(Decimal("0.00"), ge=0)
    sell_price: Decimal = Field(Decimal("0.00"), ge=0)
    stock: int = Field(0, ge=0, description="Ignored when the product has variants")
    has_variants: bool = False
    supplier_id: Optional[str] = None


class ProductCreate(ProductBase):
    variants: List[VariantIn] = Field(default_factory=list)

    @model_validator(mode='after')
    def variants_required(self):
        """has_variants needs at least one variant"""
        if self.has_variants and not self.variants:
            raise ValueError("variants are required when has_variants is true")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "name": "T-Shirt Basic",
                "sku": "TSH-001",
                "cost_price": 8.00,
                "sell_price": 20.00,
                "has_variants": True,
                "variants": [
                    {"name": "Size: S, Color: Black", "sku": "TSH-001-S-BLK", "stock": 50},
                    {"name": "Size: M, Color: Black", "sku": "TSH-001-M-BLK", "stock": 30,
                     "price_adjustment": 2.00}
                ]
            }
        }


class ProductUpdate(ProductCreate):
    pass


class VariantResponse(BaseModel):
    id: str
    product_id: str
    name: str
    sku: Optional[str] = None
    stock: int
    price_adjustment: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductResponse(ProductBase):
    id: str
    stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    variants: List[VariantResponse] = []

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    total: int
    products: List[ProductResponse]


class InlineProductCreate(BaseModel):
    """Create a product from inside the purchase order form."""
    name: str = Field(..., min_length=1, max_length=200)
    unit_cost: Decimal = Field(..., ge=0)
    sku: Optional[str] = Field(None, max_length=64)
    sell_price: Optional[Decimal] = Field(None, ge=0, description="Defaults to unit_cost × markup")
    variant_name: Optional[str] = Field(None, max_length=200)
    variant_sku: Optional[str] = Field(None, max_length=64)
    supplier_id: Optional[str] = None


class InlineProductResponse(BaseModel):
    product_id: str
    variant_id: Optional[str] = None


class InlineVariantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=64)
    price_adjustment: Decimal = Field(Decimal("0.00"))
