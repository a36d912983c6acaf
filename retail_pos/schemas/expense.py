from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime


class ExpenseCreate(BaseModel):
    """Single expense create - date defaults to today on server if not provided."""
    expense_date: Optional[date] = None
    category: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = None
    payment_mode: Optional[str] = Field(None, max_length=50)
    reference: Optional[str] = Field(None, max_length=100)
    vendor: Optional[str] = Field(None, max_length=255)


class ExpenseResponse(BaseModel):
    id: str
    expense_date: date
    category: str
    amount: Decimal
    description: Optional[str] = None
    payment_mode: Optional[str] = None
    reference: Optional[str] = None
    vendor: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExpenseListResponse(BaseModel):
    total: int
    total_amount: Decimal
    expenses: List[ExpenseResponse]
