from datetime import date
from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from retail_pos.common.response import SuccessResponse
from retail_pos.core.dependencies import get_store
from retail_pos.schemas.expense import ExpenseCreate, ExpenseListResponse, ExpenseResponse
from retail_pos.services.expense_service import create_expense, delete_expense, get_all_expenses
from retail_pos.store.base import DataStore

router = APIRouter()


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_single_expense(data: ExpenseCreate, store: DataStore = Depends(get_store)):
    """Create a single expense; date defaults to today if not provided."""
    expense = create_expense(
        store,
        amount=data.amount,
        category=data.category,
        description=data.description,
        payment_mode=data.payment_mode,
        reference=data.reference,
        vendor=data.vendor,
        expense_date=data.expense_date,
    )
    return ExpenseResponse.model_validate(expense)


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    vendor: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None, description="Match on description"),
    sort_by: Optional[str] = Query(None, description="expense_date, amount, vendor or category"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    store: DataStore = Depends(get_store),
):
    """List expenses with filters: date range, vendor, category, search."""
    rows, total_amount = get_all_expenses(
        store,
        start_date=start_date,
        end_date=end_date,
        vendor=vendor,
        category=category,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ExpenseListResponse(
        total=len(rows),
        total_amount=total_amount,
        expenses=[ExpenseResponse.model_validate(r) for r in rows],
    )


@router.delete("/{expense_id}")
def delete_expense_route(expense_id: str, store: DataStore = Depends(get_store)):
    delete_expense(store, expense_id)
    return SuccessResponse.send(data={"id": expense_id}, message="Expense deleted")
