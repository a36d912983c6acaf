from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from retail_pos.common.response import SuccessResponse
from retail_pos.core.dependencies import get_store
from retail_pos.schemas.contact import CustomerCreate, CustomerListResponse, CustomerResponse
from retail_pos.services.contact_service import (
    create_customer,
    delete_customer,
    get_all_customers,
    get_customer_by_id,
)
from retail_pos.store.base import DataStore

router = APIRouter()


@router.get("", response_model=CustomerListResponse)
def get_customers(
    search: Optional[str] = Query(None),
    store: DataStore = Depends(get_store),
):
    customers = get_all_customers(store, search=search)
    return CustomerListResponse(
        total=len(customers),
        customers=[CustomerResponse.model_validate(c) for c in customers],
    )


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: str, store: DataStore = Depends(get_store)):
    return CustomerResponse.model_validate(get_customer_by_id(store, customer_id))


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer_route(data: CustomerCreate, store: DataStore = Depends(get_store)):
    return CustomerResponse.model_validate(create_customer(store, data.model_dump()))


@router.delete("/{customer_id}")
def delete_customer_route(customer_id: str, store: DataStore = Depends(get_store)):
    delete_customer(store, customer_id)
    return SuccessResponse.send(data={"id": customer_id}, message="Customer deleted")
