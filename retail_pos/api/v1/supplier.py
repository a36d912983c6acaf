from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from retail_pos.common.response import SuccessResponse
from retail_pos.core.dependencies import get_store
from retail_pos.schemas.contact import SupplierCreate, SupplierListResponse, SupplierResponse
from retail_pos.services.contact_service import (
    create_supplier,
    delete_supplier,
    get_all_suppliers,
    get_supplier_by_id,
)
from retail_pos.store.base import DataStore

router = APIRouter()


@router.get("", response_model=SupplierListResponse)
def get_suppliers(
    search: Optional[str] = Query(None),
    store: DataStore = Depends(get_store),
):
    suppliers = get_all_suppliers(store, search=search)
    return SupplierListResponse(
        total=len(suppliers),
        suppliers=[SupplierResponse.model_validate(s) for s in suppliers],
    )


@router.get("/{supplier_id}", response_model=SupplierResponse)
def get_supplier(supplier_id: str, store: DataStore = Depends(get_store)):
    return SupplierResponse.model_validate(get_supplier_by_id(store, supplier_id))


@router.post("", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED)
def create_supplier_route(data: SupplierCreate, store: DataStore = Depends(get_store)):
    return SupplierResponse.model_validate(create_supplier(store, data.model_dump()))


@router.delete("/{supplier_id}")
def delete_supplier_route(supplier_id: str, store: DataStore = Depends(get_store)):
    delete_supplier(store, supplier_id)
    return SuccessResponse.send(data={"id": supplier_id}, message="Supplier deleted")
