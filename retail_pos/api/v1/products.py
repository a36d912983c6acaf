from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from retail_pos.common.response import SuccessResponse
from retail_pos.core.dependencies import get_store
from retail_pos.logger_config import logger
from retail_pos.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from retail_pos.services.product_service import (
    create_product,
    delete_product,
    get_all_products,
    get_product_by_id,
    update_product,
)
from retail_pos.store.base import DataStore

router = APIRouter()


@router.get("", response_model=ProductListResponse)
def get_products(
    search: Optional[str] = Query(None, description="Match on product name"),
    store: DataStore = Depends(get_store),
):
    products = get_all_products(store, search=search)
    return ProductListResponse(
        total=len(products),
        products=[ProductResponse.model_validate(p) for p in products],
    )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, store: DataStore = Depends(get_store)):
    return ProductResponse.model_validate(get_product_by_id(store, product_id))


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product_route(data: ProductCreate, store: DataStore = Depends(get_store)):
    """Create a product; with variants, stock is the sum of variant stock."""
    logger.info(f"API: Creating product {data.name}")
    product = create_product(store, data.model_dump())
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product_route(product_id: str, data: ProductUpdate, store: DataStore = Depends(get_store)):
    logger.info(f"API: Updating product {product_id}")
    product = update_product(store, product_id, data.model_dump())
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}")
def delete_product_route(product_id: str, store: DataStore = Depends(get_store)):
    delete_product(store, product_id)
    return SuccessResponse.send(data={"id": product_id}, message="Product deleted")
