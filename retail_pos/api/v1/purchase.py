"""
Purchase Module Routes
Purchase orders add stock; deleting one takes the same quantities back out.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Path, Query, status

from retail_pos.common.response import SuccessResponse
from retail_pos.core.dependencies import get_purchase_service
from retail_pos.logger_config import logger
from retail_pos.schemas.product import (
    InlineProductCreate,
    InlineProductResponse,
    InlineVariantCreate,
    VariantResponse,
)
from retail_pos.schemas.purchase import (
    PurchaseOrderCreate,
    PurchaseOrderListResponse,
    PurchaseOrderResponse,
)
from retail_pos.services.purchase_service import PurchaseService

router = APIRouter()


@router.get("", response_model=PurchaseOrderListResponse)
def list_purchase_orders(
    supplier_id: Optional[str] = Query(default=None, description="Filter by supplier id"),
    service: PurchaseService = Depends(get_purchase_service),
):
    orders = service.get_purchase_orders(supplier_id=supplier_id)
    return PurchaseOrderListResponse(
        total=len(orders),
        orders=[PurchaseOrderResponse.model_validate(o) for o in orders],
    )


@router.post(
    "",
    response_model=PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a purchase order",
    description="""
    Create a purchase order and add its quantities to stock.

    **Important Notes:**
    - total_amount is always Σ quantity × unit cost, computed here
    - A line may carry product_name instead of product_id to create the product on the fly
    - Products with variants need variant_id on the line
    """,
)
def create_purchase_order(
    data: PurchaseOrderCreate,
    service: PurchaseService = Depends(get_purchase_service),
):
    logger.info(f"API: Creating purchase order for supplier {data.supplier_id}")
    order = service.create_purchase_order(supplier_id=data.supplier_id, items=data.items)
    logger.info(f"API: Purchase order created successfully: {order['id']}")
    return PurchaseOrderResponse.model_validate(order)


@router.post(
    "/inline-products",
    response_model=InlineProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_inline_product(
    data: InlineProductCreate,
    service: PurchaseService = Depends(get_purchase_service),
):
    """Create a product (optionally with a first variant) while drafting an order."""
    ids = service.create_inline_product(**data.model_dump())
    return InlineProductResponse(**ids)


@router.post(
    "/inline-products/{product_id}/variants",
    response_model=VariantResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_inline_variant(
    data: InlineVariantCreate,
    product_id: str = Path(..., description="Product id"),
    service: PurchaseService = Depends(get_purchase_service),
):
    variant = service.create_inline_variant(product_id, **data.model_dump())
    return VariantResponse.model_validate(variant)


@router.get("/{order_id}", response_model=PurchaseOrderResponse)
def get_purchase_order(
    order_id: str = Path(..., description="Purchase order id"),
    service: PurchaseService = Depends(get_purchase_service),
):
    return PurchaseOrderResponse.model_validate(service.get_purchase_order(order_id))


@router.delete("/{order_id}")
def delete_purchase_order(
    order_id: str = Path(..., description="Purchase order id"),
    service: PurchaseService = Depends(get_purchase_service),
):
    logger.info(f"API: Deleting purchase order {order_id}")
    service.delete_purchase_order(order_id)
    return SuccessResponse.send(data={"id": order_id}, message="Purchase order deleted")
