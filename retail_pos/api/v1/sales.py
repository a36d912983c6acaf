"""
Sales Module Routes
Create, edit, list and delete sales orders. Stock moves with every call.
"""

from fastapi import APIRouter, Depends, Path, status

from retail_pos.common.response import SuccessResponse
from retail_pos.core.dependencies import get_sales_service
from retail_pos.logger_config import logger
from retail_pos.schemas.sales import (
    SaleCreate,
    SalesOrderListResponse,
    SalesOrderResponse,
    StockCheckRequest,
    StockCheckResponse,
)
from retail_pos.services.sales_service import SalesService

router = APIRouter()


@router.get("", response_model=SalesOrderListResponse)
def list_sales(service: SalesService = Depends(get_sales_service)):
    """All sales orders with customer and items, most recent first."""
    orders = service.get_sales()
    return SalesOrderListResponse(
        total=len(orders),
        orders=[SalesOrderResponse.model_validate(o) for o in orders],
    )


@router.post(
    "",
    response_model=SalesOrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a sales order",
    description="""
    Creates a completed sales order and deducts stock.

    - Every line must reference an existing product; products with variants need a variant
    - Requested quantities are checked against stock on hand (409 if short)
    - unit_amount is optional; it defaults to sell price + variant adjustment
    - total_amount is optional; it defaults to the sum of line subtotals
    """,
)
def create_sale(data: SaleCreate, service: SalesService = Depends(get_sales_service)):
    logger.info(f"API: Creating sale for customer {data.customer_id}")
    order = service.create_sale(
        customer_id=data.customer_id,
        items=data.items,
        total_amount=data.total_amount,
    )
    return SalesOrderResponse.model_validate(order)


@router.post("/check-stock", response_model=StockCheckResponse)
def check_stock(data: StockCheckRequest, service: SalesService = Depends(get_sales_service)):
    """Pre-submission availability check; 409 with details when a line is short."""
    service.check_stock(data.items)
    return StockCheckResponse(available=True, message="All items are available")


@router.get("/{order_id}", response_model=SalesOrderResponse)
def get_sale(
    order_id: str = Path(..., description="Sales order id"),
    service: SalesService = Depends(get_sales_service),
):
    return SalesOrderResponse.model_validate(service.get_sale(order_id))


@router.put("/{order_id}", response_model=SalesOrderResponse)
def update_sale(
    data: SaleCreate,
    order_id: str = Path(..., description="Sales order id"),
    service: SalesService = Depends(get_sales_service),
):
    """Replace an order's customer and lines; stock is restored then deducted again."""
    logger.info(f"API: Updating sale {order_id}")
    order = service.update_sale(
        order_id,
        customer_id=data.customer_id,
        items=data.items,
        total_amount=data.total_amount,
    )
    return SalesOrderResponse.model_validate(order)


@router.delete("/{order_id}")
def delete_sale(
    order_id: str = Path(..., description="Sales order id"),
    service: SalesService = Depends(get_sales_service),
):
    """Delete an order and put its quantities back in stock."""
    logger.info(f"API: Deleting sale {order_id}")
    service.delete_sale(order_id)
    return SuccessResponse.send(data={"id": order_id}, message="Sales order deleted")
