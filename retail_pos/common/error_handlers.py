from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError

from retail_pos.common.exceptions import (
    InsufficientStockError,
    InventoryError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from retail_pos.common.response import ErrorResponse
from retail_pos.logger_config import logger

# Most specific first
_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InsufficientStockError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (StoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(error: InventoryError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_error_handlers(app: FastAPI):
    @app.exception_handler(InventoryError)
    async def handle_inventory_error(request: Request, e: InventoryError):
        code = status_for(e)
        if code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {e.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected ({code}): {e.message}")

        errors = list(e.errors)
        if isinstance(e, InsufficientStockError):
            errors.append({
                "item": e.item_name,
                "available": e.available,
                "requested": e.requested,
            })
        return ErrorResponse.send(message=e.message, status_code=code, errors=errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, e: RequestValidationError):
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        logger.warning(f"{request.method} {request.url.path} invalid request: {problems}")
        return ErrorResponse.send(
            message="Validation error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            errors=problems,
        )

    @app.exception_handler(Exception)
    async def handle_exception(request: Request, e: Exception):
        # Log the exception with traceback
        logger.exception("Unhandled exception occurred")
        return ErrorResponse.send(
            message="Internal Server Error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            errors=[str(e)],
        )
