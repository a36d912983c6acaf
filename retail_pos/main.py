from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from retail_pos.api.v1 import customer, dashboard, expense, products, purchase, sales, supplier
from retail_pos.common.error_handlers import register_error_handlers
from retail_pos.core.config import Settings, settings
from retail_pos.logger_config import logger
from retail_pos.store import build_store


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings
    store = build_store(app_settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        store.init_schema()
        logger.info(f"Store ready: {store.backend} ({app_settings.APP_ENV})")
        try:
            yield
        finally:
            store.dispose()

    app = FastAPI(title="Retail Inventory", version="1.0.0", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Register API routers
    app.include_router(products.router, prefix="/api/v1/products", tags=["products"])
    app.include_router(customer.router, prefix="/api/v1/customers", tags=["customers"])
    app.include_router(supplier.router, prefix="/api/v1/suppliers", tags=["suppliers"])
    app.include_router(sales.router, prefix="/api/v1/sales", tags=["sales"])
    app.include_router(purchase.router, prefix="/api/v1/purchases", tags=["purchases"])
    app.include_router(expense.router, prefix="/api/v1/expenses", tags=["expenses"])
    app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["dashboard"])

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Retail Inventory APIs!", "store": store.backend}

    return app


app = create_app()
