from fastapi import Depends, Request

from retail_pos.core.config import Settings
from retail_pos.services.dashboard_service import DashboardService
from retail_pos.services.purchase_service import PurchaseService
from retail_pos.services.sales_service import SalesService
from retail_pos.store.base import DataStore


def get_store(request: Request) -> DataStore:
    """Dependency to get the store chosen at startup."""
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_sales_service(store: DataStore = Depends(get_store)) -> SalesService:
    return SalesService(store)


def get_purchase_service(
    store: DataStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
) -> PurchaseService:
    return PurchaseService(store, default_markup=app_settings.DEFAULT_MARKUP)


def get_dashboard_service(
    store: DataStore = Depends(get_store),
    app_settings: Settings = Depends(get_settings),
) -> DashboardService:
    return DashboardService(store, low_stock_threshold=app_settings.LOW_STOCK_THRESHOLD)
