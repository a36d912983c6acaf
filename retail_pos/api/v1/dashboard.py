from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query

from retail_pos.core.dependencies import get_dashboard_service
from retail_pos.schemas.dashboard import KPIResponse, ProfitLossResponse
from retail_pos.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/kpis", response_model=KPIResponse)
def get_kpis(
    period_start: Optional[date] = Query(None, description="Defaults to the first of this month"),
    period_end: Optional[date] = Query(None, description="Defaults to today"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Sales, COGS, expenses, profit, margin, inventory value and low-stock count."""
    return KPIResponse(**service.get_kpis(period_start, period_end))


@router.get("/profit-loss", response_model=ProfitLossResponse)
def get_profit_loss(
    date_from: date = Query(...),
    date_to: date = Query(...),
    service: DashboardService = Depends(get_dashboard_service),
):
    return ProfitLossResponse(**service.get_profit_loss(date_from, date_to))
