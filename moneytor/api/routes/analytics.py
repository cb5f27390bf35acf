from fastapi import APIRouter, Depends
from supabase import Client
from typing import List, Literal, Optional
from datetime import date

from moneytor.api.deps import CurrentUser, get_current_user, get_db
from moneytor.schemas.analytics_schema import (
    CategoryInsight,
    FinancialKPI,
    PeriodComparison,
    SpendingTrend,
)
from moneytor.services import analytics_service
from moneytor.utils.dates import DateRange, RangePreset

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


def date_range_params(
    preset: Optional[RangePreset] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> DateRange:
    return analytics_service.resolve_date_range(preset, date_from, date_to)


@router.get("/kpis", response_model=FinancialKPI)
def read_financial_kpis(
    date_range: DateRange = Depends(date_range_params),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Savings rate, growth, spending velocity and the financial health score"""
    return analytics_service.get_financial_kpis(db, current_user.id, date_range)


@router.get("/comparison", response_model=PeriodComparison)
def read_period_comparison(
    comparison_type: Literal["previous", "year-over-year"] = "previous",
    date_range: DateRange = Depends(date_range_params),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return analytics_service.get_period_comparison(db, current_user.id, date_range, comparison_type)


@router.get("/trends", response_model=List[SpendingTrend])
def read_spending_trends(
    date_range: DateRange = Depends(date_range_params),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Daily income and expenses with running totals"""
    return analytics_service.get_spending_trends(db, current_user.id, date_range)


@router.get("/categories", response_model=List[CategoryInsight])
def read_category_insights(
    type: Literal["income", "expense", "all"] = "all",
    date_range: DateRange = Depends(date_range_params),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return analytics_service.get_category_insights(db, current_user.id, date_range, type)
