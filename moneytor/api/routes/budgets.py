from fastapi import APIRouter, Depends, status
from supabase import Client
from typing import List, Optional
from uuid import UUID

from moneytor.api.deps import CurrentUser, get_current_user, get_db
from moneytor.schemas.budget_schema import (
    BudgetCreate,
    BudgetFilters,
    BudgetInsightReport,
    BudgetOptimizationReport,
    BudgetOverview,
    BudgetPeriod,
    BudgetRecommendation,
    BudgetResponse,
    BudgetStatus,
    BudgetUpdate,
    BudgetWithStats,
)
from moneytor.services import budget_service, settings_service

router = APIRouter(prefix="/api/budgets", tags=["Budgets"])


def budget_filters(
    period: Optional[BudgetPeriod] = None,
    category_id: Optional[UUID] = None,
    status: Optional[BudgetStatus] = None,
    over_budget: Optional[bool] = None,
) -> BudgetFilters:
    return BudgetFilters(
        period=period,
        category_id=str(category_id) if category_id else None,
        status=status,
        over_budget=over_budget,
    )


@router.get("/", response_model=List[BudgetResponse])
def read_budgets(
    filters: BudgetFilters = Depends(budget_filters),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return budget_service.list_budgets(db, current_user.id, filters)


@router.get("/stats", response_model=List[BudgetWithStats])
def read_budgets_with_stats(
    filters: BudgetFilters = Depends(budget_filters),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Budgets with spending, remaining amount and projections for their period"""
    return budget_service.list_budgets_with_stats(db, current_user.id, filters)


@router.get("/overview", response_model=BudgetOverview)
def read_budget_overview(
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Totals across active budgets"""
    return budget_service.budget_overview(db, current_user.id)


@router.get("/insights", response_model=BudgetInsightReport)
def read_budget_insights(
    filters: BudgetFilters = Depends(budget_filters),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    budgets = budget_service.list_budgets_with_stats(db, current_user.id, filters)
    currency = settings_service.get_user_currency(db, current_user.id)
    return budget_service.budget_insights(budgets, currency=currency)


@router.get("/optimizations", response_model=BudgetOptimizationReport)
def read_budget_optimizations(
    filters: BudgetFilters = Depends(budget_filters),
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    budgets = budget_service.list_budgets_with_stats(db, current_user.id, filters)
    return budget_service.budget_optimizations(budgets)


@router.get("/recommendations", response_model=List[BudgetRecommendation])
def read_budget_recommendations(
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Suggested monthly budgets from the last 90 days of spending"""
    currency = settings_service.get_user_currency(db, current_user.id)
    return budget_service.budget_recommendations(db, current_user.id, currency=currency)


@router.get("/{budget_id}", response_model=BudgetResponse)
def read_budget(
    budget_id: UUID,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return budget_service.get_budget(db, current_user.id, str(budget_id))


@router.post("/", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_new_budget(
    budget: BudgetCreate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Create a budget for an expense category; the end date follows from the period"""
    return budget_service.create_budget(db, current_user.id, budget)


@router.put("/{budget_id}", response_model=BudgetResponse)
def update_existing_budget(
    budget_id: UUID,
    budget_update: BudgetUpdate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return budget_service.update_budget(db, current_user.id, str(budget_id), budget_update)


@router.delete("/{budget_id}")
def delete_existing_budget(
    budget_id: UUID,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    budget_service.delete_budget(db, current_user.id, str(budget_id))
    return {"message": "Budget deleted successfully"}
