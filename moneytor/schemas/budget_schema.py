from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import date, datetime
from typing import List, Literal, Optional
from uuid import UUID

from moneytor.schemas.common import CategoryRef, reject_null

BudgetPeriod = Literal["weekly", "monthly", "yearly"]
BudgetStatus = Literal["active", "expired", "upcoming"]


class BudgetCreate(BaseModel):
    category_id: UUID
    amount: float = Field(..., gt=0, description="Budget amount must be positive")
    period: BudgetPeriod = "monthly"
    start_date: date
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class BudgetUpdate(BaseModel):
    category_id: Optional[UUID] = None
    amount: Optional[float] = Field(None, gt=0)
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("category_id", "amount", "period", "start_date", mode="before")
    @classmethod
    def required_columns_not_null(cls, v, info):
        return reject_null(v, info.field_name)


class BudgetFilters(BaseModel):
    period: Optional[BudgetPeriod] = None
    category_id: Optional[str] = None
    status: Optional[BudgetStatus] = None
    over_budget: Optional[bool] = None


class BudgetResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    category_id: Optional[str] = None
    amount: float
    period: BudgetPeriod = "monthly"
    start_date: date
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[CategoryRef] = None


class BudgetWithStats(BudgetResponse):
    spent_amount: float
    remaining_amount: float
    spent_percentage: float
    transaction_count: int
    is_over_budget: bool
    days_remaining: int
    daily_average: float
    projected_spending: float


class BudgetOverview(BaseModel):
    total_budgets: int
    total_budget_amount: float
    total_spent: float
    over_budget_count: int
    active_budgets: int


class BudgetInsight(BaseModel):
    type: Literal["recommendation", "alert", "tip"]
    title: str
    description: str
    priority: Literal["low", "medium", "high"]
    category: Optional[str] = None


class BudgetAnalytics(BaseModel):
    total_budgeted: float = 0.0
    total_spent: float = 0.0
    average_utilization: float = 0.0
    over_budget_count: int = 0
    under_utilized_count: int = 0
    savings_total: float = 0.0


class BudgetInsightReport(BaseModel):
    insights: List[BudgetInsight]
    analytics: BudgetAnalytics


class BudgetOptimization(BaseModel):
    budget_id: str
    category_name: str
    current_amount: float
    suggested_amount: float
    reasoning: str
    potential_savings: float


class BudgetOptimizationReport(BaseModel):
    optimizations: List[BudgetOptimization]
    total_potential_savings: float
    has_optimizations: bool


class BudgetRecommendation(BaseModel):
    category_id: str
    category_name: str
    monthly_average: float
    suggested_budget: float
    transaction_count: int
    reasoning: str
