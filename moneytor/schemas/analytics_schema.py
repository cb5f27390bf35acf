from pydantic import BaseModel
from typing import Literal, Optional
from datetime import date


class TopSpendingCategory(BaseModel):
    name: str
    amount: float
    percentage: float


class FinancialKPI(BaseModel):
    net_worth: float
    monthly_income: float
    monthly_expenses: float
    monthly_net: float
    savings_rate: float
    spending_velocity: float
    financial_health_score: float
    emergency_fund_ratio: float
    top_spending_category: Optional[TopSpendingCategory] = None
    income_growth: float
    expense_growth: float


class PeriodTotals(BaseModel):
    income: float = 0.0
    expenses: float = 0.0
    net: float = 0.0
    transaction_count: int = 0


class PeriodChanges(BaseModel):
    income_change: float
    expense_change: float
    net_change: float
    transaction_count_change: int
    income_percent_change: float
    expense_percent_change: float
    net_percent_change: float


class PeriodComparison(BaseModel):
    current_period: PeriodTotals
    previous_period: PeriodTotals
    changes: PeriodChanges
    comparison_type: Literal["previous", "year-over-year"] = "previous"
    current_range: Optional[dict] = None
    previous_range: Optional[dict] = None


class SpendingTrend(BaseModel):
    date: date
    income: float
    expenses: float
    net: float
    cumulative_income: float
    cumulative_expenses: float
    cumulative_net: float


class CategoryInsight(BaseModel):
    category_id: str
    category_name: str
    category_color: Optional[str] = None
    total_amount: float
    transaction_count: int
    average_transaction: float
    percentage: float
    monthly_average: float
    trend: Literal["up", "down", "stable"]
    trend_percentage: float
