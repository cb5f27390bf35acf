import logging
import math
from datetime import date, timedelta
from typing import List, Optional
from supabase import Client

from moneytor.config import settings
from moneytor.core import budget_crud, category_crud, transaction_crud
from moneytor.core.errors import InvariantError, NotFoundError
from moneytor.schemas.budget_schema import (
    BudgetAnalytics,
    BudgetCreate,
    BudgetFilters,
    BudgetInsight,
    BudgetInsightReport,
    BudgetOptimization,
    BudgetOptimizationReport,
    BudgetOverview,
    BudgetRecommendation,
    BudgetUpdate,
    BudgetWithStats,
)
from moneytor.utils.currency import format_currency
from moneytor.utils.dates import DateRange, parse_date, period_end_date

logger = logging.getLogger(__name__)

NEAR_LIMIT_PCT = 80
UNDERUSED_PCT = 30
UNDER_UTILIZED_PCT = 50
HIGH_UTILIZATION_PCT = 95
HOLIDAY_MONTHS = (12, 1)
RECOMMENDATION_WINDOW_DAYS = 90
RECOMMENDATION_ROW_LIMIT = 500
RECOMMENDATION_COUNT = 10


def _category_ref(category: dict) -> dict:
    return {k: category.get(k) for k in ("id", "name", "type", "color", "icon")}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# -------------------- Periods --------------------
def budget_period_range(budget: dict) -> DateRange:
    start = parse_date(budget["start_date"])
    end = parse_date(budget.get("end_date")) or period_end_date(start, budget.get("period") or "monthly")
    return DateRange(start, end)


def budget_status(budget: dict, today: date) -> str:
    period = budget_period_range(budget)
    if today < period.start:
        return "upcoming"
    if today > period.end:
        return "expired"
    return "active"


# -------------------- CRUD --------------------
def check_expense_category(db: Client, user_id: str, category_id: str) -> dict:
    try:
        category = category_crud.get_category(db, category_id, user_id)
    except NotFoundError:
        raise InvariantError("Invalid category")

    if category.get("type") != "expense":
        raise InvariantError("Budgets can only be created for expense categories")
    return category


def list_budgets(db: Client, user_id: str, filters: Optional[BudgetFilters] = None,
                 today: Optional[date] = None) -> List[dict]:
    filters = filters or BudgetFilters()
    today = today or date.today()

    budgets = budget_crud.get_budgets(db, user_id, filters.period, filters.category_id)
    if filters.status:
        budgets = [b for b in budgets if budget_status(b, today) == filters.status]
    return budgets


def get_budget(db: Client, user_id: str, budget_id: str) -> dict:
    return budget_crud.get_budget(db, budget_id, user_id)


def create_budget(db: Client, user_id: str, payload: BudgetCreate) -> dict:
    category = check_expense_category(db, user_id, str(payload.category_id))
    end_date = payload.end_date or period_end_date(payload.start_date, payload.period)

    row = budget_crud.create_budget(db, user_id, {
        "category_id": str(payload.category_id),
        "amount": payload.amount,
        "period": payload.period,
        "start_date": payload.start_date.isoformat(),
        "end_date": end_date.isoformat(),
    })
    row["category"] = _category_ref(category)

    logger.info("📊 Created %s budget of %.2f for category %s", payload.period, payload.amount, category.get("name"))
    return row


def update_budget(db: Client, user_id: str, budget_id: str, payload: BudgetUpdate) -> dict:
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise InvariantError("No fields to update")

    existing = budget_crud.get_budget(db, budget_id, user_id)
    values = {}

    if "amount" in updates:
        values["amount"] = updates["amount"]
    if "period" in updates:
        values["period"] = updates["period"]
    category = existing.get("category")
    if "category_id" in updates:
        category = check_expense_category(db, user_id, str(updates["category_id"]))
        values["category_id"] = str(updates["category_id"])

    start_date = updates.get("start_date") or parse_date(existing["start_date"])
    end_date = updates.get("end_date")
    if updates.get("start_date") and not end_date:
        # A moved start date re-derives the end date from the budget's period
        end_date = period_end_date(start_date, updates.get("period") or existing.get("period") or "monthly")

    if "start_date" in updates and updates["start_date"]:
        values["start_date"] = start_date.isoformat()
    if end_date:
        if end_date < start_date:
            raise InvariantError("End date cannot be before start date")
        values["end_date"] = end_date.isoformat()
    elif "end_date" in updates:
        # An explicit null falls back to the end implied by the period
        values["end_date"] = None

    row = budget_crud.update_budget(db, budget_id, user_id, values)
    # The update returns the bare row without the embedded category
    row["category"] = _category_ref(category) if category else None
    return row


def delete_budget(db: Client, user_id: str, budget_id: str) -> None:
    budget_crud.delete_budget(db, budget_id, user_id)


# -------------------- Stats --------------------
def compute_budget_stats(budget: dict, expense_rows: List[dict], today: date) -> BudgetWithStats:
    period = budget_period_range(budget)

    spent = sum(float(t.get("amount") or 0) for t in expense_rows)
    amount = float(budget["amount"])

    days_remaining = max(0, (period.end - today).days)
    total_days = period.days
    days_passed = total_days - days_remaining
    daily_average = spent / days_passed if days_passed > 0 else 0.0

    return BudgetWithStats(
        **budget,
        spent_amount=spent,
        remaining_amount=amount - spent,
        spent_percentage=spent / amount * 100 if amount > 0 else 0.0,
        transaction_count=len(expense_rows),
        is_over_budget=spent > amount,
        days_remaining=days_remaining,
        daily_average=daily_average,
        projected_spending=daily_average * total_days,
    )


def list_budgets_with_stats(db: Client, user_id: str, filters: Optional[BudgetFilters] = None,
                            today: Optional[date] = None) -> List[BudgetWithStats]:
    today = today or date.today()
    results = []

    for budget in list_budgets(db, user_id, filters, today):
        # Budgets only track expenses
        rows = transaction_crud.get_rows_in_range(
            db,
            user_id,
            budget_period_range(budget),
            columns="amount, date",
            entry_type="expense",
            category_id=budget.get("category_id"),
        )
        results.append(compute_budget_stats(budget, rows, today))

    if filters and filters.over_budget is not None:
        results = [b for b in results if b.is_over_budget == filters.over_budget]
    return results


def budget_overview(db: Client, user_id: str, today: Optional[date] = None) -> BudgetOverview:
    budgets = list_budgets_with_stats(db, user_id, BudgetFilters(status="active"), today)
    return BudgetOverview(
        total_budgets=len(budgets),
        total_budget_amount=sum(b.amount for b in budgets),
        total_spent=sum(b.spent_amount for b in budgets),
        over_budget_count=len([b for b in budgets if b.is_over_budget]),
        active_budgets=len(budgets),
    )


# -------------------- Insights --------------------
def _category_name(budget: BudgetWithStats) -> Optional[str]:
    return budget.category.name if budget.category else None


def budget_insights(budgets: List[BudgetWithStats], today: Optional[date] = None,
                    currency: Optional[str] = None) -> BudgetInsightReport:
    """Analytics plus alerts, recommendations and tips for a set of budgets."""
    today = today or date.today()
    currency = currency or settings.DEFAULT_CURRENCY
    insights = []
    analytics = BudgetAnalytics()

    if not budgets:
        return BudgetInsightReport(insights=insights, analytics=analytics)

    analytics.total_budgeted = sum(b.amount for b in budgets)
    analytics.total_spent = sum(b.spent_amount for b in budgets)
    analytics.average_utilization = sum(b.spent_percentage for b in budgets) / len(budgets)
    analytics.over_budget_count = len([b for b in budgets if b.is_over_budget])
    analytics.under_utilized_count = len([b for b in budgets if b.spent_percentage < UNDER_UTILIZED_PCT])
    analytics.savings_total = sum(max(0.0, b.remaining_amount) for b in budgets)

    for budget in budgets:
        if budget.is_over_budget:
            insights.append(BudgetInsight(
                type="alert",
                title=f"{_category_name(budget)} over budget",
                description=(
                    f"You've spent {format_currency(budget.spent_amount, currency)} of your "
                    f"{format_currency(budget.amount, currency)} budget ({budget.spent_percentage:.0f}%)"
                ),
                priority="high",
                category=_category_name(budget),
            ))

    for budget in budgets:
        if budget.spent_percentage >= NEAR_LIMIT_PCT and not budget.is_over_budget:
            insights.append(BudgetInsight(
                type="alert",
                title=f"{_category_name(budget)} approaching limit",
                description=(
                    f"You've used {budget.spent_percentage:.0f}% of this budget. "
                    "Consider slowing spending or adjusting the limit."
                ),
                priority="medium",
                category=_category_name(budget),
            ))

    for budget in budgets:
        if budget.spent_percentage < UNDERUSED_PCT and budget.spent_amount > 0:
            insights.append(BudgetInsight(
                type="recommendation",
                title=f"{_category_name(budget)} budget underused",
                description=(
                    f"Only {budget.spent_percentage:.0f}% used. Consider reducing the budget "
                    "or finding opportunities to optimize spending."
                ),
                priority="low",
                category=_category_name(budget),
            ))

    if analytics.under_utilized_count > 2:
        insights.append(BudgetInsight(
            type="recommendation",
            title="Multiple underutilized budgets",
            description=(
                f"{analytics.under_utilized_count} budgets are under {UNDER_UTILIZED_PCT}% utilized. "
                "Consider reallocating funds to categories you use more."
            ),
            priority="medium",
        ))

    if analytics.over_budget_count == 0 and len(budgets) >= 3:
        insights.append(BudgetInsight(
            type="tip",
            title="Great budgeting discipline!",
            description="You're staying within all your budget limits. Consider setting more aggressive savings goals.",
            priority="low",
        ))

    if today.month in HOLIDAY_MONTHS:
        insights.append(BudgetInsight(
            type="tip",
            title="Holiday season budgeting",
            description=(
                "Consider creating temporary budgets for gift shopping and entertainment "
                "during the holiday season."
            ),
            priority="medium",
        ))

    return BudgetInsightReport(insights=insights, analytics=analytics)


def budget_optimizations(budgets: List[BudgetWithStats]) -> BudgetOptimizationReport:
    optimizations = []

    for budget in budgets:
        current = float(budget.amount)
        suggested = current
        reasoning = ""

        if budget.spent_percentage < UNDERUSED_PCT and budget.spent_amount > 0:
            suggested = _round_half_up(budget.spent_amount * 1.2)
            reduction = _round_half_up((current - suggested) / current * 100)
            reasoning = f"Reduce budget by {reduction}% based on low utilization"
        elif budget.spent_percentage > HIGH_UTILIZATION_PCT and not budget.is_over_budget:
            suggested = _round_half_up(current * 1.15)
            reasoning = "Increase budget by 15% to provide more breathing room"
        elif budget.is_over_budget:
            suggested = _round_half_up(budget.spent_amount * 1.1)
            reasoning = "Increase budget to accommodate actual spending patterns"

        if suggested != current:
            optimizations.append(BudgetOptimization(
                budget_id=budget.id,
                category_name=_category_name(budget) or "Unknown",
                current_amount=current,
                suggested_amount=suggested,
                reasoning=reasoning,
                potential_savings=max(0.0, current - suggested),
            ))

    return BudgetOptimizationReport(
        optimizations=optimizations,
        total_potential_savings=sum(o.potential_savings for o in optimizations),
        has_optimizations=bool(optimizations),
    )


def recommend_budgets(expense_rows: List[dict], months: int = 3,
                      currency: Optional[str] = None) -> List[BudgetRecommendation]:
    """Suggest a monthly budget per category from recent expense rows, with a 10% buffer."""
    currency = currency or settings.DEFAULT_CURRENCY
    spending = {}

    for row in expense_rows:
        category = row.get("category")
        if not category:
            continue
        entry = spending.setdefault(category["id"], {"name": category.get("name"), "total": 0.0, "count": 0})
        entry["total"] += float(row.get("amount") or 0)
        entry["count"] += 1

    recommendations = []
    for category_id, entry in spending.items():
        monthly_average = entry["total"] / months
        suggested = _round_half_up(monthly_average * 1.1)
        recommendations.append(BudgetRecommendation(
            category_id=str(category_id),
            category_name=entry["name"],
            monthly_average=monthly_average,
            suggested_budget=suggested,
            transaction_count=entry["count"],
            reasoning=(
                f"Based on your last {months} months of spending "
                f"({format_currency(monthly_average, currency)} average), we suggest a budget of "
                f"{format_currency(suggested, currency, decimals=0)} with a 10% buffer."
            ),
        ))

    recommendations.sort(key=lambda r: r.monthly_average, reverse=True)
    return recommendations[:RECOMMENDATION_COUNT]


def budget_recommendations(db: Client, user_id: str, today: Optional[date] = None,
                           currency: Optional[str] = None) -> List[BudgetRecommendation]:
    today = today or date.today()
    window = DateRange(today - timedelta(days=RECOMMENDATION_WINDOW_DAYS), today)

    rows = transaction_crud.get_rows_in_range(
        db,
        user_id,
        window,
        entry_type="expense",
        ascending=False,
        limit=RECOMMENDATION_ROW_LIMIT,
    )
    logger.info("💡 Building budget recommendations from %d expense rows for user %s", len(rows), user_id)
    return recommend_budgets(rows, currency=currency)
