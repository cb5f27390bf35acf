# moneytor/core/analytics.py
"""
Period-bounded aggregation of transaction rows.

Every function here works on rows already fetched from the ``transactions``
table (dicts with ``amount``, ``type``, optionally ``date`` and an embedded
``category``) and never touches the database.
"""
from collections import defaultdict
from typing import Iterable, List, Optional

from moneytor.schemas.analytics_schema import (
    CategoryInsight,
    FinancialKPI,
    PeriodChanges,
    PeriodComparison,
    PeriodTotals,
    SpendingTrend,
    TopSpendingCategory,
)
from moneytor.utils.dates import DateRange, parse_date

# Category trends within +/- this percentage count as stable
STABLE_TREND_THRESHOLD = 5.0
EMERGENCY_FUND_CAP = 2.0
DAYS_PER_MONTH = 30


def _amount(row: dict) -> float:
    return float(row.get("amount") or 0)


def summarize(rows: Iterable[dict]) -> PeriodTotals:
    """Income, expenses, net and count. Anything not typed income is an expense."""
    totals = PeriodTotals()
    for row in rows:
        totals.transaction_count += 1
        if row.get("type") == "income":
            totals.income += _amount(row)
        else:
            totals.expenses += _amount(row)
    totals.net = totals.income - totals.expenses
    return totals


def growth_rate(current: float, previous: float) -> float:
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def percent_change(change: float, base: float) -> float:
    return change / base * 100 if base > 0 else 0.0


def monthly_multiplier(date_range: DateRange) -> float:
    return DAYS_PER_MONTH / date_range.days


def health_score(savings_rate: float, income_growth: float, expense_growth: float,
                 emergency_fund_ratio: float) -> float:
    score = 50

    if savings_rate > 20:
        score += 30
    elif savings_rate > 10:
        score += 20
    elif savings_rate > 0:
        score += 10
    else:
        score -= 20

    if income_growth > 0:
        score += 10
    elif income_growth < -10:
        score -= 15

    if expense_growth < 0:
        score += 10
    elif expense_growth > 20:
        score -= 15

    if emergency_fund_ratio >= 1:
        score += 10
    elif emergency_fund_ratio < 0.1:
        score -= 10

    return float(max(0, min(100, score)))


def top_spending_category(rows: Iterable[dict], total_expenses: float) -> Optional[TopSpendingCategory]:
    spending = {}
    for row in rows:
        category = row.get("category")
        if row.get("type") != "expense" or not category:
            continue
        entry = spending.setdefault(category["id"], {"name": category.get("name"), "amount": 0.0})
        entry["amount"] += _amount(row)

    if not spending:
        return None

    # max() keeps the first of equal amounts
    top = max(spending.values(), key=lambda c: c["amount"])
    return TopSpendingCategory(
        name=top["name"],
        amount=top["amount"],
        percentage=top["amount"] / total_expenses * 100 if total_expenses > 0 else 0.0,
    )


def compute_financial_kpis(current_rows: List[dict], previous_rows: List[dict],
                           date_range: DateRange) -> FinancialKPI:
    current = summarize(current_rows)
    previous = summarize(previous_rows)

    income_growth = growth_rate(current.income, previous.income)
    expense_growth = growth_rate(current.expenses, previous.expenses)

    days = date_range.days
    multiplier = monthly_multiplier(date_range)
    monthly_income = current.income * multiplier
    monthly_expenses = current.expenses * multiplier

    savings_rate = current.net / current.income * 100 if current.income > 0 else 0.0
    spending_velocity = current.expenses / days

    emergency_fund_ratio = (
        max(0.0, current.net) / (monthly_expenses * 3) if monthly_expenses > 0 else 0.0
    )

    return FinancialKPI(
        net_worth=current.net,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        monthly_net=monthly_income - monthly_expenses,
        savings_rate=savings_rate,
        spending_velocity=spending_velocity,
        financial_health_score=health_score(savings_rate, income_growth, expense_growth, emergency_fund_ratio),
        emergency_fund_ratio=min(emergency_fund_ratio, EMERGENCY_FUND_CAP),
        top_spending_category=top_spending_category(current_rows, current.expenses),
        income_growth=income_growth,
        expense_growth=expense_growth,
    )


def compare_periods(current_rows: List[dict], previous_rows: List[dict]) -> PeriodComparison:
    current = summarize(current_rows)
    previous = summarize(previous_rows)

    income_change = current.income - previous.income
    expense_change = current.expenses - previous.expenses
    net_change = current.net - previous.net

    return PeriodComparison(
        current_period=current,
        previous_period=previous,
        changes=PeriodChanges(
            income_change=income_change,
            expense_change=expense_change,
            net_change=net_change,
            transaction_count_change=current.transaction_count - previous.transaction_count,
            income_percent_change=percent_change(income_change, previous.income),
            expense_percent_change=percent_change(expense_change, previous.expenses),
            net_percent_change=net_change / abs(previous.net) * 100 if previous.net != 0 else 0.0,
        ),
    )


def build_spending_trends(rows: List[dict], date_range: DateRange) -> List[SpendingTrend]:
    """One point per day of the range, zero-filled, with running totals."""
    daily = defaultdict(lambda: [0.0, 0.0])
    for row in rows:
        day = parse_date(row.get("date"))
        if day is None or day not in date_range:
            continue
        if row.get("type") == "income":
            daily[day][0] += _amount(row)
        else:
            daily[day][1] += _amount(row)

    trends = []
    cumulative_income = 0.0
    cumulative_expenses = 0.0
    for day in date_range.iter_days():
        income, expenses = daily.get(day, (0.0, 0.0))
        cumulative_income += income
        cumulative_expenses += expenses
        trends.append(SpendingTrend(
            date=day,
            income=income,
            expenses=expenses,
            net=income - expenses,
            cumulative_income=cumulative_income,
            cumulative_expenses=cumulative_expenses,
            cumulative_net=cumulative_income - cumulative_expenses,
        ))
    return trends


def _trend_direction(trend_percentage: float) -> str:
    if abs(trend_percentage) < STABLE_TREND_THRESHOLD:
        return "stable"
    return "up" if trend_percentage > 0 else "down"


def build_category_insights(rows: List[dict], previous_rows: List[dict],
                            date_range: DateRange) -> List[CategoryInsight]:
    current = {}
    for row in rows:
        category = row.get("category")
        if not category:
            continue
        entry = current.setdefault(category["id"], {
            "name": category.get("name") or "",
            "color": category.get("color"),
            "total": 0.0,
            "count": 0,
        })
        entry["total"] += _amount(row)
        entry["count"] += 1

    previous_totals = defaultdict(float)
    for row in previous_rows:
        category = row.get("category")
        if category:
            previous_totals[category["id"]] += _amount(row)

    grand_total = sum(entry["total"] for entry in current.values())
    multiplier = monthly_multiplier(date_range)

    insights = []
    for category_id, entry in current.items():
        trend_percentage = growth_rate(entry["total"], previous_totals.get(category_id, 0.0))
        insights.append(CategoryInsight(
            category_id=str(category_id),
            category_name=entry["name"],
            category_color=entry["color"],
            total_amount=entry["total"],
            transaction_count=entry["count"],
            average_transaction=entry["total"] / entry["count"] if entry["count"] else 0.0,
            percentage=entry["total"] / grand_total * 100 if grand_total > 0 else 0.0,
            monthly_average=entry["total"] * multiplier,
            trend=_trend_direction(trend_percentage),
            trend_percentage=trend_percentage,
        ))

    insights.sort(key=lambda i: i.total_amount, reverse=True)
    return insights
