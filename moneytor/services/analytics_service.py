import logging
from datetime import date
from typing import List, Optional
from supabase import Client

from moneytor.core import analytics, transaction_crud
from moneytor.core.errors import InvariantError
from moneytor.schemas.analytics_schema import (
    CategoryInsight,
    FinancialKPI,
    PeriodComparison,
    SpendingTrend,
)
from moneytor.utils.dates import (
    DateRange,
    RANGE_LABELS,
    get_date_range,
    previous_period,
    year_over_year_period,
)

logger = logging.getLogger(__name__)


def resolve_date_range(preset: Optional[str] = None, date_from: Optional[date] = None,
                       date_to: Optional[date] = None, today: Optional[date] = None) -> DateRange:
    """Either a named preset or an explicit from/to pair; defaults to this month."""
    if date_from or date_to:
        if not (date_from and date_to):
            raise InvariantError("Both date_from and date_to are required for a custom range")
        if date_to < date_from:
            raise InvariantError("date_to cannot be before date_from")
        return DateRange(date_from, date_to)

    preset = preset or "month"
    if preset not in RANGE_LABELS:
        raise InvariantError(f"Unknown period '{preset}'. Use one of: {', '.join(RANGE_LABELS)}")
    return get_date_range(preset, today)


def _range_dict(date_range: DateRange) -> dict:
    return {"from": date_range.start.isoformat(), "to": date_range.end.isoformat()}


def get_financial_kpis(db: Client, user_id: str, date_range: DateRange) -> FinancialKPI:
    current = transaction_crud.get_rows_in_range(db, user_id, date_range)
    previous = transaction_crud.get_rows_in_range(
        db, user_id, previous_period(date_range), columns="amount, type"
    )

    logger.info("📈 KPIs for user %s over %s: %d rows (%d previous)",
                user_id, _range_dict(date_range), len(current), len(previous))
    return analytics.compute_financial_kpis(current, previous, date_range)


def get_period_comparison(db: Client, user_id: str, date_range: DateRange,
                          comparison_type: str = "previous") -> PeriodComparison:
    if comparison_type == "year-over-year":
        compared = year_over_year_period(date_range)
    else:
        compared = previous_period(date_range)

    current = transaction_crud.get_rows_in_range(db, user_id, date_range, columns="amount, type")
    previous = transaction_crud.get_rows_in_range(db, user_id, compared, columns="amount, type")

    comparison = analytics.compare_periods(current, previous)
    comparison.comparison_type = comparison_type
    comparison.current_range = _range_dict(date_range)
    comparison.previous_range = _range_dict(compared)
    return comparison


def get_spending_trends(db: Client, user_id: str, date_range: DateRange) -> List[SpendingTrend]:
    rows = transaction_crud.get_rows_in_range(
        db, user_id, date_range, columns="amount, type, date", ascending=True
    )
    return analytics.build_spending_trends(rows, date_range)


def get_category_insights(db: Client, user_id: str, date_range: DateRange,
                          entry_type: str = "all") -> List[CategoryInsight]:
    current = transaction_crud.get_rows_in_range(db, user_id, date_range, entry_type=entry_type)
    previous = transaction_crud.get_rows_in_range(
        db, user_id, previous_period(date_range), entry_type=entry_type
    )
    return analytics.build_category_insights(current, previous, date_range)
