# moneytor/utils/dates.py
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal, Optional, Union

from dateutil.relativedelta import relativedelta, MO, SA

RangePreset = Literal["today", "week", "month", "year", "last7days", "last30days", "lastMonth"]
BudgetPeriod = Literal["weekly", "monthly", "yearly"]

RANGE_LABELS = {
    "today": "Today",
    "week": "This Week",
    "month": "This Month",
    "year": "This Year",
    "last7days": "Last 7 Days",
    "last30days": "Last 30 Days",
    "lastMonth": "Last Month",
}


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar dates."""

    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Date range ends ({self.end}) before it starts ({self.start})")

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def iter_days(self):
        day = self.start
        while day <= self.end:
            yield day
            day += timedelta(days=1)


def parse_date(value: Union[str, date, None], default: Optional[date] = None) -> Optional[date]:
    """Accepts 'YYYY-MM-DD' strings (or full ISO timestamps) and dates."""
    if value is None or value == "":
        return default
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def get_date_range(period: RangePreset, today: Optional[date] = None) -> DateRange:
    today = today or date.today()

    if period == "today":
        return DateRange(today, today)
    if period == "week":
        # Dashboard weeks run Monday to Sunday
        start = today + relativedelta(weekday=MO(-1))
        return DateRange(start, start + timedelta(days=6))
    if period == "month":
        return DateRange(today.replace(day=1), today + relativedelta(day=31))
    if period == "year":
        return DateRange(date(today.year, 1, 1), date(today.year, 12, 31))
    if period == "last7days":
        return DateRange(today - timedelta(days=7), today)
    if period == "last30days":
        return DateRange(today - timedelta(days=30), today)
    if period == "lastMonth":
        last_month = today - relativedelta(months=1)
        return DateRange(last_month.replace(day=1), last_month + relativedelta(day=31))

    raise ValueError(f"Unknown date range preset: {period}")


def get_date_range_label(period: str) -> str:
    return RANGE_LABELS.get(period, period)


def previous_period(current: DateRange) -> DateRange:
    """The equally long range that ends the day before ``current`` starts."""
    end = current.start - timedelta(days=1)
    return DateRange(end - timedelta(days=current.days - 1), end)


def year_over_year_period(current: DateRange) -> DateRange:
    # relativedelta clamps 29 Feb to 28 Feb
    return DateRange(current.start - relativedelta(years=1), current.end - relativedelta(years=1))


def period_end_date(start: date, period: str) -> date:
    """End date implied by a budget period starting on ``start``."""
    if period == "weekly":
        # Budget weeks run Sunday to Saturday
        return start + relativedelta(weekday=SA(+1))
    if period == "yearly":
        return date(start.year, 12, 31)
    return start + relativedelta(day=31)
