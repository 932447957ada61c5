"""Date-range windows over the transaction log.

Named ranges are anchored on calendar-day midnights in the configured
reference timezone. Every window is half-open: ``start <= moment < end``.
Custom ranges include both the start and the end day in full.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

import pytz

from app.config import settings


TODAY = "today"
YESTERDAY = "yesterday"
LAST_3_DAYS = "last_3_days"
LAST_WEEK = "last_week"
LAST_MONTH = "last_month"
LAST_YEAR = "last_year"
CUSTOM = "custom"
ALL = "all"

RANGE_NAMES = (TODAY, YESTERDAY, LAST_3_DAYS, LAST_WEEK, LAST_MONTH, LAST_YEAR, CUSTOM, ALL)

# Names used by the dashboard and activity screens
RANGE_ALIASES = {
    "3days": LAST_3_DAYS,
    "1week": LAST_WEEK,
    "week": LAST_WEEK,
    "1month": LAST_MONTH,
    "month": LAST_MONTH,
    "year": LAST_YEAR,
}


class InvalidDateRange(ValueError):
    pass


@dataclass(frozen=True)
class DateWindow:
    name: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def contains(self, moment: datetime) -> bool:
        moment = as_utc(moment)
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment >= self.end:
            return False
        return True


def as_utc(moment: datetime) -> datetime:
    """Stored timestamps are naive UTC; aware values are converted."""
    if moment.tzinfo is None:
        return pytz.utc.localize(moment)
    return moment.astimezone(pytz.utc)


def normalize_range_name(name: str | None) -> str:
    key = (name or ALL).strip().lower().replace(" ", "_")
    key = RANGE_ALIASES.get(key, key)
    if key not in RANGE_NAMES:
        raise InvalidDateRange(f"Unknown date range '{name}'")
    return key


def subtract_months(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _midnight(day: date, tz) -> datetime:
    return tz.localize(datetime.combine(day, time.min)).astimezone(pytz.utc)


def resolve_window(
    name: str | None,
    start_date: date | None = None,
    end_date: date | None = None,
    now: datetime | None = None,
    tz_name: str | None = None,
) -> DateWindow:
    key = normalize_range_name(name)
    if key == ALL:
        return DateWindow(ALL)

    tz = pytz.timezone(tz_name or settings.TIMEZONE)

    if key == CUSTOM:
        # An open-ended custom range would silently mean "everything"
        if start_date is None or end_date is None:
            raise InvalidDateRange("Custom range needs both a start and an end date")
        if start_date > end_date:
            raise InvalidDateRange("Custom range start is after its end")
        return DateWindow(
            CUSTOM,
            start=_midnight(start_date, tz),
            end=_midnight(end_date + timedelta(days=1), tz),
        )

    now = as_utc(now or datetime.utcnow())
    today = now.astimezone(tz).date()
    tomorrow = today + timedelta(days=1)

    if key == TODAY:
        first_day, last_day = today, tomorrow
    elif key == YESTERDAY:
        first_day, last_day = today - timedelta(days=1), today
    elif key == LAST_3_DAYS:
        first_day, last_day = today - timedelta(days=3), tomorrow
    elif key == LAST_WEEK:
        first_day, last_day = today - timedelta(days=7), tomorrow
    elif key == LAST_MONTH:
        first_day, last_day = subtract_months(today, 1), tomorrow
    else:
        first_day, last_day = subtract_months(today, 12), tomorrow

    return DateWindow(key, start=_midnight(first_day, tz), end=_midnight(last_day, tz))


def filter_transactions(transactions: Iterable, window: DateWindow) -> list:
    """Keeps input order; aggregation runs on this list."""
    return [t for t in transactions if window.contains(t.date)]


def sort_newest_first(transactions: Iterable) -> list:
    return sorted(transactions, key=lambda t: as_utc(t.date), reverse=True)
