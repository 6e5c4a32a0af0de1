# core/periods.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Union

from .models import PeriodWindow

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"
YEARLY = "yearly"
CUSTOM = "custom"

PERIODS = (DAILY, WEEKLY, MONTHLY, YEARLY, CUSTOM)

PERIOD_LABELS = {
    DAILY: "Today",
    WEEKLY: "This Week",
    MONTHLY: "This Month",
    YEARLY: "This Year",
    CUSTOM: "Custom Range",
}

ONE_MS = timedelta(milliseconds=1)

DateLike = Union[str, date, datetime, None]


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _as_date(value: DateLike) -> Optional[date]:
    """YYYY-MM-DD string, date or datetime -> date. Empty -> None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value), "%Y-%m-%d").date()


def period_label(period: str) -> str:
    if period not in PERIOD_LABELS:
        raise ValueError(f"Unknown period: {period}")
    return PERIOD_LABELS[period]


def resolve_window(
    period: str,
    date_from: DateLike = None,
    date_to: DateLike = None,
    now: Optional[datetime] = None,
) -> PeriodWindow:
    """
    Concrete [start, end] window for a named period.

    Open-ended periods end at `now`. A custom range needs both bounds:
    start at 00:00:00 of date_from, end at 23:59:59 of date_to. With only
    one bound the window collapses to [now, now] and matches nothing.
    """
    now = now or datetime.now()

    if period == DAILY:
        return PeriodWindow(_midnight(now), now)
    if period == WEEKLY:
        return PeriodWindow(_midnight(now) - timedelta(days=6), now)
    if period == MONTHLY:
        return PeriodWindow(_midnight(now).replace(day=1), now)
    if period == YEARLY:
        return PeriodWindow(_midnight(now).replace(month=1, day=1), now)
    if period == CUSTOM:
        start_day = _as_date(date_from)
        end_day = _as_date(date_to)
        if start_day is None or end_day is None:
            return PeriodWindow(now, now)
        return PeriodWindow(
            datetime.combine(start_day, datetime.min.time()),
            datetime.combine(end_day, datetime.min.time()).replace(hour=23, minute=59, second=59),
        )
    raise ValueError(f"Unknown period: {period}")


def previous_window(period: str, current: PeriodWindow) -> PeriodWindow:
    """
    Window to compare `current` against.

    monthly/yearly: the full preceding calendar month/year.
    Everything else: same duration, ending 1 ms before current.start.
    """
    start = current.start
    if period == MONTHLY:
        if start.month == 1:
            prev_start = start.replace(year=start.year - 1, month=12, day=1)
        else:
            prev_start = start.replace(month=start.month - 1, day=1)
        return PeriodWindow(_midnight(prev_start), start - ONE_MS)
    if period == YEARLY:
        prev_start = _midnight(start).replace(year=start.year - 1, month=1, day=1)
        return PeriodWindow(prev_start, start - ONE_MS)
    if period not in PERIODS:
        raise ValueError(f"Unknown period: {period}")

    duration = current.end - current.start
    return PeriodWindow(start - duration - ONE_MS, start - ONE_MS)
