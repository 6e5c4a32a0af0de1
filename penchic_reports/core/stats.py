# core/stats.py
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .economics import line_discount, line_gross, line_net
from .models import TRACKED_STATUSES, Order, PeriodComparison, PeriodStats, PeriodWindow


def orders_in_window(orders: Iterable[Order], window: PeriodWindow) -> List[Order]:
    """Orders whose created_at falls inside the window (both ends inclusive)."""
    return [o for o in orders if window.contains(o.created_at)]


def calc_stats(orders: Iterable[Order]) -> PeriodStats:
    """
    Fold a list of orders into PeriodStats in one pass.

    Statuses outside pending/processing/completed (e.g. cancelled) count
    toward `total` only. Revenue figures include every order regardless of
    status.
    """
    stats = PeriodStats()
    for order in orders:
        stats.total += 1
        if order.status in TRACKED_STATUSES:
            setattr(stats, order.status, getattr(stats, order.status) + 1)
        for line in order.lines:
            stats.gross_revenue += line_gross(line)
            stats.total_discount += line_discount(line)
            stats.total_revenue += line_net(line)

    stats.average_order = stats.total_revenue / stats.total if stats.total > 0 else 0.0
    return stats


def pct_change(current: float, previous: float) -> float:
    """Growth from zero is a flat 100%, zero to zero is 0%."""
    if previous > 0:
        return (current - previous) / previous * 100
    return 100.0 if current > 0 else 0.0


def compare_stats(
    current: PeriodStats,
    previous: PeriodStats,
    current_window: Optional[PeriodWindow] = None,
    previous_window: Optional[PeriodWindow] = None,
) -> PeriodComparison:
    return PeriodComparison(
        current=current,
        previous=previous,
        orders_change=pct_change(current.total, previous.total),
        revenue_change=pct_change(current.total_revenue, previous.total_revenue),
        average_change=pct_change(current.average_order, previous.average_order),
        current_window=current_window,
        previous_window=previous_window,
    )


def compare_periods(
    orders: Sequence[Order],
    current_window: PeriodWindow,
    previous_window: PeriodWindow,
) -> PeriodComparison:
    return compare_stats(
        calc_stats(orders_in_window(orders, current_window)),
        calc_stats(orders_in_window(orders, previous_window)),
        current_window=current_window,
        previous_window=previous_window,
    )
