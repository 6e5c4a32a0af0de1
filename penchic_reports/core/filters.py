# core/filters.py
from __future__ import annotations

from typing import Iterable, List, Optional

from .models import Order

ALL_STATUSES = "all"


def matches_status(order: Order, status: Optional[str]) -> bool:
    return not status or status == ALL_STATUSES or order.status == status


def matches_search(order: Order, term: Optional[str]) -> bool:
    if not term:
        return True
    needle = term.lower()
    return needle in order.id.lower() or needle in (order.customer_email or "").lower()


def filter_orders(
    orders: Iterable[Order],
    status: Optional[str] = ALL_STATUSES,
    search: Optional[str] = "",
) -> List[Order]:
    """
    Narrow a window's orders for listing. Does not feed the statistics,
    which always cover the whole window.
    """
    return [o for o in orders if matches_status(o, status) and matches_search(o, search)]
