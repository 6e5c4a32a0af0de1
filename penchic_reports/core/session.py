# core/session.py
from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple

from .data_loader import OrderSource
from .filters import ALL_STATUSES, filter_orders
from .models import ORDER_STATUSES, Order, PeriodComparison, PeriodStats, PeriodWindow
from .periods import DateLike, previous_window, resolve_window
from .stats import calc_stats, compare_stats, orders_in_window

logger = logging.getLogger(__name__)

APPLIED = "applied"
ROLLED_BACK = "rolled_back"
IN_FLIGHT = "in_flight"
NOT_FOUND = "not_found"

# rolling windows end at "now", so each call is a new key
STATS_CACHE_SIZE = 8


@dataclass(frozen=True)
class StatusUpdateResult:
    outcome: str
    order_id: str
    previous_status: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == APPLIED


class OrdersSession:
    """
    In-memory snapshot of orders for one report view.

    Derived values are plain recomputations over the snapshot, cached by
    (version, window), most recent STATS_CACHE_SIZE windows only. Any local
    change bumps `version`.
    """

    def __init__(self, source: OrderSource):
        self.source = source
        self.orders: List[Order] = []
        self.product_names: Dict[str, str] = {}
        self.version = 0
        self._stats_cache: OrderedDict[Tuple[int, PeriodWindow], PeriodStats] = OrderedDict()
        self._in_flight: Set[str] = set()
        self._loaded = False

    def load(self) -> "OrdersSession":
        self.orders = list(self.source.fetch_orders())
        self.product_names = dict(self.source.fetch_product_names())
        self._loaded = True
        self._bump()
        logger.info("Session loaded: %d orders, %d products", len(self.orders), len(self.product_names))
        return self

    def ensure_loaded(self) -> "OrdersSession":
        if not self._loaded:
            self.load()
        return self

    def _bump(self) -> None:
        self.version += 1
        self._stats_cache.clear()

    # ---- derived ----
    @staticmethod
    def window(period: str, date_from: DateLike = None, date_to: DateLike = None,
               now: Optional[datetime] = None) -> PeriodWindow:
        return resolve_window(period, date_from, date_to, now=now)

    def period_orders(self, window: PeriodWindow) -> List[Order]:
        return orders_in_window(self.orders, window)

    def stats(self, window: PeriodWindow) -> PeriodStats:
        key = (self.version, window)
        if key in self._stats_cache:
            self._stats_cache.move_to_end(key)
            return self._stats_cache[key]
        stats = self._stats_cache[key] = calc_stats(self.period_orders(window))
        while len(self._stats_cache) > STATS_CACHE_SIZE:
            self._stats_cache.popitem(last=False)
        return stats

    def comparison(self, period: str, date_from: DateLike = None, date_to: DateLike = None,
                   now: Optional[datetime] = None) -> PeriodComparison:
        current = self.window(period, date_from, date_to, now=now)
        previous = previous_window(period, current)
        return compare_stats(self.stats(current), self.stats(previous),
                             current_window=current, previous_window=previous)

    def visible_orders(self, window: PeriodWindow, status: Optional[str] = ALL_STATUSES,
                       search: Optional[str] = "") -> List[Order]:
        return filter_orders(self.period_orders(window), status=status, search=search)

    # ---- write-back ----
    def _replace(self, order_id: str, status: str) -> None:
        self.orders = [o.with_status(status) if o.id == order_id else o for o in self.orders]
        self._bump()

    def update_status(self, order_id: str, new_status: str) -> StatusUpdateResult:
        """
        Optimistic status change: apply locally, write through the source,
        restore the previous status if the write fails. One write per order
        at a time; other orders are unaffected.
        Unknown statuses raise ValueError before anything is applied.
        """
        if new_status not in ORDER_STATUSES:
            raise ValueError(f"Unknown status: {new_status}")

        if order_id in self._in_flight:
            return StatusUpdateResult(IN_FLIGHT, order_id)

        current = next((o for o in self.orders if o.id == order_id), None)
        if current is None:
            return StatusUpdateResult(NOT_FOUND, order_id)

        previous_status = current.status
        self._in_flight.add(order_id)
        try:
            self._replace(order_id, new_status)
            try:
                self.source.update_status(order_id, new_status)
            except Exception as e:
                logger.error("Error updating order %s: %s", order_id, e)
                self._replace(order_id, previous_status)
                return StatusUpdateResult(ROLLED_BACK, order_id, previous_status, previous_status, str(e))
        finally:
            self._in_flight.discard(order_id)

        logger.info("Order %s: %s -> %s", order_id, previous_status, new_status)
        return StatusUpdateResult(APPLIED, order_id, previous_status, new_status)

    def is_updating(self, order_id: str) -> bool:
        return order_id in self._in_flight
