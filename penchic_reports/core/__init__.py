from .core import (
    BaseReport,
    ReportExportError,
    ReportRegistry,
    register_report,
)
from .data_loader import (
    JsonOrderSource,
    OrderSource,
    PostgresOrderSource,
    default_source,
    parse_orders,
)
from .models import Order, OrderLine, Payment, PeriodStats, PeriodWindow
from .periods import PERIOD_LABELS, PERIODS, previous_window, resolve_window
from .session import OrdersSession, StatusUpdateResult
from .stats import calc_stats, compare_periods, pct_change

__all__ = [
    "BaseReport",
    "ReportExportError",
    "ReportRegistry",
    "register_report",
    "JsonOrderSource",
    "OrderSource",
    "PostgresOrderSource",
    "default_source",
    "parse_orders",
    "Order",
    "OrderLine",
    "Payment",
    "PeriodStats",
    "PeriodWindow",
    "PERIOD_LABELS",
    "PERIODS",
    "previous_window",
    "resolve_window",
    "OrdersSession",
    "StatusUpdateResult",
    "calc_stats",
    "compare_periods",
    "pct_change",
]
