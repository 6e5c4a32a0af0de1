# core/models.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Tuple

# Статусы заказа
PENDING = "pending"
PROCESSING = "processing"
COMPLETED = "completed"
CANCELLED = "cancelled"

ORDER_STATUSES: Tuple[str, ...] = (PENDING, PROCESSING, COMPLETED, CANCELLED)
# only these get their own counter in PeriodStats
TRACKED_STATUSES: Tuple[str, ...] = (PENDING, PROCESSING, COMPLETED)


@dataclass(frozen=True)
class Payment:
    payment_method: Optional[str] = None


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    quantity: int
    price: Optional[float] = None            # recorded at time of order
    discount_amount: Optional[float] = None  # per unit
    product_name: Optional[str] = None       # denormalized products.name
    product_price: Optional[float] = None    # current products.price


@dataclass(frozen=True)
class Order:
    id: str
    status: str
    created_at: datetime
    customer_email: Optional[str] = None
    lines: Tuple[OrderLine, ...] = ()
    payments: Tuple[Payment, ...] = ()

    @property
    def payment_method(self) -> Optional[str]:
        """Only the first payment record is authoritative."""
        if not self.payments:
            return None
        return self.payments[0].payment_method

    def with_status(self, status: str) -> "Order":
        return replace(self, status=status)


@dataclass(frozen=True)
class PeriodWindow:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @property
    def duration(self):
        return self.end - self.start


@dataclass
class PeriodStats:
    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    gross_revenue: float = 0.0
    total_discount: float = 0.0
    total_revenue: float = 0.0   # net, after discounts
    average_order: float = 0.0


@dataclass(frozen=True)
class PeriodComparison:
    current: PeriodStats
    previous: PeriodStats
    orders_change: float
    revenue_change: float
    average_change: float
    current_window: Optional[PeriodWindow] = None
    previous_window: Optional[PeriodWindow] = None
