"""
Shared fixtures for the reporting engine tests.

No database or network: orders come from an in-memory OrderSource and
"now" is pinned so period windows are deterministic.
"""
from datetime import datetime

import pytest

from penchic_reports.core.data_loader import OrderSource
from penchic_reports.core.models import Order, OrderLine, Payment
from penchic_reports.core.session import OrdersSession


NOW = datetime(2026, 10, 18, 14, 30, 0)


class InMemorySource(OrderSource):
    def __init__(self, orders=None, product_names=None, fail_updates=False):
        self.orders = list(orders or [])
        self.product_names = dict(product_names or {})
        self.fail_updates = fail_updates
        self.fetches = 0
        self.updates = []

    def fetch_orders(self):
        self.fetches += 1
        return list(self.orders)

    def fetch_product_names(self):
        return dict(self.product_names)

    def update_status(self, order_id, status):
        if self.fail_updates:
            raise ConnectionError("backend unavailable")
        self.updates.append((order_id, status))


def make_order(order_id, status, created_at, lines=(), email="buyer@example.com", payments=("mpesa",)):
    return Order(
        id=order_id,
        status=status,
        created_at=created_at,
        customer_email=email,
        lines=tuple(lines),
        payments=tuple(Payment(payment_method=m) for m in payments),
    )


def line(quantity, price=None, discount=None, product_id="p-1", name=None, product_price=None):
    return OrderLine(
        product_id=product_id,
        quantity=quantity,
        price=price,
        discount_amount=discount,
        product_name=name,
        product_price=product_price,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def month_orders():
    """Three orders in October 2026: gross 450, discount 20, net 430."""
    return [
        make_order("aaaaaaaa-1111", "completed", datetime(2026, 10, 2, 9, 15),
                   [line(2, price=100, discount=10, product_id="p-feed", name="Layers Mash")],
                   email="alice@farm.co.ke", payments=("mpesa",)),
        make_order("bbbbbbbb-2222", "pending", datetime(2026, 10, 5, 11, 0),
                   [line(1, price=50, product_id="p-salt", name="Salt Lick")],
                   email="bob@farm.co.ke", payments=("card",)),
        make_order("cccccccc-3333", "completed", datetime(2026, 10, 10, 16, 45),
                   [line(1, price=200, discount=0, product_id="p-feed", name="Layers Mash")],
                   email=None, payments=()),
    ]


@pytest.fixture
def prior_month_orders():
    """Two September orders, net 200 in total."""
    return [
        make_order("dddddddd-4444", "completed", datetime(2026, 9, 3, 10, 0), [line(1, price=120)]),
        make_order("eeeeeeee-5555", "processing", datetime(2026, 9, 28, 18, 0), [line(2, price=40)]),
    ]


@pytest.fixture
def source(month_orders, prior_month_orders):
    return InMemorySource(
        month_orders + prior_month_orders,
        product_names={"p-feed": "Layers Mash", "p-salt": "Salt Lick", "p-1": "Dairy Meal"},
    )


@pytest.fixture
def session(source):
    return OrdersSession(source).load()
