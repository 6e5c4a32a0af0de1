# core/economics.py
"""Money math for order lines. Unrounded; rounding happens at export."""
from __future__ import annotations

from typing import Iterable

from .models import Order, OrderLine


def effective_price(line: OrderLine) -> float:
    # recorded price first, then the product's current price
    if line.price is not None:
        return line.price
    if line.product_price is not None:
        return line.product_price
    return 0.0


def unit_discount(line: OrderLine) -> float:
    return line.discount_amount if line.discount_amount is not None else 0.0


def line_gross(line: OrderLine) -> float:
    return effective_price(line) * line.quantity


def line_discount(line: OrderLine) -> float:
    return unit_discount(line) * line.quantity


def line_net(line: OrderLine) -> float:
    # not clamped: a discount above the price gives a negative net
    return line_gross(line) - line_discount(line)


def lines_gross(lines: Iterable[OrderLine]) -> float:
    return sum((line_gross(l) for l in lines), 0.0)


def lines_discount(lines: Iterable[OrderLine]) -> float:
    return sum((line_discount(l) for l in lines), 0.0)


def lines_net(lines: Iterable[OrderLine]) -> float:
    return sum((line_net(l) for l in lines), 0.0)


def order_gross(order: Order) -> float:
    return lines_gross(order.lines)


def order_discount(order: Order) -> float:
    return lines_discount(order.lines)


def order_net(order: Order) -> float:
    return lines_net(order.lines)


def order_quantity(order: Order) -> int:
    return sum(l.quantity for l in order.lines)
