# core/export.py
"""
CSV order report.

The document is assembled fully in memory (header, order details, summary,
status / product / payment breakdowns) and only then handed back as text,
so a failure never leaves half a report behind.
"""
from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .economics import (
    effective_price,
    line_discount,
    line_gross,
    line_net,
    order_discount,
    order_gross,
    order_net,
    order_quantity,
    unit_discount,
)
from .models import Order, OrderLine, PeriodWindow
from .stats import calc_stats

DATE_FMT = "%d/%m/%Y"
TIME_FMT = "%H:%M"
GENERATED_FMT = "%d/%m/%Y %H:%M:%S"

NOT_AVAILABLE = "N/A"
UNKNOWN_METHOD = "UNKNOWN"
LIST_SEP = "; "

ORDER_COLUMNS = ["order_id", "status", "payment_method", "items", "gross", "discount", "net"]
LINE_COLUMNS = ["order_id", "product", "quantity", "gross", "discount", "net"]


def fmt_money(value: float) -> str:
    # +0.0 folds -0.0 into 0.00
    return f"{value + 0.0:.2f}"


def fmt_rate(part: float, whole: float) -> str:
    return f"{part / whole * 100:.2f}" if whole > 0 else "0.00"


def fmt_avg(total: float, count: int) -> str:
    return f"{total / count:.2f}" if count > 0 else "0.00"


def product_label(line: OrderLine, product_names: Mapping[str, str]) -> str:
    if line.product_name:
        return line.product_name
    return product_names.get(line.product_id) or line.product_id


def payment_label(order: Order, missing: str = UNKNOWN_METHOD) -> str:
    return (order.payment_method or missing).upper()


def report_filename(period: str, prefix: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{prefix}-{period}-{today.isoformat()}.csv"


# ---------------- FRAMES ----------------
def orders_frame(orders: Sequence[Order]) -> pd.DataFrame:
    """One row per order with its money totals, in input order."""
    rows = [{
        "order_id": o.id,
        "status": o.status.upper(),
        "payment_method": payment_label(o),
        "items": order_quantity(o),
        "gross": order_gross(o),
        "discount": order_discount(o),
        "net": order_net(o),
    } for o in orders]
    return pd.DataFrame(rows, columns=ORDER_COLUMNS)


def lines_frame(orders: Sequence[Order], product_names: Mapping[str, str]) -> pd.DataFrame:
    rows = [{
        "order_id": o.id,
        "product": product_label(line, product_names),
        "quantity": line.quantity,
        "gross": line_gross(line),
        "discount": line_discount(line),
        "net": line_net(line),
    } for o in orders for line in o.lines]
    return pd.DataFrame(rows, columns=LINE_COLUMNS)


def status_breakdown(orders: Sequence[Order]) -> pd.DataFrame:
    """Order count and net revenue per (uppercased) status, first-seen order."""
    df = orders_frame(orders)
    if df.empty:
        return pd.DataFrame(columns=["status", "order_count", "net_revenue"])
    return (df.groupby("status", sort=False)
              .agg(order_count=("order_id", "count"),
                   net_revenue=("net", "sum"))
              .reset_index())


def product_breakdown(orders: Sequence[Order], product_names: Mapping[str, str]) -> pd.DataFrame:
    """Units, gross, discount, net per product name; highest net revenue first."""
    columns = ["product", "units_sold", "gross_revenue", "discount", "net_revenue",
               "discount_rate", "orders_count"]
    df = lines_frame(orders, product_names)
    if df.empty:
        return pd.DataFrame(columns=columns)

    out = (df.groupby("product", sort=False)
             .agg(units_sold=("quantity", "sum"),
                  gross_revenue=("gross", "sum"),
                  discount=("discount", "sum"),
                  net_revenue=("net", "sum"),
                  orders_count=("order_id", "nunique"))
             .reset_index())
    gross = out["gross_revenue"]
    out["discount_rate"] = (out["discount"] / gross.where(gross > 0) * 100).fillna(0.0)
    # mergesort is stable: equal net keeps first-seen order
    out = out.sort_values("net_revenue", ascending=False, kind="mergesort").reset_index(drop=True)
    return out[columns]


def payment_breakdown(orders: Sequence[Order]) -> pd.DataFrame:
    """Order count, gross and net per uppercased payment method, first-seen order."""
    df = orders_frame(orders)
    if df.empty:
        return pd.DataFrame(columns=["payment_method", "order_count", "gross_revenue", "net_revenue"])
    return (df.groupby("payment_method", sort=False)
              .agg(order_count=("order_id", "count"),
                   gross_revenue=("gross", "sum"),
                   net_revenue=("net", "sum"))
              .reset_index())


# ---------------- ROWS ----------------
def _detail_row(order: Order, product_names: Mapping[str, str]) -> List[str]:
    lines = order.lines
    return [
        order.id[:8],
        order.created_at.strftime(DATE_FMT),
        order.created_at.strftime(TIME_FMT),
        order.customer_email or NOT_AVAILABLE,
        LIST_SEP.join(product_label(l, product_names) for l in lines),
        LIST_SEP.join(str(l.quantity) for l in lines),
        LIST_SEP.join(fmt_money(effective_price(l)) for l in lines),
        LIST_SEP.join(fmt_money(unit_discount(l)) for l in lines),
        LIST_SEP.join(fmt_money(line_net(l)) for l in lines),
        fmt_money(order_gross(order)),
        fmt_money(order_discount(order)),
        fmt_money(order_net(order)),
        payment_label(order, missing=NOT_AVAILABLE),
        order.status.upper(),
    ]


def build_report_rows(
    orders: Sequence[Order],
    product_names: Mapping[str, str],
    window: PeriodWindow,
    label: str,
    generated_by: str,
    title: str = "ORDER REPORT",
    currency: str = "KES",
    generated_at: Optional[datetime] = None,
) -> List[List[str]]:
    generated_at = generated_at or datetime.now()
    cur = currency

    stats = calc_stats(orders)
    items = sum(order_quantity(o) for o in orders)
    count = stats.total

    rows: List[List[str]] = [
        [title],
        ["Period Label", label],
        ["Date Range", f"{window.start.strftime(DATE_FMT)} to {window.end.strftime(DATE_FMT)}"],
        ["Generated", generated_at.strftime(GENERATED_FMT)],
        ["Generated By", generated_by],
        [],
        ["=== ORDER DETAILS ==="],
        ["Order ID", "Date", "Time", "Customer Email", "Products", "Qty per Product",
         f"Unit Prices ({cur})", f"Discounts per Unit ({cur})", f"Line Totals Net ({cur})",
         f"Order Gross ({cur})", f"Order Discount ({cur})", f"Order Net ({cur})",
         "Payment Method", "Status"],
    ]
    rows.extend(_detail_row(o, product_names) for o in orders)

    rows += [
        [],
        ["=== SUMMARY STATISTICS ==="],
        ["Total Orders", str(count)],
        ["Total Items Sold", str(items)],
        ["Gross Revenue (Before Discounts)", fmt_money(stats.gross_revenue)],
        ["Total Discounts Applied", fmt_money(stats.total_discount)],
        ["Net Revenue (After Discounts)", fmt_money(stats.total_revenue)],
        ["Discount Rate (%)", fmt_rate(stats.total_discount, stats.gross_revenue)],
        ["Average Order Value (Net)", fmt_money(stats.average_order)],
        ["Average Items per Order", fmt_avg(items, count)],
        ["Average Discount per Order", fmt_avg(stats.total_discount, count)],
        [],
        ["=== STATUS BREAKDOWN ==="],
        ["Status", "Order Count", f"Net Revenue ({cur})"],
    ]
    for r in status_breakdown(orders).itertuples(index=False):
        rows.append([r.status, str(int(r.order_count)), fmt_money(r.net_revenue)])

    rows += [
        [],
        ["=== PRODUCT BREAKDOWN ==="],
        ["Product Name", "Units Sold", f"Gross Revenue ({cur})", f"Discounts Applied ({cur})",
         f"Net Revenue ({cur})", "Discount Rate (%)", "Number of Orders"],
    ]
    for r in product_breakdown(orders, product_names).itertuples(index=False):
        rows.append([
            r.product,
            str(int(r.units_sold)),
            fmt_money(r.gross_revenue),
            fmt_money(r.discount),
            fmt_money(r.net_revenue),
            f"{r.discount_rate:.2f}",
            str(int(r.orders_count)),
        ])

    rows += [
        [],
        ["=== PAYMENT METHOD BREAKDOWN ==="],
        ["Payment Method", "Order Count", f"Gross Revenue ({cur})", f"Net Revenue ({cur})"],
    ]
    for r in payment_breakdown(orders).itertuples(index=False):
        rows.append([r.payment_method, str(int(r.order_count)),
                     fmt_money(r.gross_revenue), fmt_money(r.net_revenue)])

    return rows


def rows_to_csv(rows: Sequence[Sequence[str]]) -> str:
    """Comma-separated, newline-terminated; fields with , " or newlines are quoted."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerows(rows)
    return buf.getvalue()


def build_report_text(
    orders: Sequence[Order],
    product_names: Mapping[str, str],
    window: PeriodWindow,
    label: str,
    generated_by: str,
    **options,
) -> str:
    return rows_to_csv(build_report_rows(orders, product_names, window, label, generated_by, **options))


def section_sizes(orders: Sequence[Order], product_names: Mapping[str, str]) -> Dict[str, int]:
    """Number of data rows each breakdown section will carry."""
    return {
        "details": len(orders),
        "statuses": len(status_breakdown(orders)),
        "products": len(product_breakdown(orders, product_names)),
        "payments": len(payment_breakdown(orders)),
    }
