# reports/breakdowns.py
import pandas as pd

from penchic_reports.core import BaseReport, register_report
from penchic_reports.core.export import payment_breakdown, product_breakdown, status_breakdown

MONEY = ("net_revenue", "gross_revenue", "discount", "discount_rate")


def _rounded(df: pd.DataFrame) -> pd.DataFrame:
    for c in MONEY:
        if c in df:
            df[c] = df[c].astype(float).round(2)
    return df

@register_report
class StatusBreakdownReport(BaseReport):
    slug = "status_breakdown"
    title = "Orders by status"
    header_labels = {
        "status": "Status",
        "order_count": "Order Count",
        "net_revenue": "Net Revenue",
    }

    def compute(self) -> pd.DataFrame:
        return _rounded(status_breakdown(self.period_orders()))

@register_report
class ProductBreakdownReport(BaseReport):
    slug = "product_breakdown"
    title = "Sales by product"
    header_labels = {
        "product": "Product Name",
        "units_sold": "Units Sold",
        "gross_revenue": "Gross Revenue",
        "discount": "Discounts Applied",
        "net_revenue": "Net Revenue",
        "discount_rate": "Discount Rate (%)",
        "orders_count": "Number of Orders",
    }

    def compute(self) -> pd.DataFrame:
        orders = self.period_orders()
        return _rounded(product_breakdown(orders, self.session.product_names))

@register_report
class PaymentBreakdownReport(BaseReport):
    slug = "payment_breakdown"
    title = "Orders by payment method"
    header_labels = {
        "payment_method": "Payment Method",
        "order_count": "Order Count",
        "gross_revenue": "Gross Revenue",
        "net_revenue": "Net Revenue",
    }

    def compute(self) -> pd.DataFrame:
        return _rounded(payment_breakdown(self.period_orders()))
