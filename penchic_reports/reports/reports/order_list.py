# reports/order_list.py
import pandas as pd

from penchic_reports.core import BaseReport, register_report
from penchic_reports.core.economics import order_discount, order_gross, order_net
from penchic_reports.core.export import NOT_AVAILABLE, payment_label

@register_report
class OrderListReport(BaseReport):
    slug = "order_list"
    title = "Orders (filtered list)"
    header_labels = {
        "order_id": "Order ID",
        "created_at": "Created",
        "customer_email": "Customer Email",
        "status": "Status",
        "payment_method": "Payment Method",
        "gross": "Gross",
        "discount": "Discount",
        "net": "Net",
    }

    def compute(self) -> pd.DataFrame:
        # Parameters are serialized by BaseReport._serialize_params():
        #   status: "all" or one order status
        #   search: substring of order id or customer e-mail, case-insensitive
        session = self.session.ensure_loaded()
        orders = session.visible_orders(
            self.window(),
            status=self.params.get("status") or "all",
            search=self.params.get("search") or "",
        )
        rows = [{
            "order_id": o.id[:8].upper(),
            "created_at": o.created_at,
            "customer_email": o.customer_email or NOT_AVAILABLE,
            "status": o.status,
            "payment_method": payment_label(o, missing=NOT_AVAILABLE),
            "gross": round(order_gross(o), 2),
            "discount": round(order_discount(o), 2),
            "net": round(order_net(o), 2),
        } for o in orders]
        return pd.DataFrame(rows, columns=list(self.header_labels))
