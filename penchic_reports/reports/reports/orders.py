# reports/orders.py
from pathlib import Path

import pandas as pd

from penchic_reports.core import BaseReport, register_report
from penchic_reports.core.export import build_report_text, orders_frame, report_filename
from penchic_reports.settings import settings

@register_report
class OrdersCsvReport(BaseReport):
    slug = "orders"
    title = "Order report (CSV)"
    header_labels = {
        "order_id": "Order ID",
        "status": "Status",
        "payment_method": "Payment Method",
        "items": "Items",
        "gross": "Gross",
        "discount": "Discount",
        "net": "Net",
    }

    def compute(self) -> pd.DataFrame:
        return orders_frame(self.period_orders())

    def render(self) -> str:
        """Full CSV body: header, order details, summary, breakdowns."""
        session = self.session.ensure_loaded()
        window = self.window()
        return build_report_text(
            session.period_orders(window),
            session.product_names,
            window,
            self.period_label,
            self.params.get("generated_by") or settings.report_generated_by,
            title=settings.report_title,
            currency=settings.report_currency,
            generated_at=self.now,
        )

    def default_filename(self) -> str:
        today = self.now.date()
        return report_filename(self.period, settings.report_file_prefix, today=today)

    def _write(self, path: Path) -> None:
        text = self.render()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
