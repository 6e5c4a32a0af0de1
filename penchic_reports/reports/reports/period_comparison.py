# reports/period_comparison.py
import pandas as pd

from penchic_reports.core import BaseReport, register_report

METRICS = [
    # (metric, PeriodStats attribute, change attribute on PeriodComparison)
    ("Orders", "total", "orders_change"),
    ("Net revenue", "total_revenue", "revenue_change"),
    ("Average order (net)", "average_order", "average_change"),
    ("Gross revenue", "gross_revenue", None),
    ("Discounts", "total_discount", None),
    ("Pending", "pending", None),
    ("Processing", "processing", None),
    ("Completed", "completed", None),
]

@register_report
class PeriodComparisonReport(BaseReport):
    slug = "period_comparison"
    title = "Period vs prior period"
    header_labels = {
        "metric": "Metric",
        "current": "Current period",
        "previous": "Prior period",
        "change_pct": "Change (%)",
    }

    def compute(self) -> pd.DataFrame:
        cmp = self.session.ensure_loaded().comparison(
            self.period,
            self.params.get("date_from"),
            self.params.get("date_to"),
            now=self.now,
        )
        rows = []
        for metric, attr, change in METRICS:
            rows.append({
                "metric": metric,
                "current": round(float(getattr(cmp.current, attr)), 2),
                "previous": round(float(getattr(cmp.previous, attr)), 2),
                "change_pct": round(getattr(cmp, change), 2) if change else None,
            })
        return pd.DataFrame(rows, columns=["metric", "current", "previous", "change_pct"])
