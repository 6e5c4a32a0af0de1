from __future__ import annotations

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Type

import pandas as pd

from penchic_reports.settings import settings

from .data_loader import default_source
from .filters import ALL_STATUSES
from .models import ORDER_STATUSES, Order, PeriodWindow
from .periods import PERIODS, PERIOD_LABELS, resolve_window
from .session import OrdersSession

logger = logging.getLogger(__name__)


class ReportExportError(RuntimeError):
    """Report could not be assembled or saved. Nothing was written."""


# ===== Реестр отчётов =====
class ReportRegistry:
    _reports: Dict[str, Type["BaseReport"]] = {}

    @classmethod
    def register(cls, report_cls: Type["BaseReport"]) -> None:
        slug = report_cls.slug
        if not slug:
            raise ValueError("Report must define non-empty slug")
        if slug in cls._reports:
            raise ValueError(f"Report slug '{slug}' already registered")
        cls._reports[slug] = report_cls

    @classmethod
    def get(cls, slug: str) -> Type["BaseReport"]:
        return cls._reports[slug]

    @classmethod
    def all(cls) -> Dict[str, Type["BaseReport"]]:
        return dict(cls._reports)

def register_report(report_cls: Type["BaseReport"]) -> Type["BaseReport"]:
    ReportRegistry.register(report_cls)
    return report_cls


# ===== База отчёта =====
class BaseReport:
    slug: str = ""         # уникальный идентификатор файла/запуска
    title: str = ""        # человекочитаемое название
    header_labels: dict[str, str] = {}  # отображаемые имена колонок (ключи — имена колонок df)

    def __init__(
        self,
        params: Optional[Dict[str, Any]] = None,
        session: Optional[OrdersSession] = None,
        now: Optional[datetime] = None,
    ):
        self.params = self._serialize_params(params or {})
        self.session = session if session is not None else OrdersSession(default_source())
        # one clock reading per run: window, filename and stamp agree
        self.now = now or datetime.now()

    def _serialize_params(self, raw_params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Serialize and normalize parameters to ensure consistent types.
        This method can be overridden by specific reports for custom parameter handling.
        """
        serialized = {}

        for key, value in raw_params.items():
            if value is None:
                serialized[key] = None
            elif key == "period":
                serialized[key] = self._serialize_period(value)
            elif key in ["date_from", "date_to"]:
                serialized[key] = self._serialize_date(value)
            elif key == "status":
                serialized[key] = self._serialize_status(value)
            elif key in ["search", "generated_by"]:
                serialized[key] = self._serialize_string(value)
            else:
                raise ValueError(f"Unknown parameter: {key}")

        return serialized

    def _serialize_period(self, value: Any) -> str:
        period = str(value).strip().lower()
        if period not in PERIODS:
            raise ValueError(f"Unknown period: {value}")
        return period

    def _serialize_date(self, value: Any) -> Optional[str]:
        """Convert various date formats to YYYY-MM-DD string. Unparseable -> None."""
        if isinstance(value, str):
            try:
                datetime.strptime(value, "%Y-%m-%d")
                return value
            except ValueError:
                return None

        if isinstance(value, (datetime, date)):
            return value.strftime("%Y-%m-%d")

        return None

    def _serialize_status(self, value: Any) -> str:
        status = str(value).strip().lower()
        if status != ALL_STATUSES and status not in ORDER_STATUSES:
            raise ValueError(f"Unknown status: {value}")
        return status

    def _serialize_string(self, value: Any) -> str:
        return str(value)

    # ---- period helpers ----
    @property
    def period(self) -> str:
        return self.params.get("period") or settings.report_default_period

    @property
    def period_label(self) -> str:
        return PERIOD_LABELS[self.period]

    def window(self) -> PeriodWindow:
        return resolve_window(
            self.period,
            self.params.get("date_from"),
            self.params.get("date_to"),
            now=self.now,
        )

    def period_orders(self) -> List[Order]:
        return self.session.ensure_loaded().period_orders(self.window())

    def compute(self) -> pd.DataFrame:
        """Вернуть DataFrame — переопределяется в отчёте."""
        raise NotImplementedError

    def default_filename(self) -> str:
        ts = self.now.strftime("%Y%m%d_%H%M")
        return f"{self.slug}_{ts}.xlsx"

    def write(self, out_path: Path) -> Path:
        """Compute and save. The target only appears once fully written."""
        tmp_path = out_path.with_name(f".part-{out_path.name}")
        try:
            self._write(tmp_path)
            tmp_path.replace(out_path)
        except Exception as e:
            tmp_path.unlink(missing_ok=True)
            logger.error("Export error for %s: %s", self.slug, e)
            raise ReportExportError(f"Failed to export report '{self.slug}'") from e
        logger.info("Report %s written to %s", self.slug, out_path)
        return out_path

    def _write(self, path: Path) -> None:
        self.export_excel(self.compute(), path, title=self.title)

    # По умолчанию: экспорт в Excel
    def export_excel(self, df: pd.DataFrame, out_path: Path, title: Optional[str] = None) -> Path:
        out_path.parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(out_path, engine="xlsxwriter", datetime_format="yyyy-mm-dd hh:mm") as xw:
            df.to_excel(xw, index=False, sheet_name="Report")
            ws = xw.sheets["Report"]
            wb = xw.book

            header_fmt = wb.add_format({"bold": True, "bg_color": "#EFEFEF", "border": 1})
            money_fmt = wb.add_format({"num_format": "#,##0.00"})
            int_fmt = wb.add_format({"num_format": "0"})

            for col_idx, col_name in enumerate(df.columns):
                display = self.header_labels.get(col_name, col_name)
                ws.write(0, col_idx, display, header_fmt)

                col_series = df[col_name]
                if pd.api.types.is_integer_dtype(col_series):
                    ws.set_column(col_idx, col_idx, max(10, len(display) + 2), int_fmt)
                elif pd.api.types.is_float_dtype(col_series):
                    ws.set_column(col_idx, col_idx, max(14, len(display) + 2), money_fmt)
                else:
                    ws.set_column(col_idx, col_idx, max(12, len(str(display)) + 2))

            ws.freeze_panes(1, 0)
            if title:
                ws.write(0, len(df.columns) + 1, title)
        return out_path
