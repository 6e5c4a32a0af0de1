#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from penchic_reports.settings import OUT_DIR, settings
from penchic_reports.core import ReportExportError, ReportRegistry
from penchic_reports.core.periods import PERIODS
import penchic_reports.reports  # noqa: регистрирует отчёты

logger = logging.getLogger("runner")


def run_report(slug: str, params: dict | None = None, out_dir: Path = OUT_DIR, **kwargs) -> Path:
    cls = ReportRegistry.get(slug)
    report = cls(params=params or {}, **kwargs)
    target_dir = out_dir / report.slug
    target_dir.mkdir(parents=True, exist_ok=True)
    return report.write(target_dir / report.default_filename())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate order reports")
    parser.add_argument("slug", nargs="?", default="orders", help="Report slug (default: orders)")
    parser.add_argument("--list", action="store_true", help="List available reports and exit")
    parser.add_argument("-p", "--period", choices=PERIODS, default=settings.report_default_period,
                        help=f"Report period (default: {settings.report_default_period})")
    parser.add_argument("--date-from", default=None, help="Custom range start, YYYY-MM-DD")
    parser.add_argument("--date-to", default=None, help="Custom range end, YYYY-MM-DD")
    parser.add_argument("--status", default=None, help="Status filter for order_list (default: all)")
    parser.add_argument("--search", default=None, help="Order id / e-mail search for order_list")
    parser.add_argument("--user", default=None, help="Generated-by identity for the report header")
    parser.add_argument("--out-dir", type=Path, default=OUT_DIR, help=f"Output directory (default: {OUT_DIR})")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.list:
        for slug, cls in ReportRegistry.all().items():
            print(f"{slug:<20} {cls.title}")
        return 0

    params = {
        "period": args.period,
        "date_from": args.date_from,
        "date_to": args.date_to,
        "status": args.status,
        "search": args.search,
        "generated_by": args.user,
    }
    try:
        path = run_report(args.slug, params=params, out_dir=args.out_dir)
    except KeyError:
        logger.error("Unknown report: %s", args.slug)
        return 2
    except ValueError as e:
        logger.error("Invalid parameters: %s", e)
        return 2
    except ReportExportError as e:
        logger.error("%s: %s", e, e.__cause__)
        print("Export failed. Please try again.", file=sys.stderr)
        return 1

    print(path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
