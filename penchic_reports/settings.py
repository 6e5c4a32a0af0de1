# settings.py
from dataclasses import dataclass
from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()

# Project root (one level above penchic_reports/)
BASE_DIR = Path(__file__).resolve().parent.parent
OUT_DIR = Path(os.getenv("REPORTS_OUT_DIR", BASE_DIR / "out"))
OUT_DIR.mkdir(parents=True, exist_ok=True)

@dataclass(frozen=True)
class Settings:
    orders_json_path: Path = Path(os.getenv("ORDERS_JSON_PATH", BASE_DIR / "data/orders.json"))

    # Postgres
    pg_dsn: str = os.getenv("PG_DSN", "")
    pg_orders_table: str = os.getenv("PG_ORDERS_TABLE", "orders")
    pg_order_items_table: str = os.getenv("PG_ORDER_ITEMS_TABLE", "order_items")
    pg_products_table: str = os.getenv("PG_PRODUCTS_TABLE", "products")
    pg_profiles_table: str = os.getenv("PG_PROFILES_TABLE", "profiles")
    pg_payments_table: str = os.getenv("PG_PAYMENTS_TABLE", "payments")

    # Отчёт
    report_title: str = os.getenv("REPORT_TITLE", "PENCHIC FARM - ORDER REPORT")
    report_file_prefix: str = os.getenv("REPORT_FILE_PREFIX", "penchic-orders")
    report_currency: str = os.getenv("REPORT_CURRENCY", "KES")
    report_default_period: str = os.getenv("REPORT_DEFAULT_PERIOD", "monthly")
    report_generated_by: str = os.getenv("REPORT_GENERATED_BY", "Admin")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
