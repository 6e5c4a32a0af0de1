# data_loader.py
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
from sqlalchemy import create_engine, text

from penchic_reports.settings import settings

from .models import Order, OrderLine, Payment

logger = logging.getLogger(__name__)


class OrderSource:
    """
    Data access used by the reporting engine.
    Implementations fetch a full snapshot; the engine never writes except
    through update_status().
    """

    def fetch_orders(self) -> List[Order]:
        raise NotImplementedError

    def fetch_product_names(self) -> Dict[str, str]:
        raise NotImplementedError

    def update_status(self, order_id: str, status: str) -> None:
        raise NotImplementedError


def default_source() -> OrderSource:
    """Postgres when PG_DSN is configured, otherwise the JSON snapshot."""
    if settings.pg_dsn:
        return PostgresOrderSource(settings.pg_dsn)
    return JsonOrderSource(settings.orders_json_path)


# ---------------- PARSING ----------------
def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_local_datetime(value: Any) -> datetime:
    """ISO string / datetime -> naive local datetime."""
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        return ts.to_pydatetime().astimezone().replace(tzinfo=None)
    return ts.to_pydatetime()


def _parse_line(raw: Dict[str, Any]) -> OrderLine:
    product = raw.get("products") or {}
    return OrderLine(
        product_id=str(raw.get("product_id") or ""),
        quantity=int(raw.get("quantity") or 0),
        price=_to_float(raw.get("price")),
        discount_amount=_to_float(raw.get("discount_amount")),
        product_name=product.get("name"),
        product_price=_to_float(product.get("price")),
    )


def parse_order(raw: Dict[str, Any]) -> Order:
    profile = raw.get("profiles") or {}
    return Order(
        id=str(raw["id"]),
        status=str(raw["status"]),
        created_at=_to_local_datetime(raw["created_at"]),
        customer_email=profile.get("email"),
        lines=tuple(_parse_line(i) for i in raw.get("order_items") or []),
        payments=tuple(Payment(payment_method=p.get("payment_method")) for p in raw.get("payments") or []),
    )


def parse_orders(records: Iterable[Dict[str, Any]]) -> List[Order]:
    """
    Nested order records (the shape of the hosted backend's
    `*, profiles(email), order_items(*, products(name, price)), payments(*)`
    select) -> Order objects.
    """
    orders = []
    for i, record in enumerate(records):
        missing = [f for f in ("id", "status", "created_at") if record.get(f) in (None, "")]
        if missing:
            raise ValueError(f"Record {i} missing required fields: {missing}")
        for key in ("order_items", "payments"):
            if record.get(key) is not None and not isinstance(record[key], list):
                raise ValueError(f"Record {i} '{key}' field must be list, got {type(record[key])}")
        try:
            orders.append(parse_order(record))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Record {i} is malformed: {e}") from e
    return orders


# ---------------- JSON ----------------
class JsonOrderSource(OrderSource):
    """
    Snapshot file: either a list of orders or
    {"orders": [...], "products": [{"id": ..., "name": ...}]}.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            raise FileNotFoundError(f"Orders snapshot not found: {self.path}")
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if isinstance(data, list):
            return {"orders": data, "products": []}
        return {"orders": data.get("orders") or [], "products": data.get("products") or []}

    def fetch_orders(self) -> List[Order]:
        orders = parse_orders(self._read()["orders"])
        logger.info("Loaded %d orders from %s", len(orders), self.path)
        return orders

    def fetch_product_names(self) -> Dict[str, str]:
        return {str(p["id"]): p["name"] for p in self._read()["products"] if p.get("id") is not None}

    def update_status(self, order_id: str, status: str) -> None:
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        records = raw if isinstance(raw, list) else raw.get("orders") or []
        for record in records:
            if str(record.get("id")) == order_id:
                record["status"] = status
                break
        else:
            raise KeyError(f"Order not found: {order_id}")
        self.path.write_text(json.dumps(raw, ensure_ascii=False, indent=2), encoding="utf-8")


# ---------------- POSTGRES ----------------
class PostgresOrderSource(OrderSource):
    """
    Читает заказы из Postgres.
    Требуются пакеты:
        pip install sqlalchemy psycopg2-binary
    Требуемые таблицы:
        orders (id, status, created_at, user_id)
        profiles (id, email)
        order_items (id, order_id, product_id, quantity, price, discount_amount)
        products (id, name, price)
        payments (order_id, payment_method, created_at)
    """

    def __init__(self, pg_dsn: str, engine=None):
        if not pg_dsn and engine is None:
            raise ValueError("PG_DSN is empty in settings")
        self.engine = engine if engine is not None else create_engine(pg_dsn)

    def _read(self, query: str) -> pd.DataFrame:
        with self.engine.connect() as conn:
            return pd.read_sql_query(text(query), conn)

    def fetch_orders(self) -> List[Order]:
        s = settings
        orders_df = self._read(f"""
            SELECT o.id, o.status, o.created_at, p.email
            FROM {s.pg_orders_table} o
            LEFT JOIN {s.pg_profiles_table} p ON p.id = o.user_id
            ORDER BY o.created_at DESC
        """)
        items_df = self._read(f"""
            SELECT i.order_id, i.product_id, i.quantity, i.price, i.discount_amount,
                   pr.name AS product_name, pr.price AS product_price
            FROM {s.pg_order_items_table} i
            LEFT JOIN {s.pg_products_table} pr ON pr.id = i.product_id
            ORDER BY i.order_id, i.id
        """)
        payments_df = self._read(f"""
            SELECT order_id, payment_method
            FROM {s.pg_payments_table}
            ORDER BY order_id, created_at
        """)

        # NaN -> None so optional fields stay optional
        items_df = items_df.astype(object).where(items_df.notna(), None)
        payments_df = payments_df.astype(object).where(payments_df.notna(), None)

        items_by_order: Dict[str, list] = {}
        for row in items_df.to_dict("records"):
            items_by_order.setdefault(str(row["order_id"]), []).append({
                "product_id": row["product_id"],
                "quantity": row["quantity"],
                "price": row["price"],
                "discount_amount": row["discount_amount"],
                "products": {"name": row["product_name"], "price": row["product_price"]}
                            if row["product_name"] is not None or row["product_price"] is not None else None,
            })
        payments_by_order: Dict[str, list] = {}
        for row in payments_df.to_dict("records"):
            payments_by_order.setdefault(str(row["order_id"]), []).append(
                {"payment_method": row["payment_method"]})

        records = []
        for row in orders_df.to_dict("records"):
            oid = str(row["id"])
            email = row["email"] if pd.notna(row["email"]) else None
            records.append({
                "id": oid,
                "status": row["status"],
                "created_at": row["created_at"],
                "profiles": {"email": email} if email else None,
                "order_items": items_by_order.get(oid, []),
                "payments": payments_by_order.get(oid, []),
            })

        orders = parse_orders(records)
        logger.info("Loaded %d orders from Postgres", len(orders))
        return orders

    def fetch_product_names(self) -> Dict[str, str]:
        df = self._read(f"SELECT id, name FROM {settings.pg_products_table}")
        return {str(r["id"]): r["name"] for r in df.to_dict("records")}

    def update_status(self, order_id: str, status: str) -> None:
        with self.engine.begin() as conn:
            result = conn.execute(
                text(f"UPDATE {settings.pg_orders_table} SET status = :status WHERE id = :id"),
                {"status": status, "id": order_id},
            )
            if result.rowcount == 0:
                raise KeyError(f"Order not found: {order_id}")
