"""
Data access tests

Record parsing, the JSON snapshot source and the Postgres source (run
against an in-memory SQLite engine, same SQL).
"""
import json
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine, text

from penchic_reports.core.data_loader import (
    JsonOrderSource,
    PostgresOrderSource,
    parse_orders,
)


RECORD = {
    "id": "9f1c2d3e-aaaa-bbbb-cccc-000000000001",
    "status": "processing",
    "created_at": "2026-10-05T08:30:00",
    "profiles": {"email": "wanjiku@example.com"},
    "order_items": [
        {"quantity": 2, "price": 100, "discount_amount": 10, "product_id": "p-feed",
         "products": {"name": "Layers Mash", "price": 110}},
        {"quantity": 1, "price": None, "product_id": "p-salt", "products": {"name": "Salt Lick", "price": 75}},
    ],
    "payments": [{"payment_method": "mpesa"}, {"payment_method": "cash"}],
}


class TestParseOrders:

    def test_nested_record(self):
        [order] = parse_orders([RECORD])
        assert order.id == RECORD["id"]
        assert order.status == "processing"
        assert order.created_at == datetime(2026, 10, 5, 8, 30)
        assert order.customer_email == "wanjiku@example.com"
        assert order.payment_method == "mpesa"
        first, second = order.lines
        assert (first.quantity, first.price, first.discount_amount) == (2, 100.0, 10.0)
        assert first.product_name == "Layers Mash"
        assert second.price is None
        assert second.discount_amount is None
        assert second.product_price == 75.0

    def test_missing_relations_are_optional(self):
        [order] = parse_orders([{"id": "x", "status": "pending", "created_at": "2026-10-05T08:30:00",
                                 "profiles": None, "order_items": None, "payments": None}])
        assert order.customer_email is None
        assert order.lines == ()
        assert order.payment_method is None

    def test_aware_timestamps_become_local_naive(self):
        [order] = parse_orders([dict(RECORD, created_at="2026-10-05T08:30:00+00:00")])
        expected = datetime(2026, 10, 5, 8, 30, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert order.created_at == expected
        assert order.created_at.tzinfo is None

    def test_missing_required_field(self):
        with pytest.raises(ValueError, match="Record 1 missing required fields"):
            parse_orders([RECORD, {"id": "y", "status": "pending"}])

    def test_bad_value_names_the_record(self):
        bad_items = [dict(RECORD["order_items"][0], quantity="2.0")]
        with pytest.raises(ValueError, match="Record 1 is malformed"):
            parse_orders([RECORD, dict(RECORD, id="y", order_items=bad_items)])

    def test_bad_timestamp_names_the_record(self):
        with pytest.raises(ValueError, match="Record 0 is malformed"):
            parse_orders([dict(RECORD, created_at="not a date")])

    def test_items_must_be_a_list(self):
        with pytest.raises(ValueError, match="'order_items' field must be list"):
            parse_orders([dict(RECORD, order_items={"quantity": 1})])


class TestJsonOrderSource:

    def test_plain_list_snapshot(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps([RECORD]), encoding="utf-8")
        source = JsonOrderSource(path)
        assert len(source.fetch_orders()) == 1
        assert source.fetch_product_names() == {}

    def test_snapshot_with_products(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps({"orders": [RECORD], "products": [{"id": "p-1", "name": "Dairy Meal"}]}),
                        encoding="utf-8")
        assert JsonOrderSource(path).fetch_product_names() == {"p-1": "Dairy Meal"}

    def test_update_status_rewrites_snapshot(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps({"orders": [RECORD], "products": []}), encoding="utf-8")
        source = JsonOrderSource(path)
        source.update_status(RECORD["id"], "completed")
        assert source.fetch_orders()[0].status == "completed"
        with pytest.raises(KeyError):
            source.update_status("missing", "completed")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JsonOrderSource(tmp_path / "nope.json").fetch_orders()


@pytest.fixture
def sqlite_engine():
    engine = create_engine("sqlite://")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE profiles (id TEXT PRIMARY KEY, email TEXT)"))
        conn.execute(text("CREATE TABLE orders (id TEXT PRIMARY KEY, status TEXT, created_at TEXT, user_id TEXT)"))
        conn.execute(text("CREATE TABLE products (id TEXT PRIMARY KEY, name TEXT, price REAL)"))
        conn.execute(text(
            "CREATE TABLE order_items (id INTEGER PRIMARY KEY, order_id TEXT, product_id TEXT, "
            "quantity INTEGER, price REAL, discount_amount REAL)"))
        conn.execute(text("CREATE TABLE payments (order_id TEXT, payment_method TEXT, created_at TEXT)"))

        conn.execute(text("INSERT INTO profiles VALUES ('u1', 'achieng@example.com')"))
        conn.execute(text("INSERT INTO products VALUES ('p-feed', 'Layers Mash', 110), ('p-salt', 'Salt Lick', 75)"))
        conn.execute(text(
            "INSERT INTO orders VALUES "
            "('o-1', 'completed', '2026-10-02 09:15:00', 'u1'), "
            "('o-2', 'pending', '2026-10-05 11:00:00', NULL)"))
        conn.execute(text(
            "INSERT INTO order_items (order_id, product_id, quantity, price, discount_amount) VALUES "
            "('o-1', 'p-feed', 2, 100, 10), "
            "('o-1', 'p-salt', 1, NULL, NULL), "
            "('o-2', 'p-salt', 3, 70, 0)"))
        conn.execute(text(
            "INSERT INTO payments VALUES "
            "('o-1', 'mpesa', '2026-10-02 09:16:00'), ('o-1', 'cash', '2026-10-02 09:20:00')"))
    return engine


class TestPostgresOrderSource:

    def test_requires_dsn(self):
        with pytest.raises(ValueError, match="PG_DSN is empty"):
            PostgresOrderSource("")

    def test_fetch_orders(self, sqlite_engine):
        orders = PostgresOrderSource("", engine=sqlite_engine).fetch_orders()
        assert [o.id for o in orders] == ["o-2", "o-1"]

        o2, o1 = orders
        assert o2.customer_email is None
        assert o2.payments == ()
        assert o1.customer_email == "achieng@example.com"
        assert o1.payment_method == "mpesa"
        assert o1.created_at == datetime(2026, 10, 2, 9, 15)

        feed, salt = o1.lines
        assert (feed.quantity, feed.price, feed.discount_amount) == (2, 100.0, 10.0)
        assert salt.price is None
        assert salt.product_price == 75.0
        assert salt.product_name == "Salt Lick"

    def test_fetch_product_names(self, sqlite_engine):
        names = PostgresOrderSource("", engine=sqlite_engine).fetch_product_names()
        assert names == {"p-feed": "Layers Mash", "p-salt": "Salt Lick"}

    def test_update_status(self, sqlite_engine):
        source = PostgresOrderSource("", engine=sqlite_engine)
        source.update_status("o-2", "processing")
        statuses = {o.id: o.status for o in source.fetch_orders()}
        assert statuses["o-2"] == "processing"
        with pytest.raises(KeyError):
            source.update_status("o-404", "processing")
