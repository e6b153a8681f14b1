"""
Unit Tests - Analytics Snapshot
"""
from datetime import datetime, timezone
from decimal import Decimal

from factories import AS_OF, customer, item, make_snapshot, order
from tyre_analytics.analytics import AnalyticsSnapshot


class TestSnapshotNormalisation:
    """Tests for AnalyticsSnapshot.from_records"""

    def test_decimals_become_floats(self):
        snapshot = make_snapshot(
            orders=[order(1, 1, Decimal("12500.50"), datetime(2026, 3, 1, 9, 0))],
            order_items=[item(1, 1, 2, Decimal("6250.25"))],
        )

        assert snapshot.orders["total"].to_list() == [12500.5]
        assert snapshot.order_items["unit_price"].to_list() == [6250.25]

    def test_aware_timestamps_convert_to_store_time(self):
        snapshot = make_snapshot(
            orders=[order(1, 1, 1000, datetime(2026, 3, 14, 17, 30, tzinfo=timezone.utc))],
        )

        # 17:30 UTC is 01:30 the next day in Manila
        assert snapshot.orders["created_at"].to_list() == [datetime(2026, 3, 15, 1, 30)]

    def test_aware_as_of_converts_to_store_time(self):
        snapshot = AnalyticsSnapshot.empty(datetime(2026, 3, 15, 10, 0, tzinfo=timezone.utc))
        assert snapshot.as_of == datetime(2026, 3, 15, 18, 0)

    def test_orders_without_timestamp_are_dropped(self):
        snapshot = make_snapshot(orders=[
            order(1, 1, 1000, datetime(2026, 3, 1)),
            order(2, 1, 1000, None),
        ])
        assert snapshot.orders["order_id"].to_list() == [1]

    def test_non_positive_quantities_are_dropped(self):
        snapshot = make_snapshot(order_items=[
            item(1, 1, 2, 5000),
            item(1, 2, 0, 5000),
            item(1, 3, -1, 5000),
        ])
        assert snapshot.order_items["product_id"].to_list() == [1]

    def test_status_is_normalised(self):
        snapshot = make_snapshot(orders=[
            order(1, 1, 1000, datetime(2026, 3, 1), "Delivered"),
            order(2, 1, 1000, datetime(2026, 3, 1), None),
        ])
        assert snapshot.orders["status"].to_list() == ["delivered", "unknown"]

    def test_product_defaults(self):
        snapshot = make_snapshot(products=[
            {"product_id": 1, "name": None, "brand": None, "category": None, "price": 5000, "stock": -3},
        ])
        row = snapshot.products.row(0, named=True)

        assert row["name"] == "Unknown"
        assert row["brand"] == "Unknown"
        assert row["category"] == "Unknown"
        assert row["stock"] == 0
        assert row["unit_cost"] is None

    def test_only_customers_are_kept(self):
        admin = {**customer(2, datetime(2025, 1, 1)), "role": "admin"}
        no_role = {**customer(3, datetime(2025, 1, 1)), "role": None}

        snapshot = make_snapshot(users=[customer(1, datetime(2025, 1, 1)), admin, no_role])

        assert snapshot.users["user_id"].to_list() == [1, 3]

    def test_empty_snapshot(self):
        snapshot = AnalyticsSnapshot.empty(AS_OF)

        assert snapshot.orders.height == 0
        assert snapshot.order_items.height == 0
        assert snapshot.products.height == 0
        assert snapshot.users.height == 0
        assert snapshot.as_of == AS_OF


class TestSnapshotQueries:
    """Tests for window selection"""

    def test_orders_in_excludes_cancelled(self, store_snapshot):
        frame = store_snapshot.orders_in(datetime(2026, 3, 15), AS_OF)
        assert frame.height == 0

        frame = store_snapshot.orders_in(datetime(2026, 3, 15), AS_OF, include_cancelled=True)
        assert frame["order_id"].to_list() == [104]

    def test_orders_in_left_closed(self, store_snapshot):
        end = datetime(2026, 3, 10, 10, 0)
        both = store_snapshot.orders_in(datetime(2026, 3, 1), end)
        left = store_snapshot.orders_in(datetime(2026, 3, 1), end, closed="left")

        assert both["order_id"].to_list() == [101]
        assert left.height == 0

    def test_orders_until_as_of(self, store_snapshot):
        orders = store_snapshot.orders_until_as_of()
        assert sorted(orders["order_id"].to_list()) == [101, 102, 103, 105, 106, 107, 108]

    def test_items_in_joins_products(self, store_snapshot):
        items = store_snapshot.items_in(datetime(2026, 3, 10), datetime(2026, 3, 10, 23, 59))
        row = items.row(0, named=True)

        assert items.height == 1
        assert row["brand"] == "Michelin"
        assert row["line_revenue"] == 24000.0

    def test_items_of_unknown_products(self):
        snapshot = make_snapshot(
            orders=[order(1, 1, 5000, datetime(2026, 3, 1))],
            order_items=[item(1, 42, 1, 5000)],
        )
        items = snapshot.items_in(datetime(2026, 2, 1), AS_OF)

        assert items["brand"].to_list() == ["Unknown"]
        assert items["category"].to_list() == ["Unknown"]
