"""
Unit Tests - Analytics Engine
"""
from datetime import datetime

import pytest

from factories import item, make_snapshot, order
from tyre_analytics.analytics import (
    AnalyticsEngine,
    DataFetchError,
    SnapshotLoader,
    StaticSnapshotLoader,
)
from tyre_analytics.analytics.engine import DASHBOARD_SECTIONS


class FailingLoader(SnapshotLoader):
    """Loader whose source is down"""

    def __init__(self):
        self.calls = 0

    async def load(self):
        self.calls += 1
        raise DataFetchError("connection refused", source="database")


class GrowingLoader(SnapshotLoader):
    """Loader that sees one more order on every fetch after the first"""

    def __init__(self):
        self.calls = 0

    async def load(self):
        self.calls += 1
        orders = [order(1, 1, 1000, datetime(2026, 3, 14, 9, 0))]
        order_items = [item(1, 1, 1, 1000)]
        if self.calls > 1:
            orders.append(order(2, 1, 5000, datetime(2026, 3, 15, 9, 0)))
            order_items.append(item(2, 1, 1, 5000))
        return make_snapshot(orders=orders, order_items=order_items)


class TestEngineOperations:
    """Tests for the async report operations"""

    async def test_overview(self, store_engine):
        overview = await store_engine.get_overview("30d")
        assert overview.total_revenue == 54000.0

    async def test_best_sellers_default_limit(self, store_snapshot, analytics_settings):
        settings = analytics_settings.model_copy(update={"best_sellers_limit": 1})
        engine = AnalyticsEngine(StaticSnapshotLoader(store_snapshot), settings)

        assert len(await engine.get_best_sellers("30d")) == 1
        assert len(await engine.get_best_sellers("30d", limit=5)) == 3

    async def test_forecast_metric(self, store_engine):
        result = await store_engine.get_forecast("30d", "orders")
        assert result.metric == "orders"

    async def test_intelligence_operations(self, store_engine):
        assert (await store_engine.get_customer_segments()).summary["loyal"] == 3
        assert await store_engine.get_churn_risk() == []
        assert len(await store_engine.get_inventory_recommendations()) == 4
        assert len(await store_engine.get_product_insights()) == 4
        assert (await store_engine.get_seasonal_trends()).has_seasonality is False

    async def test_data_fetch_error_propagates(self, analytics_settings):
        engine = AnalyticsEngine(FailingLoader(), analytics_settings)

        with pytest.raises(DataFetchError) as exc_info:
            await engine.get_overview()
        assert exc_info.value.source == "database"

    @pytest.mark.parametrize("operation", [
        "get_overview",
        "get_sales_timeline",
        "get_best_sellers",
        "get_revenue_by_brand",
        "get_revenue_by_category",
        "get_order_status_distribution",
        "get_customer_stats",
        "get_forecast",
    ])
    async def test_reports_are_idempotent(self, store_engine, operation):
        first = await getattr(store_engine, operation)("30d")
        second = await getattr(store_engine, operation)("30d")

        assert first == second

    async def test_intelligence_reports_are_idempotent(self, store_engine):
        for operation in ("get_seasonal_trends", "get_customer_segments", "get_churn_risk",
                          "get_inventory_recommendations", "get_product_insights"):
            first = await getattr(store_engine, operation)()
            second = await getattr(store_engine, operation)()
            assert first == second


class TestDashboard:
    """Tests for get_dashboard"""

    async def test_all_sections_succeed(self, store_engine):
        dashboard = await store_engine.get_dashboard("30d")

        assert dashboard.period == "30d"
        for name in DASHBOARD_SECTIONS:
            section = getattr(dashboard, name)
            assert section.status == "ok", name
            assert section.error is None
        assert dashboard.overview.data.total_revenue == 54000.0

    async def test_failing_section_does_not_fail_dashboard(self, store_engine, monkeypatch):
        def broken_forecast(*args, **kwargs):
            raise ValueError("model fit failed")

        monkeypatch.setattr("tyre_analytics.analytics.forecast.compute_forecast", broken_forecast)
        dashboard = await store_engine.get_dashboard("30d")

        assert dashboard.forecast.status == "error"
        assert dashboard.forecast.error == "model fit failed"
        assert dashboard.forecast.data is None
        assert dashboard.overview.status == "ok"
        assert dashboard.inventory.status == "ok"

    async def test_unavailable_data_marks_every_section(self, analytics_settings):
        loader = FailingLoader()
        dashboard = await AnalyticsEngine(loader, analytics_settings).get_dashboard()

        assert loader.calls == 1
        for name in DASHBOARD_SECTIONS:
            section = getattr(dashboard, name)
            assert section.status == "error"
            assert "connection refused" in section.error

    async def test_sections_share_one_snapshot(self, analytics_settings):
        loader = GrowingLoader()
        dashboard = await AnalyticsEngine(loader, analytics_settings).get_dashboard("7d")

        timeline_revenue = sum(p.revenue for p in dashboard.sales_timeline.data)
        best_seller_revenue = sum(b.revenue for b in dashboard.best_sellers.data)

        assert loader.calls == 1
        assert dashboard.overview.data.total_revenue == timeline_revenue == 1000.0
        assert best_seller_revenue == 1000.0
        statuses = {s.status: s.count for s in dashboard.order_status_distribution.data}
        assert statuses["delivered"] == 1

    async def test_dashboard_is_idempotent(self, store_engine):
        first = await store_engine.get_dashboard("7d")
        second = await store_engine.get_dashboard("7d")

        assert first.model_dump_json() == second.model_dump_json()

    async def test_empty_store_dashboard(self, empty_snapshot, analytics_settings):
        engine = AnalyticsEngine(StaticSnapshotLoader(empty_snapshot), analytics_settings)
        dashboard = await engine.get_dashboard()

        assert all(getattr(dashboard, name).status == "ok" for name in DASHBOARD_SECTIONS)
        assert dashboard.forecast.data.status == "insufficient_data"
