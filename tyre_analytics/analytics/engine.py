"""
Analytics Engine

Async facade over the report computations. Each operation loads its own
snapshot and then computes synchronously. The dashboard loads one snapshot
and computes every section from it, so its sections always agree.
"""

from typing import Any, Callable, Dict, List, Optional, Union

import structlog

from tyre_analytics.analytics import forecast, insights, inventory, sales, segmentation
from tyre_analytics.analytics.exceptions import DataFetchError
from tyre_analytics.analytics.loader import SnapshotLoader
from tyre_analytics.analytics.periods import Period
from tyre_analytics.analytics.schemas import (
    BestSeller,
    BrandRevenue,
    CategoryRevenue,
    ChurnRiskCustomer,
    CustomerSegmentsReport,
    CustomerStats,
    DailyTimelinePoint,
    DashboardReport,
    DashboardSection,
    ForecastResult,
    InventoryRecommendation,
    OverviewStats,
    ProductInsight,
    SeasonalTrends,
    StatusCount,
)
from tyre_analytics.analytics.snapshot import AnalyticsSnapshot
from tyre_analytics.config.settings import AnalyticsSettings

logger = structlog.get_logger(__name__)

PeriodArg = Union[str, Period, None]

DASHBOARD_SECTIONS = (
    "overview",
    "sales_timeline",
    "best_sellers",
    "revenue_by_brand",
    "revenue_by_category",
    "order_status_distribution",
    "customer_stats",
    "forecast",
    "seasonal_trends",
    "customer_segments",
    "churn_risk",
    "inventory",
    "product_insights",
)


class AnalyticsEngine:
    """
    Report operations for the admin dashboard.

    Args:
        loader: Snapshot source
        settings: Analytics thresholds; defaults to the environment's
    """

    def __init__(self, loader: SnapshotLoader, settings: Optional[AnalyticsSettings] = None):
        self.loader = loader
        self.settings = settings or AnalyticsSettings()
        self.inventory_policy = inventory.InventoryPolicy.from_settings(self.settings)

    async def get_overview(self, period: PeriodArg = None) -> OverviewStats:
        snapshot = await self.loader.load()
        return sales.compute_overview(snapshot, period)

    async def get_sales_timeline(self, period: PeriodArg = None) -> List[DailyTimelinePoint]:
        snapshot = await self.loader.load()
        return sales.compute_sales_timeline(snapshot, period)

    async def get_best_sellers(self, period: PeriodArg = None, limit: Optional[int] = None) -> List[BestSeller]:
        snapshot = await self.loader.load()
        if limit is None:
            limit = self.settings.best_sellers_limit
        return sales.compute_best_sellers(snapshot, period, limit)

    async def get_revenue_by_brand(self, period: PeriodArg = None) -> List[BrandRevenue]:
        snapshot = await self.loader.load()
        return sales.compute_revenue_by_brand(snapshot, period)

    async def get_revenue_by_category(self, period: PeriodArg = None) -> List[CategoryRevenue]:
        snapshot = await self.loader.load()
        return sales.compute_revenue_by_category(snapshot, period)

    async def get_order_status_distribution(self, period: PeriodArg = None) -> List[StatusCount]:
        snapshot = await self.loader.load()
        return sales.compute_order_status_distribution(snapshot, period)

    async def get_customer_stats(self, period: PeriodArg = None) -> CustomerStats:
        snapshot = await self.loader.load()
        return sales.compute_customer_stats(snapshot, period)

    async def get_forecast(self, period: PeriodArg = None, metric: Optional[str] = None) -> ForecastResult:
        snapshot = await self.loader.load()
        return forecast.compute_forecast(snapshot, self.settings, period, metric)

    async def get_seasonal_trends(self) -> SeasonalTrends:
        snapshot = await self.loader.load()
        return forecast.compute_seasonal_trends(snapshot, self.settings)

    async def get_customer_segments(self) -> CustomerSegmentsReport:
        snapshot = await self.loader.load()
        return segmentation.compute_customer_segments(snapshot, self.settings)

    async def get_churn_risk(self) -> List[ChurnRiskCustomer]:
        snapshot = await self.loader.load()
        return segmentation.compute_churn_risk(snapshot, self.settings)

    async def get_inventory_recommendations(self) -> List[InventoryRecommendation]:
        snapshot = await self.loader.load()
        return inventory.compute_inventory_recommendations(snapshot, self.inventory_policy)

    async def get_product_insights(self) -> List[ProductInsight]:
        snapshot = await self.loader.load()
        return insights.compute_product_insights(snapshot, self.settings.insights_period_days)

    async def get_dashboard(self, period: PeriodArg = None) -> DashboardReport:
        """
        Every report at once, computed from a single snapshot.

        Sections fail independently: a failing section is returned as an
        error marker next to the sections that succeeded. When the snapshot
        itself cannot be fetched, every section carries that error.
        """
        resolved = Period.parse(period)
        try:
            snapshot = await self.loader.load()
        except DataFetchError as e:
            logger.error("Dashboard data unavailable", period=resolved.value, source=e.source, error=str(e))
            marker = DashboardSection(status="error", error=str(e) or type(e).__name__)
            return DashboardReport(period=resolved.value, **{name: marker for name in DASHBOARD_SECTIONS})

        sections = self._dashboard_sections(snapshot, resolved)
        results = {name: self._run_section(name, compute) for name, compute in sections.items()}
        failed = [name for name, section in results.items() if section.status == "error"]
        logger.info("Dashboard computed", period=resolved.value, sections=len(results), failed=failed)

        return DashboardReport(period=resolved.value, **results)

    def _dashboard_sections(self, snapshot: AnalyticsSnapshot, period: Period) -> Dict[str, Callable[[], Any]]:
        return {
            "overview": lambda: sales.compute_overview(snapshot, period),
            "sales_timeline": lambda: sales.compute_sales_timeline(snapshot, period),
            "best_sellers": lambda: sales.compute_best_sellers(snapshot, period, self.settings.best_sellers_limit),
            "revenue_by_brand": lambda: sales.compute_revenue_by_brand(snapshot, period),
            "revenue_by_category": lambda: sales.compute_revenue_by_category(snapshot, period),
            "order_status_distribution": lambda: sales.compute_order_status_distribution(snapshot, period),
            "customer_stats": lambda: sales.compute_customer_stats(snapshot, period),
            "forecast": lambda: forecast.compute_forecast(snapshot, self.settings, period),
            "seasonal_trends": lambda: forecast.compute_seasonal_trends(snapshot, self.settings),
            "customer_segments": lambda: segmentation.compute_customer_segments(snapshot, self.settings),
            "churn_risk": lambda: segmentation.compute_churn_risk(snapshot, self.settings),
            "inventory": lambda: inventory.compute_inventory_recommendations(snapshot, self.inventory_policy),
            "product_insights": lambda: insights.compute_product_insights(snapshot, self.settings.insights_period_days),
        }

    @staticmethod
    def _run_section(name: str, compute: Callable[[], Any]) -> DashboardSection:
        try:
            return DashboardSection(status="ok", data=compute())
        except Exception as e:
            logger.exception("Dashboard section failed", section=name, error_type=type(e).__name__)
            return DashboardSection(status="error", error=str(e) or type(e).__name__)
