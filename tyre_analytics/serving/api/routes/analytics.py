"""
Analytics API Endpoints

Sales reports for the admin dashboard. Every route requires an admin token.
Unrecognized `period` values are served as 30 days.
"""

from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from tyre_analytics.analytics import AnalyticsEngine, Period
from tyre_analytics.analytics.schemas import (
    BestSeller,
    BrandRevenue,
    CategoryRevenue,
    CustomerStats,
    DailyTimelinePoint,
    DashboardReport,
    OverviewStats,
    StatusCount,
)
from tyre_analytics.serving.api.auth import require_admin
from tyre_analytics.serving.api.dependencies import get_analytics_engine
from tyre_analytics.serving.cache import analytics_cache

router = APIRouter(dependencies=[Depends(require_admin)])
logger = structlog.get_logger(__name__)

PERIOD_QUERY = Query("30d", description="Reporting period: 7d, 30d, 90d or 1y")


@router.get("/overview", response_model=OverviewStats)
async def get_overview(
    period: str = PERIOD_QUERY,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    """Revenue, orders and average order value with change against the previous period."""
    resolved = Period.parse(period)
    logger.info("get_overview called", period=resolved.value)
    return await analytics_cache.get_or_set(
        f"overview:{resolved.value}", lambda: engine.get_overview(resolved)
    )


@router.get("/sales-timeline", response_model=List[DailyTimelinePoint])
async def get_sales_timeline(
    period: str = PERIOD_QUERY,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    """Daily revenue and order counts, one point per day of the period."""
    resolved = Period.parse(period)
    return await analytics_cache.get_or_set(
        f"timeline:{resolved.value}", lambda: engine.get_sales_timeline(resolved)
    )


@router.get("/best-sellers", response_model=List[BestSeller])
async def get_best_sellers(
    period: str = PERIOD_QUERY,
    limit: Optional[int] = Query(None, ge=1, le=100, description="Number of products"),
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    resolved = Period.parse(period)
    return await analytics_cache.get_or_set(
        f"best_sellers:{resolved.value}:{limit}", lambda: engine.get_best_sellers(resolved, limit)
    )


@router.get("/revenue-by-brand", response_model=List[BrandRevenue])
async def get_revenue_by_brand(
    period: str = PERIOD_QUERY,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    resolved = Period.parse(period)
    return await analytics_cache.get_or_set(
        f"brands:{resolved.value}", lambda: engine.get_revenue_by_brand(resolved)
    )


@router.get("/revenue-by-category", response_model=List[CategoryRevenue])
async def get_revenue_by_category(
    period: str = PERIOD_QUERY,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    resolved = Period.parse(period)
    return await analytics_cache.get_or_set(
        f"categories:{resolved.value}", lambda: engine.get_revenue_by_category(resolved)
    )


@router.get("/order-status-distribution", response_model=List[StatusCount])
async def get_order_status_distribution(
    period: str = PERIOD_QUERY,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    """Order counts per status, cancelled orders included."""
    resolved = Period.parse(period)
    return await analytics_cache.get_or_set(
        f"status:{resolved.value}", lambda: engine.get_order_status_distribution(resolved)
    )


@router.get("/customer-stats", response_model=CustomerStats)
async def get_customer_stats(
    period: str = PERIOD_QUERY,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    resolved = Period.parse(period)
    return await analytics_cache.get_or_set(
        f"customers:{resolved.value}", lambda: engine.get_customer_stats(resolved)
    )


@router.get("/dashboard", response_model=DashboardReport)
async def get_dashboard(
    period: str = PERIOD_QUERY,
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    """
    Every report in one response.

    Sections fail independently; a failed section carries
    `{"status": "error", "error": ...}` instead of data.
    """
    resolved = Period.parse(period)
    logger.info("get_dashboard called", period=resolved.value)
    return await engine.get_dashboard(resolved)
