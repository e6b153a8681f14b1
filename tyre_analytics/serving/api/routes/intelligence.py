"""
Intelligence API Endpoints

Forecasting, customer segmentation, churn, inventory and product
performance reports. Every route requires an admin token.
"""

from typing import List

import structlog
from fastapi import APIRouter, Depends, Query

from tyre_analytics.analytics import AnalyticsEngine, Period
from tyre_analytics.analytics.forecast import ForecastMetric
from tyre_analytics.analytics.schemas import (
    ChurnRiskCustomer,
    CustomerSegmentsReport,
    ForecastResult,
    InventoryRecommendation,
    ProductInsight,
    SeasonalTrends,
)
from tyre_analytics.serving.api.auth import require_admin
from tyre_analytics.serving.api.dependencies import get_analytics_engine
from tyre_analytics.serving.cache import intelligence_cache

router = APIRouter(dependencies=[Depends(require_admin)])
logger = structlog.get_logger(__name__)


@router.get("/forecast", response_model=ForecastResult)
async def get_forecast(
    period: str = Query("30d", description="History used for the fit: 7d, 30d, 90d or 1y"),
    metric: str = Query("revenue", description="revenue or orders"),
    engine: AnalyticsEngine = Depends(get_analytics_engine),
):
    """
    30-day forecast with confidence bounds.

    Returns status "insufficient_data" and no forecast when the history
    is too short.
    """
    resolved = Period.parse(period)
    resolved_metric = ForecastMetric.parse(metric)
    logger.info("get_forecast called", period=resolved.value, metric=resolved_metric.value)
    return await intelligence_cache.get_or_set(
        f"forecast:{resolved.value}:{resolved_metric.value}",
        lambda: engine.get_forecast(resolved, resolved_metric),
    )


@router.get("/seasonal-trends", response_model=SeasonalTrends)
async def get_seasonal_trends(engine: AnalyticsEngine = Depends(get_analytics_engine)):
    return await intelligence_cache.get_or_set("seasonal", engine.get_seasonal_trends)


@router.get("/customer-segments", response_model=CustomerSegmentsReport)
async def get_customer_segments(engine: AnalyticsEngine = Depends(get_analytics_engine)):
    """RFM segment of every ordering customer plus counts per segment."""
    return await intelligence_cache.get_or_set("segments", engine.get_customer_segments)


@router.get("/churn-risk", response_model=List[ChurnRiskCustomer])
async def get_churn_risk(engine: AnalyticsEngine = Depends(get_analytics_engine)):
    return await intelligence_cache.get_or_set("churn", engine.get_churn_risk)


@router.get("/inventory-optimization", response_model=List[InventoryRecommendation])
async def get_inventory_optimization(engine: AnalyticsEngine = Depends(get_analytics_engine)):
    """Reorder recommendations, most urgent first."""
    return await intelligence_cache.get_or_set("inventory", engine.get_inventory_recommendations)


@router.get("/product-insights", response_model=List[ProductInsight])
async def get_product_insights(engine: AnalyticsEngine = Depends(get_analytics_engine)):
    return await intelligence_cache.get_or_set("products", engine.get_product_insights)
