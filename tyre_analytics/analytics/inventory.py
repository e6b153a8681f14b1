"""
Inventory Optimization

Reorder point model over trailing unit sales:

    avg_daily_sales = units_sold / period_days
    safety_stock    = avg_daily_sales * lead_time_days * safety_factor
    reorder_point   = avg_daily_sales * lead_time_days + safety_stock
    optimal_stock   = reorder_point + avg_daily_sales * review_period_days
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import List

import polars as pl
import structlog

from tyre_analytics.analytics.periods import ReportWindow, safe_divide
from tyre_analytics.analytics.schemas import InventoryRecommendation
from tyre_analytics.analytics.snapshot import AnalyticsSnapshot
from tyre_analytics.config.settings import AnalyticsSettings

logger = structlog.get_logger(__name__)


class StockAction(str, Enum):
    """Stock actions, most urgent first"""
    URGENT_REORDER = "urgent_reorder"
    REORDER_SOON = "reorder_soon"
    OPTIMAL = "optimal"
    OVERSTOCKED = "overstocked"


ACTION_PRIORITY = {action: rank for rank, action in enumerate(StockAction)}


@dataclass(frozen=True)
class InventoryPolicy:
    """Replenishment constants"""
    period_days: int = 30
    lead_time_days: float = 7.0
    safety_factor: float = 0.5
    review_period_days: float = 14.0
    urgent_ratio: float = 0.5
    overstock_ratio: float = 2.0

    @classmethod
    def from_settings(cls, settings: AnalyticsSettings) -> "InventoryPolicy":
        return cls(
            period_days=settings.inventory_period_days,
            lead_time_days=settings.inventory_lead_time_days,
            safety_factor=settings.inventory_safety_factor,
            review_period_days=settings.inventory_review_period_days,
            urgent_ratio=settings.inventory_urgent_ratio,
            overstock_ratio=settings.inventory_overstock_ratio,
        )


DEFAULT_POLICY = InventoryPolicy()


def classify_stock(
    current_stock: float,
    reorder_point: float,
    optimal_stock: float,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> StockAction:
    if current_stock < reorder_point * policy.urgent_ratio:
        return StockAction.URGENT_REORDER
    if current_stock < reorder_point:
        return StockAction.REORDER_SOON
    if current_stock > optimal_stock * policy.overstock_ratio:
        return StockAction.OVERSTOCKED
    return StockAction.OPTIMAL


def recommend_stock(
    product: dict,
    units_sold: int,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> InventoryRecommendation:
    """Recommendation for one product row (`product_id`, `name`, `brand`, `stock`)."""
    avg_daily = safe_divide(units_sold, policy.period_days)
    lead_demand = avg_daily * policy.lead_time_days
    safety_stock = lead_demand * policy.safety_factor
    reorder_point = lead_demand + safety_stock
    optimal_stock = reorder_point + avg_daily * policy.review_period_days

    stock = product["stock"]
    action = classify_stock(stock, reorder_point, optimal_stock, policy)

    suggested = 0
    if action in (StockAction.URGENT_REORDER, StockAction.REORDER_SOON):
        suggested = max(math.ceil(optimal_stock - stock), 0)

    return InventoryRecommendation(
        product_id=product["product_id"],
        name=product["name"],
        brand=product["brand"],
        current_stock=stock,
        units_sold=units_sold,
        avg_daily_sales=round(avg_daily, 2),
        safety_stock=round(safety_stock, 2),
        reorder_point=round(reorder_point, 2),
        optimal_stock=round(optimal_stock, 2),
        days_of_cover=round(stock / avg_daily, 1) if avg_daily > 0 else None,
        suggested_order_quantity=suggested,
        action=action.value,
    )


def compute_inventory_recommendations(
    snapshot: AnalyticsSnapshot,
    policy: InventoryPolicy = DEFAULT_POLICY,
) -> List[InventoryRecommendation]:
    """Recommendations for every product, most urgent first, then by product id"""
    window = ReportWindow.trailing(policy.period_days, snapshot.as_of)
    sold = dict(
        snapshot.items_in(window.start, window.end)
        .group_by("product_id")
        .agg(pl.col("quantity").sum())
        .iter_rows()
    )

    recommendations = [
        recommend_stock(product, int(sold.get(product["product_id"], 0)), policy)
        for product in snapshot.products.iter_rows(named=True)
    ]
    recommendations.sort(key=lambda r: (ACTION_PRIORITY[StockAction(r.action)], r.product_id))

    logger.info(
        "Inventory recommendations computed",
        products=len(recommendations),
        urgent=sum(1 for r in recommendations if r.action == StockAction.URGENT_REORDER.value),
    )
    return recommendations
