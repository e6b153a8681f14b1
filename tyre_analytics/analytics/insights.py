"""
Product Performance Quadrant

BCG-style classification of products on revenue growth against margin:

                    margin > median      margin <= median
  growth > median   star                 question_mark
  growth <= median  cash_cow             dog

Thresholds are the medians of the products being classified, so "high
growth" is always relative to the rest of the catalog.
"""

from enum import Enum
from typing import List

import numpy as np
import polars as pl
import structlog
from scipy.stats import rankdata

from tyre_analytics.analytics.periods import ReportWindow, money, percent_change
from tyre_analytics.analytics.schemas import ProductInsight
from tyre_analytics.analytics.snapshot import AnalyticsSnapshot

logger = structlog.get_logger(__name__)

MARGIN_FROM_COST = "cost"
MARGIN_FROM_PRICE_RANK = "price_rank"


class Quadrant(str, Enum):
    STAR = "star"
    CASH_COW = "cash_cow"
    QUESTION_MARK = "question_mark"
    DOG = "dog"


RECOMMENDATIONS = {
    Quadrant.STAR: "invest",
    Quadrant.CASH_COW: "maintain",
    Quadrant.QUESTION_MARK: "evaluate",
    Quadrant.DOG: "consider_discontinuing",
}


def classify_quadrant(growth: float, margin: float, growth_median: float, margin_median: float) -> Quadrant:
    if growth > growth_median:
        return Quadrant.STAR if margin > margin_median else Quadrant.QUESTION_MARK
    if margin > margin_median:
        return Quadrant.CASH_COW
    return Quadrant.DOG


def _revenue_by_product(items: pl.DataFrame, alias: str) -> pl.DataFrame:
    return items.group_by("product_id").agg(pl.col("line_revenue").sum().alias(alias))


def compute_product_insights(snapshot: AnalyticsSnapshot, period_days: int = 30) -> List[ProductInsight]:
    """
    Quadrant for every product that sold in the current or previous window.

    Margin is (price - cost) / price when the unit cost is known, otherwise
    the percentile rank of the price among the classified products.
    """
    window = ReportWindow.trailing(period_days, snapshot.as_of)
    current = _revenue_by_product(snapshot.items_in(window.start, window.end), "current_revenue")
    previous = _revenue_by_product(
        snapshot.items_in(window.previous_start, window.previous_end, closed="left"),
        "previous_revenue",
    )

    products = (
        snapshot.products
        .join(current, on="product_id", how="left")
        .join(previous, on="product_id", how="left")
        .with_columns([
            pl.col("current_revenue").fill_null(0.0),
            pl.col("previous_revenue").fill_null(0.0),
        ])
        .filter((pl.col("current_revenue") > 0) | (pl.col("previous_revenue") > 0))
        .sort("product_id")
    )
    if products.height == 0:
        return []

    price_rank = rankdata(products["price"].to_numpy(), method="max") / products.height * 100

    rows = []
    for row, rank in zip(products.iter_rows(named=True), price_rank):
        growth = percent_change(row["current_revenue"], row["previous_revenue"])
        cost = row["unit_cost"]
        if cost is not None and row["price"] > 0:
            margin = (row["price"] - cost) / row["price"] * 100
            basis = MARGIN_FROM_COST
        else:
            margin = float(rank)
            basis = MARGIN_FROM_PRICE_RANK
        rows.append({
            **row,
            "growth_rate": growth if growth is not None else 0.0,
            "is_new": growth is None,
            "profit_margin": round(margin, 2),
            "margin_basis": basis,
        })

    growth_median = float(np.median([r["growth_rate"] for r in rows]))
    margin_median = float(np.median([r["profit_margin"] for r in rows]))

    insights = []
    for r in rows:
        quadrant = classify_quadrant(r["growth_rate"], r["profit_margin"], growth_median, margin_median)
        insights.append(ProductInsight(
            product_id=r["product_id"],
            name=r["name"],
            brand=r["brand"],
            category=r["category"],
            current_revenue=money(r["current_revenue"]),
            previous_revenue=money(r["previous_revenue"]),
            growth_rate=r["growth_rate"],
            is_new=r["is_new"],
            profit_margin=r["profit_margin"],
            margin_basis=r["margin_basis"],
            quadrant=quadrant.value,
            recommendation=RECOMMENDATIONS[quadrant],
        ))

    insights.sort(key=lambda i: (-i.current_revenue, i.product_id))
    logger.info(
        "Product insights computed",
        products=len(insights),
        growth_median=round(growth_median, 2),
        margin_median=round(margin_median, 2),
    )
    return insights
