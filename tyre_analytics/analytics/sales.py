"""
Sales Analytics

Timeline, overview, best sellers, revenue breakdowns, order status and
customer acquisition reports. Every function takes a snapshot and returns
report models; nothing here touches the database.

Qualifying orders are the non-cancelled orders created inside the report
window. Order status distribution is the only report that counts cancelled
orders.
"""

from typing import List, Set, Union

import polars as pl
import structlog

from tyre_analytics.analytics.periods import (
    Period,
    ReportWindow,
    money,
    percent_change,
    safe_divide,
)
from tyre_analytics.analytics.schemas import (
    BestSeller,
    BrandRevenue,
    CategoryRevenue,
    CustomerStats,
    DailyTimelinePoint,
    OverviewStats,
    PeriodChanges,
    SignupPoint,
    StatusCount,
)
from tyre_analytics.analytics.snapshot import AnalyticsSnapshot
from tyre_analytics.database.models import OrderStatus

logger = structlog.get_logger(__name__)

PeriodArg = Union[str, Period, None]


def daily_series(snapshot: AnalyticsSnapshot, window: ReportWindow) -> pl.DataFrame:
    """
    Revenue and order count per calendar date of the window.

    Returns one row per date (`date`, `revenue`, `order_count`), zero-filled,
    oldest first.
    """
    calendar = pl.DataFrame({"date": window.dates()}, schema={"date": pl.Date})
    daily = (
        snapshot.orders_in(window.start, window.end)
        .with_columns(pl.col("created_at").dt.date().alias("date"))
        .group_by("date")
        .agg([
            pl.col("total").sum().alias("revenue"),
            pl.len().cast(pl.Int64).alias("order_count"),
        ])
    )
    return (
        calendar.join(daily, on="date", how="left")
        .with_columns([
            pl.col("revenue").fill_null(0.0),
            pl.col("order_count").fill_null(0),
        ])
        .sort("date")
    )


def customer_ids(snapshot: AnalyticsSnapshot) -> Set[int]:
    """Ids of customers who had signed up by the snapshot time"""
    users = snapshot.users.filter(
        pl.col("created_at").is_null() | (pl.col("created_at") <= snapshot.as_of)
    )
    return set(users["user_id"].to_list())


def _buyers(orders: pl.DataFrame, customers: Set[int]) -> Set[int]:
    return set(orders["user_id"].drop_nulls().to_list()) & customers


def compute_overview(snapshot: AnalyticsSnapshot, period: PeriodArg = None) -> OverviewStats:
    """Revenue, order count and AOV with change against the previous window"""
    resolved = Period.parse(period)
    window = ReportWindow.for_period(resolved, snapshot.as_of)

    current = snapshot.orders_in(window.start, window.end)
    previous = snapshot.orders_in(window.previous_start, window.previous_end, closed="left")

    revenue = float(current["total"].sum())
    orders = current.height
    aov = safe_divide(revenue, orders)

    prev_revenue = float(previous["total"].sum())
    prev_orders = previous.height
    prev_aov = safe_divide(prev_revenue, prev_orders)

    customers = customer_ids(snapshot)

    logger.debug(
        "Overview computed",
        period=resolved.value,
        revenue=round(revenue, 2),
        orders=orders,
    )

    return OverviewStats(
        period=resolved.value,
        start_date=window.first_date,
        end_date=window.last_date,
        total_revenue=money(revenue),
        total_orders=orders,
        avg_order_value=money(aov),
        total_customers=len(customers),
        active_customers=len(_buyers(current, customers)),
        changes=PeriodChanges(
            revenue=percent_change(revenue, prev_revenue),
            orders=percent_change(orders, prev_orders),
            avg_order_value=percent_change(aov, prev_aov),
        ),
    )


def compute_sales_timeline(snapshot: AnalyticsSnapshot, period: PeriodArg = None) -> List[DailyTimelinePoint]:
    window = ReportWindow.for_period(period, snapshot.as_of)
    return [
        DailyTimelinePoint(date=row["date"], revenue=money(row["revenue"]), order_count=row["order_count"])
        for row in daily_series(snapshot, window).iter_rows(named=True)
    ]


def compute_best_sellers(
    snapshot: AnalyticsSnapshot,
    period: PeriodArg = None,
    limit: int = 10,
) -> List[BestSeller]:
    """
    Top products by revenue in the window.

    Ties on revenue are broken by product id so the ranking is stable.
    """
    if limit <= 0:
        return []

    window = ReportWindow.for_period(period, snapshot.as_of)
    ranked = (
        snapshot.items_in(window.start, window.end)
        .group_by("product_id", maintain_order=True)
        .agg([
            pl.col("name").first(),
            pl.col("brand").first(),
            pl.col("category").first(),
            pl.col("quantity").sum().alias("units_sold"),
            pl.col("line_revenue").sum().alias("revenue"),
        ])
        .sort(["revenue", "product_id"], descending=[True, False])
        .head(limit)
    )

    return [
        BestSeller(
            product_id=row["product_id"],
            name=row["name"],
            brand=row["brand"],
            category=row["category"],
            units_sold=row["units_sold"],
            revenue=money(row["revenue"]),
        )
        for row in ranked.iter_rows(named=True)
    ]


def _revenue_breakdown(snapshot: AnalyticsSnapshot, period: PeriodArg, key: str) -> List[dict]:
    window = ReportWindow.for_period(period, snapshot.as_of)
    grouped = (
        snapshot.items_in(window.start, window.end)
        .group_by(key, maintain_order=True)
        .agg([
            pl.col("line_revenue").sum().alias("revenue"),
            pl.col("quantity").sum().alias("units_sold"),
            pl.col("order_id").n_unique().alias("orders"),
        ])
        .sort(["revenue", key], descending=[True, False])
    )
    total = float(grouped["revenue"].sum())

    return [
        {
            key: row[key],
            "revenue": money(row["revenue"]),
            "units_sold": row["units_sold"],
            "orders": row["orders"],
            "percentage": round(safe_divide(row["revenue"], total) * 100, 1),
        }
        for row in grouped.iter_rows(named=True)
    ]


def compute_revenue_by_brand(snapshot: AnalyticsSnapshot, period: PeriodArg = None) -> List[BrandRevenue]:
    return [BrandRevenue(**row) for row in _revenue_breakdown(snapshot, period, "brand")]


def compute_revenue_by_category(snapshot: AnalyticsSnapshot, period: PeriodArg = None) -> List[CategoryRevenue]:
    return [CategoryRevenue(**row) for row in _revenue_breakdown(snapshot, period, "category")]


def compute_order_status_distribution(
    snapshot: AnalyticsSnapshot,
    period: PeriodArg = None,
) -> List[StatusCount]:
    """
    Orders per status in the window, cancelled included.

    Every known status is listed in lifecycle order, zero counts included,
    followed by any unrecognized status values in alphabetical order.
    """
    window = ReportWindow.for_period(period, snapshot.as_of)
    orders = snapshot.orders_in(window.start, window.end, include_cancelled=True)
    counts = dict(
        orders.group_by("status").agg(pl.len().alias("count")).iter_rows()
    )
    total = orders.height

    known = [status.value for status in OrderStatus]
    unknown = sorted(status for status in counts if status not in known)

    return [
        StatusCount(
            status=status,
            count=counts.get(status, 0),
            percentage=round(safe_divide(counts.get(status, 0), total) * 100, 1),
        )
        for status in known + unknown
    ]


def compute_customer_stats(snapshot: AnalyticsSnapshot, period: PeriodArg = None) -> CustomerStats:
    """New, active, returning and repeat customers plus daily signups"""
    resolved = Period.parse(period)
    window = ReportWindow.for_period(resolved, snapshot.as_of)
    customers = customer_ids(snapshot)

    signups = snapshot.users.filter(
        pl.col("created_at").is_between(window.start, window.end, closed="both")
    )
    established = set(
        snapshot.users.filter(
            pl.col("created_at").is_null() | (pl.col("created_at") < window.start)
        )["user_id"].to_list()
    )

    active = _buyers(snapshot.orders_in(window.start, window.end), customers)
    previously_active = _buyers(
        snapshot.orders_in(window.previous_start, window.previous_end, closed="left"),
        customers,
    )

    order_counts = (
        snapshot.orders_until_as_of()
        .group_by("user_id")
        .agg(pl.len().alias("orders"))
        .filter(pl.col("orders") >= 2)
    )
    repeat = _buyers(order_counts, customers)

    retention = None
    if previously_active:
        retention = round(len(previously_active & active) / len(previously_active) * 100, 1)

    per_day = dict(
        signups.with_columns(pl.col("created_at").dt.date().alias("date"))
        .group_by("date")
        .agg(pl.len().alias("count"))
        .iter_rows()
    )

    return CustomerStats(
        period=resolved.value,
        total_customers=len(customers),
        new_customers=signups.height,
        active_customers=len(active),
        returning_customers=len(active & established),
        repeat_customers=len(repeat),
        retention_rate=retention,
        growth=[SignupPoint(date=day, count=per_day.get(day, 0)) for day in window.dates()],
    )
