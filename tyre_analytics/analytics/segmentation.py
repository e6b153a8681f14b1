"""
Customer Segmentation

RFM (Recency, Frequency, Monetary) scoring, segment assignment and churn
risk for every customer with at least one non-cancelled order.

Scores run 1-5 (5 = best) from the percentile rank of each dimension, ties
taking the highest rank, so the best customer on a dimension always
scores 5 on it.

Churn risk compares days since the last order with a reference gap:

    score = elapsed / (elapsed + reference)

The reference gap is a multiple of the customer's own average gap between
orders, or a global threshold when there are too few orders to estimate it.
The score is 0.5 exactly when elapsed equals the reference; customers past
that point are high risk.
"""

from enum import Enum
from typing import Dict, List, Tuple

import numpy as np
import polars as pl
import structlog
from scipy.stats import rankdata

from tyre_analytics.analytics.periods import money
from tyre_analytics.analytics.schemas import (
    ChurnRiskCustomer,
    CustomerSegmentRecord,
    CustomerSegmentsReport,
)
from tyre_analytics.analytics.snapshot import AnalyticsSnapshot
from tyre_analytics.config.settings import AnalyticsSettings

logger = structlog.get_logger(__name__)


class Segment(str, Enum):
    """Customer segments, in rule priority order"""
    CHAMPIONS = "champions"
    LOYAL = "loyal"
    POTENTIAL = "potential"
    AT_RISK = "at_risk"
    LOST = "lost"
    OTHER = "other"


RECOMMENDED_ACTIONS: Dict[Tuple[Segment, bool], str] = {
    (Segment.CHAMPIONS, False): "vip_rewards",
    (Segment.CHAMPIONS, True): "personal_outreach",
    (Segment.LOYAL, False): "loyalty_reward",
    (Segment.LOYAL, True): "urgent_reorder_outreach",
    (Segment.POTENTIAL, False): "nurture_second_purchase",
    (Segment.POTENTIAL, True): "reengagement_offer",
    (Segment.AT_RISK, False): "win_back_offer",
    (Segment.AT_RISK, True): "urgent_win_back_offer",
    (Segment.LOST, False): "reactivation_campaign",
    (Segment.LOST, True): "reactivation_campaign",
    (Segment.OTHER, False): "general_newsletter",
    (Segment.OTHER, True): "reengagement_email",
}


def score_quintiles(values: np.ndarray) -> np.ndarray:
    """
    Score values 1-5 by percentile rank, larger is better.

    score = ceil(rank / n * 5) with tied values sharing their highest rank.
    """
    if len(values) == 0:
        return np.array([], dtype=np.int64)
    ranks = rankdata(values, method="max")
    return np.ceil(ranks * 5 / len(values)).astype(np.int64)


def assign_segment(recency: int, frequency: int, monetary: int) -> Segment:
    """First matching rule wins."""
    if recency >= 4 and frequency >= 4 and monetary >= 4:
        return Segment.CHAMPIONS
    if frequency >= 4 and monetary >= 3:
        return Segment.LOYAL
    if recency >= 4 and frequency <= 2:
        return Segment.POTENTIAL
    if recency <= 2 and frequency >= 3:
        return Segment.AT_RISK
    if recency <= 1 and frequency <= 2:
        return Segment.LOST
    return Segment.OTHER


def churn_score(elapsed_days: float, reference_days: float) -> float:
    """Churn risk in [0, 1), strictly increasing with elapsed days."""
    elapsed = max(float(elapsed_days), 0.0)
    return round(elapsed / (elapsed + reference_days), 4)


def recommended_action(segment: Segment, high_risk: bool) -> str:
    return RECOMMENDED_ACTIONS[(segment, high_risk)]


def build_rfm_frame(snapshot: AnalyticsSnapshot, settings: AnalyticsSettings) -> pl.DataFrame:
    """
    One row per ordering customer with RFM values, scores, segment and churn.

    Orders of users unknown to the snapshot (or without the customer role)
    are left out.
    """
    as_of = snapshot.as_of
    rfm = (
        snapshot.orders_until_as_of()
        .group_by("user_id")
        .agg([
            pl.col("created_at").max().alias("last_order_at"),
            pl.col("created_at").min().alias("first_order_at"),
            pl.len().cast(pl.Int64).alias("frequency"),
            pl.col("total").sum().alias("monetary"),
        ])
        .join(
            snapshot.users.select(["user_id", "name", "email", "phone"]),
            on="user_id",
            how="inner",
        )
        .with_columns([
            (pl.lit(as_of) - pl.col("last_order_at")).dt.total_days().alias("recency_days"),
            (
                (pl.col("last_order_at") - pl.col("first_order_at")).dt.total_seconds()
                / 86400
                / (pl.col("frequency") - 1).clip(lower_bound=1)
            ).alias("avg_gap_days"),
        ])
        .sort("user_id")
    )

    if rfm.height == 0:
        return rfm

    rfm = rfm.with_columns([
        pl.Series("recency_score", score_quintiles(-rfm["recency_days"].to_numpy())),
        pl.Series("frequency_score", score_quintiles(rfm["frequency"].to_numpy())),
        pl.Series("monetary_score", score_quintiles(rfm["monetary"].to_numpy())),
    ])

    reference = (
        pl.when(pl.col("frequency") >= settings.churn_min_orders_for_gap)
        .then(
            pl.max_horizontal(pl.col("avg_gap_days"), pl.lit(settings.churn_min_gap_days))
            * settings.churn_gap_multiplier
        )
        .otherwise(pl.lit(float(settings.churn_threshold_days)))
    )
    rfm = rfm.with_columns(reference.alias("reference_days"))

    segments = [
        assign_segment(r, f, m).value
        for r, f, m in zip(rfm["recency_score"], rfm["frequency_score"], rfm["monetary_score"])
    ]
    scores = [
        churn_score(elapsed, ref)
        for elapsed, ref in zip(rfm["recency_days"], rfm["reference_days"])
    ]

    return rfm.with_columns([
        pl.Series("segment", segments, dtype=pl.Utf8),
        pl.Series("churn_risk_score", scores, dtype=pl.Float64),
        (pl.col("recency_days") > pl.col("reference_days")).alias("is_high_risk"),
    ])


def compute_customer_segments(snapshot: AnalyticsSnapshot, settings: AnalyticsSettings) -> CustomerSegmentsReport:
    """Segment records, highest spend first, and a count for every segment"""
    rfm = build_rfm_frame(snapshot, settings)
    summary = {segment.value: 0 for segment in Segment}
    if rfm.height == 0:
        return CustomerSegmentsReport(segments=[], summary=summary)

    records = []
    for row in rfm.sort(["monetary", "user_id"], descending=[True, False]).iter_rows(named=True):
        summary[row["segment"]] += 1
        records.append(CustomerSegmentRecord(
            user_id=row["user_id"],
            name=row["name"],
            email=row["email"],
            recency_days=row["recency_days"],
            frequency=row["frequency"],
            monetary=money(row["monetary"]),
            recency_score=row["recency_score"],
            frequency_score=row["frequency_score"],
            monetary_score=row["monetary_score"],
            segment=row["segment"],
            churn_risk_score=row["churn_risk_score"],
        ))

    logger.info("Customer segments computed", customers=len(records), **summary)
    return CustomerSegmentsReport(segments=records, summary=summary)


def compute_churn_risk(snapshot: AnalyticsSnapshot, settings: AnalyticsSettings) -> List[ChurnRiskCustomer]:
    """High-risk customers, riskiest first (ties: higher lifetime value first)"""
    rfm = build_rfm_frame(snapshot, settings)
    if rfm.height == 0:
        return []

    at_risk = (
        rfm.filter(pl.col("is_high_risk"))
        .sort(
            ["churn_risk_score", "monetary", "user_id"],
            descending=[True, True, False],
        )
    )

    customers = [
        ChurnRiskCustomer(
            user_id=row["user_id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            segment=row["segment"],
            churn_risk_score=row["churn_risk_score"],
            last_purchase_date=row["last_order_at"].date(),
            days_since_last_purchase=row["recency_days"],
            lifetime_value=money(row["monetary"]),
            total_orders=row["frequency"],
            recommended_action=recommended_action(Segment(row["segment"]), True),
        )
        for row in at_risk.iter_rows(named=True)
    ]

    logger.info("Churn risk computed", customers=rfm.height, high_risk=len(customers))
    return customers
