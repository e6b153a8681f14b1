"""
Demand Forecasting

Closed-form forecast of daily revenue or order count:

    predicted(t) = max(0, trend(t) * weekday_factor(weekday(t)))

The trend is a least-squares line over the daily history. Confidence bounds
are the prediction plus/minus z times the residual standard deviation of
that fit, with the lower bound clipped at zero.

Also provides the monthly seasonal trend summary over the trailing year.
"""

from datetime import timedelta
from enum import Enum
from typing import List, Union

import numpy as np
import polars as pl
import structlog

from tyre_analytics.analytics.periods import Period, ReportWindow, money, safe_divide
from tyre_analytics.analytics.sales import daily_series
from tyre_analytics.analytics.schemas import (
    ForecastModel,
    ForecastPoint,
    ForecastResult,
    HistoricalPoint,
    MonthlyValue,
    SeasonalTrends,
)
from tyre_analytics.analytics.snapshot import AnalyticsSnapshot
from tyre_analytics.config.settings import AnalyticsSettings

logger = structlog.get_logger(__name__)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

STATUS_OK = "ok"
STATUS_INSUFFICIENT_DATA = "insufficient_data"

# Points needed for a line fit with a residual standard deviation
MIN_FIT_POINTS = 2


class ForecastMetric(str, Enum):
    REVENUE = "revenue"
    ORDERS = "orders"

    @classmethod
    def parse(cls, value: Union[str, "ForecastMetric", None]) -> "ForecastMetric":
        """Resolve a metric name; anything unrecognized forecasts revenue."""
        if isinstance(value, ForecastMetric):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.REVENUE

    @property
    def column(self) -> str:
        return "revenue" if self is ForecastMetric.REVENUE else "order_count"


def weekday_factors(history: pl.DataFrame, column: str, min_days: int) -> List[float]:
    """
    Ratio of each weekday's mean to the overall mean, Monday first.

    All factors are 1 when the history is shorter than `min_days` or the
    overall mean is not positive.
    """
    values = history[column].cast(pl.Float64).to_numpy()
    overall = float(values.mean()) if len(values) else 0.0
    if len(values) < min_days or overall <= 0:
        return [1.0] * 7

    weekdays = np.array([day.weekday() for day in history["date"].to_list()])
    factors = []
    for weekday in range(7):
        mask = weekdays == weekday
        factors.append(float(values[mask].mean()) / overall if mask.any() else 1.0)
    return factors


def compute_forecast(
    snapshot: AnalyticsSnapshot,
    settings: AnalyticsSettings,
    period: Union[str, Period, None] = None,
    metric: Union[str, ForecastMetric, None] = None,
) -> ForecastResult:
    """
    Forecast the next `forecast_horizon_days` days after the report window.

    The history is the window's daily series starting at the first day
    with a qualifying order. A history shorter than
    `forecast_min_history_days` gives an insufficient_data result.
    """
    resolved = Period.parse(period)
    metric = ForecastMetric.parse(metric)
    window = ReportWindow.for_period(resolved, snapshot.as_of)

    series = daily_series(snapshot, window)
    trading_days = series.filter(pl.col("order_count") > 0)
    if trading_days.height:
        history = series.filter(pl.col("date") >= trading_days["date"].min())
    else:
        history = series.clear()

    historical = [
        HistoricalPoint(date=row["date"], value=money(row[metric.column]))
        for row in history.iter_rows(named=True)
    ]

    required_days = max(settings.forecast_min_history_days, MIN_FIT_POINTS)
    if history.height < required_days:
        logger.info(
            "Not enough history to forecast",
            metric=metric.value,
            period=resolved.value,
            history_days=history.height,
            required_days=required_days,
        )
        return ForecastResult(
            status=STATUS_INSUFFICIENT_DATA,
            metric=metric.value,
            period=resolved.value,
            historical=historical,
            message=f"At least {required_days} days of sales history are required",
        )

    y = history[metric.column].cast(pl.Float64).to_numpy()
    x = np.arange(len(y), dtype=float)
    slope, intercept = np.polyfit(x, y, 1)
    residuals = y - (slope * x + intercept)
    residual_std = float(np.std(residuals, ddof=1))
    factors = weekday_factors(history, metric.column, settings.forecast_seasonality_min_days)

    margin = settings.forecast_confidence_z * residual_std
    last_index = len(y) - 1
    forecast = []
    for step in range(1, settings.forecast_horizon_days + 1):
        day = window.last_date + timedelta(days=step)
        trend = slope * (last_index + step) + intercept
        predicted = max(0.0, trend * factors[day.weekday()])
        forecast.append(ForecastPoint(
            date=day,
            predicted=money(predicted),
            confidence_lower=money(max(0.0, predicted - margin)),
            confidence_upper=money(predicted + margin),
        ))

    logger.info(
        "Forecast computed",
        metric=metric.value,
        period=resolved.value,
        history_days=len(y),
        slope=round(float(slope), 4),
        residual_std=round(residual_std, 4),
    )

    return ForecastResult(
        status=STATUS_OK,
        metric=metric.value,
        period=resolved.value,
        historical=historical,
        forecast=forecast,
        model=ForecastModel(
            slope=round(float(slope), 4),
            intercept=round(float(intercept), 4),
            residual_std=round(residual_std, 4),
            seasonal_factors={name: round(f, 4) for name, f in zip(WEEKDAYS, factors)},
        ),
    )


def compute_seasonal_trends(snapshot: AnalyticsSnapshot, settings: AnalyticsSettings) -> SeasonalTrends:
    """
    Monthly revenue over the trailing year with peak and low months.

    Peak months sit above mean + k*sigma and low months below mean - k*sigma,
    k being `seasonal_band_sigma`. Fewer than `seasonal_min_months` months of
    data means no seasonality is reported.
    """
    window = ReportWindow.trailing(365, snapshot.as_of)
    monthly = (
        snapshot.orders_in(window.start, window.end)
        .with_columns(pl.col("created_at").dt.strftime("%Y-%m").alias("month"))
        .group_by("month")
        .agg([
            pl.col("total").sum().alias("value"),
            pl.len().alias("orders"),
        ])
        .sort("month")
    )

    values = monthly["value"].to_numpy()
    mean = float(values.mean()) if len(values) else 0.0
    monthly_data = [
        MonthlyValue(month=row["month"], value=money(row["value"]), orders=row["orders"])
        for row in monthly.iter_rows(named=True)
    ]

    if monthly.height < settings.seasonal_min_months:
        return SeasonalTrends(
            has_seasonality=False,
            peak_months=[],
            low_months=[],
            avg_value=money(mean),
            seasonality_strength=0.0,
            monthly_data=monthly_data,
        )

    std = float(np.std(values))
    band = settings.seasonal_band_sigma * std
    months = monthly["month"].to_list()

    return SeasonalTrends(
        has_seasonality=True,
        peak_months=[m for m, v in zip(months, values) if v > mean + band],
        low_months=[m for m, v in zip(months, values) if v < mean - band],
        avg_value=money(mean),
        seasonality_strength=round(safe_divide(std, mean), 4),
        monthly_data=monthly_data,
    )
