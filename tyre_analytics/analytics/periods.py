"""
Reporting Periods and Safe Arithmetic

A report window for a period of N days covers the last N calendar days
ending on the snapshot date, so a daily series over it always has exactly
N points. The previous window is the N days right before it.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import List, Optional, Union

import structlog

logger = structlog.get_logger(__name__)


class Period(str, Enum):
    """Reporting periods accepted by the dashboard"""
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    NINETY_DAYS = "90d"
    ONE_YEAR = "1y"

    @property
    def days(self) -> int:
        return _PERIOD_DAYS[self]

    @classmethod
    def parse(cls, value: Union[str, "Period", int, float, None]) -> "Period":
        """Resolve a period string; unrecognized values fall back to 30 days."""
        if isinstance(value, Period):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            logger.debug("Unrecognized period, using default", period=value, default=cls.THIRTY_DAYS.value)
            return cls.THIRTY_DAYS


_PERIOD_DAYS = {
    Period.SEVEN_DAYS: 7,
    Period.THIRTY_DAYS: 30,
    Period.NINETY_DAYS: 90,
    Period.ONE_YEAR: 365,
}


@dataclass(frozen=True)
class ReportWindow:
    """Current and previous reporting windows for one snapshot"""
    days: int
    start: datetime
    end: datetime
    previous_start: datetime
    previous_end: datetime  # exclusive

    @classmethod
    def trailing(cls, days: int, as_of: datetime) -> "ReportWindow":
        """Window of the last `days` calendar days ending at `as_of`."""
        first_day = as_of.date() - timedelta(days=days - 1)
        start = datetime.combine(first_day, time.min)
        return cls(
            days=days,
            start=start,
            end=as_of,
            previous_start=start - timedelta(days=days),
            previous_end=start,
        )

    @classmethod
    def for_period(cls, period: Union[str, Period, None], as_of: datetime) -> "ReportWindow":
        return cls.trailing(Period.parse(period).days, as_of)

    @property
    def first_date(self) -> date:
        return self.start.date()

    @property
    def last_date(self) -> date:
        return self.end.date()

    def dates(self) -> List[date]:
        """Every calendar date of the current window, oldest first"""
        return [self.first_date + timedelta(days=i) for i in range(self.days)]


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning `default` for a zero or non-finite denominator or result."""
    if not denominator or not math.isfinite(denominator):
        return default
    result = numerator / denominator
    return result if math.isfinite(result) else default


def percent_change(current: float, previous: float, digits: int = 1) -> Optional[float]:
    """
    Relative change in percent.

    Returns None ("n/a") when there is no previous value to compare with.
    """
    if not previous:
        return None
    return round(safe_divide(current - previous, previous) * 100, digits)


def money(value: Optional[float]) -> float:
    """Round a currency amount for reporting; missing or non-finite becomes 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return round(float(value), 2)
