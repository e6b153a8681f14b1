"""
Unit Tests - Reporting Periods
"""
import math
from datetime import date, datetime

import pytest

from tyre_analytics.analytics.periods import (
    Period,
    ReportWindow,
    money,
    percent_change,
    safe_divide,
)


class TestPeriod:
    """Tests for period parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("7d", Period.SEVEN_DAYS),
        ("30d", Period.THIRTY_DAYS),
        ("90d", Period.NINETY_DAYS),
        ("1y", Period.ONE_YEAR),
        (" 7D ", Period.SEVEN_DAYS),
        (Period.NINETY_DAYS, Period.NINETY_DAYS),
    ])
    def test_parse_known_periods(self, value, expected):
        assert Period.parse(value) is expected

    @pytest.mark.parametrize("value", ["", None, "2w", "bogus", 7, 3.5])
    def test_unrecognized_period_defaults_to_thirty_days(self, value):
        assert Period.parse(value) is Period.THIRTY_DAYS

    def test_days(self):
        assert [p.days for p in Period] == [7, 30, 90, 365]


class TestReportWindow:
    """Tests for ReportWindow"""

    def test_trailing_window_covers_calendar_days(self):
        window = ReportWindow.trailing(7, datetime(2026, 3, 15, 18, 0))

        assert window.start == datetime(2026, 3, 9)
        assert window.end == datetime(2026, 3, 15, 18, 0)
        assert window.first_date == date(2026, 3, 9)
        assert window.last_date == date(2026, 3, 15)

    def test_previous_window_is_adjacent(self):
        window = ReportWindow.trailing(30, datetime(2026, 3, 15, 18, 0))

        assert window.previous_end == window.start
        assert window.previous_start == datetime(2026, 1, 15)

    def test_dates_has_one_entry_per_day(self):
        window = ReportWindow.for_period("90d", datetime(2026, 3, 15, 0, 0))
        dates = window.dates()

        assert len(dates) == 90
        assert dates[0] == window.first_date
        assert dates[-1] == date(2026, 3, 15)

    def test_for_period_with_bad_value(self):
        window = ReportWindow.for_period("nope", datetime(2026, 3, 15, 12, 0))
        assert window.days == 30


class TestSafeArithmetic:
    """Tests for division guards"""

    def test_safe_divide(self):
        assert safe_divide(10, 4) == 2.5
        assert safe_divide(10, 0) == 0.0
        assert safe_divide(10, 0, default=-1.0) == -1.0
        assert safe_divide(1, float("nan")) == 0.0

    def test_percent_change(self):
        assert percent_change(150, 100) == 50.0
        assert percent_change(50, 100) == -50.0
        assert percent_change(100, 100) == 0.0
        assert percent_change(1, 3) == -66.7

    def test_percent_change_without_previous_is_none(self):
        assert percent_change(100, 0) is None
        assert percent_change(0, 0) is None

    def test_money(self):
        assert money(3333.3333) == 3333.33
        assert money(None) == 0.0
        assert money(float("inf")) == 0.0
        assert not math.isnan(money(float("nan")))
