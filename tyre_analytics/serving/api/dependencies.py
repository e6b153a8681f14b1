"""
API Dependencies
"""

from functools import lru_cache

from tyre_analytics.analytics import AnalyticsEngine, DatabaseSnapshotLoader
from tyre_analytics.config import get_settings


@lru_cache()
def get_analytics_engine() -> AnalyticsEngine:
    """Engine over the application database (overridden in tests)."""
    settings = get_settings().analytics
    return AnalyticsEngine(DatabaseSnapshotLoader(settings), settings)
