"""
Analytics Errors
"""

from typing import Optional


class AnalyticsError(Exception):
    """Base class for analytics failures"""


class DataFetchError(AnalyticsError):
    """The store database could not deliver the snapshot (unreachable, failing or too slow)."""

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source
