"""
Analytics Module

Sales analytics and intelligence reports over store data snapshots.
"""
from .engine import AnalyticsEngine
from .exceptions import AnalyticsError, DataFetchError
from .inventory import InventoryPolicy, StockAction, classify_stock
from .loader import DatabaseSnapshotLoader, SnapshotLoader, StaticSnapshotLoader
from .periods import Period, ReportWindow, percent_change
from .snapshot import AnalyticsSnapshot

__all__ = [
    "AnalyticsEngine",
    "AnalyticsError",
    "DataFetchError",
    "InventoryPolicy",
    "StockAction",
    "classify_stock",
    "DatabaseSnapshotLoader",
    "SnapshotLoader",
    "StaticSnapshotLoader",
    "Period",
    "ReportWindow",
    "percent_change",
    "AnalyticsSnapshot",
]
