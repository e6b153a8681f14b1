"""
Tyre Depot Analytics
Configuration Module
"""
from .settings import AnalyticsSettings, Settings, get_settings

__all__ = ["AnalyticsSettings", "Settings", "get_settings"]
