"""
Serving Module
"""
from .cache import init_redis, close_redis, analytics_cache, intelligence_cache

__all__ = [
    "init_redis",
    "close_redis",
    "analytics_cache",
    "intelligence_cache",
]
