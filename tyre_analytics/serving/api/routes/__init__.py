"""
API Routes Module
"""
from .health import router as health_router
from .analytics import router as analytics_router
from .intelligence import router as intelligence_router

__all__ = [
    "health_router",
    "analytics_router",
    "intelligence_router",
]
