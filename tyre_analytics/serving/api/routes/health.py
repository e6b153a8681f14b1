"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Response
from pydantic import BaseModel
from redis.exceptions import RedisError

from tyre_analytics.config import get_settings
from tyre_analytics.database.connection import check_database_health
from tyre_analytics.serving.cache import cache_available, get_redis

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Checks:
    - Database connectivity (required)
    - Redis connectivity (optional, reports are served uncached without it)
    """
    settings = get_settings()
    checks: Dict[str, Any] = {}
    overall_status = "healthy"

    db_health = await check_database_health()
    checks["database"] = db_health
    if db_health.get("status") != "healthy":
        overall_status = "unhealthy"

    if not settings.redis.enabled:
        checks["redis"] = {"status": "disabled"}
    elif not cache_available():
        checks["redis"] = {"status": "unavailable"}
        if overall_status == "healthy":
            overall_status = "degraded"
    else:
        try:
            await get_redis().ping()
            checks["redis"] = {"status": "healthy"}
        except (RedisError, OSError) as e:
            checks["redis"] = {"status": "unhealthy", "error": str(e)}
            if overall_status == "healthy":
                overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 while the process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """Returns 200 when the database answers, 503 otherwise."""
    db_health = await check_database_health()
    if db_health.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}
