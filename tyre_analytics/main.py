"""
FastAPI Application

Entry point of the Tyre Depot Analytics API.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from tyre_analytics.analytics.exceptions import DataFetchError
from tyre_analytics.config import get_settings
from tyre_analytics.config.logging import configure_logging
from tyre_analytics.database.connection import init_database, close_database
from tyre_analytics.serving.cache import init_redis, close_redis
from tyre_analytics.serving.api.middleware import (
    RequestLoggingMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)
from tyre_analytics.serving.api.routes import (
    health_router,
    analytics_router,
    intelligence_router,
)

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging("DEBUG" if settings.debug else None)
    logger.info("Starting Tyre Depot Analytics API", environment=settings.app_env)

    # Reports answer 503 until the database is reachable
    try:
        await init_database()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database init failed", error=str(e))

    # Reports are served uncached without Redis
    try:
        await init_redis()
    except (RedisError, OSError) as e:
        logger.warning("Redis init failed", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()
    await close_redis()


app = FastAPI(
    title="Tyre Depot Analytics API",
    description="Sales analytics and intelligence reports for the tyre store admin dashboard",
    version=settings.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.security.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    max_requests=settings.security.rate_limit_requests,
    window_seconds=settings.security.rate_limit_window_seconds,
)

app.include_router(health_router, prefix="/api/v1", tags=["Health"])
app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])
app.include_router(intelligence_router, prefix="/api/v1/intelligence", tags=["Intelligence"])


@app.exception_handler(DataFetchError)
async def data_fetch_error_handler(request: Request, exc: DataFetchError) -> JSONResponse:
    logger.error("Report data unavailable", path=request.url.path, source=exc.source, error=str(exc))
    return JSONResponse(
        status_code=503,
        content={"error": "Analytics data unavailable", "detail": str(exc)},
    )


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Tyre Depot Analytics API",
        "version": settings.version,
        "environment": settings.app_env,
        "documentation": "/docs",
    }


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "tyre_analytics.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.monitoring.log_level.lower(),
    )


if __name__ == "__main__":
    run()
