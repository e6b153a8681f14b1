"""
API Middleware

- Request logging with a request id bound to every log line of the request
- Per-client rate limiting
- Security headers
"""

import asyncio
import time
from collections import defaultdict
from typing import Callable, Dict, List, Sequence

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log all requests with timing information"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID", str(time.time_ns()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            client=request.client.host if request.client else None,
        )

        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter, per client address.

    Health probes are never limited.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 60,
        exempt_prefixes: Sequence[str] = ("/api/v1/health",),
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.exempt_prefixes = tuple(exempt_prefixes)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._lock = asyncio.Lock()
        self._last_sweep = 0.0

    def _drop_idle_clients(self, now: float) -> None:
        """Forget clients with no request inside the current window"""
        idle = [
            client for client, stamps in self._requests.items()
            if not stamps or now - stamps[-1] >= self.window_seconds
        ]
        for client in idle:
            del self._requests[client]
        self._last_sweep = now

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(self.exempt_prefixes):
            return await call_next(request)

        client_id = request.client.host if request.client else "unknown"
        now = time.time()

        async with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._drop_idle_clients(now)
            recent = [t for t in self._requests[client_id] if now - t < self.window_seconds]
            if len(recent) >= self.max_requests:
                self._requests[client_id] = recent
                logger.warning("Rate limit exceeded", client=client_id, requests=len(recent))
                return Response(
                    content='{"error": "Rate limit exceeded"}',
                    status_code=429,
                    media_type="application/json",
                    headers={
                        "Retry-After": str(self.window_seconds),
                        "X-RateLimit-Limit": str(self.max_requests),
                        "X-RateLimit-Remaining": "0",
                    },
                )
            recent.append(now)
            self._requests[client_id] = recent
            remaining = self.max_requests - len(recent)

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Reports are per-admin and change with every order
        response.headers["Cache-Control"] = "no-store"
        return response
