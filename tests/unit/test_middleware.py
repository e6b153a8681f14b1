"""
Unit Tests - Rate Limiting
"""
from types import SimpleNamespace

import pytest
from starlette.requests import Request
from starlette.responses import Response

from tyre_analytics.serving.api import middleware
from tyre_analytics.serving.api.middleware import RateLimitMiddleware


def make_request(host: str, path: str = "/api/v1/analytics/overview") -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [],
        "client": (host, 50000),
    })


async def ok(request):
    return Response("ok")


@pytest.fixture
def clock(monkeypatch):
    """Controllable wall clock for the rate limiter"""
    state = SimpleNamespace(now=1_000.0)
    monkeypatch.setattr(middleware, "time", SimpleNamespace(time=lambda: state.now))
    return state


class TestRateLimit:
    """Tests for the sliding-window rate limiter"""

    async def test_limit_per_client(self, clock):
        limiter = RateLimitMiddleware(None, max_requests=2, window_seconds=60)

        first = await limiter.dispatch(make_request("10.0.0.1"), ok)
        await limiter.dispatch(make_request("10.0.0.1"), ok)
        blocked = await limiter.dispatch(make_request("10.0.0.1"), ok)
        other = await limiter.dispatch(make_request("10.0.0.2"), ok)

        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert blocked.status_code == 429
        assert other.status_code == 200

    async def test_window_expiry_allows_requests_again(self, clock):
        limiter = RateLimitMiddleware(None, max_requests=1, window_seconds=60)

        await limiter.dispatch(make_request("10.0.0.1"), ok)
        clock.now += 61
        response = await limiter.dispatch(make_request("10.0.0.1"), ok)

        assert response.status_code == 200

    async def test_idle_clients_are_forgotten(self, clock):
        """Clients that stop sending requests do not stay in memory"""
        limiter = RateLimitMiddleware(None, max_requests=5, window_seconds=60)

        for i in range(50):
            await limiter.dispatch(make_request(f"10.0.1.{i}"), ok)
        assert len(limiter._requests) == 50

        clock.now += 120
        await limiter.dispatch(make_request("10.0.2.1"), ok)

        assert list(limiter._requests) == ["10.0.2.1"]

    async def test_active_clients_are_kept(self, clock):
        limiter = RateLimitMiddleware(None, max_requests=5, window_seconds=60)

        await limiter.dispatch(make_request("10.0.0.1"), ok)
        clock.now += 59
        await limiter.dispatch(make_request("10.0.0.2"), ok)
        clock.now += 2
        await limiter.dispatch(make_request("10.0.0.3"), ok)

        assert set(limiter._requests) == {"10.0.0.2", "10.0.0.3"}

    async def test_health_checks_are_not_counted(self, clock):
        limiter = RateLimitMiddleware(None, max_requests=1, window_seconds=60)

        for _ in range(3):
            response = await limiter.dispatch(make_request("10.0.0.1", "/api/v1/health"), ok)

        assert response.status_code == 200
        assert len(limiter._requests) == 0
