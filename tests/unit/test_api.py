"""
Unit Tests - API Endpoints
"""
import pytest
from fastapi.testclient import TestClient

from tyre_analytics.analytics import AnalyticsEngine, DataFetchError, SnapshotLoader
from tyre_analytics.main import app
from tyre_analytics.serving.api.auth import create_access_token
from tyre_analytics.serving.api.dependencies import get_analytics_engine


class UnavailableLoader(SnapshotLoader):
    async def load(self):
        raise DataFetchError("Database query exceeded 10.0s", source="database")


def auth_headers(role: str = "admin") -> dict:
    token = create_access_token({"sub": "1", "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(store_engine):
    """Test client serving reports from the store snapshot"""
    app.dependency_overrides[get_analytics_engine] = lambda: store_engine
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuthentication:
    """Tests for admin authentication"""

    def test_missing_token(self, client):
        response = client.get("/api/v1/analytics/overview")
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get(
            "/api/v1/analytics/overview",
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    def test_customer_token_is_forbidden(self, client):
        response = client.get("/api/v1/intelligence/churn-risk", headers=auth_headers("customer"))
        assert response.status_code == 403


class TestAnalyticsEndpoints:
    """Tests for the sales report routes"""

    def test_overview(self, client):
        response = client.get("/api/v1/analytics/overview?period=30d", headers=auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["totalRevenue"] == 54000.0
        assert data["avgOrderValue"] == 13500.0
        assert data["changes"]["revenue"] == 125.0

    def test_bad_period_is_thirty_days(self, client):
        response = client.get("/api/v1/analytics/sales-timeline?period=bogus", headers=auth_headers())

        assert response.status_code == 200
        assert len(response.json()) == 30

    def test_best_sellers_limit(self, client):
        response = client.get("/api/v1/analytics/best-sellers?limit=2", headers=auth_headers())

        assert response.status_code == 200
        assert [b["productId"] for b in response.json()] == [1, 2]

    def test_best_sellers_limit_out_of_range(self, client):
        response = client.get("/api/v1/analytics/best-sellers?limit=0", headers=auth_headers())
        assert response.status_code == 422

    def test_dashboard(self, client):
        response = client.get("/api/v1/analytics/dashboard", headers=auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "30d"
        assert data["overview"]["status"] == "ok"
        assert data["orderStatusDistribution"]["status"] == "ok"
        assert data["overview"]["data"]["totalOrders"] == 4

    def test_security_headers(self, client):
        response = client.get("/api/v1/analytics/overview", headers=auth_headers())

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers


class TestIntelligenceEndpoints:
    """Tests for the intelligence routes"""

    def test_forecast(self, client):
        response = client.get("/api/v1/intelligence/forecast?period=7d", headers=auth_headers())

        assert response.status_code == 200
        assert response.json()["status"] == "insufficient_data"
        assert response.json()["forecast"] is None

    def test_customer_segments(self, client):
        response = client.get("/api/v1/intelligence/customer-segments", headers=auth_headers())

        assert response.status_code == 200
        assert response.json()["summary"]["loyal"] == 3

    def test_inventory(self, client):
        response = client.get("/api/v1/intelligence/inventory-optimization", headers=auth_headers())

        assert response.status_code == 200
        assert response.json()[0]["action"] == "reorder_soon"
        assert response.json()[0]["suggestedOrderQuantity"] == 3


class TestUnavailableData:
    """Tests for database failures"""

    def test_report_returns_503(self, analytics_settings):
        app.dependency_overrides[get_analytics_engine] = lambda: AnalyticsEngine(UnavailableLoader(), analytics_settings)
        try:
            response = TestClient(app).get("/api/v1/analytics/overview", headers=auth_headers())
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 503
        assert response.json()["error"] == "Analytics data unavailable"


class TestHealth:
    """Tests for health endpoints"""

    def test_liveness(self, client):
        response = client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_readiness_without_database(self, client):
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 503
