"""
Test Suite Configuration
"""
from datetime import datetime

import pytest

from factories import AS_OF, customer, item, make_snapshot, order
from tyre_analytics.analytics import AnalyticsEngine, AnalyticsSnapshot, StaticSnapshotLoader
from tyre_analytics.config import AnalyticsSettings, Settings


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(APP_ENV="testing", DEBUG=True)


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings()


@pytest.fixture
def store_snapshot() -> AnalyticsSnapshot:
    """
    Small store seen at 2026-03-15 18:00.

    30d window: 2026-02-14 .. 2026-03-15, previous: 2026-01-15 .. 2026-02-13.
    Current window revenue 54000 over 4 qualifying orders (one more is
    cancelled); previous window 24000 over 2 orders.
    """
    users = [
        customer(1, datetime(2025, 6, 1), "Ana Reyes"),
        customer(2, datetime(2025, 9, 10), "Ben Cruz"),
        customer(3, datetime(2026, 3, 1), "Cara Santos"),
        customer(4, datetime(2025, 1, 5), "Dan Lim"),
        {"user_id": 99, "name": "Admin", "email": "admin@example.com", "role": "admin",
         "created_at": datetime(2024, 1, 1)},
    ]
    products = [
        {"product_id": 1, "name": "Michelin Pilot Sport", "brand": "Michelin", "category": "Summer",
         "size": "205/55R16", "price": 6000, "unit_cost": 4200, "stock": 2},
        {"product_id": 2, "name": "Bridgestone Turanza", "brand": "Bridgestone", "category": "All-Season",
         "size": "195/55R16", "price": 5000, "unit_cost": 3000, "stock": 40},
        {"product_id": 3, "name": "Goodyear Wrangler", "brand": "Goodyear", "category": "All-Terrain",
         "size": "265/65R17", "price": 8000, "unit_cost": None, "stock": 300},
        {"product_id": 4, "name": "Pirelli Cinturato", "brand": "Pirelli", "category": "Summer",
         "size": "225/45R17", "price": 7000, "unit_cost": 5600, "stock": 0},
    ]
    orders = [
        order(101, 1, 24000, datetime(2026, 3, 10, 10, 0)),
        order(102, 2, 10000, datetime(2026, 3, 12, 14, 0), "shipped"),
        order(103, 3, 8000, datetime(2026, 3, 14, 9, 0), "processing"),
        order(104, 1, 5000, datetime(2026, 3, 15, 8, 0), "cancelled"),
        order(105, 4, 12000, datetime(2026, 2, 20, 11, 0)),
        order(106, 1, 10000, datetime(2026, 2, 1, 10, 0)),
        order(107, 2, 14000, datetime(2026, 1, 20, 14, 0)),
        order(108, 4, 24000, datetime(2025, 11, 1, 11, 0)),
    ]
    order_items = [
        item(101, 1, 4, 6000),
        item(102, 2, 2, 5000),
        item(103, 3, 1, 8000),
        item(104, 2, 1, 5000),
        item(105, 1, 2, 6000),
        item(106, 2, 2, 5000),
        item(107, 4, 2, 7000),
        item(108, 1, 4, 6000),
    ]
    return make_snapshot(orders, order_items, products, users)


@pytest.fixture
def empty_snapshot() -> AnalyticsSnapshot:
    return AnalyticsSnapshot.empty(AS_OF)


@pytest.fixture
def store_engine(store_snapshot, analytics_settings) -> AnalyticsEngine:
    return AnalyticsEngine(StaticSnapshotLoader(store_snapshot), analytics_settings)
