"""
Snapshot Loaders

A loader produces the AnalyticsSnapshot a report is computed from. The
database loader reads the storefront tables with async SQLAlchemy, one
session per load, bounded by the configured query timeout.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tyre_analytics.analytics.exceptions import DataFetchError
from tyre_analytics.analytics.snapshot import AnalyticsSnapshot
from tyre_analytics.config.settings import AnalyticsSettings
from tyre_analytics.database.connection import get_db
from tyre_analytics.database.models import Order, OrderItem, Product, User

logger = structlog.get_logger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager]


class SnapshotLoader(ABC):
    """Source of analytics snapshots"""

    @abstractmethod
    async def load(self) -> AnalyticsSnapshot:
        """Fetch the current snapshot. Raises DataFetchError when the source fails."""


class StaticSnapshotLoader(SnapshotLoader):
    """Serves one fixed snapshot (tests, demos)"""

    def __init__(self, snapshot: AnalyticsSnapshot):
        self.snapshot = snapshot

    async def load(self) -> AnalyticsSnapshot:
        return self.snapshot


class DatabaseSnapshotLoader(SnapshotLoader):
    """
    Reads orders, order items, products and users from the store database.

    Args:
        settings: Analytics settings (timezone, query timeout)
        session_scope: Factory of async session context managers;
            defaults to the application's get_db()
        clock: Returns the snapshot time; defaults to now in store time
    """

    def __init__(
        self,
        settings: AnalyticsSettings,
        session_scope: Optional[SessionScope] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings
        self._session_scope = session_scope or get_db
        self._clock = clock or (lambda: datetime.now(ZoneInfo(settings.store_timezone)))

    async def load(self) -> AnalyticsSnapshot:
        as_of = self._clock()
        try:
            snapshot = await asyncio.wait_for(
                self._fetch(as_of),
                timeout=self.settings.query_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                "Snapshot query timed out",
                timeout_seconds=self.settings.query_timeout_seconds,
            )
            raise DataFetchError(
                f"Database query exceeded {self.settings.query_timeout_seconds}s",
                source="database",
            ) from e
        except (SQLAlchemyError, OSError, RuntimeError) as e:
            logger.error("Snapshot query failed", error=str(e), error_type=type(e).__name__)
            raise DataFetchError(f"Database unavailable: {e}", source="database") from e

        logger.debug(
            "Snapshot loaded",
            orders=snapshot.orders.height,
            order_items=snapshot.order_items.height,
            products=snapshot.products.height,
            customers=snapshot.users.height,
        )
        return snapshot

    async def _fetch(self, as_of: datetime) -> AnalyticsSnapshot:
        async with self._session_scope() as session:
            orders = await self._rows(session, select(
                Order.id.label("order_id"),
                Order.user_id,
                Order.total,
                Order.status,
                Order.created_at,
            ))
            order_items = await self._rows(session, select(
                OrderItem.order_id,
                OrderItem.product_id,
                OrderItem.quantity,
                OrderItem.price.label("unit_price"),
            ))
            products = await self._rows(session, select(
                Product.id.label("product_id"),
                Product.name,
                Product.brand,
                Product.type.label("category"),
                Product.size,
                Product.price,
                Product.unit_cost,
                Product.stock,
            ))
            users = await self._rows(session, select(
                User.id.label("user_id"),
                User.name,
                User.email,
                User.phone,
                User.role,
                User.created_at,
            ))

        return AnalyticsSnapshot.from_records(
            as_of=as_of,
            orders=orders,
            order_items=order_items,
            products=products,
            users=users,
            timezone=self.settings.store_timezone,
        )

    @staticmethod
    async def _rows(session: AsyncSession, query) -> list:
        result = await session.execute(query)
        return [dict(row) for row in result.mappings().all()]
