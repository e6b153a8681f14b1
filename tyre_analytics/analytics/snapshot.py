"""
Analytics Snapshot

Immutable, in-memory copy of the store tables that every report is computed
from. Reports are pure functions of a snapshot, its `as_of` timestamp
included, so the same snapshot always yields the same output.

Normalisation applied while building a snapshot:
- Decimal amounts become floats
- Timezone-aware timestamps are converted to store local time and made naive;
  naive timestamps are taken as store local time already
- Order items with a non-positive quantity and orders without a timestamp
  are dropped
- Missing or negative stock reads as 0, missing brand/category as "Unknown"
- A product id listed more than once keeps its first row
- Only users with the customer role are kept
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from zoneinfo import ZoneInfo

import polars as pl
import structlog

from tyre_analytics.database.models import OrderStatus, UserRole

logger = structlog.get_logger(__name__)

UNKNOWN = "Unknown"

ORDER_SCHEMA = {
    "order_id": pl.Int64,
    "user_id": pl.Int64,
    "total": pl.Float64,
    "status": pl.Utf8,
    "created_at": pl.Datetime("us"),
}

ORDER_ITEM_SCHEMA = {
    "order_id": pl.Int64,
    "product_id": pl.Int64,
    "quantity": pl.Int64,
    "unit_price": pl.Float64,
}

PRODUCT_SCHEMA = {
    "product_id": pl.Int64,
    "name": pl.Utf8,
    "brand": pl.Utf8,
    "category": pl.Utf8,
    "size": pl.Utf8,
    "price": pl.Float64,
    "unit_cost": pl.Float64,
    "stock": pl.Int64,
}

USER_SCHEMA = {
    "user_id": pl.Int64,
    "name": pl.Utf8,
    "email": pl.Utf8,
    "phone": pl.Utf8,
    "created_at": pl.Datetime("us"),
}

Record = Mapping[str, Any]


def to_store_time(value: Union[datetime, str, None], tz: ZoneInfo) -> Optional[datetime]:
    """Convert a timestamp to naive store local time."""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is not None:
        value = value.astimezone(tz).replace(tzinfo=None)
    return value


def _plain(value: Any) -> Any:
    return float(value) if isinstance(value, Decimal) else value


def _frame(rows: List[Dict[str, Any]], schema: Dict[str, Any]) -> pl.DataFrame:
    if not rows:
        return pl.DataFrame(schema=schema)
    return pl.from_dicts(rows, schema=schema)


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Store data at one point in time."""
    orders: pl.DataFrame
    order_items: pl.DataFrame
    products: pl.DataFrame
    users: pl.DataFrame
    as_of: datetime

    @classmethod
    def from_records(
        cls,
        *,
        as_of: datetime,
        orders: Iterable[Record] = (),
        order_items: Iterable[Record] = (),
        products: Iterable[Record] = (),
        users: Iterable[Record] = (),
        timezone: str = "Asia/Manila",
    ) -> "AnalyticsSnapshot":
        """
        Build a snapshot from row mappings.

        Keys follow the frame schemas of this module (`order_id`, `total`,
        `created_at`, ...). Unknown keys are ignored.
        """
        tz = ZoneInfo(timezone)

        order_rows = []
        for row in orders:
            created_at = to_store_time(row.get("created_at"), tz)
            if created_at is None:
                logger.warning("Dropping order without timestamp", order_id=row.get("order_id"))
                continue
            order_rows.append({
                "order_id": row["order_id"],
                "user_id": row.get("user_id"),
                "total": float(_plain(row.get("total")) or 0),
                "status": (row.get("status") or "unknown").strip().lower(),
                "created_at": created_at,
            })

        item_rows = []
        dropped_items = 0
        for row in order_items:
            quantity = row.get("quantity")
            if quantity is None or quantity <= 0:
                dropped_items += 1
                continue
            item_rows.append({
                "order_id": row["order_id"],
                "product_id": row["product_id"],
                "quantity": int(quantity),
                "unit_price": float(_plain(row.get("unit_price")) or 0),
            })
        if dropped_items:
            logger.warning("Dropped order items with non-positive quantity", count=dropped_items)

        product_rows = []
        for row in products:
            cost = _plain(row.get("unit_cost"))
            product_rows.append({
                "product_id": row["product_id"],
                "name": row.get("name") or UNKNOWN,
                "brand": row.get("brand") or UNKNOWN,
                "category": row.get("category") or UNKNOWN,
                "size": row.get("size"),
                "price": float(_plain(row.get("price")) or 0),
                "unit_cost": float(cost) if cost is not None else None,
                "stock": max(int(row.get("stock") or 0), 0),
            })

        # Admin accounts never count as customers
        user_rows = [
            {
                "user_id": row["user_id"],
                "name": row.get("name"),
                "email": row.get("email"),
                "phone": row.get("phone"),
                "created_at": to_store_time(row.get("created_at"), tz),
            }
            for row in users
            if (row.get("role") or UserRole.CUSTOMER.value) == UserRole.CUSTOMER.value
        ]

        return cls(
            orders=_frame(order_rows, ORDER_SCHEMA).sort("order_id"),
            order_items=_frame(item_rows, ORDER_ITEM_SCHEMA).sort(["order_id", "product_id"]),
            products=(
                _frame(product_rows, PRODUCT_SCHEMA)
                .unique(subset="product_id", keep="first", maintain_order=True)
                .sort("product_id")
            ),
            users=_frame(user_rows, USER_SCHEMA).sort("user_id"),
            as_of=to_store_time(as_of, tz),
        )

    @classmethod
    def empty(cls, as_of: datetime) -> "AnalyticsSnapshot":
        return cls.from_records(as_of=as_of)

    def orders_in(
        self,
        start: datetime,
        end: datetime,
        closed: str = "both",
        include_cancelled: bool = False,
    ) -> pl.DataFrame:
        """Orders created inside [start, end] (or [start, end) with closed="left")."""
        frame = self.orders.filter(
            pl.col("created_at").is_between(start, end, closed=closed)
        )
        if not include_cancelled:
            frame = frame.filter(pl.col("status") != OrderStatus.CANCELLED.value)
        return frame

    def orders_until_as_of(self) -> pl.DataFrame:
        """Every non-cancelled order placed up to the snapshot time"""
        return self.orders.filter(
            (pl.col("created_at") <= self.as_of)
            & (pl.col("status") != OrderStatus.CANCELLED.value)
        )

    def items_in(self, start: datetime, end: datetime, closed: str = "both") -> pl.DataFrame:
        """
        Line items of non-cancelled orders inside the window, joined with
        their order timestamp and product attributes.
        """
        orders = self.orders_in(start, end, closed=closed).select(["order_id", "created_at"])
        return (
            self.order_items
            .join(orders, on="order_id", how="inner")
            .join(
                self.products.select(["product_id", "name", "brand", "category"]),
                on="product_id",
                how="left",
            )
            .with_columns([
                (pl.col("quantity") * pl.col("unit_price")).alias("line_revenue"),
                pl.col("name").fill_null(UNKNOWN),
                pl.col("brand").fill_null(UNKNOWN),
                pl.col("category").fill_null(UNKNOWN),
            ])
        )
