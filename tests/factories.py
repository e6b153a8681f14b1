"""
Test Data Factories

Record builders for snapshots; timestamps are naive store local time.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from tyre_analytics.analytics import AnalyticsSnapshot

AS_OF = datetime(2026, 3, 15, 18, 0)


def make_snapshot(
    orders: Iterable[Dict[str, Any]] = (),
    order_items: Iterable[Dict[str, Any]] = (),
    products: Iterable[Dict[str, Any]] = (),
    users: Iterable[Dict[str, Any]] = (),
    as_of: datetime = AS_OF,
) -> AnalyticsSnapshot:
    return AnalyticsSnapshot.from_records(
        as_of=as_of,
        orders=orders,
        order_items=order_items,
        products=products,
        users=users,
    )


def order(order_id: int, user_id: int, total: float, created_at: datetime, status: str = "delivered") -> Dict[str, Any]:
    return {"order_id": order_id, "user_id": user_id, "total": total, "status": status, "created_at": created_at}


def item(order_id: int, product_id: int, quantity: int, unit_price: float) -> Dict[str, Any]:
    return {"order_id": order_id, "product_id": product_id, "quantity": quantity, "unit_price": unit_price}


def customer(user_id: int, created_at: datetime, name: Optional[str] = None) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "name": name or f"Customer {user_id}",
        "email": f"customer{user_id}@example.com",
        "phone": f"0917000{user_id:04d}",
        "role": "customer",
        "created_at": created_at,
    }

