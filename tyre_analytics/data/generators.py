"""
Synthetic Data Generator

Generates a realistic tyre store dataset for development and demos:
- Customers with signup dates spread over the history
- Tyre catalog across brands, types and sizes, with cost for most items
- Orders with weekend peaks, sets of 2 or 4 tyres and a status mix that
  depends on the order's age

Every generator draws from its own seeded random sources, so the same seed
always produces the same dataset.
"""

import random
from datetime import datetime, timedelta
from typing import Dict, Optional

import numpy as np
import polars as pl
from faker import Faker

from tyre_analytics.analytics.snapshot import AnalyticsSnapshot
from tyre_analytics.database.models import OrderStatus, UserRole


# =============================================================================
# CONFIGURATION
# =============================================================================

TYRE_BRANDS = [
    "Michelin", "Bridgestone", "Goodyear", "Continental", "Pirelli",
    "Yokohama", "Dunlop", "Hankook", "Toyo", "Falken",
]

TYRE_TYPES = [
    ("Summer", 0.25),
    ("All-Season", 0.30),
    ("Performance", 0.15),
    ("All-Terrain", 0.15),
    ("Mud-Terrain", 0.05),
    ("Winter", 0.10),
]

TYRE_SIZES = [
    "175/65R14", "185/65R15", "195/55R16", "205/55R16", "215/60R16",
    "225/45R17", "235/45R18", "245/40R18", "265/65R17", "265/70R16",
]

PAYMENT_METHODS = ["gcash", "cod", "card", "bank_transfer"]

# Orders older than a week have mostly settled
SETTLED_STATUSES = [
    (OrderStatus.DELIVERED, 0.82),
    (OrderStatus.SHIPPED, 0.04),
    (OrderStatus.PROCESSING, 0.02),
    (OrderStatus.CANCELLED, 0.10),
    (OrderStatus.PENDING_PAYMENT, 0.02),
]
RECENT_STATUSES = [
    (OrderStatus.PENDING_PAYMENT, 0.20),
    (OrderStatus.RESERVED, 0.20),
    (OrderStatus.PROCESSING, 0.25),
    (OrderStatus.SHIPPED, 0.25),
    (OrderStatus.CANCELLED, 0.10),
]


# =============================================================================
# GENERATORS
# =============================================================================

class TyreStoreGenerator:
    """
    Generate a consistent users/products/orders/order_items dataset.

    Ids start at 1 in every table. Frame columns follow the snapshot record
    keys (`user_id`, `product_id`, `order_id`, `unit_price`, `category`).
    """

    def __init__(self, seed: int = 42):
        self.random = random.Random(seed)
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def generate_customers(self, n: int, start: datetime, end: datetime) -> pl.DataFrame:
        span = (end - start).total_seconds()
        customers = []
        for i in range(1, n + 1):
            first, last = self.fake.first_name(), self.fake.last_name()
            customers.append({
                "user_id": i,
                "name": f"{first} {last}",
                "email": f"{first}.{last}.{i}@example.com".lower(),
                "phone": self.fake.numerify("09#########"),
                "role": UserRole.CUSTOMER.value,
                "created_at": start + timedelta(seconds=self.random.uniform(0, span)),
            })
        return pl.DataFrame(customers, infer_schema_length=None)

    def generate_products(self, n: int) -> pl.DataFrame:
        type_names = [t[0] for t in TYRE_TYPES]
        type_weights = [t[1] for t in TYRE_TYPES]

        products = []
        for i in range(1, n + 1):
            brand = self.random.choice(TYRE_BRANDS)
            tyre_type = self.random.choices(type_names, weights=type_weights)[0]
            size = self.random.choice(TYRE_SIZES)
            price = round(float(self.rng.uniform(2500, 12000)), -1)
            # A few catalog items have no cost on file
            unit_cost = None
            if self.random.random() > 0.1:
                unit_cost = round(price * float(self.rng.uniform(0.55, 0.8)), 2)
            products.append({
                "product_id": i,
                "name": f"{brand} {self.fake.word().title()} {size}",
                "brand": brand,
                "category": tyre_type,
                "size": size,
                "price": price,
                "unit_cost": unit_cost,
                "stock": int(self.rng.integers(0, 120)),
                "rating": round(float(self.rng.uniform(3.0, 5.0)), 1),
            })
        return pl.DataFrame(products, infer_schema_length=None)

    def generate_orders(
        self,
        customers: pl.DataFrame,
        products: pl.DataFrame,
        n: int,
        end: datetime,
    ) -> Dict[str, pl.DataFrame]:
        """Generate n orders with their items; every order is placed after its customer signed up."""
        customer_rows = customers.select(["user_id", "created_at"]).to_dicts()
        product_rows = products.select(["product_id", "price"]).to_dicts()
        # Best sellers are a minority of the catalog
        popularity = self.rng.pareto(1.5, len(product_rows)) + 1
        popularity = popularity / popularity.sum()

        orders = []
        order_items = []
        for order_id in range(1, n + 1):
            customer = self.random.choice(customer_rows)
            signup = customer["created_at"]
            created_at = signup + timedelta(
                seconds=self.random.uniform(0, max((end - signup).total_seconds(), 0))
            )
            # Saturdays and Sundays are the busiest days for fitting
            if created_at.weekday() < 5 and self.random.random() < 0.25:
                shift = 5 - created_at.weekday()
                if created_at + timedelta(days=shift) <= end:
                    created_at += timedelta(days=shift)

            total = 0.0
            n_lines = int(self.rng.choice([1, 2], p=[0.85, 0.15]))
            picked = self.rng.choice(len(product_rows), size=n_lines, replace=False, p=popularity)
            for index in picked:
                product = product_rows[int(index)]
                quantity = int(self.rng.choice([1, 2, 4], p=[0.25, 0.30, 0.45]))
                total += quantity * product["price"]
                order_items.append({
                    "order_id": order_id,
                    "product_id": product["product_id"],
                    "quantity": quantity,
                    "unit_price": product["price"],
                })

            weights = RECENT_STATUSES if (end - created_at).days <= 7 else SETTLED_STATUSES
            status = self.random.choices(
                [s[0] for s in weights],
                weights=[s[1] for s in weights],
            )[0]

            orders.append({
                "order_id": order_id,
                "user_id": customer["user_id"],
                "total": round(total, 2),
                "status": status.value,
                "payment_method": self.random.choice(PAYMENT_METHODS),
                "created_at": created_at,
            })

        return {
            "orders": pl.DataFrame(orders).sort("created_at"),
            "order_items": pl.DataFrame(order_items),
        }

    def generate_all(
        self,
        n_customers: int = 300,
        n_products: int = 60,
        n_orders: int = 2000,
        end: Optional[datetime] = None,
        history_days: int = 400,
    ) -> Dict[str, pl.DataFrame]:
        """Generate the complete dataset ending at `end` (default: now)."""
        end = end or datetime.now().replace(microsecond=0)
        start = end - timedelta(days=history_days)

        customers = self.generate_customers(n_customers, start, end)
        products = self.generate_products(n_products)
        orders = self.generate_orders(customers, products, n_orders, end)

        return {
            "users": customers,
            "products": products,
            **orders,
        }


def build_snapshot(
    dataset: Dict[str, pl.DataFrame],
    as_of: datetime,
    timezone: str = "Asia/Manila",
) -> AnalyticsSnapshot:
    """Snapshot over a generated dataset (demo runs and tests)."""
    return AnalyticsSnapshot.from_records(
        as_of=as_of,
        orders=dataset["orders"].to_dicts(),
        order_items=dataset["order_items"].to_dicts(),
        products=dataset["products"].to_dicts(),
        users=dataset["users"].to_dicts(),
        timezone=timezone,
    )
