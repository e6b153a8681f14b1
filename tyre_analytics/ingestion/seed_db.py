"""
Database Seeder

Creates the store tables and loads a generated tyre store dataset for local
development:

    python -m tyre_analytics.ingestion.seed_db --orders 5000
"""

import argparse
import asyncio
from typing import Any, Dict, List, Optional

import polars as pl
import structlog
from sqlalchemy import insert

from tyre_analytics.config.logging import configure_logging
from tyre_analytics.data.generators import TyreStoreGenerator
from tyre_analytics.database.connection import close_database, get_db, get_engine, init_database
from tyre_analytics.database.models import Base, Order, OrderItem, Product, User, UserRole

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000

# Generated frame columns -> table columns
USER_COLUMNS = {"user_id": "id", "name": "name", "email": "email", "phone": "phone", "role": "role", "created_at": "created_at"}
PRODUCT_COLUMNS = {
    "product_id": "id", "name": "name", "brand": "brand", "category": "type", "size": "size",
    "price": "price", "unit_cost": "unit_cost", "stock": "stock", "rating": "rating",
}
ORDER_COLUMNS = {
    "order_id": "id", "user_id": "user_id", "total": "total", "status": "status",
    "payment_method": "payment_method", "created_at": "created_at",
}
ORDER_ITEM_COLUMNS = {"order_id": "order_id", "product_id": "product_id", "quantity": "quantity", "unit_price": "price"}


def to_records(frame: pl.DataFrame, columns: Dict[str, str]) -> List[Dict[str, Any]]:
    """Select and rename frame columns to table columns."""
    return frame.select(list(columns)).rename(columns).to_dicts()


async def execute_batch_insert(model: Any, records: List[Dict[str, Any]]) -> None:
    """Insert records in chunks with Core insert"""
    if not records:
        return

    async with get_db() as db:
        for i in range(0, len(records), CHUNK_SIZE):
            await db.execute(insert(model), records[i:i + CHUNK_SIZE])
    logger.info("Inserted records", table=model.__tablename__, count=len(records))


async def create_tables() -> None:
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created")


async def seed(
    n_customers: int = 300,
    n_products: int = 60,
    n_orders: int = 2000,
    seed_value: int = 42,
) -> Dict[str, int]:
    """Generate a dataset and load it; returns row counts per table."""
    dataset = TyreStoreGenerator(seed_value).generate_all(
        n_customers=n_customers,
        n_products=n_products,
        n_orders=n_orders,
    )

    admin = {
        "id": n_customers + 1,
        "name": "Store Admin",
        "email": "admin@example.com",
        "phone": None,
        "role": UserRole.ADMIN.value,
        "created_at": dataset["users"]["created_at"].min(),
    }

    await execute_batch_insert(User, to_records(dataset["users"], USER_COLUMNS) + [admin])
    await execute_batch_insert(Product, to_records(dataset["products"], PRODUCT_COLUMNS))
    await execute_batch_insert(Order, to_records(dataset["orders"], ORDER_COLUMNS))
    await execute_batch_insert(OrderItem, to_records(dataset["order_items"], ORDER_ITEM_COLUMNS))

    return {name: frame.height for name, frame in dataset.items()}


async def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the tyre store database with generated data")
    parser.add_argument("--customers", type=int, default=300)
    parser.add_argument("--products", type=int, default=60)
    parser.add_argument("--orders", type=int, default=2000)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args(argv)

    configure_logging()
    logger.info("Starting database seeding...")
    await init_database()
    try:
        await create_tables()
        counts = await seed(args.customers, args.products, args.orders, args.seed)
        logger.info("Database seeding completed", **counts)
    finally:
        await close_database()


def cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    cli()
