"""
Database Module
"""
from .connection import init_database, close_database, get_db
from .models import Base, Order, OrderItem, OrderStatus, Product, User, UserRole

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "Base",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Product",
    "User",
    "UserRole",
]
