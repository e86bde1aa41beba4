"""
Database Module
"""
from .connection import check_connection, create_engine_from_settings
from .models import Base, Currency, Customer, Product, Sale, Store

__all__ = [
    "check_connection",
    "create_engine_from_settings",
    "Base",
    "Currency",
    "Customer",
    "Product",
    "Sale",
    "Store",
]
