"""
Database Models - Retail Star Schema

Read-side mapping of the electronics retailer's source tables:

Fact Tables:
- Sale: one order line item

Dimension Tables:
- Product: catalog with USD price and cost
- Customer: customer names
- Store: store location (country and state/region)

Lookup Tables:
- Currency: conversion rates to USD
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class Product(Base):
    """Product dimension"""
    __tablename__ = "products"

    product_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    unit_price_usd: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    unit_cost_usd: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    __table_args__ = (
        Index("ix_products_category", "category"),
    )


class Customer(Base):
    """Customer dimension"""
    __tablename__ = "customers"

    customer_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))


class Store(Base):
    """Store dimension"""
    __tablename__ = "stores"

    store_key: Mapped[int] = mapped_column(Integer, primary_key=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    states: Mapped[Optional[str]] = mapped_column(String(100))

    __table_args__ = (
        Index("ix_stores_country", "country"),
    )


class Currency(Base):
    """Currency conversion lookup"""
    __tablename__ = "currency"

    currency_code: Mapped[str] = mapped_column(String(3), primary_key=True)
    conversion_to_usd: Mapped[Decimal] = mapped_column(Numeric(12, 6), nullable=False)


# =============================================================================
# FACT TABLES
# =============================================================================

class Sale(Base):
    """
    Sales Fact Table

    One row per order line. An order spans several rows sharing
    order_number.
    """
    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[int] = mapped_column(Integer, nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_key: Mapped[int] = mapped_column(Integer, ForeignKey("customers.customer_key"), nullable=False)
    product_key: Mapped[int] = mapped_column(Integer, ForeignKey("products.product_key"), nullable=False)
    store_key: Mapped[int] = mapped_column(Integer, ForeignKey("stores.store_key"), nullable=False)
    currency_code: Mapped[str] = mapped_column(String(3), nullable=False)
    quantity: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (
        Index("ix_sales_order_number", "order_number"),
        Index("ix_sales_order_date", "order_date"),
        Index("ix_sales_customer", "customer_key"),
        Index("ix_sales_store", "store_key"),
    )
