"""
Test Suite Configuration
"""
from datetime import date

import pytest
import polars as pl
from sqlalchemy import create_engine

from retail_analytics.data.generators import DataGenerator
from retail_analytics.dataset import RetailDataset


@pytest.fixture
def sample_products_df() -> pl.DataFrame:
    """Four products; the promo item sells at zero price"""
    return pl.DataFrame({
        "product_key": [1, 2, 3, 4],
        "product_name": ["Laptop A", "Phone B", "Cable C", "Free Sample"],
        "category": ["Computers", "Cell phones", "Audio", "Promo"],
        "unit_price_usd": [1000.0, 500.0, 10.0, 0.0],
        "unit_cost_usd": [600.0, 300.0, 4.0, 0.0],
    })


@pytest.fixture
def sample_customers_df() -> pl.DataFrame:
    """Customers 1, 2, 3 and 5; customer 4 is missing on purpose"""
    return pl.DataFrame({
        "customer_key": [1, 2, 3, 5],
        "first_name": ["Ann", "Bob", "Cy", "Dee"],
        "last_name": ["Lee", "Ray", "Fox", "Moss"],
    })


@pytest.fixture
def sample_stores_df() -> pl.DataFrame:
    """Five US stores and two Canadian stores; store 99 is missing on purpose"""
    return pl.DataFrame({
        "store_key": [10, 11, 12, 13, 14, 20, 21],
        "country": ["United States"] * 5 + ["Canada"] * 2,
        "states": ["California", "Texas", "New York", "Florida", "Ohio", "Ontario", "Quebec"],
    })


@pytest.fixture
def sample_sales_df() -> pl.DataFrame:
    """
    Fifteen sale lines.

    Includes a null quantity (order 9), an unknown customer (order 10),
    an unknown product (order 11), an unknown store (order 8) and a
    two-line single order (order 12).
    """
    rows = [
        # order, date, customer, product, store, currency, quantity
        (1, date(2020, 1, 15), 1, 1, 10, "USD", 2),
        (2, date(2020, 2, 10), 2, 2, 11, "USD", 3),
        (3, date(2021, 3, 5), 1, 2, 12, "USD", 1),
        (3, date(2021, 3, 5), 1, 1, 12, "USD", 1),
        (4, date(2021, 3, 20), 3, 3, 13, "USD", 10),
        (5, date(2021, 4, 1), 2, 3, 14, "USD", 2),
        (6, date(2020, 5, 5), 3, 1, 20, "CAD", 1),
        (7, date(2021, 6, 6), 3, 4, 21, "CAD", 5),
        (8, date(2021, 7, 7), 1, 3, 99, "EUR", 1),
        (9, date(2021, 7, 8), 2, 2, 10, "USD", None),
        (10, date(2021, 8, 1), 4, 1, 10, "USD", 1),
        (11, date(2021, 8, 2), 1, 999, 10, "USD", 1),
        (12, date(2021, 9, 9), 5, 3, 13, "USD", 1),
        (12, date(2021, 9, 9), 5, 3, 13, "USD", 1),
        (13, date(2022, 1, 10), 3, 2, 21, "CAD", 1),
    ]
    return pl.DataFrame(
        rows,
        schema={
            "order_number": pl.Int64,
            "order_date": pl.Date,
            "customer_key": pl.Int64,
            "product_key": pl.Int64,
            "store_key": pl.Int64,
            "currency_code": pl.Utf8,
            "quantity": pl.Int64,
        },
        orient="row",
    )


@pytest.fixture
def sample_currency_df() -> pl.DataFrame:
    return pl.DataFrame({
        "currency_code": ["USD", "CAD"],
        "conversion_to_usd": [1.0, 0.74],
    })


@pytest.fixture
def sample_dataset(
    sample_sales_df,
    sample_products_df,
    sample_customers_df,
    sample_stores_df,
    sample_currency_df,
) -> RetailDataset:
    return RetailDataset.from_frames(
        sales=sample_sales_df,
        products=sample_products_df,
        customers=sample_customers_df,
        stores=sample_stores_df,
        currency=sample_currency_df,
    )


@pytest.fixture(scope="session")
def generated_dataset() -> RetailDataset:
    """A larger synthetic dataset for property checks"""
    return DataGenerator(seed=7).generate(
        n_products=40,
        n_customers=80,
        n_stores=23,
        n_orders=600,
    )


@pytest.fixture
def sqlite_engine(tmp_path):
    """File-backed SQLite engine, shared across connections"""
    engine = create_engine(f"sqlite:///{tmp_path / 'retail.db'}")
    yield engine
    engine.dispose()
