"""
Database Seeding

Writes a RetailDataset into a database laid out like the retailer's
source schema. Used to stand up demo and test databases for
DatabaseLoader; report runs themselves never write.
"""

from typing import Any, Dict, List

import polars as pl
import structlog
from sqlalchemy import Engine, insert

from retail_analytics.database.models import Base, Currency, Customer, Product, Sale, Store
from retail_analytics.dataset import RetailDataset

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000


def _records(df: pl.DataFrame, model: Any) -> List[Dict[str, Any]]:
    """Rows of df restricted to the model's columns"""
    columns = [c.name for c in model.__table__.columns if c.name in df.columns]
    return df.select(columns).to_dicts()


def execute_batch_insert(engine: Engine, model: Any, records: List[Dict[str, Any]]) -> int:
    """Insert records in chunks inside one transaction"""
    if not records:
        return 0

    with engine.begin() as conn:
        for i in range(0, len(records), CHUNK_SIZE):
            conn.execute(insert(model), records[i:i + CHUNK_SIZE])

    logger.info(f"Inserted {len(records)} records into {model.__tablename__}")
    return len(records)


def seed_database(dataset: RetailDataset, engine: Engine) -> Dict[str, int]:
    """
    Create the schema and load every table of the dataset.

    Dimensions are written before the sales facts.

    Returns:
        Rows inserted per table
    """
    Base.metadata.create_all(engine)

    tables = [
        (Product, dataset.products),
        (Customer, dataset.customers),
        (Store, dataset.stores),
        (Sale, dataset.sales),
    ]
    if dataset.currency is not None:
        tables.insert(0, (Currency, dataset.currency))

    counts = {
        model.__tablename__: execute_batch_insert(engine, model, _records(df, model))
        for model, df in tables
    }
    logger.info("Database seeded", **counts)
    return counts
