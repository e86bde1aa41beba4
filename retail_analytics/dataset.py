"""
Retail Dataset

Immutable snapshot of the star schema tables a report run works on.
"""

from dataclasses import dataclass
from typing import Dict, Optional

import polars as pl
import structlog

from retail_analytics.exceptions import SchemaValidationError
from retail_analytics.quality.validators import validate_schema

logger = structlog.get_logger(__name__)

REQUIRED_TABLES = ("sales", "products", "customers", "stores")

DATE_FORMATS = ["%Y-%m-%d", "%m/%d/%Y", "%d-%m-%Y"]


def _coerce_order_date(sales: pl.DataFrame) -> pl.DataFrame:
    """Normalize order_date to a Date column"""
    dtype = sales.schema["order_date"]

    if dtype == pl.Date:
        return sales
    if dtype == pl.Datetime:
        return sales.with_columns(pl.col("order_date").dt.date())
    if dtype == pl.Null:
        return sales.with_columns(pl.col("order_date").cast(pl.Date))
    if dtype != pl.Utf8:
        raise SchemaValidationError("sales", [f"Column 'order_date' must be a date, got {dtype}"])

    # String dates: first format that parses every non-null value wins
    for fmt in DATE_FORMATS:
        parsed = sales["order_date"].str.strptime(pl.Date, fmt, strict=False)
        if parsed.null_count() == sales["order_date"].null_count():
            return sales.with_columns(parsed.alias("order_date"))

    # Timestamps serialized as text; inference raises when no format fits
    try:
        parsed = sales["order_date"].str.to_datetime(strict=False).dt.date()
    except pl.exceptions.ComputeError:
        parsed = None
    if parsed is not None and parsed.null_count() == sales["order_date"].null_count():
        return sales.with_columns(parsed.alias("order_date"))

    raise SchemaValidationError("sales", ["Column 'order_date' contains unparseable dates"])


def _coerce_prices(products: pl.DataFrame) -> pl.DataFrame:
    """Prices to Float64 so Decimal and integer sources aggregate alike"""
    return products.with_columns(
        pl.col("unit_price_usd").cast(pl.Float64),
        pl.col("unit_cost_usd").cast(pl.Float64),
    )


@dataclass(frozen=True)
class RetailDataset:
    """
    Validated input tables for the report engine.

    Build with RetailDataset.from_frames so schemas are checked and
    order_date is normalized. The currency table is optional and only
    used by diagnostics.
    """
    sales: pl.DataFrame
    products: pl.DataFrame
    customers: pl.DataFrame
    stores: pl.DataFrame
    currency: Optional[pl.DataFrame] = None

    @classmethod
    def from_frames(
        cls,
        sales: pl.DataFrame,
        products: pl.DataFrame,
        customers: pl.DataFrame,
        stores: pl.DataFrame,
        currency: Optional[pl.DataFrame] = None,
    ) -> "RetailDataset":
        """
        Validate and normalize the input tables.

        Raises:
            SchemaValidationError: a table is missing a column or has a wrong type
        """
        tables = {"sales": sales, "products": products, "customers": customers, "stores": stores}
        if currency is not None:
            tables["currency"] = currency

        for name, df in tables.items():
            if df is None:
                raise SchemaValidationError(name, ["Table not provided"])
            validate_schema(name, df)

        dataset = cls(
            sales=_coerce_order_date(sales),
            products=_coerce_prices(products),
            customers=customers,
            stores=stores,
            currency=currency,
        )
        logger.info("Dataset validated", **dataset.row_counts())
        return dataset

    def row_counts(self) -> Dict[str, int]:
        """Row count per loaded table"""
        counts = {name: getattr(self, name).height for name in REQUIRED_TABLES}
        if self.currency is not None:
            counts["currency"] = self.currency.height
        return counts
