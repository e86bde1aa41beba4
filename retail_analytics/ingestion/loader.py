"""
Dataset Loaders

Read the star schema tables into a validated RetailDataset from:
- a directory of CSV, JSON, JSONL or Parquet files (one file per table)
- a relational database reachable through SQLAlchemy

Loaders only read. Schema checks happen in RetailDataset.from_frames, so a
malformed table fails the load before any report runs.
"""

import hashlib
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

import polars as pl
import structlog
from pydantic import BaseModel
from sqlalchemy import Engine, MetaData, Table, inspect, select
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from retail_analytics.config import get_settings
from retail_analytics.dataset import REQUIRED_TABLES, RetailDataset
from retail_analytics.exceptions import DataSourceError

logger = structlog.get_logger(__name__)

OPTIONAL_TABLES = ("currency",)


class FileFormat(str, Enum):
    """Supported file formats"""
    CSV = "csv"
    JSON = "json"
    JSONL = "jsonl"
    PARQUET = "parquet"


class TableLoadResult(BaseModel):
    """Audit record for one loaded table"""
    table: str
    source: str
    rows_loaded: int = 0
    load_duration_seconds: float = 0
    file_hash: Optional[str] = None
    loaded_at: datetime


class DatasetLoader:
    """
    Load the retail tables from a directory of files.

    Table files are named <stem>.<format>, with stems taken from
    DataSourceSettings (sales, products, customers, stores, currency).

    Example:
        loader = DatasetLoader("data/electronics", FileFormat.CSV)
        dataset = loader.load()
    """

    def __init__(
        self,
        source_path: Optional[Union[str, Path]] = None,
        file_format: Optional[Union[FileFormat, str]] = None,
        table_names: Optional[Dict[str, str]] = None,
    ):
        settings = get_settings().data_source
        self.source_path = Path(source_path or settings.source_path)
        self.file_format = FileFormat(file_format or settings.file_format)
        self.null_values = settings.null_values
        self.table_names = {
            "sales": settings.sales_table,
            "products": settings.products_table,
            "customers": settings.customers_table,
            "stores": settings.stores_table,
            "currency": settings.currency_table,
        }
        self.table_names.update(table_names or {})
        self.results: List[TableLoadResult] = []

    def _compute_file_hash(self, file_path: Path) -> str:
        """Compute MD5 hash of file for audit"""
        hash_md5 = hashlib.md5()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(4096), b""):
                hash_md5.update(chunk)
        return hash_md5.hexdigest()

    def table_path(self, table: str) -> Path:
        return self.source_path / f"{self.table_names[table]}.{self.file_format.value}"

    def _read_csv(self, path: Path) -> pl.DataFrame:
        return pl.read_csv(path, null_values=self.null_values, try_parse_dates=True)

    def _read_json(self, path: Path) -> pl.DataFrame:
        return pl.read_json(path)

    def _read_jsonl(self, path: Path) -> pl.DataFrame:
        return pl.read_ndjson(path)

    def _read_parquet(self, path: Path) -> pl.DataFrame:
        return pl.read_parquet(path)

    def read_table(self, table: str) -> pl.DataFrame:
        """
        Read one table file.

        Raises:
            DataSourceError: file missing or unreadable
        """
        path = self.table_path(table)
        if not path.exists():
            raise DataSourceError(table, "file not found", source=str(path))

        readers = {
            FileFormat.CSV: self._read_csv,
            FileFormat.JSON: self._read_json,
            FileFormat.JSONL: self._read_jsonl,
            FileFormat.PARQUET: self._read_parquet,
        }

        started_at = datetime.utcnow()
        try:
            df = readers[self.file_format](path)
        except (pl.exceptions.PolarsError, OSError, ValueError) as e:
            raise DataSourceError(table, str(e), source=str(path)) from e

        self.results.append(
            TableLoadResult(
                table=table,
                source=str(path),
                rows_loaded=len(df),
                load_duration_seconds=(datetime.utcnow() - started_at).total_seconds(),
                file_hash=self._compute_file_hash(path),
                loaded_at=datetime.utcnow(),
            )
        )
        logger.info("Table loaded", table=table, rows=len(df), source=str(path))
        return df

    def load(self) -> RetailDataset:
        """
        Load and validate every table.

        The currency table is read only when its file exists.
        """
        self.results = []
        frames = {table: self.read_table(table) for table in REQUIRED_TABLES}
        for table in OPTIONAL_TABLES:
            if self.table_path(table).exists():
                frames[table] = self.read_table(table)

        return RetailDataset.from_frames(**frames)


class DatabaseLoader:
    """
    Load the retail tables from a relational database.

    Tables are reflected so column types (dates, numerics) come back typed.

    Example:
        loader = DatabaseLoader(create_engine_from_settings())
        dataset = loader.load()
    """

    def __init__(self, engine: Engine, table_names: Optional[Dict[str, str]] = None):
        self.engine = engine
        self.table_names = {t: t for t in REQUIRED_TABLES + OPTIONAL_TABLES}
        self.table_names.update(table_names or {})
        self.results: List[TableLoadResult] = []

    def has_table(self, table: str) -> bool:
        return inspect(self.engine).has_table(self.table_names[table])

    def read_table(self, table: str) -> pl.DataFrame:
        """
        Read a full table.

        Raises:
            DataSourceError: table missing or query failed
        """
        name = self.table_names[table]
        source = self.engine.url.render_as_string(hide_password=True)
        started_at = datetime.utcnow()

        try:
            reflected = Table(name, MetaData(), autoload_with=self.engine)
            with self.engine.connect() as conn:
                df = pl.read_database(select(reflected), connection=conn)
        except NoSuchTableError as e:
            raise DataSourceError(table, f"table '{name}' does not exist", source=source) from e
        except SQLAlchemyError as e:
            raise DataSourceError(table, str(e), source=source) from e

        self.results.append(
            TableLoadResult(
                table=table,
                source=f"{source}/{name}",
                rows_loaded=len(df),
                load_duration_seconds=(datetime.utcnow() - started_at).total_seconds(),
                loaded_at=datetime.utcnow(),
            )
        )
        logger.info("Table loaded", table=table, rows=len(df), source=source)
        return df

    def load(self) -> RetailDataset:
        """Load and validate every table; currency only when present"""
        self.results = []
        frames = {table: self.read_table(table) for table in REQUIRED_TABLES}
        for table in OPTIONAL_TABLES:
            if self.has_table(table):
                frames[table] = self.read_table(table)

        return RetailDataset.from_frames(**frames)
