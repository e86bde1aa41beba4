"""
Data Ingestion Module
"""
from .loader import DatabaseLoader, DatasetLoader, FileFormat, TableLoadResult
from .seed_db import seed_database

__all__ = [
    "DatabaseLoader",
    "DatasetLoader",
    "FileFormat",
    "TableLoadResult",
    "seed_database",
]
