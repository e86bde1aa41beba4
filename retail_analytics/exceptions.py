"""
Exception hierarchy for the analytics package.
"""

from typing import List, Optional


class RetailAnalyticsError(Exception):
    """Base class for all package errors"""


class DatasetError(RetailAnalyticsError):
    """Input dataset could not be used"""


class SchemaValidationError(DatasetError):
    """
    Raised when an input table is missing required columns or a column
    has the wrong type. Fatal: no report is produced.
    """

    def __init__(self, table: str, errors: List[str]):
        self.table = table
        self.errors = list(errors)
        super().__init__(f"Invalid schema for table '{table}': " + "; ".join(self.errors))


class DataSourceError(DatasetError):
    """A loader could not locate or read a source table"""

    def __init__(self, table: str, message: str, source: Optional[str] = None):
        self.table = table
        self.source = source
        super().__init__(f"Cannot load table '{table}'" + (f" from {source}" if source else "") + f": {message}")


class ReportError(RetailAnalyticsError):
    """Report evaluation failed"""


class UnknownReportError(ReportError):
    """Requested report name is not registered"""

    def __init__(self, name: str, available: List[str]):
        self.name = name
        self.available = list(available)
        super().__init__(f"Unknown report '{name}'. Available: {', '.join(self.available)}")
