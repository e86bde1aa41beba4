"""
Data Quality Module
"""
from .validators import (
    DataValidator,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
    distinct_currency_codes,
    find_null_quantity,
    run_diagnostics,
    validate_schema,
)

__all__ = [
    "DataValidator",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
    "distinct_currency_codes",
    "find_null_quantity",
    "run_diagnostics",
    "validate_schema",
]
