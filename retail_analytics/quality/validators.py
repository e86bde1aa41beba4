"""
Data Validation Module

Rule-based checks for the retail star schema tables.

Two layers:
- Schema validation: required columns and column types. Failures are fatal
  and raise SchemaValidationError before any report runs.
- Diagnostics: row-level quality checks (null or negative quantity, price
  below cost, orphan fact keys, unknown currency codes). These never abort
  a run; they are reported as warnings for the caller to act on.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from retail_analytics.exceptions import SchemaValidationError

if TYPE_CHECKING:
    from retail_analytics.dataset import RetailDataset

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Critical - blocks the run
    WARNING = "warning"  # Non-critical - logged but continues
    INFO = "info"  # Informational only


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


class ColumnKind(str, Enum):
    """Logical column types accepted by the schema checks"""
    ANY = "any"
    STRING = "string"
    INTEGER = "integer"
    NUMERIC = "numeric"
    TEMPORAL = "temporal"


# Required columns per table. Temporal columns may arrive as strings and are
# parsed by RetailDataset, so STRING is accepted there as well.
TABLE_SCHEMAS: Dict[str, Dict[str, ColumnKind]] = {
    "sales": {
        "order_number": ColumnKind.ANY,
        "order_date": ColumnKind.TEMPORAL,
        "customer_key": ColumnKind.ANY,
        "product_key": ColumnKind.ANY,
        "store_key": ColumnKind.ANY,
        "currency_code": ColumnKind.STRING,
        "quantity": ColumnKind.INTEGER,
    },
    "products": {
        "product_key": ColumnKind.ANY,
        "product_name": ColumnKind.STRING,
        "category": ColumnKind.STRING,
        "unit_price_usd": ColumnKind.NUMERIC,
        "unit_cost_usd": ColumnKind.NUMERIC,
    },
    "customers": {
        "customer_key": ColumnKind.ANY,
        "first_name": ColumnKind.STRING,
        "last_name": ColumnKind.STRING,
    },
    "stores": {
        "store_key": ColumnKind.ANY,
        "country": ColumnKind.STRING,
        "states": ColumnKind.STRING,
    },
    "currency": {
        "currency_code": ColumnKind.STRING,
        "conversion_to_usd": ColumnKind.NUMERIC,
    },
}


def _matches_kind(dtype: pl.DataType, kind: ColumnKind) -> bool:
    if kind == ColumnKind.ANY or dtype == pl.Null:
        return True
    if kind == ColumnKind.STRING:
        return dtype in (pl.Utf8, pl.Categorical) or isinstance(dtype, pl.Enum)
    if kind == ColumnKind.INTEGER:
        return dtype.is_integer()
    if kind == ColumnKind.NUMERIC:
        return dtype.is_numeric()
    if kind == ColumnKind.TEMPORAL:
        # Calendar values only; Time and Duration carry no date
        return dtype in (pl.Date, pl.Datetime, pl.Utf8)
    return False


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100

    @property
    def failures(self) -> List[ValidationCheck]:
        """Checks that did not pass, any severity"""
        return [c for c in self.checks if not c.passed]


class DataValidator:
    """
    Data validator with a chainable check suite.

    Example:
        validator = DataValidator(table="sales")
        validator.add_required_columns_check(["quantity"])
        validator.add_not_null_check("quantity", severity=ValidationSeverity.WARNING)
        result = validator.validate(df)
    """

    def __init__(self, table: str = "table", strict_mode: bool = False):
        self.table = table
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    @staticmethod
    def _missing(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
        return ValidationCheck(
            name=name,
            passed=False,
            severity=severity,
            message=f"Column '{column}' not found",
        )

    def add_required_columns_check(
        self,
        columns: List[str],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that every listed column is present"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            missing = [c for c in columns if c not in df.columns]
            return ValidationCheck(
                name="required_columns",
                passed=not missing,
                severity=severity,
                message=f"Missing columns: {', '.join(missing)}" if missing else "All required columns present",
                details={"missing": missing},
            )

        self._checks.append(check)
        return self

    def add_type_check(
        self,
        column: str,
        kind: ColumnKind,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that a column has a dtype of the given logical kind"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            # Absence is reported by the required columns check
            if column not in df.columns:
                return ValidationCheck(
                    name=f"type_{column}",
                    passed=True,
                    severity=severity,
                    message=f"Column '{column}' absent, type not checked",
                )

            dtype = df.schema[column]
            passed = _matches_kind(dtype, kind)
            return ValidationCheck(
                name=f"type_{column}",
                passed=passed,
                severity=severity,
                message=f"Column '{column}' must be {kind.value}, got {dtype}" if not passed else f"Column '{column}' is {kind.value}",
                details={"expected": kind.value, "actual": str(dtype)},
            )

        self._checks.append(check)
        return self

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return self._missing(f"not_null_{column}", column, severity)

            null_count = df[column].null_count()
            total = len(df)
            passed = null_count == 0

            return ValidationCheck(
                name=f"not_null_{column}",
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                details={"null_count": null_count, "null_percentage": (null_count / total) * 100 if total > 0 else 0},
                failed_rows=null_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within specified range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return self._missing(f"range_{column}", column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)

            if not conditions:
                return ValidationCheck(
                    name=f"range_{column}",
                    passed=True,
                    severity=severity,
                    message="No range specified",
                )

            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            out_of_range = df.filter(combined).height
            total = len(df)
            passed = out_of_range == 0

            return ValidationCheck(
                name=f"range_{column}",
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]" if not passed else "All values in range",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], int],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """
        Add custom validation check.

        check_func returns the number of offending rows; zero passes.
        message_on_fail may reference {count}.
        """
        def check(df: pl.DataFrame) -> ValidationCheck:
            failed = int(check_func(df))
            return ValidationCheck(
                name=name,
                passed=failed == 0,
                severity=severity,
                message="Check passed" if failed == 0 else message_on_fail.format(count=failed),
                failed_rows=failed,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add referential integrity check"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            if column not in df.columns:
                return self._missing(f"ref_integrity_{column}", column, severity)

            orphans = df.filter(
                ~pl.col(column).is_in(reference_df[reference_column].unique())
                & pl.col(column).is_not_null()
            ).height
            total = len(df)
            passed = orphans == 0

            return ValidationCheck(
                name=f"ref_integrity_{column}",
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {orphans} orphan records" if not passed else "Referential integrity maintained",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.utcnow()
        results = []

        logger.debug("Running validation checks", table=self.table, checks=len(self._checks), rows=len(df))

        for check_func in self._checks:
            result = check_func(df)
            results.append(result)

            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    table=self.table,
                    message=result.message,
                    severity=result.severity.value,
                )

        completed_at = datetime.utcnow()

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=completed_at,
        )


# =============================================================================
# SCHEMA VALIDATION
# =============================================================================

def create_schema_validator(table: str) -> DataValidator:
    """Create the fatal schema validator for one of the known tables"""
    if table not in TABLE_SCHEMAS:
        raise ValueError(f"No schema registered for table: {table}")

    schema = TABLE_SCHEMAS[table]
    validator = DataValidator(table=table).add_required_columns_check(list(schema))
    for column, kind in schema.items():
        validator.add_type_check(column, kind)
    return validator


def validate_schema(table: str, df: pl.DataFrame) -> ValidationResult:
    """
    Validate a table's columns and types.

    Raises:
        SchemaValidationError: if any required column is missing or mistyped
    """
    result = create_schema_validator(table).validate(df)
    if result.status == ValidationStatus.FAILED:
        errors = [c.message for c in result.checks if not c.passed and c.severity == ValidationSeverity.ERROR]
        raise SchemaValidationError(table, errors)
    return result


# =============================================================================
# DIAGNOSTICS
# =============================================================================

def find_null_quantity(sales: pl.DataFrame) -> pl.DataFrame:
    """Sales rows whose quantity is null"""
    return sales.filter(pl.col("quantity").is_null())


def distinct_currency_codes(sales: pl.DataFrame) -> pl.DataFrame:
    """Distinct currency codes present on sales, sorted"""
    return sales.select(pl.col("currency_code").unique()).sort("currency_code", nulls_last=True)


def create_sales_diagnostics(dataset: "RetailDataset") -> DataValidator:
    """Create warning-level quality checks for the sales fact table"""
    warn = ValidationSeverity.WARNING
    validator = (
        DataValidator(table="sales")
        .add_not_null_check("quantity", severity=warn)
        .add_range_check("quantity", min_value=0, severity=warn)
        .add_not_null_check("order_date", severity=warn)
        .add_referential_integrity_check("product_key", dataset.products, "product_key", severity=warn)
        .add_referential_integrity_check("customer_key", dataset.customers, "customer_key", severity=warn)
        .add_referential_integrity_check("store_key", dataset.stores, "store_key", severity=warn)
    )
    if dataset.currency is not None:
        validator.add_referential_integrity_check(
            "currency_code", dataset.currency, "currency_code", severity=warn
        )
    return validator


def create_products_diagnostics() -> DataValidator:
    """Create warning-level quality checks for the products dimension"""
    warn = ValidationSeverity.WARNING
    return (
        DataValidator(table="products")
        .add_not_null_check("unit_price_usd", severity=warn)
        .add_range_check("unit_price_usd", min_value=0, severity=warn)
        .add_range_check("unit_cost_usd", min_value=0, severity=warn)
        .add_custom_check(
            name="price_not_below_cost",
            check_func=lambda df: df.filter(pl.col("unit_price_usd") < pl.col("unit_cost_usd")).height,
            message_on_fail="{count} products priced below cost",
            severity=warn,
        )
    )


def run_diagnostics(dataset: "RetailDataset") -> Dict[str, ValidationResult]:
    """
    Run the data quality diagnostics suite.

    Nothing here raises; findings are returned per table for the caller.
    """
    results = {
        "sales": create_sales_diagnostics(dataset).validate(dataset.sales),
        "products": create_products_diagnostics().validate(dataset.products),
    }

    logger.info(
        "Diagnostics complete",
        **{f"{table}_status": r.status.value for table, r in results.items()},
        warnings=sum(r.warning_count for r in results.values()),
    )
    return results
