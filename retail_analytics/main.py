"""
Report Runner Entry Point

Loads the retailer dataset, validates it and prints the selected reports.

Usage:
    retail-analytics --source data/electronics
    retail-analytics --database-url postgresql+psycopg2://... --report repeat_buyers
    retail-analytics --source data/electronics --diagnostics
"""

import argparse
import sys
from typing import List, Optional

import polars as pl
import structlog

from retail_analytics.config import get_settings
from retail_analytics.config.logging import bind_run_context, configure_logging
from retail_analytics.database.connection import check_connection, create_engine_from_settings
from retail_analytics.dataset import RetailDataset
from retail_analytics.exceptions import DataSourceError, RetailAnalyticsError
from retail_analytics.ingestion.loader import DatabaseLoader, DatasetLoader, FileFormat
from retail_analytics.quality.validators import distinct_currency_codes, find_null_quantity, run_diagnostics
from retail_analytics.reports import REPORTS, ReportRunner

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retail-analytics",
        description="Electronics retailer analytical reports",
    )
    parser.add_argument("--source", help="Directory holding the table files")
    parser.add_argument(
        "--format",
        choices=[f.value for f in FileFormat],
        help="Table file format",
    )
    parser.add_argument("--database-url", help="Read tables from this SQLAlchemy URL instead of files")
    parser.add_argument(
        "--report",
        action="append",
        choices=list(REPORTS),
        metavar="NAME",
        help="Report to run (repeatable, default: all)",
    )
    parser.add_argument("--parallel", action="store_true", default=None, help="Evaluate reports on a thread pool")
    parser.add_argument("--diagnostics", action="store_true", help="Run data quality diagnostics instead of reports")
    parser.add_argument("--log-level", help="Override log level")
    parser.add_argument("--list", action="store_true", help="List available reports and exit")
    return parser


def load_dataset(args: argparse.Namespace) -> RetailDataset:
    """Load from the database when a URL is given, otherwise from files"""
    if args.database_url:
        engine = create_engine_from_settings(args.database_url)
        try:
            if not check_connection(engine):
                raise DataSourceError(
                    "sales",
                    "database is unreachable",
                    source=engine.url.render_as_string(hide_password=True),
                )
            return DatabaseLoader(engine).load()
        finally:
            engine.dispose()

    return DatasetLoader(args.source, args.format).load()


def print_diagnostics(dataset: RetailDataset) -> None:
    null_rows = find_null_quantity(dataset.sales)
    print(f"Sales rows with null quantity: {null_rows.height}")
    if null_rows.height:
        print(null_rows)

    print("Currency codes on sales:")
    print(distinct_currency_codes(dataset.sales))

    for table, result in run_diagnostics(dataset).items():
        print(f"\n[{table}] {result.status.value}: {result.passed_checks}/{result.total_checks} checks passed")
        for check in result.failures:
            print(f"  - {check.severity.value}: {check.message}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.list:
        for name, spec in REPORTS.items():
            print(f"{name:28} {spec.title}")
        return 0

    configure_logging(args.log_level)
    settings = get_settings()
    bind_run_context(
        source="database" if args.database_url else "files",
        mode="diagnostics" if args.diagnostics else "reports",
    )

    try:
        dataset = load_dataset(args)
        if args.diagnostics:
            print_diagnostics(dataset)
            return 0

        runner = ReportRunner(dataset, parallel=args.parallel)
        results = runner.run_all(args.report)
    except RetailAnalyticsError as e:
        logger.error("Report run aborted", error=str(e))
        return 1

    with pl.Config(tbl_rows=settings.reports.print_rows, tbl_cols=-1, tbl_width_chars=160):
        for result in results.values():
            print(f"\n== {result.title} ({result.row_count} rows)")
            print(result.frame)

    return 0


if __name__ == "__main__":
    sys.exit(main())
