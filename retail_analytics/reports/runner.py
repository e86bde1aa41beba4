"""
Report Runner

Evaluates a selection of reports over one dataset, sequentially or on a
thread pool. Reports share no mutable state, so the execution mode only
changes wall-clock time; results always come back in registry order.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import polars as pl
import structlog

from retail_analytics.config import get_settings
from retail_analytics.dataset import RetailDataset
from retail_analytics.exceptions import UnknownReportError
from .engine import REPORTS, ReportEngine

logger = structlog.get_logger(__name__)


@dataclass
class ReportResult:
    """Result of one report evaluation"""
    name: str
    title: str
    frame: pl.DataFrame
    started_at: datetime
    completed_at: datetime
    duration_seconds: float

    @property
    def row_count(self) -> int:
        return self.frame.height


class ReportRunner:
    """
    Runs registered reports against a dataset.

    Example:
        runner = ReportRunner(dataset, parallel=True)
        results = runner.run_all()
        results["revenue_by_category"].frame
    """

    def __init__(
        self,
        dataset: RetailDataset,
        engine: Optional[ReportEngine] = None,
        parallel: Optional[bool] = None,
        max_workers: Optional[int] = None,
    ):
        settings = get_settings().reports
        self.engine = engine or ReportEngine(
            dataset,
            precision=settings.precision,
            top_n_stores=settings.top_n_stores,
            quartile_buckets=settings.quartile_buckets,
        )
        self.parallel = settings.parallel if parallel is None else parallel
        self.max_workers = max_workers or settings.max_workers

    def run(self, name: str) -> ReportResult:
        """Evaluate a single report"""
        if name not in REPORTS:
            raise UnknownReportError(name, ReportEngine.available_reports())

        started_at = datetime.utcnow()
        try:
            frame = self.engine.run(name)
        except Exception:
            logger.exception("Report failed", report=name)
            raise
        completed_at = datetime.utcnow()

        result = ReportResult(
            name=name,
            title=REPORTS[name].title,
            frame=frame,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
        )
        logger.debug(
            "Report complete",
            report=name,
            rows=result.row_count,
            duration=f"{result.duration_seconds:.3f}s",
        )
        return result

    def run_all(self, names: Optional[Sequence[str]] = None) -> Dict[str, ReportResult]:
        """
        Evaluate the named reports, or every registered report.

        Returns:
            Results keyed by report name, in registry order
        """
        selected = self._select(names)
        logger.info("Running reports", count=len(selected), parallel=self.parallel)

        if self.parallel and len(selected) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="report") as pool:
                results = list(pool.map(self.run, selected))
        else:
            results = [self.run(name) for name in selected]

        total_duration = sum(r.duration_seconds for r in results)
        logger.info(
            "Reports complete",
            count=len(results),
            rows=sum(r.row_count for r in results),
            duration=f"{total_duration:.2f}s",
        )
        return {r.name: r for r in results}

    @staticmethod
    def _select(names: Optional[Sequence[str]]) -> List[str]:
        if not names:
            return ReportEngine.available_reports()

        unknown = [n for n in names if n not in REPORTS]
        if unknown:
            raise UnknownReportError(unknown[0], ReportEngine.available_reports())
        # Registry order, duplicates dropped
        return [n for n in REPORTS if n in set(names)]
