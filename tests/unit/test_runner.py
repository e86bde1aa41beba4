"""
Unit Tests - Report Runner
"""
import pytest
from polars.testing import assert_frame_equal

from retail_analytics.exceptions import UnknownReportError
from retail_analytics.reports import REPORTS, ReportEngine, ReportRunner


class TestReportRunner:
    """Tests for ReportRunner"""

    def test_run_all_in_registry_order(self, sample_dataset):
        """Test every report runs and results keep registry order"""
        results = ReportRunner(sample_dataset, parallel=False).run_all()

        assert list(results) == list(REPORTS)
        assert results["repeat_buyers"].title == REPORTS["repeat_buyers"].title
        assert results["repeat_buyers"].row_count == 3

    def test_parallel_matches_sequential(self, generated_dataset):
        """Test the thread pool gives identical frames"""
        sequential = ReportRunner(generated_dataset, parallel=False).run_all()
        parallel = ReportRunner(generated_dataset, parallel=True, max_workers=4).run_all()

        assert list(parallel) == list(sequential)
        for name, result in sequential.items():
            assert_frame_equal(parallel[name].frame, result.frame)

    def test_selection_deduplicated_and_ordered(self, sample_dataset):
        """Test a requested subset comes back once each, in registry order"""
        runner = ReportRunner(sample_dataset, parallel=False)

        results = runner.run_all(["profit_margin_by_category", "revenue_by_store", "revenue_by_store"])

        assert list(results) == ["revenue_by_store", "profit_margin_by_category"]

    def test_unknown_report_rejected(self, sample_dataset):
        """Test unknown names fail before anything runs"""
        runner = ReportRunner(sample_dataset)

        with pytest.raises(UnknownReportError):
            runner.run_all(["revenue_by_store", "nonexistent"])
        with pytest.raises(UnknownReportError):
            runner.run("nonexistent")

    def test_custom_engine(self, sample_dataset):
        """Test a preconfigured engine is used"""
        engine = ReportEngine(sample_dataset, top_n_stores=1)

        result = ReportRunner(sample_dataset, engine=engine).run("top_stores_per_country")

        assert result.row_count == 2
        assert result.duration_seconds >= 0
        assert result.completed_at >= result.started_at
