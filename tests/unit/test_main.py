"""
Unit Tests - Command Line Entry Point
"""
import pytest
from sqlalchemy import create_engine

from retail_analytics.data.generators import DataGenerator
from retail_analytics.exceptions import DataSourceError
from retail_analytics.ingestion import seed_database
from retail_analytics.main import build_parser, load_dataset, main
from retail_analytics.reports import REPORTS


@pytest.fixture
def dataset_dir(tmp_path, sample_dataset):
    DataGenerator().write(sample_dataset, tmp_path)
    return tmp_path


class TestMain:
    """Tests for the retail-analytics command"""

    def test_list_reports(self, capsys):
        """Test --list prints every report"""
        assert main(["--list"]) == 0

        out = capsys.readouterr().out
        for name in REPORTS:
            assert name in out

    def test_run_selected_reports(self, dataset_dir, capsys):
        """Test selected reports are printed with their titles"""
        code = main([
            "--source", str(dataset_dir),
            "--format", "csv",
            "--report", "repeat_buyers",
            "--report", "revenue_by_category",
        ])

        out = capsys.readouterr().out
        assert code == 0
        assert "Best customers (repeat buyers) (3 rows)" in out
        assert "Revenue by category (4 rows)" in out
        assert "Monthly revenue trend" not in out

    def test_run_all_parallel(self, dataset_dir, capsys):
        """Test a full parallel run prints all reports"""
        assert main(["--source", str(dataset_dir), "--parallel"]) == 0

        out = capsys.readouterr().out
        for spec in REPORTS.values():
            assert spec.title in out

    def test_diagnostics(self, dataset_dir, capsys):
        """Test diagnostics print findings instead of reports"""
        assert main(["--source", str(dataset_dir), "--diagnostics"]) == 0

        out = capsys.readouterr().out
        assert "Sales rows with null quantity: 1" in out
        assert "EUR" in out
        assert "[sales] partial" in out
        assert "[products] passed" in out

    def test_database_source(self, tmp_path, sample_dataset, capsys):
        """Test reports can be read from a database URL"""
        url = f"sqlite:///{tmp_path / 'retail.db'}"
        engine = create_engine(url)
        seed_database(sample_dataset, engine)
        engine.dispose()

        assert main(["--database-url", url, "--report", "top_stores_per_country"]) == 0
        assert "Top stores per country (5 rows)" in capsys.readouterr().out

    def test_unreachable_database_fails(self, tmp_path, capsys):
        """Test an unreachable database URL gives exit code 1 before loading"""
        url = f"sqlite:///{tmp_path / 'missing' / 'retail.db'}"

        assert main(["--database-url", url]) == 1
        assert "== " not in capsys.readouterr().out

    def test_unreachable_database_raises_source_error(self, tmp_path):
        """Test load_dataset reports the unreachable database as a source error"""
        args = build_parser().parse_args(["--database-url", f"sqlite:///{tmp_path / 'missing' / 'retail.db'}"])

        with pytest.raises(DataSourceError, match="unreachable") as exc_info:
            load_dataset(args)

        assert exc_info.value.table == "sales"

    def test_missing_source_fails(self, tmp_path):
        """Test a missing dataset gives exit code 1"""
        assert main(["--source", str(tmp_path / "nowhere")]) == 1

    def test_unknown_report_rejected_by_parser(self):
        """Test argparse refuses unregistered report names"""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--report", "nonexistent"])
