"""
Unit Tests - Configuration
"""
import pytest
from pydantic import ValidationError

from retail_analytics.config import Settings


class TestSettings:
    """Tests for Settings"""

    def test_defaults(self, monkeypatch):
        """Test report defaults"""
        monkeypatch.delenv("REPORT_PRECISION", raising=False)
        monkeypatch.delenv("REPORT_TOP_N_STORES", raising=False)

        settings = Settings()

        assert settings.reports.precision == 2
        assert settings.reports.top_n_stores == 3
        assert settings.reports.quartile_buckets == 4
        assert settings.data_source.file_format in ("csv", "parquet", "json", "jsonl")

    def test_environment_overrides(self, monkeypatch):
        """Test sections read their prefixed variables"""
        monkeypatch.setenv("REPORT_TOP_N_STORES", "5")
        monkeypatch.setenv("REPORT_PARALLEL", "true")
        monkeypatch.setenv("DATA_FILE_FORMAT", "PARQUET")
        monkeypatch.setenv("APP_ENV", "Staging")

        settings = Settings()

        assert settings.reports.top_n_stores == 5
        assert settings.reports.parallel is True
        assert settings.data_source.file_format == "parquet"
        assert settings.app_env == "staging"
        assert not settings.is_production

    def test_database_url_override(self, monkeypatch):
        """Test DATABASE_URL wins over host settings"""
        monkeypatch.setenv("DATABASE_URL", "sqlite:///retail.db")

        assert Settings().database.sync_url == "sqlite:///retail.db"

    def test_database_url_from_parts(self, monkeypatch):
        """Test URL assembled from host settings"""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("POSTGRES_HOST", "db.internal")
        monkeypatch.setenv("POSTGRES_PASSWORD", "s3cret")

        url = Settings().database.sync_url

        assert url.startswith("postgresql+psycopg2://")
        assert "db.internal:5432" in url
        assert "s3cret" in url

    def test_database_name_from_env(self, monkeypatch):
        """Test POSTGRES_DB selects the database name"""
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("POSTGRES_DB", "sales_dw")

        assert Settings().database.sync_url.endswith("/sales_dw")

    def test_invalid_environment(self, monkeypatch):
        """Test unknown environments are rejected"""
        monkeypatch.setenv("APP_ENV", "moon")

        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_precision(self, monkeypatch):
        """Test negative precision is rejected"""
        monkeypatch.setenv("REPORT_PRECISION", "-1")

        with pytest.raises(ValidationError):
            Settings()
