"""
Unit Tests - Database Layer
"""
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session

from retail_analytics.database import Sale, Store, check_connection, create_engine_from_settings
from retail_analytics.ingestion import seed_database


class TestConnection:
    """Tests for engine helpers"""

    def test_check_connection(self, sqlite_engine):
        """Test a reachable database is healthy"""
        assert check_connection(sqlite_engine) is True

    def test_check_connection_failure(self, tmp_path):
        """Test an unreachable database reports unhealthy"""
        engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'x.db'}")

        assert check_connection(engine) is False

    def test_engine_url_override(self, tmp_path):
        """Test an explicit URL replaces the configured one"""
        url = f"sqlite:///{tmp_path / 'override.db'}"
        engine = create_engine_from_settings(url)

        try:
            assert engine.url.render_as_string() == url
            assert check_connection(engine) is True
        finally:
            engine.dispose()


class TestModels:
    """Tests for the ORM models over seeded tables"""

    def test_models_read_seeded_rows(self, sqlite_engine, sample_dataset):
        """Test seeded tables are visible through the models"""
        seed_database(sample_dataset, sqlite_engine)

        with Session(sqlite_engine) as session:
            stores = session.scalars(select(Store).order_by(Store.store_key)).all()
            sales = session.scalar(select(func.count()).select_from(Sale))

        assert [s.store_key for s in stores] == [10, 11, 12, 13, 14, 20, 21]
        assert stores[0].country == "United States"
        assert sales == 15
