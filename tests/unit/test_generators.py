"""
Unit Tests - Synthetic Data Generation
"""
from datetime import date

import polars as pl
from polars.testing import assert_frame_equal

from retail_analytics.data.generators import CONVERSION_TO_USD, STORE_LOCATIONS, DataGenerator
from retail_analytics.quality import ValidationStatus, run_diagnostics


class TestDataGenerator:
    """Tests for DataGenerator"""

    def test_same_seed_same_data(self):
        """Test generation is reproducible"""
        first = DataGenerator(seed=11).generate(n_products=10, n_customers=20, n_stores=8, n_orders=50)
        second = DataGenerator(seed=11).generate(n_products=10, n_customers=20, n_stores=8, n_orders=50)

        assert_frame_equal(first.sales, second.sales)
        assert_frame_equal(first.customers, second.customers)

    def test_generated_data_is_clean(self, generated_dataset):
        """Test generated tables pass every diagnostic"""
        results = run_diagnostics(generated_dataset)

        for result in results.values():
            assert result.status == ValidationStatus.PASSED

    def test_every_country_has_a_store(self, generated_dataset):
        """Test round-robin store placement"""
        assert set(generated_dataset.stores["country"].unique()) == set(STORE_LOCATIONS)

    def test_currency_follows_store_country(self, generated_dataset):
        """Test sales carry their store's currency"""
        joined = generated_dataset.sales.join(generated_dataset.stores, on="store_key")
        expected = joined["country"].replace_strict({c: v[0] for c, v in STORE_LOCATIONS.items()})

        assert (joined["currency_code"] == expected).all()
        assert set(generated_dataset.currency["currency_code"]) == set(CONVERSION_TO_USD)

    def test_dates_in_range(self):
        """Test order dates stay within the requested window"""
        dataset = DataGenerator(seed=3).generate(
            n_products=8,
            n_customers=10,
            n_stores=6,
            n_orders=40,
            start_date=date(2020, 1, 1),
            end_date=date(2020, 12, 31),
        )

        assert dataset.sales["order_date"].min() >= date(2020, 1, 1)
        assert dataset.sales["order_date"].max() <= date(2020, 12, 31)
        assert dataset.sales["order_number"].n_unique() == 40

    def test_orders_have_distinct_products(self, generated_dataset):
        """Test no product repeats within an order"""
        per_order = generated_dataset.sales.group_by("order_number").agg(
            pl.len().alias("lines"),
            pl.col("product_key").n_unique().alias("products"),
        )

        assert (per_order["lines"] == per_order["products"]).all()

    def test_write_files(self, tmp_path, generated_dataset):
        """Test one file per table"""
        written = DataGenerator().write(generated_dataset, tmp_path / "out", "parquet")

        assert sorted(written) == ["currency", "customers", "products", "sales", "stores"]
        assert all(path.exists() and path.suffix == ".parquet" for path in written.values())
