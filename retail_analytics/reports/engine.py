"""
Analytical Report Engine

Computes the retailer's descriptive reports from a validated RetailDataset.

Every report is a pure function of the dataset:
- Facts join dimensions with inner-join semantics; sales whose keys do not
  resolve are left out of that report.
- Line revenue is unit_price_usd * quantity, line profit is
  (unit_price_usd - unit_cost_usd) * quantity.
- Sums keep full precision; monetary columns are rounded only in each
  report's final projection.
- A zero or missing denominator yields a null ratio.
- Row order is fully determined by explicit sort keys.
"""

from typing import Callable, Dict, List, NamedTuple, Optional

import polars as pl
import structlog

from retail_analytics.dataset import RetailDataset
from retail_analytics.exceptions import UnknownReportError
from .windows import safe_ratio, with_lag, with_ntile, with_rank, with_row_number

logger = structlog.get_logger(__name__)


class ReportSpec(NamedTuple):
    """Registered report: engine method and display title"""
    method: str
    title: str


REPORTS: Dict[str, ReportSpec] = {
    "revenue_per_customer": ReportSpec("revenue_per_customer", "Total revenue per customer"),
    "revenue_by_store": ReportSpec("revenue_by_store", "Revenue by store"),
    "top_selling_products": ReportSpec("top_selling_products", "Top-selling products"),
    "monthly_revenue_trend": ReportSpec("monthly_revenue_trend", "Monthly revenue trend"),
    "repeat_buyers": ReportSpec("repeat_buyers", "Best customers (repeat buyers)"),
    "revenue_by_category": ReportSpec("revenue_by_category", "Revenue by category"),
    "top_stores_per_country": ReportSpec("top_stores_per_country", "Top stores per country"),
    "store_revenue_share": ReportSpec("store_revenue_share", "Store revenue share within country"),
    "underperforming_stores": ReportSpec("underperforming_stores", "Underperforming stores (bottom quartile)"),
    "yoy_revenue_by_country": ReportSpec("yoy_revenue_by_country", "Year-over-year revenue by country"),
    "yoy_revenue_by_category": ReportSpec("yoy_revenue_by_category", "Category revenue growth year-over-year"),
    "profit_margin_by_category": ReportSpec("profit_margin_by_category", "Profit margin by category"),
}

REVENUE = pl.col("unit_price_usd") * pl.col("quantity")
PROFIT = (pl.col("unit_price_usd") - pl.col("unit_cost_usd")) * pl.col("quantity")


class ReportEngine:
    """
    Report engine over one immutable dataset snapshot.

    Holds no caches; two calls of the same report recompute it and return
    equal frames.

    Example:
        engine = ReportEngine(dataset)
        df = engine.revenue_by_category()
        df = engine.run("top_stores_per_country")
    """

    def __init__(
        self,
        dataset: RetailDataset,
        precision: Optional[int] = 2,
        top_n_stores: int = 3,
        quartile_buckets: int = 4,
    ):
        if top_n_stores < 1:
            raise ValueError(f"top_n_stores must be positive, got {top_n_stores}")
        if quartile_buckets < 1:
            raise ValueError(f"quartile_buckets must be positive, got {quartile_buckets}")

        self.dataset = dataset
        self.precision = precision
        self.top_n_stores = top_n_stores
        self.quartile_buckets = quartile_buckets

    @classmethod
    def available_reports(cls) -> List[str]:
        """Registered report names in run order"""
        return list(REPORTS)

    def run(self, name: str) -> pl.DataFrame:
        """Evaluate a report by registered name"""
        if name not in REPORTS:
            raise UnknownReportError(name, self.available_reports())
        report: Callable[[], pl.DataFrame] = getattr(self, REPORTS[name].method)
        return report()

    # =========================================================================
    # SHARED BUILDING BLOCKS
    # =========================================================================

    def _round(self, *columns: str) -> List[pl.Expr]:
        if self.precision is None:
            return [pl.col(c) for c in columns]
        return [pl.col(c).round(self.precision) for c in columns]

    def _line_items(self) -> pl.DataFrame:
        """Sales joined to products with line revenue and profit"""
        products = self.dataset.products.select(
            "product_key", "product_name", "category", "unit_price_usd", "unit_cost_usd"
        )
        return self.dataset.sales.join(products, on="product_key", how="inner").with_columns(
            REVENUE.alias("line_revenue"),
            PROFIT.alias("line_profit"),
        )

    def _with_stores(self, df: pl.DataFrame) -> pl.DataFrame:
        stores = self.dataset.stores.select("store_key", "country", "states")
        return df.join(stores, on="store_key", how="inner")

    def _store_revenue(self) -> pl.DataFrame:
        """Revenue per store carrying country and states"""
        return (
            self._with_stores(self._line_items())
            .group_by("store_key", "country", "states")
            .agg(pl.col("line_revenue").sum().alias("revenue"))
        )

    def _yearly_revenue(self, key: str, revenue_alias: str, prev_alias: str) -> pl.DataFrame:
        """
        Revenue per (key, year) with the previous year's revenue, the
        absolute change and the percentage growth.

        The previous value comes from the preceding row of the key's yearly
        series, so a gap year compares against the last year with sales.
        Undated sales form a null year placed after every dated year.
        """
        items = self._line_items()
        if key == "country":
            items = self._with_stores(items)

        yearly = (
            items.with_columns(pl.col("order_date").dt.year().alias("year"))
            .group_by(key, "year")
            .agg(pl.col("line_revenue").sum().alias(revenue_alias))
        )
        yearly = with_lag(yearly, revenue_alias, partition_by=key, order_by="year", alias=prev_alias)

        change = pl.col(revenue_alias) - pl.col(prev_alias)
        return yearly.with_columns(
            change.alias("change_over_year"),
            safe_ratio(change * 100.0, pl.col(prev_alias)).alias("growth_percentage"),
        )

    # =========================================================================
    # REPORTS
    # =========================================================================

    def revenue_per_customer(self) -> pl.DataFrame:
        """Total revenue per customer, highest first"""
        customers = self.dataset.customers.select(
            "customer_key",
            pl.concat_str(
                [pl.col("first_name"), pl.col("last_name")], separator=" ", ignore_nulls=True
            ).alias("customer_name"),
        )
        return (
            self._line_items()
            .join(customers, on="customer_key", how="inner")
            .group_by("customer_key", "customer_name")
            .agg(pl.col("line_revenue").sum().alias("total_revenue_usd"))
            .sort(["total_revenue_usd", "customer_key"], descending=[True, False])
            .select("customer_key", "customer_name", *self._round("total_revenue_usd"))
        )

    def revenue_by_store(self) -> pl.DataFrame:
        """Revenue per store with its country and states"""
        return (
            self._store_revenue()
            .rename({"revenue": "revenue_usd"})
            .sort(["revenue_usd", "store_key"], descending=[True, False])
            .select("store_key", "country", "states", *self._round("revenue_usd"))
        )

    def top_selling_products(self) -> pl.DataFrame:
        """Units and revenue per product, by revenue"""
        return (
            self._line_items()
            .group_by("product_name", "category")
            .agg(
                pl.col("quantity").sum().alias("total_units_sold"),
                pl.col("line_revenue").sum().alias("total_revenue_usd"),
            )
            .sort(["total_revenue_usd", "product_name", "category"], descending=[True, False, False])
            .select("product_name", "category", "total_units_sold", *self._round("total_revenue_usd"))
        )

    def monthly_revenue_trend(self) -> pl.DataFrame:
        """Revenue per calendar month, oldest first"""
        return (
            self._line_items()
            .with_columns(pl.col("order_date").dt.truncate("1mo").alias("month"))
            .group_by("month")
            .agg(pl.col("line_revenue").sum().alias("monthly_revenue"))
            .sort("month", nulls_last=True)
            .select("month", *self._round("monthly_revenue"))
        )

    def repeat_buyers(self) -> pl.DataFrame:
        """Customers with more than one distinct order, by spend"""
        return (
            self._line_items()
            .group_by("customer_key")
            .agg(
                pl.col("order_number").drop_nulls().n_unique().alias("num_orders"),
                pl.col("line_revenue").sum().alias("total_spent"),
            )
            .filter(pl.col("num_orders") > 1)
            .sort(["total_spent", "customer_key"], descending=[True, False])
            .select("customer_key", "num_orders", *self._round("total_spent"))
        )

    def revenue_by_category(self) -> pl.DataFrame:
        """Revenue per product category"""
        return (
            self._line_items()
            .group_by("category")
            .agg(pl.col("line_revenue").sum().alias("revenue_by_category"))
            .sort(["revenue_by_category", "category"], descending=[True, False])
            .select("category", *self._round("revenue_by_category"))
        )

    def top_stores_per_country(self) -> pl.DataFrame:
        """
        The top_n_stores highest-revenue stores of each country.

        Stores with equal revenue are numbered by ascending store_key, so
        the cut at top_n_stores is deterministic.
        """
        ranked = with_row_number(
            self._store_revenue(),
            partition_by="country",
            order_by=["revenue", "store_key"],
            descending=[True, False],
        )
        return (
            ranked.filter(pl.col("row_num") <= self.top_n_stores)
            .rename({"revenue": "total_revenue_usd"})
            .sort(["country", "total_revenue_usd", "store_key"], descending=[False, True, False])
            .select("store_key", "country", "states", *self._round("total_revenue_usd"))
        )

    def store_revenue_share(self) -> pl.DataFrame:
        """
        Each store's revenue, its country's total, its percentage share
        of that total and its rank within the country.

        Ranks have gaps after ties (1, 2, 2, 4).
        """
        stores = self._store_revenue().with_columns(
            pl.col("revenue").sum().over("country").alias("country_total")
        )
        ranked = with_rank(stores, "country", "revenue", descending=True, tiebreak="store_key", alias="store_rank")
        return (
            ranked.with_columns(
                safe_ratio(pl.col("revenue") * 100.0, pl.col("country_total")).alias("revenue_share_percent"),
            )
            .rename({"revenue": "store_revenue_usd", "country_total": "country_total_usd"})
            .sort(["country", "store_rank", "store_key"])
            .select(
                "country",
                "states",
                "store_key",
                *self._round("store_revenue_usd", "country_total_usd", "revenue_share_percent"),
                pl.col("store_rank").cast(pl.UInt32),
            )
        )

    def underperforming_stores(self) -> pl.DataFrame:
        """
        Stores in the last revenue bucket of their country.

        Each country's stores are ordered by revenue descending (store_key
        ascending on ties) and split into quartile_buckets groups; only the
        last group is returned, lowest revenue first.
        """
        bucketed = with_ntile(
            self._store_revenue(),
            partition_by="country",
            order_by=["revenue", "store_key"],
            buckets=self.quartile_buckets,
            descending=[True, False],
            alias="quartile_partition",
        )
        return (
            bucketed.filter(pl.col("quartile_partition") == self.quartile_buckets)
            .rename({"revenue": "store_revenue_usd"})
            .sort(["country", "store_revenue_usd", "store_key"])
            .select("store_key", "country", "states", *self._round("store_revenue_usd"), "quartile_partition")
        )

    def yoy_revenue_by_country(self) -> pl.DataFrame:
        """Yearly revenue per country against the previous year"""
        return (
            self._yearly_revenue("country", "country_revenue", "prev_year_revenue")
            .sort(["country", "year"], nulls_last=True)
            .select(
                "country",
                "year",
                *self._round("country_revenue", "prev_year_revenue", "change_over_year", "growth_percentage"),
            )
        )

    def yoy_revenue_by_category(self) -> pl.DataFrame:
        """
        Yearly revenue per category against the previous year, ordered by
        the absolute change, largest first.

        First years have no change and sort ahead of every other row.
        """
        return (
            self._yearly_revenue("category", "catg_revenue", "prev_year_rev")
            .sort(
                ["change_over_year", "category", "year"],
                descending=[True, False, False],
                nulls_last=[False, True, True],
            )
            .select(
                "category",
                "year",
                *self._round("catg_revenue", "prev_year_rev", "change_over_year", "growth_percentage"),
            )
        )

    def profit_margin_by_category(self) -> pl.DataFrame:
        """Total profit and margin percentage per category, by profit"""
        return (
            self._line_items()
            .group_by("category")
            .agg(
                pl.col("line_profit").sum().alias("total_profit_usd"),
                pl.col("line_revenue").sum().alias("_revenue"),
            )
            .with_columns(
                safe_ratio(pl.col("total_profit_usd") * 100.0, pl.col("_revenue")).alias("profit_margin_percent")
            )
            .sort(["total_profit_usd", "category"], descending=[True, False])
            .select("category", *self._round("total_profit_usd", "profit_margin_percent"))
        )
