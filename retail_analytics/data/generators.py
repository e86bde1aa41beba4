"""
Synthetic Data Generator

Generates a consistent electronics retailer dataset for demos and tests:
- Products across electronics categories, priced at or above cost
- Customers with names
- Stores spread over several countries and their states
- Multi-year sales with multi-line orders and repeat customers
- Currency conversion rates for every currency on the sales
"""

from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import polars as pl
import structlog
from faker import Faker

from retail_analytics.dataset import RetailDataset
from retail_analytics.ingestion.loader import FileFormat

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES: List[Tuple[str, List[str], Tuple[float, float]]] = [
    ("Computers", ["Laptop", "Desktop", "Monitor", "Printer"], (300.0, 2500.0)),
    ("Cell phones", ["Smartphone", "Phone Case", "Charger"], (20.0, 1200.0)),
    ("TV and Video", ["LED TV", "Home Theater", "Projector"], (150.0, 3000.0)),
    ("Audio", ["Headphones", "Bluetooth Speaker", "Soundbar"], (25.0, 600.0)),
    ("Cameras and camcorders", ["Digital Camera", "Camcorder", "Lens"], (100.0, 2000.0)),
    ("Home Appliances", ["Microwave", "Refrigerator", "Washer"], (80.0, 2200.0)),
    ("Music, Movies and Audio Books", ["Blu-ray", "Audiobook", "Vinyl"], (5.0, 60.0)),
    ("Games and Toys", ["Console", "Controller", "Drone"], (15.0, 700.0)),
]

# Country -> (currency code, states)
STORE_LOCATIONS: Dict[str, Tuple[str, List[str]]] = {
    "United States": ("USD", ["California", "Texas", "New York", "Florida", "Washington", "Illinois"]),
    "Canada": ("CAD", ["Ontario", "Quebec", "British Columbia", "Alberta"]),
    "United Kingdom": ("GBP", ["England", "Scotland", "Wales"]),
    "Germany": ("EUR", ["Bavaria", "Berlin", "Hamburg", "Hesse"]),
    "France": ("EUR", ["Ile-de-France", "Provence", "Normandy"]),
    "Australia": ("AUD", ["New South Wales", "Victoria", "Queensland"]),
}

CONVERSION_TO_USD = {
    "USD": 1.0,
    "CAD": 0.74,
    "GBP": 1.27,
    "EUR": 1.09,
    "AUD": 0.66,
}


# =============================================================================
# GENERATORS
# =============================================================================

class ProductGenerator:
    """Generate an electronics product catalog"""

    def __init__(self, rng: np.random.Generator, fake: Faker):
        self.rng = rng
        self.fake = fake

    def generate(self, n: int = 120) -> pl.DataFrame:
        products = []

        for key in range(1, n + 1):
            category, kinds, (low, high) = CATEGORIES[self.rng.integers(len(CATEGORIES))]
            kind = kinds[self.rng.integers(len(kinds))]
            unit_price = round(float(self.rng.uniform(low, high)), 2)
            unit_cost = round(unit_price * float(self.rng.uniform(0.35, 0.8)), 2)

            products.append({
                "product_key": key,
                "product_name": f"{self.fake.last_name()} {kind} {self.fake.bothify('??-###').upper()}",
                "category": category,
                "unit_price_usd": unit_price,
                "unit_cost_usd": unit_cost,
            })

        return pl.DataFrame(products)


class CustomerGenerator:
    """Generate customers"""

    def __init__(self, fake: Faker):
        self.fake = fake

    def generate(self, n: int = 400) -> pl.DataFrame:
        return pl.DataFrame({
            "customer_key": list(range(1, n + 1)),
            "first_name": [self.fake.first_name() for _ in range(n)],
            "last_name": [self.fake.last_name() for _ in range(n)],
        })


class StoreGenerator:
    """Generate stores, at least one per configured country"""

    def __init__(self, rng: np.random.Generator):
        self.rng = rng

    def generate(self, n: int = 30) -> pl.DataFrame:
        countries = list(STORE_LOCATIONS)
        stores = []

        for key in range(1, n + 1):
            # Round-robin first so every country has a store
            if key <= len(countries):
                country = countries[key - 1]
            else:
                country = countries[self.rng.integers(len(countries))]
            states = STORE_LOCATIONS[country][1]
            stores.append({
                "store_key": key,
                "country": country,
                "states": states[self.rng.integers(len(states))],
            })

        return pl.DataFrame(stores)


class SaleGenerator:
    """Generate multi-line orders over a date range"""

    def __init__(
        self,
        rng: np.random.Generator,
        products_df: pl.DataFrame,
        customers_df: pl.DataFrame,
        stores_df: pl.DataFrame,
    ):
        self.rng = rng
        self.product_keys = products_df["product_key"].to_numpy()
        self.customer_keys = customers_df["customer_key"].to_numpy()
        self.store_currency = {
            row["store_key"]: STORE_LOCATIONS[row["country"]][0]
            for row in stores_df.select("store_key", "country").to_dicts()
        }
        self.store_keys = np.array(list(self.store_currency))

    def generate(self, n_orders: int, start_date: date, end_date: date) -> pl.DataFrame:
        span_days = (end_date - start_date).days
        # Skew toward a smaller set of returning customers
        weights = self.rng.pareto(1.5, len(self.customer_keys)) + 1
        weights = weights / weights.sum()

        lines = []
        for order_number in range(1, n_orders + 1):
            order_date = start_date + timedelta(days=int(self.rng.integers(span_days + 1)))
            customer_key = int(self.rng.choice(self.customer_keys, p=weights))
            store_key = int(self.rng.choice(self.store_keys))
            num_lines = int(self.rng.choice([1, 2, 3, 4], p=[0.55, 0.25, 0.15, 0.05]))

            for product_key in self.rng.choice(self.product_keys, size=num_lines, replace=False):
                lines.append({
                    "order_number": order_number,
                    "order_date": order_date,
                    "customer_key": customer_key,
                    "product_key": int(product_key),
                    "store_key": store_key,
                    "currency_code": self.store_currency[store_key],
                    "quantity": int(self.rng.choice([1, 2, 3, 4, 5], p=[0.6, 0.2, 0.1, 0.06, 0.04])),
                })

        return pl.DataFrame(lines, schema_overrides={"order_date": pl.Date})


class DataGenerator:
    """
    Main data generator orchestrating all generators.

    Example:
        generator = DataGenerator(seed=7)
        dataset = generator.generate()
        generator.write(dataset, "data/electronics")
    """

    def __init__(self, seed: int = 42):
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def generate(
        self,
        n_products: int = 120,
        n_customers: int = 400,
        n_stores: int = 30,
        n_orders: int = 2500,
        start_date: date = date(2016, 1, 1),
        end_date: date = date(2021, 2, 20),
    ) -> RetailDataset:
        """Generate a complete, validated dataset"""
        logger.info(
            "Generating dataset",
            products=n_products,
            customers=n_customers,
            stores=n_stores,
            orders=n_orders,
        )

        products = ProductGenerator(self.rng, self.fake).generate(n_products)
        customers = CustomerGenerator(self.fake).generate(n_customers)
        stores = StoreGenerator(self.rng).generate(n_stores)
        sales = SaleGenerator(self.rng, products, customers, stores).generate(n_orders, start_date, end_date)
        currency = pl.DataFrame({
            "currency_code": list(CONVERSION_TO_USD),
            "conversion_to_usd": list(CONVERSION_TO_USD.values()),
        })

        return RetailDataset.from_frames(
            sales=sales,
            products=products,
            customers=customers,
            stores=stores,
            currency=currency,
        )

    def write(
        self,
        dataset: RetailDataset,
        output_dir: Union[str, Path],
        file_format: Optional[Union[FileFormat, str]] = FileFormat.CSV,
    ) -> Dict[str, Path]:
        """
        Write each table to output_dir/<table>.<format>.

        Returns:
            Written file per table
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        file_format = FileFormat(file_format)

        written = {}
        for table in ("sales", "products", "customers", "stores", "currency"):
            df = getattr(dataset, table)
            if df is None:
                continue

            path = output_dir / f"{table}.{file_format.value}"
            if file_format == FileFormat.CSV:
                df.write_csv(path)
            elif file_format == FileFormat.PARQUET:
                df.write_parquet(path)
            elif file_format == FileFormat.JSON:
                df.write_json(path)
            else:
                df.write_ndjson(path)

            written[table] = path
            logger.info(f"Written {len(df)} rows to {path}")

        return written
