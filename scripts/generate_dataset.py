"""
Electronics Retailer Dataset Generator

Writes a synthetic star schema (sales, products, customers, stores,
currency) for trying the reports locally, optionally seeding a database.

Usage:
    python scripts/generate_dataset.py --output data/electronics
    python scripts/generate_dataset.py --format parquet --orders 20000
    python scripts/generate_dataset.py --database-url sqlite:///data/electronics.db
"""

import argparse
from pathlib import Path

from retail_analytics.config.logging import configure_logging
from retail_analytics.data.generators import DataGenerator
from retail_analytics.database.connection import create_engine_from_settings
from retail_analytics.ingestion.loader import FileFormat
from retail_analytics.ingestion.seed_db import seed_database

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "electronics"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic electronics retailer dataset")
    parser.add_argument("--output", default=str(OUTPUT_DIR), help="Output directory")
    parser.add_argument("--format", default="csv", choices=[f.value for f in FileFormat])
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--products", type=int, default=120)
    parser.add_argument("--customers", type=int, default=400)
    parser.add_argument("--stores", type=int, default=30)
    parser.add_argument("--orders", type=int, default=2500)
    parser.add_argument("--database-url", help="Also seed this database")
    args = parser.parse_args()

    configure_logging()

    generator = DataGenerator(seed=args.seed)
    dataset = generator.generate(
        n_products=args.products,
        n_customers=args.customers,
        n_stores=args.stores,
        n_orders=args.orders,
    )
    written = generator.write(dataset, args.output, args.format)

    print("\nDataset written:")
    for table, path in written.items():
        size = path.stat().st_size / 1024
        print(f"   {path.name}: {getattr(dataset, table).height:,} rows ({size:.1f} KB)")

    if args.database_url:
        engine = create_engine_from_settings(args.database_url)
        try:
            counts = seed_database(dataset, engine)
        finally:
            engine.dispose()
        print(f"\nSeeded {args.database_url}: {counts}")


if __name__ == "__main__":
    main()
