"""
Synthetic Warehouse Generator

Generates a realistic sales star schema for development and tests:
- Customers with demographics and optional birth dates
- Products across a category/subcategory hierarchy with unit costs
- Multi-line orders spread over a date range
"""

import argparse
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

import numpy as np
import polars as pl
import structlog
from faker import Faker

from sales_analytics.ingestion.batch_loader import BatchLoader, FileFormat
from sales_analytics.ingestion.warehouse import Warehouse

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = {
    "Bikes": ["Mountain Bikes", "Road Bikes", "Touring Bikes"],
    "Components": ["Handlebars", "Wheels", "Brakes", "Chains"],
    "Clothing": ["Jerseys", "Shorts", "Gloves", "Caps"],
    "Accessories": ["Helmets", "Bottles and Cages", "Tires and Tubes", "Lights"],
}

COST_RANGES = {
    "Bikes": (300.0, 2200.0),
    "Components": (20.0, 700.0),
    "Clothing": (3.0, 60.0),
    "Accessories": (1.0, 80.0),
}

COUNTRIES = ["United States", "Australia", "United Kingdom", "Germany", "France", "Canada"]
PRODUCT_LINES = ["Mountain", "Road", "Touring", "Other Sales"]


# =============================================================================
# GENERATOR
# =============================================================================

class WarehouseGenerator:
    """
    Generate a seeded, reproducible sales warehouse.

    Example:
        warehouse = WarehouseGenerator(seed=7).generate(n_customers=500)
    """

    def __init__(self, seed: int = 42):
        self.seed = seed
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def _random_date(self, start: date, end: date) -> date:
        return start + timedelta(days=int(self.rng.integers(0, (end - start).days + 1)))

    def generate_customers(self, n: int, reference_date: date) -> pl.DataFrame:
        """Customer dimension; about 5% of birth dates are unknown"""
        keys = np.arange(1, n + 1)
        birthdates = [
            None if self.rng.random() < 0.05
            else self._random_date(date(reference_date.year - 80, 1, 1), date(reference_date.year - 16, 12, 31))
            for _ in range(n)
        ]
        return pl.DataFrame({
            "customer_key": keys,
            "customer_id": keys + 11000,
            "customer_number": [f"AW{11000 + k:08d}" for k in keys],
            "first_name": [self.fake.first_name() for _ in range(n)],
            "last_name": [self.fake.last_name() for _ in range(n)],
            "country": self.rng.choice(COUNTRIES, n),
            "marital_status": self.rng.choice(["Married", "Single"], n),
            "gender": self.rng.choice(["Male", "Female", "n/a"], n, p=[0.49, 0.49, 0.02]),
            "birthdate": pl.Series(birthdates, dtype=pl.Date),
            "create_date": [self._random_date(date(reference_date.year - 10, 1, 1), reference_date) for _ in range(n)],
        })

    def generate_products(self, n: int) -> pl.DataFrame:
        """Product dimension across the category hierarchy"""
        categories = list(CATEGORIES)
        rows = []
        for key in range(1, n + 1):
            category = categories[int(self.rng.integers(0, len(categories)))]
            subcategory = CATEGORIES[category][int(self.rng.integers(0, len(CATEGORIES[category])))]
            low, high = COST_RANGES[category]
            rows.append({
                "product_key": key,
                "product_id": 200 + key,
                "product_number": f"{category[:2].upper()}-{key:04d}",
                "product_name": f"{subcategory} {self.fake.word().title()} {key}",
                "category_id": f"{category[:2].upper()}_{subcategory[:2].upper()}",
                "category": category,
                "subcategory": subcategory,
                "maintenance": "Yes" if category in ("Bikes", "Components") else "No",
                "cost": round(float(self.rng.uniform(low, high)), 2),
                "product_line": PRODUCT_LINES[int(self.rng.integers(0, len(PRODUCT_LINES)))],
                "start_date": date(2010, 1, 1) + timedelta(days=int(self.rng.integers(0, 1500))),
            })
        return pl.DataFrame(rows)

    def generate_sales(
        self,
        n_orders: int,
        customers: pl.DataFrame,
        products: pl.DataFrame,
        start_date: date,
        end_date: date,
    ) -> pl.DataFrame:
        """Sales fact with 1-3 lines per order, priced at a markup over cost"""
        customer_keys = customers["customer_key"].to_numpy()
        product_keys = products["product_key"].to_numpy()
        costs = dict(zip(products["product_key"].to_list(), products["cost"].to_list()))

        rows = []
        for i in range(n_orders):
            order_number = f"SO{43697 + i}"
            customer_key = int(self.rng.choice(customer_keys))
            order_date = self._random_date(start_date, end_date)
            n_lines = int(self.rng.choice([1, 2, 3], p=[0.6, 0.3, 0.1]))
            for product_key in self.rng.choice(product_keys, size=n_lines, replace=len(product_keys) < n_lines):
                product_key = int(product_key)
                quantity = int(self.rng.choice([1, 2, 3], p=[0.85, 0.1, 0.05]))
                price = float(round(costs[product_key] * self.rng.uniform(1.2, 1.8)))
                rows.append({
                    "order_number": order_number,
                    "product_key": product_key,
                    "customer_key": customer_key,
                    "order_date": order_date,
                    "shipping_date": order_date + timedelta(days=7),
                    "due_date": order_date + timedelta(days=12),
                    "sales_amount": price * quantity,
                    "quantity": quantity,
                    "price": price,
                })
        return pl.DataFrame(rows)

    def generate(
        self,
        n_customers: int = 1000,
        n_products: int = 150,
        n_orders: int = 10000,
        start_date: date = date(2010, 12, 29),
        end_date: date = date(2014, 1, 28),
    ) -> Warehouse:
        """Generate a complete warehouse snapshot"""
        customers = self.generate_customers(n_customers, end_date)
        products = self.generate_products(n_products)
        sales = self.generate_sales(n_orders, customers, products, start_date, end_date)

        warehouse = Warehouse.from_frames(sales=sales, customers=customers, products=products)
        logger.info("Synthetic warehouse generated", seed=self.seed, **warehouse.row_counts)
        return warehouse


def generate_dataset(
    output_dir: str,
    n_customers: int = 1000,
    n_products: int = 150,
    n_orders: int = 10000,
    file_format: FileFormat = FileFormat.CSV,
    seed: int = 42,
) -> Warehouse:
    """Generate a warehouse and write its tables to `output_dir`"""
    warehouse = WarehouseGenerator(seed=seed).generate(
        n_customers=n_customers,
        n_products=n_products,
        n_orders=n_orders,
    )
    BatchLoader(warehouse_path=output_dir, file_format=file_format).write_warehouse(warehouse)
    return warehouse


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic sales warehouse")
    parser.add_argument("--output-dir", default="data/gold", help="Directory for the table files")
    parser.add_argument("--customers", type=int, default=1000)
    parser.add_argument("--products", type=int, default=150)
    parser.add_argument("--orders", type=int, default=10000)
    parser.add_argument("--format", choices=[f.value for f in FileFormat], default=FileFormat.CSV.value)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args(argv)

    Path(args.output_dir).mkdir(parents=True, exist_ok=True)
    generate_dataset(
        args.output_dir,
        n_customers=args.customers,
        n_products=args.products,
        n_orders=args.orders,
        file_format=FileFormat(args.format),
        seed=args.seed,
    )


if __name__ == "__main__":
    main()
