"""
Warehouse snapshot passed through the reporting pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

import polars as pl

from .schema import coerce_customers, coerce_products, coerce_sales


class WarehouseTable(str, Enum):
    """Tables of the star schema"""
    FACT_SALES = "fact_sales"
    DIM_CUSTOMERS = "dim_customers"
    DIM_PRODUCTS = "dim_products"


@dataclass(frozen=True)
class Warehouse:
    """
    Read-only snapshot of the sales star schema.

    Frames are coerced to the warehouse schemas on construction through
    `from_frames`; the reporting stages never mutate them.
    """
    sales: pl.DataFrame
    customers: pl.DataFrame
    products: pl.DataFrame

    @classmethod
    def from_frames(
        cls,
        sales: pl.DataFrame,
        customers: pl.DataFrame,
        products: pl.DataFrame,
    ) -> "Warehouse":
        return cls(
            sales=coerce_sales(sales),
            customers=coerce_customers(customers),
            products=coerce_products(products),
        )

    def table(self, name: WarehouseTable) -> pl.DataFrame:
        return self.tables()[name.value]

    def tables(self) -> Dict[str, pl.DataFrame]:
        """Tables keyed by their warehouse name"""
        return {
            WarehouseTable.FACT_SALES.value: self.sales,
            WarehouseTable.DIM_CUSTOMERS.value: self.customers,
            WarehouseTable.DIM_PRODUCTS.value: self.products,
        }

    @property
    def row_counts(self) -> Dict[str, int]:
        return {name: df.height for name, df in self.tables().items()}
