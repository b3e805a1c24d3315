"""
Ranking Analysis

Top-N and bottom-N customers and products by a sales measure.
"""

from typing import Dict

import polars as pl

from sales_analytics.ingestion.warehouse import Warehouse

MEASURES: Dict[str, pl.Expr] = {
    "total_sales": pl.col("sales_amount").sum(),
    "total_quantity": pl.col("quantity").sum(),
    "total_orders": pl.col("order_number").n_unique(),
}


def _measure(by: str) -> pl.Expr:
    if by not in MEASURES:
        raise ValueError(f"Unknown measure: {by}. Expected one of {sorted(MEASURES)}")
    return MEASURES[by].alias(by)


def rank_entities(
    sales: pl.DataFrame,
    dimension: pl.DataFrame,
    key: str,
    attributes: list,
    by: str = "total_sales",
    n: int = 5,
    bottom: bool = False,
) -> pl.DataFrame:
    """
    Rank dimension entities by a measure over their order lines.

    Ties are broken by ascending key so rankings are stable across runs.
    """
    if n < 1:
        raise ValueError("n must be at least 1")

    totals = sales.group_by(key).agg(_measure(by))
    ranked = (
        dimension.unique(subset=key, keep="first")
        .select([key, *attributes])
        .join(totals, on=key, how="inner")
        .sort([by, key], descending=[not bottom, False])
        .head(n)
    )
    return ranked.with_row_index("rank", offset=1)


def top_products(
    warehouse: Warehouse,
    n: int = 5,
    by: str = "total_sales",
    bottom: bool = False,
) -> pl.DataFrame:
    """Best (or worst, with `bottom`) selling products"""
    return rank_entities(
        warehouse.sales,
        warehouse.products,
        key="product_key",
        attributes=["product_name", "category"],
        by=by,
        n=n,
        bottom=bottom,
    )


def top_customers(
    warehouse: Warehouse,
    n: int = 10,
    by: str = "total_sales",
    bottom: bool = False,
) -> pl.DataFrame:
    """Customers with the highest (or lowest, with `bottom`) measure"""
    customers = warehouse.customers.with_columns(
        pl.concat_str([pl.col("first_name"), pl.col("last_name")], separator=" ", ignore_nulls=True)
        .alias("customer_name")
    )
    return rank_entities(
        warehouse.sales,
        customers,
        key="customer_key",
        attributes=["customer_name"],
        by=by,
        n=n,
        bottom=bottom,
    )
