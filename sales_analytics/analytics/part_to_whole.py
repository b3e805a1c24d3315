"""
Part-to-Whole Analysis

Share of each category in total sales.
"""

import polars as pl

from sales_analytics.ingestion.warehouse import Warehouse

UNCATEGORIZED = "n/a"


def contribution(df: pl.DataFrame, group_col: str, value_col: str, decimals: int = 2) -> pl.DataFrame:
    """
    Sum `value_col` per `group_col` and each group's percentage of the grand
    total. With a zero grand total every percentage is 0.
    """
    totals = (
        df.group_by(group_col)
        .agg(pl.col(value_col).sum().alias(value_col))
        .sort([value_col, group_col], descending=[True, False])
    )
    grand_total = pl.col(value_col).sum()
    return totals.with_columns(
        pl.when(grand_total != 0)
        .then(pl.col(value_col) / grand_total * 100)
        .otherwise(pl.lit(0.0))
        .round(decimals)
        .alias("percentage_of_total")
    )


def category_contribution(warehouse: Warehouse, decimals: int = 2) -> pl.DataFrame:
    """Total sales per product category and its percentage of all sales"""
    categories = (
        warehouse.products.unique(subset="product_key", keep="first")
        .select(["product_key", pl.col("category").fill_null(UNCATEGORIZED)])
    )
    lines = warehouse.sales.join(categories, on="product_key", how="inner").rename({"sales_amount": "total_sales"})
    return contribution(lines, "category", "total_sales", decimals)
