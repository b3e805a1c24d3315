"""
Time-Series Analysis

- Change over time: sales, customers and quantity per period
- Cumulative analysis: running totals and running average price
- Performance analysis: yearly product sales against the product's average
  and the previous year
"""

import polars as pl

from sales_analytics.ingestion.warehouse import Warehouse

GRANULARITIES = {
    "year": "1y",
    "quarter": "1q",
    "month": "1mo",
}


def _period(granularity: str) -> pl.Expr:
    if granularity not in GRANULARITIES:
        raise ValueError(f"Unknown granularity: {granularity}. Expected one of {sorted(GRANULARITIES)}")
    return pl.col("order_date").dt.truncate(GRANULARITIES[granularity]).alias("period")


def sales_over_time(sales: pl.DataFrame, granularity: str = "month") -> pl.DataFrame:
    """Total sales, distinct customers and quantity per period (undated lines skipped)"""
    return (
        sales.filter(pl.col("order_date").is_not_null())
        .group_by(_period(granularity))
        .agg([
            pl.col("sales_amount").sum().alias("total_sales"),
            pl.col("customer_key").n_unique().alias("total_customers"),
            pl.col("quantity").sum().alias("total_quantity"),
        ])
        .sort("period")
    )


def cumulative_sales(sales: pl.DataFrame, granularity: str = "year") -> pl.DataFrame:
    """
    Running total of sales and running average of the per-period average
    price, ordered by period.
    """
    per_period = (
        sales.filter(pl.col("order_date").is_not_null())
        .group_by(_period(granularity))
        .agg([
            pl.col("sales_amount").sum().alias("total_sales"),
            pl.col("price").mean().alias("avg_price"),
        ])
        .sort("period")
    )
    return per_period.with_columns([
        pl.col("total_sales").cum_sum().alias("running_total_sales"),
        (pl.col("avg_price").cum_sum() / pl.col("avg_price").cum_count()).alias("moving_average_price"),
    ])


def yearly_product_performance(warehouse: Warehouse) -> pl.DataFrame:
    """
    Yearly sales per product compared with the product's average yearly
    sales and with its previous year.

    Columns: order_year, product_key, product_name, current_sales,
    avg_sales, diff_avg, avg_change (Above Avg / Below Avg / Avg),
    py_sales, diff_py, py_change (Increase / Decrease / No Change, null for
    the first year).
    """
    products = warehouse.products.unique(subset="product_key", keep="first").select(["product_key", "product_name"])
    yearly = (
        warehouse.sales.filter(pl.col("order_date").is_not_null())
        .join(products, on="product_key", how="inner")
        .group_by([pl.col("order_date").dt.year().alias("order_year"), "product_key", "product_name"])
        .agg(pl.col("sales_amount").sum().alias("current_sales"))
        .sort(["product_key", "order_year"])
    )

    yearly = yearly.with_columns([
        pl.col("current_sales").mean().over("product_key").alias("avg_sales"),
        pl.col("current_sales").shift(1).over("product_key").alias("py_sales"),
    ]).with_columns([
        (pl.col("current_sales") - pl.col("avg_sales")).alias("diff_avg"),
        (pl.col("current_sales") - pl.col("py_sales")).alias("diff_py"),
    ])

    return yearly.with_columns([
        pl.when(pl.col("diff_avg") > 0).then(pl.lit("Above Avg"))
        .when(pl.col("diff_avg") < 0).then(pl.lit("Below Avg"))
        .otherwise(pl.lit("Avg"))
        .alias("avg_change"),
        pl.when(pl.col("diff_py") > 0).then(pl.lit("Increase"))
        .when(pl.col("diff_py") < 0).then(pl.lit("Decrease"))
        .when(pl.col("diff_py") == 0).then(pl.lit("No Change"))
        .otherwise(pl.lit(None, dtype=pl.Utf8))
        .alias("py_change"),
    ]).select([
        "order_year",
        "product_key",
        "product_name",
        "current_sales",
        "avg_sales",
        "diff_avg",
        "avg_change",
        "py_sales",
        "diff_py",
        "py_change",
    ]).sort(["order_year", "product_key"])
