"""
Warehouse Exploration

Headline measures, date coverage and magnitude breakdowns of the star schema.
"""

from typing import Any, Dict

import polars as pl

from sales_analytics.ingestion.warehouse import Warehouse
from sales_analytics.reporting.periods import months_between


def measures_overview(warehouse: Warehouse) -> pl.DataFrame:
    """
    Key business measures in one long frame (measure_name, measure_value).

    Returns:
        Total sales, quantity, average price, orders, products, customers and
        customers that placed at least one order
    """
    sales = warehouse.sales
    measures = [
        ("Total Sales", sales["sales_amount"].sum()),
        ("Total Quantity", sales["quantity"].sum()),
        ("Average Price", sales["price"].mean()),
        ("Total Orders", sales["order_number"].n_unique()),
        ("Total Products", warehouse.products["product_key"].n_unique()),
        ("Total Customers", warehouse.customers["customer_key"].n_unique()),
        ("Customers Ordering", sales["customer_key"].drop_nulls().n_unique()),
    ]
    return pl.DataFrame(
        {
            "measure_name": [name for name, _ in measures],
            "measure_value": [float(value) if value is not None else None for _, value in measures],
        },
        schema={"measure_name": pl.Utf8, "measure_value": pl.Float64},
    )


def date_range_summary(warehouse: Warehouse) -> Dict[str, Any]:
    """First/last order date, the months between them and the customer age span"""
    orders = warehouse.sales.select([
        pl.col("order_date").min().alias("first_order_date"),
        pl.col("order_date").max().alias("last_order_date"),
    ]).with_columns(
        months_between(pl.col("first_order_date"), pl.col("last_order_date")).alias("order_range_months")
    )
    births = warehouse.customers.select([
        pl.col("birthdate").min().alias("oldest_birthdate"),
        pl.col("birthdate").max().alias("youngest_birthdate"),
    ])
    return {**orders.row(0, named=True), **births.row(0, named=True)}


def count_by(df: pl.DataFrame, column: str, count_alias: str = "total") -> pl.DataFrame:
    """Row count per value of `column`, largest first"""
    if column not in df.columns:
        raise ValueError(f"Unknown column: {column}")
    return (
        df.group_by(column)
        .agg(pl.len().alias(count_alias))
        .sort([count_alias, column], descending=[True, False], nulls_last=True)
    )


def sales_with_dimensions(warehouse: Warehouse) -> pl.DataFrame:
    """Order lines joined to both dimensions; dangling keys are dropped"""
    customers = warehouse.customers.unique(subset="customer_key", keep="first")
    products = warehouse.products.unique(subset="product_key", keep="first")
    return (
        warehouse.sales
        .join(customers, on="customer_key", how="inner")
        .join(products, on="product_key", how="inner")
    )


def sales_by(warehouse: Warehouse, column: str) -> pl.DataFrame:
    """
    Magnitude analysis: sales, quantity and orders per value of a dimension
    attribute (country, gender, category, ...), largest revenue first.

    Raises:
        ValueError: `column` is not a sales or dimension column
    """
    joined = sales_with_dimensions(warehouse)
    if column not in joined.columns:
        raise ValueError(f"Unknown column: {column}")

    return (
        joined.group_by(column)
        .agg([
            pl.col("sales_amount").sum().alias("total_sales"),
            pl.col("quantity").sum().alias("total_quantity"),
            pl.col("order_number").n_unique().alias("total_orders"),
        ])
        .sort(["total_sales", column], descending=[True, False], nulls_last=True)
    )
