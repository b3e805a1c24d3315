"""
KPI Derivation Stage

Per-entity indicators computed from classified aggregates: recency, average
order value, average monthly spend/revenue and, for customers, age and age
group. Zero denominators fall back to defined values.
"""

from datetime import date
from typing import List, Sequence

import polars as pl

from sales_analytics.config import ReportingSettings
from .periods import months_between, years_between

UNKNOWN_AGE_GROUP = "Unknown"


def recency_expr(last_order_col: str, reference_date: date) -> pl.Expr:
    """Months from the last order to the reference date, never negative"""
    return months_between(pl.col(last_order_col), reference_date).clip(lower_bound=0)


def average_order_value_expr(sales_col: str = "total_sales", orders_col: str = "total_orders") -> pl.Expr:
    """total sales / total orders, 0 without orders"""
    return (
        pl.when(pl.col(orders_col) > 0)
        .then(pl.col(sales_col) / pl.col(orders_col))
        .otherwise(pl.lit(0.0))
    )


def average_monthly_expr(sales_col: str = "total_sales", lifespan_col: str = "lifespan") -> pl.Expr:
    """total sales / lifespan, or total sales itself when the lifespan is zero or unknown"""
    return (
        pl.when(pl.col(lifespan_col).fill_null(0) > 0)
        .then(pl.col(sales_col) / pl.col(lifespan_col))
        .otherwise(pl.col(sales_col).cast(pl.Float64))
    )


def age_group_labels(bounds: Sequence[int]) -> List[str]:
    """Labels for the groups delimited by `bounds`, youngest first"""
    labels = [f"Under {bounds[0]}"]
    for lower, upper in zip(bounds, bounds[1:]):
        labels.append(f"{lower}-{upper - 1}")
    labels.append(f"{bounds[-1]} and above")
    return labels


def age_group_expr(bounds: Sequence[int], age_col: str = "age") -> pl.Expr:
    """Bucket ages by `bounds`; a missing age maps to Unknown"""
    labels = age_group_labels(bounds)
    age = pl.col(age_col)

    expr = pl.when(age.is_null()).then(pl.lit(UNKNOWN_AGE_GROUP))
    for bound, label in zip(bounds, labels):
        expr = expr.when(age < bound).then(pl.lit(label))
    return expr.otherwise(pl.lit(labels[-1]))


def derive_customer_kpis(
    df: pl.DataFrame,
    reference_date: date,
    config: ReportingSettings,
) -> pl.DataFrame:
    """Add age, age_group, recency, avg_order_value and avg_monthly_spend"""
    df = df.with_columns([
        years_between(pl.col("birthdate"), reference_date).alias("age"),
        recency_expr("last_order_date", reference_date).alias("recency"),
        average_order_value_expr().alias("avg_order_value"),
        average_monthly_expr().alias("avg_monthly_spend"),
    ])
    return df.with_columns(age_group_expr(config.age_group_bounds).alias("age_group"))


def derive_product_kpis(df: pl.DataFrame, reference_date: date) -> pl.DataFrame:
    """Add recency_in_months, avg_order_revenue and avg_monthly_revenue"""
    return df.with_columns([
        recency_expr("last_order_date", reference_date).alias("recency_in_months"),
        average_order_value_expr().alias("avg_order_revenue"),
        average_monthly_expr().alias("avg_monthly_revenue"),
    ])
