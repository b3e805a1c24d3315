"""
Data Segmentation

Distribution of products across cost ranges and of customers across the
report segments.
"""

from typing import List, Optional, Sequence

import polars as pl

from sales_analytics.config import ReportingSettings, get_settings
from sales_analytics.reporting.segments import CustomerSegment, ProductSegment

settings = get_settings()


def _format_bound(value: float) -> str:
    return f"{value:g}"


def cost_range_labels(bounds: Sequence[float]) -> List[str]:
    """Labels for the ranges delimited by `bounds`, cheapest first"""
    labels = [f"Below {_format_bound(bounds[0])}"]
    for lower, upper in zip(bounds, bounds[1:]):
        labels.append(f"{_format_bound(lower)}-{_format_bound(upper)}")
    labels.append(f"Above {_format_bound(bounds[-1])}")
    return labels


def cost_range_expr(bounds: Sequence[float], cost_col: str = "cost") -> pl.Expr:
    """
    Cost range of a product. The first range is open below its bound and the
    inner ranges include their upper bound (500 falls in 100-500).
    """
    labels = cost_range_labels(bounds)
    cost = pl.col(cost_col)

    expr = pl.when(cost.is_null()).then(pl.lit("Unknown")).when(cost < bounds[0]).then(pl.lit(labels[0]))
    for upper, label in zip(bounds[1:], labels[1:-1]):
        expr = expr.when(cost <= upper).then(pl.lit(label))
    return expr.otherwise(pl.lit(labels[-1]))


def product_cost_ranges(
    products: pl.DataFrame,
    config: Optional[ReportingSettings] = None,
) -> pl.DataFrame:
    """Number of products per cost range, in range order"""
    config = config or settings.reporting
    labels = cost_range_labels(config.cost_range_bounds)

    counts = (
        products.unique(subset="product_key", keep="first")
        .with_columns(cost_range_expr(config.cost_range_bounds).alias("cost_range"))
        .group_by("cost_range")
        .agg(pl.len().alias("total_products"))
    )
    order = pl.DataFrame({"cost_range": labels + ["Unknown"]}).with_row_index("range_order")
    return (
        order.join(counts, on="cost_range", how="left")
        .with_columns(pl.col("total_products").fill_null(0).cast(pl.Int64))
        .filter((pl.col("cost_range") != "Unknown") | (pl.col("total_products") > 0))
        .sort("range_order")
        .drop("range_order")
    )


def _segment_counts(report: pl.DataFrame, column: str, labels: List[str], alias: str) -> pl.DataFrame:
    counts = report.group_by(column).agg(pl.len().alias(alias))
    return (
        pl.DataFrame({column: labels})
        .join(counts, on=column, how="left")
        .with_columns(pl.col(alias).fill_null(0).cast(pl.Int64))
    )


def customer_segment_counts(customer_report: pl.DataFrame) -> pl.DataFrame:
    """Customers per segment, every segment listed"""
    return _segment_counts(
        customer_report,
        "customer_segment",
        [s.value for s in CustomerSegment],
        "total_customers",
    )


def product_segment_counts(product_report: pl.DataFrame) -> pl.DataFrame:
    """Products per performance segment, every segment listed"""
    return _segment_counts(
        product_report,
        "product_segment",
        [s.value for s in ProductSegment],
        "total_products",
    )
