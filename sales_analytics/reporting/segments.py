"""
Classification Stage

Maps aggregated activity to exactly one segment label. Rules are evaluated
top-down and the first match wins, so every entity lands in one segment.
"""

from enum import Enum

import polars as pl

from sales_analytics.config import ReportingSettings


class CustomerSegment(str, Enum):
    """Customer segments"""
    VIP = "VIP"
    REGULAR = "Regular"
    NEW = "New"


class ProductSegment(str, Enum):
    """Product performance segments"""
    HIGH_PERFORMER = "High-Performer"
    MID_RANGE = "Mid-Range"
    LOW_PERFORMER = "Low-Performer"


def customer_segment_expr(
    config: ReportingSettings,
    lifespan_col: str = "lifespan",
    sales_col: str = "total_sales",
) -> pl.Expr:
    """
    Customer segmentation:

    1. lifespan >= vip_min_lifespan_months and spend > vip_min_spend -> VIP
    2. lifespan >= vip_min_lifespan_months -> Regular
    3. otherwise -> New

    Customers without dated orders have a null lifespan and count as New.
    """
    lifespan = pl.col(lifespan_col).fill_null(0)
    established = lifespan >= config.vip_min_lifespan_months

    return (
        pl.when(established & (pl.col(sales_col) > config.vip_min_spend))
        .then(pl.lit(CustomerSegment.VIP.value))
        .when(established)
        .then(pl.lit(CustomerSegment.REGULAR.value))
        .otherwise(pl.lit(CustomerSegment.NEW.value))
    )


def product_segment_expr(
    config: ReportingSettings,
    sales_col: str = "total_sales",
) -> pl.Expr:
    """
    Product performance by total revenue:

    1. revenue > product_high_threshold -> High-Performer
    2. revenue >= product_mid_threshold -> Mid-Range
    3. otherwise -> Low-Performer
    """
    revenue = pl.col(sales_col).fill_null(0)

    return (
        pl.when(revenue > config.product_high_threshold)
        .then(pl.lit(ProductSegment.HIGH_PERFORMER.value))
        .when(revenue >= config.product_mid_threshold)
        .then(pl.lit(ProductSegment.MID_RANGE.value))
        .otherwise(pl.lit(ProductSegment.LOW_PERFORMER.value))
    )


def classify_customers(aggregates: pl.DataFrame, config: ReportingSettings) -> pl.DataFrame:
    """Add `customer_segment` to customer aggregates"""
    return aggregates.with_columns(customer_segment_expr(config).alias("customer_segment"))


def classify_products(aggregates: pl.DataFrame, config: ReportingSettings) -> pl.DataFrame:
    """Add `product_segment` to product aggregates"""
    return aggregates.with_columns(product_segment_expr(config).alias("product_segment"))
