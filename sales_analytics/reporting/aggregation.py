"""
Aggregation Stage

Rolls sales order lines up to one activity record per dimension entity
(customer or product):

- total orders (distinct order numbers)
- total sales and total quantity
- distinct counterpart count (products per customer, customers per product)
- first/last order date and the lifespan between them, in calendar months

Order lines whose key has no match in the dimension, and lines without an
order date, are excluded and counted in `ExclusionStats`.
"""

from dataclasses import dataclass
from typing import Sequence

import polars as pl
import structlog

from .periods import months_between

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExclusionStats:
    """Order lines dropped before aggregation"""
    input_rows: int
    undated_rows: int
    dangling_rows: int

    @property
    def excluded_rows(self) -> int:
        return self.undated_rows + self.dangling_rows

    @property
    def aggregated_rows(self) -> int:
        return self.input_rows - self.excluded_rows


@dataclass
class AggregationResult:
    """Per-entity activity plus what was left out"""
    frame: pl.DataFrame
    stats: ExclusionStats


def prepare_facts(
    facts: pl.DataFrame,
    dimension: pl.DataFrame,
    key: str,
) -> AggregationResult:
    """
    Keep only order lines that are dated and reference an existing entity.

    Returns:
        The retained lines and the exclusion counts
    """
    input_rows = facts.height
    dated = facts.filter(pl.col("order_date").is_not_null())
    undated_rows = input_rows - dated.height

    known_keys = dimension.select(pl.col(key)).drop_nulls().unique()
    matched = dated.join(known_keys, on=key, how="semi")
    dangling_rows = dated.height - matched.height

    stats = ExclusionStats(
        input_rows=input_rows,
        undated_rows=undated_rows,
        dangling_rows=dangling_rows,
    )
    if stats.excluded_rows:
        logger.warning(
            "Order lines excluded from aggregation",
            key=key,
            undated_rows=undated_rows,
            dangling_rows=dangling_rows,
        )
    return AggregationResult(frame=matched, stats=stats)


def aggregate_activity(
    facts: pl.DataFrame,
    dimension: pl.DataFrame,
    key: str,
    counterpart_key: str,
    counterpart_alias: str,
    include_inactive: bool = True,
    extra_aggs: Sequence[pl.Expr] = (),
) -> AggregationResult:
    """
    Aggregate order lines per dimension key.

    Args:
        facts: Sales fact frame
        dimension: Dimension frame the report is keyed on
        key: Join key shared by facts and dimension
        counterpart_key: Key counted distinctly per entity
        counterpart_alias: Output name of the distinct counterpart count
        include_inactive: Keep dimension rows without any retained order line
        extra_aggs: Additional per-entity aggregations

    Returns:
        AggregationResult with one row per entity
    """
    prepared = prepare_facts(facts, dimension, key)

    activity = prepared.frame.group_by(key).agg([
        pl.col("order_number").n_unique().alias("total_orders"),
        pl.col("sales_amount").sum().alias("total_sales"),
        pl.col("quantity").sum().alias("total_quantity"),
        pl.col(counterpart_key).n_unique().alias(counterpart_alias),
        pl.col("order_date").min().alias("first_order_date"),
        pl.col("order_date").max().alias("last_order_date"),
        *extra_aggs,
    ])

    entities = dimension.select(pl.col(key)).drop_nulls().unique()
    frame = entities.join(activity, on=key, how="left" if include_inactive else "inner")

    frame = frame.with_columns([
        pl.col("total_orders").fill_null(0).cast(pl.Int64),
        pl.col("total_sales").fill_null(0.0).cast(pl.Float64),
        pl.col("total_quantity").fill_null(0).cast(pl.Int64),
        pl.col(counterpart_alias).fill_null(0).cast(pl.Int64),
        months_between(pl.col("first_order_date"), pl.col("last_order_date")).alias("lifespan"),
    ]).sort(key)

    logger.debug(
        "Activity aggregated",
        key=key,
        entities=frame.height,
        active=frame.filter(pl.col("total_orders") > 0).height,
    )
    return AggregationResult(frame=frame, stats=prepared.stats)


def aggregate_customers(
    facts: pl.DataFrame,
    customers: pl.DataFrame,
    include_inactive: bool = True,
) -> AggregationResult:
    """Customer activity: distinct products purchased per customer"""
    return aggregate_activity(
        facts,
        customers,
        key="customer_key",
        counterpart_key="product_key",
        counterpart_alias="total_products",
        include_inactive=include_inactive,
    )


def aggregate_products(
    facts: pl.DataFrame,
    products: pl.DataFrame,
    include_inactive: bool = True,
) -> AggregationResult:
    """Product activity: distinct customers per product and average selling price"""
    # Lines with zero quantity carry no unit price
    unit_price = (
        pl.when(pl.col("quantity") != 0)
        .then(pl.col("sales_amount") / pl.col("quantity"))
        .otherwise(None)
    )
    return aggregate_activity(
        facts,
        products,
        key="product_key",
        counterpart_key="customer_key",
        counterpart_alias="total_customers",
        include_inactive=include_inactive,
        extra_aggs=[unit_price.mean().alias("avg_selling_price")],
    )
