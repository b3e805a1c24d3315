"""
Warehouse Table Schemas

Typed column layouts of the star schema tables and the coercion applied to
every frame entering the reporting engine, whatever its source (CSV, parquet
or the relational warehouse).
"""

from typing import Dict, Iterable

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class SchemaValidationError(ValueError):
    """Raised when a warehouse table lacks a required column"""


SALES_SCHEMA: Dict[str, pl.DataType] = {
    "order_number": pl.Utf8,
    "product_key": pl.Int64,
    "customer_key": pl.Int64,
    "order_date": pl.Date,
    "shipping_date": pl.Date,
    "due_date": pl.Date,
    "sales_amount": pl.Float64,
    "quantity": pl.Int64,
    "price": pl.Float64,
}
SALES_REQUIRED = ("order_number", "product_key", "customer_key", "sales_amount", "quantity")

CUSTOMERS_SCHEMA: Dict[str, pl.DataType] = {
    "customer_key": pl.Int64,
    "customer_id": pl.Int64,
    "customer_number": pl.Utf8,
    "first_name": pl.Utf8,
    "last_name": pl.Utf8,
    "country": pl.Utf8,
    "marital_status": pl.Utf8,
    "gender": pl.Utf8,
    "birthdate": pl.Date,
    "create_date": pl.Date,
}
CUSTOMERS_REQUIRED = ("customer_key",)

PRODUCTS_SCHEMA: Dict[str, pl.DataType] = {
    "product_key": pl.Int64,
    "product_id": pl.Int64,
    "product_number": pl.Utf8,
    "product_name": pl.Utf8,
    "category_id": pl.Utf8,
    "category": pl.Utf8,
    "subcategory": pl.Utf8,
    "maintenance": pl.Utf8,
    "cost": pl.Float64,
    "product_line": pl.Utf8,
    "start_date": pl.Date,
}
PRODUCTS_REQUIRED = ("product_key",)

DATE_FORMAT = "%Y-%m-%d"


def _coerce_column(df: pl.DataFrame, name: str, dtype: pl.DataType) -> pl.Expr:
    """Cast one column to its schema type, parsing strings where needed"""
    current = df.schema[name]
    col = pl.col(name)

    if current == dtype:
        return col

    if dtype == pl.Date:
        if current == pl.Utf8:
            # Timestamps such as "2010-12-29 00:00:00" keep only their date part
            return col.str.slice(0, 10).str.to_date(DATE_FORMAT, strict=False).alias(name)
        return col.cast(pl.Date, strict=False).alias(name)

    if current == pl.Utf8 and dtype in (pl.Int64, pl.Float64):
        return col.str.strip_chars().cast(dtype, strict=False).alias(name)

    return col.cast(dtype, strict=False).alias(name)


def coerce_frame(
    df: pl.DataFrame,
    schema: Dict[str, pl.DataType],
    required: Iterable[str] = (),
    table: str = "table",
) -> pl.DataFrame:
    """
    Bring a frame to the given schema.

    Required columns must be present. Optional columns that are missing are
    added as typed nulls, and columns outside the schema are kept untouched.

    Raises:
        SchemaValidationError: a required column is missing
    """
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise SchemaValidationError(f"{table} is missing required columns: {missing}")

    absent = [name for name in schema if name not in df.columns]
    if absent:
        logger.debug("Adding absent optional columns", table=table, columns=absent)
        df = df.with_columns([pl.lit(None, dtype=schema[name]).alias(name) for name in absent])

    df = df.with_columns([_coerce_column(df, name, dtype) for name, dtype in schema.items()])

    extra = [c for c in df.columns if c not in schema]
    return df.select(list(schema) + extra)


def coerce_sales(df: pl.DataFrame) -> pl.DataFrame:
    """Coerce a sales fact frame; a missing price is derived from amount and quantity"""
    df = coerce_frame(df, SALES_SCHEMA, SALES_REQUIRED, table="fact_sales")
    return df.with_columns(
        pl.when(pl.col("price").is_null() & (pl.col("quantity") > 0))
        .then(pl.col("sales_amount") / pl.col("quantity"))
        .otherwise(pl.col("price"))
        .alias("price")
    )


def coerce_customers(df: pl.DataFrame) -> pl.DataFrame:
    return coerce_frame(df, CUSTOMERS_SCHEMA, CUSTOMERS_REQUIRED, table="dim_customers")


def coerce_products(df: pl.DataFrame) -> pl.DataFrame:
    return coerce_frame(df, PRODUCTS_SCHEMA, PRODUCTS_REQUIRED, table="dim_products")
