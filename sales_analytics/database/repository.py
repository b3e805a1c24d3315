"""
Warehouse Repository

Moves the star schema between the relational warehouse and polars frames.
"""

from typing import Dict, Type

import polars as pl
import structlog
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from sales_analytics.ingestion.schema import CUSTOMERS_SCHEMA, PRODUCTS_SCHEMA, SALES_SCHEMA
from sales_analytics.ingestion.warehouse import Warehouse
from .models import Base, DimCustomer, DimProduct, FactSales

logger = structlog.get_logger(__name__)

_TABLES: Dict[str, tuple] = {
    "sales": (FactSales, SALES_SCHEMA),
    "customers": (DimCustomer, CUSTOMERS_SCHEMA),
    "products": (DimProduct, PRODUCTS_SCHEMA),
}


async def _read_table(session: AsyncSession, model: Type[Base], schema: Dict[str, pl.DataType]) -> pl.DataFrame:
    columns = [model.__table__.c[name] for name in schema if name in model.__table__.c]
    result = await session.execute(select(*columns))
    rows = [dict(r) for r in result.mappings().all()]

    if not rows:
        return pl.DataFrame(schema={c.name: schema[c.name] for c in columns})
    return pl.from_dicts(rows, infer_schema_length=None)


async def read_warehouse(session: AsyncSession) -> Warehouse:
    """Read the three warehouse tables into a coerced Warehouse snapshot"""
    frames = {
        name: await _read_table(session, model, schema)
        for name, (model, schema) in _TABLES.items()
    }
    warehouse = Warehouse.from_frames(**frames)
    logger.info("Warehouse read from database", **warehouse.row_counts)
    return warehouse


async def write_warehouse(session: AsyncSession, warehouse: Warehouse) -> Dict[str, int]:
    """
    Append a warehouse snapshot to the database tables.

    Returns:
        Rows inserted per table
    """
    inserted = {}
    for name, (model, schema) in _TABLES.items():
        df = getattr(warehouse, name)
        columns = [c for c in schema if c in model.__table__.c and c in df.columns]
        records = df.select(columns).to_dicts()
        if records:
            await session.execute(insert(model), records)
        inserted[model.__tablename__] = len(records)

    await session.flush()
    logger.info("Warehouse written to database", **inserted)
    return inserted
