"""
Request Dependencies

Warehouse and engine providers shared by the API routes. Tests replace them
through `app.dependency_overrides`.
"""

from typing import AsyncGenerator

from fastapi import HTTPException
import structlog

from sales_analytics.config import get_settings
from sales_analytics.database.connection import get_db
from sales_analytics.database.repository import read_warehouse
from sales_analytics.ingestion.batch_loader import create_batch_loader
from sales_analytics.ingestion.schema import SchemaValidationError
from sales_analytics.ingestion.warehouse import Warehouse
from sales_analytics.reporting.reports import ReportingEngine

logger = structlog.get_logger(__name__)
settings = get_settings()


async def get_warehouse() -> AsyncGenerator[Warehouse, None]:
    """
    Load the current warehouse snapshot from the configured source.

    Reports are recomputed per request, so a fresh snapshot is read each time.
    """
    try:
        if settings.warehouse_source == "database":
            async with get_db() as db:
                warehouse = await read_warehouse(db)
        else:
            warehouse = create_batch_loader().load_warehouse()
    except (FileNotFoundError, SchemaValidationError, RuntimeError) as e:
        logger.error("Warehouse unavailable", source=settings.warehouse_source, error=str(e))
        raise HTTPException(status_code=503, detail=f"Warehouse unavailable: {e}")

    yield warehouse


def get_reporting_engine() -> ReportingEngine:
    """Engine configured from application settings"""
    return ReportingEngine(config=settings.reporting)
