"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Response
from pydantic import BaseModel

from sales_analytics.config import get_settings
from sales_analytics.database.connection import check_database_health
from sales_analytics.ingestion.batch_loader import create_batch_loader
from sales_analytics.ingestion.warehouse import WarehouseTable

settings = get_settings()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


def _check_warehouse_files() -> Dict[str, Any]:
    loader = create_batch_loader()
    missing = [
        table.value for table in WarehouseTable
        if not loader.table_config(table).file_path.exists()
    ]
    if missing:
        return {"status": "unhealthy", "missing": missing, "path": str(loader.warehouse_path)}
    return {"status": "healthy", "path": str(loader.warehouse_path)}


async def _check_warehouse() -> Dict[str, Any]:
    if settings.warehouse_source == "database":
        return await check_database_health()
    return _check_warehouse_files()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Reports "degraded" when the configured warehouse source is unreachable.
    """
    checks = {"warehouse": await _check_warehouse()}
    overall_status = "healthy" if checks["warehouse"].get("status") == "healthy" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.utcnow(),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """
    Kubernetes liveness probe endpoint.

    Returns 200 if the application is running.
    """
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """
    Kubernetes readiness probe endpoint.

    Returns 200 if the warehouse source can be read.
    """
    warehouse = await _check_warehouse()
    if warehouse.get("status") != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "warehouse_unavailable"}
    return {"status": "ready"}
