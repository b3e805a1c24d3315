"""
FastAPI Production Application

Main entry point for the Sales Analytics API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from sales_analytics.config import get_settings
from sales_analytics.config.logging import configure_logging
from sales_analytics.database.connection import close_database, init_database
from sales_analytics.serving.api.main import create_api_app

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    logger.info("Starting Sales Analytics API", warehouse_source=settings.warehouse_source)

    if settings.warehouse_source == "database":
        await init_database()

    yield

    logger.info("Shutting down...")
    await close_database()


app = create_api_app(lifespan=lifespan)


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.version,
        "environment": settings.app_env,
        "warehouse_source": settings.warehouse_source,
        "documentation": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
