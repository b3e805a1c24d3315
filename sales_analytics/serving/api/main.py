"""
FastAPI Application Factory

Creates and configures the reporting API application.
"""

from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from sales_analytics.config import get_settings
from .middleware import RequestLoggingMiddleware
from .routes import analytics_router, health_router, reports_router

settings = get_settings()


def create_api_app(lifespan: Optional[Callable] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Optional startup/shutdown context manager

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Sales Analytics API",
        description="Customer and product reports over the sales warehouse",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])

    return app
