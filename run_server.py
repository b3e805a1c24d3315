#!/usr/bin/env python
"""
Server Entry Point

Starts the reporting API with Uvicorn.
Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py
"""

import argparse
import os

import uvicorn

from sales_analytics.config import get_settings

settings = get_settings()


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    uvicorn.run(
        "sales_analytics.main:app",
        host=settings.api_host,
        port=port,
        reload=True,
        reload_dirs=["sales_analytics"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server(port: int):
    """Run production server with Uvicorn workers."""
    uvicorn.run(
        "sales_analytics.main:app",
        host=settings.api_host,
        port=port,
        workers=int(os.getenv("WORKERS", 4)),
        log_level=settings.monitoring.log_level.lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
        date_header=True,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sales Analytics API Server")
    parser.add_argument(
        "--dev",
        action="store_true",
        help="Run in development mode with auto-reload"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.api_port,
        help=f"Port to run on (default: {settings.api_port})"
    )

    args = parser.parse_args()

    if args.dev:
        run_dev_server(args.port)
    else:
        run_prod_server(args.port)
