"""
Analytics API Endpoints

Exploratory analyses over the warehouse: measures, rankings, trends,
performance and part-to-whole breakdowns.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
import polars as pl
import structlog

from sales_analytics.analytics import (
    category_contribution,
    cumulative_sales,
    date_range_summary,
    measures_overview,
    product_cost_ranges,
    sales_by,
    sales_over_time,
    top_customers,
    top_products,
    yearly_product_performance,
)
from sales_analytics.ingestion.warehouse import Warehouse
from sales_analytics.reporting.reports import ReportingEngine
from ..dependencies import get_reporting_engine, get_warehouse

router = APIRouter()
logger = structlog.get_logger(__name__)


class TableResponse(BaseModel):
    """Rows of an analysis result"""
    columns: List[str]
    rows: List[Dict[str, Any]]


def _table(df: pl.DataFrame) -> TableResponse:
    return TableResponse(columns=df.columns, rows=df.to_dicts())


def _invalid(e: ValueError) -> HTTPException:
    logger.warning("Analytics request rejected", error=str(e))
    return HTTPException(status_code=422, detail=str(e))


@router.get("/overview", response_model=TableResponse)
async def get_measures_overview(warehouse: Warehouse = Depends(get_warehouse)) -> TableResponse:
    """Headline business measures"""
    return _table(measures_overview(warehouse))


@router.get("/date-range")
async def get_date_range(warehouse: Warehouse = Depends(get_warehouse)) -> Dict[str, Any]:
    """Order date coverage and customer birth date span"""
    return date_range_summary(warehouse)


@router.get("/sales-by/{column}", response_model=TableResponse)
async def get_sales_by(column: str, warehouse: Warehouse = Depends(get_warehouse)) -> TableResponse:
    """Total sales per value of a customer or product attribute"""
    try:
        return _table(sales_by(warehouse, column))
    except ValueError as e:
        raise _invalid(e)


@router.get("/ranking/products", response_model=TableResponse)
async def get_product_ranking(
    n: int = Query(5, ge=1, le=1000),
    by: str = "total_sales",
    bottom: bool = False,
    warehouse: Warehouse = Depends(get_warehouse),
) -> TableResponse:
    """Top (or bottom) products by a sales measure"""
    try:
        return _table(top_products(warehouse, n=n, by=by, bottom=bottom))
    except ValueError as e:
        raise _invalid(e)


@router.get("/ranking/customers", response_model=TableResponse)
async def get_customer_ranking(
    n: int = Query(10, ge=1, le=1000),
    by: str = "total_sales",
    bottom: bool = False,
    warehouse: Warehouse = Depends(get_warehouse),
) -> TableResponse:
    """Top (or bottom) customers by a sales measure"""
    try:
        return _table(top_customers(warehouse, n=n, by=by, bottom=bottom))
    except ValueError as e:
        raise _invalid(e)


@router.get("/sales-over-time", response_model=TableResponse)
async def get_sales_over_time(
    granularity: str = Query("month", enum=["year", "quarter", "month"]),
    warehouse: Warehouse = Depends(get_warehouse),
) -> TableResponse:
    """Sales, customers and quantity per period"""
    return _table(sales_over_time(warehouse.sales, granularity))


@router.get("/cumulative", response_model=TableResponse)
async def get_cumulative_sales(
    granularity: str = Query("year", enum=["year", "quarter", "month"]),
    warehouse: Warehouse = Depends(get_warehouse),
) -> TableResponse:
    """Running total of sales and moving average price"""
    return _table(cumulative_sales(warehouse.sales, granularity))


@router.get("/performance", response_model=TableResponse)
async def get_yearly_performance(
    product_key: Optional[int] = None,
    warehouse: Warehouse = Depends(get_warehouse),
) -> TableResponse:
    """Yearly product sales against the product average and the previous year"""
    performance = yearly_product_performance(warehouse)
    if product_key is not None:
        performance = performance.filter(pl.col("product_key") == product_key)
    return _table(performance)


@router.get("/part-to-whole", response_model=TableResponse)
async def get_category_contribution(warehouse: Warehouse = Depends(get_warehouse)) -> TableResponse:
    """Share of total sales per product category"""
    return _table(category_contribution(warehouse))


@router.get("/cost-ranges", response_model=TableResponse)
async def get_cost_ranges(
    warehouse: Warehouse = Depends(get_warehouse),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> TableResponse:
    """Number of products per cost range"""
    return _table(product_cost_ranges(warehouse.products, engine.config))
