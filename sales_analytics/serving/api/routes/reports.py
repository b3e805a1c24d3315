"""
Reports API Endpoints

REST API for the customer and product report views.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
import polars as pl
import structlog

from sales_analytics.ingestion.warehouse import Warehouse
from sales_analytics.reporting.reports import ReportingEngine, ReportType
from sales_analytics.reporting.segments import CustomerSegment, ProductSegment
from ..dependencies import get_reporting_engine, get_warehouse

router = APIRouter()
logger = structlog.get_logger(__name__)


class CustomerReportRow(BaseModel):
    """One customer in the customer report"""
    customer_key: int
    customer_number: Optional[str]
    customer_name: Optional[str]
    country: Optional[str]
    age: Optional[int]
    age_group: str
    customer_segment: CustomerSegment
    first_order_date: Optional[date]
    last_order_date: Optional[date]
    recency: Optional[int]
    total_orders: int
    total_sales: float
    total_quantity: int
    total_products: int
    lifespan: Optional[int]
    avg_order_value: float
    avg_monthly_spend: float


class ProductReportRow(BaseModel):
    """One product in the product report"""
    product_key: int
    product_number: Optional[str]
    product_name: Optional[str]
    category: Optional[str]
    subcategory: Optional[str]
    product_line: Optional[str]
    cost: Optional[float]
    first_sale_date: Optional[date]
    last_sale_date: Optional[date]
    recency_in_months: Optional[int]
    product_segment: ProductSegment
    lifespan: Optional[int]
    total_orders: int
    total_sales: float
    total_quantity: int
    total_customers: int
    avg_selling_price: Optional[float]
    avg_order_revenue: float
    avg_monthly_revenue: float


class CustomerReportResponse(BaseModel):
    """Paginated customer report"""
    reference_date: date
    total: int
    items: List[CustomerReportRow]


class ProductReportResponse(BaseModel):
    """Paginated product report"""
    reference_date: date
    total: int
    items: List[ProductReportRow]


class SegmentSummary(BaseModel):
    """Entities per segment for both reports"""
    reference_date: date
    customers: Dict[str, int]
    products: Dict[str, int]
    excluded_sales_rows: int


class QueryRequest(BaseModel):
    """Ad-hoc SQL over the report views"""
    sql: str = Field(..., min_length=1)
    as_of: Optional[date] = None
    max_rows: int = Field(1000, ge=1, le=100000)


class QueryResponse(BaseModel):
    """Tabular query result"""
    columns: List[str]
    row_count: int
    truncated: bool
    rows: List[Dict[str, Any]]


def _page(report: pl.DataFrame, column: str, segment: Optional[str], limit: int, offset: int):
    if segment is not None:
        report = report.filter(pl.col(column) == segment)
    return report.height, report.slice(offset, limit).to_dicts()


@router.get("/customers", response_model=CustomerReportResponse)
async def list_customer_report(
    segment: Optional[CustomerSegment] = None,
    limit: int = Query(100, ge=1, le=10000),
    offset: int = Query(0, ge=0),
    as_of: Optional[date] = Query(None, description="Reference date for recency and age"),
    warehouse: Warehouse = Depends(get_warehouse),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> CustomerReportResponse:
    """
    Customer report rows, optionally filtered to one segment.
    """
    reference_date = engine.reference_date(as_of)
    report = engine.customer_report(warehouse, reference_date)
    total, items = _page(report, "customer_segment", segment.value if segment else None, limit, offset)

    return CustomerReportResponse(reference_date=reference_date, total=total, items=items)


@router.get("/customers/{customer_key}", response_model=CustomerReportRow)
async def get_customer_report(
    customer_key: int,
    as_of: Optional[date] = None,
    warehouse: Warehouse = Depends(get_warehouse),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> CustomerReportRow:
    """Report row for a single customer"""
    report = engine.customer_report(warehouse, as_of).filter(pl.col("customer_key") == customer_key)
    if report.is_empty():
        raise HTTPException(status_code=404, detail=f"Customer {customer_key} not found")
    return CustomerReportRow(**report.row(0, named=True))


@router.get("/products", response_model=ProductReportResponse)
async def list_product_report(
    segment: Optional[ProductSegment] = None,
    limit: int = Query(100, ge=1, le=10000),
    offset: int = Query(0, ge=0),
    as_of: Optional[date] = Query(None, description="Reference date for recency"),
    warehouse: Warehouse = Depends(get_warehouse),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> ProductReportResponse:
    """
    Product report rows, optionally filtered to one segment.
    """
    reference_date = engine.reference_date(as_of)
    report = engine.product_report(warehouse, reference_date)
    total, items = _page(report, "product_segment", segment.value if segment else None, limit, offset)

    return ProductReportResponse(reference_date=reference_date, total=total, items=items)


@router.get("/products/{product_key}", response_model=ProductReportRow)
async def get_product_report(
    product_key: int,
    as_of: Optional[date] = None,
    warehouse: Warehouse = Depends(get_warehouse),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> ProductReportRow:
    """Report row for a single product"""
    report = engine.product_report(warehouse, as_of).filter(pl.col("product_key") == product_key)
    if report.is_empty():
        raise HTTPException(status_code=404, detail=f"Product {product_key} not found")
    return ProductReportRow(**report.row(0, named=True))


@router.get("/segments", response_model=SegmentSummary)
async def get_segment_summary(
    as_of: Optional[date] = None,
    warehouse: Warehouse = Depends(get_warehouse),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> SegmentSummary:
    """Customer and product counts per segment"""
    customers = engine.build(ReportType.CUSTOMERS, warehouse, as_of)
    products = engine.build(ReportType.PRODUCTS, warehouse, as_of)

    return SegmentSummary(
        reference_date=customers.reference_date,
        customers=customers.segment_counts,
        products=products.segment_counts,
        excluded_sales_rows=customers.exclusions.excluded_rows,
    )


@router.post("/query", response_model=QueryResponse)
async def query_reports(
    request: QueryRequest,
    warehouse: Warehouse = Depends(get_warehouse),
    engine: ReportingEngine = Depends(get_reporting_engine),
) -> QueryResponse:
    """
    Run SQL against report_customers, report_products, fact_sales,
    dim_customers and dim_products.
    """
    try:
        result = engine.query(warehouse, request.sql, request.as_of)
    except pl.exceptions.PolarsError as e:
        logger.warning("Report query rejected", error=str(e))
        raise HTTPException(status_code=400, detail=f"Invalid query: {e}")

    return QueryResponse(
        columns=result.columns,
        row_count=result.height,
        truncated=result.height > request.max_rows,
        rows=result.head(request.max_rows).to_dicts(),
    )
