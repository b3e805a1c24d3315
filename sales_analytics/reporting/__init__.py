"""
Customer and Product Reporting Module
"""
from .aggregation import AggregationResult, ExclusionStats, aggregate_customers, aggregate_products
from .reports import (
    CUSTOMER_REPORT_COLUMNS,
    PRODUCT_REPORT_COLUMNS,
    ReportingEngine,
    ReportResult,
    ReportType,
    build_customer_report,
    build_product_report,
)
from .segments import CustomerSegment, ProductSegment

__all__ = [
    "AggregationResult",
    "ExclusionStats",
    "aggregate_customers",
    "aggregate_products",
    "CUSTOMER_REPORT_COLUMNS",
    "PRODUCT_REPORT_COLUMNS",
    "ReportingEngine",
    "ReportResult",
    "ReportType",
    "build_customer_report",
    "build_product_report",
    "CustomerSegment",
    "ProductSegment",
]
