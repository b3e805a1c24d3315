"""
Report View Assembly

Joins dimension attributes with the aggregation, classification and KPI
stages into the flat customer and product reports. Reports are recomputed
from the warehouse on every call; nothing is cached or persisted unless
`ReportingEngine.run` is asked to write an output.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union

import polars as pl
import structlog

from sales_analytics.config import ReportingSettings, get_settings
from sales_analytics.ingestion.batch_loader import FileFormat, write_frame
from sales_analytics.ingestion.warehouse import Warehouse
from sales_analytics.quality.validators import validate_warehouse
from .aggregation import ExclusionStats, aggregate_customers, aggregate_products
from .kpis import derive_customer_kpis, derive_product_kpis
from .periods import resolve_reference_date
from .segments import CustomerSegment, ProductSegment, classify_customers, classify_products

logger = structlog.get_logger(__name__)
settings = get_settings()


CUSTOMER_REPORT_COLUMNS = [
    "customer_key",
    "customer_number",
    "customer_name",
    "country",
    "age",
    "age_group",
    "customer_segment",
    "first_order_date",
    "last_order_date",
    "recency",
    "total_orders",
    "total_sales",
    "total_quantity",
    "total_products",
    "lifespan",
    "avg_order_value",
    "avg_monthly_spend",
]

PRODUCT_REPORT_COLUMNS = [
    "product_key",
    "product_number",
    "product_name",
    "category",
    "subcategory",
    "product_line",
    "cost",
    "first_sale_date",
    "last_sale_date",
    "recency_in_months",
    "product_segment",
    "lifespan",
    "total_orders",
    "total_sales",
    "total_quantity",
    "total_customers",
    "avg_selling_price",
    "avg_order_revenue",
    "avg_monthly_revenue",
]


class ReportType(str, Enum):
    """Report views produced by the engine"""
    CUSTOMERS = "customers"
    PRODUCTS = "products"


@dataclass
class ReportResult:
    """Outcome of building one report"""
    report_type: ReportType
    reference_date: date
    rows: int
    segment_counts: Dict[str, int]
    exclusions: ExclusionStats
    started_at: datetime
    completed_at: datetime
    duration_seconds: float
    report: Optional[pl.DataFrame] = field(default=None, repr=False)
    output_path: Optional[str] = None


def _customer_attributes(customers: pl.DataFrame) -> pl.DataFrame:
    return customers.unique(subset="customer_key", keep="first", maintain_order=True).select([
        "customer_key",
        "customer_number",
        pl.concat_str(
            [pl.col("first_name"), pl.col("last_name")],
            separator=" ",
            ignore_nulls=True,
        ).alias("customer_name"),
        "country",
        "birthdate",
    ]).filter(pl.col("customer_key").is_not_null())


def _product_attributes(products: pl.DataFrame) -> pl.DataFrame:
    return products.unique(subset="product_key", keep="first", maintain_order=True).select([
        "product_key",
        "product_number",
        "product_name",
        "category",
        "subcategory",
        "product_line",
        "cost",
    ]).filter(pl.col("product_key").is_not_null())


def _build_customer_report(
    warehouse: Warehouse,
    config: ReportingSettings,
    reference_date: date,
):
    aggregated = aggregate_customers(
        warehouse.sales,
        warehouse.customers,
        include_inactive=config.include_inactive,
    )
    classified = classify_customers(aggregated.frame, config)

    report = _customer_attributes(warehouse.customers).join(classified, on="customer_key", how="inner")
    report = derive_customer_kpis(report, reference_date, config)

    return report.select(CUSTOMER_REPORT_COLUMNS).sort("customer_key"), aggregated.stats


def _build_product_report(
    warehouse: Warehouse,
    config: ReportingSettings,
    reference_date: date,
):
    aggregated = aggregate_products(
        warehouse.sales,
        warehouse.products,
        include_inactive=config.include_inactive,
    )
    classified = classify_products(aggregated.frame, config)

    report = _product_attributes(warehouse.products).join(classified, on="product_key", how="inner")
    report = derive_product_kpis(report, reference_date).rename({
        "first_order_date": "first_sale_date",
        "last_order_date": "last_sale_date",
    })

    return report.select(PRODUCT_REPORT_COLUMNS).sort("product_key"), aggregated.stats


def build_customer_report(
    warehouse: Warehouse,
    config: Optional[ReportingSettings] = None,
    reference_date: Optional[date] = None,
) -> pl.DataFrame:
    """
    Customer report: one row per customer with order totals, lifespan,
    recency, age group, segment and spend KPIs.

    Args:
        warehouse: Star schema snapshot
        config: Thresholds and buckets (application settings when omitted)
        reference_date: Date recency and age are measured against
    """
    config = config or settings.reporting
    report, _ = _build_customer_report(warehouse, config, resolve_reference_date(reference_date, config))
    return report


def build_product_report(
    warehouse: Warehouse,
    config: Optional[ReportingSettings] = None,
    reference_date: Optional[date] = None,
) -> pl.DataFrame:
    """
    Product report: one row per product with order totals, lifespan,
    recency, performance segment and revenue KPIs.
    """
    config = config or settings.reporting
    report, _ = _build_product_report(warehouse, config, resolve_reference_date(reference_date, config))
    return report


def segment_counts(report: pl.DataFrame, column: str, segments) -> Dict[str, int]:
    """Entities per segment, listing every segment even when empty"""
    counts = {segment.value: 0 for segment in segments}
    for row in report.group_by(column).agg(pl.len().alias("count")).iter_rows(named=True):
        counts[row[column]] = row["count"]
    return counts


class ReportingEngine:
    """
    Builds the customer and product report views.

    Each call recomputes the report from the warehouse passed in, so results
    always reflect the current fact table.

    Example:
        engine = ReportingEngine()
        customers = engine.customer_report(warehouse, reference_date=date(2024, 6, 1))
        vip = engine.query(warehouse, "SELECT * FROM report_customers WHERE customer_segment = 'VIP'")
    """

    def __init__(
        self,
        config: Optional[ReportingSettings] = None,
        enable_validation: Optional[bool] = None,
    ):
        self.config = config or settings.reporting
        if enable_validation is None:
            enable_validation = settings.data_quality.enable_data_quality_checks
        self.enable_validation = enable_validation

    def reference_date(self, reference_date: Optional[date] = None) -> date:
        return resolve_reference_date(reference_date, self.config)

    def customer_report(self, warehouse: Warehouse, reference_date: Optional[date] = None) -> pl.DataFrame:
        return build_customer_report(warehouse, self.config, self.reference_date(reference_date))

    def product_report(self, warehouse: Warehouse, reference_date: Optional[date] = None) -> pl.DataFrame:
        return build_product_report(warehouse, self.config, self.reference_date(reference_date))

    def build(
        self,
        report_type: ReportType,
        warehouse: Warehouse,
        reference_date: Optional[date] = None,
    ) -> ReportResult:
        """Build one report and collect its run statistics"""
        started_at = datetime.utcnow()
        as_of = self.reference_date(reference_date)

        if report_type == ReportType.CUSTOMERS:
            report, exclusions = _build_customer_report(warehouse, self.config, as_of)
            counts = segment_counts(report, "customer_segment", CustomerSegment)
        elif report_type == ReportType.PRODUCTS:
            report, exclusions = _build_product_report(warehouse, self.config, as_of)
            counts = segment_counts(report, "product_segment", ProductSegment)
        else:
            raise ValueError(f"Unknown report type: {report_type}")

        completed_at = datetime.utcnow()
        result = ReportResult(
            report_type=report_type,
            reference_date=as_of,
            rows=report.height,
            segment_counts=counts,
            exclusions=exclusions,
            started_at=started_at,
            completed_at=completed_at,
            duration_seconds=(completed_at - started_at).total_seconds(),
            report=report,
        )
        logger.info(
            f"{report_type.value} report built",
            rows=result.rows,
            reference_date=as_of.isoformat(),
            segments=counts,
            excluded_rows=exclusions.excluded_rows,
        )
        return result

    def validate(self, warehouse: Warehouse) -> bool:
        """Run the input quality suites; issues are logged, never raised"""
        results = validate_warehouse(warehouse)
        passed = all(r.status.value != "failed" for r in results.values())
        if not passed:
            logger.warning(
                "Warehouse quality checks reported errors",
                failed={name: r.failed_checks for name, r in results.items() if r.failed_checks},
            )
        return passed

    def run(
        self,
        warehouse: Warehouse,
        reference_date: Optional[date] = None,
        output_path: Optional[Union[str, Path]] = None,
        file_format: FileFormat = FileFormat.PARQUET,
    ) -> Dict[str, ReportResult]:
        """
        Build both reports, optionally writing them to `output_path`.

        Returns:
            Report results keyed by report type
        """
        logger.info("Starting report run", **warehouse.row_counts)

        if self.enable_validation:
            self.validate(warehouse)

        results = {}
        for report_type in ReportType:
            result = self.build(report_type, warehouse, reference_date)
            if output_path is not None:
                result.output_path = self.write_output(result, Path(output_path), file_format)
            results[report_type.value] = result

        total_duration = sum(r.duration_seconds for r in results.values())
        logger.info(f"Report run complete in {total_duration:.2f}s")
        return results

    def write_output(self, result: ReportResult, output_path: Path, file_format: FileFormat) -> str:
        """Write a report as report_<type>_<reference date>.<ext>"""
        output_path.mkdir(parents=True, exist_ok=True)
        output_file = output_path / (
            f"report_{result.report_type.value}_{result.reference_date.strftime('%Y%m%d')}.{file_format.value}"
        )
        write_frame(result.report, output_file, file_format)
        logger.info(f"Written {result.rows} rows to {output_file}")
        return str(output_file)

    def query(
        self,
        warehouse: Warehouse,
        sql: str,
        reference_date: Optional[date] = None,
    ) -> pl.DataFrame:
        """
        Run a SQL query against freshly built report views.

        Registered tables: report_customers, report_products, fact_sales,
        dim_customers, dim_products.
        """
        as_of = self.reference_date(reference_date)
        frames = {
            "report_customers": self.customer_report(warehouse, as_of),
            "report_products": self.product_report(warehouse, as_of),
            **warehouse.tables(),
        }
        ctx = pl.SQLContext(frames=frames)
        return ctx.execute(sql, eager=True)
