"""
Warehouse Quality Checks

Rule-based validation of the star schema tables before reporting.

Features:
- Null and uniqueness checks on keys
- Range checks on amounts, quantities and costs
- Referential integrity between the fact table and its dimensions
- Custom checks

Checks never raise: failures are reported in a ValidationResult and logged.
Referential integrity and value issues are warnings because the reporting
stages exclude or tolerate the offending rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import polars as pl
import structlog

from sales_analytics.ingestion.warehouse import Warehouse

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
    )


class DataValidator:
    """
    Fluent validator for one table.

    Example:
        validator = (
            DataValidator("fact_sales")
            .add_not_null_check("order_number")
            .add_range_check("sales_amount", min_value=0)
        )
        result = validator.validate(df)
    """

    def __init__(self, table: str = "table", strict_mode: bool = False):
        self.table = table
        self.strict_mode = strict_mode  # Fail on any warning
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            null_count = df[column].null_count()
            total = len(df)
            return ValidationCheck(
                name=name,
                passed=null_count == 0,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values",
                details={"null_percentage": (null_count / total) * 100 if total > 0 else 0},
                failed_rows=null_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of non-null column values"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            values = df[column].drop_nulls()
            duplicate_count = len(values) - values.n_unique()
            return ValidationCheck(
                name=name,
                passed=duplicate_count == 0,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values",
                details={"duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        exclusive_min: bool = False,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within a range; nulls are ignored"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(
                    pl.col(column) <= min_value if exclusive_min else pl.col(column) < min_value
                )
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)
            if not conditions:
                return ValidationCheck(name=name, passed=True, severity=severity, message="No range specified")

            out_of_range = df.filter(pl.any_horizontal(conditions)).height
            return ValidationCheck(
                name=name,
                passed=out_of_range == 0,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]",
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that non-null values belong to an allowed set"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"enum_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            invalid = df.filter(
                ~pl.col(column).is_in(allowed_values) & pl.col(column).is_not_null()
            ).height
            return ValidationCheck(
                name=name,
                passed=invalid == 0,
                severity=severity,
                message=f"Column '{column}' has {invalid} values outside {allowed_values}",
                details={"allowed_values": allowed_values, "invalid_count": invalid},
                failed_rows=invalid,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_referential_integrity_check(
        self,
        column: str,
        reference_df: pl.DataFrame,
        reference_column: str,
        severity: ValidationSeverity = ValidationSeverity.WARNING,
    ) -> "DataValidator":
        """Add check that every non-null key exists in the reference table"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"ref_integrity_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            reference = reference_df.select(pl.col(reference_column).alias(column)).drop_nulls().unique()
            orphans = df.filter(pl.col(column).is_not_null()).join(reference, on=column, how="anti").height
            return ValidationCheck(
                name=name,
                passed=orphans == 0,
                severity=severity,
                message=f"Column '{column}' has {orphans} orphan records",
                details={"orphan_count": orphans},
                failed_rows=orphans,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def add_custom_check(
        self,
        name: str,
        check_func: Callable[[pl.DataFrame], bool],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add custom validation check"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            try:
                passed = bool(check_func(df))
            except (pl.exceptions.PolarsError, KeyError, ValueError, TypeError) as e:
                return ValidationCheck(
                    name=name,
                    passed=False,
                    severity=severity,
                    message=f"Check failed with error: {e}",
                )
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else message_on_fail,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.utcnow()
        results = [check(df) for check in self._checks]

        for result in results:
            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    table=self.table,
                    message=result.message,
                    severity=result.severity.value,
                )

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0 or (warning_count > 0 and self.strict_mode):
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        logger.info(
            f"Validation complete: {status.value}",
            table=self.table,
            rows=len(df),
            passed=passed_checks,
            failed=failed_checks,
            warnings=warning_count,
        )

        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=datetime.utcnow(),
        )


def create_sales_validator(customers: pl.DataFrame, products: pl.DataFrame) -> DataValidator:
    """Validator for the sales fact table"""
    return (
        DataValidator("fact_sales")
        .add_not_null_check("order_number")
        .add_not_null_check("order_date", severity=ValidationSeverity.WARNING)
        .add_range_check("sales_amount", min_value=0, severity=ValidationSeverity.WARNING)
        .add_range_check("quantity", min_value=0, exclusive_min=True, severity=ValidationSeverity.WARNING)
        .add_referential_integrity_check("customer_key", customers, "customer_key")
        .add_referential_integrity_check("product_key", products, "product_key")
    )


def create_customers_validator() -> DataValidator:
    """Validator for the customer dimension"""
    return (
        DataValidator("dim_customers")
        .add_not_null_check("customer_key")
        .add_unique_check("customer_key")
        .add_enum_check("gender", ["Male", "Female", "n/a"], severity=ValidationSeverity.WARNING)
        .add_enum_check("marital_status", ["Married", "Single", "n/a"], severity=ValidationSeverity.WARNING)
    )


def create_products_validator() -> DataValidator:
    """Validator for the product dimension"""
    return (
        DataValidator("dim_products")
        .add_not_null_check("product_key")
        .add_unique_check("product_key")
        .add_range_check("cost", min_value=0, severity=ValidationSeverity.WARNING)
    )


def validate_warehouse(warehouse: Warehouse) -> Dict[str, ValidationResult]:
    """Run every table suite against a warehouse snapshot"""
    return {
        "fact_sales": create_sales_validator(warehouse.customers, warehouse.products).validate(warehouse.sales),
        "dim_customers": create_customers_validator().validate(warehouse.customers),
        "dim_products": create_products_validator().validate(warehouse.products),
    }
