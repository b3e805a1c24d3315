"""
Unit Tests - Data Quality
"""
import pytest
import polars as pl

from sales_analytics.quality.validators import (
    DataValidator,
    ValidationSeverity,
    ValidationStatus,
    create_sales_validator,
    validate_warehouse,
)


class TestDataValidator:
    """Tests for DataValidator"""

    def test_not_null_check_passes(self):
        """Test not null check with valid data"""
        df = pl.DataFrame({"id": [1, 2, 3], "name": ["a", "b", "c"]})

        validator = DataValidator()
        validator.add_not_null_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.PASSED
        assert result.passed_checks == 1

    def test_not_null_check_fails(self):
        """Test not null check with null values"""
        df = pl.DataFrame({"id": [1, None, 3], "name": ["a", "b", "c"]})

        validator = DataValidator()
        validator.add_not_null_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.failed_checks == 1

    def test_unique_check_fails(self):
        """Test unique check with duplicates"""
        df = pl.DataFrame({"id": [1, 2, 1]})

        validator = DataValidator()
        validator.add_unique_check("id")

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_unique_check_ignores_nulls(self):
        df = pl.DataFrame({"id": [1, None, None]})

        result = DataValidator().add_unique_check("id").validate(df)

        assert result.status == ValidationStatus.PASSED

    def test_range_check(self):
        """Test range check"""
        df = pl.DataFrame({"price": [10.0, 50.0, -5.0, 200.0]})

        validator = DataValidator()
        validator.add_range_check("price", min_value=0, max_value=100)

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        # Two values outside range: -5 and 200
        check = result.checks[0]
        assert check.failed_rows == 2

    def test_exclusive_min(self):
        df = pl.DataFrame({"quantity": [0, 1, 2]})

        result = DataValidator().add_range_check("quantity", min_value=0, exclusive_min=True).validate(df)

        assert result.checks[0].failed_rows == 1

    def test_warning_gives_partial(self):
        """Warnings alone do not fail a suite outside strict mode"""
        df = pl.DataFrame({"id": [1, None]})

        validator = DataValidator().add_not_null_check("id", severity=ValidationSeverity.WARNING)

        assert validator.validate(df).status == ValidationStatus.PARTIAL

    def test_strict_mode_fails_on_warning(self):
        df = pl.DataFrame({"id": [1, None]})

        validator = DataValidator(strict_mode=True).add_not_null_check("id", severity=ValidationSeverity.WARNING)

        assert validator.validate(df).status == ValidationStatus.FAILED

    def test_enum_check(self):
        """Test enum/allowed values check"""
        df = pl.DataFrame({"gender": ["Male", "Female", "Unknown", None]})

        validator = DataValidator()
        validator.add_enum_check("gender", ["Male", "Female", "n/a"])

        result = validator.validate(df)

        assert result.status == ValidationStatus.FAILED
        assert result.checks[0].failed_rows == 1

    def test_missing_column_fails(self):
        df = pl.DataFrame({"other": [1]})

        result = DataValidator().add_not_null_check("id").validate(df)

        assert result.status == ValidationStatus.FAILED

    def test_referential_integrity(self):
        facts = pl.DataFrame({"customer_key": [1, 2, 99, None]})
        customers = pl.DataFrame({"customer_key": [1, 2]})

        validator = DataValidator().add_referential_integrity_check("customer_key", customers, "customer_key")
        result = validator.validate(facts)

        assert result.checks[0].failed_rows == 1
        assert result.status == ValidationStatus.PARTIAL

    def test_custom_check(self):
        """Test custom validation check"""
        df = pl.DataFrame({"total": [100, 200, 300]})

        validator = DataValidator()
        validator.add_custom_check(
            name="total_sum",
            check_func=lambda df: df["total"].sum() < 1000,
            message_on_fail="Sum exceeds 1000",
        )

        result = validator.validate(df)

        # Sum is 600, which is < 1000
        assert result.status == ValidationStatus.PASSED

    def test_custom_check_error_is_failure(self):
        df = pl.DataFrame({"total": [1]})

        validator = DataValidator().add_custom_check(
            name="broken",
            check_func=lambda df: df["missing"].sum() > 0,
            message_on_fail="never",
        )

        assert validator.validate(df).status == ValidationStatus.FAILED

    def test_success_rate(self):
        df = pl.DataFrame({"id": [1, None]})

        result = (
            DataValidator()
            .add_not_null_check("id")
            .add_unique_check("id")
            .validate(df)
        )

        assert result.success_rate == pytest.approx(50.0)


class TestWarehouseSuites:
    """Tests for the prebuilt warehouse suites"""

    def test_sales_validator_flags_orphans_and_undated(self, sample_warehouse):
        validator = create_sales_validator(sample_warehouse.customers, sample_warehouse.products)
        result = validator.validate(sample_warehouse.sales)

        failed = {c.name for c in result.checks if not c.passed}
        assert failed == {"not_null_order_date", "ref_integrity_customer_key"}
        assert result.status == ValidationStatus.PARTIAL

    def test_validate_warehouse(self, sample_warehouse):
        results = validate_warehouse(sample_warehouse)

        assert set(results) == {"fact_sales", "dim_customers", "dim_products"}
        assert results["dim_customers"].status == ValidationStatus.PASSED
        assert results["dim_products"].status == ValidationStatus.PASSED
