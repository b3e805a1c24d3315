"""
Unit Tests - KPI Derivation
"""
from datetime import date

import pytest
import polars as pl

from sales_analytics.reporting.kpis import (
    age_group_expr,
    age_group_labels,
    average_monthly_expr,
    average_order_value_expr,
    derive_customer_kpis,
    derive_product_kpis,
    recency_expr,
)

REFERENCE_DATE = date(2024, 6, 1)


class TestKpiExpressions:
    """Tests for the individual indicator expressions"""

    def test_average_order_value(self):
        df = pl.DataFrame({"total_sales": [6000.0, 0.0], "total_orders": [2, 0]})
        result = df.select(average_order_value_expr().alias("aov"))["aov"].to_list()
        assert result == [3000.0, 0.0]

    def test_average_monthly_falls_back_to_total(self):
        """Zero or unknown lifespan yields the total itself"""
        df = pl.DataFrame(
            {"total_sales": [1400.0, 100.0, 0.0], "lifespan": [14, 0, None]},
            schema={"total_sales": pl.Float64, "lifespan": pl.Int64},
        )
        result = df.select(average_monthly_expr().alias("avg"))["avg"].to_list()
        assert result == [100.0, 100.0, 0.0]

    def test_recency_never_negative(self):
        """Orders after the reference date give recency 0"""
        df = pl.DataFrame(
            {"last_order_date": [date(2024, 3, 1), date(2024, 9, 1), None]},
            schema={"last_order_date": pl.Date},
        )
        result = df.select(recency_expr("last_order_date", REFERENCE_DATE).alias("r"))["r"].to_list()
        assert result == [3, 0, None]

    def test_age_group_labels(self):
        assert age_group_labels([20, 30, 40, 50]) == [
            "Under 20",
            "20-29",
            "30-39",
            "40-49",
            "50 and above",
        ]

    @pytest.mark.parametrize("age,expected", [
        (14, "Under 20"),
        (20, "20-29"),
        (29, "20-29"),
        (34, "30-39"),
        (49, "40-49"),
        (50, "50 and above"),
        (None, "Unknown"),
    ])
    def test_age_group(self, age, expected):
        df = pl.DataFrame({"age": [age]}, schema={"age": pl.Int64})
        assert df.select(age_group_expr([20, 30, 40, 50]).alias("g"))["g"][0] == expected


class TestDeriveKpis:
    """Tests for KPI columns on aggregate frames"""

    def test_customer_kpis(self, reporting_config):
        df = pl.DataFrame(
            {
                "birthdate": [date(1990, 5, 10), None],
                "last_order_date": [date(2024, 3, 1), None],
                "total_sales": [6000.0, 0.0],
                "total_orders": [2, 0],
                "lifespan": [14, None],
            },
            schema={
                "birthdate": pl.Date,
                "last_order_date": pl.Date,
                "total_sales": pl.Float64,
                "total_orders": pl.Int64,
                "lifespan": pl.Int64,
            },
        )
        active, inactive = derive_customer_kpis(df, REFERENCE_DATE, reporting_config).iter_rows(named=True)

        assert active["age"] == 34
        assert active["age_group"] == "30-39"
        assert active["recency"] == 3
        assert active["avg_order_value"] == pytest.approx(3000.0)
        assert active["avg_monthly_spend"] == pytest.approx(6000.0 / 14)

        assert inactive["age"] is None
        assert inactive["age_group"] == "Unknown"
        assert inactive["recency"] is None
        assert inactive["avg_order_value"] == 0.0
        assert inactive["avg_monthly_spend"] == 0.0

    def test_product_kpis(self):
        df = pl.DataFrame({
            "last_order_date": [date(2024, 2, 10)],
            "total_sales": [60000.0],
            "total_orders": [1],
            "lifespan": [0],
        })
        row = derive_product_kpis(df, REFERENCE_DATE).row(0, named=True)

        assert row["recency_in_months"] == 4
        assert row["avg_order_revenue"] == pytest.approx(60000.0)
        assert row["avg_monthly_revenue"] == pytest.approx(60000.0)
