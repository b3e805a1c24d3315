"""
Unit Tests - Exploratory Analytics
"""
from datetime import date

import pytest
import polars as pl

from sales_analytics.analytics import (
    category_contribution,
    count_by,
    cumulative_sales,
    customer_segment_counts,
    date_range_summary,
    measures_overview,
    product_cost_ranges,
    sales_by,
    sales_over_time,
    top_customers,
    top_products,
    yearly_product_performance,
)
from sales_analytics.analytics.part_to_whole import contribution
from sales_analytics.analytics.segmentation import cost_range_labels
from sales_analytics.reporting import build_customer_report


class TestExploration:
    """Tests for measures and magnitude analysis"""

    def test_measures_overview(self, sample_warehouse):
        measures = dict(measures_overview(sample_warehouse).iter_rows())

        assert measures["Total Sales"] == pytest.approx(67650.0)
        assert measures["Total Orders"] == 8
        assert measures["Total Products"] == 4
        assert measures["Total Customers"] == 5
        assert measures["Customers Ordering"] == 5

    def test_date_range_summary(self, sample_warehouse):
        summary = date_range_summary(sample_warehouse)

        assert summary["first_order_date"] == date(2022, 1, 10)
        assert summary["last_order_date"] == date(2024, 5, 15)
        assert summary["order_range_months"] == 28
        assert summary["oldest_birthdate"] == date(1970, 3, 3)

    def test_count_by(self, sample_warehouse):
        counts = count_by(sample_warehouse.customers, "country", "total_customers")
        assert counts.row(0) == ("Germany", 2)

    def test_count_by_unknown_column(self, sample_warehouse):
        with pytest.raises(ValueError):
            count_by(sample_warehouse.customers, "planet")

    def test_sales_by_category(self, sample_warehouse):
        """Dangling customer lines are dropped by the dimension join"""
        result = sales_by(sample_warehouse, "category")
        totals = dict(zip(result["category"].to_list(), result["total_sales"].to_list()))

        assert totals["Bikes"] == pytest.approx(4000 + 700 + 60000)
        assert totals["Accessories"] == pytest.approx(2000 + 100 + 300 + 50)


class TestRanking:
    """Tests for top-N rankings"""

    def test_top_products(self, sample_warehouse):
        result = top_products(sample_warehouse, n=2)

        assert result["product_key"].to_list() == [40, 10]
        assert result["rank"].to_list() == [1, 2]

    def test_bottom_products_by_quantity(self, sample_warehouse):
        result = top_products(sample_warehouse, n=1, by="total_quantity", bottom=True)
        assert result["product_key"].to_list() == [10]

    def test_top_customers(self, sample_warehouse):
        result = top_customers(sample_warehouse, n=3)
        assert result["customer_name"].to_list() == ["Reyes", "Ada Lovelace", "Dan Moss"]

    def test_unknown_measure(self, sample_warehouse):
        with pytest.raises(ValueError):
            top_products(sample_warehouse, by="margin")


class TestTrends:
    """Tests for change-over-time analyses"""

    def test_sales_over_time_by_year(self, sample_warehouse):
        result = sales_over_time(sample_warehouse.sales, "year")

        assert [d.year for d in result["period"].to_list()] == [2022, 2023, 2024]
        assert result["total_sales"].to_list() == pytest.approx([300.0, 4700.0, 62600.0])

    def test_cumulative_sales(self, sample_warehouse):
        result = cumulative_sales(sample_warehouse.sales, "year")
        assert result["running_total_sales"].to_list() == pytest.approx([300.0, 5000.0, 67600.0])

    def test_unknown_granularity(self, sample_warehouse):
        with pytest.raises(ValueError):
            sales_over_time(sample_warehouse.sales, "fortnight")

    def test_yearly_product_performance(self, sample_warehouse):
        result = yearly_product_performance(sample_warehouse).filter(pl.col("product_key") == 10)

        first, second = result.iter_rows(named=True)
        assert first["order_year"] == 2023
        assert first["current_sales"] == pytest.approx(4700.0)
        assert first["py_change"] is None
        assert first["avg_change"] == "Above Avg"
        assert second["current_sales"] == pytest.approx(500.0)
        assert second["py_change"] == "Decrease"
        assert second["avg_change"] == "Below Avg"


class TestPartToWhole:
    """Tests for contribution analysis"""

    def test_percentages_sum_to_100(self, sample_warehouse):
        result = category_contribution(sample_warehouse)
        assert result["percentage_of_total"].sum() == pytest.approx(100.0, abs=0.05)

    def test_largest_first(self, sample_warehouse):
        result = category_contribution(sample_warehouse)
        assert result["category"][0] == "Bikes"

    def test_zero_total(self):
        df = pl.DataFrame({"group": ["a", "b"], "value": [0.0, 0.0]})
        result = contribution(df, "group", "value")
        assert result["percentage_of_total"].to_list() == [0.0, 0.0]


class TestSegmentation:
    """Tests for cost ranges and segment distributions"""

    def test_cost_range_labels(self):
        assert cost_range_labels([100, 500, 1000]) == ["Below 100", "100-500", "500-1000", "Above 1000"]

    def test_product_cost_ranges(self, sample_warehouse, reporting_config):
        result = product_cost_ranges(sample_warehouse.products, reporting_config)
        counts = dict(zip(result["cost_range"].to_list(), result["total_products"].to_list()))

        assert counts == {"Below 100": 2, "100-500": 0, "500-1000": 0, "Above 1000": 2}

    def test_customer_segment_counts(self, sample_warehouse, reporting_config):
        report = build_customer_report(sample_warehouse, reporting_config)
        result = customer_segment_counts(report)

        assert dict(result.iter_rows()) == {"VIP": 1, "Regular": 1, "New": 3}
        assert result["total_customers"].sum() == report.height
