"""
Unit Tests - Warehouse Ingestion
"""
from datetime import date

import pytest
import polars as pl

from sales_analytics.ingestion import (
    BatchLoader,
    FileFormat,
    LoadStatus,
    SchemaValidationError,
    Warehouse,
    WarehouseTable,
)
from sales_analytics.ingestion.schema import coerce_customers, coerce_sales


class TestCoercion:
    """Tests for schema coercion"""

    def test_string_columns_are_typed(self):
        df = pl.DataFrame({
            "order_number": ["SO1"],
            "product_key": ["10"],
            "customer_key": [" 1 "],
            "order_date": ["2010-12-29 00:00:00"],
            "sales_amount": ["3578.27"],
            "quantity": ["1"],
        })
        result = coerce_sales(df)

        assert result.schema["product_key"] == pl.Int64
        assert result.schema["order_date"] == pl.Date
        assert result["customer_key"][0] == 1
        assert result["order_date"][0] == date(2010, 12, 29)

    def test_missing_price_is_derived(self):
        df = pl.DataFrame({
            "order_number": ["SO1"],
            "product_key": [10],
            "customer_key": [1],
            "sales_amount": [90.0],
            "quantity": [3],
        })
        result = coerce_sales(df)

        assert result["price"][0] == pytest.approx(30.0)
        assert result["order_date"][0] is None

    def test_unparseable_date_becomes_null(self):
        df = pl.DataFrame({"customer_key": ["1"], "birthdate": ["not a date"]})
        assert coerce_customers(df)["birthdate"][0] is None

    def test_missing_required_column(self):
        df = pl.DataFrame({"order_number": ["SO1"], "product_key": [1]})
        with pytest.raises(SchemaValidationError, match="customer_key"):
            coerce_sales(df)

    def test_extra_columns_kept(self):
        df = pl.DataFrame({"customer_key": [1], "loyalty_tier": ["gold"]})
        result = coerce_customers(df)

        assert result.columns[-1] == "loyalty_tier"
        assert "first_name" in result.columns


class TestWarehouse:
    """Tests for the warehouse snapshot"""

    def test_tables_and_counts(self, sample_warehouse):
        assert set(sample_warehouse.tables()) == {"fact_sales", "dim_customers", "dim_products"}
        assert sample_warehouse.row_counts == {"fact_sales": 8, "dim_customers": 5, "dim_products": 4}
        assert sample_warehouse.table(WarehouseTable.DIM_PRODUCTS).height == 4


class TestBatchLoader:
    """Tests for file-based loading"""

    @pytest.mark.parametrize("file_format", [FileFormat.CSV, FileFormat.PARQUET])
    def test_write_then_load(self, sample_warehouse, tmp_path, file_format):
        loader = BatchLoader(warehouse_path=str(tmp_path), file_format=file_format)
        loader.write_warehouse(sample_warehouse)

        loaded = loader.load_warehouse()

        assert loaded.row_counts == sample_warehouse.row_counts
        assert loaded.sales.schema["order_date"] == pl.Date
        assert loaded.sales["order_date"].null_count() == 1
        assert loaded.customers["birthdate"].to_list() == sample_warehouse.customers["birthdate"].to_list()

    def test_load_missing_file_raises(self, tmp_path):
        loader = BatchLoader(warehouse_path=str(tmp_path))
        with pytest.raises(FileNotFoundError):
            loader.load_warehouse()

    def test_load_table_reports_failure(self, tmp_path):
        loader = BatchLoader(warehouse_path=str(tmp_path), file_format=FileFormat.CSV)
        df, result = loader.load_table(loader.table_config(WarehouseTable.FACT_SALES))

        assert df is None
        assert result.status == LoadStatus.FAILED
        assert result.error_message

    def test_csv_missing_required_column(self, tmp_path):
        (tmp_path / "dim_products.csv").write_text("product_name,cost\nRoad-150,2000\n")
        loader = BatchLoader(warehouse_path=str(tmp_path), file_format=FileFormat.CSV)

        with pytest.raises(SchemaValidationError):
            loader.read_table(loader.table_config(WarehouseTable.DIM_PRODUCTS))

    def test_csv_empty_cells_are_null(self, tmp_path):
        (tmp_path / "dim_customers.csv").write_text(
            "customer_key,first_name,birthdate\n1,Ada,1990-05-10\n2,,\n"
        )
        loader = BatchLoader(warehouse_path=str(tmp_path), file_format=FileFormat.CSV)

        df, result = loader.read_table(loader.table_config(WarehouseTable.DIM_CUSTOMERS))

        assert result.status == LoadStatus.COMPLETED
        assert result.rows_loaded == 2
        assert result.file_hash
        assert df["birthdate"].to_list() == [date(1990, 5, 10), None]
        assert df["first_name"][1] is None

    def test_warehouse_is_frozen(self, sample_warehouse):
        with pytest.raises(AttributeError):
            sample_warehouse.sales = pl.DataFrame()

    def test_from_frames_coerces(self, sample_sales_df, sample_customers_df, sample_products_df):
        warehouse = Warehouse.from_frames(
            sales=sample_sales_df.with_columns(pl.col("quantity").cast(pl.Utf8)),
            customers=sample_customers_df,
            products=sample_products_df,
        )
        assert warehouse.sales.schema["quantity"] == pl.Int64
