"""
Unit Tests - Relational Warehouse Source
"""
from datetime import date

import pytest
import polars as pl

from sales_analytics.database import connection
from sales_analytics.database.repository import read_warehouse, write_warehouse
from sales_analytics.reporting import build_customer_report


class TestRepository:
    """Tests for moving the star schema through the database"""

    async def test_empty_database(self, test_db):
        warehouse = await read_warehouse(test_db)

        assert warehouse.row_counts == {"fact_sales": 0, "dim_customers": 0, "dim_products": 0}
        assert warehouse.sales.schema["order_date"] == pl.Date

    async def test_write_then_read(self, test_db, sample_warehouse):
        inserted = await write_warehouse(test_db, sample_warehouse)
        loaded = await read_warehouse(test_db)

        assert inserted == {"fact_sales": 8, "dim_customers": 5, "dim_products": 4}
        assert loaded.row_counts == sample_warehouse.row_counts
        assert loaded.sales["order_date"].null_count() == 1
        assert loaded.customers.sort("customer_key")["birthdate"][0] == date(1990, 5, 10)

    async def test_report_matches_file_source(self, test_db, sample_warehouse, reporting_config):
        """The same snapshot yields the same report from either source"""
        await write_warehouse(test_db, sample_warehouse)
        loaded = await read_warehouse(test_db)

        from_db = build_customer_report(loaded, reporting_config)
        from_frames = build_customer_report(sample_warehouse, reporting_config)

        assert from_db.select(["customer_key", "customer_segment", "total_sales"]).equals(
            from_frames.select(["customer_key", "customer_segment", "total_sales"])
        )


class TestConnection:
    """Tests for engine lifecycle"""

    async def test_lifecycle(self, sample_warehouse):
        await connection.init_database("sqlite+aiosqlite:///:memory:")
        try:
            await connection.create_schema()

            async with connection.get_db() as db:
                await write_warehouse(db, sample_warehouse)

            async with connection.get_db() as db:
                loaded = await read_warehouse(db)

            health = await connection.check_database_health()

            assert loaded.row_counts["fact_sales"] == 8
            assert health["status"] == "healthy"
        finally:
            await connection.close_database()

    def test_engine_required(self):
        with pytest.raises(RuntimeError):
            connection.get_engine()

    async def test_health_without_engine(self):
        health = await connection.check_database_health()
        assert health["status"] == "unhealthy"
