"""
Test Suite Configuration
"""
from datetime import date
from typing import AsyncGenerator

import pytest
import polars as pl
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from sales_analytics.config import ReportingSettings, Settings
from sales_analytics.database.models import Base
from sales_analytics.ingestion.warehouse import Warehouse

REFERENCE_DATE = date(2024, 6, 1)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
    )


@pytest.fixture
def reporting_config() -> ReportingSettings:
    """Default thresholds, pinned reference date"""
    return ReportingSettings(reference_date=REFERENCE_DATE)


@pytest.fixture
def reference_date() -> date:
    return REFERENCE_DATE


@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def sample_customers_df() -> pl.DataFrame:
    """
    1: two orders 14 months apart, 6000 spent (VIP)
    2: one dated order of 100 plus one undated line (New)
    3: no orders
    4: 17 months of activity, 1000 spent (Regular)
    5: one large order (New)
    """
    return pl.DataFrame({
        "customer_key": [1, 2, 3, 4, 5],
        "customer_id": [11001, 11002, 11003, 11004, 11005],
        "customer_number": ["AW00011001", "AW00011002", "AW00011003", "AW00011004", "AW00011005"],
        "first_name": ["Ada", "Bob", "Cara", "Dan", None],
        "last_name": ["Lovelace", "Stone", "Diaz", "Moss", "Reyes"],
        "country": ["Germany", "France", "Australia", "Germany", "Canada"],
        "marital_status": ["Married", "Single", "Single", "Married", "Single"],
        "gender": ["Female", "Male", "Female", "Male", "Female"],
        "birthdate": [date(1990, 5, 10), None, date(2010, 1, 1), date(1970, 3, 3), date(1985, 8, 8)],
        "create_date": [date(2022, 1, 1)] * 5,
    })


@pytest.fixture
def sample_products_df() -> pl.DataFrame:
    """Product 30 never sells; product 40 is the only high performer"""
    return pl.DataFrame({
        "product_key": [10, 20, 30, 40],
        "product_id": [210, 220, 230, 240],
        "product_number": ["BK-0010", "AC-0020", "CL-0030", "BK-0040"],
        "product_name": ["Road-150", "Sport Helmet", "Team Jersey", "Mountain-200"],
        "category_id": ["BI_RO", "AC_HE", "CL_JE", "BI_MO"],
        "category": ["Bikes", "Accessories", "Clothing", "Bikes"],
        "subcategory": ["Road Bikes", "Helmets", "Jerseys", "Mountain Bikes"],
        "maintenance": ["Yes", "No", "No", "Yes"],
        "cost": [2000.0, 30.0, 40.0, 1500.0],
        "product_line": ["Road", "Other Sales", "Other Sales", "Mountain"],
        "start_date": [date(2012, 1, 1)] * 4,
    })


@pytest.fixture
def sample_sales_df() -> pl.DataFrame:
    """
    Eight order lines; SO6 references unknown customer 99 and SO7 has no
    order date.
    """
    return pl.DataFrame({
        "order_number": ["SO1", "SO2", "SO3", "SO4", "SO5", "SO6", "SO7", "SO8"],
        "product_key": [10, 20, 20, 20, 10, 10, 20, 40],
        "customer_key": [1, 1, 2, 4, 4, 99, 2, 5],
        "order_date": [
            date(2023, 1, 1),
            date(2024, 3, 1),
            date(2024, 5, 15),
            date(2022, 1, 10),
            date(2023, 6, 20),
            date(2024, 1, 1),
            None,
            date(2024, 2, 10),
        ],
        "sales_amount": [4000.0, 2000.0, 100.0, 300.0, 700.0, 500.0, 50.0, 60000.0],
        "quantity": [1, 2, 1, 1, 1, 1, 1, 20],
        "price": [4000.0, 1000.0, 100.0, 300.0, 700.0, 500.0, 50.0, 3000.0],
    })


@pytest.fixture
def sample_warehouse(sample_sales_df, sample_customers_df, sample_products_df) -> Warehouse:
    return Warehouse.from_frames(
        sales=sample_sales_df,
        customers=sample_customers_df,
        products=sample_products_df,
    )
