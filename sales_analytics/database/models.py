"""
Database Models - Sales Star Schema

Relational layout of the gold layer the reporting engine reads from:

Fact Tables:
- FactSales: One row per order line

Dimension Tables:
- DimCustomer: Customer attributes
- DimProduct: Product catalog and categories

Keys between facts and dimensions are indexed but not enforced; order lines
with unknown keys are tolerated and excluded at report time.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class DimCustomer(Base):
    """
    Customer Dimension Table

    One row per customer, keyed by the warehouse surrogate key.
    """
    __tablename__ = "dim_customers"

    customer_key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    customer_id: Mapped[Optional[int]] = mapped_column(Integer)
    customer_number: Mapped[Optional[str]] = mapped_column(String(50))

    # Personal info
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    country: Mapped[Optional[str]] = mapped_column(String(100))
    marital_status: Mapped[Optional[str]] = mapped_column(String(20))
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    birthdate: Mapped[Optional[date]] = mapped_column(Date)

    # Dates
    create_date: Mapped[Optional[date]] = mapped_column(Date)

    __table_args__ = (
        Index("ix_dim_customers_country", "country"),
    )


class DimProduct(Base):
    """
    Product Dimension Table

    Product catalog with category hierarchy and unit cost.
    """
    __tablename__ = "dim_products"

    product_key: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    product_id: Mapped[Optional[int]] = mapped_column(Integer)
    product_number: Mapped[Optional[str]] = mapped_column(String(50))

    # Product details
    product_name: Mapped[Optional[str]] = mapped_column(String(200))
    category_id: Mapped[Optional[str]] = mapped_column(String(50))
    category: Mapped[Optional[str]] = mapped_column(String(100))
    subcategory: Mapped[Optional[str]] = mapped_column(String(100))
    maintenance: Mapped[Optional[str]] = mapped_column(String(20))
    product_line: Mapped[Optional[str]] = mapped_column(String(50))

    # Pricing
    cost: Mapped[Optional[float]] = mapped_column(Float)

    # Dates
    start_date: Mapped[Optional[date]] = mapped_column(Date)

    __table_args__ = (
        Index("ix_dim_products_category", "category"),
    )


# =============================================================================
# FACT TABLES
# =============================================================================

class FactSales(Base):
    """
    Sales Fact Table

    One row per order line. Rows are append-only history.
    """
    __tablename__ = "fact_sales"

    sales_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_number: Mapped[str] = mapped_column(String(50), nullable=False)

    # Dimension keys
    product_key: Mapped[Optional[int]] = mapped_column(Integer)
    customer_key: Mapped[Optional[int]] = mapped_column(Integer)

    # Dates
    order_date: Mapped[Optional[date]] = mapped_column(Date)
    shipping_date: Mapped[Optional[date]] = mapped_column(Date)
    due_date: Mapped[Optional[date]] = mapped_column(Date)

    # Measures
    sales_amount: Mapped[Optional[float]] = mapped_column(Float)
    quantity: Mapped[Optional[int]] = mapped_column(Integer)
    price: Mapped[Optional[float]] = mapped_column(Float)

    __table_args__ = (
        Index("ix_fact_sales_order_number", "order_number"),
        Index("ix_fact_sales_customer_key", "customer_key"),
        Index("ix_fact_sales_product_key", "product_key"),
        Index("ix_fact_sales_order_date", "order_date"),
    )
