"""
Database Module
"""
from .connection import close_database, create_schema, get_db, init_database
from .models import Base, DimCustomer, DimProduct, FactSales
from .repository import read_warehouse, write_warehouse

__all__ = [
    "init_database",
    "close_database",
    "create_schema",
    "get_db",
    "Base",
    "DimCustomer",
    "DimProduct",
    "FactSales",
    "read_warehouse",
    "write_warehouse",
]
