"""
Warehouse Ingestion Module
"""
from .batch_loader import BatchLoader, FileFormat, LoadResult, LoadStatus, TableFileConfig
from .schema import SchemaValidationError
from .warehouse import Warehouse, WarehouseTable

__all__ = [
    "BatchLoader",
    "FileFormat",
    "LoadResult",
    "LoadStatus",
    "TableFileConfig",
    "SchemaValidationError",
    "Warehouse",
    "WarehouseTable",
]
