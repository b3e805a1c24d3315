"""
Data Generation Module
"""
from .generators import WarehouseGenerator, generate_dataset

__all__ = [
    "WarehouseGenerator",
    "generate_dataset",
]
