"""
Data Quality Module
"""
from .validators import DataValidator, ValidationResult, ValidationStatus, validate_warehouse

__all__ = [
    "DataValidator",
    "ValidationResult",
    "ValidationStatus",
    "validate_warehouse",
]
