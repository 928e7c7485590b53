"""
Core shared primitives: application exceptions.
"""

from backend_risklab.core.exceptions import (
    ClassifierError,
    PersistenceError,
    RiskLabError,
    StoreNotConfigured,
    ValidationError,
)

__all__ = [
    "ClassifierError",
    "PersistenceError",
    "RiskLabError",
    "StoreNotConfigured",
    "ValidationError",
]
