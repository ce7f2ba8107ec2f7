"""
Validation rule implementations.

Provides validators for app quantities, model counts and same-product
date-range overlaps.
"""

from .base_validator import BaseValidator
from .count_validator import CountValidator
from .date_overlap_validator import (
    DateOverlapValidator,
    classify_overlap,
    entitlements_overlap,
    ranges_overlap,
)
from .quantity_validator import QuantityValidator

__all__ = [
    "BaseValidator",
    "QuantityValidator",
    "CountValidator",
    "DateOverlapValidator",
    "ranges_overlap",
    "classify_overlap",
    "entitlements_overlap",
]
