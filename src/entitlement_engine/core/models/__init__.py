"""
Core data models for the entitlement reconciliation engine.

All models use Pydantic for runtime validation and plain serialization.
"""

from .customer_products import (
    AggregatedProduct,
    CategoryCounts,
    CustomerProducts,
    LastUpdated,
    ProductSummary,
    RegionProducts,
)
from .entitlement import CATEGORY_KEYS, Category, Entitlement
from .expiration import (
    ExpirationAnalysis,
    ExpirationEntry,
    ExpirationGroup,
    ExpirationSummary,
)
from .normalized_payload import NormalizedPayload
from .provisioning_record import ProvisioningRecord
from .validation_result import (
    FailedRule,
    RecordValidation,
    RuleResult,
    ValidationErrorEntry,
    ValidationReport,
    ValidationSummary,
)
from .validation_rule import ValidationRule

__all__ = [
    "Category",
    "CATEGORY_KEYS",
    "Entitlement",
    "ProvisioningRecord",
    "NormalizedPayload",
    "ValidationRule",
    "RuleResult",
    "RecordValidation",
    "FailedRule",
    "ValidationErrorEntry",
    "ValidationSummary",
    "ValidationReport",
    "ExpirationEntry",
    "ExpirationAnalysis",
    "ExpirationGroup",
    "ExpirationSummary",
    "AggregatedProduct",
    "RegionProducts",
    "CategoryCounts",
    "ProductSummary",
    "LastUpdated",
    "CustomerProducts",
]
