"""
Cross-record analyses over an account's provisioning history.
"""

from .aggregation import UNKNOWN_REGION, ProductKey, aggregate, is_multi_instance, product_status
from .expiration import (
    analyze_expirations,
    group_expirations,
    run_expiration_analysis,
    summarize_expiration_groups,
)

__all__ = [
    "aggregate",
    "product_status",
    "is_multi_instance",
    "ProductKey",
    "UNKNOWN_REGION",
    "analyze_expirations",
    "run_expiration_analysis",
    "group_expirations",
    "summarize_expiration_groups",
]
