"""
Entitlement timeline reconciliation engine.

Normalizes provisioning payloads, validates business rules per record,
detects expiring and extended entitlements, and aggregates an account's
currently active products.
"""

from entitlement_engine.analysis import (
    aggregate,
    analyze_expirations,
    group_expirations,
    run_expiration_analysis,
    summarize_expiration_groups,
)
from entitlement_engine.config import EngineSettings, load_settings
from entitlement_engine.core.normalizer import normalize, normalize_record
from entitlement_engine.core.rules import RuleEngine, build_validation_report, validate

__all__ = [
    "normalize",
    "normalize_record",
    "validate",
    "build_validation_report",
    "RuleEngine",
    "analyze_expirations",
    "run_expiration_analysis",
    "group_expirations",
    "summarize_expiration_groups",
    "aggregate",
    "EngineSettings",
    "load_settings",
]
