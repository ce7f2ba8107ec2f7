"""
Validation rule engine and configuration management.
"""

from .rule_config import (
    DEFAULT_VALIDATION_RULES,
    ConfigurationError,
    RuleConfigBuilder,
    RuleConfigLoader,
    get_enabled_validation_rules,
    resolve_rule,
)
from .rule_engine import RuleEngine, build_validation_report, validate

__all__ = [
    "RuleEngine",
    "validate",
    "build_validation_report",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "ConfigurationError",
    "DEFAULT_VALIDATION_RULES",
    "get_enabled_validation_rules",
    "resolve_rule",
]
