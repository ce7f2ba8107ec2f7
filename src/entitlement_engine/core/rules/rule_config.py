"""
Rule configuration management.

Holds the default rule catalog, loads rule overrides from YAML files and
provides a builder for assembling rule lists in code.
"""

from pathlib import Path
from typing import Any

import yaml

from entitlement_engine.core.models import ValidationRule


class ConfigurationError(ValueError):
    """Raised when a rule or settings configuration is invalid."""


DEFAULT_VALIDATION_RULES: tuple[ValidationRule, ...] = (
    ValidationRule(
        rule_id="app-quantity-validation",
        name="App Quantity Validation",
        description=(
            "For Apps section: quantity must be 1, except IC-DATABRIDGE and "
            "RI-RISKMODELER-EXPANSION products are always valid"
        ),
        category="product-validation",
        version="1.0",
        parameters={"exempt_codes": ["IC-DATABRIDGE", "RI-RISKMODELER-EXPANSION"]},
    ),
    ValidationRule(
        rule_id="model-count-validation",
        name="Model Count Validation",
        description="Fails if number of Models is more than 100, otherwise passes",
        category="product-validation",
        version="1.0",
        parameters={"limit": 100},
    ),
    ValidationRule(
        rule_id="entitlement-date-overlap-validation",
        name="Entitlement Date Overlap Validation",
        description="Fails if entitlements with the same productCode have overlapping date ranges",
        category="date-validation",
        version="1.0",
    ),
)


def get_catalog_rule(rule_id: str) -> ValidationRule | None:
    """Return a copy of the catalog entry for ``rule_id``, if any."""
    for rule in DEFAULT_VALIDATION_RULES:
        if rule.rule_id == rule_id:
            return rule.model_copy(deep=True)
    return None


def get_enabled_validation_rules() -> list[ValidationRule]:
    """All catalog rules that are enabled by default."""
    return [rule.model_copy(deep=True) for rule in DEFAULT_VALIDATION_RULES if rule.enabled]


def resolve_rule(rule: ValidationRule | str | dict[str, Any]) -> ValidationRule:
    """
    Turn a rule id, a rule dict or a ValidationRule into a ValidationRule.

    Ids and dicts are layered over the catalog entry with the same id;
    dict parameters are merged over the catalog parameters.
    """
    if isinstance(rule, ValidationRule):
        return rule
    if isinstance(rule, str):
        return get_catalog_rule(rule) or ValidationRule(rule_id=rule, name=rule)
    if isinstance(rule, dict):
        rule_id = rule.get("rule_id") or rule.get("id")
        if not rule_id:
            raise ConfigurationError(f"Rule definition is missing 'id': {rule}")
        base = get_catalog_rule(rule_id) or ValidationRule(rule_id=rule_id, name=rule_id)
        overrides = {k: v for k, v in rule.items() if k not in ("id", "rule_id", "params", "parameters")}
        parameters = {**base.parameters, **(rule.get("params") or rule.get("parameters") or {})}
        try:
            return ValidationRule.model_validate({
                **base.model_dump(),
                **overrides,
                "rule_id": rule_id,
                "parameters": parameters,
            })
        except ValueError as e:
            raise ConfigurationError(f"Invalid rule definition for '{rule_id}': {e}") from e
    raise TypeError(f"Unsupported rule definition type: {type(rule).__name__}")


class RuleConfigLoader:
    """
    Loads validation rules from YAML configuration files.

    Expected YAML format:
    ```yaml
    rules:
      - id: app-quantity-validation
        params:
          exempt_codes: [IC-DATABRIDGE, RI-RISKMODELER-EXPANSION]
      - id: model-count-validation
        params:
          limit: 100
      - id: entitlement-date-overlap-validation
        enabled: false
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the rule config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_rules(self) -> list[ValidationRule]:
        """
        Load and parse validation rules from the YAML file.

        Returns:
            List of ValidationRule suitable for RuleEngine

        Raises:
            ConfigurationError: If YAML is invalid or missing required fields
        """
        with open(self.config_path) as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(config, dict) or "rules" not in config:
            raise ConfigurationError("Configuration file must contain 'rules' section")

        rule_defs = config["rules"]
        if not isinstance(rule_defs, list):
            raise ConfigurationError("'rules' must be a list")

        rules = []
        for idx, rule_def in enumerate(rule_defs):
            if isinstance(rule_def, str):
                rule_def = {"id": rule_def}
            if not isinstance(rule_def, dict):
                raise ConfigurationError(f"Rule #{idx} must be a mapping or a rule id")
            rules.append(resolve_rule(rule_def))

        return rules


class RuleConfigBuilder:
    """
    Programmatically build rule configurations (for testing or dynamic rules).
    """

    def __init__(self):
        self.rules: list[ValidationRule] = []

    def add_app_quantity(self, exempt_codes: list[str] | None = None) -> "RuleConfigBuilder":
        """Add the app quantity rule."""
        params = {} if exempt_codes is None else {"exempt_codes": list(exempt_codes)}
        self.rules.append(resolve_rule({"id": "app-quantity-validation", "params": params}))
        return self

    def add_model_count(self, limit: int | None = None) -> "RuleConfigBuilder":
        """Add the model count rule."""
        params = {} if limit is None else {"limit": limit}
        self.rules.append(resolve_rule({"id": "model-count-validation", "params": params}))
        return self

    def add_date_overlap(self) -> "RuleConfigBuilder":
        """Add the same-product date overlap rule."""
        self.rules.append(resolve_rule("entitlement-date-overlap-validation"))
        return self

    def add_rule(self, rule_id: str, enabled: bool = True, **params: Any) -> "RuleConfigBuilder":
        """Add any rule by id."""
        self.rules.append(resolve_rule({"id": rule_id, "enabled": enabled, "params": params}))
        return self

    def build(self) -> list[ValidationRule]:
        """Build and return the rule configuration."""
        return list(self.rules)
