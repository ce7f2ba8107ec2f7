"""
Engine settings.

Settings are loaded by the host application and passed explicitly into
the engine; nothing inside the engine reads them from global state.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from entitlement_engine.core.models import ValidationRule
from entitlement_engine.core.rules import ConfigurationError, get_enabled_validation_rules, resolve_rule


class EngineSettings(BaseModel):
    """
    Attributes:
        enabled_rules: Rules to run (ids, dicts or ValidationRule)
        lookback_years: Expiration analysis lookback
        expiration_window_days: Expiration analysis horizon
        multi_instance_marker: Product-code marker for non-mergeable products
        extension_strategy: "first" or "latest" extension match
        exclude_removed: Drop expirations for products a later record removed
        collapse_record_lines: Test only the latest line per product code within a record
        log_level: Level passed to setup_logger
    """

    enabled_rules: list[ValidationRule] = Field(default_factory=get_enabled_validation_rules)
    lookback_years: int = Field(5, ge=0)
    expiration_window_days: int = Field(30, ge=0)
    multi_instance_marker: str = "databridge"
    extension_strategy: Literal["first", "latest"] = "first"
    exclude_removed: bool = False
    collapse_record_lines: bool = False
    log_level: str = "INFO"

    class Config:
        json_schema_extra = {
            "example": {
                "enabled_rules": ["app-quantity-validation", "model-count-validation"],
                "lookback_years": 5,
                "expiration_window_days": 30,
                "multi_instance_marker": "databridge",
                "extension_strategy": "first",
                "log_level": "INFO"
            }
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineSettings":
        data = dict(data)
        if "enabled_rules" in data:
            rules = data["enabled_rules"]
            if not isinstance(rules, list):
                raise ConfigurationError("'enabled_rules' must be a list")
            data["enabled_rules"] = [resolve_rule(rule) for rule in rules]
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid engine settings: {e}") from e


def load_settings(config_path: str | Path) -> EngineSettings:
    """
    Load engine settings from a YAML file.

    Expected YAML format:
    ```yaml
    engine:
      enabled_rules:
        - app-quantity-validation
        - id: model-count-validation
          params:
            limit: 150
      lookback_years: 5
      expiration_window_days: 30
    ```

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the YAML or a value is invalid
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Engine configuration file not found: {config_path}")

    with open(path) as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if config is None:
        return EngineSettings()
    if not isinstance(config, dict):
        raise ConfigurationError("Configuration file must be a mapping")

    section = config.get("engine", config)
    if not isinstance(section, dict):
        raise ConfigurationError("'engine' section must be a mapping")
    return EngineSettings.from_dict(section)
