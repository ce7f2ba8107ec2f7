"""
ValidationRule model representing one entry of the validation rule catalog.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ValidationRule(BaseModel):
    """
    A configurable business rule applied to a provisioning record.

    Attributes:
        rule_id: Stable identifier ("app-quantity-validation")
        name: Human-readable name
        description: What the rule checks
        category: "product-validation" or "date-validation"
        version: Rule version
        enabled: Whether the rule runs
        parameters: Rule-specific params (e.g., {"limit": 100})
    """

    rule_id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    category: Literal["product-validation", "date-validation"] = "product-validation"
    version: str = "1.0"
    enabled: bool = True
    parameters: dict[str, Any] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {
                "rule_id": "model-count-validation",
                "name": "Model Count Validation",
                "description": "Fails if number of Models is more than 100, otherwise passes",
                "category": "product-validation",
                "version": "1.0",
                "enabled": True,
                "parameters": {"limit": 100}
            }
        }

    @property
    def display_name(self) -> str:
        return self.name or self.rule_id
