"""
Base validator interface for all validation rules.

All validators inherit from BaseValidator and implement ``validate()``,
which inspects one record's normalized payload and returns a RuleResult.
"""

from abc import ABC, abstractmethod
from typing import Any

from entitlement_engine.core.models import NormalizedPayload, RuleResult


class BaseValidator(ABC):
    """
    Abstract base class for all validators.

    Subclasses set ``rule_id`` and read their settings from ``parameters``.
    """

    rule_id: str = ""

    def __init__(self, parameters: dict[str, Any] | None = None):
        """
        Initialize validator.

        Args:
            parameters: Rule-specific parameters (e.g., {"limit": 100})
        """
        self.parameters = parameters or {}

    @abstractmethod
    def validate(self, payload: NormalizedPayload) -> RuleResult:
        """
        Evaluate this rule against a record's entitlements.

        Args:
            payload: The record's normalized payload

        Returns:
            RuleResult with PASS or FAIL and rule-specific details
        """

    def result(self, passed: bool, message: str, details: dict[str, Any] | None = None) -> RuleResult:
        return RuleResult(
            rule_id=self.rule_id,
            status="PASS" if passed else "FAIL",
            message=message,
            details=details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rule_id={self.rule_id}, params={self.parameters})"
