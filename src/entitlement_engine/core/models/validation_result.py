"""
Validation outcome models (ephemeral, used for presentation only).
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, computed_field, field_validator


Status = Literal["PASS", "FAIL"]


class RuleResult(BaseModel):
    """
    Outcome of one rule against one record.

    ``details`` is rule-specific and carries enough to reconstruct why the
    rule failed (failing items, overlap pairs, ...).
    """

    rule_id: str
    status: Status = "PASS"
    message: str = ""
    details: dict[str, Any] | None = None

    @property
    def passed(self) -> bool:
        return self.status == "PASS"


class RecordValidation(BaseModel):
    """
    Outcome of validating a record against the enabled rules.

    Defaults to PASS; only a rule that evaluated successfully and failed can
    flip ``overall_status`` to FAIL.

    Attributes:
        record_id: Which record was validated
        record_name: Record name for display
        overall_status: FAIL iff any rule result is FAIL
        rule_results: One result per evaluated rule
        note: Why the record defaulted to PASS without running rules, if it did
    """

    record_id: str
    record_name: str = "Unknown"
    rule_results: list[RuleResult] = Field(default_factory=list)
    overall_status: Status = "PASS"
    note: str | None = None

    @field_validator("overall_status")
    @classmethod
    def check_status_consistency(cls, v, info):
        """FAIL requires at least one failing rule result."""
        results = info.data.get("rule_results") or []
        if v == "FAIL" and not any(r.status == "FAIL" for r in results):
            raise ValueError("overall_status=FAIL but no rule result failed")
        return v

    @computed_field
    @property
    def has_errors(self) -> bool:
        return self.overall_status == "FAIL"

    @property
    def failed_results(self) -> list[RuleResult]:
        return [r for r in self.rule_results if r.status == "FAIL"]


class FailedRule(BaseModel):
    """A failing rule as listed in a validation report."""

    rule_id: str
    rule_name: str
    message: str
    details: dict[str, Any] | None = None


class ValidationErrorEntry(BaseModel):
    """A record that failed validation, with its failing rules."""

    record_id: str
    record_name: str
    account_id: str | None = None
    request_type: str | None = None
    created_at: datetime | None = None
    failed_rules: list[FailedRule] = Field(default_factory=list)


class ValidationSummary(BaseModel):
    total_records: int = 0
    valid_records: int = 0
    invalid_records: int = 0
    enabled_rules_count: int = 0


class ValidationReport(BaseModel):
    """Validation outcome for a batch of records."""

    errors: list[ValidationErrorEntry] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)
