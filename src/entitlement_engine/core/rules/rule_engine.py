"""
Rule engine for running validation rules against provisioning records.

Validation is fail-open: a record with no payload or a malformed payload
passes without running any rule, and a rule that raises is recorded as a
PASS with a diagnostic note. Only a rule that evaluates and fails can turn
a record into a FAIL.
"""

import time
from typing import Any, Iterable

from entitlement_engine.core.models import (
    FailedRule,
    NormalizedPayload,
    ProvisioningRecord,
    RecordValidation,
    RuleResult,
    ValidationErrorEntry,
    ValidationReport,
    ValidationRule,
    ValidationSummary,
)
from entitlement_engine.core.normalizer import normalize_record
from entitlement_engine.core.validators import (
    BaseValidator,
    CountValidator,
    DateOverlapValidator,
    QuantityValidator,
)
from entitlement_engine.observability.logger import get_logger
from entitlement_engine.observability.metrics import MetricsCollector

from .rule_config import ConfigurationError, get_enabled_validation_rules, resolve_rule

logger = get_logger(__name__)

RuleSpec = ValidationRule | str | dict[str, Any]


class RuleEngine:
    """
    Runs the enabled validation rules against records, one record at a time.

    Stateless between records; the same engine can validate any number of
    records in any order.
    """

    VALIDATOR_REGISTRY: dict[str, type[BaseValidator]] = {
        QuantityValidator.rule_id: QuantityValidator,
        CountValidator.rule_id: CountValidator,
        DateOverlapValidator.rule_id: DateOverlapValidator,
    }

    def __init__(self, rules: Iterable[RuleSpec] | None = None):
        """
        Initialize the rule engine with validation rules.

        Args:
            rules: Rule ids, rule dicts or ValidationRule entries. None means
                   every rule the default catalog enables.
        """
        if rules is None:
            self.rules = get_enabled_validation_rules()
        elif isinstance(rules, str | dict | ValidationRule):
            raise TypeError("rules must be a list of rule definitions")
        else:
            self.rules = [resolve_rule(rule) for rule in rules]
        self.validators: list[tuple[ValidationRule, BaseValidator | None]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        """Build validator instances from rule configurations."""
        for rule in self.rules:
            if not rule.enabled:
                continue

            validator_class = self.VALIDATOR_REGISTRY.get(rule.rule_id)
            if validator_class is None:
                logger.warning("Unknown validation rule, it will default to PASS", extra={"rule_id": rule.rule_id})
                self.validators.append((rule, None))
                continue

            try:
                validator = validator_class(rule.parameters)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Failed to create validator for rule '{rule.rule_id}': {e}") from e
            self.validators.append((rule, validator))

    @property
    def enabled_rules(self) -> list[ValidationRule]:
        return [rule for rule, _ in self.validators]

    def _execute(self, rule: ValidationRule, validator: BaseValidator | None, payload: NormalizedPayload,
                 record_id: str) -> RuleResult:
        if validator is None:
            return RuleResult(rule_id=rule.rule_id, status="PASS", message="Unknown rule, defaulting to pass")
        try:
            return validator.validate(payload)
        except Exception as e:
            logger.warning(
                "Rule evaluation raised, defaulting to PASS",
                extra={"rule_id": rule.rule_id, "record_id": record_id, "error": str(e)},
                exc_info=True,
            )
            MetricsCollector.record_rule_error(rule.rule_id)
            return RuleResult(
                rule_id=rule.rule_id,
                status="PASS",
                message="Validation error, defaulting to pass",
                details={"error": str(e)},
            )

    def validate_record(self, record: ProvisioningRecord) -> RecordValidation:
        """
        Validate a record against all enabled rules.

        Args:
            record: The ProvisioningRecord to validate

        Returns:
            RecordValidation with the overall verdict and one result per rule
        """
        if not isinstance(record, ProvisioningRecord):
            raise TypeError(f"Expected ProvisioningRecord, got {type(record).__name__}")

        started = time.perf_counter()
        validation = self._validate(record)
        MetricsCollector.observe_duration("validate", time.perf_counter() - started)
        MetricsCollector.record_validation(validation.overall_status)
        return validation

    def _validate(self, record: ProvisioningRecord) -> RecordValidation:
        payload = normalize_record(record)

        if payload.parse_error is not None:
            logger.warning("Malformed payload, defaulting to PASS", extra={"record_id": record.id})
            return RecordValidation(record_id=record.id, record_name=record.name,
                                    note="Malformed payload, defaulting to pass")
        if record.raw_payload is None or (isinstance(record.raw_payload, str) and not record.raw_payload.strip()):
            logger.debug("No payload data, defaulting to PASS", extra={"record_id": record.id})
            return RecordValidation(record_id=record.id, record_name=record.name,
                                    note="No payload data, defaulting to pass")

        results = []
        for rule, validator in self.validators:
            result = self._execute(rule, validator, payload, record.id)
            MetricsCollector.record_rule_result(rule.rule_id, result.status)
            if result.status == "FAIL":
                logger.info(
                    "Validation rule failed",
                    extra={"rule_id": rule.rule_id, "record_id": record.id, "rule_message": result.message},
                )
            results.append(result)

        overall = "FAIL" if any(r.status == "FAIL" for r in results) else "PASS"
        return RecordValidation(
            record_id=record.id,
            record_name=record.name,
            rule_results=results,
            overall_status=overall,
        )

    def validate_batch(self, records: list[ProvisioningRecord]) -> list[RecordValidation]:
        """
        Validate a batch of records.

        Returns:
            List of RecordValidation objects, one per record, in input order
        """
        if records is None:
            raise TypeError("records must be a list, got None")
        return [self.validate_record(record) for record in records]

    def build_report(self, records: list[ProvisioningRecord]) -> ValidationReport:
        """
        Validate a batch and collect the failing records with their failing rules.

        A record whose validation raises unexpectedly is counted as valid.
        """
        if records is None:
            raise TypeError("records must be a list, got None")

        names = {rule.rule_id: rule.display_name for rule in self.enabled_rules}
        errors = []
        valid = 0

        for record in records:
            try:
                validation = self.validate_record(record)
            except Exception as e:
                logger.warning("Error validating record, counting as valid",
                               extra={"record_id": getattr(record, "id", None), "error": str(e)})
                valid += 1
                continue

            if not validation.has_errors:
                valid += 1
                continue

            errors.append(ValidationErrorEntry(
                record_id=record.id,
                record_name=record.name,
                account_id=record.account_id,
                request_type=record.request_type,
                created_at=record.created_timestamp,
                failed_rules=[
                    FailedRule(
                        rule_id=result.rule_id,
                        rule_name=names.get(result.rule_id, result.rule_id),
                        message=result.message,
                        details=result.details,
                    )
                    for result in validation.failed_results
                ],
            ))

        logger.info(
            "Validation complete",
            extra={"total_records": len(records), "valid_records": valid, "invalid_records": len(errors)},
        )
        return ValidationReport(
            errors=errors,
            summary=ValidationSummary(
                total_records=len(records),
                valid_records=valid,
                invalid_records=len(errors),
                enabled_rules_count=len(self.validators),
            ),
        )

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with rule counts and categories
        """
        counts: dict[str, int] = {}
        for rule, _ in self.validators:
            counts[rule.category] = counts.get(rule.category, 0) + 1
        return {
            "total_rules": len(self.validators),
            "rule_ids": [rule.rule_id for rule, _ in self.validators],
            "rules_by_category": counts,
        }


def validate(record: ProvisioningRecord, enabled_rules: Iterable[RuleSpec] | None = None) -> RecordValidation:
    """Validate one record against ``enabled_rules`` (default: the enabled catalog)."""
    return RuleEngine(enabled_rules).validate_record(record)


def build_validation_report(records: list[ProvisioningRecord],
                            enabled_rules: Iterable[RuleSpec] | None = None) -> ValidationReport:
    """Validate a batch of records and report the failures."""
    return RuleEngine(enabled_rules).build_report(records)
