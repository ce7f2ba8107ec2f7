"""
CountValidator - caps the number of model entitlements on a record.
"""

from entitlement_engine.core.models import NormalizedPayload, RuleResult

from .base_validator import BaseValidator

DEFAULT_MODEL_LIMIT = 100


class CountValidator(BaseValidator):
    """
    Fails iff the record carries more than ``limit`` model entitlements.

    Parameters:
    - limit: Maximum number of models (inclusive), default 100
    """

    rule_id = "model-count-validation"

    def __init__(self, parameters=None):
        super().__init__(parameters)
        self.limit = int(self.parameters.get("limit", DEFAULT_MODEL_LIMIT))
        if self.limit < 0:
            raise ValueError("CountValidator limit must be non-negative")

    def validate(self, payload: NormalizedPayload) -> RuleResult:
        models = payload.models
        count = len(models)
        within_limit = count <= self.limit

        details = {
            "total_count": count,
            "limit": self.limit,
            "within_limit": within_limit,
            "models_found": [
                {
                    "name": model.display_name,
                    "product_code": model.product_code or "Unknown",
                    "quantity": model.quantity,
                }
                for model in models
            ],
        }

        if not models:
            return self.result(True, "No model entitlements found", details)
        if within_limit:
            return self.result(True, f"Model count {count} is within limit (<={self.limit})", details)
        return self.result(False, f"Model count {count} exceeds limit of {self.limit}", details)
