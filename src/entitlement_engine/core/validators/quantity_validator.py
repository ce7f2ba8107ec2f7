"""
QuantityValidator - app entitlements must have quantity 1 unless exempt.
"""

from entitlement_engine.core.models import NormalizedPayload, RuleResult

from .base_validator import BaseValidator

DEFAULT_EXEMPT_CODES = ("IC-DATABRIDGE", "RI-RISKMODELER-EXPANSION")


class QuantityValidator(BaseValidator):
    """
    Validates each app entitlement: passes iff quantity == 1 or the product
    code is on the exemption allowlist.

    Parameters:
    - exempt_codes: Product codes allowed any quantity
    """

    rule_id = "app-quantity-validation"

    def __init__(self, parameters=None):
        super().__init__(parameters)
        exempt_codes = self.parameters.get("exempt_codes", DEFAULT_EXEMPT_CODES)
        if isinstance(exempt_codes, str):
            exempt_codes = [exempt_codes]
        self.exempt_codes = frozenset(exempt_codes)

    def validate(self, payload: NormalizedPayload) -> RuleResult:
        apps = payload.apps
        if not apps:
            return self.result(True, "No app entitlements found", {
                "total_count": 0,
                "pass_count": 0,
                "fail_count": 0,
                "failures": [],
            })

        failures = []
        for app in apps:
            if app.quantity == 1 or app.product_code in self.exempt_codes:
                continue
            failures.append({
                "app_name": app.display_name,
                "index": app.index + 1,
                "quantity": app.quantity,
                "product_code": app.product_code,
                "reason": "Invalid quantity",
            })

        details = {
            "total_count": len(apps),
            "pass_count": len(apps) - len(failures),
            "fail_count": len(failures),
            "failures": failures,
        }

        if not failures:
            return self.result(True, f"All {len(apps)} app entitlements valid", details)

        allowed = " or ".join(["1", *sorted(self.exempt_codes)])
        reasons = "; ".join(
            f"{f['app_name']}: quantity {f['quantity']}, expected {allowed}" for f in failures
        )
        return self.result(
            False,
            f"{len(failures)} of {len(apps)} app entitlements failed: {reasons}",
            details,
        )
