"""
DateOverlapValidator - entitlements sharing a product code must not overlap in time.
"""

from collections import defaultdict
from datetime import date
from itertools import combinations
from typing import Any, Literal

from entitlement_engine.core.models import Entitlement, NormalizedPayload, RuleResult

from .base_validator import BaseValidator

OverlapKind = Literal["identical", "contains", "contained_by", "partial"]


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """
    Strict interval overlap: ranges that only touch at a boundary do not overlap.
    """
    return start1 < end2 and start2 < end1


def classify_overlap(start1: date, end1: date, start2: date, end2: date) -> OverlapKind:
    """Classify an overlap of range 1 with range 2 (diagnostic only)."""
    if start1 == start2 and end1 == end2:
        return "identical"
    if start1 <= start2 and end1 >= end2:
        return "contains"
    if start2 <= start1 and end2 >= end1:
        return "contained_by"
    return "partial"


def entitlements_overlap(first: Entitlement, second: Entitlement) -> bool:
    """True when both carry full date ranges and those ranges strictly overlap."""
    if not (first.has_date_range and second.has_date_range):
        return False
    return ranges_overlap(first.start_date, first.end_date, second.start_date, second.end_date)


def _label(ent: Entitlement) -> str:
    return f"{ent.category.lower()}-{ent.index + 1}"


def _range_text(ent: Entitlement) -> str:
    return f"{ent.start_date.isoformat()} to {ent.end_date.isoformat()}"


def _describe(first: Entitlement, second: Entitlement, kind: OverlapKind) -> str:
    if kind == "identical":
        return f"{_label(first)} and {_label(second)} have identical date ranges ({_range_text(first)})"
    if kind == "contains":
        return f"{_label(first)} ({_range_text(first)}) completely contains {_label(second)} ({_range_text(second)})"
    if kind == "contained_by":
        return f"{_label(second)} ({_range_text(second)}) completely contains {_label(first)} ({_range_text(first)})"
    return f"{_label(first)} ({_range_text(first)}) overlaps with {_label(second)} ({_range_text(second)})"


def _side(ent: Entitlement) -> dict[str, Any]:
    return {
        "type": ent.category.lower(),
        "index": ent.index + 1,
        "start_date": ent.start_date.isoformat(),
        "end_date": ent.end_date.isoformat(),
    }


class DateOverlapValidator(BaseValidator):
    """
    Groups every entitlement (models, apps and data together) by product
    code and fails if any two in a group have overlapping date ranges.

    Items without a product code or without a full date range are skipped.
    """

    rule_id = "entitlement-date-overlap-validation"

    def find_overlaps(self, entitlements: list[Entitlement]) -> list[dict[str, Any]]:
        by_product: dict[str, list[Entitlement]] = defaultdict(list)
        for ent in entitlements:
            if ent.product_code:
                by_product[ent.product_code].append(ent)

        overlaps = []
        for product_code, group in by_product.items():
            if len(group) < 2:
                continue
            for first, second in combinations(group, 2):
                if not entitlements_overlap(first, second):
                    continue
                kind = classify_overlap(first.start_date, first.end_date, second.start_date, second.end_date)
                overlaps.append({
                    "product_code": product_code,
                    "entitlement1": _side(first),
                    "entitlement2": _side(second),
                    "kind": kind,
                    "description": _describe(first, second, kind),
                })
        return overlaps

    def validate(self, payload: NormalizedPayload) -> RuleResult:
        entitlements = payload.all_entitlements
        if not entitlements:
            return self.result(True, "No entitlements found", {
                "total_count": 0,
                "overlaps_found": 0,
                "overlaps": [],
            })

        overlaps = self.find_overlaps(entitlements)
        details = {
            "total_count": len(entitlements),
            "overlaps_found": len(overlaps),
            "overlaps": overlaps,
        }

        if not overlaps:
            return self.result(True, f"No date overlaps found across {len(entitlements)} entitlements", details)
        plural = "s" if len(overlaps) > 1 else ""
        return self.result(False, f"{len(overlaps)} date overlap{plural} found", details)
