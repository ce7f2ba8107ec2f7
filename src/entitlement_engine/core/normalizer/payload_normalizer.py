"""
Payload normalization.

Upstream payloads are loosely structured JSON with several nesting paths
and field-name spellings. ``normalize`` turns any of them into a typed
``NormalizedPayload``; it never raises for bad input.
"""

import json
from typing import Any

from entitlement_engine.core.models import Category, Entitlement, NormalizedPayload, ProvisioningRecord
from entitlement_engine.observability.logger import get_logger
from entitlement_engine.utils.dates import parse_date

logger = get_logger(__name__)


# Ordered name variants; the first present, non-empty value wins
PRODUCT_CODE_KEYS = ("productCode", "product_code", "ProductCode")
START_DATE_KEYS = ("startDate", "start_date", "StartDate")
END_DATE_KEYS = ("endDate", "end_date", "EndDate")
QUANTITY_KEYS = ("quantity", "Quantity")
PACKAGE_NAME_KEYS = ("packageName", "package_name")
PRODUCT_MODIFIER_KEYS = ("productModifier", "product_modifier")
NAME_KEYS = ("name", "productName")

# Entitlement containers, tried in order per category list
CONTAINER_PATHS = (
    ("properties", "provisioningDetail", "entitlements"),
    ("entitlements",),
)

# Category -> (list key inside a container, flat top-level keys appended to it)
CATEGORY_LIST_KEYS: dict[Category, tuple[str, tuple[str, ...]]] = {
    "Model": ("modelEntitlements", ("modelEntitlements", "productEntitlements")),
    "App": ("appEntitlements", ("appEntitlements",)),
    "Data": ("dataEntitlements", ("dataEntitlements",)),
}

REGION_PATHS = (
    ("properties", "provisioningDetail", "region"),
    ("properties", "region"),
    ("region",),
)

TENANT_NAME_PATHS = (
    ("properties", "provisioningDetail", "tenantName"),
    ("properties", "tenantName"),
    ("preferredSubdomain1",),
    ("preferredSubdomain2",),
    ("properties", "preferredSubdomain1"),
    ("properties", "preferredSubdomain2"),
    ("tenantName",),
)


def first_present(item: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Return the first value under ``keys`` that is neither None nor an empty string."""
    for key in keys:
        value = item.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def _dig(payload: dict[str, Any], path: tuple[str, ...]) -> Any:
    node: Any = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _first_path(payload: dict[str, Any], paths: tuple[tuple[str, ...], ...]) -> str | None:
    for path in paths:
        value = _dig(payload, path)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_quantity(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 1
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else 1
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 1
    return 1


def parse_payload(raw_payload: Any) -> tuple[dict[str, Any] | None, str | None]:
    """
    Decode a raw payload into a dict.

    Returns:
        (payload, error) where payload is None for missing or malformed
        input and error is the decode message for malformed text
    """
    if raw_payload is None:
        return None, None
    if isinstance(raw_payload, dict):
        return raw_payload, None
    if isinstance(raw_payload, bytes | bytearray):
        raw_payload = raw_payload.decode("utf-8", errors="replace")
    if isinstance(raw_payload, str):
        if not raw_payload.strip():
            return None, None
        try:
            decoded = json.loads(raw_payload)
        except (json.JSONDecodeError, RecursionError) as e:
            return None, str(e)
        if isinstance(decoded, dict):
            return decoded, None
        return None, f"Payload is a JSON {type(decoded).__name__}, expected an object"
    return None, f"Unsupported payload type {type(raw_payload).__name__}"


def _collect_items(payload: dict[str, Any], category: Category) -> list[dict[str, Any]]:
    list_key, flat_keys = CATEGORY_LIST_KEYS[category]

    items: list[Any] = []
    for path in CONTAINER_PATHS:
        container = _dig(payload, path)
        if isinstance(container, dict) and isinstance(container.get(list_key), list):
            items.extend(container[list_key])
            break

    for flat_key in flat_keys:
        flat = payload.get(flat_key)
        if isinstance(flat, list):
            items.extend(flat)

    return [item for item in items if isinstance(item, dict)]


def to_entitlement(
    item: dict[str, Any],
    category: Category,
    index: int,
    source_record_id: str | None = None,
    source_record_name: str | None = None,
) -> Entitlement:
    """Map one raw entitlement dict onto the canonical ``Entitlement``."""
    product_code = _as_text(first_present(item, PRODUCT_CODE_KEYS))
    return Entitlement(
        product_code=product_code,
        category=category,
        start_date=parse_date(first_present(item, START_DATE_KEYS)),
        end_date=parse_date(first_present(item, END_DATE_KEYS)),
        quantity=_parse_quantity(first_present(item, QUANTITY_KEYS)),
        package_name=_as_text(first_present(item, PACKAGE_NAME_KEYS)),
        product_modifier=_as_text(first_present(item, PRODUCT_MODIFIER_KEYS)),
        name=_as_text(first_present(item, NAME_KEYS)) or product_code,
        index=index,
        source_record_id=source_record_id,
        source_record_name=source_record_name,
    )


def normalize(
    raw_payload: Any,
    source_record_id: str | None = None,
    source_record_name: str | None = None,
) -> NormalizedPayload:
    """
    Normalize a raw payload into models, apps and data entitlements.

    Args:
        raw_payload: dict, JSON text, or None
        source_record_id: Provenance stamped on every entitlement
        source_record_name: Provenance stamped on every entitlement

    Returns:
        NormalizedPayload; empty lists for missing or malformed input
    """
    payload, error = parse_payload(raw_payload)
    if payload is None:
        if error is not None:
            logger.warning(
                "Malformed payload, treating as empty",
                extra={"record_id": source_record_id, "error": error},
            )
        return NormalizedPayload(parse_error=error)

    lists: dict[Category, list[Entitlement]] = {}
    for category in CATEGORY_LIST_KEYS:
        lists[category] = [
            to_entitlement(item, category, index, source_record_id, source_record_name)
            for index, item in enumerate(_collect_items(payload, category))
        ]

    return NormalizedPayload(
        models=lists["Model"],
        apps=lists["App"],
        data=lists["Data"],
        region=_first_path(payload, REGION_PATHS),
        tenant_name=_first_path(payload, TENANT_NAME_PATHS),
    )


def normalize_record(record: ProvisioningRecord) -> NormalizedPayload:
    """Normalize a record's payload, stamping the record as provenance."""
    return normalize(record.raw_payload, record.id, record.name)
