"""
Payload normalization into canonical entitlements.
"""

from .payload_normalizer import (
    END_DATE_KEYS,
    PRODUCT_CODE_KEYS,
    START_DATE_KEYS,
    normalize,
    normalize_record,
    parse_payload,
)

__all__ = [
    "normalize",
    "normalize_record",
    "parse_payload",
    "PRODUCT_CODE_KEYS",
    "START_DATE_KEYS",
    "END_DATE_KEYS",
]
