"""
Pytest configuration and fixtures for entitlement engine tests

This module provides shared fixtures for unit and integration tests.
"""
import json
from datetime import date
from typing import Any, Callable

import pytest

from entitlement_engine.core.models import ProvisioningRecord


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that exercise several components together"
    )


# =======================
# TIME FIXTURES
# =======================

@pytest.fixture
def today() -> date:
    """Fixed reference date; the engine never reads the wall clock"""
    return date(2025, 1, 20)


# =======================
# PAYLOAD / RECORD BUILDERS
# =======================

def entitlement(code: str | None, start: str | None = None, end: str | None = None, **extra: Any) -> dict[str, Any]:
    """Raw entitlement dict as found in upstream payloads"""
    item: dict[str, Any] = dict(extra)
    if code is not None:
        item["productCode"] = code
    if start is not None:
        item["startDate"] = start
    if end is not None:
        item["endDate"] = end
    return item


def nested_payload(
    models: list[dict] | None = None,
    apps: list[dict] | None = None,
    data: list[dict] | None = None,
    region: str | None = None,
) -> dict[str, Any]:
    """Payload using the canonical properties.provisioningDetail.entitlements path"""
    detail: dict[str, Any] = {
        "entitlements": {
            "modelEntitlements": models or [],
            "appEntitlements": apps or [],
            "dataEntitlements": data or [],
        }
    }
    if region is not None:
        detail["region"] = region
    return {"properties": {"provisioningDetail": detail}}


@pytest.fixture
def make_record() -> Callable[..., ProvisioningRecord]:
    """Factory for ProvisioningRecord with a JSON-encoded payload"""

    def _make(
        record_id: str = "a01",
        name: str = "PS-1001",
        payload: Any = None,
        account_id: str = "ACME",
        created_at: Any = "2024-06-01T10:00:00Z",
        request_type: str = "Update",
        encode: bool = True,
    ) -> ProvisioningRecord:
        raw = json.dumps(payload) if (encode and isinstance(payload, dict)) else payload
        return ProvisioningRecord(
            id=record_id,
            name=name,
            account_id=account_id,
            request_type=request_type,
            created_at=created_at,
            raw_payload=raw,
        )

    return _make


@pytest.fixture
def ent() -> Callable[..., dict[str, Any]]:
    """Builder for raw entitlement dicts"""
    return entitlement


@pytest.fixture
def nested() -> Callable[..., dict[str, Any]]:
    """Builder for canonical nested payloads"""
    return nested_payload
