"""
Unit tests for payload normalization and tolerant date parsing.
"""

import json
from datetime import date, datetime, timezone

import pytest

from entitlement_engine.core.normalizer import normalize, normalize_record, parse_payload
from entitlement_engine.utils.dates import parse_date, parse_timestamp, subtract_years


class TestEmptyAndMalformed:
    """Missing or broken payloads normalize to empty lists, never errors"""

    @pytest.mark.parametrize("raw", [None, "", "   ", {}])
    def test_empty_inputs(self, raw):
        payload = normalize(raw)
        assert payload.models == []
        assert payload.apps == []
        assert payload.data == []
        assert payload.parse_error is None

    def test_unparseable_text(self):
        payload = normalize("{not json")
        assert payload.total_count == 0
        assert payload.parse_error is not None

    def test_non_object_json(self):
        """A JSON array is not a payload"""
        payload = normalize("[1, 2, 3]")
        assert payload.total_count == 0
        assert payload.parse_error is not None

    def test_deeply_nested_text(self):
        """Nesting deeper than the decoder can recurse is treated as malformed"""
        payload = normalize("[" * 100000 + "]" * 100000)
        assert payload.models == []
        assert payload.apps == []
        assert payload.data == []
        assert payload.parse_error is not None

    def test_parse_payload_returns_dict_unchanged(self):
        raw = {"region": "EU"}
        assert parse_payload(raw) == (raw, None)


class TestEntitlementPaths:
    """Canonical, alternate and flat entitlement locations"""

    def test_canonical_nested_path(self, nested, ent):
        payload = normalize(json.dumps(nested(
            models=[ent("M1", "2024-01-01", "2024-12-31")],
            apps=[ent("A1", quantity=3)],
            data=[ent("D1")],
            region="North America",
        )))
        assert [e.product_code for e in payload.models] == ["M1"]
        assert payload.models[0].category == "Model"
        assert payload.models[0].end_date == date(2024, 12, 31)
        assert payload.apps[0].quantity == 3
        assert payload.data[0].category == "Data"
        assert payload.region == "North America"

    def test_alternate_entitlements_container(self, ent):
        payload = normalize({"entitlements": {"appEntitlements": [ent("A1"), ent("A2")]}})
        assert [e.product_code for e in payload.apps] == ["A1", "A2"]

    def test_flat_fallback_is_unioned(self, nested, ent):
        """Top-level lists are appended to the nested ones, not substituted"""
        raw = nested(models=[ent("M1")], apps=[ent("A1")])
        raw["productEntitlements"] = [ent("M2")]
        raw["appEntitlements"] = [ent("A2")]
        raw["dataEntitlements"] = [ent("D1")]

        payload = normalize(raw)
        assert [e.product_code for e in payload.models] == ["M1", "M2"]
        assert [e.product_code for e in payload.apps] == ["A1", "A2"]
        assert [e.product_code for e in payload.data] == ["D1"]
        assert [e.index for e in payload.models] == [0, 1]

    def test_canonical_wins_over_alternate_container(self, nested, ent):
        raw = nested(apps=[ent("A1")])
        raw["entitlements"] = {"appEntitlements": [ent("IGNORED")]}
        assert [e.product_code for e in normalize(raw).apps] == ["A1"]

    def test_non_dict_items_are_ignored(self):
        payload = normalize({"appEntitlements": ["junk", 42, None, {"productCode": "A1"}]})
        assert [e.product_code for e in payload.apps] == ["A1"]


class TestFieldVariants:
    """Ordered field-name fallbacks"""

    def test_snake_and_pascal_case_variants(self):
        payload = normalize({"modelEntitlements": [
            {"product_code": "M1", "start_date": "2024-01-01", "end_date": "2024-06-30"},
            {"ProductCode": "M2", "StartDate": "2024-02-01", "EndDate": "2024-07-31"},
        ]})
        first, second = payload.models
        assert (first.product_code, first.start_date, first.end_date) == ("M1", date(2024, 1, 1), date(2024, 6, 30))
        assert (second.product_code, second.start_date, second.end_date) == ("M2", date(2024, 2, 1), date(2024, 7, 31))

    def test_first_non_null_variant_wins(self):
        payload = normalize({"modelEntitlements": [
            {"productCode": None, "product_code": "M1", "ProductCode": "M9"},
        ]})
        assert payload.models[0].product_code == "M1"

    def test_missing_product_code_is_kept_without_code(self):
        payload = normalize({"dataEntitlements": [{"endDate": "2025-01-01"}]})
        assert payload.data[0].product_code is None

    @pytest.mark.parametrize("raw_quantity,expected", [
        (None, 1), (5, 5), ("7", 7), (2.0, 2), ("many", 1), (2.5, 1), (True, 1),
    ])
    def test_quantity_coercion(self, raw_quantity, expected):
        item = {"productCode": "A1"}
        if raw_quantity is not None:
            item["quantity"] = raw_quantity
        assert normalize({"appEntitlements": [item]}).apps[0].quantity == expected

    def test_optional_descriptors(self):
        payload = normalize({"appEntitlements": [{
            "productCode": "A1",
            "name": "Exposure IQ",
            "packageName": "Cloud Standard",
            "productModifier": "PROD",
        }]})
        app = payload.apps[0]
        assert app.name == "Exposure IQ"
        assert app.package_name == "Cloud Standard"
        assert app.product_modifier == "PROD"

    def test_unparseable_dates_become_none(self):
        payload = normalize({"modelEntitlements": [
            {"productCode": "M1", "startDate": "soon", "endDate": "2024-13-45"},
        ]})
        assert payload.models[0].start_date is None
        assert payload.models[0].end_date is None


class TestPayloadLevelFields:

    def test_region_fallbacks(self):
        assert normalize({"properties": {"region": "EU"}}).region == "EU"
        assert normalize({"region": "APAC"}).region == "APAC"
        assert normalize({"properties": {"provisioningDetail": {"region": "NA"}}, "region": "EU"}).region == "NA"

    def test_tenant_name_fallbacks(self):
        assert normalize({"preferredSubdomain1": "acme"}).tenant_name == "acme"
        assert normalize({"properties": {"tenantName": "acme-prod"}, "tenantName": "x"}).tenant_name == "acme-prod"


def test_normalize_record_stamps_provenance(make_record, nested, ent):
    record = make_record(record_id="a77", name="PS-4330", payload=nested(apps=[ent("A1")]))
    app = normalize_record(record).apps[0]
    assert app.source_record_id == "a77"
    assert app.source_record_name == "PS-4330"


class TestDateHelpers:

    @pytest.mark.parametrize("value,expected", [
        ("2024-06-30", date(2024, 6, 30)),
        ("2024-06-30T23:59:59Z", date(2024, 6, 30)),
        (date(2024, 6, 30), date(2024, 6, 30)),
        (datetime(2024, 6, 30, 8, 0), date(2024, 6, 30)),
        ("06/30/2024", None),
        ("", None),
        (20240630, None),
        (None, None),
    ])
    def test_parse_date(self, value, expected):
        assert parse_date(value) == expected

    def test_parse_timestamp_offsets(self):
        assert parse_timestamp("2024-06-01T10:00:00Z") == datetime(2024, 6, 1, 10, tzinfo=timezone.utc)
        assert parse_timestamp("2024-06-01T10:00:00.000+0000") == datetime(2024, 6, 1, 10, tzinfo=timezone.utc)
        assert parse_timestamp("2024-06-01").tzinfo is timezone.utc
        assert parse_timestamp("garbage") is None

    def test_subtract_years_leap_day(self):
        assert subtract_years(date(2024, 2, 29), 1) == date(2023, 2, 28)
        assert subtract_years(date(2025, 1, 20), 5) == date(2020, 1, 20)

    def test_subtract_years_clamps_to_min_date(self):
        assert subtract_years(date(2025, 1, 20), 3000) == date.min
        assert subtract_years(date(2025, 1, 20), 2025) == date.min
        assert subtract_years(date(2025, 1, 20), 2024) == date(1, 1, 20)
