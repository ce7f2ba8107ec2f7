"""
Unit tests for customer product aggregation.
"""

from datetime import date, datetime, timezone

import pytest

from entitlement_engine.analysis import aggregate
from entitlement_engine.analysis.aggregation import UNKNOWN_REGION, is_multi_instance, product_status


class TestMerging:
    """Same product across records collapses into one entry"""

    def test_merge_spans_both_ranges(self, make_record, nested, ent):
        records = [
            make_record(record_id="R1", name="PS-1", created_at="2024-01-01T00:00:00Z",
                        payload=nested(models=[ent("P", "2024-01-01", "2024-12-31")], region="EU")),
            make_record(record_id="R2", name="PS-2", created_at="2024-06-01T00:00:00Z",
                        payload=nested(models=[ent("P", "2024-06-01", "2025-06-30")], region="EU")),
        ]
        result = aggregate(records, date(2024, 7, 1))

        products = result.products_by_region["EU"].models
        assert len(products) == 1
        product = products[0]
        assert product.start_date == date(2024, 1, 1)
        assert product.end_date == date(2025, 6, 30)
        assert product.source_ps_records == ["PS-2", "PS-1"]
        assert product.status == "active"
        assert result.summary.total_active == 1

    def test_package_name_filled_from_older_record(self, make_record, nested, ent):
        records = [
            make_record(record_id="R1", name="PS-1", created_at="2024-01-01T00:00:00Z",
                        payload=nested(apps=[ent("A", None, "2025-12-31", packageName="Cloud Standard")])),
            make_record(record_id="R2", name="PS-2", created_at="2024-06-01T00:00:00Z",
                        payload=nested(apps=[ent("A", None, "2025-12-31")])),
        ]
        product = aggregate(records, date(2025, 1, 20)).products_by_region[UNKNOWN_REGION].apps[0]
        assert product.package_name == "Cloud Standard"
        assert product.source_ps_records == ["PS-2", "PS-1"]

    def test_same_code_in_different_regions_is_kept_apart(self, make_record, nested, ent):
        records = [
            make_record(record_id="R1", name="PS-1", payload=nested(data=[ent("D", None, "2025-12-31")], region="EU")),
            make_record(record_id="R2", name="PS-2", payload=nested(data=[ent("D", None, "2025-12-31")], region="APAC")),
        ]
        result = aggregate(records, date(2025, 1, 20))
        assert list(result.products_by_region) == ["APAC", "EU"]
        assert result.summary.by_category.data == 2

    def test_status_reflects_newest_record_not_merged_end(self, make_record, nested, ent):
        """A merge widens end_date but keeps the status of the newest granting record"""
        records = [
            make_record(record_id="R1", name="PS-1", created_at="2024-01-01T00:00:00Z",
                        payload=nested(apps=[ent("A", None, "2026-06-30")])),
            make_record(record_id="R2", name="PS-2", created_at="2024-06-01T00:00:00Z",
                        payload=nested(apps=[ent("A", None, "2025-02-01")])),
        ]
        product = aggregate(records, date(2025, 1, 20)).products_by_region[UNKNOWN_REGION].apps[0]
        assert product.end_date == date(2026, 6, 30)
        assert product.days_remaining == 12
        assert product.status == "expiring"


class TestMultiInstance:

    def test_multi_instance_products_stay_separate(self, make_record, nested, ent):
        records = [
            make_record(record_id="R1", name="PS-1", created_at="2024-01-01T00:00:00Z",
                        payload=nested(apps=[ent("IC-DATABRIDGE", None, "2025-12-31")])),
            make_record(record_id="R2", name="PS-2", created_at="2024-06-01T00:00:00Z",
                        payload=nested(apps=[ent("IC-DATABRIDGE", None, "2025-12-31")])),
        ]
        apps = aggregate(records, date(2025, 1, 20)).products_by_region[UNKNOWN_REGION].apps
        assert [p.source_ps_records for p in apps] == [["PS-1"], ["PS-2"]]
        assert all(p.is_multi_instance for p in apps)

    @pytest.mark.parametrize("code,expected", [
        ("IC-DATABRIDGE", True), ("ic-DataBridge-eu", True), ("RI-EXPOSUREIQ", False),
    ])
    def test_marker_is_case_insensitive_substring(self, code, expected):
        assert is_multi_instance(code) is expected

    def test_custom_marker(self):
        assert is_multi_instance("X-SHARDED", marker="sharded") is True
        assert is_multi_instance("IC-DATABRIDGE", marker="sharded") is False


class TestFiltering:

    def test_expired_and_incomplete_items_excluded(self, make_record, nested, ent, today):
        record = make_record(payload=nested(models=[
            ent("EXPIRED", "2023-01-01", "2025-01-19"),
            ent("LAST-DAY", "2024-01-01", "2025-01-20"),
            ent("NO-END", "2024-01-01"),
            ent(None, None, "2026-01-01"),
        ]))
        models = aggregate([record], today).products_by_region[UNKNOWN_REGION].models
        assert [p.product_code for p in models] == ["LAST-DAY"]
        assert models[0].days_remaining == 0
        assert models[0].status == "expiring"

    def test_empty_and_malformed_payloads_skipped(self, make_record, today):
        result = aggregate([make_record(payload=None), make_record(payload="{oops")], today)
        assert result.products_by_region == {}
        assert result.records_analyzed == 2

    def test_deeply_nested_payload_skipped(self, make_record, nested, ent, today):
        records = [
            make_record(record_id="R1", payload="[" * 100000 + "]" * 100000),
            make_record(record_id="R2", payload=nested(apps=[ent("A", None, "2026-01-01")])),
        ]
        result = aggregate(records, today)
        assert [p.product_code for p in result.products_by_region[UNKNOWN_REGION].apps] == ["A"]

    def test_empty_history(self, today):
        result = aggregate([], today)
        assert result.products_by_region == {}
        assert result.summary.total_active == 0
        assert result.last_updated is None
        assert result.account_id is None

    def test_none_records_is_contract_violation(self, today):
        with pytest.raises(TypeError):
            aggregate(None, today)


class TestOrderingAndSummary:

    def test_lists_sorted_by_product_code(self, make_record, nested, ent, today):
        record = make_record(payload=nested(
            models=[ent("M-Z", None, "2026-01-01"), ent("M-A", None, "2026-01-01")],
            apps=[ent("A-2", None, "2026-01-01"), ent("A-1", None, "2026-01-01")],
        ))
        region = aggregate([record], today).products_by_region[UNKNOWN_REGION]
        assert [p.product_code for p in region.models] == ["M-A", "M-Z"]
        assert [p.product_code for p in region.apps] == ["A-1", "A-2"]

    def test_summary_counts(self, make_record, nested, ent, today):
        record = make_record(payload=nested(
            models=[ent("M1", None, "2026-01-01")],
            apps=[ent("A1", None, "2026-01-01"), ent("A2", None, "2026-01-01")],
            data=[ent("D1", None, "2026-01-01")],
        ))
        summary = aggregate([record], today).summary
        assert summary.total_active == 4
        assert (summary.by_category.models, summary.by_category.apps, summary.by_category.data) == (1, 2, 1)

    def test_last_updated_is_newest_dated_record(self, make_record, nested, ent, today):
        records = [
            make_record(record_id="R1", name="PS-1", created_at="2024-01-01T00:00:00Z", payload=nested()),
            make_record(record_id="R2", name="PS-2", created_at="2024-09-01T08:30:00Z", payload=nested()),
            make_record(record_id="R3", name="PS-3", created_at="not a date", payload=nested()),
        ]
        result = aggregate(records, today)
        assert result.last_updated.record_id == "R2"
        assert result.last_updated.record_name == "PS-2"
        assert result.last_updated.date == datetime(2024, 9, 1, 8, 30, tzinfo=timezone.utc)
        assert result.account_id == "ACME"

    @pytest.mark.parametrize("days,status", [
        (365, "active"), (91, "active"), (90, "expiring-soon"), (31, "expiring-soon"),
        (30, "expiring"), (0, "expiring"),
    ])
    def test_status_thresholds(self, days, status):
        assert product_status(days) == status
