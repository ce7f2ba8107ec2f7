"""
Customer product aggregation.

Merges the currently-valid entitlements of an account's whole history into
one deduplicated snapshot, organized by region and category.
"""

import time
from datetime import date, datetime
from typing import NamedTuple

from entitlement_engine.core.models import (
    AggregatedProduct,
    CategoryCounts,
    CustomerProducts,
    LastUpdated,
    ProductSummary,
    ProvisioningRecord,
    RegionProducts,
)
from entitlement_engine.core.normalizer import normalize_record
from entitlement_engine.observability.logger import get_logger, log_operation
from entitlement_engine.observability.metrics import MetricsCollector

logger = get_logger(__name__)

UNKNOWN_REGION = "Unknown Region"
DEFAULT_MULTI_INSTANCE_MARKER = "databridge"
CATEGORY_ORDER = ("models", "apps", "data")


class ProductKey(NamedTuple):
    """Merge key; ``instance`` is the record name for multi-instance products, else None."""

    region: str
    category: str
    product_code: str
    instance: str | None = None


def product_status(days_remaining: int) -> str:
    """>90 days "active", 31-90 "expiring-soon", <=30 "expiring"."""
    if days_remaining > 90:
        return "active"
    if days_remaining > 30:
        return "expiring-soon"
    return "expiring"


def is_multi_instance(product_code: str, marker: str = DEFAULT_MULTI_INSTANCE_MARKER) -> bool:
    return bool(marker) and marker.lower() in product_code.lower()


def _newest_first(records: list[ProvisioningRecord]) -> list[ProvisioningRecord]:
    # Records without a parseable creation time go last, keeping input order
    dated = [r for r in records if r.created_timestamp is not None]
    undated = [r for r in records if r.created_timestamp is None]
    return sorted(dated, key=lambda r: r.created_timestamp, reverse=True) + undated


def aggregate(
    account_records: list[ProvisioningRecord],
    today: date | datetime,
    multi_instance_marker: str = DEFAULT_MULTI_INSTANCE_MARKER,
    account_id: str | None = None,
) -> CustomerProducts:
    """
    Build the active-product snapshot for an account.

    Args:
        account_records: Every provisioning record of the account
        today: Reference date; entitlements ending before it are dropped
        multi_instance_marker: Product codes containing this (case-insensitive)
                               are kept apart per granting record
        account_id: Account label for the result (default: first record's)

    Returns:
        CustomerProducts grouped by region then category, each list sorted
        by product code
    """
    if account_records is None:
        raise TypeError("account_records must be a list, got None")

    started = time.perf_counter()
    today = today.date() if isinstance(today, datetime) else today
    records = _newest_first(account_records)

    if account_id is None and records:
        account_id = records[0].account_id

    last_updated = None
    for record in records:
        if record.created_timestamp is not None:
            last_updated = LastUpdated(record_id=record.id, record_name=record.name,
                                       date=record.created_timestamp)
            break

    products: dict[ProductKey, AggregatedProduct] = {}

    with log_operation("Customer product aggregation", logger=logger, account_id=account_id):
        for record in records:
            payload = normalize_record(record)
            if not payload.has_details:
                continue
            region = payload.region or UNKNOWN_REGION

            for category, entitlements in payload.by_category().items():
                for ent in entitlements:
                    if not ent.product_code or ent.end_date is None or ent.end_date < today:
                        continue

                    multi = is_multi_instance(ent.product_code, multi_instance_marker)
                    key = ProductKey(region, category, ent.product_code, record.name if multi else None)

                    existing = products.get(key)
                    if existing is None:
                        days_remaining = (ent.end_date - today).days
                        products[key] = AggregatedProduct(
                            product_code=ent.product_code,
                            product_name=ent.name or ent.product_code,
                            package_name=ent.package_name,
                            category=category,
                            region=region,
                            start_date=ent.start_date,
                            end_date=ent.end_date,
                            status=product_status(days_remaining),
                            days_remaining=days_remaining,
                            source_ps_records=[record.name],
                            is_multi_instance=multi,
                        )
                        continue

                    if ent.start_date and (existing.start_date is None or ent.start_date < existing.start_date):
                        existing.start_date = ent.start_date
                    if ent.end_date > existing.end_date:
                        existing.end_date = ent.end_date
                    if record.name not in existing.source_ps_records:
                        existing.source_ps_records.append(record.name)
                    if ent.package_name and not existing.package_name:
                        existing.package_name = ent.package_name

    by_region: dict[str, RegionProducts] = {}
    for key in sorted(products, key=lambda k: k.region):
        region_products = by_region.setdefault(key.region, RegionProducts())
        getattr(region_products, key.category).append(products[key])

    counts = CategoryCounts()
    for region_products in by_region.values():
        for category in CATEGORY_ORDER:
            items = getattr(region_products, category)
            items.sort(key=lambda p: (p.product_code, p.source_ps_records[0]))
            setattr(counts, category, getattr(counts, category) + len(items))

    for category in CATEGORY_ORDER:
        MetricsCollector.record_aggregated_products(category, getattr(counts, category))
    MetricsCollector.observe_duration("aggregate", time.perf_counter() - started)

    return CustomerProducts(
        account_id=account_id,
        products_by_region=by_region,
        summary=ProductSummary(
            total_active=counts.models + counts.apps + counts.data,
            by_category=counts,
        ),
        last_updated=last_updated,
        records_analyzed=len(records),
    )
