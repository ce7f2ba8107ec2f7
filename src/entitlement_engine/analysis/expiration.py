"""
Expiration and extension analysis over an account's provisioning history.

Every entitlement with an end date inside ``[today, today + window]`` is
reported. It counts as extended when another record of the same account
grants the same product code with a strictly later end date.
"""

import time
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Literal, NamedTuple

from entitlement_engine.core.models import (
    Entitlement,
    ExpirationAnalysis,
    ExpirationEntry,
    ExpirationGroup,
    ExpirationSummary,
    ProvisioningRecord,
)
from entitlement_engine.core.normalizer import normalize_record
from entitlement_engine.observability.logger import get_logger, log_operation
from entitlement_engine.observability.metrics import MetricsCollector
from entitlement_engine.utils.dates import subtract_years

logger = get_logger(__name__)

ExtensionStrategy = Literal["first", "latest"]


class ProductGroupKey(NamedTuple):
    account_id: str | None
    product_code: str


class RecordGroupKey(NamedTuple):
    account_id: str | None
    source_record_id: str | None


class _Tracked(NamedTuple):
    entitlement: Entitlement
    record: ProvisioningRecord


def _as_date(today: date | datetime) -> date:
    return today.date() if isinstance(today, datetime) else today


def _in_lookback(record: ProvisioningRecord, lookback_start: date) -> bool:
    created = record.created_timestamp
    return created is None or created.date() >= lookback_start


def _find_extension(group: list[_Tracked], position: int, strategy: ExtensionStrategy) -> _Tracked | None:
    """
    Look past ``position`` in an end-date-sorted group for a later entitlement
    from a different record.

    "first" returns the first match in sorted order; "latest" the match with
    the greatest end date (earliest such in sorted order on ties).
    """
    current = group[position].entitlement
    found = None
    for candidate in group[position + 1:]:
        other = candidate.entitlement
        if other.source_record_id == current.source_record_id or other.end_date <= current.end_date:
            continue
        if strategy == "first":
            return candidate
        if found is None or other.end_date > found.entitlement.end_date:
            found = candidate
    return found


def _latest_line_per_code(entitlements: list[Entitlement]) -> list[Entitlement]:
    """Keep one line per product code: the one with the latest end date (first on ties)."""
    latest: dict[str, Entitlement] = {}
    for ent in entitlements:
        kept = latest.get(ent.product_code)
        if kept is None or ent.end_date > kept.end_date:
            latest[ent.product_code] = ent
    return list(latest.values())


def _removed_later(record: ProvisioningRecord, product_code: str,
                   history: list[tuple[datetime, set[str]]]) -> bool:
    """True when a record created after ``record`` no longer lists ``product_code``."""
    created = record.created_timestamp
    if created is None:
        return False
    return any(later > created and product_code not in codes for later, codes in history)


def run_expiration_analysis(
    account_records: list[ProvisioningRecord],
    lookback_years: int,
    expiration_window_days: int,
    today: date | datetime,
    extension_strategy: ExtensionStrategy = "first",
    exclude_removed: bool = False,
    collapse_record_lines: bool = False,
) -> ExpirationAnalysis:
    """
    Classify expiring entitlements and detect extensions.

    Args:
        account_records: Provisioning history (one or more accounts)
        lookback_years: Ignore records created before today - lookback_years
        expiration_window_days: Report end dates up to today + this many days
        today: Reference date for the window and day counts
        extension_strategy: "first" later match in end-date order, or "latest"
        exclude_removed: Drop entitlements whose product a later record of the
                         same account no longer lists
        collapse_record_lines: Within one record, test only the line with the
                               latest end date for each product code

    Returns:
        ExpirationAnalysis with the emitted entries and run counters
    """
    if account_records is None:
        raise TypeError("account_records must be a list, got None")
    if extension_strategy not in ("first", "latest"):
        raise ValueError(f"Unknown extension strategy: {extension_strategy}")

    started = time.perf_counter()
    today = _as_date(today)
    horizon = today + timedelta(days=expiration_window_days)
    lookback_start = subtract_years(today, lookback_years)

    records = [r for r in account_records if _in_lookback(r, lookback_start)]

    groups: dict[ProductGroupKey, list[_Tracked]] = defaultdict(list)
    history: dict[str | None, list[tuple[datetime, set[str]]]] = defaultdict(list)
    processed = 0

    with log_operation("Expiration analysis", logger=logger, records=len(records)):
        for record in records:
            payload = normalize_record(record)
            codes = set()
            tracked = []
            for ent in payload.all_entitlements:
                if ent.product_code:
                    codes.add(ent.product_code)
                if ent.end_date is None:
                    continue
                processed += 1
                if ent.product_code:
                    tracked.append(ent)
            if collapse_record_lines:
                tracked = _latest_line_per_code(tracked)
            for ent in tracked:
                groups[ProductGroupKey(record.account_id, ent.product_code)].append(_Tracked(ent, record))
            if record.created_timestamp is not None:
                history[record.account_id].append((record.created_timestamp, codes))

        entries = []
        extensions = 0
        removed = 0
        for key, group in groups.items():
            group.sort(key=lambda tracked: tracked.entitlement.end_date)
            for position, (ent, record) in enumerate(group):
                if not today <= ent.end_date <= horizon:
                    continue
                if exclude_removed and _removed_later(record, key.product_code, history[key.account_id]):
                    removed += 1
                    continue

                extension = _find_extension(group, position, extension_strategy)
                if extension is not None:
                    extensions += 1

                entries.append(ExpirationEntry(
                    account_id=record.account_id,
                    account_name=record.account_id,
                    source_record_id=record.id,
                    source_record_name=record.name,
                    product_code=key.product_code,
                    product_name=ent.name,
                    category=ent.category,
                    end_date=ent.end_date,
                    days_until_expiry=(ent.end_date - today).days,
                    is_extended=extension is not None,
                    extending_record_id=extension.record.id if extension else None,
                    extending_record_name=extension.record.name if extension else None,
                    extending_end_date=extension.entitlement.end_date if extension else None,
                ))

    for entry in entries:
        MetricsCollector.record_expiration(entry.is_extended)
    MetricsCollector.observe_duration("analyze_expirations", time.perf_counter() - started)

    logger.info(
        "Expiration analysis complete",
        extra={
            "records_analyzed": len(records),
            "expirations_found": len(entries),
            "extensions_found": extensions,
            "removed_in_subsequent_record": removed,
        },
    )
    return ExpirationAnalysis(
        records_analyzed=len(records),
        entitlements_processed=processed,
        expirations_found=len(entries),
        extensions_found=extensions,
        removed_in_subsequent_record=removed,
        lookback_years=lookback_years,
        expiration_window_days=expiration_window_days,
        entries=entries,
    )


def analyze_expirations(
    account_records: list[ProvisioningRecord],
    lookback_years: int,
    expiration_window_days: int,
    today: date | datetime,
    extension_strategy: ExtensionStrategy = "first",
    exclude_removed: bool = False,
    collapse_record_lines: bool = False,
) -> list[ExpirationEntry]:
    """Expiring entitlements for the given history; see ``run_expiration_analysis``."""
    return run_expiration_analysis(
        account_records,
        lookback_years,
        expiration_window_days,
        today,
        extension_strategy=extension_strategy,
        exclude_removed=exclude_removed,
        collapse_record_lines=collapse_record_lines,
    ).entries


def group_expirations(entries: list[ExpirationEntry]) -> list[ExpirationGroup]:
    """
    Group entries by (account, source record) for display.

    A group is "at-risk" if any member is not extended, else "extended".
    """
    grouped: dict[RecordGroupKey, list[ExpirationEntry]] = defaultdict(list)
    for entry in entries:
        grouped[RecordGroupKey(entry.account_id, entry.source_record_id)].append(entry)

    groups = []
    for members in grouped.values():
        first = members[0]
        earliest = min(members, key=lambda e: e.end_date)
        by_category = {"Model": [], "App": [], "Data": []}
        for entry in members:
            by_category[entry.category].append(entry)

        groups.append(ExpirationGroup(
            account_id=first.account_id,
            account_name=first.account_name,
            source_record_id=first.source_record_id,
            source_record_name=first.source_record_name,
            models=by_category["Model"],
            apps=by_category["App"],
            data=by_category["Data"],
            earliest_expiry=earliest.end_date,
            earliest_days_until_expiry=earliest.days_until_expiry,
            status="extended" if all(e.is_extended for e in members) else "at-risk",
        ))
    return groups


def summarize_expiration_groups(groups: list[ExpirationGroup]) -> ExpirationSummary:
    return ExpirationSummary(
        total_expiring=len(groups),
        at_risk=sum(1 for g in groups if g.status == "at-risk"),
        extended=sum(1 for g in groups if g.status == "extended"),
        accounts_affected=len({g.account_id for g in groups}),
    )
