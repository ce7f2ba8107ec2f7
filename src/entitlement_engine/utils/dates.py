"""
Tolerant date parsing for upstream payload values.

Upstream payloads carry dates as ``YYYY-MM-DD`` strings, full ISO-8601
timestamps, or occasionally garbage. These helpers never raise for bad
input; they return None so callers can exclude the item from date
reasoning.
"""

from datetime import MINYEAR, date, datetime, timezone
from typing import Any

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta


def parse_date(value: Any) -> date | None:
    """
    Parse a payload value into a calendar date.

    Accepts ``date``/``datetime`` objects and strings whose first ten
    characters form an ISO date (``2024-06-30``, ``2024-06-30T00:00:00Z``).

    Returns:
        The date, or None when the value is missing or unparseable
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if len(text) < 10:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a record timestamp (e.g. ``CreatedDate``) into an aware datetime.

    Naive values are assumed to be UTC. Salesforce-style offsets without a
    colon (``+0000``) and ``Z`` are accepted.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def subtract_years(day: date, years: int) -> date:
    """
    Return the same calendar day ``years`` earlier (Feb 29 falls back to Feb 28).

    Clamps to ``date.min`` when the result would precede year 1.
    """
    if day.year - years < MINYEAR:
        return date.min
    return day - relativedelta(years=years)
