"""Time bucketing and named stats ranges.

Month-based ranges use calendar arithmetic (``pd.DateOffset``) rather than
fixed 30-day windows, so "last 3 months" on 31 May starts on 28/29 February
and never drifts.  Trend granularity is decided once, by
:func:`granularity_for_span`, and every trend computation goes through it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any, List, Optional, Union

import pandas as pd

from .config import get_settings
from .errors import MalformedRecordError, UnknownRangeError
from .models import to_date

logger = logging.getLogger(__name__)


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


RANGE_LABELS = {
    "last_week": "Last 7 Days",
    "this_month": "Current Month",
    "last_month": "Last Month",
    "last_3_months": "3 Months",
    "last_6_months": "6 Months",
    "this_year": "Year",
}
RANGE_ALIASES = {"week": "last_week"}


@dataclass(frozen=True)
class DateRange:
    """Inclusive ``[start, end]`` window plus the granularity used for trends."""

    start: date
    end: date
    granularity: Granularity

    @property
    def span_days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


def as_granularity(value: Union[Granularity, str]) -> Granularity:
    try:
        return Granularity(value)
    except ValueError as exc:
        raise MalformedRecordError(f"Unknown granularity {value!r}", field="granularity") from exc


def _months_back(now: date, months: int) -> date:
    return (pd.Timestamp(now) - pd.DateOffset(months=months)).date()


def _canonical(range_id: str) -> str:
    key = RANGE_ALIASES.get(range_id, range_id)
    if key not in RANGE_LABELS:
        raise UnknownRangeError(range_id)
    return key


def range_start(range_id: str, now: Any) -> date:
    """First day (inclusive) of the named range relative to ``now``."""
    today = to_date(now, "now")
    key = _canonical(range_id)
    if key == "last_week":
        return today - timedelta(days=7)
    if key == "this_month":
        return today.replace(day=1)
    if key == "last_month":
        return _months_back(today, 1).replace(day=1)
    if key == "last_3_months":
        return _months_back(today, 3)
    if key == "last_6_months":
        return _months_back(today, 6)
    return date(today.year, 1, 1)


def range_end(range_id: str, now: Any) -> date:
    today = to_date(now, "now")
    if _canonical(range_id) == "last_month":
        return today.replace(day=1) - timedelta(days=1)
    return today


def granularity_for_span(start: date, end: date, threshold_days: Optional[int] = None) -> Granularity:
    """Daily buckets for spans up to ``threshold_days`` (inclusive), monthly beyond."""
    threshold = threshold_days if threshold_days is not None else get_settings().daily_span_days
    span = (end - start).days + 1
    return Granularity.DAILY if span <= threshold else Granularity.MONTHLY


def custom_range(
    start: Any,
    end: Any,
    granularity: Optional[Union[Granularity, str]] = None,
    threshold_days: Optional[int] = None,
) -> DateRange:
    first = to_date(start, "start")
    last = to_date(end, "end")
    if first > last:
        raise MalformedRecordError(f"Range start {first} is after end {last}", field="start")
    chosen = as_granularity(granularity) if granularity else granularity_for_span(first, last, threshold_days)
    return DateRange(first, last, chosen)


def resolve_range(
    range_id: str,
    now: Any,
    granularity: Optional[Union[Granularity, str]] = None,
    threshold_days: Optional[int] = None,
) -> DateRange:
    """Resolve a named range into a :class:`DateRange`.

    Args:
        range_id: One of ``last_week``, ``this_month``, ``last_month``,
            ``last_3_months``, ``last_6_months``, ``this_year`` (``week`` is
            accepted as an alias of ``last_week``).
        now: Reference date.
        granularity: Optional override; otherwise chosen from the span.
        threshold_days: Daily/monthly cut-over; defaults to ``FINSTATS_DAILY_SPAN_DAYS``.

    Raises:
        UnknownRangeError: If ``range_id`` is not recognised.
    """
    resolved = custom_range(range_start(range_id, now), range_end(range_id, now), granularity, threshold_days)
    logger.debug("Resolved range %s to %s..%s (%s)", range_id, resolved.start, resolved.end, resolved.granularity.value)
    return resolved


def bucket_key(value: Any, granularity: Union[Granularity, str]) -> str:
    """Truncate a date to its period key.

    Example:
        >>> bucket_key(date(2024, 1, 5), "daily")
        '2024-01-05'
        >>> bucket_key(date(2024, 1, 5), "monthly")
        '2024-01'
    """
    day = to_date(value)
    level = as_granularity(granularity)
    if level is Granularity.DAILY:
        return day.isoformat()
    if level is Granularity.WEEKLY:
        return (day - timedelta(days=day.weekday())).isoformat()
    return f"{day.year:04d}-{day.month:02d}"


def bucket_series(dates: pd.Series, granularity: Union[Granularity, str]) -> pd.Series:
    """Vectorised :func:`bucket_key` over a datetime series."""
    level = as_granularity(granularity)
    stamps = pd.to_datetime(dates)
    if level is Granularity.DAILY:
        return stamps.dt.strftime("%Y-%m-%d")
    if level is Granularity.WEEKLY:
        monday = stamps - pd.to_timedelta(stamps.dt.weekday, unit="D")
        return monday.dt.strftime("%Y-%m-%d")
    return stamps.dt.strftime("%Y-%m")


def period_keys(start: Any, end: Any, granularity: Union[Granularity, str]) -> List[str]:
    """Every bucket key from ``start`` to ``end`` inclusive, ascending and gap-free."""
    first = to_date(start, "start")
    last = to_date(end, "end")
    if first > last:
        return []
    level = as_granularity(granularity)
    if level is Granularity.DAILY:
        periods = pd.period_range(start=pd.Timestamp(first), end=pd.Timestamp(last), freq="D")
        return [p.strftime("%Y-%m-%d") for p in periods]
    if level is Granularity.WEEKLY:
        periods = pd.period_range(start=pd.Timestamp(first), end=pd.Timestamp(last), freq="W-SUN")
        return [p.start_time.strftime("%Y-%m-%d") for p in periods]
    periods = pd.period_range(start=pd.Timestamp(first), end=pd.Timestamp(last), freq="M")
    return [p.strftime("%Y-%m") for p in periods]


def months_between(later: Any, earlier: Any) -> int:
    """Calendar-month difference, ignoring the day of month.  May be negative."""
    end = to_date(later)
    start = to_date(earlier)
    return (end.year - start.year) * 12 + (end.month - start.month)


def days_between(later: Any, earlier: Any) -> int:
    return (to_date(later) - to_date(earlier)).days
