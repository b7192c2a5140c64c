"""Exception hierarchy for the statistics engine.

Only malformed input is an error.  Empty collections, zero-amount budgets
and zero-target goals all have defined results and never raise.
"""

from __future__ import annotations


class FinanceStatsError(Exception):
    """Base class for every error raised by :mod:`finance_stats`."""


class MalformedRecordError(FinanceStatsError, ValueError):
    """A record or option is missing a required field or carries an invalid value."""

    def __init__(self, message: str, *, field: str | None = None, record: object = None):
        super().__init__(message)
        self.field = field
        self.record = record


class UnknownRangeError(FinanceStatsError, KeyError):
    """A named stats range is not one the time bucketer recognises."""

    def __init__(self, range_id: str):
        super().__init__(range_id)
        self.range_id = range_id

    def __str__(self) -> str:
        return f"Unknown stats range: {self.range_id!r}"


class ContributionError(FinanceStatsError, ValueError):
    """A contribution cannot be applied to the goal it targets."""
