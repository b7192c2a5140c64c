"""Transaction list filtering for the finances screen."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .errors import MalformedRecordError
from .models import Transaction, TransactionType, coerce_records, to_date
from .ranking import stable_rank

SORT_FIELDS = ("amount", "date")
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class TransactionFilter:
    """Recognised filter options.  Unset fields do not filter."""

    transaction_class: Optional[TransactionType] = None
    category: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sort_by: str = "date"
    sort_order: str = "desc"

    def __post_init__(self):
        if self.sort_by not in SORT_FIELDS:
            raise MalformedRecordError(f"sort_by must be one of {SORT_FIELDS}, got {self.sort_by!r}", field="sort_by")
        if self.sort_order not in SORT_ORDERS:
            raise MalformedRecordError(
                f"sort_order must be one of {SORT_ORDERS}, got {self.sort_order!r}", field="sort_order"
            )
        if self.transaction_class is not None:
            try:
                object.__setattr__(self, "transaction_class", TransactionType(self.transaction_class))
            except ValueError as exc:
                raise MalformedRecordError(
                    f"Unknown transaction class {self.transaction_class!r}", field="transaction_class"
                ) from exc
        for name in ("start_date", "end_date"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, to_date(value, name))

    @classmethod
    def from_dict(cls, options: dict) -> "TransactionFilter":
        """Build from camelCase or snake_case option names; unknown keys are rejected."""
        aliases = {
            "transactionClass": "transaction_class",
            "startDate": "start_date",
            "endDate": "end_date",
            "sortBy": "sort_by",
            "sortOrder": "sort_order",
        }
        kwargs: Dict[str, Any] = {}
        for key, value in options.items():
            name = aliases.get(key, key)
            if name not in cls.__dataclass_fields__:
                raise MalformedRecordError(f"Unknown filter option {key!r}", field=key)
            if value in ("", None):
                continue
            kwargs[name] = value
        return cls(**kwargs)

    def matches(self, tx: Transaction) -> bool:
        if self.transaction_class is not None and TransactionType(tx.type) is not self.transaction_class:
            return False
        if self.category and (tx.category or "").lower() != self.category.lower():
            return False
        if self.start_date is not None and tx.date < self.start_date:
            return False
        if self.end_date is not None and tx.date > self.end_date:
            return False
        return True


def apply_filter(transactions: Iterable, options: Optional[TransactionFilter] = None) -> List[Transaction]:
    """Filter inclusively by date and sort stably by the requested field."""
    chosen = options or TransactionFilter()
    kept = [tx for tx in coerce_records(Transaction, transactions) if chosen.matches(tx)]
    key = (lambda t: t.amount) if chosen.sort_by == "amount" else (lambda t: t.date)
    return stable_rank(kept, [(key, chosen.sort_order == "desc")])
