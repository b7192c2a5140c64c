"""Record types consumed by the statistics engine.

The external store owns these records; the engine only reads them.  All
records are frozen dataclasses, so the only way to "change" one is to build
a replacement with :func:`dataclasses.replace`.

Each record offers ``from_dict`` for mappings shaped like the store's JSON
payloads.  Validation there is strict: a missing required field, an unknown
enum value, a negative amount or an unparseable date raises
:class:`~finance_stats.errors.MalformedRecordError` instead of guessing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional

import pandas as pd

from .errors import MalformedRecordError


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    DEPOSIT = "deposit"


class RecurringFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def to_date(value: Any, field: str = "date") -> date:
    """Coerce ``value`` to a :class:`datetime.date`.

    Accepts ``date``, ``datetime`` (including ``pd.Timestamp``) and ISO
    strings such as ``"2024-01-05"`` or ``"2024-01-05T10:00:00Z"``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MalformedRecordError(f"Missing {field}", field=field)
    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError) as exc:
        raise MalformedRecordError(f"Invalid {field}: {value!r}", field=field) from exc
    if pd.isna(parsed):
        raise MalformedRecordError(f"Invalid {field}: {value!r}", field=field)
    return parsed.date()


def _require(data: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    raise MalformedRecordError(f"Missing required field {names[0]!r}", field=names[0], record=data)


def _optional(data: Mapping[str, Any], *names: str, default: Any = None) -> Any:
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return default


def _amount(value: Any, field: str, record: object = None) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedRecordError(f"{field} must be numeric, got {value!r}", field=field, record=record) from exc
    if amount != amount:
        raise MalformedRecordError(f"{field} must be numeric, got NaN", field=field, record=record)
    if amount < 0:
        raise MalformedRecordError(f"{field} must be >= 0, got {amount}", field=field, record=record)
    return amount


_FLAG_VALUES = {"true": True, "1": True, "false": False, "0": False}


def _flag(value: Any, field: str, record: object = None) -> bool:
    if isinstance(value, bool):
        return value
    parsed = _FLAG_VALUES.get(str(value).strip().lower())
    if parsed is None:
        raise MalformedRecordError(f"{field} must be true or false, got {value!r}", field=field, record=record)
    return parsed


def _enum(enum_cls, value: Any, field: str, record: object = None):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise MalformedRecordError(
            f"Unknown {field} {value!r}; expected one of: {allowed}", field=field, record=record
        ) from exc


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TransactionType
    amount: float
    date: date
    currency: str = "USD"
    category: Optional[str] = None
    merchant: Optional[str] = None
    sender: Optional[str] = None
    receiver: Optional[str] = None
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Transaction":
        return cls(
            id=str(_optional(data, "id", default="")),
            type=_enum(TransactionType, _require(data, "type"), "type", data),
            amount=_amount(_require(data, "amount"), "amount", data),
            date=to_date(_require(data, "date"), "date"),
            currency=str(_optional(data, "currency", default="USD")),
            category=_text(_optional(data, "category")),
            merchant=_text(_optional(data, "merchant")),
            sender=_text(_optional(data, "sender")),
            receiver=_text(_optional(data, "receiver")),
            description=str(_optional(data, "description", default="")),
        )


@dataclass(frozen=True)
class Budget:
    """A spending limit for one category.

    ``spent`` and ``remaining`` are whatever the store last saved; the
    budget evaluator recomputes both and never trusts them.
    """

    id: str
    title: str
    category: str
    amount: float
    start_date: date
    end_date: date
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None
    spent: float = 0.0
    remaining: float = 0.0
    notifications_enabled: bool = False
    notifications_threshold: float = 100.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Budget":
        frequency = _optional(data, "recurring_frequency", "recurringFrequency")
        threshold = _amount(
            _optional(data, "notifications_threshold", "notificationsThreshold", default=100.0),
            "notificationsThreshold",
            data,
        )
        if not 0 < threshold <= 100:
            raise MalformedRecordError(
                f"notificationsThreshold must be in (0, 100], got {threshold}",
                field="notificationsThreshold",
                record=data,
            )
        amount = _amount(_require(data, "amount"), "amount", data)
        spent = float(_optional(data, "spent", default=0.0))
        return cls(
            id=str(_optional(data, "id", default="")),
            title=str(_optional(data, "title", default=_require(data, "category"))),
            category=str(_require(data, "category")),
            amount=amount,
            start_date=to_date(_require(data, "start_date", "startDate"), "start_date"),
            end_date=to_date(_require(data, "end_date", "endDate"), "end_date"),
            is_recurring=_flag(
                _optional(data, "is_recurring", "isRecurring", default=frequency is not None), "isRecurring", data
            ),
            recurring_frequency=(
                _enum(RecurringFrequency, frequency, "recurring_frequency", data) if frequency else None
            ),
            spent=spent,
            remaining=float(_optional(data, "remaining", default=amount - spent)),
            notifications_enabled=_flag(
                _optional(data, "notifications_enabled", "notificationsEnabled", default=False),
                "notificationsEnabled",
                data,
            ),
            notifications_threshold=threshold,
        )


@dataclass(frozen=True)
class Goal:
    """A savings target.  ``current_amount`` only ever grows via contributions."""

    id: str
    title: str
    target_amount: float
    current_amount: float
    start_date: date
    end_date: date
    category: str = ""
    is_active: bool = True
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Goal":
        return cls(
            id=str(_optional(data, "id", default="")),
            title=str(_require(data, "title")),
            target_amount=_amount(_require(data, "target_amount", "targetAmount"), "target_amount", data),
            current_amount=_amount(
                _optional(data, "current_amount", "currentAmount", default=0.0), "current_amount", data
            ),
            start_date=to_date(_require(data, "start_date", "startDate"), "start_date"),
            end_date=to_date(_require(data, "end_date", "endDate"), "end_date"),
            category=str(_optional(data, "category", default="")),
            is_active=_flag(_optional(data, "is_active", "isActive", default=True), "isActive", data),
            description=str(_optional(data, "description", default="")),
        )


@dataclass(frozen=True)
class Contribution:
    goal_id: str
    amount: float
    date: date
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Contribution":
        amount = _amount(_require(data, "amount"), "amount", data)
        if amount == 0:
            raise MalformedRecordError("Contribution amount must be > 0", field="amount", record=data)
        ident = _optional(data, "id")
        return cls(
            goal_id=str(_require(data, "goal_id", "goalId")),
            amount=amount,
            date=to_date(_require(data, "date"), "date"),
            id=str(ident) if ident is not None else None,
        )


def coerce_records(cls, records) -> list:
    """Materialise ``records`` as instances of ``cls``, converting mappings with ``from_dict``."""
    if records is None:
        return []
    materialised = []
    for record in records:
        if isinstance(record, cls):
            materialised.append(record)
        elif isinstance(record, Mapping):
            materialised.append(cls.from_dict(record))
        else:
            raise MalformedRecordError(
                f"Expected {cls.__name__} or mapping, got {type(record).__name__}", record=record
            )
    return materialised
