"""DataFrame views over transaction records.

Aggregation works on a pandas frame with one row per transaction and the
classifier's verdict already attached, so grouping never has to re-derive
direction.  Rows keep the input order.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import pandas as pd

from .classifier import classify
from .config import UNCATEGORIZED_LABEL
from .models import Transaction, coerce_records
from .periods import DateRange

logger = logging.getLogger(__name__)

FRAME_DTYPES = {
    "id": "object",
    "type": "object",
    "amount": "float64",
    "date": "datetime64[ns]",
    "category": "object",
    "merchant": "object",
    "sender": "object",
    "receiver": "object",
    "is_inflow": "bool",
    "signed_amount": "float64",
    "record": "object",
}


def empty_frame() -> pd.DataFrame:
    return pd.DataFrame({name: pd.Series(dtype=dtype) for name, dtype in FRAME_DTYPES.items()})


def transactions_frame(transactions: Iterable, viewpoint: Optional[str] = None) -> pd.DataFrame:
    """Build the classified transaction frame.

    Args:
        transactions: ``Transaction`` records or mappings accepted by
            :meth:`Transaction.from_dict`.
        viewpoint: Display name used to resolve transfer direction.

    Returns:
        DataFrame with the columns of :data:`FRAME_DTYPES`.  ``record`` holds
        the original :class:`Transaction`.
    """
    records = coerce_records(Transaction, transactions)
    if not records:
        return empty_frame()

    rows = []
    for tx in records:
        verdict = classify(tx, viewpoint)
        rows.append({
            "id": tx.id,
            "type": verdict.transaction_class.value,
            "amount": float(tx.amount),
            "date": tx.date,
            "category": tx.category,
            "merchant": tx.merchant,
            "sender": tx.sender,
            "receiver": tx.receiver,
            "is_inflow": verdict.is_inflow,
            "signed_amount": float(verdict.signed_amount),
            "record": tx,
        })

    frame = pd.DataFrame(rows, columns=list(FRAME_DTYPES))
    frame["date"] = pd.to_datetime(frame["date"])
    logger.debug("Built transaction frame with %d rows", len(frame))
    return frame


def filter_range(frame: pd.DataFrame, date_range: Optional[DateRange]) -> pd.DataFrame:
    """Rows dated within ``date_range``, both endpoints included."""
    if date_range is None or frame.empty:
        return frame
    start = pd.Timestamp(date_range.start)
    end = pd.Timestamp(date_range.end)
    return frame[(frame["date"] >= start) & (frame["date"] <= end)]


def of_type(frame: pd.DataFrame, kind: str) -> pd.DataFrame:
    return frame[frame["type"] == kind]


def with_category_labels(frame: pd.DataFrame) -> pd.DataFrame:
    """Copy of ``frame`` with missing categories labelled ``Uncategorized``."""
    labelled = frame.copy()
    labelled["category"] = labelled["category"].fillna(UNCATEGORIZED_LABEL)
    return labelled


def records(frame: pd.DataFrame) -> list:
    return list(frame["record"])
