"""Direction and class of a single transaction from the user's viewpoint.

Income and deposits always flow in, expenses always flow out.  Transfers
depend on who is looking: the acting user's display name is matched
case-insensitively as a substring of ``receiver`` (inflow) or ``sender``
(outflow).  A transfer matching neither has no balance effect.

Substring matching means "Jon" also matches "Jonathan"; matching by user id
would be stricter but the records only carry display names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import MalformedRecordError
from .models import Transaction, TransactionType


@dataclass(frozen=True)
class Classification:
    is_inflow: bool
    signed_amount: float
    transaction_class: TransactionType


def transaction_type(tx: Transaction) -> TransactionType:
    """Return ``tx.type`` as a :class:`TransactionType`, failing fast on anything else."""
    try:
        return TransactionType(tx.type)
    except ValueError as exc:
        raise MalformedRecordError(
            f"Transaction {tx.id!r} has unknown type {tx.type!r}", field="type", record=tx
        ) from exc


def matches_viewpoint(name: Optional[str], viewpoint: Optional[str]) -> bool:
    needle = (viewpoint or "").strip().lower()
    if not name or not needle:
        return False
    return needle in name.lower()


def classify(tx: Transaction, viewpoint: Optional[str]) -> Classification:
    """Classify ``tx`` as seen by ``viewpoint``.

    Args:
        tx: The transaction to classify.
        viewpoint: Display name of the acting user.

    Returns:
        A :class:`Classification` with the inflow flag and the signed amount
        (positive for inflows, negative for outflows, zero for transfers
        that involve neither side).

    Raises:
        MalformedRecordError: If ``tx.type`` is not a known transaction type.
    """
    kind = transaction_type(tx)
    if kind in (TransactionType.INCOME, TransactionType.DEPOSIT):
        return Classification(True, tx.amount, kind)
    if kind is TransactionType.EXPENSE:
        return Classification(False, -tx.amount, kind)

    if matches_viewpoint(tx.receiver, viewpoint):
        return Classification(True, tx.amount, kind)
    if matches_viewpoint(tx.sender, viewpoint):
        return Classification(False, -tx.amount, kind)
    return Classification(False, 0.0, kind)
