"""Ranked lists for the home and stats screens.

Every ranking is a stable multi-key sort: records whose keys tie keep the
order they arrived in, so re-rendering an unchanged snapshot never
reshuffles the UI.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .budgets import BudgetEvaluation, evaluate_all
from .config import get_settings
from .models import Goal, Transaction, TransactionType, coerce_records

T = TypeVar("T")

SortKey = Tuple[Callable[[Any], Any], bool]


def stable_rank(items: Iterable[T], keys: Sequence[SortKey], limit: Optional[int] = None) -> List[T]:
    """Sort ``items`` by several keys, each with its own direction.

    Args:
        items: Records to rank.
        keys: ``(key_fn, descending)`` pairs, most significant first.
        limit: Keep only the first ``limit`` results.

    Example:
        >>> stable_rank(txs, [(lambda t: t.amount, True), (lambda t: t.date, True)], limit=5)
    """
    ranked = list(items)
    # Python's sort is stable, so sorting least-significant key first composes.
    for key_fn, descending in reversed(keys):
        ranked.sort(key=key_fn, reverse=descending)
    return ranked if limit is None else ranked[:limit]


def top_expenses(transactions: Iterable, n: Optional[int] = None) -> List[Transaction]:
    """Largest expenses, most recent first among equal amounts."""
    limit = n if n is not None else get_settings().top_expenses
    expenses = [
        tx for tx in coerce_records(Transaction, transactions) if TransactionType(tx.type) is TransactionType.EXPENSE
    ]
    return stable_rank(expenses, [(lambda t: t.amount, True), (lambda t: t.date, True)], limit)


def top_by_amount(transactions: Iterable, n: Optional[int] = None) -> List[Transaction]:
    """Same ordering as :func:`top_expenses` without the expense filter."""
    limit = n if n is not None else get_settings().top_expenses
    return stable_rank(
        coerce_records(Transaction, transactions),
        [(lambda t: t.amount, True), (lambda t: t.date, True)],
        limit,
    )


def recent_transactions(transactions: Iterable, n: Optional[int] = None) -> List[Transaction]:
    limit = n if n is not None else get_settings().recent_transactions
    return stable_rank(coerce_records(Transaction, transactions), [(lambda t: t.date, True)], limit)


def riskiest_budgets(
    budgets: Iterable, transactions: Iterable, now: Any, n: Optional[int] = None
) -> List[BudgetEvaluation]:
    """Budgets closest to their limit without having crossed it.

    Budgets already at or over their limit are alerts, not risks, and are
    left out.  The rest are ordered by utilization, highest first.
    """
    limit = n if n is not None else get_settings().riskiest_budgets
    at_risk = [ev for ev in evaluate_all(budgets, transactions, now) if not ev.is_over_budget]
    return stable_rank(at_risk, [(lambda ev: ev.utilization, True)], limit)


def goal_ratio(goal: Goal) -> float:
    if goal.target_amount <= 0:
        return 0.0
    return goal.current_amount / goal.target_amount


def closest_goals(goals: Iterable, n: Optional[int] = None) -> List[Goal]:
    """Unfinished goals ordered by how close they are to their target."""
    limit = n if n is not None else get_settings().closest_goals
    unfinished = [g for g in coerce_records(Goal, goals) if g.current_amount < g.target_amount]
    return stable_rank(unfinished, [(goal_ratio, True)], limit)
