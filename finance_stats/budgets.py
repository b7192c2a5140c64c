"""Budget evaluation against the current recurrence window.

``spent`` and ``remaining`` stored on a budget are never trusted: every
evaluation recomputes them from the matching expense transactions.  A
recurring monthly budget counts expenses since the first of the current
month, a recurring weekly one the last 7 days, and daily budgets everything
since their own ``start_date``.  One-time budgets always use ``start_date``
to ``end_date``, whatever frequency the store attached to them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Any, Iterable, List, Optional

import pandas as pd

from .frames import records, transactions_frame
from .models import Budget, RecurringFrequency, Transaction, TransactionType, coerce_records, to_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetEvaluation:
    budget_id: str
    title: str
    category: str
    amount: float
    spent: float
    remaining: float
    utilization: float
    is_over_budget: bool
    period_start: date
    should_notify: bool
    is_expired: bool
    days_left: int
    daily_allowance: float
    budget: Optional[Budget] = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class BudgetStats:
    total_budget: float
    total_spent: float
    remaining_budget: float
    budget_utilization: float
    over_budget_count: int
    under_budget_count: int
    evaluations: List[BudgetEvaluation]
    alerts: List[BudgetEvaluation]
    expired_one_time_budgets: List[Budget]


def period_start(budget: Budget, now: Any) -> date:
    """Start of the evaluation window for ``budget`` as of ``now``."""
    today = to_date(now, "now")
    # One-time budgets still carry a frequency in the store; it does not apply.
    if not budget.is_recurring:
        return budget.start_date
    frequency = RecurringFrequency(budget.recurring_frequency) if budget.recurring_frequency else None
    if frequency is RecurringFrequency.MONTHLY:
        return today.replace(day=1)
    if frequency is RecurringFrequency.WEEKLY:
        return today - timedelta(days=7)
    return budget.start_date


def utilization(spent: float, amount: float) -> float:
    """``spent / amount`` as an unclamped percentage; 0 when ``amount`` is 0."""
    if amount <= 0:
        return 0.0
    return spent / amount * 100


def _in_window(frame: pd.DataFrame, budget: Budget, start: date) -> pd.DataFrame:
    """Expense rows counted against ``budget`` from ``start`` on."""
    if frame.empty:
        return frame
    mask = (
        (frame["type"] == TransactionType.EXPENSE.value)
        & (frame["category"] == budget.category)
        & (frame["date"] >= pd.Timestamp(start))
    )
    if not budget.is_recurring:
        mask &= frame["date"] <= pd.Timestamp(budget.end_date)
    return frame[mask]


def _spent(frame: pd.DataFrame, budget: Budget, start: date) -> float:
    return float(_in_window(frame, budget, start)["amount"].sum())


def _evaluate_frame(budget: Budget, frame: pd.DataFrame, now: Any) -> BudgetEvaluation:
    today = to_date(now, "now")
    start = period_start(budget, today)
    spent = _spent(frame, budget, start)
    remaining = budget.amount - spent
    used = utilization(spent, budget.amount)
    days_left = (budget.end_date - today).days
    return BudgetEvaluation(
        budget_id=budget.id,
        title=budget.title,
        category=budget.category,
        amount=budget.amount,
        spent=spent,
        remaining=remaining,
        utilization=used,
        is_over_budget=spent >= budget.amount,
        period_start=start,
        should_notify=bool(budget.notifications_enabled and used >= budget.notifications_threshold),
        is_expired=is_expired(budget, today),
        days_left=days_left,
        daily_allowance=remaining / max(days_left, 1),
        budget=budget,
    )


def evaluate(budget: Budget, transactions: Iterable, now: Any) -> BudgetEvaluation:
    """Evaluate one budget.

    Args:
        budget: The budget record (or a mapping accepted by ``Budget.from_dict``).
        transactions: All known transactions; matching happens here.
        now: Reference date for the recurrence window.

    Returns:
        A :class:`BudgetEvaluation`.  ``remaining`` goes negative once the
        budget is exceeded and ``utilization`` may pass 100.
    """
    (record,) = coerce_records(Budget, [budget])
    return _evaluate_frame(record, transactions_frame(transactions), now)


def evaluate_all(budgets: Iterable, transactions: Iterable, now: Any) -> List[BudgetEvaluation]:
    frame = transactions_frame(transactions)
    return [_evaluate_frame(budget, frame, now) for budget in coerce_records(Budget, budgets)]


def budget_transactions(budget: Budget, transactions: Iterable, now: Any) -> List[Transaction]:
    """The expenses counted in the budget's current window, newest first.

    These are exactly the transactions summed into ``spent`` by
    :func:`evaluate`; equal dates keep their input order.
    """
    (record,) = coerce_records(Budget, [budget])
    matched = _in_window(transactions_frame(transactions), record, period_start(record, now))
    return records(matched.sort_values("date", ascending=False, kind="mergesort"))


def refresh_budget(budget: Budget, transactions: Iterable, now: Any) -> Budget:
    """Return ``budget`` with ``spent`` and ``remaining`` recomputed."""
    evaluation = evaluate(budget, transactions, now)
    return replace(evaluation.budget, spent=evaluation.spent, remaining=evaluation.remaining)


def is_expired(budget: Budget, now: Any) -> bool:
    """One-time budgets expire once ``end_date`` has passed; recurring ones never do."""
    return not budget.is_recurring and budget.end_date < to_date(now, "now")


def notification_alerts(evaluations: Iterable[BudgetEvaluation]) -> List[BudgetEvaluation]:
    return [ev for ev in evaluations if ev.should_notify]


def expired_one_time(budgets: Iterable, now: Any) -> List[Budget]:
    """One-time budgets awaiting a reset, convert or delete decision."""
    expired = [b for b in coerce_records(Budget, budgets) if is_expired(b, now)]
    if expired:
        logger.info("%d one-time budget(s) expired: %s", len(expired), ", ".join(b.title for b in expired))
    return expired


def budget_stats(budgets: Iterable, transactions: Iterable, now: Any) -> BudgetStats:
    budget_records = coerce_records(Budget, budgets)
    evaluations = evaluate_all(budget_records, transactions, now)
    total_budget = sum(ev.amount for ev in evaluations)
    total_spent = sum(ev.spent for ev in evaluations)
    over = sum(1 for ev in evaluations if ev.is_over_budget)
    return BudgetStats(
        total_budget=total_budget,
        total_spent=total_spent,
        remaining_budget=total_budget - total_spent,
        budget_utilization=utilization(total_spent, total_budget),
        over_budget_count=over,
        under_budget_count=len(evaluations) - over,
        evaluations=evaluations,
        alerts=notification_alerts(evaluations),
        expired_one_time_budgets=expired_one_time(budget_records, now),
    )
