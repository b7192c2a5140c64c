"""Goal progress projections and contribution handling.

Progress is a display figure, clamped to ``[0, 100]``; overshooting a target
is allowed in the records but never shown as more than 100%.
``months_left`` is reported raw and goes negative once a goal is overdue;
how to present that ("Due now") is left to the caller.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from .config import get_settings
from .errors import ContributionError
from .models import Contribution, Goal, coerce_records, to_date
from .periods import days_between, months_between
from .ranking import closest_goals, stable_rank

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GoalProjection:
    goal_id: str
    title: str
    target_amount: float
    current_amount: float
    progress_percent: float
    remaining_amount: float
    months_left: int
    days_left: int
    recommended_daily_contribution: float
    total_contributed: float
    contribution_count: int
    is_complete: bool


@dataclass(frozen=True)
class GoalStats:
    total_goals: int
    completed_goals: int
    active_goals: int
    total_contributions: float
    average_contribution: float
    top_goals: List[GoalProjection]


def progress_percent(current: float, target: float) -> float:
    """``current / target`` as a percentage clamped to ``[0, 100]``; 0 for a zero target."""
    if target <= 0:
        return 0.0
    return min(max(current / target * 100, 0.0), 100.0)


def contribution_history(goal: Goal, contributions: Iterable) -> List[Contribution]:
    """Contributions made to ``goal``, newest first."""
    own = [c for c in coerce_records(Contribution, contributions) if c.goal_id == goal.id]
    return stable_rank(own, [(lambda c: c.date, True)])


def project(goal: Goal, contributions: Iterable, now: Any) -> GoalProjection:
    """Project a goal's progress as of ``now``.

    Args:
        goal: The goal record; ``current_amount`` is taken as authoritative.
        contributions: Contribution history; only entries for this goal are used.
        now: Reference date.

    Returns:
        A :class:`GoalProjection`.

    Example:
        A goal of 1000 holding 250 and ending six months from ``now``
        projects to 25% progress, 750 remaining and ``months_left == 6``.
    """
    (record,) = coerce_records(Goal, [goal])
    today = to_date(now, "now")
    history = contribution_history(record, contributions)
    remaining = max(record.target_amount - record.current_amount, 0.0)
    days_left = days_between(record.end_date, today)
    return GoalProjection(
        goal_id=record.id,
        title=record.title,
        target_amount=record.target_amount,
        current_amount=record.current_amount,
        progress_percent=progress_percent(record.current_amount, record.target_amount),
        remaining_amount=remaining,
        months_left=months_between(record.end_date, today),
        days_left=days_left,
        recommended_daily_contribution=remaining / max(days_left, 1),
        total_contributed=float(sum(c.amount for c in history)),
        contribution_count=len(history),
        is_complete=record.target_amount > 0 and record.current_amount >= record.target_amount,
    )


def apply_contribution(goal: Goal, contribution: Contribution) -> Goal:
    """Return a copy of ``goal`` with ``contribution`` added to ``current_amount``.

    The original record is left untouched, so callers either see the old
    goal or the fully updated one.

    Raises:
        ContributionError: If the contribution targets another goal or its
            amount is not positive.
    """
    if contribution.goal_id != goal.id:
        raise ContributionError(
            f"Contribution for goal {contribution.goal_id!r} cannot be applied to goal {goal.id!r}"
        )
    if not contribution.amount > 0:
        raise ContributionError(f"Contribution amount must be > 0, got {contribution.amount}")
    return replace(goal, current_amount=goal.current_amount + contribution.amount)


def apply_contributions(goals: Iterable, contributions: Iterable) -> List[Goal]:
    """Fold every contribution onto its goal, preserving goal order.

    Raises:
        ContributionError: If any contribution names an unknown goal.
    """
    records = coerce_records(Goal, goals)
    by_id: Dict[str, Goal] = {g.id: g for g in records}
    for contribution in coerce_records(Contribution, contributions):
        target = by_id.get(contribution.goal_id)
        if target is None:
            raise ContributionError(f"Contribution references unknown goal {contribution.goal_id!r}")
        by_id[contribution.goal_id] = apply_contribution(target, contribution)
    return [by_id[g.id] for g in records]


def goal_stats(goals: Iterable, contributions: Iterable, now: Any, n: Optional[int] = None) -> GoalStats:
    """Portfolio-level goal figures plus projections for the goals nearest completion."""
    limit = n if n is not None else get_settings().closest_goals
    records = coerce_records(Goal, goals)
    history = coerce_records(Contribution, contributions)

    per_goal: Dict[str, List[Contribution]] = defaultdict(list)
    for contribution in history:
        per_goal[contribution.goal_id].append(contribution)

    completed = sum(1 for g in records if g.target_amount > 0 and g.current_amount >= g.target_amount)
    active = sum(1 for g in records if g.is_active and g.current_amount < g.target_amount)
    total = float(sum(c.amount for c in history))
    top = [project(g, per_goal[g.id], now) for g in closest_goals(records, limit)]
    logger.debug("Goal stats over %d goals and %d contributions", len(records), len(history))
    return GoalStats(
        total_goals=len(records),
        completed_goals=completed,
        active_goals=active,
        total_contributions=total,
        average_contribution=total / len(history) if history else 0.0,
        top_goals=top,
    )
