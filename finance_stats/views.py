"""View-model shapes for the presentation layer.

These functions only adapt engine output: they relabel, reorder into
display lists, assign palette colours and format money.  They never derive
new figures.  Colour and label assignment follow the input order, so an
unchanged snapshot always renders identically.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Union

from .aggregation import CategoryRollup, MerchantRollup, Overview, TrendPoint
from .budgets import BudgetEvaluation
from .config import get_settings
from .formatting import format_currency, format_percentage
from .goals import GoalProjection

NO_DATA_LABEL = "No Data"


@dataclass(frozen=True)
class ChartSeries:
    labels: List[str]
    values: List[float]
    periods: List[str]


@dataclass(frozen=True)
class PieSlice:
    name: str
    amount: float
    color: str
    percentage: int


@dataclass(frozen=True)
class SummaryCard:
    key: str
    title: str
    amount: float
    display: str


@dataclass(frozen=True)
class BudgetRow:
    budget_id: str
    title: str
    spent: str
    remaining: str
    utilization: str
    progress: float
    status: str


@dataclass(frozen=True)
class GoalCard:
    goal_id: str
    title: str
    progress: str
    remaining: str
    deadline: str


def format_period_label(period: str) -> str:
    """``2024-06-14`` becomes ``14 Jun``; ``2024-06`` becomes ``Jun``."""
    try:
        if len(period) == 10:
            day = date.fromisoformat(period)
            return f"{day.day} {day.strftime('%b')}"
        if len(period) == 7:
            return date.fromisoformat(f"{period}-01").strftime("%b")
    except ValueError:
        return "Invalid"
    return period


def trend_chart(points: Sequence[TrendPoint], absolute: bool = True) -> ChartSeries:
    """Line/bar chart series for a trend.

    More than seven points get every other label blanked so the axis stays
    readable.  An empty trend yields a single ``No Data`` point.
    """
    if not points:
        return ChartSeries(labels=[NO_DATA_LABEL], values=[0.0], periods=[])
    step = 2 if len(points) > 7 else 1
    labels = [format_period_label(p.period) if i % step == 0 else "" for i, p in enumerate(points)]
    values = [abs(p.amount) if absolute else p.amount for p in points]
    return ChartSeries(labels=labels, values=values, periods=[p.period for p in points])


def savings_chart(points: Sequence[TrendPoint]) -> ChartSeries:
    """Like :func:`trend_chart` but keeps the sign, since net savings can be negative."""
    return trend_chart(points, absolute=False)


def pie_slices(
    rollups: Iterable[Union[CategoryRollup, MerchantRollup]],
    limit: Optional[int] = None,
    palette: Optional[Sequence[str]] = None,
) -> List[PieSlice]:
    settings = get_settings()
    colors = tuple(palette or settings.palette)
    count = limit if limit is not None else settings.pie_slices
    slices = []
    for index, rollup in enumerate(list(rollups)[:count]):
        name = rollup.category if isinstance(rollup, CategoryRollup) else rollup.merchant
        slices.append(PieSlice(
            name=name,
            amount=rollup.total_spent,
            color=colors[index % len(colors)],
            percentage=rollup.percentage_of_total,
        ))
    return slices


def summary_cards(overview: Overview, currency: Optional[str] = None) -> List[SummaryCard]:
    entries = (
        ("income", "Income", overview.total_income),
        ("expenses", "Expenses", overview.total_expenses),
        ("deposits", "Deposits", overview.total_deposits),
        ("balance", "Balance", overview.balance),
    )
    return [
        SummaryCard(key=key, title=title, amount=amount, display=format_currency(amount, currency))
        for key, title, amount in entries
    ]


def budget_rows(evaluations: Iterable[BudgetEvaluation], currency: Optional[str] = None) -> List[BudgetRow]:
    rows = []
    for ev in evaluations:
        if ev.is_over_budget:
            status = "Over Budget"
        elif ev.should_notify:
            status = "Near Limit"
        else:
            status = "On Track"
        rows.append(BudgetRow(
            budget_id=ev.budget_id,
            title=ev.title,
            spent=format_currency(ev.spent, currency),
            remaining=format_currency(ev.remaining, currency),
            utilization=format_percentage(ev.utilization),
            # progress bars cannot draw past full
            progress=min(ev.utilization, 100.0) / 100,
            status=status,
        ))
    return rows


def months_left_label(months_left: int) -> str:
    if months_left <= 0:
        return "Due now"
    return f"{months_left} month left" if months_left == 1 else f"{months_left} months left"


def goal_cards(projections: Iterable[GoalProjection], currency: Optional[str] = None) -> List[GoalCard]:
    return [
        GoalCard(
            goal_id=p.goal_id,
            title=p.title,
            progress=format_percentage(p.progress_percent),
            remaining=format_currency(p.remaining_amount, currency),
            deadline=months_left_label(p.months_left),
        )
        for p in projections
    ]
