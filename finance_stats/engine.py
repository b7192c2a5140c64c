"""Facade binding a snapshot and a viewpoint to the statistics functions.

:class:`FinanceStats` plays the role the analytics object plays for a
dashboard page: build it from the latest snapshot, then ask it for whatever
view a screen needs.  It holds no derived state, so building a new one
whenever the snapshot changes is the whole invalidation story.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from . import aggregation, budgets, goals, ranking, views
from .config import EngineSettings, get_settings
from .errors import MalformedRecordError
from .filters import TransactionFilter, apply_filter
from .models import Budget, Contribution, Goal, Transaction, TransactionType
from .periods import DateRange, Granularity, resolve_range
from .snapshot import Snapshot, SnapshotStore

logger = logging.getLogger(__name__)

RangeArg = Union[str, DateRange]

STATS_TABS = ("spending", "income", "savings")


@dataclass(frozen=True)
class HomeDashboard:
    balance: float
    history: aggregation.HistoricalSummary
    recent_transactions: List[Transaction]
    riskiest_budgets: List[budgets.BudgetEvaluation]
    closest_goals: List[goals.GoalProjection]
    budget_alerts: List[budgets.BudgetEvaluation]
    expired_one_time_budgets: List[Budget]


@dataclass(frozen=True)
class StatsScreen:
    date_range: DateRange
    tab: str
    total: float
    cards: List[views.SummaryCard]
    chart: views.ChartSeries
    pie: List[views.PieSlice]
    top_expenses: List[Transaction]


class FinanceStats:
    """Derived views over one snapshot, as seen by one user."""

    def __init__(self, snapshot: Snapshot, viewpoint: Optional[str], settings: Optional[EngineSettings] = None):
        self.snapshot = snapshot
        self.viewpoint = viewpoint
        self.settings = settings or get_settings()

    @classmethod
    def from_store(cls, store: SnapshotStore, viewpoint: Optional[str]) -> "FinanceStats":
        return cls(store.snapshot(), viewpoint)

    @property
    def transactions(self) -> tuple:
        return self.snapshot.transactions

    def resolve(self, date_range: RangeArg, now: Any, granularity: Optional[Union[Granularity, str]] = None) -> DateRange:
        if isinstance(date_range, DateRange):
            return date_range
        return resolve_range(date_range, now, granularity, self.settings.daily_span_days)

    # Aggregates

    def overview(self, date_range: RangeArg, now: Any) -> aggregation.Overview:
        return aggregation.overview(self.transactions, self.resolve(date_range, now), self.viewpoint)

    def category_rollup(self, date_range: RangeArg, now: Any) -> List[aggregation.CategoryRollup]:
        return aggregation.category_rollup(self.transactions, self.resolve(date_range, now), self.settings.top_expenses)

    def merchant_rollup(self, date_range: RangeArg, now: Any) -> List[aggregation.MerchantRollup]:
        return aggregation.merchant_rollup(self.transactions, self.resolve(date_range, now), self.settings.top_expenses)

    def trend(
        self,
        date_range: RangeArg,
        now: Any,
        transaction_type: Union[TransactionType, str] = TransactionType.EXPENSE,
        granularity: Optional[Union[Granularity, str]] = None,
    ) -> List[aggregation.TrendPoint]:
        resolved = self.resolve(date_range, now, granularity)
        return aggregation.trend(self.transactions, resolved, granularity, transaction_type)

    def expense_stats(self, date_range: RangeArg, now: Any) -> aggregation.ExpenseStats:
        return aggregation.expense_stats(
            self.transactions, self.resolve(date_range, now), top_n=self.settings.top_expenses
        )

    def income_stats(self, date_range: RangeArg, now: Any) -> aggregation.IncomeStats:
        return aggregation.income_stats(self.transactions, self.resolve(date_range, now))

    def transfer_stats(self, date_range: RangeArg, now: Any) -> aggregation.TransferStats:
        return aggregation.transfer_stats(
            self.transactions, self.resolve(date_range, now), self.viewpoint, top_n=self.settings.top_expenses
        )

    def deposit_stats(self, date_range: RangeArg, now: Any) -> aggregation.DepositStats:
        return aggregation.deposit_stats(self.transactions, self.resolve(date_range, now))

    def savings_trend(self, date_range: RangeArg, now: Any) -> List[aggregation.TrendPoint]:
        return aggregation.savings_trend(self.transactions, self.resolve(date_range, now))

    def current_balance(self) -> float:
        return aggregation.current_balance(self.transactions, self.viewpoint)

    def historical_summary(self, now: Any) -> aggregation.HistoricalSummary:
        return aggregation.historical_summary(self.transactions, self.viewpoint, now)

    def monthly_summary(self, now: Any) -> aggregation.Overview:
        return aggregation.monthly_summary(self.transactions, self.viewpoint, now)

    def filter_transactions(self, options: Optional[TransactionFilter] = None) -> List[Transaction]:
        return apply_filter(self.transactions, options)

    # Budgets and goals

    def budget_stats(self, now: Any) -> budgets.BudgetStats:
        return budgets.budget_stats(self.snapshot.budgets, self.transactions, now)

    def budget_transactions(self, budget: Budget, now: Any) -> List[Transaction]:
        return budgets.budget_transactions(budget, self.transactions, now)

    def budget_daily_spending(self, budget: Budget, now: Any, days: int = 7) -> List[aggregation.TrendPoint]:
        return aggregation.budget_daily_spending(budget, self.transactions, now, days)

    def riskiest_budgets(self, now: Any) -> List[budgets.BudgetEvaluation]:
        return ranking.riskiest_budgets(self.snapshot.budgets, self.transactions, now, self.settings.riskiest_budgets)

    def goal_stats(self, now: Any) -> goals.GoalStats:
        return goals.goal_stats(self.snapshot.goals, self.snapshot.contributions, now, self.settings.closest_goals)

    def project_goal(self, goal: Goal, now: Any) -> goals.GoalProjection:
        return goals.project(goal, self.snapshot.contributions, now)

    def contribution_history(self, goal: Goal) -> List[Contribution]:
        return goals.contribution_history(goal, self.snapshot.contributions)

    # Screens

    def dashboard(self, now: Any) -> HomeDashboard:
        """Everything the home screen shows."""
        budget_report = self.budget_stats(now)
        closest = ranking.closest_goals(self.snapshot.goals, self.settings.closest_goals)
        return HomeDashboard(
            balance=self.current_balance(),
            history=self.historical_summary(now),
            recent_transactions=ranking.recent_transactions(self.transactions, self.settings.recent_transactions),
            riskiest_budgets=self.riskiest_budgets(now),
            closest_goals=[self.project_goal(goal, now) for goal in closest],
            budget_alerts=budget_report.alerts,
            expired_one_time_budgets=budget_report.expired_one_time_budgets,
        )

    def stats_screen(self, date_range: RangeArg, now: Any, tab: str = "spending") -> StatsScreen:
        """The statistics screen for one range and tab.

        ``spending`` charts the expense trend, ``income`` the income trend
        and ``savings`` the net of the two per period.
        """
        if tab not in STATS_TABS:
            raise MalformedRecordError(f"tab must be one of {STATS_TABS}, got {tab!r}", field="tab")
        resolved = self.resolve(date_range, now)
        summary = aggregation.overview(self.transactions, resolved, self.viewpoint)
        expenses = aggregation.expense_stats(self.transactions, resolved, top_n=self.settings.top_expenses)
        if tab == "spending":
            chart, total = views.trend_chart(expenses.trend), summary.total_expenses
        elif tab == "income":
            income = aggregation.income_stats(self.transactions, resolved)
            chart, total = views.trend_chart(income.trend), summary.total_income
        else:
            chart = views.savings_chart(aggregation.savings_trend(self.transactions, resolved))
            total = summary.balance
        logger.debug("Composed %s stats screen for %s..%s", tab, resolved.start, resolved.end)
        return StatsScreen(
            date_range=resolved,
            tab=tab,
            total=total,
            cards=views.summary_cards(summary, self.settings.currency),
            chart=chart,
            pie=views.pie_slices(expenses.top_categories, self.settings.pie_slices, self.settings.palette),
            top_expenses=expenses.top_expenses,
        )
