"""Totals, rollups and trend series over a transaction snapshot.

Every function here is a pure reduction: it takes the records, the date
range and the viewpoint explicitly and returns plain dataclasses.  Nothing
is cached between calls; the host recomputes whenever its snapshot changes.

Ranges are inclusive at both ends.  Trend series always contain one point
per bucket in the range, with empty buckets zero-filled, so a chart x-axis
never has gaps.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

import pandas as pd

from .budgets import budget_transactions
from .config import get_settings
from .frames import filter_range, of_type, records, transactions_frame, with_category_labels
from .models import Budget, Transaction, TransactionType, to_date
from .periods import DateRange, Granularity, as_granularity, bucket_series, period_keys
from .ranking import top_by_amount, top_expenses

logger = logging.getLogger(__name__)

INCOME = TransactionType.INCOME.value
EXPENSE = TransactionType.EXPENSE.value
TRANSFER = TransactionType.TRANSFER.value
DEPOSIT = TransactionType.DEPOSIT.value


@dataclass(frozen=True)
class Overview:
    total_income: float
    total_expenses: float
    total_deposits: float
    balance: float
    net_cash_flow: float
    total_transactions: int


@dataclass(frozen=True)
class CategoryRollup:
    category: str
    total_spent: float
    total_transactions: int
    average_transaction_amount: float
    percentage_of_total: int
    top_transactions: List[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class MerchantRollup:
    merchant: str
    total_spent: float
    total_transactions: int
    average_transaction_amount: float
    percentage_of_total: int
    top_transactions: List[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class TrendPoint:
    period: str
    amount: float
    count: int


@dataclass(frozen=True)
class TransferTrendPoint:
    period: str
    sent: float
    received: float
    net: float


@dataclass(frozen=True)
class ExpenseStats:
    total_expenses: float
    average_expense: float
    highest_expense: float
    lowest_expense: float
    top_expenses: List[Transaction]
    top_merchants: List[MerchantRollup]
    top_categories: List[CategoryRollup]
    trend: List[TrendPoint]
    average_per_period: float
    uncategorized_expenses: List[Transaction]


@dataclass(frozen=True)
class IncomeStats:
    total_income: float
    average_income: float
    highest_income: float
    lowest_income: float
    trend: List[TrendPoint]
    average_per_period: float


@dataclass(frozen=True)
class TransferStats:
    total_transfers: float
    transfer_count: int
    total_sent: float
    total_received: float
    net_flow: float
    average_transfer: float
    highest_transfer: float
    lowest_transfer: float
    top_transfers: List[Transaction]
    trend: List[TransferTrendPoint]
    average_per_period: float


@dataclass(frozen=True)
class DepositStats:
    total_deposits: float
    average_deposit: float
    highest_deposit: float
    lowest_deposit: float


@dataclass(frozen=True)
class PeriodTotals:
    income: float
    expenses: float


@dataclass(frozen=True)
class HistoricalSummary:
    last_month: PeriodTotals
    last_3_months: PeriodTotals
    all_time: PeriodTotals


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def share_of(part: float, whole: float) -> float:
    """``part / whole`` as a percentage, 0 when ``whole`` is 0."""
    return part / whole * 100 if whole else 0.0


def _frame(transactions: Iterable, date_range: Optional[DateRange], viewpoint: Optional[str]) -> pd.DataFrame:
    return filter_range(transactions_frame(transactions, viewpoint), date_range)


def _total(frame: pd.DataFrame, kind: str, column: str = "amount") -> float:
    return float(of_type(frame, kind)[column].sum())


def _describe(amounts: pd.Series) -> tuple:
    """``(total, mean, max, min)``, all zero for an empty series."""
    if amounts.empty:
        return 0.0, 0.0, 0.0, 0.0
    return float(amounts.sum()), float(amounts.mean()), float(amounts.max()), float(amounts.min())


def overview(transactions: Iterable, date_range: Optional[DateRange] = None, viewpoint: Optional[str] = None) -> Overview:
    """Totals for the range.

    ``balance`` is income plus deposits minus expenses plus the net effect
    of transfers as the viewpoint sees them.  Transfers the viewpoint is not
    party to still count toward ``total_transactions``.
    """
    frame = _frame(transactions, date_range, viewpoint)
    income = _total(frame, INCOME)
    expenses = _total(frame, EXPENSE)
    deposits = _total(frame, DEPOSIT)
    transfer_net = _total(frame, TRANSFER, "signed_amount")
    return Overview(
        total_income=income,
        total_expenses=expenses,
        total_deposits=deposits,
        balance=income + deposits - expenses + transfer_net,
        net_cash_flow=income - expenses,
        total_transactions=int(len(frame)),
    )


def _rollup(expenses: pd.DataFrame, key: str, total: float, top_n: int) -> List[dict]:
    if expenses.empty:
        return []
    grouped = (
        expenses.groupby(key, sort=False)
        .agg(total_spent=("amount", "sum"), total_transactions=("amount", "count"), average=("amount", "mean"))
        .reset_index()
        .sort_values(["total_spent", key], ascending=[False, True], kind="mergesort")
    )
    rows = []
    for row in grouped.itertuples(index=False):
        label = getattr(row, key)
        members = records(expenses[expenses[key] == label])
        rows.append({
            key: label,
            "total_spent": float(row.total_spent),
            "total_transactions": int(row.total_transactions),
            "average_transaction_amount": float(row.average),
            "percentage_of_total": round_half_up(share_of(row.total_spent, total)),
            "top_transactions": top_by_amount(members, top_n),
        })
    return rows


def _category_rollup(expenses: pd.DataFrame, top_n: Optional[int] = None) -> List[CategoryRollup]:
    limit = top_n if top_n is not None else get_settings().top_expenses
    labelled = with_category_labels(expenses)
    total = float(labelled["amount"].sum())
    return [CategoryRollup(**row) for row in _rollup(labelled, "category", total, limit)]


def _merchant_rollup(expenses: pd.DataFrame, top_n: Optional[int] = None) -> List[MerchantRollup]:
    limit = top_n if top_n is not None else get_settings().top_expenses
    total = float(expenses["amount"].sum())
    named = expenses[expenses["merchant"].fillna("").astype(str).str.strip() != ""]
    return [MerchantRollup(**row) for row in _rollup(named, "merchant", total, limit)]


def category_rollup(
    transactions: Iterable, date_range: Optional[DateRange] = None, top_n: Optional[int] = None
) -> List[CategoryRollup]:
    """Per-category spending breakdown.

    Args:
        transactions: Transactions of any type; only expenses are rolled up.
        date_range: Optional inclusive window.
        top_n: Size of each category's ``top_transactions`` list.

    Returns:
        Rollups sorted by ``total_spent`` descending, ties by category name.
        ``percentage_of_total`` is the share of all expenses in the window,
        rounded half-up to a whole percent.  Expenses without a category are
        grouped under ``Uncategorized``.
    """
    expenses = of_type(_frame(transactions, date_range, None), EXPENSE)
    return _category_rollup(expenses, top_n)


def merchant_rollup(
    transactions: Iterable, date_range: Optional[DateRange] = None, top_n: Optional[int] = None
) -> List[MerchantRollup]:
    """Per-merchant breakdown; expenses without a merchant are left out.

    Percentages are shares of all expenses in the window, merchant or not.
    """
    expenses = of_type(_frame(transactions, date_range, None), EXPENSE)
    return _merchant_rollup(expenses, top_n)


def _bucketed(frame: pd.DataFrame, date_range: DateRange, level: Granularity, columns: dict) -> pd.DataFrame:
    """Group ``frame`` by bucket key and reindex over every bucket in the range."""
    keys = period_keys(date_range.start, date_range.end, level)
    if frame.empty:
        return pd.DataFrame(0, index=pd.Index(keys), columns=list(columns))
    grouped = frame.groupby(bucket_series(frame["date"], level)).agg(**columns)
    return grouped.reindex(keys, fill_value=0)


def _trend(frame: pd.DataFrame, date_range: DateRange, level: Granularity) -> List[TrendPoint]:
    table = _bucketed(frame, date_range, level, {"amount": ("amount", "sum"), "count": ("amount", "count")})
    return [TrendPoint(str(period), float(row["amount"]), int(row["count"])) for period, row in table.iterrows()]


def _level(date_range: DateRange, granularity: Optional[Union[Granularity, str]]) -> Granularity:
    return as_granularity(granularity) if granularity else date_range.granularity


def trend(
    transactions: Iterable,
    date_range: DateRange,
    granularity: Optional[Union[Granularity, str]] = None,
    transaction_type: Union[TransactionType, str] = TransactionType.EXPENSE,
) -> List[TrendPoint]:
    """Per-bucket totals for one transaction type, chronological and zero-filled.

    Example:
        Three days with no expenses give three points with
        ``amount=0`` and ``count=0``.
    """
    kind = TransactionType(transaction_type).value
    level = _level(date_range, granularity)
    subset = of_type(_frame(transactions, date_range, None), kind)
    points = _trend(subset, date_range, level)
    logger.debug("Trend for %s over %d %s buckets", kind, len(points), level.value)
    return points


def average_per_period(
    total: float, date_range: DateRange, granularity: Optional[Union[Granularity, str]] = None
) -> float:
    """``total`` divided by the number of buckets in the range (not by transaction count)."""
    level = _level(date_range, granularity)
    periods = len(period_keys(date_range.start, date_range.end, level))
    return total / periods if periods else 0.0


def expense_stats(
    transactions: Iterable,
    date_range: DateRange,
    granularity: Optional[Union[Granularity, str]] = None,
    top_n: Optional[int] = None,
) -> ExpenseStats:
    limit = top_n if top_n is not None else get_settings().top_expenses
    level = _level(date_range, granularity)
    expenses = of_type(_frame(transactions, date_range, None), EXPENSE)
    total, mean, highest, lowest = _describe(expenses["amount"])
    return ExpenseStats(
        total_expenses=total,
        average_expense=mean,
        highest_expense=highest,
        lowest_expense=lowest,
        top_expenses=top_expenses(records(expenses), limit),
        top_merchants=_merchant_rollup(expenses, limit),
        top_categories=_category_rollup(expenses, limit),
        trend=_trend(expenses, date_range, level),
        average_per_period=average_per_period(total, date_range, level),
        uncategorized_expenses=records(expenses[expenses["category"].isna()]),
    )


def income_stats(
    transactions: Iterable, date_range: DateRange, granularity: Optional[Union[Granularity, str]] = None
) -> IncomeStats:
    level = _level(date_range, granularity)
    income = of_type(_frame(transactions, date_range, None), INCOME)
    total, mean, highest, lowest = _describe(income["amount"])
    return IncomeStats(
        total_income=total,
        average_income=mean,
        highest_income=highest,
        lowest_income=lowest,
        trend=_trend(income, date_range, level),
        average_per_period=average_per_period(total, date_range, level),
    )


def deposit_stats(transactions: Iterable, date_range: Optional[DateRange] = None) -> DepositStats:
    deposits = of_type(_frame(transactions, date_range, None), DEPOSIT)
    total, mean, highest, lowest = _describe(deposits["amount"])
    return DepositStats(total_deposits=total, average_deposit=mean, highest_deposit=highest, lowest_deposit=lowest)


def transfer_stats(
    transactions: Iterable,
    date_range: DateRange,
    viewpoint: Optional[str],
    granularity: Optional[Union[Granularity, str]] = None,
    top_n: Optional[int] = None,
) -> TransferStats:
    """Transfers split into sent and received from the viewpoint's side.

    Transfers the viewpoint is party to on neither side count toward the
    totals and averages but not toward ``total_sent`` or ``total_received``.
    """
    limit = top_n if top_n is not None else get_settings().top_expenses
    level = _level(date_range, granularity)
    transfers = of_type(_frame(transactions, date_range, viewpoint), TRANSFER).copy()
    total, mean, highest, lowest = _describe(transfers["amount"])
    transfers["sent"] = (-transfers["signed_amount"]).clip(lower=0)
    transfers["received"] = transfers["signed_amount"].clip(lower=0)
    sent = float(transfers["sent"].sum())
    received = float(transfers["received"].sum())

    table = _bucketed(transfers, date_range, level, {"sent": ("sent", "sum"), "received": ("received", "sum")})
    series = [
        TransferTrendPoint(str(period), float(row["sent"]), float(row["received"]), float(row["received"] - row["sent"]))
        for period, row in table.iterrows()
    ]
    return TransferStats(
        total_transfers=total,
        transfer_count=int(len(transfers)),
        total_sent=sent,
        total_received=received,
        net_flow=received - sent,
        average_transfer=mean,
        highest_transfer=highest,
        lowest_transfer=lowest,
        top_transfers=top_by_amount(records(transfers), limit),
        trend=series,
        average_per_period=average_per_period(total, date_range, level),
    )


def savings_trend(
    transactions: Iterable,
    date_range: DateRange,
    granularity: Optional[Union[Granularity, str]] = None,
) -> List[TrendPoint]:
    """Per-bucket income plus deposits minus expenses.

    ``count`` is the number of transactions that contributed to the bucket.
    """
    level = _level(date_range, granularity)
    frame = _frame(transactions, date_range, None)
    flows = frame[frame["type"].isin([INCOME, DEPOSIT, EXPENSE])].copy()
    flows["net"] = flows["signed_amount"]
    table = _bucketed(flows, date_range, level, {"amount": ("net", "sum"), "count": ("net", "count")})
    return [TrendPoint(str(period), float(row["amount"]), int(row["count"])) for period, row in table.iterrows()]


def budget_daily_spending(budget: Budget, transactions: Iterable, now: Any, days: int = 7) -> List[TrendPoint]:
    """Daily totals of a budget's matching expenses for its details chart.

    Only days with spending are kept, chronologically, and of those the
    last ``days``.  An empty list means nothing was spent in the window.
    """
    matched = budget_transactions(budget, transactions, now)
    if not matched:
        return []
    frame = transactions_frame(matched)
    window = DateRange(frame["date"].min().date(), frame["date"].max().date(), Granularity.DAILY)
    points = [p for p in _trend(frame, window, Granularity.DAILY) if p.count]
    return points[-days:] if days > 0 else []


def _directional_totals(frame: pd.DataFrame) -> PeriodTotals:
    signed = frame["signed_amount"]
    return PeriodTotals(income=float(signed[signed > 0].sum()), expenses=float(-signed[signed < 0].sum()))


def historical_summary(transactions: Iterable, viewpoint: Optional[str], now: Any) -> HistoricalSummary:
    """Inflow and outflow totals since one month ago, three months ago and ever.

    Transfers count as income or expense according to the viewpoint.
    Windows are open-ended: anything dated on or after the start counts.
    """
    today = to_date(now, "now")
    frame = transactions_frame(transactions, viewpoint)

    def since(months: int) -> PeriodTotals:
        start = pd.Timestamp(today) - pd.DateOffset(months=months)
        return _directional_totals(frame[frame["date"] >= start])

    return HistoricalSummary(last_month=since(1), last_3_months=since(3), all_time=_directional_totals(frame))


def monthly_summary(transactions: Iterable, viewpoint: Optional[str], now: Any) -> Overview:
    """:func:`overview` for the calendar month containing ``now``."""
    today = to_date(now, "now")
    month = DateRange(today.replace(day=1), today, Granularity.DAILY)
    return overview(transactions, month, viewpoint)


def current_balance(transactions: Iterable, viewpoint: Optional[str]) -> float:
    """All-time balance: the sum of every signed amount."""
    frame = transactions_frame(transactions, viewpoint)
    return float(frame["signed_amount"].sum())

