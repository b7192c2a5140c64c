from datetime import date

import pytest

from finance_stats.aggregation import (
    average_per_period,
    budget_daily_spending,
    category_rollup,
    current_balance,
    deposit_stats,
    expense_stats,
    historical_summary,
    income_stats,
    merchant_rollup,
    monthly_summary,
    overview,
    savings_trend,
    transfer_stats,
    trend,
)
from finance_stats.models import Budget
from finance_stats.periods import custom_range, resolve_range

NOW = date(2024, 1, 15)


def sample_transactions():
    return [
        {'id': 't1', 'type': 'expense', 'amount': 100, 'category': 'Food', 'date': '2024-01-05'},
        {'id': 't2', 'type': 'income', 'amount': 500, 'date': '2024-01-10'},
    ]


def month_of_spending():
    return [
        {'id': 'e1', 'type': 'expense', 'amount': 40, 'category': 'Food', 'merchant': 'Grocer', 'date': '2024-01-02'},
        {'id': 'e2', 'type': 'expense', 'amount': 60, 'category': 'Food', 'merchant': 'Grocer', 'date': '2024-01-09'},
        {'id': 'e3', 'type': 'expense', 'amount': 25, 'category': 'Transport', 'merchant': 'Metro', 'date': '2024-01-09'},
        {'id': 'e4', 'type': 'expense', 'amount': 75, 'date': '2024-01-12'},
        {'id': 'i1', 'type': 'income', 'amount': 900, 'date': '2024-01-01'},
        {'id': 'd1', 'type': 'deposit', 'amount': 50, 'date': '2024-01-03'},
        {'id': 'x1', 'type': 'expense', 'amount': 999, 'category': 'Food', 'date': '2023-12-31'},
    ]


def test_overview_concrete_scenario():
    summary = overview(sample_transactions(), resolve_range('this_month', NOW), 'Alice')
    assert summary.total_income == 500
    assert summary.total_expenses == 100
    assert summary.total_deposits == 0
    assert summary.balance == 400
    assert summary.net_cash_flow == 400
    assert summary.total_transactions == 2


def test_category_rollup_concrete_scenario():
    rollups = category_rollup(sample_transactions(), resolve_range('this_month', NOW))
    assert len(rollups) == 1
    food = rollups[0]
    assert food.category == 'Food'
    assert food.total_spent == 100
    assert food.total_transactions == 1
    assert food.percentage_of_total == 100


def test_overview_applies_transfer_direction():
    txs = sample_transactions() + [
        {'id': 'tr1', 'type': 'transfer', 'amount': 50, 'sender': 'Alice', 'receiver': 'Bob', 'date': '2024-01-11'},
        {'id': 'tr2', 'type': 'transfer', 'amount': 30, 'sender': 'Carol', 'receiver': 'Bob', 'date': '2024-01-11'},
    ]
    summary = overview(txs, resolve_range('this_month', NOW), 'alice')
    assert summary.balance == 350
    assert summary.total_transactions == 4


def test_range_filter_is_inclusive_at_both_ends():
    txs = [
        {'type': 'income', 'amount': 1, 'date': '2024-01-01'},
        {'type': 'income', 'amount': 2, 'date': '2024-01-15'},
        {'type': 'income', 'amount': 4, 'date': '2024-01-16'},
    ]
    assert overview(txs, custom_range('2024-01-01', '2024-01-15')).total_income == 3


def test_empty_input_gives_zero_totals():
    summary = overview([], resolve_range('this_month', NOW))
    assert summary.total_transactions == 0
    assert summary.balance == 0
    assert category_rollup([]) == []
    assert merchant_rollup([]) == []


@pytest.mark.parametrize('kind', ['expense', 'income'])
def test_trend_sums_to_range_total(kind):
    window = resolve_range('this_month', NOW)
    points = trend(month_of_spending(), window, transaction_type=kind)
    summary = overview(month_of_spending(), window)
    expected = summary.total_expenses if kind == 'expense' else summary.total_income
    assert sum(p.amount for p in points) == pytest.approx(expected)


def test_trend_over_empty_days_is_zero_filled():
    points = trend([], custom_range(date(2024, 1, 1), date(2024, 1, 3)))
    assert [p.period for p in points] == ['2024-01-01', '2024-01-02', '2024-01-03']
    assert all(p.amount == 0 and p.count == 0 for p in points)


def test_trend_fills_gaps_between_transactions():
    txs = [
        {'type': 'expense', 'amount': 10, 'date': '2024-01-01'},
        {'type': 'expense', 'amount': 5, 'date': '2024-01-03'},
        {'type': 'expense', 'amount': 7, 'date': '2024-01-03'},
    ]
    points = trend(txs, custom_range(date(2024, 1, 1), date(2024, 1, 3)))
    assert [(p.amount, p.count) for p in points] == [(10, 1), (0, 0), (12, 2)]


def test_trend_uses_monthly_buckets_for_long_ranges():
    txs = [
        {'type': 'expense', 'amount': 10, 'date': '2024-01-20'},
        {'type': 'expense', 'amount': 30, 'date': '2024-03-02'},
    ]
    points = trend(txs, resolve_range('this_year', date(2024, 3, 15)))
    assert [(p.period, p.amount) for p in points] == [('2024-01', 10), ('2024-02', 0), ('2024-03', 30)]


def test_category_percentages_sum_to_about_100():
    txs = [
        {'type': 'expense', 'amount': 1, 'category': 'A', 'date': '2024-01-02'},
        {'type': 'expense', 'amount': 1, 'category': 'B', 'date': '2024-01-02'},
        {'type': 'expense', 'amount': 1, 'category': 'C', 'date': '2024-01-02'},
    ]
    rollups = category_rollup(txs)
    assert abs(sum(r.percentage_of_total for r in rollups) - 100) <= 1


def test_category_ties_break_by_name():
    txs = [
        {'type': 'expense', 'amount': 20, 'category': 'Zeta', 'date': '2024-01-02'},
        {'type': 'expense', 'amount': 20, 'category': 'Alpha', 'date': '2024-01-03'},
        {'type': 'expense', 'amount': 50, 'category': 'Mid', 'date': '2024-01-04'},
    ]
    assert [r.category for r in category_rollup(txs)] == ['Mid', 'Alpha', 'Zeta']


def test_category_rollup_groups_missing_categories_and_limits_top():
    window = resolve_range('this_month', NOW)
    rollups = category_rollup(month_of_spending(), window, top_n=1)
    by_name = {r.category: r for r in rollups}
    assert by_name['Uncategorized'].total_spent == 75
    food = by_name['Food']
    assert food.total_spent == 100
    assert food.average_transaction_amount == 50
    assert [t.id for t in food.top_transactions] == ['e2']


def test_merchant_rollup_shares_are_of_all_expenses():
    rollups = merchant_rollup(month_of_spending(), resolve_range('this_month', NOW))
    assert [r.merchant for r in rollups] == ['Grocer', 'Metro']
    # 100 of 200 total expenses, including the one without a merchant
    assert rollups[0].percentage_of_total == 50


def test_average_per_period_divides_by_bucket_count():
    window = custom_range(date(2024, 1, 1), date(2024, 1, 3))
    assert average_per_period(300, window) == 100
    assert average_per_period(300, window, 'monthly') == 300


def test_expense_stats():
    stats = expense_stats(month_of_spending(), resolve_range('this_month', NOW), top_n=2)
    assert stats.total_expenses == 200
    assert stats.highest_expense == 75
    assert stats.lowest_expense == 25
    assert stats.average_expense == 50
    assert [t.id for t in stats.top_expenses] == ['e4', 'e2']
    assert [t.id for t in stats.uncategorized_expenses] == ['e4']
    assert len(stats.trend) == 15
    assert stats.average_per_period == pytest.approx(200 / 15)


def test_expense_stats_on_empty_range():
    stats = expense_stats([], custom_range(date(2024, 1, 1), date(2024, 1, 3)))
    assert stats.highest_expense == 0
    assert stats.lowest_expense == 0
    assert stats.top_categories == []
    assert len(stats.trend) == 3


def test_income_and_deposit_stats():
    window = resolve_range('this_month', NOW)
    income = income_stats(month_of_spending(), window)
    assert income.total_income == 900
    assert income.highest_income == income.lowest_income == 900
    deposits = deposit_stats(month_of_spending(), window)
    assert deposits.total_deposits == 50
    assert deposits.average_deposit == 50


def test_transfer_stats_split_by_viewpoint():
    txs = [
        {'type': 'transfer', 'amount': 50, 'sender': 'Alice', 'receiver': 'Bob', 'date': '2024-01-02'},
        {'type': 'transfer', 'amount': 80, 'sender': 'Bob', 'receiver': 'Alice', 'date': '2024-01-03'},
        {'type': 'transfer', 'amount': 20, 'sender': 'Carol', 'receiver': 'Bob', 'date': '2024-01-03'},
    ]
    stats = transfer_stats(txs, custom_range(date(2024, 1, 1), date(2024, 1, 3)), 'alice')
    assert stats.total_transfers == 150
    assert stats.transfer_count == 3
    assert stats.total_sent == 50
    assert stats.total_received == 80
    assert stats.net_flow == 30
    assert [(p.sent, p.received, p.net) for p in stats.trend] == [(0, 0, 0), (50, 0, -50), (0, 80, 80)]
    assert stats.top_transfers[0].amount == 80


def test_savings_trend_nets_income_against_expenses():
    points = savings_trend(sample_transactions(), custom_range(date(2024, 1, 1), date(2024, 1, 15)))
    assert sum(p.amount for p in points) == 400
    by_period = {p.period: p.amount for p in points}
    assert by_period['2024-01-05'] == -100
    assert by_period['2024-01-10'] == 500


def test_historical_summary_windows():
    txs = [
        {'type': 'income', 'amount': 1000, 'date': '2024-04-01'},
        {'type': 'expense', 'amount': 200, 'date': '2024-02-01'},
        {'type': 'income', 'amount': 300, 'date': '2023-12-01'},
        {'type': 'transfer', 'amount': 40, 'sender': 'Alice', 'receiver': 'Bob', 'date': '2024-04-10'},
    ]
    summary = historical_summary(txs, 'Alice', date(2024, 4, 15))
    assert (summary.last_month.income, summary.last_month.expenses) == (1000, 40)
    assert (summary.last_3_months.income, summary.last_3_months.expenses) == (1000, 240)
    assert (summary.all_time.income, summary.all_time.expenses) == (1300, 240)


def test_monthly_summary_and_current_balance():
    txs = sample_transactions() + [{'type': 'income', 'amount': 70, 'date': '2023-11-01'}]
    assert monthly_summary(txs, 'Alice', NOW).balance == 400
    assert current_balance(txs, 'Alice') == 470


def groceries_budget():
    return Budget.from_dict({
        'id': 'b1', 'title': 'Groceries', 'category': 'Food', 'amount': 300,
        'startDate': '2023-06-01', 'endDate': '2024-12-31', 'recurringFrequency': 'monthly',
    })


def test_budget_daily_spending_keeps_last_days_with_spending():
    days = [1, 2, 3, 5, 5, 8, 9, 11, 12]
    txs = [
        {'id': f'f{n}', 'type': 'expense', 'amount': 10, 'category': 'Food', 'date': f'2024-01-{day:02d}'}
        for n, day in enumerate(days)
    ] + [
        {'id': 'skip1', 'type': 'expense', 'amount': 99, 'category': 'Travel', 'date': '2024-01-04'},
        {'id': 'skip2', 'type': 'expense', 'amount': 99, 'category': 'Food', 'date': '2023-12-31'},
    ]
    points = budget_daily_spending(groceries_budget(), txs, NOW)
    assert [p.period for p in points] == [
        '2024-01-02', '2024-01-03', '2024-01-05', '2024-01-08', '2024-01-09', '2024-01-11', '2024-01-12',
    ]
    assert points[2].amount == 20
    assert points[2].count == 2
    assert len(budget_daily_spending(groceries_budget(), txs, NOW, days=3)) == 3


def test_budget_daily_spending_empty_without_spending():
    assert budget_daily_spending(groceries_budget(), sample_transactions()[1:], NOW) == []
