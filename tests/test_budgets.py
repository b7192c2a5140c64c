from datetime import date

import pytest

from finance_stats.budgets import (
    budget_stats,
    budget_transactions,
    evaluate,
    evaluate_all,
    expired_one_time,
    is_expired,
    notification_alerts,
    period_start,
    refresh_budget,
    utilization,
)
from finance_stats.models import Budget

NOW = date(2024, 1, 15)


def food_budget(**overrides):
    payload = {
        'id': 'b1',
        'title': 'Groceries',
        'category': 'Food',
        'amount': 200,
        'startDate': '2023-06-01',
        'endDate': '2024-01-25',
        'recurringFrequency': 'monthly',
    }
    payload.update(overrides)
    return Budget.from_dict(payload)


def sample_transactions():
    return [
        {'type': 'expense', 'amount': 100, 'category': 'Food', 'date': '2024-01-05'},
        {'type': 'income', 'amount': 500, 'date': '2024-01-10'},
    ]


def test_monthly_budget_concrete_scenario():
    evaluation = evaluate(food_budget(), sample_transactions(), NOW)
    assert evaluation.spent == 100
    assert evaluation.remaining == 100
    assert evaluation.utilization == 50
    assert not evaluation.is_over_budget
    assert evaluation.period_start == date(2024, 1, 1)


def test_stored_spent_is_never_trusted():
    stale = food_budget(spent=999, remaining=-799)
    assert evaluate(stale, sample_transactions(), NOW).spent == 100


def test_window_depends_on_frequency():
    assert period_start(food_budget(), NOW) == date(2024, 1, 1)
    assert period_start(food_budget(recurringFrequency='weekly'), NOW) == date(2024, 1, 8)
    assert period_start(food_budget(recurringFrequency='daily'), NOW) == date(2023, 6, 1)


def test_weekly_window_starts_seven_days_back():
    txs = [
        {'type': 'expense', 'amount': 30, 'category': 'Food', 'date': '2024-01-07'},
        {'type': 'expense', 'amount': 20, 'category': 'Food', 'date': '2024-01-08'},
    ]
    assert evaluate(food_budget(recurringFrequency='weekly'), txs, NOW).spent == 20


def test_only_matching_expenses_count():
    txs = sample_transactions() + [
        {'type': 'expense', 'amount': 40, 'category': 'Travel', 'date': '2024-01-06'},
        {'type': 'income', 'amount': 40, 'category': 'Food', 'date': '2024-01-06'},
        {'type': 'expense', 'amount': 40, 'category': 'Food', 'date': '2023-12-30'},
    ]
    assert evaluate(food_budget(), txs, NOW).spent == 100


def test_one_time_budget_is_capped_at_end_date_and_expires():
    budget = food_budget(startDate='2024-01-01', endDate='2024-01-10', recurringFrequency=None)
    txs = sample_transactions() + [{'type': 'expense', 'amount': 70, 'category': 'Food', 'date': '2024-01-12'}]
    evaluation = evaluate(budget, txs, NOW)
    assert evaluation.spent == 100
    assert evaluation.is_expired
    assert is_expired(budget, NOW)
    assert expired_one_time([budget, food_budget()], NOW) == [budget]


def test_one_time_budget_ignores_attached_frequency():
    budget = food_budget(startDate='2023-12-20', endDate='2024-01-25', isRecurring=False)
    txs = [{'type': 'expense', 'amount': 80, 'category': 'Food', 'date': '2023-12-22'}]
    assert period_start(budget, NOW) == date(2023, 12, 20)
    evaluation = evaluate(budget, txs, NOW)
    assert evaluation.spent == 80
    assert evaluation.remaining == 120


def test_recurring_budgets_never_expire():
    assert not is_expired(food_budget(endDate='2023-12-01'), NOW)


def test_utilization_is_scale_invariant():
    assert utilization(100, 200) == utilization(200, 400) == 50
    doubled = sample_transactions() * 2
    assert evaluate(food_budget(amount=400), doubled, NOW).utilization == 50


def test_zero_amount_budget_has_zero_utilization():
    assert utilization(50, 0) == 0
    assert evaluate(food_budget(amount=0), sample_transactions(), NOW).utilization == 0


def test_overspending_goes_negative_and_passes_100():
    txs = [{'type': 'expense', 'amount': 250, 'category': 'Food', 'date': '2024-01-05'}]
    evaluation = evaluate(food_budget(), txs, NOW)
    assert evaluation.is_over_budget
    assert evaluation.remaining == -50
    assert evaluation.utilization == 125


def test_spending_exactly_the_amount_is_over_budget():
    txs = [{'type': 'expense', 'amount': 200, 'category': 'Food', 'date': '2024-01-05'}]
    assert evaluate(food_budget(), txs, NOW).is_over_budget


def test_notification_threshold():
    txs = [{'type': 'expense', 'amount': 170, 'category': 'Food', 'date': '2024-01-05'}]
    noisy = food_budget(id='b1', notificationsEnabled=True, notificationsThreshold=80)
    quiet = food_budget(id='b2', notificationsEnabled=False, notificationsThreshold=80)
    high = food_budget(id='b3', notificationsEnabled=True, notificationsThreshold=90)
    evaluations = evaluate_all([noisy, quiet, high], txs, NOW)
    assert [ev.should_notify for ev in evaluations] == [True, False, False]
    assert [ev.budget_id for ev in notification_alerts(evaluations)] == ['b1']


def test_days_left_and_daily_allowance():
    evaluation = evaluate(food_budget(), sample_transactions(), NOW)
    assert evaluation.days_left == 10
    assert evaluation.daily_allowance == pytest.approx(10)


def test_refresh_budget_returns_new_record():
    stale = food_budget(spent=0, remaining=200)
    fresh = refresh_budget(stale, sample_transactions(), NOW)
    assert (fresh.spent, fresh.remaining) == (100, 100)
    assert (stale.spent, stale.remaining) == (0, 200)
    assert fresh.id == stale.id


def test_budget_stats_totals():
    txs = sample_transactions() + [{'type': 'expense', 'amount': 60, 'category': 'Fun', 'date': '2024-01-06'}]
    fun = food_budget(id='b2', title='Fun', category='Fun', amount=50)
    stats = budget_stats([food_budget(), fun], txs, NOW)
    assert stats.total_budget == 250
    assert stats.total_spent == 160
    assert stats.remaining_budget == 90
    assert stats.budget_utilization == pytest.approx(64)
    assert stats.over_budget_count == 1
    assert stats.under_budget_count == 1
    assert stats.expired_one_time_budgets == []


def test_budget_transactions_are_the_counted_expenses_newest_first():
    txs = [
        {'id': 'a', 'type': 'expense', 'amount': 10, 'category': 'Food', 'date': '2024-01-03'},
        {'id': 'b', 'type': 'expense', 'amount': 20, 'category': 'Food', 'date': '2024-01-09'},
        {'id': 'c', 'type': 'expense', 'amount': 30, 'category': 'Food', 'date': '2024-01-09'},
        {'id': 'd', 'type': 'expense', 'amount': 40, 'category': 'Travel', 'date': '2024-01-10'},
        {'id': 'e', 'type': 'expense', 'amount': 50, 'category': 'Food', 'date': '2023-12-31'},
        {'id': 'f', 'type': 'income', 'amount': 60, 'category': 'Food', 'date': '2024-01-11'},
    ]
    matched = budget_transactions(food_budget(), txs, NOW)
    assert [t.id for t in matched] == ['b', 'c', 'a']
    assert sum(t.amount for t in matched) == evaluate(food_budget(), txs, NOW).spent


def test_budget_transactions_empty_without_spending():
    assert budget_transactions(food_budget(), [], NOW) == []
