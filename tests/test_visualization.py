from datetime import date

import plotly.graph_objects as go

from finance_stats.aggregation import TrendPoint
from finance_stats.budgets import evaluate_all
from finance_stats.models import Budget
from finance_stats.views import ChartSeries, PieSlice, trend_chart
from finance_stats.visualization import (
    NEAR_LIMIT_COLOR,
    ON_TRACK_COLOR,
    OVER_BUDGET_COLOR,
    create_budget_utilization_chart,
    create_category_pie,
    create_trend_chart,
)


def test_trend_chart_plots_one_point_per_period():
    series = trend_chart([TrendPoint('2024-01', 10.0, 1), TrendPoint('2024-02', 0.0, 0)])
    fig = create_trend_chart(series, title='Spending')
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 1
    assert list(fig.data[0].y) == [10.0, 0.0]
    assert fig.layout.title.text == 'Spending'


def test_trend_chart_bar_variant():
    series = ChartSeries(labels=['Jan'], values=[5.0], periods=['2024-01'])
    fig = create_trend_chart(series, chart_type='bar')
    assert fig.data[0].type == 'bar'


def test_empty_inputs_give_placeholder_figures():
    assert create_trend_chart(trend_chart([])).layout.title.text == 'No data to display'
    assert create_category_pie([]).layout.title.text == 'No data to display'
    assert create_budget_utilization_chart([]).layout.title.text == 'No data to display'


def test_pie_uses_view_model_colours():
    slices = [PieSlice('Food', 60.0, '#E8C966', 60), PieSlice('Rent', 40.0, '#668888', 40)]
    fig = create_category_pie(slices)
    assert list(fig.data[0].labels) == ['Food', 'Rent']
    assert list(fig.data[0].marker.colors) == ['#E8C966', '#668888']


def test_budget_chart_colours_by_status():
    budgets = [
        Budget(name, name, name, 100, date(2024, 1, 1), date(2024, 12, 31),
               notifications_enabled=True, notifications_threshold=80)
        for name in ('Food', 'Fun', 'Rent')
    ]
    txs = [
        {'type': 'expense', 'amount': 150, 'category': 'Food', 'date': '2024-01-02'},
        {'type': 'expense', 'amount': 90, 'category': 'Fun', 'date': '2024-01-02'},
        {'type': 'expense', 'amount': 5, 'category': 'Rent', 'date': '2024-01-02'},
    ]
    fig = create_budget_utilization_chart(evaluate_all(budgets, txs, date(2024, 1, 15)))
    assert list(fig.data[0].marker.color) == [OVER_BUDGET_COLOR, NEAR_LIMIT_COLOR, ON_TRACK_COLOR]
    assert list(fig.data[0].x) == [150.0, 90.0, 5.0]
