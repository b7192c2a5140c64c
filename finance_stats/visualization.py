"""Plotly figures built from the view-models in :mod:`finance_stats.views`.

Each function takes an already-composed view-model and returns a
``plotly.graph_objects.Figure``; no statistics are computed here.  An empty
input produces an empty figure titled "No data to display" so callers never
need to special-case missing data.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .budgets import BudgetEvaluation
from .views import ChartSeries, PieSlice

OVER_BUDGET_COLOR = "#EF4444"
NEAR_LIMIT_COLOR = "#F59E0B"
ON_TRACK_COLOR = "#10B981"


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_trend_chart(series: ChartSeries, title: str | None = None, chart_type: str = "line") -> go.Figure:
    """Render a trend series as a line or bar chart.

    Parameters
    ----------
    series : ChartSeries
        Output of :func:`finance_stats.views.trend_chart`.
    title : str, optional
        Chart title.
    chart_type : {"line", "bar"}
        Kind of trace to draw.

    Returns
    -------
    plotly.graph_objects.Figure
        One point per period, x-axis labelled with the period keys.
    """
    if not series.periods:
        return _empty_figure()
    df = pd.DataFrame({"Period": series.periods, "Amount": series.values})
    plot = px.bar if chart_type == "bar" else px.line
    fig = plot(df, x="Period", y="Amount")
    fig.update_xaxes(tickmode="array", tickvals=series.periods, ticktext=series.labels)
    fig.update_layout(title=title or "Trend", xaxis_title="Period", yaxis_title="Amount")
    return fig


def create_category_pie(slices: Sequence[PieSlice], title: str | None = None) -> go.Figure:
    """Pie chart whose slice colours come from the view-model, not plotly's cycle.

    Parameters
    ----------
    slices : sequence of PieSlice
        Output of :func:`finance_stats.views.pie_slices`.
    title : str, optional
        Chart title.
    """
    if not slices:
        return _empty_figure()
    fig = go.Figure(
        go.Pie(
            labels=[s.name for s in slices],
            values=[s.amount for s in slices],
            marker={"colors": [s.color for s in slices]},
            sort=False,
        )
    )
    fig.update_layout(title=title or "Category breakdown")
    return fig


def create_budget_utilization_chart(
    evaluations: Sequence[BudgetEvaluation], title: str | None = None
) -> go.Figure:
    """Horizontal bars of budget utilization, coloured by status.

    Bars at or past 100% are red, budgets that tripped their notification
    threshold amber, the rest green.
    """
    if not evaluations:
        return _empty_figure()
    df = pd.DataFrame({
        "Budget": [ev.title for ev in evaluations],
        "Utilization": [ev.utilization for ev in evaluations],
        "Over": [ev.is_over_budget for ev in evaluations],
        "Notify": [ev.should_notify for ev in evaluations],
    })
    colors = np.where(df["Over"], OVER_BUDGET_COLOR, np.where(df["Notify"], NEAR_LIMIT_COLOR, ON_TRACK_COLOR))
    fig = go.Figure(go.Bar(x=df["Utilization"], y=df["Budget"], orientation="h", marker={"color": colors.tolist()}))
    fig.add_vline(x=100, line_dash="dash")
    fig.update_layout(title=title or "Budget utilization", xaxis_title="Utilization (%)", yaxis_title="Budget")
    return fig
