"""Plotly visualisation helpers for the expense tracker.

Each function accepts one of the DataFrames produced by
:mod:`report_analytics` or :mod:`budget_tracking` and returns a
``plotly.graph_objects.Figure`` that Streamlit renders via
``st.plotly_chart``. Empty input yields an empty figure titled
"No data to display".
"""

from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

try:
    from .budget_tracking import STATUS_EXCEEDED, STATUS_WARNING
except ImportError:
    from budget_tracking import STATUS_EXCEEDED, STATUS_WARNING

STATUS_COLORS = {
    STATUS_EXCEEDED: '#EF4444',
    STATUS_WARNING: '#EAB308',
}
GOOD_COLOR = '#10B981'


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_monthly_chart(monthly: pd.DataFrame, title: Optional[str] = None) -> go.Figure:
    """Grouped bars of monthly expenses against the per-month budget.

    Parameters
    ----------
    monthly : pandas.DataFrame
        Output of ``ReportAnalytics.monthly_totals`` with ``Label``,
        ``Expenses`` and ``Budget`` columns.
    title : str, optional
        Chart title.
    """
    if monthly.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(name='Expenses', x=monthly['Label'], y=monthly['Expenses'], marker_color='#3B82F6'))
    fig.add_trace(go.Bar(name='Budget', x=monthly['Label'], y=monthly['Budget'], marker_color='#10B981'))
    fig.update_layout(
        title=title or "Monthly expenses vs budget",
        barmode='group',
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig


def create_category_pie_chart(by_category: pd.DataFrame, title: Optional[str] = None) -> go.Figure:
    """Pie chart of category shares, drawn in each category's own color."""
    if by_category.empty or by_category['Amount'].sum() <= 0:
        return _empty_figure()
    color_map = dict(zip(by_category['Category'], by_category['Color']))
    fig = px.pie(
        by_category,
        names='Category',
        values='Amount',
        color='Category',
        color_discrete_map=color_map,
    )
    fig.update_traces(textposition='inside', textinfo='percent+label')
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_daily_trend_chart(trend: pd.DataFrame, title: Optional[str] = None) -> go.Figure:
    """Line chart of daily spending."""
    if trend.empty:
        return _empty_figure()
    fig = px.line(trend, x='Date', y='Amount', markers=True)
    fig.update_layout(
        title=title or "Daily spending trend",
        xaxis_title="Date",
        yaxis_title="Amount",
    )
    return fig


def create_budget_progress_chart(progress: pd.DataFrame, title: Optional[str] = None) -> go.Figure:
    """Horizontal bars of spent vs budget amount, colored by status."""
    if progress.empty:
        return _empty_figure()
    colors = [STATUS_COLORS.get(status, GOOD_COLOR) for status in progress['status']]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        name='Budget',
        y=progress['name'],
        x=progress['amount'],
        orientation='h',
        marker_color='#E5E7EB',
    ))
    fig.add_trace(go.Bar(
        name='Spent',
        y=progress['name'],
        x=progress['spent'],
        orientation='h',
        marker_color=colors,
    ))
    fig.update_layout(
        title=title or "Budget progress",
        barmode='overlay',
        xaxis_title="Amount",
    )
    return fig
