"""Report aggregation for the Reports and Dashboard views.

This module turns a list of expenses into the four views consumed by the
report charts: per-month totals, a per-category breakdown, a zero-filled
daily trend and the headline totals (average daily spend, savings rate).

Everything here is a pure transformation. The selected time range, custom
month and reference date are explicit parameters so that the same inputs
always produce the same report.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

try:
    from .config import (
        REMAINDER_CATEGORY_NAME,
        TIME_RANGES,
        TOP_CATEGORY_COUNT,
        TRAILING_TREND_DAYS,
        UNCATEGORIZED_COLOR,
        UNCATEGORIZED_NAME,
    )
    from .models import Budget, Expense
    from .periods import Window, month_window, parse_month_key, shift_month
except ImportError:
    from config import (
        REMAINDER_CATEGORY_NAME,
        TIME_RANGES,
        TOP_CATEGORY_COUNT,
        TRAILING_TREND_DAYS,
        UNCATEGORIZED_COLOR,
        UNCATEGORIZED_NAME,
    )
    from models import Budget, Expense
    from periods import Window, month_window, parse_month_key, shift_month

TRAILING_MONTHS = {'3months': 3, '6months': 6, '12months': 12}

MONTHLY_COLUMNS = ['Month', 'Label', 'Expenses', 'Budget']
CATEGORY_COLUMNS = ['Category', 'Amount', 'Color', 'Percentage']
TREND_COLUMNS = ['Date', 'Label', 'Amount']

UNCATEGORIZED_KEY = 'uncategorized'


@dataclass(frozen=True)
class ReportRange:
    """A resolved report time range."""

    key: str
    window: Window
    trend_window: Window
    month_count: int = 1

    @property
    def single_month(self) -> bool:
        return self.window.is_single_month()

    @property
    def label(self) -> str:
        if self.key == 'custom_month':
            return self.window.start.strftime('%B %Y')
        return TIME_RANGES.get(self.key, self.key)


def resolve_time_range(
    time_range: str,
    today: Optional[date] = None,
    custom_month: Optional[str] = None,
) -> ReportRange:
    """Resolve a time range key into its report and trend windows.

    Single-month ranges use the month itself for the daily trend; trailing
    ranges start on the first day of the month N months back, end today and
    use a fixed trailing window for the trend. ``month_count`` is 1 for a
    single month and N for a trailing range.

    Raises:
        ValueError: Unknown range key, or a missing/invalid custom month.
    """
    today = today or date.today()

    if time_range == 'this_month':
        window = month_window(today.year, today.month)
        return ReportRange(time_range, window, window)

    if time_range == 'last_month':
        window = month_window(*shift_month(today.year, today.month, -1))
        return ReportRange(time_range, window, window)

    if time_range == 'custom_month':
        if not custom_month:
            raise ValueError("A custom month (YYYY-MM) is required for the custom_month range")
        window = month_window(*parse_month_key(custom_month))
        return ReportRange(time_range, window, window)

    if time_range in TRAILING_MONTHS:
        year, month = shift_month(today.year, today.month, -TRAILING_MONTHS[time_range])
        window = Window(date(year, month, 1), today)
        months = TRAILING_MONTHS[time_range]
        trend = Window(today - timedelta(days=TRAILING_TREND_DAYS - 1), today)
        return ReportRange(time_range, window, trend, month_count=months)

    raise ValueError(f"Unknown time range '{time_range}'")


def budget_total_for_window(budgets: Iterable[Budget], window: Window) -> float:
    """Sum budgets whose declared start or end date falls inside the window."""
    total = 0.0
    for budget in budgets:
        if window.contains(budget.start_date) or window.contains(budget.end_date):
            total += budget.amount
    return float(total)


class ReportAnalytics:
    """Aggregations over a set of expenses."""

    def __init__(self, expenses: Sequence[Expense]):
        rows = [
            {
                'Date': expense.expense_date,
                'Amount': expense.amount,
                'Key': f"category:{expense.category.name}" if expense.category else UNCATEGORIZED_KEY,
                'Category': expense.category.name if expense.category else UNCATEGORIZED_NAME,
                'Color': expense.category.color if expense.category else UNCATEGORIZED_COLOR,
            }
            for expense in expenses
            if expense.expense_date is not None
        ]
        self.data = pd.DataFrame(rows, columns=['Date', 'Amount', 'Key', 'Category', 'Color'])
        self._prepare_data()

    def _prepare_data(self) -> None:
        self.data['Date'] = pd.to_datetime(self.data['Date'])
        self.data['Amount'] = pd.to_numeric(self.data['Amount'], errors='coerce').fillna(0.0).astype(float)
        self.data['Month'] = self.data['Date'].dt.strftime('%Y-%m')

    def _filter_by_window(self, window: Window) -> pd.DataFrame:
        start = pd.Timestamp(window.start)
        end = pd.Timestamp(window.end)
        mask = (self.data['Date'] >= start) & (self.data['Date'] <= end)
        return self.data[mask]

    def total(self, window: Window) -> float:
        return float(self._filter_by_window(window)['Amount'].sum())

    def monthly_totals(self, window: Window, monthly_budget: float = 0.0) -> pd.DataFrame:
        """Sum expenses per ``YYYY-MM`` key, in chronological order."""
        scoped = self._filter_by_window(window)
        if scoped.empty:
            return pd.DataFrame(columns=MONTHLY_COLUMNS)

        grouped = scoped.groupby('Month')['Amount'].sum().sort_index().reset_index()
        grouped = grouped.rename(columns={'Amount': 'Expenses'})
        grouped['Label'] = pd.to_datetime(grouped['Month'] + '-01').dt.strftime('%b %y')
        grouped['Budget'] = float(monthly_budget)
        return grouped[MONTHLY_COLUMNS]

    def category_breakdown(
        self,
        window: Window,
        top_n: Optional[int] = TOP_CATEGORY_COUNT,
        include_other: bool = False,
    ) -> pd.DataFrame:
        """Per-category totals with their share of the window total.

        Rows are sorted by amount (descending) and cut to ``top_n``. By
        default the categories past the cut are dropped; with
        ``include_other`` they are merged into one remainder row.
        """
        scoped = self._filter_by_window(window)
        if scoped.empty:
            return pd.DataFrame(columns=CATEGORY_COLUMNS)

        grand_total = float(scoped['Amount'].sum())
        # Expenses without a category never share a row with a category
        # that happens to be named like the fallback bucket
        grouped = (
            scoped.groupby('Key')
            .agg(Amount=('Amount', 'sum'), Category=('Category', 'first'), Color=('Color', 'first'))
            .reset_index()
            .sort_values(['Amount', 'Category', 'Key'], ascending=[False, True, True])
        )

        if top_n is not None and len(grouped) > top_n:
            remainder = grouped.iloc[top_n:]
            grouped = grouped.head(top_n)
            if include_other:
                grouped = pd.concat([
                    grouped,
                    pd.DataFrame([{
                        'Category': REMAINDER_CATEGORY_NAME,
                        'Amount': float(remainder['Amount'].sum()),
                        'Color': UNCATEGORIZED_COLOR,
                    }]),
                ], ignore_index=True)

        grouped['Percentage'] = np.where(
            grand_total > 0, grouped['Amount'] / (grand_total or 1.0) * 100, 0.0
        )
        return grouped[CATEGORY_COLUMNS].reset_index(drop=True)

    def daily_trend(self, window: Window) -> pd.DataFrame:
        """One row per calendar day of the window, zero-filled."""
        if window.days == 0:
            return pd.DataFrame(columns=TREND_COLUMNS)

        days = pd.date_range(window.start, window.end, freq='D')
        scoped = self._filter_by_window(window)
        daily = scoped.groupby(scoped['Date'].dt.normalize())['Amount'].sum()
        daily = daily.reindex(days, fill_value=0.0)

        trend = pd.DataFrame({
            'Date': [day.date() for day in days],
            'Label': days.strftime('%b %d'),
            'Amount': daily.values.astype(float),
        })
        return trend[TREND_COLUMNS]

    def totals(self, window: Window, total_budget: float = 0.0) -> Dict[str, float]:
        total_expenses = self.total(window)
        days_in_range = window.days
        average_daily = total_expenses / days_in_range if days_in_range > 0 else 0.0
        savings_rate = (
            (total_budget - total_expenses) / total_budget * 100 if total_budget > 0 else 0.0
        )
        return {
            'total_expenses': total_expenses,
            'average_daily': average_daily,
            'total_budget': float(total_budget),
            'savings_rate': savings_rate,
            'days_in_range': days_in_range,
        }


def aggregate(
    expenses: Sequence[Expense],
    window: Window,
    *,
    budgets: Sequence[Budget] = (),
    trend_window: Optional[Window] = None,
    top_n: Optional[int] = TOP_CATEGORY_COUNT,
    include_other: bool = False,
    month_count: Optional[int] = None,
) -> Dict[str, Any]:
    """Build every report view for one window.

    Returns a dict with ``monthly``, ``by_category`` and ``daily_trend``
    DataFrames and a ``totals`` dict. The budget total is spread evenly over
    ``month_count`` months on the monthly rows; without it, over the
    calendar months the window touches.
    """
    analytics = ReportAnalytics(expenses)
    total_budget = budget_total_for_window(budgets, window)
    if month_count is None:
        month_count = len(window.month_keys())
    monthly_budget = total_budget / month_count if month_count > 0 else 0.0

    return {
        'monthly': analytics.monthly_totals(window, monthly_budget=monthly_budget),
        'by_category': analytics.category_breakdown(window, top_n=top_n, include_other=include_other),
        'daily_trend': analytics.daily_trend(trend_window or window),
        'totals': analytics.totals(window, total_budget=total_budget),
    }


def build_report(
    expenses: Sequence[Expense],
    budgets: Sequence[Budget],
    time_range: str,
    *,
    today: Optional[date] = None,
    custom_month: Optional[str] = None,
    top_n: Optional[int] = TOP_CATEGORY_COUNT,
    include_other: bool = False,
) -> Dict[str, Any]:
    """Resolve ``time_range`` and aggregate the expenses for it."""
    report_range = resolve_time_range(time_range, today=today, custom_month=custom_month)
    report = aggregate(
        expenses,
        report_range.window,
        budgets=budgets,
        trend_window=report_range.trend_window,
        top_n=top_n,
        include_other=include_other,
        month_count=report_range.month_count,
    )
    report['range'] = report_range
    return report


def month_options(today: Optional[date] = None, count: int = 24) -> List[str]:
    """``YYYY-MM`` keys for the custom month picker, newest first."""
    today = today or date.today()
    keys = []
    for offset in range(count):
        year, month = shift_month(today.year, today.month, -offset)
        keys.append(f"{year:04d}-{month:02d}")
    return keys
