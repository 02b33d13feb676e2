"""Dashboard summary and expense list helpers."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any, Callable, Dict, Optional

import pandas as pd

try:
    from . import db
    from .budget_tracking import budget_progress
    from .config import DASHBOARD_CATEGORY_COUNT, RECENT_EXPENSE_COUNT
    from .models import expenses_from_frame, to_amount
    from .periods import month_window
    from .report_analytics import ReportAnalytics
except ImportError:
    import db
    from budget_tracking import budget_progress
    from config import DASHBOARD_CATEGORY_COUNT, RECENT_EXPENSE_COUNT
    from models import expenses_from_frame, to_amount
    from periods import month_window
    from report_analytics import ReportAnalytics


def gather_reads(loaders: Dict[str, Callable[[], Any]]) -> Dict[str, Any]:
    """Run independent read calls concurrently and join their results.

    Each loader runs in a worker thread; the first failure propagates to the
    caller once every read has been awaited.
    """
    async def _run() -> Dict[str, Any]:
        keys = list(loaders)
        results = await asyncio.gather(*(asyncio.to_thread(loaders[key]) for key in keys))
        return dict(zip(keys, results))

    return asyncio.run(_run())


def _amount_total(df: pd.DataFrame) -> float:
    if df is None or df.empty or 'amount' not in df.columns:
        return 0.0
    return float(sum(to_amount(value) for value in df['amount']))


def summarize_dashboard(
    all_expenses: pd.DataFrame,
    month_expenses: pd.DataFrame,
    monthly_budgets: pd.DataFrame,
    recent_expenses: pd.DataFrame,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Headline numbers for the dashboard.

    The month figures cover the calendar month containing ``today``; the
    daily average divides the month total by the days elapsed so far.
    """
    today = today or date.today()
    window = month_window(today.year, today.month)

    total_expenses = _amount_total(all_expenses)
    monthly_expenses = _amount_total(month_expenses)
    total_budget = _amount_total(monthly_budgets)

    top_categories = ReportAnalytics(expenses_from_frame(month_expenses)).category_breakdown(
        window, top_n=DASHBOARD_CATEGORY_COUNT
    )

    return {
        'total_expenses': total_expenses,
        'monthly_expenses': monthly_expenses,
        'total_budget': total_budget,
        'budget_used': monthly_expenses,
        'budget_progress': budget_progress(total_budget, monthly_expenses),
        'daily_average': monthly_expenses / today.day,
        'recent_expenses': expenses_from_frame(recent_expenses),
        'top_categories': top_categories,
    }


def load_dashboard(user_id: str, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    window = month_window(today.year, today.month)
    reads = gather_reads({
        'all_expenses': lambda: db.fetch_expenses(user_id),
        'month_expenses': lambda: db.fetch_expenses(user_id, window.start, window.end),
        'monthly_budgets': lambda: db.fetch_budgets(user_id, periods=['monthly']),
        'recent_expenses': lambda: db.fetch_expenses(user_id, limit=RECENT_EXPENSE_COUNT),
    })
    return summarize_dashboard(today=today, **reads)


def search_expenses(df: pd.DataFrame, text: Optional[str]) -> pd.DataFrame:
    """Case-insensitive match on title, description or category name."""
    needle = (text or '').strip().lower()
    if not needle or df.empty:
        return df
    mask = pd.Series(False, index=df.index)
    for column in ['title', 'description', 'category_name']:
        if column in df.columns:
            mask = mask | df[column].fillna('').astype(str).str.lower().str.contains(needle, regex=False)
    return df[mask]
