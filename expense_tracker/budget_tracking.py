"""Budget progress: how much of each budget has been spent.

``spent`` is never stored. Each read resolves the budget's window, sums the
matching expenses (restricted to the budget's category when it has one) and
derives the remaining amount, progress percentage and status.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional

import pandas as pd

try:
    from . import db
    from .config import BUDGET_EXCEEDED_PERCENT, BUDGET_WARNING_PERCENT
    from .models import Budget, Expense, budgets_from_frame
    from .periods import Window, resolve_budget_window
except ImportError:
    import db
    from config import BUDGET_EXCEEDED_PERCENT, BUDGET_WARNING_PERCENT
    from models import Budget, Expense, budgets_from_frame
    from periods import Window, resolve_budget_window

STATUS_GOOD = 'good'
STATUS_WARNING = 'warning'
STATUS_EXCEEDED = 'exceeded'

SpentLookup = Callable[[Window, Optional[int]], float]


def budget_progress(amount: float, spent: float) -> float:
    return (spent / amount * 100.0) if amount > 0 else 0.0


def budget_status(amount: float, spent: float) -> str:
    progress = budget_progress(amount, spent)
    if progress >= BUDGET_EXCEEDED_PERCENT:
        return STATUS_EXCEEDED
    if progress >= BUDGET_WARNING_PERCENT:
        return STATUS_WARNING
    return STATUS_GOOD


def spent_in_window(expenses: Iterable[Expense], window: Window, category_id: Optional[int] = None) -> float:
    """Sum expenses dated inside ``window``, optionally for one category only."""
    total = 0.0
    for expense in expenses:
        if not window.contains(expense.expense_date):
            continue
        if category_id is not None:
            if expense.category is None or expense.category.id != category_id:
                continue
        total += expense.amount
    return total


def _progress_row(budget: Budget, window: Window, spent: float) -> Dict[str, Any]:
    return {
        'id': budget.id,
        'name': budget.name,
        'amount': budget.amount,
        'period': budget.period.value,
        'start_date': window.start,
        'end_date': window.end,
        'category_id': budget.category.id if budget.category else None,
        'category_name': budget.category.name if budget.category else None,
        'category_color': budget.category.color if budget.category else None,
        'spent': spent,
        'remaining': max(0.0, budget.amount - spent),
        'progress': budget_progress(budget.amount, spent),
        'status': budget_status(budget.amount, spent),
    }


def attach_spent(
    budgets: Iterable[Budget],
    spent_lookup: SpentLookup,
    today: Optional[date] = None,
) -> pd.DataFrame:
    """Resolve each budget's window and attach what was spent in it.

    ``spent_lookup(window, category_id)`` supplies the spent amount, so the
    same logic runs against the database or an in-memory expense list.
    """
    rows: List[Dict[str, Any]] = []
    for budget in budgets:
        window = resolve_budget_window(budget, today=today)
        category_id = budget.category.id if budget.category else None
        rows.append(_progress_row(budget, window, float(spent_lookup(window, category_id))))
    return pd.DataFrame(rows)


def attach_spent_from_expenses(
    budgets: Iterable[Budget],
    expenses: Iterable[Expense],
    today: Optional[date] = None,
) -> pd.DataFrame:
    expenses = list(expenses)
    return attach_spent(
        budgets,
        lambda window, category_id: spent_in_window(expenses, window, category_id),
        today=today,
    )


def budgets_with_spent(user_id: str, today: Optional[date] = None) -> pd.DataFrame:
    """Fetch the user's budgets and attach the spent amount of each one."""
    today = today or date.today()
    budgets = budgets_from_frame(db.fetch_budgets(user_id), today=today)
    return attach_spent(
        budgets,
        lambda window, category_id: db.sum_expenses(user_id, window.start, window.end, category_id),
        today=today,
    )
