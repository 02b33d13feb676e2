"""Unit tests for expense_tracker.report_analytics.

The fixtures are small hand-built expense lists so that every total,
share and zero-filled trend day can be checked exactly.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from expense_tracker import report_analytics as ra
from expense_tracker.config import REMAINDER_CATEGORY_NAME, UNCATEGORIZED_NAME
from expense_tracker.models import Budget, Category, Expense, Period
from expense_tracker.periods import Window, month_window

FOOD = Category(1, "Food", "#EF4444", "utensils")
TRAVEL = Category(2, "Travel", "#14B8A6", "plane")


def _expense(amount: float, day: date, category: Category | None = None) -> Expense:
    return Expense(id=None, title="x", amount=amount, expense_date=day, category=category)


def _budget(amount: float, start: date, end: date | None = None) -> Budget:
    return Budget(id=None, name="b", amount=amount, period=Period.MONTHLY, start_date=start, end_date=end)


def test_march_report_matches_hand_totals() -> None:
    expenses = [
        _expense(50.0, date(2024, 3, 1), FOOD),
        _expense(30.0, date(2024, 3, 1), FOOD),
        _expense(20.0, date(2024, 3, 2), TRAVEL),
    ]
    report = ra.aggregate(expenses, month_window(2024, 3))

    assert report["totals"]["total_expenses"] == pytest.approx(100.0)
    by_category = report["by_category"]
    assert list(by_category["Category"]) == ["Food", "Travel"]
    assert list(by_category["Amount"]) == pytest.approx([80.0, 20.0])
    assert list(by_category["Percentage"]) == pytest.approx([80.0, 20.0])
    assert list(by_category["Color"]) == ["#EF4444", "#14B8A6"]

    trend = report["daily_trend"]
    assert len(trend) == 31
    amounts = dict(zip(trend["Date"], trend["Amount"]))
    assert amounts[date(2024, 3, 1)] == pytest.approx(80.0)
    assert amounts[date(2024, 3, 2)] == pytest.approx(20.0)
    assert amounts[date(2024, 3, 31)] == 0.0
    assert trend["Amount"].sum() == pytest.approx(100.0)
    assert trend["Label"].iloc[0] == "Mar 01"


def test_expenses_outside_window_are_ignored() -> None:
    expenses = [
        _expense(10.0, date(2024, 2, 29), FOOD),
        _expense(5.0, date(2024, 3, 31), FOOD),
        _expense(7.0, date(2024, 4, 1), FOOD),
    ]
    report = ra.aggregate(expenses, month_window(2024, 3))
    assert report["totals"]["total_expenses"] == pytest.approx(5.0)
    assert report["daily_trend"]["Amount"].sum() == pytest.approx(5.0)


def test_missing_category_and_date() -> None:
    expenses = [
        _expense(12.0, date(2024, 3, 3)),
        _expense(99.0, None, FOOD),
    ]
    report = ra.aggregate(expenses, month_window(2024, 3))
    assert list(report["by_category"]["Category"]) == [UNCATEGORIZED_NAME]
    assert report["totals"]["total_expenses"] == pytest.approx(12.0)


def test_top_categories_are_truncated() -> None:
    categories = [Category(i, f"Cat {i}", "#000000") for i in range(8)]
    expenses = [_expense(float(10 * (i + 1)), date(2024, 3, 5), cat) for i, cat in enumerate(categories)]
    window = month_window(2024, 3)

    truncated = ra.aggregate(expenses, window)["by_category"]
    assert len(truncated) == 6
    assert truncated["Category"].iloc[0] == "Cat 7"
    assert truncated["Percentage"].sum() < 100.0

    grouped = ra.aggregate(expenses, window, include_other=True)["by_category"]
    assert len(grouped) == 7
    assert grouped["Category"].iloc[-1] == REMAINDER_CATEGORY_NAME
    # Cat 0 and Cat 1 are merged into the remainder
    assert grouped["Amount"].iloc[-1] == pytest.approx(30.0)
    assert grouped["Percentage"].sum() == pytest.approx(100.0)


def test_equal_amounts_sort_by_name() -> None:
    expenses = [_expense(10.0, date(2024, 3, 5), TRAVEL), _expense(10.0, date(2024, 3, 6), FOOD)]
    by_category = ra.aggregate(expenses, month_window(2024, 3))["by_category"]
    assert list(by_category["Category"]) == ["Food", "Travel"]


def test_zero_totals_give_zero_shares_and_rates() -> None:
    expenses = [_expense(0.0, date(2024, 3, 5), FOOD)]
    report = ra.aggregate(expenses, month_window(2024, 3))
    assert list(report["by_category"]["Percentage"]) == [0.0]
    assert report["totals"]["savings_rate"] == 0.0

    inverted = Window(date(2024, 3, 2), date(2024, 3, 1))
    totals = ra.ReportAnalytics(expenses).totals(inverted)
    assert totals["days_in_range"] == 0
    assert totals["average_daily"] == 0.0


def test_empty_input_gives_empty_views() -> None:
    report = ra.aggregate([], month_window(2024, 3))
    assert report["monthly"].empty
    assert report["by_category"].empty
    assert len(report["daily_trend"]) == 31
    assert report["totals"]["total_expenses"] == 0.0


def test_savings_rate_and_average() -> None:
    expenses = [_expense(100.0, date(2024, 3, 10), FOOD)]
    budgets = [_budget(200.0, date(2024, 3, 1))]
    totals = ra.aggregate(expenses, month_window(2024, 3), budgets=budgets)["totals"]
    assert totals["total_budget"] == pytest.approx(200.0)
    assert totals["savings_rate"] == pytest.approx(50.0)
    assert totals["average_daily"] == pytest.approx(100.0 / 31)

    over = ra.ReportAnalytics([_expense(300.0, date(2024, 3, 10))]).totals(month_window(2024, 3), 200.0)
    assert over["savings_rate"] == pytest.approx(-50.0)


def test_budget_total_uses_start_or_end_date() -> None:
    budgets = [
        _budget(100.0, date(2024, 3, 1)),
        _budget(50.0, date(2024, 2, 1), end=date(2024, 3, 15)),
        _budget(30.0, date(2024, 1, 1)),
    ]
    assert ra.budget_total_for_window(budgets, month_window(2024, 3)) == pytest.approx(150.0)


def test_monthly_rows_spread_the_budget() -> None:
    expenses = [
        _expense(40.0, date(2024, 1, 10), FOOD),
        _expense(60.0, date(2024, 3, 10), FOOD),
    ]
    budgets = [_budget(100.0, date(2024, m, 1)) for m in (1, 2, 3)]
    window = Window(date(2024, 1, 1), date(2024, 3, 31))
    report = ra.aggregate(expenses, window, budgets=budgets)

    monthly = report["monthly"]
    assert list(monthly["Month"]) == ["2024-01", "2024-03"]
    assert list(monthly["Label"]) == ["Jan 24", "Mar 24"]
    assert list(monthly["Expenses"]) == pytest.approx([40.0, 60.0])
    assert list(monthly["Budget"]) == pytest.approx([100.0, 100.0])
    assert report["totals"]["total_budget"] == pytest.approx(300.0)


def test_resolve_single_month_ranges() -> None:
    today = date(2024, 3, 15)
    this_month = ra.resolve_time_range("this_month", today=today)
    assert this_month.window == Window(date(2024, 3, 1), date(2024, 3, 31))
    assert this_month.trend_window == this_month.window
    assert this_month.single_month

    last_month = ra.resolve_time_range("last_month", today=today)
    assert last_month.window == Window(date(2024, 2, 1), date(2024, 2, 29))

    january = ra.resolve_time_range("last_month", today=date(2024, 1, 20))
    assert january.window == Window(date(2023, 12, 1), date(2023, 12, 31))

    custom = ra.resolve_time_range("custom_month", today=today, custom_month="2023-07")
    assert custom.window == Window(date(2023, 7, 1), date(2023, 7, 31))
    assert custom.label == "July 2023"


def test_resolve_trailing_range() -> None:
    report_range = ra.resolve_time_range("6months", today=date(2024, 3, 15))
    assert report_range.window == Window(date(2023, 9, 1), date(2024, 3, 15))
    assert report_range.trend_window == Window(date(2024, 2, 15), date(2024, 3, 15))
    assert report_range.trend_window.days == 30
    assert not report_range.single_month
    assert report_range.label == "Last 6 months"


def test_resolve_time_range_errors() -> None:
    with pytest.raises(ValueError):
        ra.resolve_time_range("fortnight", today=date(2024, 3, 15))
    with pytest.raises(ValueError):
        ra.resolve_time_range("custom_month", today=date(2024, 3, 15))


def test_build_report_uses_trailing_trend() -> None:
    expenses = [
        _expense(25.0, date(2023, 10, 2), FOOD),
        _expense(15.0, date(2024, 3, 14), TRAVEL),
    ]
    report = ra.build_report(expenses, [], "6months", today=date(2024, 3, 15))
    assert report["range"].key == "6months"
    assert report["totals"]["total_expenses"] == pytest.approx(40.0)
    assert len(report["daily_trend"]) == 30
    assert report["daily_trend"]["Amount"].sum() == pytest.approx(15.0)


def test_month_options_newest_first() -> None:
    assert ra.month_options(today=date(2024, 2, 10), count=3) == ["2024-02", "2024-01", "2023-12"]


def test_trailing_range_spreads_budget_over_its_months() -> None:
    expenses = [_expense(40.0, date(2024, 3, 5), FOOD)]
    budgets = [_budget(600.0, date(2024, 3, 1))]
    report = ra.build_report(expenses, budgets, "6months", today=date(2024, 3, 15))

    assert report["range"].month_count == 6
    # The window touches seven calendar months, the budget is spread over six
    assert len(report["range"].window.month_keys()) == 7
    assert list(report["monthly"]["Budget"]) == pytest.approx([100.0])
    assert report["totals"]["total_budget"] == pytest.approx(600.0)

    this_month = ra.build_report(expenses, budgets, "this_month", today=date(2024, 3, 15))
    assert this_month["range"].month_count == 1
    assert list(this_month["monthly"]["Budget"]) == pytest.approx([600.0])


def test_category_named_like_fallback_keeps_its_own_row() -> None:
    lookalike = Category(9, UNCATEGORIZED_NAME, "#FF0000")
    expenses = [
        _expense(10.0, date(2024, 3, 5), lookalike),
        _expense(5.0, date(2024, 3, 6)),
    ]
    by_category = ra.aggregate(expenses, month_window(2024, 3))["by_category"]
    assert list(by_category["Amount"]) == pytest.approx([10.0, 5.0])
    assert list(by_category["Color"]) == ["#FF0000", "#6B7280"]
    assert list(by_category["Percentage"]) == pytest.approx([200 / 3, 100 / 3])
