"""Tests for the dashboard summary, search and concurrent reads."""

from __future__ import annotations

from datetime import date
from pathlib import Path
import sys

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from expense_tracker import db as db_mod
from expense_tracker import overview


def _expense_frame(rows) -> pd.DataFrame:
    return pd.DataFrame(
        rows,
        columns=["id", "title", "amount", "description", "expense_date",
                 "category_id", "category_name", "category_color", "category_icon"],
    )


MONTH = _expense_frame([
    (1, "Groceries", 60.0, "weekly shop", date(2024, 3, 2), 1, "Food", "#EF4444", "utensils"),
    (2, "Bus pass", 30.0, None, date(2024, 3, 4), 2, "Transport", "#3B82F6", "car"),
    (3, "Gift", 10.0, "Birthday", date(2024, 3, 9), None, None, None, None),
])


def test_summarize_dashboard() -> None:
    all_expenses = pd.concat([
        MONTH,
        _expense_frame([(4, "Old", 200.0, None, date(2024, 1, 5), None, None, None, None)]),
    ])
    budgets = pd.DataFrame({"id": [1, 2], "amount": [100.0, 100.0]})

    summary = overview.summarize_dashboard(all_expenses, MONTH, budgets, MONTH.head(2), today=date(2024, 3, 10))

    assert summary["total_expenses"] == pytest.approx(300.0)
    assert summary["monthly_expenses"] == pytest.approx(100.0)
    assert summary["total_budget"] == pytest.approx(200.0)
    assert summary["budget_progress"] == pytest.approx(50.0)
    assert summary["daily_average"] == pytest.approx(10.0)
    assert [e.title for e in summary["recent_expenses"]] == ["Groceries", "Bus pass"]
    assert list(summary["top_categories"]["Category"]) == ["Food", "Transport", "Uncategorized"]


def test_summarize_dashboard_without_data() -> None:
    empty = _expense_frame([])
    summary = overview.summarize_dashboard(empty, empty, pd.DataFrame(), empty, today=date(2024, 3, 1))
    assert summary["total_expenses"] == 0.0
    assert summary["budget_progress"] == 0.0
    assert summary["recent_expenses"] == []
    assert summary["top_categories"].empty


@pytest.mark.parametrize(
    "text, expected",
    [
        ("groc", ["Groceries"]),
        ("BIRTHDAY", ["Gift"]),
        ("transport", ["Bus pass"]),
        ("", ["Groceries", "Bus pass", "Gift"]),
        ("(", []),
    ],
)
def test_search_expenses(text: str, expected) -> None:
    assert list(overview.search_expenses(MONTH, text)["title"]) == expected


def test_gather_reads_returns_every_result() -> None:
    results = overview.gather_reads({"a": lambda: 1, "b": lambda: [2, 3]})
    assert results == {"a": 1, "b": [2, 3]}


def test_gather_reads_propagates_failures() -> None:
    def boom():
        raise ValueError("bad read")

    with pytest.raises(ValueError):
        overview.gather_reads({"ok": lambda: 1, "bad": boom})


def test_load_dashboard_from_store(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(db_mod, "DB_PATH", str(tmp_path / "expenses.db"))
    monkeypatch.setattr(db_mod, "ensure_data_directories", lambda: None)
    db_mod.ensure_user("u1")
    db_mod.create_expense("u1", "Rent", 900.0, "2024-02-01")
    db_mod.create_expense("u1", "Lunch", 20.0, "2024-03-04")
    db_mod.create_budget("u1", "Monthly", 1000.0, "monthly", "2024-03-01")
    db_mod.create_budget("u1", "Yearly", 5000.0, "yearly", "2024-01-01")

    summary = overview.load_dashboard("u1", today=date(2024, 3, 5))
    assert summary["total_expenses"] == pytest.approx(920.0)
    assert summary["monthly_expenses"] == pytest.approx(20.0)
    assert summary["total_budget"] == pytest.approx(1000.0)
    assert summary["daily_average"] == pytest.approx(4.0)
    assert summary["recent_expenses"][0].title == "Lunch"
