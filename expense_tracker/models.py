"""Record types shared by the data store, the budget logic and the reports.

Rows coming back from the store (dicts or DataFrame rows) are loosely typed.
The ``*_from_row`` helpers coerce them into the strict dataclasses below so
that the period resolver and the aggregator never see malformed input:
missing amounts become ``0.0``, unparseable dates become ``None`` and a
missing category becomes ``None`` (reported as "Uncategorized").
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional

import pandas as pd

try:
    from .config import DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON, DEFAULT_CURRENCY
except ImportError:
    from config import DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON, DEFAULT_CURRENCY


class Period(str, Enum):
    """Budget renewal cadence.

    ``ONGOING`` is not a storable value. It is what any unrecognised period
    string parses to, and makes the budget window run until today.
    """

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    ONGOING = "ongoing"

    @classmethod
    def parse(cls, value: Any) -> "Period":
        if isinstance(value, Period):
            return value
        text = str(value or "").strip().lower()
        for member in (cls.WEEKLY, cls.MONTHLY, cls.YEARLY):
            if member.value == text:
                return member
        return cls.ONGOING

    @classmethod
    def choices(cls) -> list:
        return [cls.WEEKLY.value, cls.MONTHLY.value, cls.YEARLY.value]


@dataclass(frozen=True)
class Profile:
    id: Optional[int]
    user_id: str
    full_name: str = ""
    avatar_url: Optional[str] = None
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class Category:
    id: Optional[int]
    name: str
    color: str = DEFAULT_CATEGORY_COLOR
    icon: str = DEFAULT_CATEGORY_ICON


@dataclass(frozen=True)
class Expense:
    id: Optional[int]
    title: str
    amount: float
    expense_date: Optional[date]
    description: Optional[str] = None
    category: Optional[Category] = None


@dataclass(frozen=True)
class Budget:
    id: Optional[int]
    name: str
    amount: float
    period: Period
    start_date: date
    end_date: Optional[date] = None
    category: Optional[Category] = None


def to_date(value: Any) -> Optional[date]:
    """Coerce strings, datetimes and pandas timestamps into a ``date``.

    Returns ``None`` for anything that cannot be read as a calendar date.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return None
        except (TypeError, ValueError):
            pass
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        return None
    return ts.date()


def to_amount(value: Any) -> float:
    """Convert an amount field into a float, defaulting to ``0.0``."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return 0.0
        value = cleaned
    parsed = pd.to_numeric([value], errors='coerce')[0]
    if pd.isna(parsed):
        return 0.0
    return float(parsed)


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return None
        except (TypeError, ValueError):
            pass
        value = str(value)
    value = value.strip()
    return value or None


def _clean_id(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def category_from_row(row: Mapping[str, Any], prefix: str = "") -> Optional[Category]:
    """Build a :class:`Category` from a row.

    ``prefix`` selects joined columns, e.g. ``category_`` for the
    ``category_id``/``category_name``/... columns of an expense row. A row
    without a category name yields ``None``.
    """
    name = _clean_text(row.get(f"{prefix}name"))
    if name is None:
        return None
    return Category(
        id=_clean_id(row.get(f"{prefix}id")),
        name=name,
        color=_clean_text(row.get(f"{prefix}color")) or DEFAULT_CATEGORY_COLOR,
        icon=_clean_text(row.get(f"{prefix}icon")) or DEFAULT_CATEGORY_ICON,
    )


def expense_from_row(row: Mapping[str, Any]) -> Expense:
    return Expense(
        id=_clean_id(row.get("id")),
        title=_clean_text(row.get("title")) or "",
        amount=to_amount(row.get("amount")),
        expense_date=to_date(row.get("expense_date", row.get("date"))),
        description=_clean_text(row.get("description")),
        category=category_from_row(row, prefix="category_"),
    )


def budget_from_row(row: Mapping[str, Any], today: Optional[date] = None) -> Budget:
    """Build a :class:`Budget`; a missing start date falls back to ``today``."""
    start = to_date(row.get("start_date")) or today or date.today()
    return Budget(
        id=_clean_id(row.get("id")),
        name=_clean_text(row.get("name")) or "",
        amount=to_amount(row.get("amount")),
        period=Period.parse(row.get("period")),
        start_date=start,
        end_date=to_date(row.get("end_date")),
        category=category_from_row(row, prefix="category_"),
    )


def profile_from_row(row: Mapping[str, Any]) -> Profile:
    return Profile(
        id=_clean_id(row.get("id")),
        user_id=str(row.get("user_id") or ""),
        full_name=_clean_text(row.get("full_name")) or "",
        avatar_url=_clean_text(row.get("avatar_url")),
        currency=_clean_text(row.get("currency")) or DEFAULT_CURRENCY,
    )


def expenses_from_frame(df: pd.DataFrame) -> list:
    """Coerce every row of an expense DataFrame."""
    if df is None or df.empty:
        return []
    return [expense_from_row(row) for row in df.to_dict(orient='records')]


def budgets_from_frame(df: pd.DataFrame, today: Optional[date] = None) -> list:
    if df is None or df.empty:
        return []
    return [budget_from_row(row, today=today) for row in df.to_dict(orient='records')]
