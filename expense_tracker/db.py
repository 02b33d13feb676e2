"""SQLite data store for profiles, categories, expenses and budgets.

Every table is scoped to an owning ``user_id`` and every query filters on
it. Reads return DataFrames (expense and budget reads join the category
columns as ``category_id``, ``category_name``, ``category_color`` and
``category_icon``); writes validate their input and raise ``ValueError``
for bad values. Database failures surface as :class:`DataStoreError`.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

import pandas as pd

try:
    from .config import (
        CURRENCY_OPTIONS,
        DB_PATH,
        DEFAULT_CATEGORIES,
        DEFAULT_CATEGORY_COLOR,
        DEFAULT_CATEGORY_ICON,
        DEFAULT_CURRENCY,
        ensure_data_directories,
    )
    from .models import Period, Profile, profile_from_row, to_amount, to_date
except ImportError:
    from config import (
        CURRENCY_OPTIONS,
        DB_PATH,
        DEFAULT_CATEGORIES,
        DEFAULT_CATEGORY_COLOR,
        DEFAULT_CATEGORY_ICON,
        DEFAULT_CURRENCY,
        ensure_data_directories,
    )
    from models import Period, Profile, profile_from_row, to_amount, to_date

logger = logging.getLogger(__name__)

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS profiles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL UNIQUE,
    full_name TEXT,
    avatar_url TEXT,
    currency TEXT DEFAULT 'USD',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    color TEXT DEFAULT '#3B82F6',
    icon TEXT DEFAULT 'receipt',
    created_at TEXT NOT NULL,
    UNIQUE (user_id, name)
);

CREATE TABLE IF NOT EXISTS expenses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
    title TEXT NOT NULL,
    amount REAL NOT NULL,
    description TEXT,
    expense_date TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    category_id INTEGER REFERENCES categories(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    amount REAL NOT NULL,
    period TEXT NOT NULL DEFAULT 'monthly',
    start_date TEXT NOT NULL,
    end_date TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_expenses_user_date ON expenses (user_id, expense_date DESC);
CREATE INDEX IF NOT EXISTS ix_expenses_category ON expenses (category_id);
CREATE INDEX IF NOT EXISTS ix_budgets_user_period ON budgets (user_id, period);
CREATE INDEX IF NOT EXISTS ix_categories_user ON categories (user_id);
"""

_EXPENSE_SELECT = """
SELECT e.id, e.title, e.amount, e.description, e.expense_date,
       c.id AS category_id, c.name AS category_name,
       c.color AS category_color, c.icon AS category_icon
FROM expenses e
LEFT JOIN categories c ON c.id = e.category_id
"""

_BUDGET_SELECT = """
SELECT b.id, b.name, b.amount, b.period, b.start_date, b.end_date,
       c.id AS category_id, c.name AS category_name,
       c.color AS category_color, c.icon AS category_icon
FROM budgets b
LEFT JOIN categories c ON c.id = b.category_id
"""


class DataStoreError(RuntimeError):
    """Raised when the underlying database cannot serve a request."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _ensure_dirs() -> None:
    ensure_data_directories()
    Path(DB_PATH).parent.mkdir(parents=True, exist_ok=True)


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    _ensure_dirs()
    try:
        conn = sqlite3.connect(str(DB_PATH))
        conn.execute("PRAGMA foreign_keys = ON")
    except sqlite3.Error as exc:
        logger.error("Cannot open database %s: %s", DB_PATH, exc)
        raise DataStoreError(f"Cannot open database: {exc}") from exc
    try:
        yield conn
    except (sqlite3.Error, pd.errors.DatabaseError) as exc:
        logger.error("Database error on %s: %s", DB_PATH, exc)
        raise DataStoreError(f"Database request failed: {exc}") from exc
    finally:
        conn.close()


def init_db() -> None:
    with connect() as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()
    logger.debug("Schema ready at %s", DB_PATH)


def _iso_date(value: Any, field: str) -> str:
    parsed = to_date(value)
    if parsed is None:
        raise ValueError(f"{field} must be a valid date")
    return parsed.isoformat()


def _optional_iso_date(value: Any) -> Optional[str]:
    parsed = to_date(value)
    return parsed.isoformat() if parsed else None


def _require_text(value: Optional[str], field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValueError(f"{field} cannot be empty")
    return text


def _require_amount(value: Any, field: str = "Amount") -> float:
    amount = to_amount(value)
    if amount < 0:
        raise ValueError(f"{field} cannot be negative")
    return amount


def _require_color(value: Optional[str]) -> str:
    color = (value or DEFAULT_CATEGORY_COLOR).strip()
    if not HEX_COLOR_RE.match(color):
        raise ValueError(f"Invalid color '{color}', expected #RRGGBB")
    return color.upper()


def _check_category(conn: sqlite3.Connection, user_id: str, category_id: Optional[int]) -> Optional[int]:
    if category_id is None:
        return None
    row = conn.execute(
        "SELECT id FROM categories WHERE id = ? AND user_id = ?",
        (int(category_id), user_id),
    ).fetchone()
    if row is None:
        raise ValueError(f"Unknown category id {category_id}")
    return int(row[0])


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

def ensure_user(user_id: str, full_name: str = "") -> Profile:
    """Create the user's profile and default categories on first use."""
    user_id = _require_text(user_id, "User id")
    init_db()
    with connect() as conn:
        exists = conn.execute(
            "SELECT 1 FROM profiles WHERE user_id = ?", (user_id,)
        ).fetchone()
        if not exists:
            now = _now()
            conn.execute(
                "INSERT INTO profiles (user_id, full_name, currency, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (user_id, full_name or None, DEFAULT_CURRENCY, now, now),
            )
            conn.executemany(
                "INSERT OR IGNORE INTO categories (user_id, name, color, icon, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                [(user_id, name, color, icon, now) for name, color, icon in DEFAULT_CATEGORIES],
            )
            conn.commit()
            logger.info("Created profile and default categories for %s", user_id)
    return get_profile(user_id)


def get_profile(user_id: str) -> Optional[Profile]:
    with connect() as conn:
        df = pd.read_sql_query(
            "SELECT id, user_id, full_name, avatar_url, currency FROM profiles WHERE user_id = ?",
            conn,
            params=[user_id],
        )
    if df.empty:
        return None
    return profile_from_row(df.iloc[0].to_dict())


def update_profile(
    user_id: str,
    full_name: Optional[str] = None,
    currency: Optional[str] = None,
    avatar_url: Optional[str] = None,
) -> bool:
    updates: List[str] = []
    params: List[Any] = []

    if full_name is not None:
        updates.append("full_name = ?")
        params.append(full_name.strip() or None)
    if currency is not None:
        if currency not in CURRENCY_OPTIONS:
            raise ValueError(f"Unsupported currency '{currency}'")
        updates.append("currency = ?")
        params.append(currency)
    if avatar_url is not None:
        updates.append("avatar_url = ?")
        params.append(avatar_url.strip() or None)

    if not updates:
        return False

    updates.append("updated_at = ?")
    params.extend([_now(), user_id])
    with connect() as conn:
        cursor = conn.execute(
            f"UPDATE profiles SET {', '.join(updates)} WHERE user_id = ?", params
        )
        conn.commit()
        return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

def fetch_categories(user_id: str) -> pd.DataFrame:
    with connect() as conn:
        return pd.read_sql_query(
            "SELECT id, name, color, icon FROM categories WHERE user_id = ? ORDER BY name",
            conn,
            params=[user_id],
        )


def create_category(
    user_id: str,
    name: str,
    color: str = DEFAULT_CATEGORY_COLOR,
    icon: str = DEFAULT_CATEGORY_ICON,
) -> int:
    name = _require_text(name, "Category name")
    color = _require_color(color)
    try:
        with connect() as conn:
            cursor = conn.execute(
                "INSERT INTO categories (user_id, name, color, icon, created_at) VALUES (?, ?, ?, ?, ?)",
                (user_id, name, color, (icon or DEFAULT_CATEGORY_ICON).strip(), _now()),
            )
            conn.commit()
            return int(cursor.lastrowid)
    except DataStoreError as exc:
        if isinstance(exc.__cause__, sqlite3.IntegrityError):
            raise ValueError(f"Category '{name}' already exists") from exc
        raise


def update_category(
    user_id: str,
    category_id: int,
    name: Optional[str] = None,
    color: Optional[str] = None,
    icon: Optional[str] = None,
) -> bool:
    updates: List[str] = []
    params: List[Any] = []
    if name is not None:
        updates.append("name = ?")
        params.append(_require_text(name, "Category name"))
    if color is not None:
        updates.append("color = ?")
        params.append(_require_color(color))
    if icon is not None:
        updates.append("icon = ?")
        params.append(icon.strip() or DEFAULT_CATEGORY_ICON)
    if not updates:
        return False

    params.extend([int(category_id), user_id])
    try:
        with connect() as conn:
            cursor = conn.execute(
                f"UPDATE categories SET {', '.join(updates)} WHERE id = ? AND user_id = ?",
                params,
            )
            conn.commit()
            return cursor.rowcount > 0
    except DataStoreError as exc:
        if isinstance(exc.__cause__, sqlite3.IntegrityError):
            raise ValueError(f"Category '{name}' already exists") from exc
        raise


def delete_category(user_id: str, category_id: int) -> bool:
    """Delete a category; its expenses become uncategorized, its budgets are removed."""
    with connect() as conn:
        cursor = conn.execute(
            "DELETE FROM categories WHERE id = ? AND user_id = ?", (int(category_id), user_id)
        )
        conn.commit()
        return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------

def fetch_expenses(
    user_id: str,
    start_date: Any = None,
    end_date: Any = None,
    category_id: Optional[int] = None,
    limit: Optional[int] = None,
    newest_first: bool = True,
) -> pd.DataFrame:
    where: List[str] = ["e.user_id = ?"]
    params: List[Any] = [user_id]

    if start_date:
        where.append("e.expense_date >= ?")
        params.append(_iso_date(start_date, "Start date"))
    if end_date:
        where.append("e.expense_date <= ?")
        params.append(_iso_date(end_date, "End date"))
    if category_id is not None:
        where.append("e.category_id = ?")
        params.append(int(category_id))

    direction = "DESC" if newest_first else "ASC"
    sql = _EXPENSE_SELECT + " WHERE " + " AND ".join(where)
    sql += f" ORDER BY e.expense_date {direction}, e.id {direction}"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))

    with connect() as conn:
        df = pd.read_sql_query(sql, conn, params=params)
    if not df.empty:
        df['expense_date'] = pd.to_datetime(df['expense_date']).dt.date
    return df


def sum_expenses(
    user_id: str,
    start_date: Any,
    end_date: Any,
    category_id: Optional[int] = None,
) -> float:
    """Sum of expense amounts in the inclusive date range."""
    sql = (
        "SELECT COALESCE(SUM(amount), 0) FROM expenses "
        "WHERE user_id = ? AND expense_date >= ? AND expense_date <= ?"
    )
    params: List[Any] = [
        user_id,
        _iso_date(start_date, "Start date"),
        _iso_date(end_date, "End date"),
    ]
    if category_id is not None:
        sql += " AND category_id = ?"
        params.append(int(category_id))
    with connect() as conn:
        row = conn.execute(sql, params).fetchone()
    return float(row[0] or 0.0)


def create_expense(
    user_id: str,
    title: str,
    amount: Any,
    expense_date: Any,
    description: Optional[str] = None,
    category_id: Optional[int] = None,
) -> int:
    title = _require_text(title, "Title")
    amount = _require_amount(amount)
    iso_date = _iso_date(expense_date, "Expense date")
    now = _now()
    with connect() as conn:
        category_id = _check_category(conn, user_id, category_id)
        cursor = conn.execute(
            "INSERT INTO expenses (user_id, category_id, title, amount, description, expense_date, "
            "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (user_id, category_id, title, amount, (description or "").strip() or None, iso_date, now, now),
        )
        conn.commit()
        return int(cursor.lastrowid)


def update_expense(
    user_id: str,
    expense_id: int,
    title: Optional[str] = None,
    amount: Any = None,
    expense_date: Any = None,
    description: Optional[str] = None,
    category_id: Optional[int] = None,
    clear_category: bool = False,
) -> bool:
    """Update an expense. Returns True if a row was changed."""
    updates: List[str] = []
    params: List[Any] = []

    if title is not None:
        updates.append("title = ?")
        params.append(_require_text(title, "Title"))
    if amount is not None:
        updates.append("amount = ?")
        params.append(_require_amount(amount))
    if expense_date is not None:
        updates.append("expense_date = ?")
        params.append(_iso_date(expense_date, "Expense date"))
    if description is not None:
        updates.append("description = ?")
        params.append(description.strip() or None)

    with connect() as conn:
        if clear_category:
            updates.append("category_id = NULL")
        elif category_id is not None:
            updates.append("category_id = ?")
            params.append(_check_category(conn, user_id, category_id))

        if not updates:
            return False

        updates.append("updated_at = ?")
        params.extend([_now(), int(expense_id), user_id])
        cursor = conn.execute(
            f"UPDATE expenses SET {', '.join(updates)} WHERE id = ? AND user_id = ?", params
        )
        conn.commit()
        return cursor.rowcount > 0


def delete_expense(user_id: str, expense_id: int) -> bool:
    with connect() as conn:
        cursor = conn.execute(
            "DELETE FROM expenses WHERE id = ? AND user_id = ?", (int(expense_id), user_id)
        )
        conn.commit()
        return cursor.rowcount > 0


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------

def _require_period(value: Any) -> str:
    period = Period.parse(value)
    if period is Period.ONGOING:
        raise ValueError(f"Period must be one of {', '.join(Period.choices())}")
    return period.value


def fetch_budgets(user_id: str, periods: Optional[Sequence[str]] = None) -> pd.DataFrame:
    where = ["b.user_id = ?"]
    params: List[Any] = [user_id]
    if periods:
        where.append("b.period IN ({})".format(",".join(["?" for _ in periods])))
        params.extend(list(periods))
    sql = _BUDGET_SELECT + " WHERE " + " AND ".join(where) + " ORDER BY b.start_date DESC, b.id DESC"
    with connect() as conn:
        return pd.read_sql_query(sql, conn, params=params)


def create_budget(
    user_id: str,
    name: str,
    amount: Any,
    period: str,
    start_date: Any,
    category_id: Optional[int] = None,
    end_date: Any = None,
) -> int:
    name = _require_text(name, "Budget name")
    amount = _require_amount(amount, "Budget amount")
    period = _require_period(period)
    start = _iso_date(start_date, "Start date")
    end = _optional_iso_date(end_date)
    if end is not None and end < start:
        raise ValueError("End date cannot be before the start date")
    now = _now()
    with connect() as conn:
        category_id = _check_category(conn, user_id, category_id)
        cursor = conn.execute(
            "INSERT INTO budgets (user_id, category_id, name, amount, period, start_date, end_date, "
            "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (user_id, category_id, name, amount, period, start, end, now, now),
        )
        conn.commit()
        return int(cursor.lastrowid)


def update_budget(
    user_id: str,
    budget_id: int,
    name: Optional[str] = None,
    amount: Any = None,
    period: Optional[str] = None,
    start_date: Any = None,
    category_id: Optional[int] = None,
    clear_category: bool = False,
) -> bool:
    updates: List[str] = []
    params: List[Any] = []

    if name is not None:
        updates.append("name = ?")
        params.append(_require_text(name, "Budget name"))
    if amount is not None:
        updates.append("amount = ?")
        params.append(_require_amount(amount, "Budget amount"))
    if period is not None:
        updates.append("period = ?")
        params.append(_require_period(period))
    if start_date is not None:
        updates.append("start_date = ?")
        params.append(_iso_date(start_date, "Start date"))

    with connect() as conn:
        if clear_category:
            updates.append("category_id = NULL")
        elif category_id is not None:
            updates.append("category_id = ?")
            params.append(_check_category(conn, user_id, category_id))

        if not updates:
            return False

        updates.append("updated_at = ?")
        params.extend([_now(), int(budget_id), user_id])
        cursor = conn.execute(
            f"UPDATE budgets SET {', '.join(updates)} WHERE id = ? AND user_id = ?", params
        )
        conn.commit()
        return cursor.rowcount > 0


def delete_budget(user_id: str, budget_id: int) -> bool:
    with connect() as conn:
        cursor = conn.execute(
            "DELETE FROM budgets WHERE id = ? AND user_id = ?", (int(budget_id), user_id)
        )
        conn.commit()
        return cursor.rowcount > 0
