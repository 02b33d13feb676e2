"""Budget period resolution and calendar window helpers.

A budget stores a start date, a renewal period and an optional end date.
The window over which "spent so far" is computed is derived here:

* an explicit ``end_date`` always wins;
* ``monthly`` ends on the last day of the start month;
* ``weekly`` ends seven days after the start;
* ``yearly`` ends on the same month/day one year later;
* anything else resolves to :attr:`Period.ONGOING` and ends today.

All windows are inclusive on both ends.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple

try:
    from .models import Budget, Period
except ImportError:
    from models import Budget, Period


@dataclass(frozen=True)
class Window:
    """Inclusive date interval ``[start, end]``."""

    start: date
    end: date

    @property
    def days(self) -> int:
        """Inclusive day count; ``0`` when the window is inverted."""
        return max((self.end - self.start).days + 1, 0)

    def contains(self, day: Optional[date]) -> bool:
        return day is not None and self.start <= day <= self.end

    def month_keys(self) -> List[str]:
        """``YYYY-MM`` keys of every calendar month the window touches."""
        if self.days == 0:
            return []
        keys = []
        year, month = self.start.year, self.start.month
        while (year, month) <= (self.end.year, self.end.month):
            keys.append(f"{year:04d}-{month:02d}")
            year, month = shift_month(year, month, 1)
        return keys

    def is_single_month(self) -> bool:
        return len(self.month_keys()) == 1


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def last_day_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def month_window(year: int, month: int) -> Window:
    first = date(year, month, 1)
    return Window(first, last_day_of_month(first))


def parse_month_key(key: str) -> Tuple[int, int]:
    """Parse ``YYYY-MM``; raises ``ValueError`` for anything else."""
    try:
        year_text, month_text = str(key).strip().split("-")
        year, month = int(year_text), int(month_text)
    except (AttributeError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid month key {key!r}, expected YYYY-MM") from exc
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month key {key!r}, month out of range")
    return year, month


def add_one_year(day: date) -> date:
    # Feb 29 overflows into Mar 1 of the following year
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        return date(day.year + 1, 3, 1)


def resolve_end_date(start: date, period: Period, end_date: Optional[date] = None,
                     today: Optional[date] = None) -> date:
    if end_date is not None:
        return end_date
    if period is Period.MONTHLY:
        return last_day_of_month(start)
    if period is Period.WEEKLY:
        return start + timedelta(days=7)
    if period is Period.YEARLY:
        return add_one_year(start)
    return today or date.today()


def resolve_budget_window(budget: Budget, today: Optional[date] = None) -> Window:
    """Return the inclusive window over which the budget's spending counts."""
    period = Period.parse(budget.period)
    end = resolve_end_date(budget.start_date, period, budget.end_date, today=today)
    return Window(budget.start_date, end)
