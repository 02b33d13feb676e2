"""Configuration management for the expense tracker.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("EXPENSE_TRACKER_DB_PATH", DATA_DIR / "expenses.db")
).resolve()

# UI preference cache
CACHE_PATH = Path(
    os.getenv("EXPENSE_TRACKER_CACHE_PATH", DATA_DIR / "persistent_cache.json")
).resolve()

# Local signed-in identity (there is no login flow)
DEFAULT_USER_ID = os.getenv("EXPENSE_TRACKER_USER", "local-user")
DEFAULT_USER_NAME = os.getenv("EXPENSE_TRACKER_USER_NAME", "")

DEFAULT_CURRENCY = "USD"
DEFAULT_CATEGORY_COLOR = "#3B82F6"
DEFAULT_CATEGORY_ICON = "receipt"

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#6B7280"
REMAINDER_CATEGORY_NAME = "All other categories"

# Seeded for every new user: (name, color, icon)
DEFAULT_CATEGORIES = (
    ("Food & Dining", "#EF4444", "utensils"),
    ("Transportation", "#3B82F6", "car"),
    ("Shopping", "#8B5CF6", "shopping-bag"),
    ("Entertainment", "#F59E0B", "film"),
    ("Bills & Utilities", "#10B981", "zap"),
    ("Health & Medical", "#EC4899", "heart"),
    ("Education", "#6366F1", "book-open"),
    ("Travel", "#14B8A6", "plane"),
    ("Other", "#6B7280", "more-horizontal"),
)

CURRENCY_OPTIONS = {
    "USD": "US Dollar ($)",
    "EUR": "Euro (€)",
    "GBP": "British Pound (£)",
    "JPY": "Japanese Yen (¥)",
    "CAD": "Canadian Dollar (C$)",
    "AUD": "Australian Dollar (A$)",
    "INR": "Indian Rupee (₹)",
}

CATEGORY_COLORS = (
    "#EF4444", "#F97316", "#F59E0B", "#EAB308", "#84CC16",
    "#22C55E", "#10B981", "#14B8A6", "#06B6D4", "#0EA5E9",
    "#3B82F6", "#6366F1", "#8B5CF6", "#A855F7", "#C084FC",
    "#D946EF", "#EC4899", "#F43F5E",
)

# Report time ranges: key -> label
TIME_RANGES = {
    "this_month": "This month",
    "last_month": "Last month",
    "custom_month": "Custom month",
    "3months": "Last 3 months",
    "6months": "Last 6 months",
    "12months": "Last 12 months",
}
DEFAULT_TIME_RANGE = "6months"
TRAILING_TREND_DAYS = 30
TOP_CATEGORY_COUNT = 6

# Budget progress thresholds (percent of amount spent)
BUDGET_WARNING_PERCENT = 80.0
BUDGET_EXCEEDED_PERCENT = 100.0

RECENT_EXPENSE_COUNT = 5
DASHBOARD_CATEGORY_COUNT = 5


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, DB_PATH.parent, CACHE_PATH.parent]:
        directory.mkdir(parents=True, exist_ok=True)
