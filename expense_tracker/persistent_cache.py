"""Remembers the last Reports page selection between sessions.

The file holds three keys: the time range key, the custom month
(``YYYY-MM``) and whether the remainder categories are grouped. Values that
no longer validate are replaced by their defaults on load.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

try:
    from .config import CACHE_PATH, DEFAULT_TIME_RANGE, TIME_RANGES
    from .periods import parse_month_key
except ImportError:
    from config import CACHE_PATH, DEFAULT_TIME_RANGE, TIME_RANGES
    from periods import parse_month_key

DEFAULT_CACHE: Dict[str, Any] = {
    'time_range': DEFAULT_TIME_RANGE,
    'custom_month': None,
    'include_other': False,
}


def _valid_month(value: Any) -> bool:
    try:
        parse_month_key(value)
    except ValueError:
        return False
    return True


def _sanitize(data: Dict[str, Any]) -> Dict[str, Any]:
    selection = DEFAULT_CACHE.copy()
    if data.get('time_range') in TIME_RANGES:
        selection['time_range'] = data['time_range']
    if isinstance(data.get('custom_month'), str) and _valid_month(data['custom_month']):
        selection['custom_month'] = data['custom_month']
    selection['include_other'] = bool(data.get('include_other', False))
    return selection


def load_cache(path: Path | None = None) -> Dict[str, Any]:
    target = Path(path or CACHE_PATH)
    if not target.exists():
        return DEFAULT_CACHE.copy()
    try:
        data = json.loads(target.read_text(encoding='utf-8'))
    except (json.JSONDecodeError, OSError):
        return DEFAULT_CACHE.copy()
    if not isinstance(data, dict):
        return DEFAULT_CACHE.copy()
    return _sanitize(data)


def save_cache(cache: Dict[str, Any], path: Path | None = None) -> None:
    target = Path(path or CACHE_PATH)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(_sanitize(cache), indent=2, sort_keys=True), encoding='utf-8')
