"""Top-level package for the Expense Tracker.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``periods`` - budget period resolution and calendar windows
* ``report_analytics`` - monthly, category and daily report aggregation
* ``budget_tracking`` - spent/remaining/status for each budget
* ``db`` - the user-scoped SQLite data store
* ``dashboard`` - the Streamlit home page

To run the app from the command line you can execute:

```bash
streamlit run expense_tracker/Home.py
```

or ``python run_dashboard.py`` from the project root.
"""

from . import periods  # noqa: F401  # re-exported for convenience
from . import report_analytics  # noqa: F401  # re-exported for convenience
from . import budget_tracking  # noqa: F401  # re-exported for convenience
# Streamlit may not be installed in all environments (e.g. during unit
# testing).  If the import fails, assign ``None``.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = ["periods", "report_analytics", "budget_tracking", "dashboard"]
