"""Top-level package for the finance statistics engine.

Turns a snapshot of a user's transactions, budgets and savings goals into
the figures a personal-finance app displays.  The primary modules are:

* ``aggregation`` – totals, rollups and zero-filled trend series
* ``budgets`` and ``goals`` – budget evaluation and goal projection
* ``ranking`` – stable top-N selections
* ``views`` and ``visualization`` – view-models and Plotly figures
* ``engine`` – the :class:`FinanceStats` facade tying everything together

Everything is a pure function of the records, the date range, the
viewpoint and an explicit ``now``; call :func:`configure_logging` once
from the host to see the package's log output.
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .engine import FinanceStats, HomeDashboard, StatsScreen
from .errors import ContributionError, FinanceStatsError, MalformedRecordError, UnknownRangeError
from .logging_config import configure_logging
from .models import Budget, Contribution, Goal, RecurringFrequency, Transaction, TransactionType
from .periods import DateRange, Granularity, custom_range, resolve_range
from .snapshot import Snapshot, SnapshotStore, refresh_all

__all__ = [
    "aggregation",
    "visualization",
    "FinanceStats",
    "HomeDashboard",
    "StatsScreen",
    "FinanceStatsError",
    "MalformedRecordError",
    "UnknownRangeError",
    "ContributionError",
    "configure_logging",
    "Transaction",
    "TransactionType",
    "Budget",
    "RecurringFrequency",
    "Goal",
    "Contribution",
    "DateRange",
    "Granularity",
    "custom_range",
    "resolve_range",
    "Snapshot",
    "SnapshotStore",
    "refresh_all",
]
