"""Configuration management for the statistics engine.

Every tunable lives here as a module-level default that can be overridden
through an environment variable.  :func:`get_settings` snapshots the values
into an immutable :class:`EngineSettings` record which the engine modules
read at call time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Tuple

# Trend granularity switches from daily to monthly above this many days.
DAILY_SPAN_DAYS = int(os.getenv("FINSTATS_DAILY_SPAN_DAYS", "31"))

# Ranked list sizes
TOP_EXPENSES = int(os.getenv("FINSTATS_TOP_EXPENSES", "5"))
RISKIEST_BUDGETS = int(os.getenv("FINSTATS_RISKIEST_BUDGETS", "3"))
CLOSEST_GOALS = int(os.getenv("FINSTATS_CLOSEST_GOALS", "3"))
RECENT_TRANSACTIONS = int(os.getenv("FINSTATS_RECENT_TRANSACTIONS", "5"))
PIE_SLICES = int(os.getenv("FINSTATS_PIE_SLICES", "8"))

CURRENCY = os.getenv("FINSTATS_CURRENCY", "USD")
LOG_LEVEL = os.getenv("FINSTATS_LOG_LEVEL", "WARNING")

UNCATEGORIZED_LABEL = "Uncategorized"

# Pie palette, assigned to slices in rollup order.
PALETTE: Tuple[str, ...] = (
    "#E8C966",
    "#668888",
    "#E1B733",
    "#336060",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
)


@dataclass(frozen=True)
class EngineSettings:
    """Immutable view of the engine configuration."""

    daily_span_days: int = DAILY_SPAN_DAYS
    top_expenses: int = TOP_EXPENSES
    riskiest_budgets: int = RISKIEST_BUDGETS
    closest_goals: int = CLOSEST_GOALS
    recent_transactions: int = RECENT_TRANSACTIONS
    pie_slices: int = PIE_SLICES
    currency: str = CURRENCY
    log_level: str = LOG_LEVEL
    palette: Tuple[str, ...] = field(default=PALETTE)


def load_settings() -> EngineSettings:
    """Read the current environment into a fresh :class:`EngineSettings`."""
    return EngineSettings(
        daily_span_days=int(os.getenv("FINSTATS_DAILY_SPAN_DAYS", DAILY_SPAN_DAYS)),
        top_expenses=int(os.getenv("FINSTATS_TOP_EXPENSES", TOP_EXPENSES)),
        riskiest_budgets=int(os.getenv("FINSTATS_RISKIEST_BUDGETS", RISKIEST_BUDGETS)),
        closest_goals=int(os.getenv("FINSTATS_CLOSEST_GOALS", CLOSEST_GOALS)),
        recent_transactions=int(os.getenv("FINSTATS_RECENT_TRANSACTIONS", RECENT_TRANSACTIONS)),
        pie_slices=int(os.getenv("FINSTATS_PIE_SLICES", PIE_SLICES)),
        currency=os.getenv("FINSTATS_CURRENCY", CURRENCY),
        log_level=os.getenv("FINSTATS_LOG_LEVEL", LOG_LEVEL),
    )


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Return the process-wide settings, loaded once."""
    return load_settings()
