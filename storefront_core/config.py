"""
Configuration Module for Storefront Core
========================================

This module centralizes the tunables used by the pricing, stock and scheduling
engine. Values are read from environment variables (a local ``.env`` file is
loaded first) and parsed at module load time.

Configuration Categories:
-------------------------
- **Scheduling**: Slot granularity, same-day lead time and how many days ahead
  slots are offered.

- **Stock**: How often the live stock cache checks for the daily reset
  boundary.

- **Database**: Connection URL for the order/stock backing store.

Environment Variables:
----------------------
- SLOT_INTERVAL_MINUTES: Spacing between generated slots (default: 30)
- SAME_DAY_LEAD_MINUTES: Minimum lead time for same-day slots (default: 60)
- SCHEDULING_DAYS_AHEAD: Days ahead to generate slots for (default: 7)
- STOCK_RESET_CHECK_SECONDS: Stock cache reset-check cadence (default: 3600)
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./storefront.db")

Usage:
------
    from storefront_core.config import (
        SLOT_INTERVAL_MINUTES,
        STOCK_RESET_CHECK_SECONDS,
        get_scheduling_settings,
    )
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    """Read a positive integer env var, falling back to the default."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


# =============================================================================
# Scheduling Configuration
# =============================================================================
# Slots are generated on a fixed grid inside each day's opening window.

# Minutes between two consecutive slots (e.g., 10:00, 10:30, 11:00)
SLOT_INTERVAL_MINUTES: int = _int_env("SLOT_INTERVAL_MINUTES", 30)

# Same-day slots must start at least this many minutes after "now"
SAME_DAY_LEAD_MINUTES: int = _int_env("SAME_DAY_LEAD_MINUTES", 60)

# Number of days after today for which slots are generated
DEFAULT_DAYS_AHEAD: int = _int_env("SCHEDULING_DAYS_AHEAD", 7)


@dataclass(frozen=True)
class SchedulingSettings:
    """Bundle of scheduling constants passed into the slot generator."""

    slot_interval_minutes: int = 30
    same_day_lead_minutes: int = 60
    days_ahead: int = 7


def get_scheduling_settings() -> SchedulingSettings:
    """
    Return the scheduling settings built from the module-level constants.

    Tests can monkeypatch the constants and call this again to pick up the
    new values.
    """
    return SchedulingSettings(
        slot_interval_minutes=SLOT_INTERVAL_MINUTES,
        same_day_lead_minutes=SAME_DAY_LEAD_MINUTES,
        days_ahead=DEFAULT_DAYS_AHEAD,
    )


# =============================================================================
# Stock Configuration
# =============================================================================

# How often (seconds) the live stock cache checks the day boundary
STOCK_RESET_CHECK_SECONDS: int = _int_env("STOCK_RESET_CHECK_SECONDS", 3600)  # 1 hour


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
