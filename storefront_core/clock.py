"""
Clock and time-of-day helpers.

Everything that depends on "now" (the daily stock boundary, same-day cutoffs,
the stock cache's periodic sweep) reads it through a ``Clock`` so tests can
freeze or advance time instead of waiting on the wall clock.

All datetimes are naive local time, matching how stores configure their
opening hours ("09:00", "18:30").
"""

import asyncio
import re
from datetime import datetime, timedelta
from typing import Optional

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")

DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


class Clock:
    """Source of the current local time and of async sleeping."""

    def now(self) -> datetime:
        raise NotImplementedError

    async def sleep(self, seconds: float) -> None:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall-clock implementation backed by ``datetime.now`` and ``asyncio.sleep``."""

    def now(self) -> datetime:
        return datetime.now()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class FrozenClock(Clock):
    """
    Manually driven clock.

    ``sleep`` advances the frozen time by the requested amount and yields
    control once, so a background loop sleeping on this clock crosses day
    boundaries as fast as the event loop can spin.
    """

    def __init__(self, current: datetime):
        self._current = current

    def now(self) -> datetime:
        return self._current

    def set(self, current: datetime) -> None:
        self._current = current

    def advance(self, **kwargs) -> datetime:
        """Move time forward by ``timedelta(**kwargs)`` and return the new time."""
        self._current = self._current + timedelta(**kwargs)
        return self._current

    async def sleep(self, seconds: float) -> None:
        self._current = self._current + timedelta(seconds=seconds)
        await asyncio.sleep(0)


def parse_hhmm(value) -> Optional[tuple[int, int]]:
    """
    Parse an "HH:MM" (or "HH:MM:SS") string into ``(hours, minutes)``.

    Returns None for anything that is not a valid time of day.
    """
    if not isinstance(value, str):
        return None
    match = _HHMM_RE.match(value)
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours, minutes


def hhmm_to_minutes(value) -> Optional[int]:
    """Convert "HH:MM" to minutes since midnight, or None if malformed."""
    parsed = parse_hhmm(value)
    if parsed is None:
        return None
    return parsed[0] * 60 + parsed[1]


def minutes_of_day(moment: datetime) -> int:
    """Minutes elapsed since local midnight for ``moment``."""
    return moment.hour * 60 + moment.minute


def day_name(moment) -> str:
    """Lowercase English weekday name ("monday".."sunday") for a date/datetime."""
    return DAY_NAMES[moment.weekday()]


def resolve_clock(clock: Optional[Clock]) -> Clock:
    return clock if clock is not None else SystemClock()
