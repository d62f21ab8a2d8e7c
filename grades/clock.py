"""
Sources of the current time.

The engine itself only accepts an explicit ``now``; a clock is read once at
the edge (HTTP handler, script) and the value is passed down.
"""
from datetime import datetime

from .errors import ClockDependencyError


class SystemClock:
    """Reads the server's local wall clock."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Always returns the same instant. Used by tests and replays."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def resolve_now(now: datetime | None, clock=None) -> datetime:
    """
    Return ``now`` if given, otherwise ask the clock.

    Raises:
        ClockDependencyError: Neither a time nor a clock was supplied
    """
    if now is not None:
        return now
    if clock is None:
        raise ClockDependencyError("Current time is required to compute grades")
    return clock.now()
