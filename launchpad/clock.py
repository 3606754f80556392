"""
Time sources.

Deadlines handed to the liquidity venue are computed from an injected clock
so that expiry behaviour is deterministic under test.
"""

import time
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Anything that can report the current unix time in whole seconds."""

    def now(self) -> int: ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> int:
        return int(time.time())


class FixedClock:
    """Manually advanced clock for simulations and tests."""

    def __init__(self, start: int = 1_700_000_000):
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("cannot move a clock backwards")
        self._now += seconds
        return self._now


def to_datetime(timestamp: int) -> datetime:
    """Convert a clock reading to an aware UTC datetime."""
    return datetime.fromtimestamp(timestamp, UTC)
