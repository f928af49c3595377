"""
Clock - Time sources for the auction house and CLI.

The state machine never reads time itself; every operation receives
``now`` explicitly. Clocks live at the edge, where calls are made.
"""

import time
from typing import Protocol, runtime_checkable

from mwa.core.errors import InvalidArgument
from mwa.utils.validation import require, validate_timestamp


@runtime_checkable
class Clock(Protocol):
    """Anything that can report the current time in whole seconds."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall clock, truncated to integer unix seconds."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """
    Clock driven by hand.

    Used by tests and the CLI demo to replay a lifecycle deterministically.
    """

    def __init__(self, start: int = 0):
        require(validate_timestamp(start, "start"))
        self._now = start

    def now(self) -> int:
        return self._now

    def set(self, timestamp: int) -> None:
        """Jump to an absolute time. Time never runs backwards."""
        require(validate_timestamp(timestamp, "timestamp"))
        if timestamp < self._now:
            raise InvalidArgument(f"Clock cannot move backwards ({timestamp} < {self._now})")
        self._now = timestamp

    def advance(self, seconds: int) -> int:
        """Move forward by seconds and return the new time."""
        if seconds < 0:
            raise InvalidArgument(f"seconds must be >= 0, got {seconds}")
        self.set(self._now + seconds)
        return self._now
