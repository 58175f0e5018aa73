"""
Throttle for work that should run at most once per interval inside the game loop
"""

import time
from typing import Callable, Optional


def wall_clock_ms() -> float:
    """Current time in milliseconds"""
    return time.time() * 1000.0


class OnceInMs:
    """
    Allows an action at most once per interval_ms.

    The game loop runs every frame (e.g. 20ms); periodic chores such as the
    memory report only need to run once a minute.

    Example:
        monitor = OnceInMs(60000)
        if monitor.should_execute():
            log_memory_usage()
    """

    def __init__(self, interval_ms: int, clock: Optional[Callable[[], float]] = None):
        """
        Args:
            interval_ms: Minimum milliseconds between executions
            clock: Millisecond clock (defaults to wall clock)
        """
        self.interval_ms = interval_ms
        self._clock = clock or wall_clock_ms
        self._last_execution: Optional[float] = None

    def should_execute(self) -> bool:
        """True (and restart the interval) when the interval has passed; the first call always passes"""
        now = self._clock()
        if self._last_execution is None or now - self._last_execution >= self.interval_ms:
            self._last_execution = now
            return True
        return False

    def reset(self) -> None:
        """Force the next should_execute() to return True"""
        self._last_execution = None

    def remaining_ms(self) -> float:
        """Milliseconds until the next execution is allowed (0 when due)"""
        if self._last_execution is None:
            return 0.0
        return max(0.0, self.interval_ms - (self._clock() - self._last_execution))
