"""
Cancellable delayed callbacks driven by the game loop.

Nothing here sleeps or spawns threads: the loop calls TimerScheduler.update()
once per frame and every due callback runs on the loop's thread.
"""

import heapq
import itertools
import time
from typing import TYPE_CHECKING, Callable, List, Optional

if TYPE_CHECKING:
    from utils.hybrid_logger import ClassLogger


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class ManualClock:
    """
    Millisecond clock that only moves when told to.

    Used by tests to step time deterministically.
    """

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, delta_ms: float) -> None:
        if delta_ms < 0:
            raise ValueError(f"Clock cannot move backwards ({delta_ms}ms)")
        self.now_ms += delta_ms


class TimerHandle:
    """Handle for one scheduled callback; cancel() prevents it from ever firing"""

    def __init__(self, due_ms: float, order: int, callback: Callable[[], None], name: str):
        self.due_ms = due_ms
        self.order = order
        self.callback = callback
        self.name = name
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> bool:
        """
        Cancel the timer.

        Returns:
            True if the timer was pending, False if it already fired or was cancelled
        """
        if not self.pending:
            return False
        self.cancelled = True
        return True

    def __lt__(self, other: 'TimerHandle') -> bool:
        return (self.due_ms, self.order) < (other.due_ms, other.order)

    def __repr__(self) -> str:
        state = "pending" if self.pending else ("fired" if self.fired else "cancelled")
        return f"TimerHandle({self.name!r}, due={self.due_ms:.0f}ms, {state})"


class TimerScheduler:
    """
    Min-heap of TimerHandles ordered by (due time, arm order).

    Timers fire in non-decreasing due time; equal due times fire in the order
    they were armed. A timer armed from inside a firing callback is measured
    from the firing timer's due instant rather than from the wall clock, so a
    600ms step followed by another 600ms step always lands at +1200ms even if
    the frame that processed the first one ran late.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None, logger: Optional['ClassLogger'] = None):
        """
        Args:
            clock: Millisecond clock (defaults to time.monotonic)
            logger: Optional ClassLogger for timer tracing at DEBUG level
        """
        self._clock = clock or monotonic_ms
        self.logger = logger
        self._heap: List[TimerHandle] = []
        self._counter = itertools.count()
        self._firing_at: Optional[float] = None

    def now_ms(self) -> float:
        """Current scheduler time (the firing instant while a callback runs)"""
        if self._firing_at is not None:
            return self._firing_at
        return self._clock()

    def schedule(self, delay_ms: float, callback: Callable[[], None], name: str = "timer") -> TimerHandle:
        """
        Arm a callback to run delay_ms from now.

        Args:
            delay_ms: Delay in milliseconds (>= 0)
            callback: Zero-argument callable
            name: Label used in logs and repr

        Returns:
            TimerHandle that can cancel the callback
        """
        if delay_ms < 0:
            raise ValueError(f"Timer delay must be non-negative, got {delay_ms}")
        handle = TimerHandle(self.now_ms() + delay_ms, next(self._counter), callback, name)
        heapq.heappush(self._heap, handle)
        if self.logger:
            self.logger.debug(f"Armed {handle}")
        return handle

    def update(self) -> int:
        """
        Fire every timer that is due at the current clock time.

        Returns:
            Number of callbacks fired
        """
        now = self._clock()
        fired = 0
        while self._heap and self._heap[0].due_ms <= now:
            handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            handle.fired = True
            self._firing_at = handle.due_ms
            try:
                handle.callback()
            finally:
                self._firing_at = None
            fired += 1
        return fired

    def cancel_all(self) -> int:
        """Cancel every pending timer; returns how many were pending"""
        cancelled = sum(1 for handle in self._heap if handle.cancel())
        self._heap.clear()
        return cancelled

    @property
    def pending_count(self) -> int:
        return sum(1 for handle in self._heap if handle.pending)

    def next_due_ms(self) -> Optional[float]:
        """Due time of the earliest pending timer, or None"""
        pending = [handle.due_ms for handle in self._heap if handle.pending]
        return min(pending) if pending else None
