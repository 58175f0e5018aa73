"""
Countdown gate - keeps the story locked until the target time
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

UNLOCKED_DISPLAY = "00:00:00"


@dataclass(frozen=True)
class CountdownState:
    """Result of one countdown evaluation"""
    unlocked: bool
    remaining_ms: Optional[int]

    @property
    def days(self) -> int:
        return (self.remaining_ms or 0) // MS_PER_DAY

    @property
    def hours(self) -> int:
        return (self.remaining_ms or 0) // MS_PER_HOUR % 24

    @property
    def minutes(self) -> int:
        return (self.remaining_ms or 0) // MS_PER_MINUTE % 60

    @property
    def seconds(self) -> int:
        return (self.remaining_ms or 0) // MS_PER_SECOND % 60

    @property
    def display(self) -> str:
        if self.unlocked:
            return UNLOCKED_DISPLAY
        return f"{self.days}d {self.hours:02d}h {self.minutes:02d}m {self.seconds:02d}s"


class CountdownGate:
    """
    Latch that opens once now >= target_time and never closes again.

    The first evaluation happens in the constructor so a player arriving after
    the target never sees the lock, even for one frame. In test mode the gate
    is open from the start and no time is ever computed.
    """

    def __init__(self,
                 target_time: datetime,
                 test_mode: bool = False,
                 now: Optional[Callable[[], datetime]] = None):
        """
        Args:
            target_time: Unlock instant (naive or timezone-aware)
            test_mode: Force the gate open
            now: Clock returning datetimes comparable with target_time
        """
        self.target_time = target_time
        self.test_mode = test_mode
        self._now = now or (lambda: datetime.now(target_time.tzinfo))

        if test_mode:
            self._state = CountdownState(unlocked=True, remaining_ms=None)
        else:
            self._state = CountdownState(unlocked=False, remaining_ms=None)
            self.tick()

    @property
    def state(self) -> CountdownState:
        return self._state

    @property
    def unlocked(self) -> bool:
        return self._state.unlocked

    @property
    def ticking(self) -> bool:
        """True while further ticks can still change the state"""
        return not self._state.unlocked

    def tick(self) -> CountdownState:
        """Recompute the remaining time; a no-op once unlocked"""
        if self._state.unlocked:
            return self._state

        remaining = self.target_time - self._now()
        remaining_ms = remaining // timedelta(milliseconds=1)
        if remaining_ms <= 0:
            self._state = CountdownState(unlocked=True, remaining_ms=0)
        else:
            self._state = CountdownState(unlocked=False, remaining_ms=remaining_ms)
        return self._state
