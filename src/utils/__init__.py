"""
Utilities package - logging, throttling and timers shared by the story system
"""

from .hybrid_logger import HybridLogger, ClassLogger, ColoredFormatter
from .once_in_ms import OnceInMs, wall_clock_ms
from .timer_scheduler import TimerScheduler, TimerHandle, ManualClock, monotonic_ms

__all__ = [
    'HybridLogger',
    'ClassLogger',
    'ColoredFormatter',
    'OnceInMs',
    'wall_clock_ms',
    'TimerScheduler',
    'TimerHandle',
    'ManualClock',
    'monotonic_ms'
]
