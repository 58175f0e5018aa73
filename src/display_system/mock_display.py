"""
Mock display - records snapshots and replays scripted intents (tests)
"""

from collections import deque
from typing import Deque, Iterable, List, Optional, TYPE_CHECKING

from .interfaces import IStoryDisplay, StoryIntent

if TYPE_CHECKING:
    from story_system.snapshot import StorySnapshot


class MockDisplay(IStoryDisplay):
    """
    Display with no output device.

    Intents queued with queue() are handed out one poll at a time so each
    frame sees at most one player action, like a real player would produce.
    """

    def __init__(self, intents: Iterable[StoryIntent] = (), logger=None, keep_history: bool = True):
        self._pending: Deque[StoryIntent] = deque(intents)
        self.logger = logger
        self.keep_history = keep_history
        self.rendered: List['StorySnapshot'] = []
        self.last_snapshot: Optional['StorySnapshot'] = None
        self.is_setup = False

    def queue(self, *intents: StoryIntent) -> None:
        self._pending.extend(intents)

    @property
    def pending_intents(self) -> int:
        return len(self._pending)

    def setup(self) -> None:
        self.is_setup = True

    def render(self, snapshot: 'StorySnapshot') -> None:
        if self.last_snapshot is not None and snapshot == self.last_snapshot:
            return
        if self.logger and (self.last_snapshot is None or snapshot.step is not self.last_snapshot.step):
            self.logger.info(f"Showing {snapshot.step.name}")
        self.last_snapshot = snapshot
        if self.keep_history:
            self.rendered.append(snapshot)

    def poll_intents(self) -> List[StoryIntent]:
        if not self._pending:
            return []
        return [self._pending.popleft()]

    def cleanup(self) -> None:
        self.is_setup = False
