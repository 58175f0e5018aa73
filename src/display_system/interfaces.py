"""
Abstract interfaces for the presentation layer

The display renders StorySnapshots and turns player input into StoryIntents;
it never changes story state itself.
"""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from story_system.snapshot import StorySnapshot


class IntentKind(enum.Enum):
    CLICK = "click"               # screen click on HOME / START
    SUBMIT_TEXT = "submit_text"   # name, card answer or final answer depending on step
    OPEN_CARD = "open_card"
    CLOSE_CARD = "close_card"
    PREV_PAGE = "prev_page"
    NEXT_PAGE = "next_page"
    TOGGLE_MUSIC = "toggle_music"
    QUIT = "quit"


@dataclass(frozen=True)
class StoryIntent:
    """One player action forwarded to the core"""
    kind: IntentKind
    text: Optional[str] = None
    card_id: Optional[int] = None

    @classmethod
    def click(cls) -> 'StoryIntent':
        return cls(IntentKind.CLICK)

    @classmethod
    def submit(cls, text: str) -> 'StoryIntent':
        return cls(IntentKind.SUBMIT_TEXT, text=text)

    @classmethod
    def open_card(cls, card_id: int) -> 'StoryIntent':
        return cls(IntentKind.OPEN_CARD, card_id=card_id)


class IStoryDisplay(ABC):
    """
    Presentation layer contract.

    Implementations can draw with pygame, log to a console, or record
    snapshots for tests.
    """

    @abstractmethod
    def setup(self) -> None:
        """Open windows / load assets"""
        pass

    @abstractmethod
    def render(self, snapshot: 'StorySnapshot') -> None:
        """
        Draw one frame.

        Args:
            snapshot: Current read-only story state
        """
        pass

    @abstractmethod
    def poll_intents(self) -> List[StoryIntent]:
        """
        Collect player actions since the last call.

        Returns:
            Intents in the order they happened
        """
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Release display resources"""
        pass
