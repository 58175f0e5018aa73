"""
Windowed pagination over the card list
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")


class CarouselNavigator:
    """
    Shows window_size cards at a time and pages by page_step.

    window_start always stays inside [0, max(0, total - window_size)].
    The visible slice is recomputed from window_start on every call.
    """

    def __init__(self, total_cards: int, window_size: int = 4, page_step: int = 3):
        if window_size <= 0 or page_step <= 0:
            raise ValueError("Carousel window size and page step must be positive")
        self.total_cards = total_cards
        self.window_size = window_size
        self.page_step = page_step
        self.window_start = 0

    @property
    def max_start(self) -> int:
        return max(0, self.total_cards - self.window_size)

    @property
    def can_prev(self) -> bool:
        return self.window_start > 0

    @property
    def can_next(self) -> bool:
        return self.window_start + self.window_size < self.total_cards

    def prev(self) -> bool:
        """Page back; returns False when already at the first page"""
        if not self.can_prev:
            return False
        self.window_start = max(0, self.window_start - self.page_step)
        return True

    def next(self) -> bool:
        """Page forward; returns False when the last card is already visible"""
        if not self.can_next:
            return False
        self.window_start = min(self.window_start + self.page_step, self.max_start)
        return True

    def visible_slice(self, items: Sequence[T]) -> List[T]:
        return list(items[self.window_start:self.window_start + self.window_size])

    def reset(self) -> None:
        self.window_start = 0

    def __repr__(self) -> str:
        return (f"CarouselNavigator(start={self.window_start}, size={self.window_size}, "
                f"step={self.page_step}, total={self.total_cards})")
