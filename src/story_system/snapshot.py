"""
Read-only view of the story handed to the presentation layer
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .card_machine import CardPhase
from .steps import Step


@dataclass(frozen=True)
class StorySnapshot:
    """Everything a renderer needs for one frame; never mutated"""

    step: Step
    name_fading: bool

    # Card overlay
    card_phase: CardPhase
    active_card_id: Optional[int]
    card_expanded: bool
    card_flipped: bool
    animation_locked: bool

    # Carousel
    carousel_start: int
    visible_card_ids: Tuple[int, ...]
    can_prev: bool
    can_next: bool

    # Profile
    display_name: str
    solved_card_ids: Tuple[int, ...]
    final_solved: bool

    # Feedback / countdown
    error_pulse: bool
    countdown_unlocked: bool
    countdown_text: str

    # Layers
    render_game_layer: bool
    show_carousel_ui: bool
    show_carousel_background: bool
    game_layer_interactive: bool

    def is_solved(self, card_id: int) -> bool:
        return card_id in self.solved_card_ids
