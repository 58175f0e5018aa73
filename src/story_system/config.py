"""
Story system configuration
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from answer_system.secret_matcher import is_valid_digest


@dataclass(frozen=True)
class CardDefinition:
    """One spell card: its id and the digest of its answer"""
    id: int
    answer_digest: str


@dataclass
class TimingConfig:
    """Every delay in the story, in milliseconds"""
    name_fade_ms: int = 1000
    card_expand_ms: int = 600       # move/scale to fullscreen before the flip
    card_flip_ms: int = 600         # flip to the back face, then unlock
    card_flip_back_ms: int = 600    # flip back to the front face
    card_collapse_ms: int = 600     # shrink back to the carousel slot
    all_solved_delay_ms: int = 800
    light_1_ms: int = 2500
    light_2_ms: int = 1200
    light_4_ms: int = 1200
    error_pulse_ms: int = 500
    countdown_tick_ms: int = 1000

    def validate(self) -> None:
        for name, value in vars(self).items():
            if value <= 0:
                raise ValueError(f"Timing {name} must be positive, got {value}")


@dataclass
class StoryConfig:
    """Static configuration, loaded once before the story starts"""

    cards: List[CardDefinition]
    final_answer_digest: str
    target_time: datetime

    # Skips the countdown entirely
    test_mode: bool = False

    timing: TimingConfig = field(default_factory=TimingConfig)

    # Carousel
    carousel_window_size: int = 4
    carousel_page_step: int = 3

    # Loop / collaborators
    frame_duration_ms: int = 20
    assets_folder: str = "assets"
    music_track: str = "bgm.mp3"

    @property
    def card_count(self) -> int:
        return len(self.cards)

    @property
    def card_ids(self) -> List[int]:
        return [card.id for card in self.cards]

    @property
    def target_fps(self) -> float:
        return 1000.0 / self.frame_duration_ms

    def validate(self) -> None:
        """Basic validation of configuration"""
        if not self.cards:
            raise ValueError("At least one card must be configured")

        ids = self.card_ids
        if len(set(ids)) != len(ids):
            duplicates = sorted({card_id for card_id in ids if ids.count(card_id) > 1})
            raise ValueError(f"Duplicate card ids: {duplicates}")

        for card in self.cards:
            if not is_valid_digest(card.answer_digest):
                raise ValueError(f"Card {card.id} answer digest must be 64 lowercase hex characters")

        if not is_valid_digest(self.final_answer_digest):
            raise ValueError("Final answer digest must be 64 lowercase hex characters")

        if self.carousel_window_size <= 0:
            raise ValueError(f"Carousel window size must be positive, got {self.carousel_window_size}")
        if self.carousel_page_step <= 0:
            raise ValueError(f"Carousel page step must be positive, got {self.carousel_page_step}")

        if self.frame_duration_ms <= 0:
            raise ValueError("Frame duration must be positive")

        self.timing.validate()
