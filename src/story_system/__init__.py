"""
Story System - step and card state machines for the spell-card story

This package holds the story core: the step machine with its timed and
answer-gated transitions, the card animation machine, carousel paging,
the countdown gate and the frame loop that drives them.
"""

from .steps import Step, ALLOWED_TRANSITIONS, StoryError, InvalidTransitionError, can_transition
from .config import StoryConfig, TimingConfig, CardDefinition
from .user_profile import UserProfile
from .card_machine import CardInteractionMachine, CardPhase
from .carousel import CarouselNavigator
from .countdown import CountdownGate, CountdownState
from .snapshot import StorySnapshot
from .step_machine import StepMachine
from .story_manager import StoryManager

__all__ = [
    # Steps
    "Step",
    "ALLOWED_TRANSITIONS",
    "StoryError",
    "InvalidTransitionError",
    "can_transition",
    # Configuration
    "StoryConfig",
    "TimingConfig",
    "CardDefinition",
    # Core
    "UserProfile",
    "CardInteractionMachine",
    "CardPhase",
    "CarouselNavigator",
    "CountdownGate",
    "CountdownState",
    "StorySnapshot",
    "StepMachine",
    "StoryManager"
]
