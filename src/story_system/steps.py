"""
Story steps and the edges allowed between them
"""

import enum
from typing import Dict, FrozenSet


class Step(enum.Enum):
    HOME = "HOME"
    START = "START"
    NAME = "NAME"
    CAROUSEL = "CAROUSEL"
    LIGHT_1 = "LIGHT_1"
    LIGHT_2 = "LIGHT_2"
    LIGHT_3 = "LIGHT_3"   # final question
    LIGHT_4 = "LIGHT_4"
    END = "END"


# CAROUSEL→CAROUSEL (card cycles, paging) never changes the step and is not listed
ALLOWED_TRANSITIONS: Dict[Step, FrozenSet[Step]] = {
    Step.HOME: frozenset({Step.START}),
    Step.START: frozenset({Step.NAME}),
    Step.NAME: frozenset({Step.CAROUSEL}),
    Step.CAROUSEL: frozenset({Step.LIGHT_1}),
    Step.LIGHT_1: frozenset({Step.LIGHT_2}),
    Step.LIGHT_2: frozenset({Step.LIGHT_3}),
    Step.LIGHT_3: frozenset({Step.LIGHT_4}),
    Step.LIGHT_4: frozenset({Step.END}),
    Step.END: frozenset(),
}

INITIAL_STEP = Step.HOME

# Layers the renderer draws per step
GAME_LAYER_STEPS = frozenset({
    Step.NAME, Step.CAROUSEL, Step.LIGHT_1, Step.LIGHT_2, Step.LIGHT_3, Step.LIGHT_4, Step.END,
})
CAROUSEL_UI_STEPS = frozenset({Step.NAME, Step.CAROUSEL})
CAROUSEL_BACKGROUND_STEPS = frozenset({Step.NAME, Step.CAROUSEL, Step.LIGHT_1})


def can_transition(source: Step, target: Step) -> bool:
    return target in ALLOWED_TRANSITIONS[source]


class StoryError(Exception):
    """Base class for story system errors"""


class InvalidTransitionError(StoryError):
    """Raised when code tries to move along an edge that does not exist"""

    def __init__(self, source: Step, target: Step):
        super().__init__(f"No transition from {source.name} to {target.name}")
        self.source = source
        self.target = target
