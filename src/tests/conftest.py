"""
Shared fixtures: deterministic clock, scheduler, quiet logger, demo story config
"""

import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add src to path so tests run without installing the package
sys.path.insert(0, str(Path(__file__).parent.parent))

from answer_system import hash_answer
from story_system import CardDefinition, StepMachine, StoryConfig
from utils import HybridLogger, ManualClock, TimerScheduler

CARD_ANSWERS = {
    1: "Lantern",
    2: "river pool",
    3: "Owl",
    4: "maple",
    5: "comet",
    6: "anchor",
    7: "violet",
    8: "harbor",
    9: "quill",
}
FINAL_ANSWER = "4096"

NOW = datetime(2026, 10, 18, 12, 0, 0)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return TimerScheduler(clock)


@pytest.fixture
def advance(clock, scheduler):
    """advance(ms): move the clock and fire everything that became due"""
    def _advance(delta_ms: float) -> int:
        clock.advance(delta_ms)
        return scheduler.update()
    return _advance


@pytest.fixture
def hybrid_logger(tmp_path):
    main_logger = HybridLogger("spellcards-test", log_dir=str(tmp_path / "logs"), console=False)
    yield main_logger
    main_logger.cleanup()


@pytest.fixture
def logger(hybrid_logger):
    return hybrid_logger.get_class_logger("Test", level=10)


def make_config(card_ids=None, test_mode=True, target_time=None) -> StoryConfig:
    ids = list(card_ids) if card_ids is not None else sorted(CARD_ANSWERS)
    return StoryConfig(
        cards=[CardDefinition(card_id, hash_answer(CARD_ANSWERS[card_id])) for card_id in ids],
        final_answer_digest=hash_answer(FINAL_ANSWER),
        target_time=target_time or NOW - timedelta(days=1),
        test_mode=test_mode,
    )


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def machine(config, scheduler, logger):
    step_machine = StepMachine(config, scheduler, logger)
    yield step_machine
    step_machine.teardown()
