"""
Step machine - the single owner of story progress.

HOME → START → NAME → CAROUSEL → LIGHT_1 → LIGHT_2 → LIGHT_3 → LIGHT_4 → END

Every user intent enters through one of the public methods below; intents
that do not belong to the current step (or arrive while a lock or a step
timer is pending) are dropped silently and logged at DEBUG.
"""

from typing import TYPE_CHECKING, Callable, List, Optional

from answer_system.answer_gate import AnswerGate, AnswerResult
from answer_system.secret_matcher import SecretMatcher

from .card_machine import CardInteractionMachine
from .carousel import CarouselNavigator
from .countdown import CountdownGate
from .snapshot import StorySnapshot
from .steps import (
    CAROUSEL_BACKGROUND_STEPS,
    CAROUSEL_UI_STEPS,
    GAME_LAYER_STEPS,
    INITIAL_STEP,
    InvalidTransitionError,
    Step,
    can_transition,
)
from .user_profile import UserProfile

if TYPE_CHECKING:
    from story_system.config import CardDefinition, StoryConfig
    from utils.hybrid_logger import ClassLogger
    from utils.timer_scheduler import TimerHandle, TimerScheduler


SnapshotListener = Callable[[StorySnapshot], None]


class StepMachine:
    """
    Top-level story state machine.

    Owns the session state (profile, carousel window, open card, answer
    slots) and all timers that drive automatic transitions. At most one step
    timer is pending at a time and it remembers the step that armed it:
    leaving that step cancels it, and asking for it again from the same step
    while it is pending does nothing.
    """

    def __init__(self,
                 config: 'StoryConfig',
                 scheduler: 'TimerScheduler',
                 logger: 'ClassLogger',
                 countdown: Optional[CountdownGate] = None,
                 matcher: Optional[SecretMatcher] = None):
        """
        Args:
            config: Validated story configuration
            scheduler: Scheduler driving every delayed transition
            logger: ClassLogger for the machine (child loggers are derived from it)
            countdown: Countdown gate (built from config when omitted)
            matcher: SecretMatcher shared by both answer slots
        """
        self.config = config
        self.timing = config.timing
        self.scheduler = scheduler
        self.logger = logger
        self.matcher = matcher or SecretMatcher()
        self.countdown = countdown or CountdownGate(config.target_time, test_mode=config.test_mode)

        self._listeners: List[SnapshotListener] = []
        self._torn_down = False
        self._step_timer: Optional['TimerHandle'] = None
        self._step_timer_source: Optional[Step] = None
        self._countdown_timer: Optional['TimerHandle'] = None

        self._build_session()
        self._arm_countdown_tick()

        self.logger.info(f"StepMachine ready: {config.card_count} cards, "
                         f"countdown {'open' if self.countdown.unlocked else 'locked'}")

    def _build_session(self) -> None:
        self.step: Step = INITIAL_STEP
        self.profile = UserProfile()
        self.name_fading = False
        self.carousel = CarouselNavigator(
            total_cards=self.config.card_count,
            window_size=self.config.carousel_window_size,
            page_step=self.config.carousel_page_step,
        )
        self.card_gate = AnswerGate(
            "card",
            scheduler=self.scheduler,
            logger=self.logger.create_class_logger("CardAnswerGate"),
            matcher=self.matcher,
            pulse_ms=self.timing.error_pulse_ms,
            on_change=self._emit,
        )
        self.final_gate = AnswerGate(
            "final",
            scheduler=self.scheduler,
            logger=self.logger.create_class_logger("FinalAnswerGate"),
            matcher=self.matcher,
            pulse_ms=self.timing.error_pulse_ms,
            on_change=self._emit,
        )
        self.cards = CardInteractionMachine(
            cards=self.config.cards,
            profile=self.profile,
            answer_gate=self.card_gate,
            scheduler=self.scheduler,
            timing=self.timing,
            logger=self.logger.create_class_logger("CardMachine"),
            on_all_solved=self._on_all_cards_solved,
            on_change=self._emit,
        )

    # ------------------------------------------------------------------
    # Listeners / snapshot

    def add_listener(self, listener: SnapshotListener) -> None:
        """Register a callable that receives a snapshot after every change"""
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def visible_cards(self) -> List['CardDefinition']:
        return self.carousel.visible_slice(self.config.cards)

    @property
    def error_pulse(self) -> bool:
        return self.card_gate.error_pulse_active or self.final_gate.error_pulse_active

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    @property
    def step_timer_pending(self) -> bool:
        return self._step_timer is not None and self._step_timer.pending

    def snapshot(self) -> StorySnapshot:
        countdown_state = self.countdown.state
        return StorySnapshot(
            step=self.step,
            name_fading=self.name_fading,
            card_phase=self.cards.phase,
            active_card_id=self.cards.active_card_id,
            card_expanded=self.cards.is_expanded,
            card_flipped=self.cards.is_flipped,
            animation_locked=self.cards.animation_locked,
            carousel_start=self.carousel.window_start,
            visible_card_ids=tuple(card.id for card in self.visible_cards),
            can_prev=self.carousel.can_prev,
            can_next=self.carousel.can_next,
            display_name=self.profile.display_name,
            solved_card_ids=self.profile.solved_card_ids,
            final_solved=self.profile.final_solved,
            error_pulse=self.error_pulse,
            countdown_unlocked=countdown_state.unlocked,
            countdown_text=countdown_state.display,
            render_game_layer=self.step in GAME_LAYER_STEPS,
            show_carousel_ui=self.step in CAROUSEL_UI_STEPS,
            show_carousel_background=self.step in CAROUSEL_BACKGROUND_STEPS,
            game_layer_interactive=self.step is not Step.NAME,
        )

    def _emit(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # User intents

    def click(self) -> bool:
        """Screen click on HOME (needs the countdown open) or START"""
        if not self._accepts(Step.HOME, Step.START):
            return False
        if self.step is Step.HOME:
            if not self.countdown.unlocked:
                self.logger.debug("click dropped - countdown still locked")
                return False
            self._transition_to(Step.START)
        else:
            self._transition_to(Step.NAME)
        return True

    def submit_name(self, raw_name: str) -> bool:
        """
        Commit the player's name and fade into the carousel.

        Empty or whitespace-only names are ignored without feedback.
        """
        if not self._accepts(Step.NAME):
            return False
        if self.name_fading:
            self.logger.debug("submit_name dropped - fade already running")
            return False
        if not self.profile.commit_name(raw_name):
            self.logger.debug("submit_name ignored - empty name")
            return False

        self.logger.info(f"Player name committed: {self.profile.display_name}")
        self.name_fading = True
        self._arm_step_timer(Step.CAROUSEL, self.timing.name_fade_ms)
        self._emit()
        return True

    def open_card(self, card_id: int) -> bool:
        if not self._accepts(Step.CAROUSEL):
            return False
        return self.cards.open(card_id)

    def close_card(self) -> bool:
        """Return to the carousel without solving the open card"""
        if not self._accepts(Step.CAROUSEL):
            return False
        return self.cards.close(solved=False)

    def submit_card_answer(self, candidate: str) -> Optional[AnswerResult]:
        if not self._accepts(Step.CAROUSEL):
            return None
        return self.cards.submit_answer(candidate)

    def prev_page(self) -> bool:
        return self._page(self.carousel.prev, "prev")

    def next_page(self) -> bool:
        return self._page(self.carousel.next, "next")

    def _page(self, move: Callable[[], bool], label: str) -> bool:
        if not self._accepts(Step.CAROUSEL):
            return False
        if self.cards.active_card_id is not None:
            self.logger.debug(f"{label}_page dropped - a card is open")
            return False
        if not move():
            self.logger.debug(f"{label}_page dropped - no page in that direction")
            return False
        self._emit()
        return True

    def submit_final_answer(self, candidate: str) -> Optional[AnswerResult]:
        """The only input-gated step after the carousel: LIGHT_3 → LIGHT_4"""
        if not self._accepts(Step.LIGHT_3):
            return None
        result = self.final_gate.submit(candidate, self.config.final_answer_digest)
        if result is not None and result.accepted:
            self.profile.final_solved = True
            self._transition_to(Step.LIGHT_4)
        return result

    def _accepts(self, *steps: Step) -> bool:
        if self._torn_down:
            self.logger.debug("intent dropped - machine torn down")
            return False
        if self.step not in steps:
            self.logger.debug(f"intent dropped - not valid in {self.step.name}")
            return False
        return True

    # ------------------------------------------------------------------
    # Transitions and timers

    def _transition_to(self, target: Step) -> None:
        if not can_transition(self.step, target):
            raise InvalidTransitionError(self.step, target)

        self._cancel_step_timer()
        old_step = self.step
        self.step = target
        self.logger.info(f"Step transition: {old_step.name} → {target.name}")
        self.run_step_effects()
        self._emit()

    def run_step_effects(self) -> None:
        """
        Arm the automatic advance of the current step, if it has one.

        Safe to call repeatedly: a timer already pending for this step is kept
        and never duplicated.
        """
        if self.step is Step.LIGHT_1:
            self._arm_step_timer(Step.LIGHT_2, self.timing.light_1_ms)
        elif self.step is Step.LIGHT_2:
            self._arm_step_timer(Step.LIGHT_3, self.timing.light_2_ms)
        elif self.step is Step.LIGHT_4:
            self._arm_step_timer(Step.END, self.timing.light_4_ms)

    def _arm_step_timer(self, target: Step, delay_ms: int) -> None:
        source = self.step
        if self.step_timer_pending:
            if self._step_timer_source is source:
                self.logger.debug(f"{source.name} timer already pending - not re-armed")
                return
            self._cancel_step_timer()

        self._step_timer_source = source
        self._step_timer = self.scheduler.schedule(
            delay_ms,
            lambda: self._on_step_timer(source, target),
            name=f"{source.name}->{target.name}",
        )

    def _on_step_timer(self, source: Step, target: Step) -> None:
        self._step_timer = None
        self._step_timer_source = None
        if self._torn_down or self.step is not source:
            self.logger.debug(f"Stale {source.name} timer ignored")
            return
        if source is Step.NAME:
            self.name_fading = False
        self._transition_to(target)

    def _cancel_step_timer(self) -> None:
        if self._step_timer is not None:
            self._step_timer.cancel()
        self._step_timer = None
        self._step_timer_source = None

    def _on_all_cards_solved(self) -> None:
        self._arm_step_timer(Step.LIGHT_1, self.timing.all_solved_delay_ms)

    def _arm_countdown_tick(self) -> None:
        if self._torn_down or not self.countdown.ticking:
            return
        self._countdown_timer = self.scheduler.schedule(
            self.timing.countdown_tick_ms, self._on_countdown_tick, name="countdown-tick"
        )

    def _on_countdown_tick(self) -> None:
        self._countdown_timer = None
        state = self.countdown.tick()
        if state.unlocked:
            self.logger.info("Countdown reached target - story unlocked 🔓")
        else:
            self._arm_countdown_tick()
        self._emit()

    # ------------------------------------------------------------------
    # Lifecycle

    def _cancel_all_timers(self) -> None:
        self._cancel_step_timer()
        if self._countdown_timer is not None:
            self._countdown_timer.cancel()
            self._countdown_timer = None
        self.cards.reset()
        self.card_gate.reset()
        self.final_gate.reset()

    def teardown(self) -> None:
        """Cancel every pending timer; later intents and stale timers are ignored"""
        if self._torn_down:
            return
        self._cancel_all_timers()
        self._torn_down = True
        self.logger.info(f"StepMachine torn down in {self.step.name}")

    def reset(self) -> None:
        """Tear down and start a fresh session at HOME (the countdown latch is kept)"""
        self._cancel_all_timers()
        self._torn_down = False
        self._build_session()
        self._arm_countdown_tick()
        self.logger.info("Session reset to HOME")
        self._emit()
