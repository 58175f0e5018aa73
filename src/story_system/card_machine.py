"""
Card interaction state machine - open, answer and close one spell card at a time
"""

import enum
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

if TYPE_CHECKING:
    from answer_system.answer_gate import AnswerGate, AnswerResult
    from story_system.config import CardDefinition, TimingConfig
    from story_system.user_profile import UserProfile
    from utils.hybrid_logger import ClassLogger
    from utils.timer_scheduler import TimerHandle, TimerScheduler


class CardPhase(enum.Enum):
    CLOSED = "CLOSED"
    EXPANDING = "EXPANDING"     # fullscreen, front face
    FLIPPED = "FLIPPED"         # fullscreen, back face with the answer input
    COLLAPSING = "COLLAPSING"   # shrinking back into the carousel slot


class CardInteractionMachine:
    """
    Animation phases of the single open card.

    Opening:  CLOSED → EXPANDING → (card_expand_ms) FLIPPED → (card_flip_ms) unlocked
    Closing:  FLIPPED → EXPANDING → (card_flip_back_ms) COLLAPSING → (card_collapse_ms) CLOSED

    While animation_locked is set open() and close() are dropped, not queued.
    Answers are taken as soon as the back face shows; one accepted while the
    flip is still locked closes the card at unlock. A solved close commits the
    card to the profile at the CLOSED instant; when that makes the solved count reach the card total,
    on_all_solved is called exactly once.
    """

    def __init__(self,
                 cards: List['CardDefinition'],
                 profile: 'UserProfile',
                 answer_gate: 'AnswerGate',
                 scheduler: 'TimerScheduler',
                 timing: 'TimingConfig',
                 logger: 'ClassLogger',
                 on_all_solved: Optional[Callable[[], None]] = None,
                 on_change: Optional[Callable[[], None]] = None):
        """
        Args:
            cards: Card definitions (ordered)
            profile: Session profile receiving solved ids
            answer_gate: Gate for the card-back input slot
            scheduler: Scheduler for phase timers
            timing: Phase durations
            logger: ClassLogger for this machine
            on_all_solved: Called once when the last card is solved
            on_change: Called after every phase change
        """
        self._cards: Dict[int, 'CardDefinition'] = {card.id: card for card in cards}
        self.profile = profile
        self.answer_gate = answer_gate
        self.scheduler = scheduler
        self.timing = timing
        self.logger = logger
        self.on_all_solved = on_all_solved
        self.on_change = on_change

        self.active_card_id: Optional[int] = None
        self.phase = CardPhase.CLOSED
        self.animation_locked = False
        self._solved_close_pending = False
        self._timers: List['TimerHandle'] = []

    # ------------------------------------------------------------------
    # Derived flags for the renderer

    @property
    def is_expanded(self) -> bool:
        return self.phase in (CardPhase.EXPANDING, CardPhase.FLIPPED)

    @property
    def is_flipped(self) -> bool:
        return self.phase is CardPhase.FLIPPED

    @property
    def total_cards(self) -> int:
        return len(self._cards)

    # ------------------------------------------------------------------
    # Intents

    def open(self, card_id: int) -> bool:
        """
        Start the expand-then-flip sequence for a card.

        Returns:
            True if the sequence started, False if the call was dropped
        """
        if self.animation_locked or self.active_card_id is not None:
            self.logger.debug(f"open({card_id}) dropped - card {self.active_card_id} busy")
            return False
        if card_id not in self._cards:
            self.logger.debug(f"open({card_id}) dropped - unknown card")
            return False
        if self.profile.is_solved(card_id):
            self.logger.debug(f"open({card_id}) dropped - already solved")
            return False

        self.animation_locked = True
        self.active_card_id = card_id
        self.answer_gate.reset()
        self._set_phase(CardPhase.EXPANDING)
        self._arm(self.timing.card_expand_ms, self._on_expanded, "card-flip")
        return True

    def close(self, solved: bool = False) -> bool:
        """
        Start the flip-back-then-collapse sequence for the active card.

        Returns:
            True if the sequence started, False if the call was dropped
        """
        if self.animation_locked or self.active_card_id is None:
            self.logger.debug(f"close(solved={solved}) dropped - locked or no active card")
            return False

        self.animation_locked = True
        card_id = self.active_card_id
        self._set_phase(CardPhase.EXPANDING)
        self._arm(self.timing.card_flip_back_ms, lambda: self._on_flipped_back(card_id, solved), "card-collapse")
        return True

    def submit_answer(self, candidate: str) -> Optional['AnswerResult']:
        """
        Check an answer typed on the back of the active card.

        Accepted answers close the card as solved; rejected ones only pulse.

        Returns:
            AnswerResult, or None if the back face is not showing
        """
        if self.phase is not CardPhase.FLIPPED or self._solved_close_pending:
            self.logger.debug("submit_answer dropped - card is not open for input")
            return None

        card = self._cards[self.active_card_id]
        result = self.answer_gate.submit(candidate, card.answer_digest)
        if result is None:
            return None
        if result.accepted:
            if self.animation_locked:
                # flip still running; _unlock starts the close
                self._solved_close_pending = True
            else:
                self.close(solved=True)
        return result

    def reset(self) -> None:
        """Cancel every pending phase timer and return to CLOSED"""
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()
        self.answer_gate.reset()
        self.active_card_id = None
        self.phase = CardPhase.CLOSED
        self.animation_locked = False
        self._solved_close_pending = False

    # ------------------------------------------------------------------
    # Phase callbacks

    def _on_expanded(self) -> None:
        self._set_phase(CardPhase.FLIPPED)
        self._arm(self.timing.card_flip_ms, self._unlock, "card-unlock")

    def _unlock(self) -> None:
        self.animation_locked = False
        if self._solved_close_pending:
            self._solved_close_pending = False
            self.close(solved=True)
            return
        self._notify()

    def _on_flipped_back(self, card_id: int, solved: bool) -> None:
        self._set_phase(CardPhase.COLLAPSING)
        self._arm(self.timing.card_collapse_ms, lambda: self._on_collapsed(card_id, solved), "card-commit")

    def _on_collapsed(self, card_id: int, solved: bool) -> None:
        self.active_card_id = None
        self.animation_locked = False
        self.answer_gate.reset()

        newly_solved = solved and self.profile.mark_solved(card_id)
        if newly_solved:
            self.logger.info(f"Card {card_id} solved ({self.profile.solved_count}/{self.total_cards})")

        self._set_phase(CardPhase.CLOSED)

        if newly_solved and self.profile.solved_count == self.total_cards:
            self.logger.info("All cards solved 🎉")
            if self.on_all_solved:
                self.on_all_solved()

    # ------------------------------------------------------------------

    def _arm(self, delay_ms: int, callback: Callable[[], None], name: str) -> None:
        self._timers = [handle for handle in self._timers if handle.pending]
        self._timers.append(self.scheduler.schedule(delay_ms, callback, name=name))

    def _set_phase(self, phase: CardPhase) -> None:
        if phase is not self.phase:
            self.logger.debug(f"Card {self.active_card_id}: {self.phase.name} → {phase.name}")
        self.phase = phase
        self._notify()

    def _notify(self) -> None:
        if self.on_change:
            self.on_change()
