"""
Answer gate - one input slot with wrong-answer pulse feedback
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from .secret_matcher import SecretMatcher

if TYPE_CHECKING:
    from utils.hybrid_logger import ClassLogger
    from utils.timer_scheduler import TimerHandle, TimerScheduler


@dataclass(frozen=True)
class AnswerResult:
    """Outcome of one submission"""
    accepted: bool


class AnswerGate:
    """
    Wraps SecretMatcher for a single input slot (a card back or the final question).

    On a wrong answer the error pulse turns on for pulse_ms and then clears
    itself; another wrong answer inside the window restarts it. The gate
    never touches story progress - accepting is reported to the caller,
    which performs the transition.
    """

    def __init__(self,
                 name: str,
                 scheduler: 'TimerScheduler',
                 logger: 'ClassLogger',
                 matcher: Optional[SecretMatcher] = None,
                 pulse_ms: int = 500,
                 on_change: Optional[Callable[[], None]] = None):
        """
        Args:
            name: Slot name for logs ("card", "final")
            scheduler: Scheduler that clears the pulse
            logger: ClassLogger for this slot
            matcher: SecretMatcher to use (a fresh one by default)
            pulse_ms: How long the error pulse stays on
            on_change: Called whenever the pulse turns on or off
        """
        self.name = name
        self.scheduler = scheduler
        self.logger = logger
        self.matcher = matcher or SecretMatcher()
        self.pulse_ms = pulse_ms
        self.on_change = on_change

        self.error_pulse_active = False
        self.last_attempt: Optional[str] = None
        self.attempt_count = 0
        self._busy = False
        self._pulse_handle: Optional['TimerHandle'] = None

    @property
    def busy(self) -> bool:
        """True while a comparison is in flight"""
        return self._busy

    def submit(self, candidate: str, digest: str) -> Optional[AnswerResult]:
        """
        Compare a candidate against the slot's digest.

        Args:
            candidate: Raw player input
            digest: Expected digest

        Returns:
            AnswerResult, or None if a comparison was already in flight
        """
        if self._busy:
            self.logger.debug(f"[{self.name}] submit dropped - comparison in flight")
            return None

        self._busy = True
        try:
            self.attempt_count += 1
            self.last_attempt = candidate
            accepted = self.matcher.matches(candidate, digest)
        finally:
            self._busy = False

        if accepted:
            self.logger.info(f"[{self.name}] answer accepted after {self.attempt_count} attempt(s)")
            self.attempt_count = 0
            self.last_attempt = None
        else:
            self.logger.info(f"[{self.name}] answer rejected (attempt {self.attempt_count})")
            self._start_pulse()

        return AnswerResult(accepted=accepted)

    def _start_pulse(self) -> None:
        if self._pulse_handle is not None:
            self._pulse_handle.cancel()
        self.error_pulse_active = True
        self._pulse_handle = self.scheduler.schedule(self.pulse_ms, self._clear_pulse, name=f"{self.name}-pulse")
        self._notify()

    def _clear_pulse(self) -> None:
        self.error_pulse_active = False
        self._pulse_handle = None
        self._notify()

    def _notify(self) -> None:
        if self.on_change:
            self.on_change()

    def reset(self) -> None:
        """Cancel any pending pulse and forget the last attempt"""
        if self._pulse_handle is not None:
            self._pulse_handle.cancel()
            self._pulse_handle = None
        self.error_pulse_active = False
        self.last_attempt = None
        self.attempt_count = 0
        self._busy = False
