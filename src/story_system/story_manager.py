"""
Story manager - runs the frame loop around the step machine, display and music
"""

import time
from typing import TYPE_CHECKING, Optional

import psutil

from display_system.interfaces import IntentKind
from utils import OnceInMs

from .steps import Step

if TYPE_CHECKING:
    from display_system.interfaces import IStoryDisplay, StoryIntent
    from story_system.snapshot import StorySnapshot
    from story_system.step_machine import StepMachine
    from utils import ClassLogger, TimerScheduler


class StoryManager:
    """
    Orchestrates one story session.

    Each frame:
    1. Fire due timers (phase changes, step advances, countdown ticks)
    2. Dispatch player intents from the display to the step machine
    3. Render the latest snapshot
    """

    def __init__(self,
                 step_machine: 'StepMachine',
                 display: 'IStoryDisplay',
                 music_controller,  # MusicController or MockMusicController
                 scheduler: 'TimerScheduler',
                 logger: 'ClassLogger',
                 frame_duration_ms: int = 20,
                 stop_at_end: bool = False):
        """
        Args:
            step_machine: Story state machine
            display: Presentation layer
            music_controller: Background music controller
            scheduler: Scheduler shared with the step machine
            logger: Logger for the loop
            frame_duration_ms: Target frame duration in milliseconds
            stop_at_end: Leave the loop once END is reached
        """
        self.step_machine = step_machine
        self.display = display
        self.music_controller = music_controller
        self.scheduler = scheduler
        self.logger = logger
        self.target_frame_duration = frame_duration_ms / 1000.0
        self.stop_at_end = stop_at_end
        self.running = False
        self.frame_count = 0

        self.latest_snapshot: Optional['StorySnapshot'] = None
        self.snapshots_received = 0

        self._memory_monitor = OnceInMs(60000)
        self._process = psutil.Process()

        self.step_machine.add_listener(self._on_snapshot)

        self.logger.info(f"StoryManager initialized: {frame_duration_ms}ms frame duration")

    def _on_snapshot(self, snapshot: 'StorySnapshot') -> None:
        self.latest_snapshot = snapshot
        self.snapshots_received += 1

    # ------------------------------------------------------------------

    def start(self) -> None:
        """Open the display and arm the current step's timers"""
        self.display.setup()
        self.step_machine.run_step_effects()
        self.latest_snapshot = self.step_machine.snapshot()
        self.display.render(self.latest_snapshot)
        self.running = True

    def run_game_loop(self) -> None:
        """
        Run frames until stopped, sleeping off the rest of each frame.

        Call this from main() for automatic frame management.
        """
        self.logger.info(f"Starting story loop with {int(self.target_frame_duration * 1000)}ms frame duration")
        if not self.running:
            self.start()

        try:
            while self.running:
                frame_start = time.time()

                self.update()

                sleep_time = self.target_frame_duration - (time.time() - frame_start)
                if sleep_time > 0:
                    time.sleep(sleep_time)

        except KeyboardInterrupt:
            self.logger.info("Story stopped by user (Ctrl+C)")
            self.logger.flush()
        except Exception as e:
            self.logger.error(f"Story loop error: {e}", exception=e)
            raise
        finally:
            self.stop()

    def update(self) -> None:
        """One frame: timers, intents, render"""
        self.frame_count += 1

        if self._memory_monitor.should_execute():
            self._log_memory_usage()

        self.scheduler.update()

        for intent in self.display.poll_intents():
            self.dispatch(intent)

        self.display.render(self.latest_snapshot)

        if self.stop_at_end and self.latest_snapshot.step is Step.END:
            self.logger.info("Story reached END")
            self.running = False

    def dispatch(self, intent: 'StoryIntent') -> bool:
        """
        Route one player intent to the core.

        Returns:
            True if the intent changed something
        """
        machine = self.step_machine
        kind = intent.kind

        if kind is IntentKind.QUIT:
            self.logger.info("Quit requested")
            self.running = False
            return True
        if kind is IntentKind.TOGGLE_MUSIC:
            self.music_controller.toggle()
            return True
        if kind is IntentKind.CLICK:
            return machine.click()
        if kind is IntentKind.SUBMIT_TEXT:
            return self._dispatch_text(intent.text or "")
        if kind is IntentKind.OPEN_CARD:
            return intent.card_id is not None and machine.open_card(intent.card_id)
        if kind is IntentKind.CLOSE_CARD:
            return machine.close_card()
        if kind is IntentKind.PREV_PAGE:
            return machine.prev_page()
        if kind is IntentKind.NEXT_PAGE:
            return machine.next_page()

        self.logger.warning(f"Unhandled intent: {intent}")
        return False

    def _dispatch_text(self, text: str) -> bool:
        machine = self.step_machine
        if machine.step is Step.NAME:
            return machine.submit_name(text)
        if machine.step is Step.CAROUSEL:
            result = machine.submit_card_answer(text)
            return result is not None and result.accepted
        if machine.step is Step.LIGHT_3:
            result = machine.submit_final_answer(text)
            return result is not None and result.accepted
        self.logger.debug(f"Text submitted in {machine.step.name} ignored")
        return False

    def stop(self) -> None:
        """Tear down the story and release the display and audio"""
        self.running = False
        self.step_machine.teardown()
        self.music_controller.cleanup()
        self.display.cleanup()
        self.logger.info(f"Story stopped after {self.frame_count} frames in {self.step_machine.step.name}")

    def _log_memory_usage(self) -> None:
        """Log process memory and CPU usage"""
        try:
            process_mb = self._process.memory_info().rss / 1024 / 1024
            process_cpu_percent = self._process.cpu_percent(interval=None)
            sys_mem = psutil.virtual_memory()
            self.logger.info(
                f"💾 Memory - Process: {process_mb:.1f}MB | "
                f"System: {sys_mem.percent:.1f}% used | "
                f"⚙️  CPU - Process: {process_cpu_percent:.1f}%"
            )
        except psutil.Error as e:
            self.logger.warning(f"Failed to log system usage: {e}")
