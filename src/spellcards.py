#!/usr/bin/env python3
"""
SpellCards Interactive Story

Main application: builds the configuration, wires the step machine to the
pygame display and background music, and runs the frame loop.
"""

import argparse
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

# Add src to path for imports when run as a script
sys.path.insert(0, str(Path(__file__).parent))

from answer_system import SecretMatcher, verify_hashing_available
from audio_system import MockMusicController
from display_system import AssetResolver
from story_system import CardDefinition, StepMachine, StoryConfig, StoryManager, TimingConfig
from utils import HybridLogger, TimerScheduler


# Global logger reference for signal handlers
_global_logger = None


def emergency_flush_and_log(sig=None, frame=None):
    """Flush logs before the process is terminated"""
    if _global_logger:
        _global_logger.critical(f"⚠️  SIGNAL RECEIVED: {sig} - Process terminating")
    sys.exit(0 if sig == signal.SIGINT else 1)


def create_story_config(test_mode: bool = False,
                        target_time: Optional[datetime] = None,
                        assets_folder: str = "assets") -> StoryConfig:
    """Default story: nine spell cards and one final question"""
    cards = [
        CardDefinition(1, "7cadc15d609c4ae9b4be6265b8e1cace16e6fa78a81ab0c7db82e687a7c867a5"),
        CardDefinition(2, "8a28929ac7f9a17e97a421ac2cd63ac73568ebe87bc0cee641a193d91c761577"),
        CardDefinition(3, "2c0f3f264be038b414834af5a51211eee9ad283c15b298d8fecdd3224f56da06"),
        CardDefinition(4, "dc3d50da8dac041f660e4ba85339928995e771d99c33cc868f5829800829e382"),
        CardDefinition(5, "049aeebec8ebfbf096669c4d76947037e42d634976e9abc9f984227cc90dad7e"),
        CardDefinition(6, "d7bf0c9ea6ea590ff1a44ef444aa38d0db5491e29fab83efbbbe882ac9314e84"),
        CardDefinition(7, "92f473809e5979a7da2b7f52771b3a9e3d7105dcb0f24ae333c5bf279b863d73"),
        CardDefinition(8, "e02d7fca852ac60ed43f21a3d5032b58d9d13fe7719321284209ad753eba0814"),
        CardDefinition(9, "8326e09ce4e90a419a510ed74895cf6713f2fb42b0b3ffc126527ec2b9e95872"),
    ]

    return StoryConfig(
        cards=cards,
        final_answer_digest="6ecf763ff6e7cef7b47e6611e1bf76fe2608a2e32a97b2d88b083ae1d8d02c82",
        target_time=target_time or datetime(2026, 12, 24, 20, 0),
        test_mode=test_mode,
        timing=TimingConfig(),
        carousel_window_size=4,
        carousel_page_step=3,
        frame_duration_ms=20,  # 50 FPS
        assets_folder=assets_folder,
        music_track="bgm.mp3",
    )


def create_story_system(config: StoryConfig, story_logger, use_mock_audio: bool = False) -> StoryManager:
    """
    Create and wire the complete story system.

    Args:
        config: StoryConfig instance
        story_logger: ClassLogger used to derive component loggers
        use_mock_audio: Skip the audio device entirely

    Returns:
        StoryManager ready to run
    """
    config.validate()
    verify_hashing_available()

    manager_logger = story_logger.create_class_logger("StoryManager", logging.INFO)
    machine_logger = story_logger.create_class_logger("StepMachine", logging.INFO)
    display_logger = story_logger.create_class_logger("Display", logging.INFO)
    music_logger = story_logger.create_class_logger("Music", logging.INFO)

    try:
        scheduler = TimerScheduler()
        step_machine = StepMachine(config, scheduler, machine_logger, matcher=SecretMatcher())

        resolver = AssetResolver(config.assets_folder)

        # pygame-backed collaborators are only imported when actually used
        from display_system.pygame_display import PygameDisplay
        display = PygameDisplay(resolver, config.card_ids, display_logger,
                                name_fade_ms=config.timing.name_fade_ms)

        if use_mock_audio:
            story_logger.info("🔇 Using MockMusicController (audio disabled)")
            music_controller = MockMusicController(music_logger)
        else:
            from audio_system.music_controller import MusicController
            music_controller = MusicController(str(resolver.resolve(config.music_track)), music_logger)

        story_manager = StoryManager(
            step_machine=step_machine,
            display=display,
            music_controller=music_controller,
            scheduler=scheduler,
            logger=manager_logger,
            frame_duration_ms=config.frame_duration_ms,
        )

        story_logger.info(f"Story system initialized: {config.card_count} cards, assets in {config.assets_folder}")
        return story_manager

    except Exception as e:
        story_logger.error(f"Failed to initialize story system: {e}", exception=e)
        raise


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spellcards", description="SpellCards interactive story")
    parser.add_argument("--test-mode", action="store_true", help="Skip the countdown")
    parser.add_argument("--mock-audio", action="store_true", help="Run without the audio device")
    parser.add_argument("--assets", default="assets", help="Folder holding images and music")
    parser.add_argument("--target", type=datetime.fromisoformat, default=None,
                        help="Unlock time, ISO format (e.g. 2026-12-24T20:00)")
    parser.add_argument("--log-dir", default="logs", help="Folder for log files")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Set up and run the story"""
    args = build_parser().parse_args(argv)

    main_logger = HybridLogger("SpellCards", log_dir=args.log_dir)
    story_logger = main_logger.get_class_logger("SpellCards")

    global _global_logger
    _global_logger = story_logger
    signal.signal(signal.SIGTERM, emergency_flush_and_log)

    story_logger.info("✨ SPELLCARDS INTERACTIVE STORY")

    config = create_story_config(test_mode=args.test_mode, target_time=args.target, assets_folder=args.assets)
    story_logger.info(f"Cards: {config.card_count} | Unlock at: {config.target_time.isoformat()} | "
                      f"Test mode: {config.test_mode}")
    story_logger.info(f"Frame duration: {config.frame_duration_ms}ms ({config.target_fps:.1f} FPS)")

    try:
        story_manager = create_story_system(config, story_logger, use_mock_audio=args.mock_audio)
        story_logger.info("🚀 Starting story...")
        story_manager.run_game_loop()

    except KeyboardInterrupt:
        story_logger.info("⏹️  Story stopped by user")
    except Exception as e:
        story_logger.error(f"Story system error: {e}", exception=e)
        raise
    finally:
        story_logger.info("✅ Story shut down")
        story_logger.flush()
        main_logger.cleanup()


if __name__ == "__main__":
    main()
