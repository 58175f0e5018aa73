"""
Mock Music Controller - No-op implementation for running without audio hardware
"""


class MockMusicController:
    """Tracks play/pause state like MusicController but never touches the mixer"""

    def __init__(self, logger, track_path: str = ""):
        self.track_path = track_path
        self.logger = logger
        self.toggle_count = 0
        self._playing = False
        self.logger.info("🔇 MockMusicController initialized (audio disabled)")

    @property
    def is_playing(self) -> bool:
        return self._playing

    def toggle(self) -> bool:
        self.toggle_count += 1
        self._playing = not self._playing
        self.logger.debug(f"Mock: music {'playing' if self._playing else 'paused'}")
        return self._playing

    def cleanup(self) -> None:
        self._playing = False
