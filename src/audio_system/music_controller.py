"""
Music Controller - background track playback for the story
"""

import os

import pygame


class MusicController:
    """
    Plays one looping background track through pygame.mixer.music.

    The track starts muted; the player toggles it on and off. The first
    toggle starts playback, later toggles pause and resume.
    """

    def __init__(self, track_path: str, logger):
        """
        Initialize the mixer and load the track.

        Args:
            track_path: Path of the background music file
            logger: ClassLogger instance for logging

        Raises:
            FileNotFoundError: If the track file is missing
            pygame.error: If the mixer cannot open the device or the file
        """
        self.track_path = track_path
        self.logger = logger
        self.mixer = pygame.mixer
        self._started = False
        self._playing = False

        if not os.path.exists(track_path):
            raise FileNotFoundError(f"Background music not found: {track_path}")

        self.mixer.init()
        try:
            self.mixer.music.load(track_path)
        except pygame.error as e:
            raise pygame.error(f"Failed to load background music {track_path}: {e}")

        self.logger.info(f"🎵 Background music loaded: {os.path.basename(track_path)}")

    @property
    def is_playing(self) -> bool:
        return self._playing

    def toggle(self) -> bool:
        """
        Start, pause or resume the track.

        Returns:
            True if music is playing after the call
        """
        if self._playing:
            self.mixer.music.pause()
            self._playing = False
            self.logger.info("🔇 Music paused")
        elif self._started:
            self.mixer.music.unpause()
            self._playing = True
            self.logger.info("🔊 Music resumed")
        else:
            self.mixer.music.play(loops=-1)
            self._started = True
            self._playing = True
            self.logger.info("🔊 Music started")
        return self._playing

    def cleanup(self) -> None:
        """Stop playback and release the audio device"""
        if self.mixer.get_init():
            self.mixer.music.stop()
            self.mixer.quit()
        self._playing = False
