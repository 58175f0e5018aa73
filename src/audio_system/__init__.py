"""
Audio System Module

Background music for the story. The mock controller has no pygame
dependency and is used with --mock-audio and in tests.
"""

from .mock_music_controller import MockMusicController

__all__ = [
    'MockMusicController'
]
