"""
Display System Package

Presentation layer for the story: renders snapshots, forwards player intents.
PygameDisplay is imported on demand so the mock display works without a video device.
"""

from .interfaces import IStoryDisplay, IntentKind, StoryIntent
from .asset_resolver import AssetResolver, STEP_BACKGROUNDS, card_front_name, card_back_name
from .mock_display import MockDisplay

__all__ = [
    "IStoryDisplay",
    "IntentKind",
    "StoryIntent",
    "AssetResolver",
    "STEP_BACKGROUNDS",
    "card_front_name",
    "card_back_name",
    "MockDisplay"
]
