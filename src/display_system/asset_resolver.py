"""
Asset resolver - maps logical asset names to files under the assets folder
"""

from pathlib import Path
from typing import Dict, Iterable, List

from story_system.steps import Step


# Background image drawn for each step
STEP_BACKGROUNDS: Dict[Step, str] = {
    Step.HOME: "home.png",
    Step.START: "start.png",
    Step.NAME: "name.png",
    Step.CAROUSEL: "carousel.png",
    Step.LIGHT_1: "light_1.png",
    Step.LIGHT_2: "light_2.png",
    Step.LIGHT_3: "light_3.png",
    Step.LIGHT_4: "light_4.png",
    Step.END: "end.png",
}


def card_front_name(card_id: int) -> str:
    return f"card_{card_id}_front.png"


def card_back_name(card_id: int) -> str:
    return f"card_{card_id}_back.png"


class AssetResolver:
    """
    Resolves logical names ("home.png", "card_3_back.png") to paths.

    The story code asks for assets by name only; where they live is decided here.
    """

    def __init__(self, assets_folder: str):
        self.assets_folder = Path(assets_folder)

    def resolve(self, name: str) -> Path:
        """
        Args:
            name: Logical asset name

        Returns:
            Path inside the assets folder (existence is not checked)
        """
        return self.assets_folder / name

    def exists(self, name: str) -> bool:
        return self.resolve(name).is_file()

    def background_for(self, step: Step) -> str:
        return STEP_BACKGROUNDS[step]

    def preload_names(self, card_ids: Iterable[int]) -> List[str]:
        """
        Every image the story shows, in first-use order.

        Args:
            card_ids: Configured card ids

        Returns:
            Logical names to load before the story starts
        """
        ids = list(card_ids)
        names = ["home.png", "start.png", "name.png", "carousel.png"]
        names += [card_front_name(card_id) for card_id in ids]
        names += [card_back_name(card_id) for card_id in ids]
        names += ["light_1.png", "light_2.png", "light_3.png", "light_4.png", "end.png"]
        return names

    def missing(self, names: Iterable[str]) -> List[str]:
        return [name for name in names if not self.exists(name)]
