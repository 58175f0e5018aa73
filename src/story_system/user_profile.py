"""
Player profile for one session
"""

from typing import Dict, Tuple

class UserProfile:
    """
    Name, solved cards and final-answer flag of the current player.

    Solved ids keep insertion order for display; adding an id twice is a no-op.
    """

    def __init__(self):
        self.display_name: str = ""
        self._solved: Dict[int, None] = {}
        self.final_solved: bool = False

    def commit_name(self, raw_name: str) -> bool:
        """
        Store the trimmed name; case and inner whitespace are preserved.

        Returns:
            False (and keeps the old name) if the trimmed name is empty
        """
        name = raw_name.strip()
        if not name:
            return False
        self.display_name = name
        return True

    def mark_solved(self, card_id: int) -> bool:
        """Add a card to the solved set; returns False if it was already there"""
        if card_id in self._solved:
            return False
        self._solved[card_id] = None
        return True

    def is_solved(self, card_id: int) -> bool:
        return card_id in self._solved

    @property
    def solved_card_ids(self) -> Tuple[int, ...]:
        return tuple(self._solved)

    @property
    def solved_count(self) -> int:
        return len(self._solved)

    def __repr__(self) -> str:
        return f"UserProfile(name={self.display_name!r}, solved={list(self._solved)}, final_solved={self.final_solved})"
