"""
Path of Exile 1 / Path of Exile 2.

Each game keeps its loot filters in its own folder under
``Documents/My Games``.
"""

from enum import Enum
from typing import Optional


class GameVersion(Enum):
    POE1 = "poe1"
    POE2 = "poe2"

    def __str__(self) -> str:
        return self.value

    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def documents_dir_name(self) -> str:
        """Folder under ``Documents/My Games`` holding this game's filters."""
        return _DOCUMENTS_DIRS[self]

    @classmethod
    def from_string(cls, value: str) -> Optional['GameVersion']:
        """Case/whitespace-insensitive lookup ("PoE2" -> POE2); None if unknown."""
        wanted = value.strip().lower()
        return next((g for g in cls if g.value == wanted), None)

    @classmethod
    def get_default(cls) -> 'GameVersion':
        return cls.POE1


_DISPLAY_NAMES = {
    GameVersion.POE1: "Path of Exile 1",
    GameVersion.POE2: "Path of Exile 2",
}

_DOCUMENTS_DIRS = {
    GameVersion.POE1: "Path of Exile",
    GameVersion.POE2: "Path of Exile 2",
}
