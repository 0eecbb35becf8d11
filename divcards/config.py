"""
User settings stored as JSON in ~/.divcards/config.json.

Holds the active game, per-game filter folder overrides, the selected
filter and where card rarities come from.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from divcards.constants import APP_DIR_NAME, CONFIG_FILE_NAME
from divcards.filters.models import RaritySource
from divcards.game_version import GameVersion

logger = logging.getLogger(__name__)


def get_config_dir() -> Path:
    """~/.divcards/, created on first use."""
    config_dir = Path.home() / APP_DIR_NAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


class Config:
    """
    JSON-backed settings.

    Every setter writes the file straight away. Unknown or invalid stored
    values are read back as the defaults rather than raising.
    """

    # NOTE: Never mutate; _fresh_defaults() hands out deep copies.
    DEFAULT_CONFIG: Dict[str, Any] = {
        "current_game": "poe1",
        "games": {
            # "" = Documents/My Games/<game folder>
            "poe1": {"filters_dir": ""},
            "poe2": {"filters_dir": ""},
        },
        "filters": {
            "selected_filter_id": None,
            "rarity_source": RaritySource.POE_NINJA.value,
        },
    }

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """
        Args:
            config_file: JSON file to use; defaults to ~/.divcards/config.json.
        """
        self.config_file: Path = config_file or Path.home() / APP_DIR_NAME / CONFIG_FILE_NAME
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        self.data: Dict[str, Any] = self._load()

    @classmethod
    def _fresh_defaults(cls) -> Dict[str, Any]:
        return copy.deepcopy(cls.DEFAULT_CONFIG)

    def _load(self) -> Dict[str, Any]:
        if not self.config_file.exists():
            logger.info(f"No config at {self.config_file}, using defaults")
            return self._fresh_defaults()

        try:
            with self.config_file.open("r", encoding="utf-8") as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError("top-level JSON value is not an object")
        except (OSError, ValueError) as exc:
            logger.error(f"Failed to load config {self.config_file}: {exc}. Using defaults.")
            return self._fresh_defaults()

        logger.info(f"Config loaded from {self.config_file}")
        return self._merge_with_defaults(stored)

    def _merge_with_defaults(self, stored: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay stored values on the defaults, one level deep for sections."""
        merged = self._fresh_defaults()

        for key, value in stored.items():
            default = merged.get(key)
            if isinstance(default, dict) and isinstance(value, dict):
                default.update(value)
            else:
                merged[key] = value

        return merged

    def save(self) -> None:
        try:
            with self.config_file.open("w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2, ensure_ascii=False)
        except OSError as exc:
            logger.error(f"Failed to save config {self.config_file}: {exc}")
            return
        logger.debug(f"Config saved to {self.config_file}")

    def _section(self, name: str) -> Dict[str, Any]:
        section = self.data.get(name)
        if not isinstance(section, dict):
            section = self.data[name] = {}
        return section

    # ------------------------------------------------------------------
    # Game / filter folders
    # ------------------------------------------------------------------

    @property
    def current_game(self) -> GameVersion:
        stored = str(self.data.get("current_game", ""))
        return GameVersion.from_string(stored) or GameVersion.get_default()

    @current_game.setter
    def current_game(self, value: GameVersion) -> None:
        self.data["current_game"] = value.value
        self.save()

    def get_filters_dir(self, game: Optional[GameVersion] = None) -> Optional[Path]:
        """Folder override for `game` (default: current game); None = auto-detect."""
        game = game or self.current_game
        game_settings = self._section("games").get(game.value) or {}
        raw = game_settings.get("filters_dir") or ""
        return Path(raw) if raw else None

    def set_filters_dir(self, path: Optional[Path], game: Optional[GameVersion] = None) -> None:
        game = game or self.current_game
        games = self._section("games")
        games.setdefault(game.value, {})["filters_dir"] = str(path) if path else ""
        self.save()

    # ------------------------------------------------------------------
    # Filter selection / rarity source
    # ------------------------------------------------------------------

    @property
    def selected_filter_id(self) -> Optional[str]:
        value = self._section("filters").get("selected_filter_id")
        return str(value) if value else None

    @selected_filter_id.setter
    def selected_filter_id(self, value: Optional[str]) -> None:
        self._section("filters")["selected_filter_id"] = value
        self.save()

    @property
    def rarity_source(self) -> RaritySource:
        stored = str(self._section("filters").get("rarity_source", ""))
        return RaritySource.from_string(stored) or RaritySource.POE_NINJA

    @rarity_source.setter
    def rarity_source(self, value: RaritySource) -> None:
        self._section("filters")["rarity_source"] = value.value
        self.save()
