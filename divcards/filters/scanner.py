"""
Loot filter discovery.

Finds the Path of Exile loot filters installed for a game and reads just
enough of each file to list it:

- Local filters: `*.filter` files in `Documents/My Games/<game>/`.
  Name comes from the file name, last update from the file mtime.
- Online filters: extension-less files in `<game>/OnlineFilters/`.
  Name and last update come from the `#name:` / `#lastUpdate:` header lines.

Full parsing is left to divcards.filters.parser.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from divcards.constants import (
    FILTER_ID_PREFIX,
    LOCAL_FILTER_EXTENSION,
    METADATA_SCAN_BYTES,
    METADATA_SCAN_LINE_LIMIT,
    ONLINE_FILTERS_SUBDIR,
)
from divcards.filters.models import FilterType, ScannedFilter
from divcards.filters.parser import split_lines
from divcards.game_version import GameVersion

logger = logging.getLogger(__name__)

ONLINE_NAME_RE = re.compile(r"^#name:\s*(.+)$", re.IGNORECASE)
ONLINE_LAST_UPDATE_RE = re.compile(r"^#lastUpdate:\s*(.+)$", re.IGNORECASE)

# 32-bit FNV-1a
_FNV_OFFSET_BASIS = 2166136261
_FNV_PRIME = 16777619


class FilterScanner:
    """
    Scans a game's filter folders for loot filters.

    Default location: %UserProfile%/Documents/My Games/Path of Exile[ 2]/
    """

    def __init__(
        self,
        documents_dir: Optional[Path] = None,
        filters_dir: Optional[Path] = None,
    ):
        """
        Args:
            documents_dir: Folder containing "My Games" (defaults to ~/Documents).
            filters_dir: Explicit filter folder, bypassing the My Games lookup.
        """
        self._documents_dir = documents_dir or Path.home() / "Documents"
        self._filters_dir = filters_dir

    # ------------------------------------------------------------------
    # Directory resolution
    # ------------------------------------------------------------------

    def get_filters_directory(self, game: GameVersion) -> Path:
        if self._filters_dir is not None:
            return self._filters_dir
        return self._documents_dir / "My Games" / game.documents_dir_name()

    def get_online_filters_directory(self, game: GameVersion) -> Path:
        return self.get_filters_directory(game) / ONLINE_FILTERS_SUBDIR

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan_all(self, game: GameVersion) -> List[ScannedFilter]:
        """Local and online filters for `game`; missing folders yield nothing."""
        return self.scan_local_filters(game) + self.scan_online_filters(game)

    def scan_local_filters(self, game: GameVersion) -> List[ScannedFilter]:
        directory = self.get_filters_directory(game)
        paths = self._list_files(directory)
        results = []

        for path in paths:
            if not path.name.lower().endswith(LOCAL_FILTER_EXTENSION):
                continue
            scanned = self.extract_local_metadata(path)
            if scanned is not None:
                results.append(scanned)

        logger.debug(f"Found {len(results)} local filters in {directory}")
        return results

    def scan_online_filters(self, game: GameVersion) -> List[ScannedFilter]:
        directory = self.get_online_filters_directory(game)
        paths = self._list_files(directory)
        results = []

        for path in paths:
            if "." in path.name:
                continue
            scanned = self.extract_online_metadata(path)
            if scanned is not None:
                results.append(scanned)

        logger.debug(f"Found {len(results)} online filters in {directory}")
        return results

    # ------------------------------------------------------------------
    # Metadata extraction
    # ------------------------------------------------------------------

    def extract_local_metadata(self, path: Path) -> Optional[ScannedFilter]:
        try:
            mtime = path.stat().st_mtime
        except OSError as exc:
            logger.warning(f"Failed to read local filter metadata: {path} ({exc})")
            return None

        return ScannedFilter(
            filter_type=FilterType.LOCAL,
            file_path=str(path),
            filter_name=path.name[: -len(LOCAL_FILTER_EXTENSION)],
            last_update=datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat(),
        )

    def extract_online_metadata(self, path: Path) -> Optional[ScannedFilter]:
        try:
            header_lines = self.read_first_lines(path, METADATA_SCAN_LINE_LIMIT)
        except OSError as exc:
            logger.warning(f"Failed to read online filter metadata: {path} ({exc})")
            return None

        name, last_update = self.parse_online_header(header_lines)
        return ScannedFilter(
            filter_type=FilterType.ONLINE,
            file_path=str(path),
            filter_name=name or path.name,
            last_update=last_update,
        )

    @staticmethod
    def parse_online_header(lines: Sequence[str]) -> Tuple[Optional[str], Optional[str]]:
        """
        Extract `#name:` and `#lastUpdate:` from online filter header lines.

        Example header:
            #Online Item Filter
            #name:NeverSink Strict
            #lastUpdate:2025-12-25T12:30:51Z
        """
        name: Optional[str] = None
        last_update: Optional[str] = None

        for line in lines:
            trimmed = line.strip()

            if name is None:
                m = ONLINE_NAME_RE.match(trimmed)
                if m:
                    name = m.group(1).strip()

            if last_update is None:
                m = ONLINE_LAST_UPDATE_RE.match(trimmed)
                if m:
                    last_update = m.group(1).strip()

            if name is not None and last_update is not None:
                break

        return name, last_update

    @staticmethod
    def generate_filter_id(file_path: str) -> str:
        """
        Stable id for a filter derived from its path.

        Separators and case are normalised first, so the same file always
        gets the same id.
        """
        normalized = file_path.replace("\\", "/").lower()

        hash_value = _FNV_OFFSET_BASIS
        for char in normalized:
            hash_value ^= ord(char)
            hash_value = (hash_value * _FNV_PRIME) & 0xFFFFFFFF

        return f"{FILTER_ID_PREFIX}{hash_value:08x}"

    # ------------------------------------------------------------------
    # File system helpers
    # ------------------------------------------------------------------

    @staticmethod
    def read_first_lines(path: Path, max_lines: int) -> List[str]:
        """Read at most `max_lines` lines from the start of a file (bounded byte read)."""
        with path.open("rb") as f:
            raw = f.read(METADATA_SCAN_BYTES)
        content = raw.decode("utf-8-sig", errors="replace")
        return split_lines(content)[:max_lines]

    @staticmethod
    def _list_files(directory: Path) -> List[Path]:
        if not directory.is_dir():
            logger.info(f"Filter directory does not exist: {directory}")
            return []

        try:
            return sorted(p for p in directory.iterdir() if p.is_file())
        except OSError as exc:
            logger.error(f"Failed to scan filter directory {directory}: {exc}")
            return []
