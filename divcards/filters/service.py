"""
Loot filter service.

Coordinates the filter scanner, parser and database:
- Scanning filter folders and keeping filter_metadata in sync with disk
- Parsing a filter's divination card section and storing the rarities
- Filter selection and rarity source settings (persisted in Config)
- Resolving rarities for a list of cards from the selected filter
"""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from divcards.config import Config
from divcards.constants import MAX_IDENTIFIER_LENGTH
from divcards.database import Database
from divcards.database.repositories import FilterRepository
from divcards.database.utils import ensure_utc, parse_db_timestamp
from divcards.filters.models import (
    CardRarity,
    DiscoveredFilter,
    FilterMetadata,
    FilterParseOutcome,
    FilterScanResult,
    FilterType,
    RaritySource,
)
from divcards.filters.parser import FilterParser
from divcards.filters.scanner import FilterScanner
from divcards.game_version import GameVersion

logger = logging.getLogger(__name__)


class FilterNotFoundError(LookupError):
    """Raised when a filter id is not in the database."""

    def __init__(self, filter_id: str):
        super().__init__(f"Filter not found: {filter_id}")
        self.filter_id = filter_id


def is_filter_outdated(last_update: Optional[str], league_start: Optional[datetime]) -> bool:
    """
    A filter is outdated when it was last updated before the league started.

    Without a league start date nothing is considered outdated; a filter with
    no known update time is.
    """
    if league_start is None:
        return False

    updated = parse_db_timestamp(last_update)
    if updated is None:
        return True

    return ensure_utc(updated) < ensure_utc(league_start)


def to_discovered_filter(
    metadata: FilterMetadata, league_start: Optional[datetime] = None
) -> DiscoveredFilter:
    return DiscoveredFilter(
        id=metadata.id,
        filter_type=metadata.filter_type,
        file_path=metadata.file_path,
        file_name=Path(metadata.file_path).name,
        name=metadata.filter_name,
        last_update=metadata.last_update,
        is_fully_parsed=metadata.is_fully_parsed,
        is_outdated=is_filter_outdated(metadata.last_update, league_start),
    )


class FilterService:
    """Service for loot filter scanning, parsing and rarity lookup."""

    def __init__(
        self,
        database: Database,
        config: Config,
        scanner: Optional[FilterScanner] = None,
        parser: Optional[FilterParser] = None,
    ):
        self._db = database
        self._config = config
        self._scanner = scanner
        self._parser = parser or FilterParser()

    @property
    def repository(self) -> FilterRepository:
        return self._db.filters

    def _get_scanner(self, game: GameVersion) -> FilterScanner:
        if self._scanner is not None:
            return self._scanner
        return FilterScanner(filters_dir=self._config.get_filters_dir(game))

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan_filters(
        self,
        game: Optional[GameVersion] = None,
        league_start: Optional[datetime] = None,
    ) -> FilterScanResult:
        """
        Scan the filter folders of `game` (default: current game).

        1. Read local and online filter folders (metadata only)
        2. Upsert metadata into the database
        3. Remove stored filters that are no longer on disk
        4. Return the stored filters with outdated detection
        """
        if game is None:
            game = self._config.current_game

        logger.info(f"Scanning {game.display_name()} filter folders...")
        scanned = self._get_scanner(game).scan_all(game)
        logger.info(f"Found {len(scanned)} filter files on disk")

        self.repository.upsert_many(
            [
                FilterMetadata(
                    id=FilterScanner.generate_filter_id(s.file_path),
                    filter_type=s.filter_type,
                    file_path=s.file_path,
                    filter_name=s.filter_name,
                    last_update=s.last_update,
                )
                for s in scanned
            ]
        )

        deleted = self.repository.delete_not_in_file_paths([s.file_path for s in scanned])
        if deleted:
            logger.info(f"Cleaned up {deleted} stale filter entries")

        filters = self.get_all_filters(league_start)
        local_count = sum(1 for f in filters if f.filter_type is FilterType.LOCAL)
        online_count = sum(1 for f in filters if f.filter_type is FilterType.ONLINE)

        logger.info(f"Scan complete: {local_count} local, {online_count} online filters")
        return FilterScanResult(
            filters=filters,
            local_count=local_count,
            online_count=online_count,
        )

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def get_all_filters(self, league_start: Optional[datetime] = None) -> List[DiscoveredFilter]:
        return [to_discovered_filter(m, league_start) for m in self.repository.get_all()]

    def get_filter(self, filter_id: str) -> Optional[FilterMetadata]:
        return self.repository.get_by_id(filter_id)

    def _require_filter(self, filter_id: str) -> FilterMetadata:
        metadata = self.repository.get_by_id(filter_id)
        if metadata is None:
            raise FilterNotFoundError(filter_id)
        return metadata

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_filter(self, filter_id: str) -> FilterParseOutcome:
        """
        Parse a stored filter and persist its card rarities.

        A filter without a divination section stores nothing; callers fall
        back to price-based rarities.
        """
        metadata = self._require_filter(filter_id)
        logger.info(f"Parsing filter \"{metadata.filter_name}\" ({filter_id})...")

        result = self._parser.parse_file(metadata.file_path)

        if not result.has_divination_section:
            logger.info(
                f"Filter \"{metadata.filter_name}\" has no divination card section"
            )
            return FilterParseOutcome(
                filter_id=filter_id,
                filter_name=metadata.filter_name,
                has_divination_section=False,
            )

        self.repository.replace_card_rarities(filter_id, result.card_rarities)
        self.repository.mark_as_parsed(filter_id, has_divination_section=True)

        logger.info(
            f"Parsed \"{metadata.filter_name}\": {result.total_cards} cards mapped"
        )
        return FilterParseOutcome(
            filter_id=filter_id,
            filter_name=metadata.filter_name,
            has_divination_section=True,
            rarities=dict(result.card_rarities),
        )

    def ensure_filter_parsed(self, filter_id: str) -> Optional[FilterParseOutcome]:
        """
        Stored rarities for a parsed filter, parsing it first if needed.

        Returns None for unknown filter ids.
        """
        metadata = self.repository.get_by_id(filter_id)
        if metadata is None:
            return None

        if metadata.is_fully_parsed:
            return FilterParseOutcome(
                filter_id=filter_id,
                filter_name=metadata.filter_name,
                has_divination_section=metadata.has_divination_section,
                rarities=self.repository.get_card_rarities(filter_id),
            )

        return self.parse_filter(filter_id)

    # ------------------------------------------------------------------
    # Rarity lookup / edits
    # ------------------------------------------------------------------

    def resolve_card_rarities(
        self, filter_id: str, card_names: Iterable[str]
    ) -> Dict[str, CardRarity]:
        """
        Rarity for each card according to a filter.

        Cards the filter does not mention are common.
        """
        outcome = self.ensure_filter_parsed(filter_id)
        if outcome is None:
            raise FilterNotFoundError(filter_id)

        return {
            name: outcome.rarities.get(name, CardRarity.COMMON)
            for name in card_names
        }

    def update_card_rarity(self, filter_id: str, card_name: str, rarity: int) -> bool:
        """Override one card's rarity in a parsed filter."""
        if not card_name or len(card_name) > MAX_IDENTIFIER_LENGTH:
            raise ValueError(f"Invalid card name: {card_name!r}")
        if isinstance(rarity, bool) or not isinstance(rarity, int) or not 1 <= rarity <= 4:
            raise ValueError(f"Rarity must be an integer from 1 to 4, got {rarity!r}")

        self._require_filter(filter_id)
        updated = self.repository.update_card_rarity(filter_id, card_name, rarity)
        if updated:
            logger.info(f"Updated card rarity: \"{card_name}\" → {rarity} in filter {filter_id}")
        else:
            logger.warning(f"Card \"{card_name}\" is not stored for filter {filter_id}")
        return updated

    # ------------------------------------------------------------------
    # Selection / rarity source
    # ------------------------------------------------------------------

    def select_filter(self, filter_id: Optional[str]) -> None:
        """Select a filter as the rarity source, or clear the selection with None."""
        if filter_id is not None:
            metadata = self._require_filter(filter_id)
            logger.info(f"Selected filter: \"{metadata.filter_name}\" ({filter_id})")
        else:
            logger.info("Cleared filter selection")

        self._config.selected_filter_id = filter_id

    def get_selected_filter(self) -> Optional[FilterMetadata]:
        selected = self._config.selected_filter_id
        if not selected:
            return None
        return self.repository.get_by_id(selected)

    def get_rarity_source(self) -> RaritySource:
        return self._config.rarity_source

    def set_rarity_source(self, source: Union[str, RaritySource]) -> None:
        if isinstance(source, RaritySource):
            parsed: Optional[RaritySource] = source
        else:
            parsed = RaritySource.from_string(str(source))
        if parsed is None:
            raise ValueError(f"Invalid rarity source: {source}")

        logger.info(f"Rarity source changed to: {parsed.value}")
        self._config.rarity_source = parsed
