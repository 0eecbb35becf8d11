"""
Filter repository for loot filter metadata and parsed card rarities.

Tables:
- filter_metadata: one row per discovered filter file
- filter_card_rarities: card -> rarity rows produced by parsing a filter
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Dict, List, Mapping, Optional, Sequence

from divcards.database.repositories.base_repository import BaseRepository
from divcards.database.utils import utc_now_str
from divcards.filters.models import CardRarity, FilterMetadata, FilterType

logger = logging.getLogger(__name__)


def _row_to_metadata(row: sqlite3.Row) -> FilterMetadata:
    return FilterMetadata(
        id=row["id"],
        filter_type=FilterType(row["filter_type"]),
        file_path=row["file_path"],
        filter_name=row["filter_name"],
        last_update=row["last_update"],
        is_fully_parsed=bool(row["is_fully_parsed"]),
        has_divination_section=bool(row["has_divination_section"]),
        parsed_at=row["parsed_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class FilterRepository(BaseRepository):
    """Repository for filter metadata and filter card rarity operations."""

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def upsert_many(self, filters: Sequence[FilterMetadata]) -> None:
        """
        Insert or update filter metadata rows by id.

        An existing row keeps its parse state unless `last_update` changed,
        in which case the filter is flagged for re-parsing.
        """
        if not filters:
            return

        now = utc_now_str()
        self._execute_many(
            """
            INSERT INTO filter_metadata
                (id, filter_type, file_path, filter_name, last_update,
                 is_fully_parsed, has_divination_section, parsed_at,
                 created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                filter_type = excluded.filter_type,
                file_path = excluded.file_path,
                filter_name = excluded.filter_name,
                is_fully_parsed = CASE
                    WHEN filter_metadata.last_update IS excluded.last_update
                    THEN filter_metadata.is_fully_parsed ELSE 0 END,
                has_divination_section = CASE
                    WHEN filter_metadata.last_update IS excluded.last_update
                    THEN filter_metadata.has_divination_section ELSE 0 END,
                parsed_at = CASE
                    WHEN filter_metadata.last_update IS excluded.last_update
                    THEN filter_metadata.parsed_at ELSE NULL END,
                last_update = excluded.last_update,
                updated_at = excluded.updated_at
            """,
            [
                (
                    f.id,
                    f.filter_type.value,
                    f.file_path,
                    f.filter_name,
                    f.last_update,
                    int(f.is_fully_parsed),
                    int(f.has_divination_section),
                    f.parsed_at,
                    now,
                    now,
                )
                for f in filters
            ],
        )

    def get_all(self) -> List[FilterMetadata]:
        """All stored filters, local first, then by name."""
        rows = self._fetchall(
            """
            SELECT * FROM filter_metadata
            ORDER BY filter_type ASC, filter_name COLLATE NOCASE ASC
            """
        )
        return [_row_to_metadata(row) for row in rows]

    def get_by_id(self, filter_id: str) -> Optional[FilterMetadata]:
        row = self._fetchone(
            "SELECT * FROM filter_metadata WHERE id = ?", (filter_id,)
        )
        return _row_to_metadata(row) if row else None

    def delete_not_in_file_paths(self, file_paths: Sequence[str]) -> int:
        """
        Remove filters whose file is no longer on disk.

        Their card rarities go with them (ON DELETE CASCADE).

        Returns:
            Number of filters deleted
        """
        if file_paths:
            placeholders = ", ".join("?" for _ in file_paths)
            cursor = self._execute(
                f"DELETE FROM filter_metadata WHERE file_path NOT IN ({placeholders})",
                tuple(file_paths),
            )
        else:
            cursor = self._execute("DELETE FROM filter_metadata")
        return cursor.rowcount

    def mark_as_parsed(self, filter_id: str, has_divination_section: bool = True) -> None:
        now = utc_now_str()
        self._execute(
            """
            UPDATE filter_metadata
            SET is_fully_parsed = 1, has_divination_section = ?,
                parsed_at = ?, updated_at = ?
            WHERE id = ?
            """,
            (int(has_divination_section), now, now, filter_id),
        )

    # ------------------------------------------------------------------
    # Card rarities
    # ------------------------------------------------------------------

    def replace_card_rarities(self, filter_id: str, rarities: Mapping[str, int]) -> None:
        """Atomically replace every stored card rarity for a filter."""
        with self.transaction() as conn:
            conn.execute(
                "DELETE FROM filter_card_rarities WHERE filter_id = ?", (filter_id,)
            )
            conn.executemany(
                """
                INSERT INTO filter_card_rarities (filter_id, card_name, rarity)
                VALUES (?, ?, ?)
                """,
                [(filter_id, name, int(rarity)) for name, rarity in rarities.items()],
            )
        logger.debug(f"Stored {len(rarities)} card rarities for {filter_id}")

    def get_card_rarities(self, filter_id: str) -> Dict[str, CardRarity]:
        rows = self._fetchall(
            """
            SELECT card_name, rarity FROM filter_card_rarities
            WHERE filter_id = ?
            ORDER BY card_name ASC
            """,
            (filter_id,),
        )
        return {row["card_name"]: CardRarity(row["rarity"]) for row in rows}

    def update_card_rarity(self, filter_id: str, card_name: str, rarity: int) -> bool:
        """
        Change one card's rarity within a parsed filter.

        Returns:
            True if a stored row was updated
        """
        cursor = self._execute(
            """
            UPDATE filter_card_rarities SET rarity = ?
            WHERE filter_id = ? AND card_name = ?
            """,
            (int(rarity), filter_id, card_name),
        )
        return cursor.rowcount > 0
