"""
SQLite storage for discovered loot filters and their parsed card rarities.

One connection per Database, shared by the repositories and guarded by a
single threading.RLock, so the service can be driven from worker threads.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from divcards.constants import APP_DIR_NAME, DATABASE_FILE_NAME
from divcards.database.repositories.filter_repository import FilterRepository
from divcards.database.schema import CREATE_SCHEMA_SQL, MIGRATE_V2_SQL, SCHEMA_VERSION

logger = logging.getLogger(__name__)


def default_db_path() -> Path:
    return Path.home() / APP_DIR_NAME / DATABASE_FILE_NAME


class Database:
    """
    Owns the SQLite connection and the repositories built on it.

    Usage:
        with Database() as db:
            db.filters.get_all()
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or default_db_path()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()
        self.conn = self._connect(self.db_path)
        logger.info(f"Database opened: {self.db_path}")

        self._ensure_schema()

        self.filters = FilterRepository(self.conn, self._lock)

    @staticmethod
    def _connect(db_path: Path) -> sqlite3.Connection:
        conn = sqlite3.connect(str(db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        # filter_card_rarities rows are removed with their filter
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Atomic block across repositories; rolls back and re-raises on error."""
        with self._lock:
            try:
                yield self.conn
                self.conn.commit()
            except Exception as exc:
                self.conn.rollback()
                logger.error(f"Transaction failed: {exc}")
                raise

    # ----------------------------------------------------------------------
    # Schema
    # ----------------------------------------------------------------------

    def _ensure_schema(self) -> None:
        version = self._read_schema_version()

        if version == 0:
            logger.info(f"Creating schema v{SCHEMA_VERSION}")
            with self.transaction() as conn:
                conn.executescript(CREATE_SCHEMA_SQL)
                conn.execute(
                    "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
                )
        elif version < SCHEMA_VERSION:
            self._migrate_schema(version)
        elif version > SCHEMA_VERSION:
            logger.warning(
                f"Database schema v{version} is newer than this version supports "
                f"(v{SCHEMA_VERSION})"
            )
        else:
            logger.debug(f"Schema v{version} already in place")

    def _migrate_schema(self, old: int) -> None:
        """
        Bring an older database file up to SCHEMA_VERSION.

        v1 -> v2:
            - Add `has_divination_section` to `filter_metadata`.
        """
        logger.info(f"Migrating schema v{old} → v{SCHEMA_VERSION}")

        with self.transaction() as conn:
            if old < 2:
                conn.executescript(MIGRATE_V2_SQL)
            conn.execute(
                "INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,)
            )

    def _read_schema_version(self) -> int:
        try:
            row = self.conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        except sqlite3.OperationalError:
            # Fresh file: schema_version does not exist yet
            return 0
        return row[0] or 0

    def get_schema_version(self) -> int:
        with self._lock:
            return self._read_schema_version()

    # ----------------------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------------------

    def close(self) -> None:
        try:
            self.conn.close()
        except sqlite3.Error as exc:
            logger.error(f"Failed to close database {self.db_path}: {exc}")

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
