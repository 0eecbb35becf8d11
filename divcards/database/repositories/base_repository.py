"""
Shared plumbing for repositories.

Every repository works on the Database's single connection and serialises
access through the Database's RLock.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

# Type alias for SQL parameters
SqlParams = Union[Tuple[()], Tuple[object, ...]]


class BaseRepository:
    """Base class holding the shared connection and lock."""

    def __init__(self, conn: sqlite3.Connection, lock: threading.RLock):
        self._conn = conn
        self._lock = lock

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Run several statements atomically:

            with repo.transaction() as conn:
                conn.execute("DELETE ...")
                conn.executemany("INSERT ...", rows)

        Commits on success; rolls back, logs and re-raises on error.
        """
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except Exception as exc:
                self._conn.rollback()
                logger.error(f"Transaction failed: {exc}")
                raise

    def _execute(self, sql: str, params: SqlParams = ()) -> sqlite3.Cursor:
        """Single write statement, committed immediately."""
        with self.transaction() as conn:
            return conn.execute(sql, params)

    def _execute_many(self, sql: str, rows: Iterable[Sequence[object]]) -> int:
        """Same statement for every row, all-or-nothing. Returns rows affected."""
        with self.transaction() as conn:
            return conn.executemany(sql, rows).rowcount

    def _fetchone(self, sql: str, params: SqlParams = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    def _fetchall(self, sql: str, params: SqlParams = ()) -> List[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()
