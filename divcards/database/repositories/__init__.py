"""
Database repositories package.

Each repository handles one domain and inherits from BaseRepository for
thread-safe execution.

Public API:
- BaseRepository: Base class for all repositories
- FilterRepository: Filter metadata and per-filter card rarities
"""
from divcards.database.repositories.base_repository import BaseRepository
from divcards.database.repositories.filter_repository import FilterRepository

__all__ = [
    "BaseRepository",
    "FilterRepository",
]
