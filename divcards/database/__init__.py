"""
Database Package.

This package provides SQLite-backed persistence for loot filter data.

Public API:
- Database: Main database class (exposes the `filters` repository)
- SCHEMA_VERSION: Current schema version number

Example:
    from divcards.database import Database
    db = Database()
    db.filters.get_all()
"""
from divcards.database.base import Database
from divcards.database.schema import SCHEMA_VERSION

__all__ = [
    "Database",
    "SCHEMA_VERSION",
]
