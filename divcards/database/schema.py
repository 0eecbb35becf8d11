"""
SQLite schema for filter metadata and per-filter card rarities.
"""

# Stored in schema_version; bump when the tables below change.
SCHEMA_VERSION = 2

# Applied once to a fresh database file
CREATE_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS filter_metadata (
    id TEXT PRIMARY KEY,
    filter_type TEXT NOT NULL CHECK(filter_type IN ('local', 'online')),
    file_path TEXT NOT NULL UNIQUE,
    filter_name TEXT NOT NULL,
    last_update TEXT,
    is_fully_parsed INTEGER NOT NULL DEFAULT 0,
    has_divination_section INTEGER NOT NULL DEFAULT 0,
    parsed_at TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_filter_metadata_type
    ON filter_metadata(filter_type);

CREATE TABLE IF NOT EXISTS filter_card_rarities (
    filter_id TEXT NOT NULL,
    card_name TEXT NOT NULL,
    rarity INTEGER NOT NULL CHECK(rarity >= 1 AND rarity <= 4),
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (filter_id, card_name),
    FOREIGN KEY (filter_id) REFERENCES filter_metadata(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_filter_card_rarities_card
    ON filter_card_rarities(card_name);
"""

# v1 -> v2: whether the last parse found a divination section (a declared
# section can hold no cards)
MIGRATE_V2_SQL = """
ALTER TABLE filter_metadata
    ADD COLUMN has_divination_section INTEGER NOT NULL DEFAULT 0;

-- v1 only marked filters with a section as parsed
UPDATE filter_metadata SET has_divination_section = 1 WHERE is_fully_parsed = 1;
"""
