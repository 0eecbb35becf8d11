"""
Application-wide constants for the divination card rarity tool.

Centralizes magic numbers and file-system conventions to improve maintainability.
"""

# =============================================================================
# Application Directories
# =============================================================================

# Per-user application directory (under the home directory)
APP_DIR_NAME = ".divcards"

# Files stored inside the application directory
CONFIG_FILE_NAME = "config.json"
DATABASE_FILE_NAME = "data.db"
LOG_FILE_NAME = "divcards.log"


# =============================================================================
# Logging
# =============================================================================

# Rotate the log file at ~1 MB, keeping 3 backups
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3


# =============================================================================
# Loot Filter Discovery
# =============================================================================

# Local filters are "<name>.filter" files in the game's documents folder
LOCAL_FILTER_EXTENSION = ".filter"

# Online filters live in this subdirectory and have no file extension
ONLINE_FILTERS_SUBDIR = "OnlineFilters"

# Online filter headers (#name:, #lastUpdate:) sit within the first few lines
METADATA_SCAN_LINE_LIMIT = 50

# Upper bound on bytes read when looking for online filter headers
METADATA_SCAN_BYTES = 8192

# Prefix for deterministic filter ids derived from the file path
FILTER_ID_PREFIX = "filter_"


# =============================================================================
# Validation Limits
# =============================================================================

# Longest card name / filter id accepted from callers
MAX_IDENTIFIER_LENGTH = 256
