"""
divcards.filters - Divination card rarities from Path of Exile loot filters.

Parses the Divination Cards section of a loot filter (NeverSink-style
table of contents + `$type->divination $tier->...` blocks) into a
card name -> rarity map, and discovers filters installed for a game.

Usage:
    from divcards.filters import parse_filter_file

    result = parse_filter_file("NeverSink's filter - 3-STRICT.filter")
    if result.has_divination_section:
        print(result.card_rarities["The Doctor"])  # CardRarity.EXTREMELY_RARE

Service-level operations (database, config) live in
divcards.filters.service.
"""
from __future__ import annotations

# Models
from divcards.filters.models import (
    CardRarity,
    CardRarityMap,
    FilterType,
    ParseResult,
    RaritySource,
    TierBlock,
)

# Tier mapping
from divcards.filters.tiers import (
    build_rarity_map,
    get_tier_mapping,
    map_tier_to_rarity,
)

# Section location / block parsing
from divcards.filters.sections import (
    extract_section_lines,
    find_divination_section_id,
    find_section_start,
)
from divcards.filters.blocks import extract_card_names, parse_tier_blocks

# Parser
from divcards.filters.parser import (
    FilterParser,
    extract_tier_blocks,
    parse_filter_content,
    parse_filter_file,
    read_filter_text,
)

# Scanner
from divcards.filters.scanner import FilterScanner

__all__ = [
    "CardRarity",
    "CardRarityMap",
    "FilterParser",
    "FilterScanner",
    "FilterType",
    "ParseResult",
    "RaritySource",
    "TierBlock",
    "build_rarity_map",
    "extract_card_names",
    "extract_section_lines",
    "extract_tier_blocks",
    "find_divination_section_id",
    "find_section_start",
    "get_tier_mapping",
    "map_tier_to_rarity",
    "parse_filter_content",
    "parse_filter_file",
    "parse_tier_blocks",
    "read_filter_text",
]
