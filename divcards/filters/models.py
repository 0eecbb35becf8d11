"""
Data models for loot filter parsing and filter bookkeeping.

Contains the rarity levels, parsed tier blocks, parse results and the
metadata records stored for discovered filter files.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple


class CardRarity(IntEnum):
    """Rarity level assigned to a divination card (1 = most valuable)."""
    EXTREMELY_RARE = 1
    RARE = 2
    LESS_COMMON = 3
    COMMON = 4

    def display_name(self) -> str:
        return self.name.replace("_", " ").title()


class FilterType(Enum):
    """Where a filter file was found."""
    LOCAL = "local"
    ONLINE = "online"

    def __str__(self) -> str:
        return self.value


class RaritySource(Enum):
    """Source used to determine divination card rarities."""
    POE_NINJA = "poe.ninja"
    FILTER = "filter"
    PROHIBITED_LIBRARY = "prohibited-library"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: str) -> Optional["RaritySource"]:
        value_lower = value.lower().strip()
        for source in cls:
            if source.value == value_lower:
                return source
        return None


# Card name -> rarity, as produced by the filter parser
CardRarityMap = Dict[str, CardRarity]


@dataclass(frozen=True)
class TierBlock:
    """One `Show # $type->divination $tier->...` block of a loot filter."""
    tier_name: str
    rarity: Optional[CardRarity]
    card_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ParseResult:
    """
    Result of parsing a filter's divination card section.

    `total_cards` is derived from `card_rarities` so the two can never disagree.
    """
    has_divination_section: bool
    card_rarities: CardRarityMap = field(default_factory=dict)

    @property
    def total_cards(self) -> int:
        return len(self.card_rarities)

    @classmethod
    def empty(cls, has_divination_section: bool = False) -> "ParseResult":
        return cls(has_divination_section=has_divination_section, card_rarities={})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary for JSON output."""
        return {
            "has_divination_section": self.has_divination_section,
            "total_cards": self.total_cards,
            "card_rarities": {name: int(r) for name, r in self.card_rarities.items()},
        }


# ----------------------------------------------------------------------
# Filter bookkeeping
# ----------------------------------------------------------------------


@dataclass
class ScannedFilter:
    """Metadata read from a filter file on disk (no full parse)."""
    filter_type: FilterType
    file_path: str
    filter_name: str
    last_update: Optional[str] = None


@dataclass
class FilterMetadata:
    """A filter row as stored in the database."""
    id: str
    filter_type: FilterType
    file_path: str
    filter_name: str
    last_update: Optional[str] = None
    is_fully_parsed: bool = False
    has_divination_section: bool = False
    parsed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filter_type": self.filter_type.value,
            "file_path": self.file_path,
            "filter_name": self.filter_name,
            "last_update": self.last_update,
            "is_fully_parsed": self.is_fully_parsed,
            "has_divination_section": self.has_divination_section,
            "parsed_at": self.parsed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class DiscoveredFilter:
    """A stored filter as presented to callers listing available filters."""
    id: str
    filter_type: FilterType
    file_path: str
    file_name: str
    name: str
    last_update: Optional[str]
    is_fully_parsed: bool
    is_outdated: bool


@dataclass
class FilterScanResult:
    """Summary of a filter folder scan."""
    filters: List[DiscoveredFilter] = field(default_factory=list)
    local_count: int = 0
    online_count: int = 0


@dataclass
class FilterParseOutcome:
    """Parsed (or cached) rarities for one stored filter."""
    filter_id: str
    filter_name: str
    has_divination_section: bool
    rarities: Dict[str, CardRarity] = field(default_factory=dict)

    @property
    def total_cards(self) -> int:
        return len(self.rarities)
