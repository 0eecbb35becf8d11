"""
Tier block parsing for the divination card section of a loot filter.

A tier block looks like:

    Show # $type->divination $tier->t1
        BaseType == "The Doctor" "House of Mirrors"
            "The Apothecary"
        SetFontSize 45

Only the tier tag and the quoted BaseType names matter here; every other
property (colors, sounds, icons...) is skipped.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from divcards.filters.models import CardRarity, TierBlock
from divcards.filters.sections import SHOW_HIDE_RE
from divcards.filters.tiers import map_tier_to_rarity

logger = logging.getLogger(__name__)

# `Show # $type->divination $tier->t1` (Hide blocks are tiers too)
TIER_BLOCK_HEADER_RE = re.compile(
    r"^(?:Show|Hide)\s+#\s*\$type->divination\s+\$tier->(\S+)\s*$",
    re.IGNORECASE,
)
# `BaseType == "A" "B"` or `BaseType "A" "B"`
BASETYPE_LINE_RE = re.compile(r'^BaseType(?=\s|=|"|$)', re.IGNORECASE)
# A line holding nothing but quoted strings (multi-line BaseType), optionally
# followed by a trailing `#` comment whose quotes are not card names
CONTINUATION_LINE_RE = re.compile(r'^((?:"[^"]*"\s*)+)(?:#.*)?$')
QUOTED_STRING_RE = re.compile(r'"([^"]*)"')


@dataclass
class _OpenBlock:
    """Tier block still being filled in."""
    tier_name: str
    rarity: Optional[CardRarity]
    card_names: List[str] = field(default_factory=list)

    def close(self) -> TierBlock:
        return TierBlock(
            tier_name=self.tier_name,
            rarity=self.rarity,
            card_names=tuple(self.card_names),
        )


def extract_card_names(line: str) -> List[str]:
    """
    Every non-empty double-quoted name in `line`, trimmed, left to right.

    Examples:
        'BaseType == "The Doctor" "The Nurse"' -> ["The Doctor", "The Nurse"]
        '    "House of Mirrors"'              -> ["House of Mirrors"]
    """
    names = []
    for raw in QUOTED_STRING_RE.findall(line):
        name = raw.strip()
        if name:
            names.append(name)
    return names


def parse_tier_blocks(lines: Sequence[str]) -> List[TierBlock]:
    """
    Parse the divination tier blocks found in `lines`, in source order.

    A block stays open until the next Show/Hide line or the end of input.
    Card names are collected from BaseType lines and from quoted-only lines
    that directly continue a BaseType line (a trailing `#` comment is
    allowed there); blank and comment lines do not break a continuation,
    any other property line does.
    """
    blocks: List[TierBlock] = []
    current: Optional[_OpenBlock] = None
    collecting_basetype = False

    for line in lines:
        trimmed = line.strip()

        tier_match = TIER_BLOCK_HEADER_RE.match(trimmed)
        if tier_match:
            if current is not None:
                blocks.append(current.close())

            tier_name = tier_match.group(1).lower()
            current = _OpenBlock(tier_name=tier_name, rarity=map_tier_to_rarity(tier_name))
            collecting_basetype = False
            if current.rarity is None:
                logger.debug(f"Tier '{tier_name}' has no rarity; its cards will be ignored")
            continue

        # Any other rule block ends the current tier block
        if SHOW_HIDE_RE.match(trimmed):
            if current is not None:
                blocks.append(current.close())
                current = None
            collecting_basetype = False
            continue

        if current is None:
            continue

        if BASETYPE_LINE_RE.match(trimmed):
            current.card_names.extend(extract_card_names(trimmed))
            collecting_basetype = True
            continue

        continuation = CONTINUATION_LINE_RE.match(trimmed) if collecting_basetype else None
        if continuation:
            current.card_names.extend(extract_card_names(continuation.group(1)))
            continue

        if trimmed and not trimmed.startswith("#"):
            collecting_basetype = False

    if current is not None:
        blocks.append(current.close())

    return blocks
