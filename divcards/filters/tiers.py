"""
Filter tier to card rarity mapping.

| Filter tier     | Rarity | Meaning          |
|-----------------|--------|------------------|
| t1              | 1      | Extremely rare   |
| t2, t3, tnew    | 2      | Rare             |
| t4c             | 3      | Less common      |
| t5c, t4, t5     | 4      | Common           |
| restex          | 4      | Common           |
| exstack         | -      | Ignored (stacks) |
| excustomstack   | -      | Ignored (stacks) |
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from divcards.filters.models import CardRarity, CardRarityMap, TierBlock

logger = logging.getLogger(__name__)

# NOTE: Treated as immutable. Hand out copies via get_tier_mapping().
_TIER_TO_RARITY: Dict[str, Optional[CardRarity]] = {
    "t1": CardRarity.EXTREMELY_RARE,
    "t2": CardRarity.RARE,
    "t3": CardRarity.RARE,
    "tnew": CardRarity.RARE,  # new / not yet tiered cards
    "t4c": CardRarity.LESS_COMMON,
    "t5c": CardRarity.COMMON,
    "t4": CardRarity.COMMON,
    "t5": CardRarity.COMMON,
    "restex": CardRarity.COMMON,
    # Stack-size rules repeat cards from the real tiers
    "exstack": None,
    "excustomstack": None,
}


def map_tier_to_rarity(tier_name: str) -> Optional[CardRarity]:
    """Rarity for a filter tier tag (any case), or None for ignored/unknown tiers."""
    return _TIER_TO_RARITY.get(tier_name.lower())


def get_tier_mapping() -> Dict[str, Optional[CardRarity]]:
    """Return a fresh copy of the tier -> rarity table."""
    return dict(_TIER_TO_RARITY)


def build_rarity_map(tier_blocks: Iterable[TierBlock]) -> CardRarityMap:
    """
    Fold tier blocks into a single card -> rarity map.

    Blocks of ignored tiers contribute nothing. When a card shows up in
    several tiers the lowest (most rare) value wins, so the result does not
    depend on block order.
    """
    rarity_map: CardRarityMap = {}

    for block in tier_blocks:
        if block.rarity is None:
            logger.debug(f"Skipping ignored tier '{block.tier_name}' ({len(block.card_names)} cards)")
            continue

        for card_name in block.card_names:
            existing = rarity_map.get(card_name)
            if existing is None or block.rarity < existing:
                rarity_map[card_name] = block.rarity

    return rarity_map
