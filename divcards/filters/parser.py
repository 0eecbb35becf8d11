"""
Loot filter parser for divination card rarities.

Turns the text of a Path of Exile loot filter into a card name -> rarity map:

1. Find the Divination Cards section id in the table of contents
2. Jump to the section header in the filter body
3. Parse each `$type->divination $tier->...` block
4. Map tiers to rarities (1-4) and fold them into one map

Community filters vary a lot, so nothing here raises: a missing section,
an empty section or an unreadable file all come back as a valid
ParseResult the caller can use as-is.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Union

from divcards.filters.blocks import parse_tier_blocks
from divcards.filters.models import ParseResult, TierBlock
from divcards.filters.sections import (
    extract_section_lines,
    find_divination_section_id,
    find_section_start,
)
from divcards.filters.tiers import build_rarity_map

logger = logging.getLogger(__name__)

LINE_BREAK_RE = re.compile(r"\r?\n")


def split_lines(content: str) -> List[str]:
    """Split on LF or CRLF, dropping any stray trailing CR."""
    return [line.rstrip("\r") for line in LINE_BREAK_RE.split(content)]


def _divination_section_lines(lines: List[str]) -> Optional[List[str]]:
    """Body of the Divination Cards section, or None if the TOC has no entry."""
    section_id = find_divination_section_id(lines)
    if section_id is None:
        logger.info("No Divination Cards entry in the table of contents")
        return None

    header_index = find_section_start(lines, section_id)
    if header_index == -1:
        # Declared but absent: callers default unmapped cards to common
        logger.info(f"Divination Cards section [[{section_id}]] has no body")
        return []

    section_lines = extract_section_lines(lines, header_index)
    logger.debug(
        f"Divination Cards section [[{section_id}]] starts at line {header_index + 1} "
        f"({len(section_lines)} lines)"
    )
    return section_lines


def extract_tier_blocks(content: str) -> List[TierBlock]:
    """Tier blocks of the Divination Cards section in file order ([] without one)."""
    section_lines = _divination_section_lines(split_lines(content))
    return parse_tier_blocks(section_lines) if section_lines else []


def parse_filter_content(content: str) -> ParseResult:
    """Parse filter text already loaded in memory."""
    section_lines = _divination_section_lines(split_lines(content))
    if section_lines is None:
        return ParseResult.empty(has_divination_section=False)

    tier_blocks = parse_tier_blocks(section_lines)
    card_rarities = build_rarity_map(tier_blocks)

    logger.info(f"Parsed {len(tier_blocks)} tier blocks, {len(card_rarities)} cards mapped")
    return ParseResult(has_divination_section=True, card_rarities=card_rarities)


def read_filter_text(path: Union[str, Path]) -> Optional[str]:
    """
    Filter file text with any UTF-8 BOM dropped, or None if it can't be read.

    Covers missing files, undecodable bytes and unusable paths (e.g. an
    embedded NUL byte).
    """
    try:
        return Path(path).read_text(encoding="utf-8-sig")
    except (OSError, ValueError) as exc:
        # UnicodeDecodeError is a ValueError
        logger.warning(f"Failed to read filter file {path}: {exc}")
        return None


def parse_filter_file(path: Union[str, Path]) -> ParseResult:
    """
    Read and parse a filter file.

    Read failures produce the same empty result as a filter without a
    divination section, so callers have a single fallback path.
    """
    content = read_filter_text(path)
    if content is None:
        return ParseResult.empty(has_divination_section=False)

    return parse_filter_content(content)


class FilterParser:
    """
    Object facade over the module-level parse functions.

    Holds no state between calls; one instance can be shared freely.
    """

    def parse(self, content: str) -> ParseResult:
        return parse_filter_content(content)

    def parse_file(self, path: Union[str, Path]) -> ParseResult:
        return parse_filter_file(path)
