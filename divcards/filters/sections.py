"""
Locates the divination card section of a loot filter.

Filters such as NeverSink's open with a table of contents:

    # [WELCOME] TABLE OF CONTENTS
    # [[4200]] Divination Cards
    # [[4300]] Unique Maps

and later repeat the same `[[ID]]` header right before that section's rule
blocks. The id is looked up in the TOC, then the body is found by searching
for the header again.
"""
from __future__ import annotations

import logging
import re
from typing import List, Optional, Pattern, Sequence

logger = logging.getLogger(__name__)

TOC_START_MARKER = "TABLE OF CONTENTS"

# `# [[4200]] Divination Cards`
TOC_DIVINATION_RE = re.compile(
    r"^#\s*\[\[([^\[\]\s]+)\]\]\s*Divination\s+Cards\s*$", re.IGNORECASE
)
# Any section header, e.g. `# [[4300]] Unique Maps`
SECTION_HEADER_RE = re.compile(r"^#\s*\[\[[^\[\]]+\]\]")
# Start of a rule block
SHOW_HIDE_RE = re.compile(r"^(?:Show|Hide)(?:\s|$)", re.IGNORECASE)


def _section_header_re(section_id: str) -> Pattern[str]:
    return re.compile(
        rf"^#\s*\[\[{re.escape(section_id)}\]\]\s*Divination\s+Cards\s*$",
        re.IGNORECASE,
    )


def find_divination_section_id(lines: Sequence[str]) -> Optional[str]:
    """
    Return the Divination Cards section id listed in the table of contents.

    Lines before the TOC marker are never considered, and the search stops at
    the first Show/Hide rule so headers inside the filter body are not
    mistaken for TOC entries.
    """
    in_toc = False

    for line in lines:
        trimmed = line.strip()

        if not in_toc:
            if TOC_START_MARKER in trimmed.upper():
                in_toc = True
            continue

        match = TOC_DIVINATION_RE.match(trimmed)
        if match:
            return match.group(1)

        if SHOW_HIDE_RE.match(trimmed):
            break

    return None


def find_section_start(lines: Sequence[str], section_id: str) -> int:
    """
    Index of the section header for `section_id`, or -1.

    The TOC entry and the real header are identical text, so the LAST match
    is the one that precedes the section's rule blocks.
    """
    header_re = _section_header_re(section_id)
    last_match = -1

    for index, line in enumerate(lines):
        if header_re.match(line.strip()):
            last_match = index

    return last_match


def extract_section_lines(lines: Sequence[str], header_index: int) -> List[str]:
    """Lines after `header_index` up to the next section header (or EOF)."""
    section_lines: List[str] = []

    for line in lines[header_index + 1:]:
        if SECTION_HEADER_RE.match(line.strip()):
            break
        section_lines.append(line)

    return section_lines
