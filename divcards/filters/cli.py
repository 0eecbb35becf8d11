"""
Command-line interface for loot filter rarities.

Provides print utilities and CLI entry point.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from divcards.constants import APP_DIR_NAME, CONFIG_FILE_NAME, DATABASE_FILE_NAME
from divcards.filters.models import DiscoveredFilter, ParseResult, TierBlock
from divcards.filters.parser import (
    extract_tier_blocks,
    parse_filter_content,
    read_filter_text,
)
from divcards.game_version import GameVersion
from divcards.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def print_parse_result(result: ParseResult) -> None:
    """Print one `rarity<TAB>card` row per card, rarest first."""
    if not result.has_divination_section:
        print("No Divination Cards section found.")
        return

    print(f"Divination Cards: {result.total_cards} cards mapped")
    rows = sorted(result.card_rarities.items(), key=lambda kv: (int(kv[1]), kv[0]))
    for card_name, rarity in rows:
        print(f"{int(rarity)}\t{card_name}")


def print_tier_blocks(blocks: List[TierBlock]) -> None:
    print()
    print(f"Tier blocks ({len(blocks)}):")
    for block in blocks:
        rarity = f"rarity {int(block.rarity)}" if block.rarity is not None else "ignored"
        print(f"  {block.tier_name:14} {rarity:9}  {len(block.card_names)} cards")


def tier_blocks_to_dicts(blocks: List[TierBlock]) -> List[Dict[str, Any]]:
    return [
        {
            "tier": block.tier_name,
            "rarity": int(block.rarity) if block.rarity is not None else None,
            "cards": list(block.card_names),
        }
        for block in blocks
    ]


def print_filters(filters: List[DiscoveredFilter]) -> None:
    """Pretty-print stored filters."""
    if not filters:
        print("  No filters found.")
        return

    for f in filters:
        flags = []
        if f.is_fully_parsed:
            flags.append("parsed")
        if f.is_outdated:
            flags.append("outdated")
        flag_str = f" [{', '.join(flags)}]" if flags else ""
        updated = f.last_update or "unknown"
        print(f"  {f.id}  {f.filter_type.value:6}  {f.name}  (updated {updated}){flag_str}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="divcards-filter",
        description="Divination card rarities from Path of Exile loot filters",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  divcards-filter parse NeverSink.filter          # Card rarities from a filter file
  divcards-filter parse NeverSink.filter --json   # Same, as JSON
  divcards-filter parse NeverSink.filter --tiers  # Plus the tier blocks found
  divcards-filter scan --game poe2                # Find installed filters
  divcards-filter list                            # Show stored filters
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress info messages")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Directory for config, database and logs (default: ~/{APP_DIR_NAME})",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    parse_cmd = sub.add_parser("parse", help="Parse a filter file")
    parse_cmd.add_argument("path", type=Path, help="Loot filter file")
    parse_cmd.add_argument("--json", action="store_true", help="Print JSON instead of rows")
    parse_cmd.add_argument("--tiers", action="store_true", help="Also show each divination tier block")

    scan_cmd = sub.add_parser("scan", help="Scan filter folders and store what is found")
    scan_cmd.add_argument(
        "-g", "--game",
        choices=[g.value for g in GameVersion],
        help="Game to scan (default: current game from config)",
    )

    sub.add_parser("list", help="List stored filters")
    return parser


def cli_main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line interface for loot filter rarities."""
    args = _build_parser().parse_args(argv)

    data_dir: Path = args.data_dir or Path.home() / APP_DIR_NAME
    console_level = logging.WARNING if args.quiet else None
    setup_logging(debug=args.verbose, log_dir=data_dir, console_level=console_level)

    if args.command == "parse":
        logger.debug(f"Parsing filter file {args.path}")
        content = read_filter_text(args.path)
        if content is None:
            result = ParseResult.empty(has_divination_section=False)
        else:
            result = parse_filter_content(content)
        blocks = extract_tier_blocks(content) if args.tiers and result.has_divination_section else []

        if args.json:
            data = result.to_dict()
            if args.tiers:
                data["tier_blocks"] = tier_blocks_to_dicts(blocks)
            print(json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False))
        else:
            print_parse_result(result)
            if args.tiers and result.has_divination_section:
                print_tier_blocks(blocks)
        return 0 if result.has_divination_section else 1

    # Import here so `parse` works without touching config/database
    from divcards.config import Config
    from divcards.database import Database
    from divcards.filters.service import FilterService

    config = Config(data_dir / CONFIG_FILE_NAME)
    with Database(data_dir / DATABASE_FILE_NAME) as db:
        service = FilterService(db, config)

        if args.command == "scan":
            game = GameVersion.from_string(args.game) if args.game else None
            scan = service.scan_filters(game=game)
            print(f"Found {scan.local_count} local and {scan.online_count} online filters")
            print_filters(scan.filters)
        else:
            print_filters(service.get_all_filters())

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(cli_main())
