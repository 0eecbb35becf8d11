"""
Tests for divcards/filters/parser.py

End-to-end parsing of loot filter text and files into card rarities.
"""
import logging

import pytest

from divcards.filters.models import CardRarity, ParseResult
from divcards.filters.parser import (
    FilterParser,
    extract_tier_blocks,
    parse_filter_content,
    parse_filter_file,
    read_filter_text,
    split_lines,
)
from tests.conftest_utils import (
    make_filter_content,
    make_filter_with_missing_section_body,
    make_filter_without_divination,
)

pytestmark = pytest.mark.unit


# A trimmed-down NeverSink layout: decorated headers, a non-tier rule block
# in the same section, multi-line BaseType lists and stack-size tiers.
NEVERSINK_SAMPLE = """\
#===============================================================================================================
# NeverSink's Indepth Loot Filter - for Path of Exile
#===============================================================================================================
# VERSION:  8.15.0
# TYPE:     1-REGULAR
#
#===============================================================================================================
# [WELCOME] TABLE OF CONTENTS + QUICKJUMP TABLE
#===============================================================================================================
#
# [[0100]] Global overriding rules
# [[4200]] Divination Cards
# [[4300]] Currency - Stackable
#
#===============================================================================================================
# [[0100]] Global overriding rules
#===============================================================================================================

Show # %D5 $type->uniques $tier->t1
	Rarity Unique
	BaseType == "Astral Plate"

#===============================================================================================================
# [[4200]] Divination Cards
#===============================================================================================================

Show # $type->divination $tier->exstack
	StackSize >= 3
	Class == "Divination Cards"
	BaseType == "Emperor's Luck" "The Gambler"
	SetFontSize 45

Show # $type->divination $tier->t1
	Class == "Divination Cards"
	BaseType == "Abandoned Wealth" "House of Mirrors" "The Doctor"
		"The Fiend" "Unrequited Love"
	SetFontSize 45
	PlayAlertSound 6 300

Show # $type->divination $tier->t2
	Class == "Divination Cards"
	BaseType == "Chaotic Disposition" "The Nurse" "The Sephirot"
	SetFontSize 45

Show # $type->divination $tier->t3
	Class == "Divination Cards"
	BaseType == "Emperor's Luck" "The Cartographer" "The Wretched"
	SetFontSize 40

Show # $type->divination $tier->tnew
	Class == "Divination Cards"
	BaseType == "A Brand New Card"

Show # $type->divination $tier->t4c
	Class == "Divination Cards"
	BaseType == "Rain of Chaos" "The Gambler"

Show # $type->divination $tier->t5c
	Class == "Divination Cards"
	BaseType == "The Carrion Crow" "The Hermit" "The Scarred Meadow"

Show # Divination cards fallback without tier tag
	Class == "Divination Cards"
	BaseType == "Untiered Card"

Show # $type->divination $tier->restex
	Class == "Divination Cards"
	BaseType == "Her Mask" "The Scholar"

Hide # $type->divination $tier->t5
	Class == "Divination Cards"
	BaseType == "Lantador's Lost Love" "The Lover"

#===============================================================================================================
# [[4300]] Currency - Stackable
#===============================================================================================================

Show # $type->currency $tier->t1
	BaseType == "Mirror of Kalandra"
"""


class TestSplitLines:

    def test_lf_and_crlf(self):
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]

    def test_trailing_newline_gives_empty_last_line(self):
        assert split_lines("a\n") == ["a", ""]

    def test_empty_string(self):
        assert split_lines("") == [""]


class TestParseFilterContent:

    def test_parses_valid_filter(self):
        result = parse_filter_content(make_filter_content())

        assert result.has_divination_section is True
        assert result.total_cards == 9
        assert result.card_rarities == {
            "The Doctor": 1,
            "House of Mirrors": 1,
            "The Nurse": 2,
            "The Fiend": 2,
            "The Cartographer": 2,
            "The Wretched": 2,
            "Rain of Chaos": 3,
            "The Carrion Crow": 4,
            "The Hermit": 4,
        }

    def test_rarities_are_card_rarity_members(self):
        result = parse_filter_content(make_filter_content())
        assert result.card_rarities["The Doctor"] is CardRarity.EXTREMELY_RARE

    def test_no_divination_toc_entry(self):
        result = parse_filter_content(make_filter_without_divination())

        assert result == ParseResult(has_divination_section=False)
        assert result.total_cards == 0

    def test_declared_section_without_tier_blocks(self):
        result = parse_filter_content(make_filter_with_missing_section_body())

        assert result.has_divination_section is True
        assert result.total_cards == 0
        assert result.card_rarities == {}

    def test_empty_content(self):
        result = parse_filter_content("")

        assert result.has_divination_section is False
        assert result.total_cards == 0

    def test_stops_at_next_section(self):
        content = make_filter_content(
            tiers=[("t1", ["The Doctor"])], extra_sections_after=True
        )

        result = parse_filter_content(content)

        assert result.card_rarities == {"The Doctor": CardRarity.EXTREMELY_RARE}
        assert "Maze of the Minotaur" not in result.card_rarities

    def test_all_tier_types(self):
        content = make_filter_content(tiers=[
            ("t1", ["Card T1"]),
            ("t2", ["Card T2"]),
            ("t3", ["Card T3"]),
            ("tnew", ["Card TNew"]),
            ("t4c", ["Card T4C"]),
            ("t5c", ["Card T5C"]),
            ("t4", ["Card T4"]),
            ("t5", ["Card T5"]),
            ("restex", ["Card RestEx"]),
        ])

        result = parse_filter_content(content)

        assert result.card_rarities == {
            "Card T1": 1,
            "Card T2": 2,
            "Card T3": 2,
            "Card TNew": 2,
            "Card T4C": 3,
            "Card T5C": 4,
            "Card T4": 4,
            "Card T5": 4,
            "Card RestEx": 4,
        }

    def test_skips_ignored_tiers(self):
        content = make_filter_content(tiers=[
            ("exstack", ["Stack Card 1"]),
            ("excustomstack", ["Stack Card 2"]),
            ("t1", ["The Doctor"]),
        ])

        result = parse_filter_content(content)

        assert result.total_cards == 1
        assert "Stack Card 1" not in result.card_rarities
        assert "Stack Card 2" not in result.card_rarities

    def test_crlf_line_endings(self):
        content = make_filter_content(tiers=[("t1", ["The Doctor"])]).replace("\n", "\r\n")

        result = parse_filter_content(content)

        assert result.has_divination_section is True
        assert result.card_rarities == {"The Doctor": CardRarity.EXTREMELY_RARE}

    def test_custom_section_id(self):
        content = make_filter_content(section_id="9999", tiers=[("t1", ["Custom ID Card"])])

        result = parse_filter_content(content)

        assert result.card_rarities == {"Custom ID Card": CardRarity.EXTREMELY_RARE}

    def test_result_does_not_depend_on_tier_order(self):
        tiers = [
            ("t5", ["The Doctor", "The Hermit"]),
            ("t1", ["The Doctor"]),
            ("t4c", ["The Hermit"]),
        ]

        forward = parse_filter_content(make_filter_content(tiers=tiers))
        backward = parse_filter_content(make_filter_content(tiers=list(reversed(tiers))))

        assert forward == backward
        assert forward.card_rarities == {"The Doctor": 1, "The Hermit": 3}

    def test_neversink_layout(self):
        result = parse_filter_content(NEVERSINK_SAMPLE)

        assert result.has_divination_section is True
        assert result.total_cards == 21
        assert result.card_rarities["The Doctor"] == CardRarity.EXTREMELY_RARE
        assert result.card_rarities["Unrequited Love"] == CardRarity.EXTREMELY_RARE
        assert result.card_rarities["The Sephirot"] == CardRarity.RARE
        assert result.card_rarities["A Brand New Card"] == CardRarity.RARE
        assert result.card_rarities["Her Mask"] == CardRarity.COMMON
        assert result.card_rarities["The Lover"] == CardRarity.COMMON
        # exstack repeats cards from real tiers; those keep their real tier
        assert result.card_rarities["Emperor's Luck"] == CardRarity.RARE
        assert result.card_rarities["The Gambler"] == CardRarity.LESS_COMMON
        # Rules outside the tier blocks / section
        assert "Untiered Card" not in result.card_rarities
        assert "Astral Plate" not in result.card_rarities
        assert "Mirror of Kalandra" not in result.card_rarities

    def test_logs_summary(self, caplog):
        with caplog.at_level(logging.INFO, logger="divcards.filters.parser"):
            parse_filter_content(make_filter_content())

        assert "9 cards mapped" in caplog.text


class TestParseFilterFile:

    def test_reads_file(self, tmp_path):
        path = tmp_path / "NeverSink.filter"
        path.write_text(make_filter_content(), encoding="utf-8")

        result = parse_filter_file(path)

        assert result.has_divination_section is True
        assert result.total_cards == 9

    def test_accepts_string_path(self, tmp_path):
        path = tmp_path / "NeverSink.filter"
        path.write_text(make_filter_content(), encoding="utf-8")

        assert parse_filter_file(str(path)).total_cards == 9

    def test_strips_utf8_bom(self, tmp_path):
        path = tmp_path / "bom.filter"
        path.write_bytes(b"\xef\xbb\xbf" + make_filter_content().encode("utf-8"))

        assert parse_filter_file(path).total_cards == 9

    def test_missing_file_returns_empty_result(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="divcards.filters.parser"):
            result = parse_filter_file(tmp_path / "missing.filter")

        assert result == ParseResult(has_divination_section=False)
        assert "Failed to read filter file" in caplog.text

    def test_undecodable_file_returns_empty_result(self, tmp_path):
        path = tmp_path / "binary.filter"
        path.write_bytes(b"\xff\xfe\x00\x81 not utf-8")

        assert parse_filter_file(path) == ParseResult(has_divination_section=False)

    def test_unusable_path_returns_empty_result(self, caplog):
        with caplog.at_level(logging.WARNING, logger="divcards.filters.parser"):
            result = parse_filter_file("bad\x00name.filter")

        assert result == ParseResult(has_divination_section=False)
        assert "Failed to read filter file" in caplog.text

    def test_read_filter_text_unusable_path_is_none(self):
        assert read_filter_text("bad\x00name.filter") is None


class TestFilterParser:

    def test_parse_matches_function(self, parser):
        content = make_filter_content()
        assert parser.parse(content) == parse_filter_content(content)

    def test_parse_file(self, parser, tmp_path):
        path = tmp_path / "x.filter"
        path.write_text(make_filter_content(tiers=[("t2", ["The Nurse"])]), encoding="utf-8")

        assert parser.parse_file(path).card_rarities == {"The Nurse": CardRarity.RARE}

    def test_instance_is_reusable(self):
        parser = FilterParser()
        first = parser.parse(make_filter_content(tiers=[("t1", ["A"])]))
        second = parser.parse(make_filter_content(tiers=[("t2", ["B"])]))

        assert first.card_rarities == {"A": 1}
        assert second.card_rarities == {"B": 2}


class TestExtractTierBlocks:

    def test_blocks_in_file_order(self):
        blocks = extract_tier_blocks(NEVERSINK_SAMPLE)

        assert [b.tier_name for b in blocks] == [
            "exstack", "t1", "t2", "t3", "tnew", "t4c", "t5c", "restex", "t5",
        ]
        assert blocks[0].rarity is None

    def test_no_section(self):
        assert extract_tier_blocks(make_filter_without_divination()) == []

    def test_declared_empty_section(self):
        assert extract_tier_blocks(make_filter_with_missing_section_body()) == []
