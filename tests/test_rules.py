"""Tests for the per-keyword rule grammars, through the line parser."""

from __future__ import annotations

import pytest

from itemfilter.config import Configuration
from itemfilter.context import BlockContext
from itemfilter.diagnostics import Severity
from itemfilter.errors import ReferenceDataError
from itemfilter.results import Color

from conftest import messages, span

TRAILING_ERROR = "This trailing text will be considered an error by Path of Exile."
TRAILING_WARNING = "This trailing text will be ignored by Path of Exile."


class TestValidLines:
    @pytest.mark.parametrize(
        "text",
        [
            "Show",
            "Hide",
            "ItemLevel >= 75",
            "DropLevel < 10",
            "Quality = 20",
            "Sockets >= 6",
            "LinkedSockets 0",
            "Height 4",
            "Width <= 2",
            "StackSize > 100",
            "GemLevel 21",
            "MapTier >= 16",
            "SetFontSize 45",
            "Rarity <= Rare",
            "SocketGroup RGBW",
            "Identified True",
            'Corrupted "false"',
            "SetBorderColor 255 0 0",
            "SetTextColor 10 20 30 128",
            "SetBackgroundColor = 0 0 0",
            "PlayAlertSound 5 200",
            "PlayAlertSoundPositional ShVaal",
            'Class "Body Armours" Rings',
            'BaseType "Leather Belt"',
            "DisableDropSound True",
            "Quality 20 # comment",
        ],
    )
    def test_no_diagnostics(self, parse_rule, text: str) -> None:
        result = parse_rule(text)
        assert result.diagnostics == ()
        assert result.known_keyword

    def test_ignored_lines(self, parse_rule) -> None:
        for text in ("", "   ", "# Show", "  # comment"):
            result = parse_rule(text)
            assert result.diagnostics == ()
            assert result.keyword is None

    def test_same_line_twice_is_identical(self, parse_rule) -> None:
        text = 'BaseType "Leather Belt" Nonsense'
        assert parse_rule(text) == parse_rule(text)


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------


class TestKeywords:
    def test_unknown_keyword(self, parse_rule) -> None:
        result = parse_rule("Foo 1")
        assert messages(result) == ["Unknown filter keyword."]
        assert result.diagnostics[0].range == span(0, 3)
        assert not result.known_keyword
        assert result.keyword == "Foo"

    def test_keywords_are_case_sensitive(self, parse_rule) -> None:
        assert messages(parse_rule("show")) == ["Unknown filter keyword."]

    def test_whitelisted_keyword(self, parse_rule) -> None:
        config = Configuration(rule_whitelist=("Foo",))
        result = parse_rule("Foo 1", config=config)
        assert result.diagnostics == ()
        assert not result.known_keyword

    def test_unreadable_keyword(self, parse_rule) -> None:
        result = parse_rule("  !Show")
        assert messages(result) == ["Unreadable keyword, likely due to a stray character."]
        assert result.diagnostics[0].range == span(2, 7)
        assert result.keyword is None


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


class TestBlocks:
    def test_trailing_text_is_a_warning(self, parse_rule) -> None:
        result = parse_rule("Show extra")
        assert messages(result) == [TRAILING_WARNING]
        assert result.diagnostics[0].severity == Severity.WARNING
        assert result.diagnostics[0].range == span(5, 10)

    def test_comment_after_block(self, parse_rule) -> None:
        assert parse_rule("Hide # junk").diagnostics == ()

    def test_block_resets_context(self, parse_rule) -> None:
        context = BlockContext(classes=["Rings"], previous_rules={"Class": 1})
        parse_rule("Hide", context=context)
        assert context.classes == []
        assert context.previous_rules == {}
        assert context.root == span(0, 4)


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


class TestNumberRules:
    def test_missing_value(self, parse_rule) -> None:
        result = parse_rule("ItemLevel >=")
        assert messages(result) == [
            "Missing value for a ItemLevel rule. Valid values are between 0 and 100."
        ]
        assert result.diagnostics[0].range == span(0, 12)

    def test_out_of_range(self, parse_rule) -> None:
        result = parse_rule("Quality 21")
        assert messages(result) == [
            "Invalid value for a Quality rule. Valid values are between 0 and 20."
        ]
        assert result.diagnostics[0].range == span(8, 10)

    def test_overlong_number_is_out_of_range(self, parse_rule) -> None:
        result = parse_rule("Quality " + "9" * 5000)
        assert messages(result) == [
            "Invalid value for a Quality rule. Valid values are between 0 and 20."
        ]
        assert result.diagnostics[0].range == span(8, 5008)

    def test_additional_values(self, parse_rule) -> None:
        result = parse_rule("LinkedSockets 1")
        assert messages(result) == [
            "Invalid value for a LinkedSockets rule. Valid values are either 2-6 or 0."
        ]

    def test_trailing_number(self, parse_rule) -> None:
        result = parse_rule("Quality 20 20")
        assert messages(result) == [TRAILING_ERROR]
        assert result.diagnostics[0].severity == Severity.ERROR
        assert result.diagnostics[0].range == span(11, 13)

    def test_font_size_wrong_operator(self, parse_rule) -> None:
        result = parse_rule("SetFontSize < 30")
        assert messages(result) == [
            "Invalid operator for the SetFontSize rule."
            " Only the equality operator is supported by this rule."
        ]
        assert result.diagnostics[0].range == span(12, 13)

    def test_font_size_range(self, parse_rule) -> None:
        result = parse_rule("SetFontSize 12")
        assert messages(result) == [
            "Invalid value for a SetFontSize rule. Valid values are between 18 and 45."
        ]


class TestRarityAndSockets:
    def test_invalid_rarity(self, parse_rule) -> None:
        result = parse_rule("Rarity Legendary")
        assert messages(result) == [
            "Invalid value for a Rarity rule. Valid values are Normal, Magic, Rare, and Unique."
        ]
        assert result.diagnostics[0].range == span(7, 16)

    def test_missing_rarity(self, parse_rule) -> None:
        result = parse_rule("Rarity >")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].message.startswith("Missing value for a Rarity rule.")

    @pytest.mark.parametrize("text", ["SocketGroup RGBX", "SocketGroup RRRRRRR"])
    def test_invalid_socket_group(self, parse_rule, text: str) -> None:
        result = parse_rule(text)
        assert messages(result) == [
            "Invalid value for a SocketGroup rule."
            " Expected a word consisting of the R, B, G, and W characters."
        ]

    def test_socket_group_is_case_insensitive(self, parse_rule) -> None:
        assert parse_rule("SocketGroup rgb").diagnostics == ()


# ---------------------------------------------------------------------------
# Booleans
# ---------------------------------------------------------------------------


class TestBooleanRules:
    def test_trailing_text(self, parse_rule) -> None:
        result = parse_rule("Identified = True extra")
        assert messages(result) == [TRAILING_ERROR]
        assert result.diagnostics[0].range == span(18, 23)

    def test_not_a_boolean(self, parse_rule) -> None:
        result = parse_rule("Identified Maybe")
        assert messages(result) == [
            "A boolean value, either True or False, was expected, yet not found."
        ]

    def test_wrong_operator_still_reads_value(self, parse_rule) -> None:
        result = parse_rule("Corrupted > True")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].message.startswith("Invalid operator for the Corrupted rule.")


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


class TestColorRules:
    def test_red(self, parse_rule) -> None:
        result = parse_rule("SetBorderColor 255 0 0")
        assert result.diagnostics == ()
        assert result.color.color == Color(1.0, 0.0, 0.0, 1.0)
        assert result.color.range == span(15, 22)

    def test_alpha_channel(self, parse_rule) -> None:
        result = parse_rule("SetTextColor 10 20 30 128")
        color = result.color.color
        assert color.red == pytest.approx(10 / 255)
        assert color.alpha == pytest.approx(128 / 255)
        assert result.color.range == span(13, 25)

    def test_channel_out_of_range(self, parse_rule) -> None:
        result = parse_rule("SetBorderColor 999 0 0")
        assert messages(result) == [
            "Invalid value for a SetBorderColor rule. Expected 3-4 numbers within the 0-255 range."
        ]
        assert result.diagnostics[0].range == span(15, 18)
        assert result.color is None

    def test_overlong_channel(self, parse_rule) -> None:
        result = parse_rule("SetBorderColor " + "1" * 4301 + " 0 0")
        assert messages(result) == [
            "Invalid value for a SetBorderColor rule. Expected 3-4 numbers within the 0-255 range."
        ]
        assert result.diagnostics[0].range == span(15, 4316)
        assert result.color is None

    def test_each_channel_checked_against_itself(self, parse_rule) -> None:
        result = parse_rule("SetBorderColor 0 0 300")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].range == span(19, 22)

    def test_missing_channel(self, parse_rule) -> None:
        result = parse_rule("SetBackgroundColor 10 20")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].message.startswith("Missing value")
        assert result.color is None

    def test_invalid_alpha_keeps_opaque_color(self, parse_rule) -> None:
        result = parse_rule("SetTextColor 1 2 3 256")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].range == span(19, 22)
        assert result.color.color.alpha == 1.0
        assert result.color.range == span(13, 18)

    def test_fifth_number_is_trailing(self, parse_rule) -> None:
        result = parse_rule("SetTextColor 1 2 3 4 5")
        assert messages(result) == [TRAILING_ERROR]
        assert result.color is not None


# ---------------------------------------------------------------------------
# Sounds
# ---------------------------------------------------------------------------


class TestSoundRules:
    def test_numeric_identifier_and_volume(self, parse_rule) -> None:
        sound = parse_rule("PlayAlertSound 5 200").sound
        assert sound.known_identifier
        assert sound.identifier == "5"
        assert sound.volume == 200
        assert sound.range == span(15, 16)

    def test_named_identifier_default_volume(self, parse_rule) -> None:
        sound = parse_rule("PlayAlertSound ShVaal").sound
        assert sound.identifier == "ShVaal"
        assert sound.volume == 100

    def test_identifier_out_of_range(self, parse_rule) -> None:
        result = parse_rule("PlayAlertSound 17")
        assert messages(result) == [
            "Invalid value for a PlayAlertSound rule."
            " Expected a number from 1-16 or a valid sound identifier."
        ]
        assert result.sound is None

    def test_unknown_identifier(self, parse_rule) -> None:
        result = parse_rule("PlayAlertSound Ding")
        assert len(result.diagnostics) == 1
        assert result.sound is None

    def test_whitelisted_identifier(self, parse_rule) -> None:
        config = Configuration(sound_whitelist=("Ding",))
        result = parse_rule("PlayAlertSound Ding 50", config=config)
        assert result.diagnostics == ()
        assert not result.sound.known_identifier
        assert result.sound.volume == 50

    def test_volume_out_of_range(self, parse_rule) -> None:
        result = parse_rule("PlayAlertSound 1 301")
        assert messages(result) == [
            "Invalid value for a PlayAlertSound rule."
            " A volume is expected to be a value between 0 and 300."
        ]
        assert result.sound.volume == 100

    def test_missing_identifier(self, parse_rule) -> None:
        result = parse_rule("PlayAlertSound")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].message.startswith("Missing value")
        assert result.sound is None


# ---------------------------------------------------------------------------
# Class and BaseType
# ---------------------------------------------------------------------------


class TestClassRule:
    def test_records_classes(self, parse_rule) -> None:
        context = BlockContext()
        parse_rule('Class Rings "Body Armours"', context=context)
        assert context.classes == ["Rings", "Body Armours"]

    def test_partial_class(self, parse_rule) -> None:
        assert parse_rule("Class Flask").diagnostics == ()

    def test_duplicate_value(self, parse_rule) -> None:
        result = parse_rule("Class Rings Rings")
        assert messages(result) == ["Duplicate value detected within a Class rule."]
        assert result.diagnostics[0].severity == Severity.WARNING
        assert result.diagnostics[0].range == span(12, 17)

    def test_invalid_class(self, parse_rule) -> None:
        result = parse_rule("Class Nonsense")
        assert messages(result) == [
            "Invalid value for a Class rule. Only item classes are valid values for this rule.",
            "Missing value for Class rule. A string value was expected.",
        ]
        assert result.diagnostics[0].range == span(6, 14)
        assert result.diagnostics[1].range == span(0, 14)

    def test_invalid_among_valid(self, parse_rule) -> None:
        result = parse_rule("Class Rings Nonsense")
        assert len(result.diagnostics) == 1

    def test_whitelisted_class(self, parse_rule) -> None:
        config = Configuration(class_whitelist=("Heist Gear",))
        assert parse_rule('Class "Heist"', config=config).diagnostics == ()


class TestBaseTypeRule:
    def test_partial_base(self, parse_rule) -> None:
        assert parse_rule("BaseType Ring").diagnostics == ()

    def test_accented_base(self, parse_rule) -> None:
        assert parse_rule('BaseType "Maelström"').diagnostics == ()

    def test_unknown_base(self, parse_rule) -> None:
        result = parse_rule('BaseType "Headhunter"')
        assert messages(result) == [
            "Invalid value for a BaseType rule. Only item bases are valid values for this rule.",
            "Missing value for BaseType rule. A string value was expected.",
        ]

    def test_narrowed_by_class(self, parse_rule) -> None:
        context = BlockContext()
        assert parse_rule('Class "Currency"', context=context).diagnostics == ()
        assert parse_rule('BaseType "Scroll"', context=context, row=1).diagnostics == ()

    def test_narrowed_failure_names_classes(self, parse_rule) -> None:
        context = BlockContext()
        parse_rule('Class "Currency"', context=context)
        result = parse_rule('BaseType "Leather Belt"', context=context, row=1)
        assert messages(result)[0] == (
            "Invalid value for a BaseType rule. No value found for the following"
            " classes: Currency, and Stackable Currency."
        )
        assert result.diagnostics[0].range == span(9, 23, line=1)

    def test_whitelisted_base(self, parse_rule) -> None:
        config = Configuration(base_whitelist=("Replica Headhunter",))
        assert parse_rule("BaseType Replica", config=config).diagnostics == ()

    def test_missing_value(self, parse_rule) -> None:
        result = parse_rule("BaseType =")
        assert messages(result) == ["Missing value for BaseType rule. A string value was expected."]


class TestReferenceContract:
    def test_range_for_non_numeric_rule(self, data) -> None:
        with pytest.raises(ReferenceDataError):
            data.rule_range("Class")

    def test_reference_error_is_a_key_error(self, data) -> None:
        with pytest.raises(KeyError):
            data.rule_limit("Foo")
