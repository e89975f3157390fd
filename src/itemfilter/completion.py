"""Completion suggestions for a single line of an item filter.

Completion only needs the context of the current line: the leading keyword
decides which value list applies, and the value under the cursor decides the
range the suggestion replaces.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from itemfilter.boundaries import (
    get_keyword,
    is_position_in_value,
    next_value_range,
    skip_eq_operator,
    skip_operator,
    string_range_at_position,
)
from itemfilter.config import Configuration
from itemfilter.data import ExtraSuggestion, ReferenceData
from itemfilter.rules import RuleKind, rule_kind
from itemfilter.tokens import Position, Range

_COLOR_DEFAULT = "255 255 255"


class SuggestionKind(Enum):
    PROPERTY = "property"  # filter keyword
    VALUE = "value"  # value from the reference data
    REFERENCE = "reference"  # user whitelisted value
    TEXT = "text"  # extra suggestion


@dataclass(frozen=True, slots=True)
class Suggestion:
    label: str
    new_text: str
    range: Range
    kind: SuggestionKind
    filter_text: str | None = None


def _quoted(text: str, always: bool) -> str:
    if always or " " in text:
        return f'"{text}"'
    return text


def _value_suggestion(
    text: str, range: Range, kind: SuggestionKind, use_quotes: bool
) -> Suggestion:
    return Suggestion(
        label=text,
        new_text=_quoted(text, use_quotes),
        range=range,
        kind=kind,
        filter_text=f'"{text}"',
    )


def _cursor_range(position: Position) -> Range:
    return Range(position, position)


# ------------------------------------------------------------------
# Keywords
# ------------------------------------------------------------------


def keyword_suggestions(
    config: Configuration, data: ReferenceData, range: Range
) -> list[Suggestion]:
    """Every known keyword followed by the user's whitelisted ones."""
    result = []
    for keyword in data.rules:
        if rule_kind(keyword) is RuleKind.COLOR:
            new_text = f"{keyword} {_COLOR_DEFAULT}"
        else:
            new_text = keyword
        result.append(Suggestion(keyword, new_text, range, SuggestionKind.PROPERTY))
    for keyword in config.rule_whitelist:
        result.append(Suggestion(keyword, keyword, range, SuggestionKind.REFERENCE))
    return result


# ------------------------------------------------------------------
# Value ranges
# ------------------------------------------------------------------


def _multi_value_range(
    text: str, position: Position, index: int, skip: Callable[[str, int], int | None]
) -> Range | None:
    """Range replaced by a suggestion on a rule taking a list of values.

    Returns None when the cursor sits before the values start.
    """
    value_index = skip(text, index)
    if value_index is None:
        return _cursor_range(position)
    if position.character < value_index:
        return None
    value_range = string_range_at_position(position, text, value_index)
    return value_range or _cursor_range(position)


def _single_value_range(
    text: str, position: Position, index: int, skip: Callable[[str, int], int | None]
) -> Range | None:
    """Range replaced by a suggestion on a rule taking exactly one value."""
    value_index = skip(text, index)
    if value_index is None:
        return _cursor_range(position)
    if position.character < value_index:
        return None
    first = next_value_range(text, position.line, value_index)
    if first is None:
        return _cursor_range(position)
    if is_position_in_value(position, first):
        return first
    return None


# ------------------------------------------------------------------
# Per-rule value lists
# ------------------------------------------------------------------


def _class_suggestions(
    config: Configuration, data: ReferenceData, range: Range
) -> list[Suggestion]:
    quotes = config.item_value_quotes
    result = [_value_suggestion(c, range, SuggestionKind.VALUE, quotes) for c in data.classes]
    result += [
        _value_suggestion(c, range, SuggestionKind.REFERENCE, quotes)
        for c in config.class_whitelist
    ]
    result += [
        _value_suggestion(c, range, SuggestionKind.TEXT, quotes) for c in data.extra_classes
    ]
    return result


def _base_type_suggestions(
    config: Configuration, data: ReferenceData, range: Range
) -> list[Suggestion]:
    quotes = config.item_value_quotes
    result = [
        _value_suggestion(b, range, SuggestionKind.VALUE, quotes) for b in data.sorted_bases
    ]
    result += [
        _value_suggestion(b, range, SuggestionKind.REFERENCE, quotes)
        for b in config.base_whitelist
    ]
    for extra in data.extra_bases:
        if isinstance(extra, ExtraSuggestion):
            result.append(
                Suggestion(
                    label=extra.name,
                    new_text=extra.text,
                    range=range,
                    kind=SuggestionKind.TEXT,
                    filter_text=f'"{extra.name}"',
                )
            )
        else:
            result.append(_value_suggestion(extra, range, SuggestionKind.TEXT, quotes))
    return result


def _sound_suggestions(
    config: Configuration, data: ReferenceData, range: Range
) -> list[Suggestion]:
    result = [
        Suggestion(
            label=label,
            new_text=identifier,
            range=range,
            kind=SuggestionKind.VALUE,
            filter_text=f'"{identifier}"',
        )
        for identifier, label in data.sounds.string_identifiers.items()
    ]
    result += [
        _value_suggestion(s, range, SuggestionKind.REFERENCE, False)
        for s in config.sound_whitelist
    ]
    return result


def _enum_suggestions(
    values: Iterable[str], range: Range, use_quotes: bool
) -> list[Suggestion]:
    return [_value_suggestion(v, range, SuggestionKind.VALUE, use_quotes) for v in values]


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------


def get_completions(
    config: Configuration, data: ReferenceData, line_text: str, position: Position
) -> list[Suggestion]:
    """Return the suggestions for *position* within *line_text*."""
    keyword = get_keyword(line_text, position.line)
    if keyword is None:
        # Only an otherwise blank prefix gets keyword suggestions.
        if line_text[: position.character + 1].strip():
            return []
        return keyword_suggestions(config, data, _cursor_range(position))

    word, keyword_range = keyword
    if position.character < keyword_range.start.character:
        return keyword_suggestions(config, data, _cursor_range(position))
    if position.character <= keyword_range.end.character:
        return keyword_suggestions(config, data, keyword_range)

    index = keyword_range.end.character
    kind = rule_kind(word)

    if kind is RuleKind.CLASS or kind is RuleKind.BASE_TYPE:
        range = _multi_value_range(line_text, position, index, skip_eq_operator)
        if range is None:
            return []
        if kind is RuleKind.CLASS:
            return _class_suggestions(config, data, range)
        return _base_type_suggestions(config, data, range)

    if kind is RuleKind.SOUND:
        range = _single_value_range(line_text, position, index, skip_eq_operator)
        return [] if range is None else _sound_suggestions(config, data, range)

    if kind is RuleKind.RARITY:
        range = _single_value_range(line_text, position, index, skip_operator)
        if range is None:
            return []
        return _enum_suggestions(data.rarities, range, config.rarity_quotes)

    if kind is RuleKind.BOOLEAN:
        range = _single_value_range(line_text, position, index, skip_eq_operator)
        if range is None:
            return []
        return _enum_suggestions(data.booleans, range, config.boolean_quotes)

    return []
