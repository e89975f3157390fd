"""Position-only helpers locating keywords and values within a line.

These work on raw text without a full parse so that completion and hover can
find the value under the cursor even on lines that do not parse cleanly. All
returned ranges have exclusive ends.
"""

from __future__ import annotations

import re

from itemfilter.tokens import Position, Range

_KEYWORD_RE = re.compile(r"\s*([A-Za-z]+)(?=\s|$)")
_DUAL_OPERATORS = ("<=", ">=")


def skip_eq_operator(text: str, index: int) -> int | None:
    """Skip whitespace and at most one '=' starting at *index*.

    Returns the index of the first remaining non-whitespace character, or None
    when the line ends first or a second '=' shows up.
    """
    seen_operator = False
    for i in range(index, len(text)):
        ch = text[i]
        if ch.isspace():
            continue
        if ch == "=":
            if seen_operator:
                return None
            seen_operator = True
            continue
        return i
    return None


def skip_operator(text: str, index: int) -> int | None:
    """Like skip_eq_operator, but accepts one of '=', '<', '>', '<=' or '>='."""
    seen_operator = False
    i = index
    while i < len(text):
        ch = text[i]
        if ch.isspace():
            i += 1
            continue
        if ch in "<>=":
            if seen_operator:
                return None
            seen_operator = True
            i += 2 if text.startswith(_DUAL_OPERATORS, i) else 1
            continue
        return i
    return None


def next_value_range(text: str, row: int, index: int) -> Range | None:
    """Return the span of the next value at or after *index*.

    A quoted value runs to its closing quote (or the end of the line when
    unterminated); a bare value runs to the next whitespace or end of line.
    """
    quote_start: int | None = None
    word_start: int | None = None

    for i in range(index, len(text)):
        ch = text[i]
        if ch == '"':
            if quote_start is not None:
                return Range.on_line(row, quote_start, i + 1)
            if word_start is None:
                quote_start = i
        elif ch.isspace():
            if word_start is not None:
                return Range.on_line(row, word_start, i)
        elif quote_start is None and word_start is None:
            word_start = i

    if quote_start is not None:
        return Range.on_line(row, quote_start, len(text))
    if word_start is not None:
        return Range.on_line(row, word_start, len(text))
    return None


def get_keyword(text: str, row: int) -> tuple[str, Range] | None:
    """Return the leading keyword of the line and its range."""
    match = _KEYWORD_RE.match(text)
    if match is None:
        return None
    return match.group(1), Range.on_line(row, match.start(1), match.end(1))


def is_position_in_value(position: Position, value_range: Range) -> bool:
    """True if *position* lies in the value or immediately after its last character."""
    if position.line != value_range.start.line:
        return False
    return value_range.start.character <= position.character <= value_range.end.character


def string_range_at_position(position: Position, text: str, index: int) -> Range | None:
    """Return the range of the value under *position*, scanning values from *index*."""
    value_index = index
    while (value_range := next_value_range(text, position.line, value_index)) is not None:
        if is_position_in_value(position, value_range):
            return value_range
        if value_range.start.character > position.character:
            break
        value_index = value_range.end.character
    return None


def unquote(value: str) -> str:
    """Strip a leading and a trailing double quote, if present."""
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value
