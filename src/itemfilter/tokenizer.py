"""Item filter tokenizer: consumes typed values from a single line of text."""

from __future__ import annotations

import re

from itemfilter.errors import MultilineTextError
from itemfilter.tokens import Position, Range, Token

# Every token must be followed by whitespace or the end of the line.
_NUMBER_RE = re.compile(r"(\s*)([-+]?[0-9]+)(?=\s|$)")
_WORD_RE = re.compile(r"(\s*)([A-Za-zö]+)(?=\s|$)")
_STRING_RE = re.compile(r"(\s*)(\"[^\"]*\"|[^\s\"'<>=]+)(?=\s|$)")
_COMMENT_RE = re.compile(r"(\s*)(#.*?)\s*$")
_OPERATOR_RE = re.compile(r"(\s*)(<=|>=|=|<|>)(?=\s|$)")
_BOOLEAN_RE = re.compile(r"(\s*)(\"true\"|true|\"false\"|false)(?=\s|$)", re.IGNORECASE)

_QUOTED_RE = re.compile(r"\"([^\"]*)\"")
_LINE_BREAK_RE = re.compile(r"[\r\n]")

# Digit runs longer than this saturate to 10**18, outside every rule range.
_MAX_DIGITS = 18


class Tokenizer:
    """Pull typed tokens off one line of an item filter.

    Each ``next_*`` method skips leading whitespace and consumes one token of
    the requested shape, returning ``None`` and leaving the cursor untouched
    when the upcoming text does not have that shape. The cursor never moves
    backwards.
    """

    def __init__(self, text: str, row: int = 0) -> None:
        if _LINE_BREAK_RE.search(text):
            raise MultilineTextError(text)

        self._text = text
        self._row = row
        self._pos = 0

        stripped = text.strip()
        if stripped:
            self._text_start = len(text) - len(text.lstrip())
            self._text_end = self._text_start + len(stripped)
        else:
            self._text_start = 0
            self._text_end = 0

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        """The not-yet-consumed remainder of the line."""
        return self._text[self._pos :]

    @property
    def row(self) -> int:
        return self._row

    @property
    def position(self) -> int:
        return self._pos

    @property
    def is_empty(self) -> bool:
        """True if nothing but whitespace remains on the line."""
        return not self.text.strip()

    @property
    def is_commented(self) -> bool:
        """True if the remainder of the line is a comment."""
        return self.text.lstrip().startswith("#")

    @property
    def is_ignored(self) -> bool:
        """True if the game would ignore the remainder of the line entirely."""
        return self.is_empty or self.is_commented

    @property
    def line_range(self) -> Range:
        """Range from the first to the last non-whitespace character of the line."""
        return Range.on_line(self._row, self._text_start, self._text_end)

    @property
    def remaining_range(self) -> Range:
        """Range from the next non-whitespace character to the end of the text."""
        rest = self.text
        start = self._pos + (len(rest) - len(rest.lstrip()))
        end = max(start, self._text_end)
        return Range.on_line(self._row, start, end)

    # ------------------------------------------------------------------
    # Token consumers
    # ------------------------------------------------------------------

    def next_number(self) -> Token[int] | None:
        result = self._consume(_NUMBER_RE)
        if result is None:
            return None
        return Token(_to_int(result.value), result.range)

    def next_boolean(self) -> Token[bool] | None:
        """Consume a case-insensitive True/False, optionally double-quoted."""
        result = self._consume(_BOOLEAN_RE)
        if result is None:
            return None
        return Token("true" in result.value.lower(), result.range)

    def next_operator(self) -> Token[str] | None:
        return self._consume(_OPERATOR_RE)

    def next_word(self) -> Token[str] | None:
        """Consume a run of letters terminated by whitespace or end of line."""
        return self._consume(_WORD_RE)

    def next_string(self) -> Token[str] | None:
        """Consume a bare value or a double-quoted span (quotes are stripped)."""
        result = self._consume(_STRING_RE)
        if result is None:
            return None
        quoted = _QUOTED_RE.fullmatch(result.value)
        if quoted:
            return Token(quoted.group(1), result.range)
        return result

    def parse_comment(self) -> Token[str] | None:
        """Consume a comment, which runs to the end of the line."""
        return self._consume(_COMMENT_RE)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _consume(self, regex: re.Pattern[str]) -> Token[str] | None:
        match = regex.match(self._text, self._pos)
        if match is None:
            return None

        leading_ws, value = match.group(1), match.group(2)
        start = self._pos + len(leading_ws)
        end = start + len(value)
        self._pos = end
        return Token(value, Range(Position(self._row, start), Position(self._row, end)))


def _to_int(text: str) -> int:
    digits = text.lstrip("+-").lstrip("0") or "0"
    value = 10**_MAX_DIGITS if len(digits) > _MAX_DIGITS else int(digits)
    return -value if text.startswith("-") else value
