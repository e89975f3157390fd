"""Parse result types: per-line results and document aggregates."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from itemfilter.diagnostics import Diagnostic, Severity
from itemfilter.tokens import Range


@dataclass(frozen=True, slots=True)
class Color:
    """RGBA color with channels normalized to 0.0-1.0."""

    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def presentation(self, always_show_alpha: bool = False) -> str:
        """Format as filter channel values, e.g. "255 0 0" or "255 0 0 128"."""
        red, green, blue, alpha = (
            math.trunc(channel * 255) for channel in (self.red, self.green, self.blue, self.alpha)
        )
        text = f"{red} {green} {blue}"
        if always_show_alpha or alpha != 255:
            text += f" {alpha}"
        return text


@dataclass(frozen=True, slots=True)
class ColorInfo:
    """A color set by a rule, with the source range of its channel values."""

    color: Color
    range: Range


@dataclass(frozen=True, slots=True)
class SoundInfo:
    """An alert sound set by a rule."""

    known_identifier: bool
    identifier: str
    volume: int
    range: Range


@dataclass(frozen=True, slots=True)
class LineParseResult:
    """Everything learned from one line."""

    row: int
    line_range: Range
    diagnostics: tuple[Diagnostic, ...] = ()
    color: ColorInfo | None = None
    sound: SoundInfo | None = None
    keyword: str | None = None
    keyword_range: Range | None = None
    known_keyword: bool = False


@dataclass
class FilterParseResult:
    """Aggregated results of a whole-document parse, in source order."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    colors: list[ColorInfo] = field(default_factory=list)
    sounds: list[SoundInfo] = field(default_factory=list)
    lines: list[LineParseResult] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)
