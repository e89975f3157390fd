"""Source positions, ranges and tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 0-based line and character."""

    line: int
    character: int


@dataclass(frozen=True, slots=True)
class Range:
    """Source range from start to end position (end exclusive)."""

    start: Position
    end: Position

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> Range:
        return cls(Position(line, start), Position(line, end))


@dataclass(frozen=True, slots=True)
class Token(Generic[T]):
    """A single value consumed from a line, with its trimmed source range."""

    value: T
    range: Range

