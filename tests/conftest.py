"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from itemfilter.config import Configuration
from itemfilter.context import BlockContext
from itemfilter.data import ReferenceData, default_reference_data
from itemfilter.line_parser import parse_line
from itemfilter.results import LineParseResult
from itemfilter.tokens import Range


@pytest.fixture
def data() -> ReferenceData:
    """The bundled reference data."""
    return default_reference_data()


@pytest.fixture
def parse_rule(data: ReferenceData):
    """Return a helper that parses one line, with a fresh context unless given one."""

    def _parse(
        text: str,
        context: BlockContext | None = None,
        config: Configuration | None = None,
        row: int = 0,
    ) -> LineParseResult:
        return parse_line(
            text,
            row,
            context if context is not None else BlockContext(),
            config or Configuration(),
            data,
        )

    return _parse


def span(start: int, end: int, line: int = 0) -> Range:
    """Shorthand for a single-line range."""
    return Range.on_line(line, start, end)


def messages(result) -> list[str]:
    """Return the diagnostic messages of a line or document result."""
    return [d.message for d in result.diagnostics]
