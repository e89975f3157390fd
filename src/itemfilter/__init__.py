"""Item filter language core: validation, completion and hover."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from itemfilter.config import Configuration
    from itemfilter.data import ReferenceData
    from itemfilter.results import FilterParseResult

__version__ = "0.1.0"


def parse(
    text: str,
    config: Configuration | None = None,
    data: ReferenceData | None = None,
) -> FilterParseResult:
    """Validate a whole item filter and return its diagnostics, colors and sounds."""
    from itemfilter.document import parse_document

    return parse_document(text, config, data)
