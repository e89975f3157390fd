"""Whole-document parsing: a sequential fold over lines."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import replace

from itemfilter.config import Configuration
from itemfilter.context import BlockContext, FilterContext
from itemfilter.data import ReferenceData, default_reference_data
from itemfilter.diagnostics import error, warning
from itemfilter.line_parser import parse_line
from itemfilter.results import FilterParseResult, LineParseResult
from itemfilter.rules import RuleKind, rule_kind

logger = logging.getLogger(__name__)

_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    return _LINE_SPLIT_RE.split(text)


def ordinal(n: int) -> str:
    """Return n with its English ordinal suffix: 1st, 2nd, 3rd, 4th, 11th, 21st."""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def apply_block_rules(
    result: LineParseResult,
    filter_context: FilterContext,
    block_context: BlockContext,
    data: ReferenceData,
) -> LineParseResult:
    """Check a known rule's placement and occurrence count within its block."""
    if result.keyword is None or not result.known_keyword:
        return result

    if rule_kind(result.keyword) is RuleKind.BLOCK:
        filter_context.block_found = True
        return result

    if not filter_context.block_found:
        extra = error(
            f"Block rule {result.keyword} found outside of a Hide or Show block.",
            result.line_range,
        )
        return replace(result, diagnostics=result.diagnostics + (extra,))

    limit = data.rule_limit(result.keyword)
    previous = block_context.occurrences(result.keyword)
    block_context.record_rule(result.keyword)
    if previous < limit:
        return result

    extra = warning(
        f"{ordinal(previous + 1)} occurrence of the {result.keyword} rule"
        f" within a block with a limit of {limit}.",
        result.keyword_range or result.line_range,
    )
    return replace(result, diagnostics=result.diagnostics + (extra,))


def parse_document(
    text: str,
    config: Configuration | None = None,
    data: ReferenceData | None = None,
) -> FilterParseResult:
    """Parse every line of an item filter in order and aggregate the results."""
    config = config or Configuration()
    data = data or default_reference_data()

    started = time.perf_counter()
    filter_context = FilterContext()
    block_context = BlockContext()
    result = FilterParseResult()

    for row, line in enumerate(split_lines(text)):
        parsed = parse_line(line, row, block_context, config, data)
        parsed = apply_block_rules(parsed, filter_context, block_context, data)

        result.lines.append(parsed)
        result.diagnostics.extend(parsed.diagnostics)
        if parsed.color is not None:
            result.colors.append(parsed.color)
        if parsed.sound is not None:
            result.sounds.append(parsed.sound)

    logger.debug(
        "Parsed %d lines in %.1f ms (%d diagnostics)",
        len(result.lines),
        (time.perf_counter() - started) * 1000,
        len(result.diagnostics),
    )
    return result
