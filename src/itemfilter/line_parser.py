"""Single-line parsing: keyword detection and rule dispatch."""

from __future__ import annotations

from itemfilter.config import Configuration
from itemfilter.context import BlockContext
from itemfilter.data import ReferenceData
from itemfilter.diagnostics import error
from itemfilter.results import LineParseResult
from itemfilter.rules import RULE_HANDLERS, RuleLine, rule_kind
from itemfilter.tokenizer import Tokenizer


def parse_line(
    text: str,
    row: int,
    context: BlockContext,
    config: Configuration,
    data: ReferenceData,
) -> LineParseResult:
    """Parse one line, reading and updating the block context.

    Lines must be fed in document order: a block line resets *context* and a
    Class line adds to it for the BaseType lines that follow.
    """
    tokens = Tokenizer(text, row)
    line_range = tokens.line_range

    if tokens.is_ignored:
        return LineParseResult(row, line_range)

    keyword = tokens.next_word()
    if keyword is None:
        return LineParseResult(
            row,
            line_range,
            (error("Unreadable keyword, likely due to a stray character.", line_range),),
        )

    kind = rule_kind(keyword.value)
    if kind is None:
        diagnostics = ()
        if keyword.value not in config.rule_whitelist:
            diagnostics = (error("Unknown filter keyword.", keyword.range),)
        return LineParseResult(
            row,
            line_range,
            diagnostics,
            keyword=keyword.value,
            keyword_range=keyword.range,
            known_keyword=False,
        )

    line = RuleLine(keyword.value, keyword.range, tokens, context, config, data)
    outcome = RULE_HANDLERS[kind](line)
    return LineParseResult(
        row,
        line_range,
        outcome.diagnostics,
        color=outcome.color,
        sound=outcome.sound,
        keyword=keyword.value,
        keyword_range=keyword.range,
        known_keyword=True,
    )
