"""--debug per-line result dump to stderr."""

from __future__ import annotations

import sys
from typing import TextIO

from itemfilter.results import FilterParseResult, LineParseResult
from itemfilter.tokens import Range


def dump_result(result: FilterParseResult, *, file: TextIO | None = None) -> None:
    """Print one entry per non-ignored line, with its findings indented below.

    Writes to the current ``sys.stderr`` unless *file* is given.
    """
    file = file if file is not None else sys.stderr
    for line in result.lines:
        if line.keyword is None and not line.diagnostics:
            continue
        _dump_line(line, file)


def _span(r: Range) -> str:
    return f"{r.start.line + 1}:{r.start.character + 1}-{r.end.character + 1}"


def _dump_line(line: LineParseResult, f: TextIO) -> None:
    keyword = line.keyword if line.keyword is not None else "?"
    marker = "" if line.known_keyword else " (unknown)"
    f.write(f"Line {line.row + 1} {keyword}{marker} @ {_span(line.line_range)}\n")
    if line.color is not None:
        c = line.color.color
        f.write(
            f"  Color({c.red:.3f}, {c.green:.3f}, {c.blue:.3f}, {c.alpha:.3f})"
            f" @ {_span(line.color.range)}\n"
        )
    if line.sound is not None:
        s = line.sound
        known = "known" if s.known_identifier else "unknown"
        f.write(f"  Sound({s.identifier!r}, volume={s.volume}, {known}) @ {_span(s.range)}\n")
    for d in line.diagnostics:
        f.write(f"  {d.severity.label}: {d.message} @ {_span(d.range)}\n")
