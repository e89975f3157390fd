"""Diagnostic records with formatted source context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from itemfilter.tokens import Range

SOURCE = "item-filter"


class Severity(IntEnum):
    # Values match the LSP DiagnosticSeverity numbering
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single problem found on a line."""

    message: str
    range: Range
    severity: Severity
    source: str = SOURCE

    def format(self, source_line: str, filename: str = "input.filter") -> str:
        """Render the diagnostic with the offending line and a caret underline."""
        line = self.range.start.line + 1
        col = self.range.start.character + 1

        source_line = source_line.rstrip("\n").rstrip("\r")

        if self.range.end.line == self.range.start.line:
            underline_len = max(1, self.range.end.character - self.range.start.character)
        else:
            underline_len = max(1, len(source_line) - col + 1)

        pad = " " * (col - 1)
        carets = "^" * underline_len

        line_num = str(line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"{self.severity.label}: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{line}:{col}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter} {pad}{carets}"
        )


def error(message: str, range: Range) -> Diagnostic:
    return Diagnostic(message, range, Severity.ERROR)


def warning(message: str, range: Range) -> Diagnostic:
    return Diagnostic(message, range, Severity.WARNING)
