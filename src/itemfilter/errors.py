"""Exception types for caller and data contract violations.

User input problems never raise: they are reported as diagnostics.
"""

from __future__ import annotations


class MultilineTextError(ValueError):
    """Raised when text containing a line break is handed to the tokenizer."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"text spans multiple lines: {text!r}")


class ReferenceDataError(KeyError):
    """Raised when reference data is missing an entry or is malformed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConfigError(Exception):
    """Raised when a configuration source has values of the wrong type."""

    def __init__(self, message: str, source: str = "<settings>") -> None:
        self.message = message
        self.source = source
        super().__init__(f"{source}: {message}")
