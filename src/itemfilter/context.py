"""Cross-line parse state: the current block and the filter as a whole."""

from __future__ import annotations

from dataclasses import dataclass, field

from itemfilter.tokens import Range


@dataclass
class BlockContext:
    """State scoped to the current Show/Hide block.

    One instance is created per document parse and threaded through every
    line in order. It must never be shared between documents.
    """

    root: Range | None = None
    classes: list[str] = field(default_factory=list)
    previous_rules: dict[str, int] = field(default_factory=dict)

    def reset(self, root: Range | None = None) -> None:
        """Start a new block, forgetting classes and rule counts."""
        self.classes.clear()
        self.previous_rules.clear()
        self.root = root

    def occurrences(self, keyword: str) -> int:
        return self.previous_rules.get(keyword, 0)

    def record_rule(self, keyword: str) -> int:
        """Count one more occurrence of *keyword* and return the new total."""
        count = self.previous_rules.get(keyword, 0) + 1
        self.previous_rules[keyword] = count
        return count


@dataclass
class FilterContext:
    """State spanning the whole document."""

    block_found: bool = False
