"""Base type resolution against the reference data.

A candidate value matches a real base type name when the name is at least as
long as the candidate and contains it. Two strategies answer that question:

* class-narrowed: when the current block declared classes, only the base
  types of the classes matching those declarations are scanned;
* length-indexed: otherwise the length-sorted list of every base type is
  scanned, starting at the first entry long enough to contain the candidate.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from itemfilter.context import BlockContext
from itemfilter.data import ReferenceData, stylized_join

Matcher = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class BaseTypeResolver:
    """The strategy chosen for one BaseType rule."""

    matcher: Matcher
    searched_classes: tuple[str, ...] = ()

    def is_valid(self, value: str, whitelist: Sequence[str] = ()) -> bool:
        if self.matcher(value):
            return True
        return any(value in entry for entry in whitelist)

    def invalid_message(self, keyword: str) -> str:
        if self.searched_classes:
            class_text = stylized_join(list(self.searched_classes))
            return (
                f"Invalid value for a {keyword} rule. No value found"
                f" for the following classes: {class_text}."
            )
        return f"Invalid value for a {keyword} rule. Only item bases are valid values for this rule."


def expand_classes(partial_classes: Sequence[str], data: ReferenceData) -> tuple[str, ...]:
    """Return every full class name containing any of the (possibly partial) names."""
    matched: list[str] = []
    for partial in partial_classes:
        for full in data.classes:
            if partial in full and full not in matched:
                matched.append(full)
    return tuple(matched)


def class_pool_matcher(pool: Sequence[str]) -> Matcher:
    def match(value: str) -> bool:
        length = len(value)
        return any(len(base) >= length and value in base for base in pool)

    return match


def length_indexed_matcher(data: ReferenceData) -> Matcher:
    bases = data.sorted_bases
    indices = data.sorted_bases_indices

    def match(value: str) -> bool:
        length = len(value)
        if length > len(indices):
            return False
        start = indices[length - 1] if length > 0 else 0
        for i in range(start, len(bases)):
            if value in bases[i]:
                return True
        return False

    return match


def select_resolver(context: BlockContext, data: ReferenceData) -> BaseTypeResolver:
    """Pick the class-narrowed strategy when the block declared classes."""
    if context.classes:
        searched = expand_classes(context.classes, data)
        pool: list[str] = []
        for item_class in searched:
            pool.extend(data.bases_for_class(item_class))
        return BaseTypeResolver(class_pool_matcher(pool), searched)
    return BaseTypeResolver(length_indexed_matcher(data))
