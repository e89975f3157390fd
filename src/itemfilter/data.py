"""Reference data: item classes, base types, rule ranges and enumerations.

The lookup tables are loaded once and never mutated afterwards. Reloading
produces a new ``ReferenceData`` instance that replaces the old one.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any

from itemfilter.errors import ReferenceDataError

logger = logging.getLogger(__name__)

ITEMS_FILE = "items.json"
FILTER_FILE = "filter.json"
SUGGESTIONS_FILE = "suggestions.json"
UNIQUES_FILE = "uniques.json"


@dataclass(frozen=True, slots=True)
class RuleRange:
    """Numeric domain of a rule: an inclusive range plus extra discrete values."""

    min: int
    max: int
    additionals: tuple[int, ...] = ()

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max or value in self.additionals

    def describe(self) -> str:
        if self.additionals:
            extra = stylized_join([str(v) for v in self.additionals], ", or")
            return f"Valid values are either {self.min}-{self.max} or {extra}."
        return f"Valid values are between {self.min} and {self.max}."


@dataclass(frozen=True, slots=True)
class SoundData:
    """Sound identifiers: a numeric id range and named ids with display names."""

    number_min: int
    number_max: int
    string_identifiers: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class ExtraSuggestion:
    """A completion entry whose inserted text differs from its label."""

    name: str
    text: str


@dataclass(frozen=True, slots=True)
class UniqueItem:
    name: str
    boss: str | None = None
    league: str | None = None
    leagues: tuple[str, ...] = ()
    location: str | None = None


@dataclass(frozen=True, slots=True)
class ReferenceData:
    """Immutable lookup tables consumed by the rule grammars."""

    classes_to_bases: Mapping[str, tuple[str, ...]]
    bases_to_classes: Mapping[str, str]
    classes: tuple[str, ...]
    sorted_bases: tuple[str, ...]
    sorted_bases_indices: tuple[int, ...]
    rules: tuple[str, ...]
    rule_limits: Mapping[str, int]
    rule_ranges: Mapping[str, RuleRange]
    rarities: tuple[str, ...]
    booleans: tuple[str, ...]
    sounds: SoundData
    keyword_descriptions: Mapping[str, str] = field(default_factory=dict)
    extra_classes: tuple[str, ...] = ()
    extra_bases: tuple[str | ExtraSuggestion, ...] = ()
    uniques: Mapping[str, tuple[str | UniqueItem, ...]] = field(default_factory=dict)

    def rule_range(self, keyword: str) -> RuleRange:
        """Return the numeric range for a keyword; unknown keywords are a data error."""
        try:
            return self.rule_ranges[keyword]
        except KeyError:
            raise ReferenceDataError(f"no numeric range defined for rule '{keyword}'") from None

    def rule_limit(self, keyword: str) -> int:
        try:
            return self.rule_limits[keyword]
        except KeyError:
            raise ReferenceDataError(f"no occurrence limit defined for rule '{keyword}'") from None

    def bases_for_class(self, item_class: str) -> tuple[str, ...]:
        return self.classes_to_bases.get(item_class, ())


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def build_length_index(bases: Iterable[str]) -> tuple[tuple[str, ...], tuple[int, ...]]:
    """Sort bases by (length, text) and index the first position of each length.

    ``indices[L - 1]`` is the first position whose entry has length >= L, for
    every L from 1 to the longest entry.
    """
    ordered = tuple(sorted(set(bases), key=lambda b: (len(b), b)))
    if not ordered:
        return (), ()

    indices: list[int] = []
    position = 0
    for length in range(1, len(ordered[-1]) + 1):
        while len(ordered[position]) < length:
            position += 1
        indices.append(position)
    return ordered, tuple(indices)


def check_length_index(bases: tuple[str, ...], indices: tuple[int, ...]) -> None:
    """Raise ReferenceDataError unless the length-sorted index invariant holds."""
    for prev, cur in zip(bases, bases[1:]):
        if (len(prev), prev) > (len(cur), cur):
            raise ReferenceDataError(f"sorted bases out of order at '{cur}'")

    longest = len(bases[-1]) if bases else 0
    if len(indices) != longest:
        raise ReferenceDataError(
            f"expected {longest} length indices, got {len(indices)}"
        )
    for length, idx in enumerate(indices, start=1):
        if len(bases[idx]) < length or (idx > 0 and len(bases[idx - 1]) >= length):
            raise ReferenceDataError(f"length index for {length} points at {idx}")


def build_reference_data(
    items: Mapping[str, Any],
    filter_data: Mapping[str, Any],
    suggestions: Mapping[str, Any] | None = None,
    uniques: Mapping[str, Any] | None = None,
) -> ReferenceData:
    """Assemble ReferenceData from decoded JSON documents.

    ``items`` is either the plain class-to-bases mapping or the preprocessed
    form carrying ``classesToBases``, ``sortedBases`` and ``sortedBasesIndices``.
    """
    try:
        if "classesToBases" in items:
            classes_to_bases = _freeze_lists(items["classesToBases"])
        else:
            classes_to_bases = _freeze_lists(items)

        bases_to_classes: dict[str, str] = {}
        for item_class, bases in classes_to_bases.items():
            for base in bases:
                bases_to_classes[base] = item_class

        if "sortedBases" in items and "sortedBasesIndices" in items:
            sorted_bases = tuple(items["sortedBases"])
            indices = tuple(items["sortedBasesIndices"])
            check_length_index(sorted_bases, indices)
        else:
            sorted_bases, indices = build_length_index(bases_to_classes)

        ranges = {
            keyword: RuleRange(
                int(entry["min"]),
                int(entry["max"]),
                tuple(int(v) for v in entry.get("additionals", ())),
            )
            for keyword, entry in filter_data["ruleRanges"].items()
        }

        sounds_table = filter_data["sounds"]
        sounds = SoundData(
            number_min=int(sounds_table["numberIdentifier"]["min"]),
            number_max=int(sounds_table["numberIdentifier"]["max"]),
            string_identifiers=MappingProxyType(dict(sounds_table["stringIdentifiers"])),
        )

        suggestions = suggestions or {}
        extra_bases: list[str | ExtraSuggestion] = []
        for entry in suggestions.get("extraBases", ()):
            if isinstance(entry, str):
                extra_bases.append(entry)
            else:
                extra_bases.append(ExtraSuggestion(entry["name"], entry["text"]))
        extra_classes = tuple(
            entry if isinstance(entry, str) else entry["name"]
            for entry in suggestions.get("extraClasses", ())
        )

        unique_items = {
            base: tuple(_unique(entry) for entry in entries)
            for base, entries in (uniques or {}).items()
        }

        return ReferenceData(
            classes_to_bases=MappingProxyType(classes_to_bases),
            bases_to_classes=MappingProxyType(bases_to_classes),
            classes=tuple(classes_to_bases),
            sorted_bases=sorted_bases,
            sorted_bases_indices=indices,
            rules=tuple(filter_data["rules"]),
            rule_limits=MappingProxyType({k: int(v) for k, v in filter_data["ruleLimits"].items()}),
            rule_ranges=MappingProxyType(ranges),
            rarities=tuple(filter_data["rarities"]),
            booleans=tuple(filter_data["booleans"]),
            sounds=sounds,
            keyword_descriptions=MappingProxyType(dict(filter_data.get("keywordDescriptions", {}))),
            extra_classes=extra_classes,
            extra_bases=tuple(extra_bases),
            uniques=MappingProxyType(unique_items),
        )
    except ReferenceDataError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise ReferenceDataError(f"malformed reference data: {exc}") from exc


def _freeze_lists(mapping: Mapping[str, Any]) -> dict[str, tuple[str, ...]]:
    return {str(k): tuple(str(v) for v in values) for k, values in mapping.items()}


def _unique(entry: str | Mapping[str, Any]) -> str | UniqueItem:
    if isinstance(entry, str):
        return entry
    return UniqueItem(
        name=entry["name"],
        boss=entry.get("boss"),
        league=entry.get("league"),
        leagues=tuple(entry.get("leagues", ())),
        location=entry.get("location"),
    )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_reference_data(data_dir: Path | None = None) -> ReferenceData:
    """Load reference data from *data_dir*, or from the bundled data files."""
    items = _read_json(data_dir, ITEMS_FILE)
    filter_data = _read_json(data_dir, FILTER_FILE)
    suggestions = _read_json(data_dir, SUGGESTIONS_FILE, required=False)
    uniques = _read_json(data_dir, UNIQUES_FILE, required=False)

    data = build_reference_data(items, filter_data, suggestions, uniques)
    logger.info(
        "Loaded reference data: %d classes, %d bases, %d rules",
        len(data.classes),
        len(data.sorted_bases),
        len(data.rules),
    )
    return data


_default: ReferenceData | None = None


def default_reference_data() -> ReferenceData:
    """Return the bundled reference data, loading it on first use."""
    global _default
    if _default is None:
        _default = load_reference_data()
    return _default


def _read_json(data_dir: Path | None, name: str, required: bool = True) -> Any:
    if data_dir is None:
        resource = resources.files("itemfilter") / "data" / name
        if not resource.is_file():
            if required:
                raise ReferenceDataError(f"bundled data file '{name}' is missing")
            return None
        text = resource.read_text(encoding="utf-8")
        origin = f"itemfilter/data/{name}"
    else:
        path = data_dir / name
        if not path.is_file():
            if required:
                raise ReferenceDataError(f"data file '{path}' not found")
            return None
        text = path.read_text(encoding="utf-8")
        origin = str(path)

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ReferenceDataError(f"{origin}: invalid JSON ({exc})") from exc


def stylized_join(items: list[str], final_prefix: str = ", and") -> str:
    """Join items for display: "a", "a, and b", "a, b, and c"."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])}{final_prefix} {items[-1]}"
