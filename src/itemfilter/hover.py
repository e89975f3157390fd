"""Hover information for keywords and Class/BaseType values."""

from __future__ import annotations

from dataclasses import dataclass

from itemfilter.boundaries import get_keyword, skip_eq_operator, string_range_at_position, unquote
from itemfilter.data import ReferenceData, UniqueItem
from itemfilter.rules import RuleKind, rule_kind
from itemfilter.tokens import Position, Range

SEPARATOR = "\n\n---\n\n"
MAX_LISTED_UNIQUES = 5
MAX_LISTED_BASES = 5

BASE_TYPE_SUMMARY = (
    "A base type to be captured by the closing block. As a string value, if the base"
    " type consists of a multi-word value, then it must be encapsulated in quotation"
    " marks. This value can be partial, with all item bases containing that partial"
    " string then being matched."
)
CLASS_SUMMARY = (
    "An item class to be captured by the closing block. As a string value, if the item"
    " class consists of a multi-word value, then it must be encapsulated in quotation"
    " marks. This value can be partial, with all item classes containing that partial"
    " string then being matched."
)


@dataclass(frozen=True, slots=True)
class HoverInfo:
    contents: str  # markdown
    range: Range


def get_hover(data: ReferenceData, line_text: str, position: Position) -> HoverInfo | None:
    keyword = get_keyword(line_text, position.line)
    if keyword is None:
        return None

    word, keyword_range = keyword
    if position.character < keyword_range.start.character:
        return None
    if position.character < keyword_range.end.character:
        description = data.keyword_descriptions.get(word)
        return HoverInfo(description, keyword_range) if description else None

    kind = rule_kind(word)
    if kind is not RuleKind.BASE_TYPE and kind is not RuleKind.CLASS:
        return None

    value_index = skip_eq_operator(line_text, keyword_range.end.character)
    if value_index is None or position.character < value_index:
        return None
    value_range = string_range_at_position(position, line_text, value_index)
    if value_range is None:
        return None

    value = unquote(line_text[value_range.start.character : value_range.end.character])
    if not value:
        return None
    if kind is RuleKind.BASE_TYPE:
        return HoverInfo(_base_type_markdown(data, value), value_range)
    return HoverInfo(_class_markdown(data, value), value_range)


def _format_unique(unique: str | UniqueItem) -> str:
    if isinstance(unique, str):
        return f"- {unique}\n"
    parts = [f"- {unique.name}"]
    for extra in (unique.boss, unique.location, unique.league, *unique.leagues):
        if extra:
            parts.append(f"`{extra}`")
    return " ".join(parts) + "\n"


def _base_type_markdown(data: ReferenceData, value: str) -> str:
    output = BASE_TYPE_SUMMARY
    separated = False

    classes: list[str] = []
    bases: list[str] = []
    for item_class in data.classes:
        for base in data.bases_for_class(item_class):
            if value in base:
                if item_class not in classes:
                    classes.append(item_class)
                bases.append(base)

    if len(classes) == 1:
        output += f"{SEPARATOR}Class: `{classes[0]}`\n\n"
        separated = True
    elif len(classes) > 1:
        output += SEPARATOR + "Classes:" + "".join(f" `{c}`" for c in classes)
        separated = True
        if len(bases) > MAX_LISTED_BASES:
            output += f"\n\nMatched Items: `{len(bases)}`\n\n"
        elif len(bases) > 1:
            output += "\n\nMatched Items:\n" + "".join(f"- {b}\n" for b in bases) + "\n\n"

    uniques = [u for base in bases for u in data.uniques.get(base, ())]
    if uniques:
        if not separated:
            output += SEPARATOR
        output += "Uniques:\n"
        output += "".join(_format_unique(u) for u in uniques[:MAX_LISTED_UNIQUES])
        if len(uniques) > MAX_LISTED_UNIQUES:
            output += f"- ... and {len(uniques) - MAX_LISTED_UNIQUES} more."

    return output


def _class_markdown(data: ReferenceData, value: str) -> str:
    output = CLASS_SUMMARY
    separated = False

    matched = [c for c in data.classes if value in c]
    contained = sum(len(data.bases_for_class(c)) for c in matched)

    if len(matched) == 1:
        output += f"{SEPARATOR}Class `{matched[0]}`\n\n"
        separated = True
    elif len(matched) > 1:
        output += SEPARATOR + "Matched Classes:\n" + "".join(f"- {c}\n" for c in matched) + "\n"
        separated = True

    if contained > 0:
        if not separated:
            output += SEPARATOR
        output += f"Items: `{contained}`"

    return output
