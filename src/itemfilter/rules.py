"""Rule grammars: one routine per keyword family.

Each handler pulls tokens for its rule from the line's tokenizer, validates
them against the reference data and returns a ``RuleOutcome``. Handlers never
raise for bad input; every problem becomes a diagnostic.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto

from itemfilter.config import Configuration
from itemfilter.context import BlockContext
from itemfilter.data import ReferenceData, stylized_join
from itemfilter.diagnostics import Diagnostic, Severity, error, warning
from itemfilter.resolver import select_resolver
from itemfilter.results import Color, ColorInfo, SoundInfo
from itemfilter.tokenizer import Tokenizer
from itemfilter.tokens import Range, Token

MAX_VOLUME = 300
DEFAULT_VOLUME = 100

_SOCKET_GROUP_RE = re.compile(r"[rgbw]{1,6}", re.IGNORECASE)


class RuleKind(Enum):
    BLOCK = auto()
    NUMBER = auto()
    FONT_SIZE = auto()
    RARITY = auto()
    SOCKET_GROUP = auto()
    BOOLEAN = auto()
    COLOR = auto()
    CLASS = auto()
    BASE_TYPE = auto()
    SOUND = auto()


KEYWORD_KINDS: dict[str, RuleKind] = {
    "Show": RuleKind.BLOCK,
    "Hide": RuleKind.BLOCK,
    "ItemLevel": RuleKind.NUMBER,
    "DropLevel": RuleKind.NUMBER,
    "Quality": RuleKind.NUMBER,
    "Sockets": RuleKind.NUMBER,
    "LinkedSockets": RuleKind.NUMBER,
    "Height": RuleKind.NUMBER,
    "Width": RuleKind.NUMBER,
    "StackSize": RuleKind.NUMBER,
    "GemLevel": RuleKind.NUMBER,
    "MapTier": RuleKind.NUMBER,
    "SetFontSize": RuleKind.FONT_SIZE,
    "Rarity": RuleKind.RARITY,
    "SocketGroup": RuleKind.SOCKET_GROUP,
    "Identified": RuleKind.BOOLEAN,
    "Corrupted": RuleKind.BOOLEAN,
    "ElderItem": RuleKind.BOOLEAN,
    "ShaperItem": RuleKind.BOOLEAN,
    "ShapedMap": RuleKind.BOOLEAN,
    "ElderMap": RuleKind.BOOLEAN,
    "DisableDropSound": RuleKind.BOOLEAN,
    "SetBorderColor": RuleKind.COLOR,
    "SetTextColor": RuleKind.COLOR,
    "SetBackgroundColor": RuleKind.COLOR,
    "Class": RuleKind.CLASS,
    "BaseType": RuleKind.BASE_TYPE,
    "PlayAlertSound": RuleKind.SOUND,
    "PlayAlertSoundPositional": RuleKind.SOUND,
}


def rule_kind(keyword: str) -> RuleKind | None:
    """Return the rule kind for an exact, case-sensitive keyword match."""
    return KEYWORD_KINDS.get(keyword)


@dataclass(frozen=True, slots=True)
class RuleLine:
    """Inputs shared by every rule handler for one line."""

    keyword: str
    keyword_range: Range
    tokens: Tokenizer
    context: BlockContext
    config: Configuration
    data: ReferenceData


@dataclass(frozen=True, slots=True)
class RuleOutcome:
    diagnostics: tuple[Diagnostic, ...] = ()
    color: ColorInfo | None = None
    sound: SoundInfo | None = None


# ---------------------------------------------------------------------------
# Shared reporting
# ---------------------------------------------------------------------------


def _trailing_text(line: RuleLine, severity: Severity) -> Diagnostic:
    if severity == Severity.WARNING:
        message = "This trailing text will be ignored by Path of Exile."
    else:
        message = "This trailing text will be considered an error by Path of Exile."
    return Diagnostic(message, line.tokens.remaining_range, severity)


def _finish(
    line: RuleLine,
    diagnostics: list[Diagnostic],
    color: ColorInfo | None = None,
    sound: SoundInfo | None = None,
) -> RuleOutcome:
    """Flag unconsumed text when the rule was otherwise clean."""
    if not diagnostics and not line.tokens.is_ignored:
        diagnostics.append(_trailing_text(line, Severity.ERROR))
    return RuleOutcome(tuple(diagnostics), color, sound)


def _expect_equality(line: RuleLine, diagnostics: list[Diagnostic]) -> None:
    """Consume an optional operator, flagging anything but '='."""
    operator = line.tokens.next_operator()
    if operator is not None and operator.value != "=":
        diagnostics.append(
            error(
                f"Invalid operator for the {line.keyword} rule. Only the equality"
                " operator is supported by this rule.",
                operator.range,
            )
        )


def _missing(line: RuleLine, detail: str) -> Diagnostic:
    return error(f"Missing value for a {line.keyword} rule. {detail}", line.tokens.line_range)


def _invalid(line: RuleLine, detail: str, range: Range) -> Diagnostic:
    return error(f"Invalid value for a {line.keyword} rule. {detail}", range)


def _duplicate(line: RuleLine, token: Token[str]) -> Diagnostic:
    return warning(f"Duplicate value detected within a {line.keyword} rule.", token.range)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def parse_block(line: RuleLine) -> RuleOutcome:
    line.context.reset(root=line.keyword_range)
    if line.tokens.is_ignored:
        return RuleOutcome()
    return RuleOutcome((_trailing_text(line, Severity.WARNING),))


def parse_boolean_rule(line: RuleLine) -> RuleOutcome:
    diagnostics: list[Diagnostic] = []
    _expect_equality(line, diagnostics)

    if line.tokens.next_boolean() is None:
        literals = " or ".join(line.data.booleans)
        diagnostics.append(
            error(
                f"A boolean value, either {literals}, was expected, yet not found.",
                line.tokens.line_range,
            )
        )

    return _finish(line, diagnostics)


def parse_number_rule(line: RuleLine, equality_only: bool = False) -> RuleOutcome:
    diagnostics: list[Diagnostic] = []
    if equality_only:
        _expect_equality(line, diagnostics)
    else:
        line.tokens.next_operator()

    limits = line.data.rule_range(line.keyword)
    number = line.tokens.next_number()
    if number is None:
        diagnostics.append(_missing(line, limits.describe()))
    elif not limits.contains(number.value):
        diagnostics.append(_invalid(line, limits.describe(), number.range))

    return _finish(line, diagnostics)


def parse_font_size_rule(line: RuleLine) -> RuleOutcome:
    return parse_number_rule(line, equality_only=True)


def parse_rarity_rule(line: RuleLine) -> RuleOutcome:
    diagnostics: list[Diagnostic] = []
    detail = f"Valid values are {stylized_join(list(line.data.rarities))}."

    line.tokens.next_operator()

    value = line.tokens.next_string()
    if value is None:
        diagnostics.append(_missing(line, detail))
    elif value.value not in line.data.rarities:
        diagnostics.append(_invalid(line, detail, value.range))

    return _finish(line, diagnostics)


def parse_socket_group_rule(line: RuleLine) -> RuleOutcome:
    diagnostics: list[Diagnostic] = []
    detail = "Expected a word consisting of the R, B, G, and W characters."
    _expect_equality(line, diagnostics)

    value = line.tokens.next_string()
    if value is None:
        diagnostics.append(_missing(line, detail))
    elif not _SOCKET_GROUP_RE.fullmatch(value.value):
        diagnostics.append(_invalid(line, detail, value.range))

    return _finish(line, diagnostics)


def parse_color_rule(line: RuleLine) -> RuleOutcome:
    diagnostics: list[Diagnostic] = []
    limits = line.data.rule_range(line.keyword)
    detail = f"Expected 3-4 numbers within the {limits.min}-{limits.max} range."
    _expect_equality(line, diagnostics)

    channels: list[Token[int]] = []
    for _ in ("red", "green", "blue"):
        number = line.tokens.next_number()
        if number is None:
            diagnostics.append(_missing(line, detail))
            return RuleOutcome(tuple(diagnostics))
        if limits.min <= number.value <= limits.max:
            channels.append(number)
        else:
            diagnostics.append(_invalid(line, detail, number.range))

    alpha = line.tokens.next_number()
    if alpha is not None and not limits.min <= alpha.value <= limits.max:
        diagnostics.append(_invalid(line, detail, alpha.range))
        alpha = None

    color = None
    if len(channels) == 3:
        red, green, blue = channels
        last = alpha if alpha is not None else blue
        color = ColorInfo(
            Color(
                red.value / 255,
                green.value / 255,
                blue.value / 255,
                1.0 if alpha is None else alpha.value / 255,
            ),
            Range(red.range.start, last.range.end),
        )

    return _finish(line, diagnostics, color=color)


def parse_sound_rule(line: RuleLine) -> RuleOutcome:
    diagnostics: list[Diagnostic] = []
    sounds = line.data.sounds
    detail = (
        f"Expected a number from {sounds.number_min}-{sounds.number_max}"
        " or a valid sound identifier."
    )
    _expect_equality(line, diagnostics)

    identifier: Token[str] | None = None
    known = False

    word = line.tokens.next_word()
    if word is not None:
        if word.value in sounds.string_identifiers:
            identifier, known = word, True
        elif word.value in line.config.sound_whitelist:
            identifier = word
        else:
            diagnostics.append(_invalid(line, detail, word.range))
    else:
        number = line.tokens.next_number()
        if number is None:
            diagnostics.append(_missing(line, detail))
            return RuleOutcome(tuple(diagnostics))
        if sounds.number_min <= number.value <= sounds.number_max:
            identifier, known = Token(str(number.value), number.range), True
        else:
            diagnostics.append(_invalid(line, detail, number.range))

    volume = DEFAULT_VOLUME
    volume_token = line.tokens.next_number()
    if volume_token is not None:
        if 0 <= volume_token.value <= MAX_VOLUME:
            volume = volume_token.value
        else:
            diagnostics.append(
                _invalid(
                    line,
                    f"A volume is expected to be a value between 0 and {MAX_VOLUME}.",
                    volume_token.range,
                )
            )

    sound = None
    if identifier is not None:
        sound = SoundInfo(known, identifier.value, volume, identifier.range)
    return _finish(line, diagnostics, sound=sound)


def parse_class_rule(line: RuleLine) -> RuleOutcome:
    diagnostics: list[Diagnostic] = []
    _expect_equality(line, diagnostics)

    def is_valid(value: str) -> bool:
        return any(value in c for c in line.data.classes) or any(
            value in c for c in line.config.class_whitelist
        )

    accepted = _parse_string_values(
        line,
        diagnostics,
        is_valid,
        f"Invalid value for a {line.keyword} rule. Only item classes are valid values for this rule.",
    )
    line.context.classes.extend(accepted)
    return _finish(line, diagnostics)


def parse_base_type_rule(line: RuleLine) -> RuleOutcome:
    diagnostics: list[Diagnostic] = []
    _expect_equality(line, diagnostics)

    # One strategy per rule, decided by the classes declared so far in the block
    resolver = select_resolver(line.context, line.data)
    whitelist = line.config.base_whitelist

    _parse_string_values(
        line,
        diagnostics,
        lambda value: resolver.is_valid(value, whitelist),
        resolver.invalid_message(line.keyword),
    )
    return _finish(line, diagnostics)


def _parse_string_values(
    line: RuleLine,
    diagnostics: list[Diagnostic],
    is_valid: Callable[[str], bool],
    invalid_message: str,
) -> list[str]:
    """Consume string values until none remain; return the accepted ones."""
    accepted: list[str] = []
    while (value := line.tokens.next_string()) is not None:
        if value.value in accepted:
            diagnostics.append(_duplicate(line, value))

        if is_valid(value.value):
            accepted.append(value.value)
        else:
            diagnostics.append(error(invalid_message, value.range))

    if not accepted:
        diagnostics.append(
            error(
                f"Missing value for {line.keyword} rule. A string value was expected.",
                line.tokens.line_range,
            )
        )
    return accepted


RULE_HANDLERS: dict[RuleKind, Callable[[RuleLine], RuleOutcome]] = {
    RuleKind.BLOCK: parse_block,
    RuleKind.NUMBER: parse_number_rule,
    RuleKind.FONT_SIZE: parse_font_size_rule,
    RuleKind.RARITY: parse_rarity_rule,
    RuleKind.SOCKET_GROUP: parse_socket_group_rule,
    RuleKind.BOOLEAN: parse_boolean_rule,
    RuleKind.COLOR: parse_color_rule,
    RuleKind.CLASS: parse_class_rule,
    RuleKind.BASE_TYPE: parse_base_type_rule,
    RuleKind.SOUND: parse_sound_rule,
}
