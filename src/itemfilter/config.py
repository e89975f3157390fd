"""User configuration: whitelists and behavior flags."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from itemfilter.errors import ConfigError

CONFIG_FILENAME = "itemfilter.toml"

# Editor settings use camelCase keys inside the "item-filter" section
SETTINGS_SECTION = "item-filter"
_SETTINGS_KEYS = {
    "classWhitelist": "class_whitelist",
    "baseWhitelist": "base_whitelist",
    "ruleWhitelist": "rule_whitelist",
    "soundWhitelist": "sound_whitelist",
    "alwaysShowAlpha": "always_show_alpha",
    "performanceHints": "performance_hints",
    "itemValueQuotes": "item_value_quotes",
    "booleanQuotes": "boolean_quotes",
    "rarityQuotes": "rarity_quotes",
}


@dataclass(frozen=True, slots=True)
class Configuration:
    """Read-only settings consumed by a parse."""

    class_whitelist: tuple[str, ...] = ()
    base_whitelist: tuple[str, ...] = ()
    rule_whitelist: tuple[str, ...] = ()
    sound_whitelist: tuple[str, ...] = ()
    always_show_alpha: bool = False
    performance_hints: bool = True
    item_value_quotes: bool = False
    boolean_quotes: bool = False
    rarity_quotes: bool = False

    def whitelists_differ(self, other: Configuration) -> bool:
        """True if a change from *other* to self requires re-validating documents."""
        return (
            self.class_whitelist != other.class_whitelist
            or self.base_whitelist != other.base_whitelist
            or self.rule_whitelist != other.rule_whitelist
            or self.sound_whitelist != other.sound_whitelist
        )


def _coerce(name: str, value: Any, source: str) -> tuple[str, ...] | bool:
    if name.endswith("_whitelist"):
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{name}' must be a list of strings", source)
        return tuple(value)
    if not isinstance(value, bool):
        raise ConfigError(f"'{name}' must be a boolean", source)
    return value


def config_from_mapping(
    values: Mapping[str, Any],
    base: Configuration | None = None,
    source: str = "<settings>",
) -> Configuration:
    """Overlay snake_case or camelCase keys from *values* onto *base*.

    Unknown keys are ignored.
    """
    known = {f.name for f in fields(Configuration)}
    changes: dict[str, Any] = {}
    for key, value in values.items():
        name = _SETTINGS_KEYS.get(key, key)
        if name in known:
            changes[name] = _coerce(name, value, source)
    return replace(base or Configuration(), **changes)


def config_from_settings(settings: Any, base: Configuration | None = None) -> Configuration | None:
    """Read the editor's settings object; None if it carries no item-filter section."""
    if not isinstance(settings, Mapping):
        return None
    section = settings.get(SETTINGS_SECTION)
    if not isinstance(section, Mapping):
        return None
    return config_from_mapping(section, base, source=SETTINGS_SECTION)


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(str(exc), str(path)) from exc
