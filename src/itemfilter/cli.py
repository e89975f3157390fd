"""Command-line interface for the item filter validator."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from itemfilter.config import (
    CONFIG_FILENAME,
    SETTINGS_SECTION,
    Configuration,
    config_from_mapping,
    load_config,
)
from itemfilter.data import load_reference_data
from itemfilter.debug import dump_result
from itemfilter.document import parse_document, split_lines
from itemfilter.errors import ConfigError, ReferenceDataError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None
    config: Configuration
    data_dir: Path | None
    debug: bool
    verbose: bool
    lsp: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="itemfilter",
        description="Validate Path of Exile item filters",
    )
    p.add_argument("input", nargs="?", help="Input .filter file")
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover itemfilter.toml)",
    )
    p.add_argument(
        "--data-dir",
        metavar="DIR",
        help="Directory holding the reference data JSON files",
    )
    p.add_argument(
        "--rule-whitelist",
        action="append",
        default=[],
        metavar="NAME",
        help="Extra keyword to accept (repeatable)",
    )
    p.add_argument(
        "--class-whitelist",
        action="append",
        default=[],
        metavar="NAME",
        help="Extra item class to accept (repeatable)",
    )
    p.add_argument(
        "--base-whitelist",
        action="append",
        default=[],
        metavar="NAME",
        help="Extra base type to accept (repeatable)",
    )
    p.add_argument(
        "--sound-whitelist",
        action="append",
        default=[],
        metavar="NAME",
        help="Extra sound identifier to accept (repeatable)",
    )
    p.add_argument("--debug", action="store_true", help="Dump per-line results to stderr")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--lsp", action="store_true", help="Run the language server over stdio")
    return p


def _settings_table(raw: dict[str, Any]) -> dict[str, Any]:
    """Settings live in an [item-filter] table or at the top level."""
    section = raw.get(SETTINGS_SECTION)
    if isinstance(section, dict):
        return section
    return raw


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags. Whitelists from both
    sources are concatenated.
    """
    input_file = Path(args.input) if args.input else None
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    raw = load_config(config_path, input_dir)
    settings = _settings_table(raw)
    source = str(config_path or input_dir / CONFIG_FILENAME)
    config = config_from_mapping(settings, source=source)

    # Whitelists: config + CLI
    config = config_from_mapping(
        {
            "class_whitelist": [*config.class_whitelist, *args.class_whitelist],
            "base_whitelist": [*config.base_whitelist, *args.base_whitelist],
            "rule_whitelist": [*config.rule_whitelist, *args.rule_whitelist],
            "sound_whitelist": [*config.sound_whitelist, *args.sound_whitelist],
        },
        config,
        source="<command line>",
    )

    # Data directory: config < CLI
    data_dir: Path | None = None
    cfg_data_dir = settings.get("data_dir", settings.get("dataDir"))
    if isinstance(cfg_data_dir, str):
        data_dir = input_dir / cfg_data_dir
    if args.data_dir:
        data_dir = Path(args.data_dir)

    return CliOptions(
        input_file=input_file,
        config=config,
        data_dir=data_dir,
        debug=args.debug,
        verbose=args.verbose,
        lsp=args.lsp,
    )


def check_file(input_file: Path, options: CliOptions) -> int:
    """Validate *input_file*, print its diagnostics and return the exit code."""
    data = load_reference_data(options.data_dir)
    source = input_file.read_text(encoding="utf-8")
    logger.debug("Checking %s", input_file)
    result = parse_document(source, options.config, data)

    if options.debug:
        dump_result(result)

    lines = split_lines(source)
    for d in result.diagnostics:
        row = d.range.start.line
        print(d.format(lines[row] if row < len(lines) else "", str(input_file)), file=sys.stderr)

    return 1 if result.has_errors else 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.lsp and not args.input:
        print("error: an input file is required unless --lsp is given", file=sys.stderr)
        return 2

    try:
        options = resolve_options(args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.lsp or options.input_file is None:
        from itemfilter import lsp

        lsp.state.config = options.config
        if options.data_dir is not None:
            try:
                lsp.state.data = load_reference_data(options.data_dir)
            except ReferenceDataError as exc:
                print(f"error: {exc}", file=sys.stderr)
                return 2
        lsp.main()
        return 0

    try:
        return check_file(options.input_file, options)
    except ReferenceDataError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


def run() -> None:
    """Console-script wrapper around main()."""
    sys.exit(main())
