"""LSP server for item filters: diagnostics, completion, hover and colors."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from lsprotocol.types import (
    TEXT_DOCUMENT_COLOR_PRESENTATION,
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DOCUMENT_COLOR,
    TEXT_DOCUMENT_HOVER,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    Color,
    ColorInformation,
    ColorPresentation,
    ColorPresentationParams,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeConfigurationParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DocumentColorParams,
    Hover,
    HoverParams,
    MarkupContent,
    MarkupKind,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
    TextEdit,
)
from pygls.lsp.server import LanguageServer

from itemfilter import __version__, tokens
from itemfilter.completion import SuggestionKind, get_completions
from itemfilter.config import Configuration, config_from_settings
from itemfilter.data import ReferenceData, default_reference_data
from itemfilter.diagnostics import Diagnostic as FilterDiagnostic
from itemfilter.document import parse_document, split_lines
from itemfilter.hover import get_hover
from itemfilter.results import Color as FilterColor
from itemfilter.results import FilterParseResult, SoundInfo

logger = logging.getLogger(__name__)

SOUND_NOTIFICATION = "update-sounds"

server = LanguageServer(
    "itemfilter-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


@dataclass
class ServerState:
    """Configuration, reference data and the latest parse of each open document."""

    config: Configuration = field(default_factory=Configuration)
    data: ReferenceData | None = None
    results: dict[str, FilterParseResult] = field(default_factory=dict)

    @property
    def reference_data(self) -> ReferenceData:
        if self.data is None:
            self.data = default_reference_data()
        return self.data


state = ServerState()

_COMPLETION_KINDS = {
    SuggestionKind.PROPERTY: CompletionItemKind.Property,
    SuggestionKind.VALUE: CompletionItemKind.Value,
    SuggestionKind.REFERENCE: CompletionItemKind.Reference,
    SuggestionKind.TEXT: CompletionItemKind.Text,
}

R = TypeVar("R")


def _guarded(default: Callable[[], R]) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Log a failing handler and answer with *default()* instead."""

    def decorate(handler: Callable[..., R]) -> Callable[..., R]:
        @functools.wraps(handler)
        def wrapper(*args: Any, **kwargs: Any) -> R:
            try:
                return handler(*args, **kwargs)
            except Exception:
                logger.exception("%s failed", handler.__name__)
                return default()

        return wrapper

    return decorate


# ------------------------------------------------------------------
# Conversions
# ------------------------------------------------------------------


def _to_lsp_range(r: tokens.Range) -> Range:
    return Range(
        start=Position(line=r.start.line, character=r.start.character),
        end=Position(line=r.end.line, character=r.end.character),
    )


def _to_position(p: Position) -> tokens.Position:
    return tokens.Position(p.line, p.character)


def _to_lsp_diagnostic(d: FilterDiagnostic) -> Diagnostic:
    return Diagnostic(
        range=_to_lsp_range(d.range),
        message=d.message,
        severity=DiagnosticSeverity(int(d.severity)),
        source=d.source,
    )


def _sound_payload(sound: SoundInfo) -> dict[str, Any]:
    r = sound.range
    return {
        "knownIdentifier": sound.known_identifier,
        "identifier": sound.identifier,
        "volume": sound.volume,
        "range": {
            "start": {"line": r.start.line, "character": r.start.character},
            "end": {"line": r.end.line, "character": r.end.character},
        },
    }


def _line_at(ls: LanguageServer, uri: str, line: int) -> str:
    lines = split_lines(ls.workspace.get_text_document(uri).source)
    return lines[line] if 0 <= line < len(lines) else ""


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------


def _publish(ls: LanguageServer, uri: str, result: FilterParseResult | None) -> None:
    diagnostics = [_to_lsp_diagnostic(d) for d in result.diagnostics] if result else []
    sounds = [_sound_payload(s) for s in result.sounds] if result else []
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )
    ls.protocol.notify(SOUND_NOTIFICATION, {"uri": uri, "sounds": sounds})


def _validate(ls: LanguageServer, uri: str) -> None:
    """Parse the document, cache the result and publish its diagnostics and sounds."""
    doc = ls.workspace.get_text_document(uri)
    result = parse_document(doc.source, state.config, state.reference_data)
    state.results[uri] = result
    _publish(ls, uri, result)


def _close(ls: LanguageServer, uri: str) -> None:
    state.results.pop(uri, None)
    _publish(ls, uri, None)


def _apply_settings(ls: LanguageServer, settings: Any) -> None:
    """Adopt new editor settings; re-validate open documents if whitelists changed."""
    new_config = config_from_settings(settings, state.config)
    if new_config is None:
        return

    previous, state.config = state.config, new_config
    if not new_config.whitelists_differ(previous):
        logger.info("Configuration updated")
        return

    logger.info("Whitelists changed, re-validating %d documents", len(state.results))
    for uri in list(state.results):
        _validate(ls, uri)


# ------------------------------------------------------------------
# Editor features
# ------------------------------------------------------------------


def _completion_items(ls: LanguageServer, uri: str, position: Position) -> list[CompletionItem]:
    line_text = _line_at(ls, uri, position.line)
    suggestions = get_completions(
        state.config, state.reference_data, line_text, _to_position(position)
    )
    return [
        CompletionItem(
            label=s.label,
            kind=_COMPLETION_KINDS[s.kind],
            filter_text=s.filter_text,
            text_edit=TextEdit(range=_to_lsp_range(s.range), new_text=s.new_text),
        )
        for s in suggestions
    ]


def _hover(ls: LanguageServer, uri: str, position: Position) -> Hover | None:
    line_text = _line_at(ls, uri, position.line)
    info = get_hover(state.reference_data, line_text, _to_position(position))
    if info is None:
        return None
    return Hover(
        contents=MarkupContent(kind=MarkupKind.Markdown, value=info.contents),
        range=_to_lsp_range(info.range),
    )


def _document_colors(uri: str) -> list[ColorInformation]:
    result = state.results.get(uri)
    if result is None:
        return []
    return [
        ColorInformation(
            range=_to_lsp_range(c.range),
            color=Color(red=c.color.red, green=c.color.green, blue=c.color.blue, alpha=c.color.alpha),
        )
        for c in result.colors
    ]


def _color_presentations(color: Color) -> list[ColorPresentation]:
    filter_color = FilterColor(color.red, color.green, color.blue, color.alpha)
    return [ColorPresentation(label=filter_color.presentation(state.config.always_show_alpha))]


# ------------------------------------------------------------------
# Handlers
# ------------------------------------------------------------------


@server.feature(TEXT_DOCUMENT_DID_OPEN)
@_guarded(lambda: None)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
@_guarded(lambda: None)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
@_guarded(lambda: None)
def did_close(ls: LanguageServer, params: DidCloseTextDocumentParams) -> None:
    _close(ls, params.text_document.uri)


@server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
@_guarded(lambda: None)
def did_change_configuration(ls: LanguageServer, params: DidChangeConfigurationParams) -> None:
    _apply_settings(ls, params.settings)


@server.feature(TEXT_DOCUMENT_COMPLETION, CompletionOptions(trigger_characters=['"']))
@_guarded(lambda: CompletionList(is_incomplete=False, items=[]))
def completion(ls: LanguageServer, params: CompletionParams) -> CompletionList:
    items = _completion_items(ls, params.text_document.uri, params.position)
    return CompletionList(is_incomplete=False, items=items)


@server.feature(TEXT_DOCUMENT_HOVER)
@_guarded(lambda: None)
def hover(ls: LanguageServer, params: HoverParams) -> Hover | None:
    return _hover(ls, params.text_document.uri, params.position)


@server.feature(TEXT_DOCUMENT_DOCUMENT_COLOR)
@_guarded(list)
def document_color(ls: LanguageServer, params: DocumentColorParams) -> list[ColorInformation]:
    return _document_colors(params.text_document.uri)


@server.feature(TEXT_DOCUMENT_COLOR_PRESENTATION)
@_guarded(list)
def color_presentation(
    ls: LanguageServer, params: ColorPresentationParams
) -> list[ColorPresentation]:
    return _color_presentations(params.color)


def main() -> None:
    logger.info("Starting item filter language server")
    server.start_io()
