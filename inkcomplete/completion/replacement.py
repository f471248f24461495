"""Splices a chosen suggestion into the document.

Markup detection is a parity check on the current line: the cursor counts as
inside a delimiter pair when the delimiter occurs an odd number of times both
before and after the replaced span. It is not a Markdown parser.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from inkcomplete.completion.suggestion import EditorPosition, Suggestion, TriggerSpan

if TYPE_CHECKING:
    from inkcomplete.ui.editor_surface import EditorSurface

logger = logging.getLogger(__name__)

SNIPPET_MARKERS = ("#", "~")

BOLD = "**"
ITALIC = ("_", "*")
CODE = "`"


class SnippetExpander(Protocol):
    def handle_snippet(self, text: str, start: EditorPosition, editor: "EditorSurface") -> None:
        ...


@dataclass(frozen=True, slots=True)
class MarkupContext:
    bold: bool = False
    italic: bool = False
    code: bool = False


@dataclass(frozen=True, slots=True)
class AppliedReplacement:
    text: str
    start: EditorPosition
    end: EditorPosition
    cursor: EditorPosition | None
    snippet: bool = False


def is_inside_markup(before: str, marker: str, after: str) -> bool:
    return before.count(marker) % 2 == 1 and after.count(marker) % 2 == 1


def detect_markup(before: str, after: str) -> MarkupContext:
    return MarkupContext(
        bold=is_inside_markup(before, BOLD, after),
        italic=any(is_inside_markup(before, marker, after) for marker in ITALIC),
        code=is_inside_markup(before, CODE, after),
    )


def normalize_replacement(text: str, markup: MarkupContext) -> str:
    """Strip the delimiters of every markup type the cursor already sits in."""
    out = text
    if markup.bold:
        out = out.replace(BOLD, "")
    if markup.italic:
        for marker in ITALIC:
            out = out.replace(marker, "")
    if markup.code:
        out = out.replace(CODE, "")
    return out


def has_snippet_marker(text: str) -> bool:
    return any(marker in text for marker in SNIPPET_MARKERS)


def end_of_inserted(start: EditorPosition, text: str) -> EditorPosition:
    lines = text.split("\n")
    if len(lines) == 1:
        return start.with_ch(start.ch + len(text))
    return EditorPosition(start.line + len(lines) - 1, len(lines[-1]))


class ReplacementApplier:
    def __init__(self, snippet_expander: SnippetExpander | None = None) -> None:
        self._snippet_expander = snippet_expander

    @property
    def snippet_expander(self) -> SnippetExpander | None:
        return self._snippet_expander

    def set_snippet_expander(self, expander: SnippetExpander | None) -> None:
        self._snippet_expander = expander

    @staticmethod
    def resolve_span(editor: "EditorSurface", suggestion: Suggestion, span: TriggerSpan) -> tuple[EditorPosition, EditorPosition]:
        start = suggestion.override_start or span.start
        end = suggestion.override_end or span.end
        end = end.with_ch(min(end.ch, len(editor.get_line(end.line))))
        return start, end

    def apply(
        self,
        editor: "EditorSurface",
        suggestion: Suggestion,
        span: TriggerSpan,
        *,
        snippets_enabled: bool = True,
    ) -> AppliedReplacement:
        start, end = self.resolve_span(editor, suggestion, span)

        before = editor.get_line(start.line)[: start.ch]
        after = editor.get_line(end.line)[end.ch :]
        text = normalize_replacement(suggestion.replacement, detect_markup(before, after))

        editor.replace_range(text, start, end)

        if has_snippet_marker(text):
            if not snippets_enabled:
                logger.warning("Snippets are disabled in this editing mode; inserted '%s' as plain text", text)
            elif self._snippet_expander is None:
                logger.warning("No snippet expander is available; inserted '%s' as plain text", text)
            else:
                try:
                    self._snippet_expander.handle_snippet(text, start, editor)
                except Exception:
                    logger.error("Snippet expansion failed for '%s'", text, exc_info=True)
                else:
                    return AppliedReplacement(text, start, end, None, snippet=True)

        cursor = end_of_inserted(start, text)
        editor.set_cursor(cursor)
        return AppliedReplacement(text, start, end, cursor)
