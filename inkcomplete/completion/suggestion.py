"""Suggestion value types shared by providers, the aggregator and the popup."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


class SuggestionSpanError(ValueError):
    """Raised when a suggestion carries an inverted override span."""


@dataclass(frozen=True, slots=True, order=True)
class EditorPosition:
    line: int
    ch: int

    def with_ch(self, ch: int) -> "EditorPosition":
        return EditorPosition(self.line, int(ch))


@dataclass(frozen=True, slots=True)
class Suggestion:
    display_name: str
    replacement: str
    override_start: EditorPosition | None = None
    override_end: EditorPosition | None = None
    icon: str | None = None
    color: str | None = None
    preview: str | None = None

    @classmethod
    def from_string(cls, text: str, override_start: EditorPosition | None = None) -> "Suggestion":
        return cls(display_name=text, replacement=text, override_start=override_start)

    def with_changes(self, **changes: Any) -> "Suggestion":
        return replace(self, **changes)

    def display_name_for_matching(self, lower_case: bool) -> str:
        return self.display_name.lower() if lower_case else self.display_name


@dataclass(frozen=True, slots=True)
class TriggerSpan:
    start: EditorPosition
    end: EditorPosition

    def with_start(self, start: EditorPosition) -> "TriggerSpan":
        return TriggerSpan(start=start, end=self.end)


@dataclass(frozen=True, slots=True)
class QueryContext:
    """Everything a provider may look at for one trigger cycle."""

    query: str
    separator_char: str | None
    start: EditorPosition
    end: EditorPosition
    editor: Any = field(default=None, compare=False)
    has_file: bool = True

    @property
    def span(self) -> TriggerSpan:
        return TriggerSpan(self.start, self.end)


def validate_suggestion_span(suggestion: Suggestion, span: TriggerSpan) -> None:
    """Raise ``SuggestionSpanError`` for an override the splice cannot use.

    Overrides must keep ``start <= end`` and stay on the trigger line or a line
    adjacent to it.
    """
    start = suggestion.override_start or span.start
    end = suggestion.override_end or span.end
    if start > end:
        raise SuggestionSpanError(
            f"Suggestion '{suggestion.display_name}' has an inverted span: "
            f"{start.line}:{start.ch} > {end.line}:{end.ch}"
        )
    low, high = span.start.line - 1, span.end.line + 1
    for pos in (suggestion.override_start, suggestion.override_end):
        if pos is not None and not low <= pos.line <= high:
            raise SuggestionSpanError(
                f"Suggestion '{suggestion.display_name}' overrides line {pos.line}, "
                f"outside lines {max(0, low)}-{high} around the trigger"
            )


__all__ = [
    "EditorPosition",
    "QueryContext",
    "Suggestion",
    "SuggestionSpanError",
    "TriggerSpan",
    "validate_suggestion_span",
]
