"""Runs the provider chain and turns its output into one popup list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from inkcomplete.completion.settings_schema import NormalizedCompletionConfig
from inkcomplete.completion.suggestion import (
    EditorPosition,
    QueryContext,
    Suggestion,
    SuggestionSpanError,
    validate_suggestion_span,
)
from inkcomplete.providers.base import SuggestionProvider
from inkcomplete.services.reject_list import RejectList

logger = logging.getLogger(__name__)


class ProviderChain:
    """Fixed, ordered set of providers consulted on every trigger."""

    def __init__(self, providers: Iterable[SuggestionProvider]) -> None:
        self._providers: tuple[SuggestionProvider, ...] = tuple(providers)

    def __iter__(self) -> Iterator[SuggestionProvider]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)


@dataclass(frozen=True, slots=True)
class AggregationResult:
    suggestions: tuple[Suggestion, ...]
    anchor_start: EditorPosition
    blocked_by: str = ""


def dedupe_by_display_name(suggestions: Iterable[Suggestion]) -> list[Suggestion]:
    seen: set[str] = set()
    out: list[Suggestion] = []
    for suggestion in suggestions:
        if suggestion.display_name in seen:
            continue
        seen.add(suggestion.display_name)
        out.append(suggestion)
    return out


def _provider_name(provider: SuggestionProvider) -> str:
    return str(getattr(provider, "name", "") or type(provider).__name__)


class SuggestionAggregator:
    def __init__(self, chain: ProviderChain, reject_list: RejectList) -> None:
        self._chain = chain
        self._reject_list = reject_list

    @property
    def chain(self) -> ProviderChain:
        return self._chain

    @property
    def reject_list(self) -> RejectList:
        return self._reject_list

    def collect(self, context: QueryContext, settings: NormalizedCompletionConfig) -> tuple[list[Suggestion], EditorPosition, str]:
        suggestions: list[Suggestion] = []
        anchor_start = context.start
        blocked_by = ""
        for provider in self._chain:
            try:
                produced = list(provider.get_suggestions(context, settings) or [])
            except Exception:
                logger.warning("Provider %s failed; skipping it for this cycle", _provider_name(provider), exc_info=True)
                continue

            accepted: list[Suggestion] = []
            for suggestion in produced:
                try:
                    validate_suggestion_span(suggestion, context.span)
                except SuggestionSpanError as exc:
                    logger.warning("Dropping suggestion from %s: %s", _provider_name(provider), exc)
                    continue
                accepted.append(suggestion)
            suggestions.extend(accepted)

            if getattr(provider, "blocks_all_other_providers", False) and accepted:
                # First override start of the blocking provider wins when it mixes spans.
                for suggestion in accepted:
                    if suggestion.override_start is not None:
                        anchor_start = suggestion.override_start
                        break
                blocked_by = _provider_name(provider)
                break
        return suggestions, anchor_start, blocked_by

    def aggregate(self, context: QueryContext, settings: NormalizedCompletionConfig) -> AggregationResult | None:
        suggestions, anchor_start, blocked_by = self.collect(context, settings)
        unique = dedupe_by_display_name(suggestions)
        filtered = self._reject_list.filter_suggestions(unique)
        if not filtered:
            return None
        return AggregationResult(tuple(filtered), anchor_start, blocked_by)
