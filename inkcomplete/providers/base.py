"""Suggestion provider contract and the shared dictionary lookup."""

from __future__ import annotations

from typing import Protocol

from inkcomplete.completion.settings_schema import NormalizedCompletionConfig
from inkcomplete.completion.suggestion import QueryContext, Suggestion
from inkcomplete.completion.text_matching import maybe_lower_case, remove_diacritics
from inkcomplete.services.word_index import EMPTY_INDEX, WordIndex


class SuggestionProvider(Protocol):
    blocks_all_other_providers: bool

    def get_suggestions(self, context: QueryContext, settings: NormalizedCompletionConfig) -> list[Suggestion]:
        ...


class DictionaryProvider:
    """Prefix lookup over a published ``WordIndex``.

    Subclasses decide when they are enabled and how their index gets built.
    The index reference is swapped wholesale by ``publish``; a lookup keeps the
    reference it started with for its whole run.
    """

    blocks_all_other_providers = False
    name = "dictionary"

    def __init__(self, index: WordIndex | None = None) -> None:
        self._index: WordIndex = index if index is not None else EMPTY_INDEX

    @property
    def index(self) -> WordIndex:
        return self._index

    def publish(self, index: WordIndex) -> None:
        self._index = index

    def is_enabled(self, settings: NormalizedCompletionConfig) -> bool:
        return True

    def get_suggestions(self, context: QueryContext, settings: NormalizedCompletionConfig) -> list[Suggestion]:
        if not self.is_enabled(settings):
            return []
        if not context.query or len(context.query) < settings.min_word_trigger_length:
            return []

        ignore_case = settings.ignore_case
        ignore_diacritics = settings.ignore_diacritics_when_filtering

        def fold(text: str) -> str:
            text = maybe_lower_case(text, ignore_case)
            return remove_diacritics(text) if ignore_diacritics else text

        query = fold(context.query)
        if not query:
            return []
        first_char = query[0]
        index = self._index

        if ignore_diacritics:
            keys = [key for key in index.keys() if fold(key) == first_char]
        elif ignore_case:
            keys = list(dict.fromkeys((first_char, first_char.upper())))
        else:
            keys = [first_char]

        append = settings.word_insertion_mode == "ignore_case_append"
        results: list[Suggestion] = []
        for key in keys:
            for word in index.lookup(key):
                if not fold(word).startswith(query):
                    continue
                if append:
                    results.append(Suggestion.from_string(context.query + word[len(context.query):]))
                else:
                    results.append(Suggestion.from_string(word))
        return results
