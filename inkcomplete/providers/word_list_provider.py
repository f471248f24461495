from __future__ import annotations

import logging
from pathlib import Path

from inkcomplete.completion.settings_schema import NormalizedCompletionConfig
from inkcomplete.providers.base import DictionaryProvider
from inkcomplete.services import word_storage
from inkcomplete.services.reject_list import RejectList
from inkcomplete.services.word_index import WordIndex, WordIndexBuilder

logger = logging.getLogger(__name__)


class WordListProvider(DictionaryProvider):
    """Words from the curated line-per-word files in the word list directory."""

    name = "word_list"

    def __init__(self, directory: str | Path, index: WordIndex | None = None) -> None:
        super().__init__(index)
        self.directory = Path(directory)

    def is_enabled(self, settings: NormalizedCompletionConfig) -> bool:
        return settings.word_list_provider_enabled

    def word_list_files(self) -> list[Path]:
        return word_storage.list_word_files(self.directory)

    def build_index(self, settings: NormalizedCompletionConfig, reject_list: RejectList) -> WordIndex:
        """Read every word list and build a fresh index. Safe to run off the UI thread."""
        files = self.word_list_files()
        index = WordIndexBuilder.from_word_files(
            files,
            min_word_length=settings.min_word_length,
            reject_list=reject_list,
        )
        logger.info("Indexed %d words from %d word list(s)", len(index), len(files))
        return index

    def import_word_list(self, name: str, text: str) -> bool:
        return word_storage.import_word_list(self.directory, name, text)

    def delete_word_list(self, name: str) -> bool:
        return word_storage.delete_word_list(self.directory, name)
