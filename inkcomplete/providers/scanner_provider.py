from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from inkcomplete.completion.settings_schema import NormalizedCompletionConfig
from inkcomplete.providers.base import DictionaryProvider
from inkcomplete.services.reject_list import RejectList
from inkcomplete.services.word_index import EMPTY_INDEX, WordIndex, WordIndexBuilder
from inkcomplete.services.word_storage import write_lines

logger = logging.getLogger(__name__)


class FileScannerProvider(DictionaryProvider):
    """Words collected from document contents, persisted between sessions."""

    name = "file_scanner"

    def __init__(self, scanned_words_file: str | Path, index: WordIndex | None = None) -> None:
        super().__init__(index)
        self.scanned_words_file = Path(scanned_words_file)

    def is_enabled(self, settings: NormalizedCompletionConfig) -> bool:
        return settings.file_scanner_provider_enabled

    def load_index(self, settings: NormalizedCompletionConfig, reject_list: RejectList) -> WordIndex:
        if not self.scanned_words_file.exists():
            return EMPTY_INDEX
        return WordIndexBuilder.from_word_files(
            [self.scanned_words_file],
            min_word_length=settings.min_word_length,
            reject_list=reject_list,
        )

    def scan_documents(
        self,
        texts: Iterable[str],
        settings: NormalizedCompletionConfig,
        reject_list: RejectList,
        *,
        base: WordIndex | None = None,
    ) -> WordIndex:
        """Build an index from ``texts`` (on top of ``base``) and persist it."""
        index = WordIndexBuilder.from_documents(
            texts,
            character_regex=settings.character_regex,
            min_word_length=settings.min_word_length,
            reject_list=reject_list,
            base=base,
        )
        try:
            write_lines(self.scanned_words_file, index.words())
        except OSError as exc:
            logger.warning("Could not persist scanned words to %s: %s", self.scanned_words_file, exc)
        return index

    def delete_scanned_words(self) -> None:
        self.publish(EMPTY_INDEX)
        try:
            self.scanned_words_file.unlink()
        except FileNotFoundError:
            pass
