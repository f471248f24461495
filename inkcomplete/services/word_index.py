"""Word index keyed by leading character, and the builders that fill it.

A ``WordIndex`` is never mutated once built. Rebuilds create a new index and
the owner swaps its reference, so readers always see a complete index.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Mapping

from inkcomplete.services.reject_list import RejectList
from inkcomplete.services.word_storage import NEW_LINE_RE, read_lines

logger = logging.getLogger(__name__)

# Spans skipped while scanning documents: inline math, inline code, links, urls.
# None of them crosses a line break.
_SKIPPED_SPANS = r"\$+[^$\n]*\$+|`+[^`\n]*`+|\[+[^\]\n]*\]+|https?://[^\s]+"


class WordIndex:
    def __init__(self, buckets: Mapping[str, Iterable[str]] | None = None) -> None:
        self._buckets: dict[str, tuple[str, ...]] = {
            str(key): tuple(words) for key, words in (buckets or {}).items() if key
        }
        self._size = sum(len(words) for words in self._buckets.values())

    def lookup(self, first_char: str) -> tuple[str, ...]:
        return self._buckets.get(first_char, ())

    def keys(self) -> list[str]:
        return list(self._buckets)

    def words(self) -> list[str]:
        out: list[str] = []
        for words in self._buckets.values():
            out.extend(words)
        return out

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"WordIndex(buckets={len(self._buckets)}, words={self._size})"


EMPTY_INDEX = WordIndex()


def _bucketed(words: Iterable[str], reject_list: RejectList | None) -> WordIndex:
    buckets: dict[str, list[str]] = {}
    for word in words:
        buckets.setdefault(word[0], []).append(word)
    out: dict[str, list[str]] = {}
    for key, entries in buckets.items():
        entries.sort(key=len)
        kept = reject_list.filter_words(entries) if reject_list is not None else entries
        if kept:
            out[key] = kept
    return WordIndex(out)


class WordIndexBuilder:
    @staticmethod
    def from_word_lists(
        texts: Iterable[str],
        *,
        min_word_length: int,
        reject_list: RejectList | None = None,
    ) -> WordIndex:
        """Index flat word lists (one word per line), shortest words first."""
        words: list[str] = []
        for text in texts:
            for line in NEW_LINE_RE.split(text):
                if not line or len(line) < min_word_length:
                    continue
                word = line.strip()
                if word:
                    words.append(word)
        return _bucketed(words, reject_list)

    @staticmethod
    def from_word_files(
        paths: Iterable[str | Path],
        *,
        min_word_length: int,
        reject_list: RejectList | None = None,
    ) -> WordIndex:
        texts: list[str] = []
        for path in paths:
            try:
                texts.append("\n".join(read_lines(path)))
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable word list %s: %s", path, exc)
        return WordIndexBuilder.from_word_lists(
            texts,
            min_word_length=min_word_length,
            reject_list=reject_list,
        )

    @staticmethod
    def tokenize(text: str, *, character_regex: str, min_word_length: int) -> list[str]:
        pattern = re.compile(_SKIPPED_SPANS + "|([" + character_regex + "]+)")
        seen: dict[str, None] = {}
        for match in pattern.finditer(text):
            word = match.group(1)
            if word and len(word) >= min_word_length:
                seen.setdefault(word, None)
        return list(seen)

    @staticmethod
    def from_documents(
        texts: Iterable[str],
        *,
        character_regex: str,
        min_word_length: int,
        reject_list: RejectList | None = None,
        base: WordIndex | None = None,
    ) -> WordIndex:
        """Index distinct tokens of ``texts``, optionally on top of ``base``."""
        seen: dict[str, None] = dict.fromkeys(base.words()) if base is not None else {}
        for text in texts:
            for word in WordIndexBuilder.tokenize(
                text,
                character_regex=character_regex,
                min_word_length=min_word_length,
            ):
                seen.setdefault(word, None)
        return _bucketed(seen, reject_list)
