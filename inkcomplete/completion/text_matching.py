from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from inkcomplete.completion.suggestion import EditorPosition

if TYPE_CHECKING:
    from inkcomplete.ui.editor_surface import EditorSurface


@dataclass(frozen=True, slots=True)
class WordMatch:
    query: str
    separator_char: str | None


def maybe_lower_case(text: str, lower_case: bool) -> str:
    return text.lower() if lower_case else text


def remove_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class CharacterClass:
    """Single-character predicate built from a regex character class body."""

    def __init__(self, character_regex: str = "") -> None:
        self._source: str | None = None
        self._compiled: re.Pattern[str] | None = None
        if character_regex:
            self.update(character_regex)

    @property
    def source(self) -> str:
        return self._source or ""

    def update(self, character_regex: str) -> re.Pattern[str]:
        if self._compiled is None or character_regex != self._source:
            self._compiled = re.compile("[" + character_regex + "]")
            self._source = character_regex
        return self._compiled

    def matches(self, ch: str) -> bool:
        if self._compiled is None:
            return False
        return bool(ch) and self._compiled.fullmatch(ch) is not None

    __call__ = matches


def match_word_backwards(
    editor: "EditorSurface",
    cursor: EditorPosition,
    char_predicate: Callable[[str], bool],
    max_look_back_distance: int = 50,
) -> WordMatch:
    query = ""
    separator_char: str | None = None

    # Bounded so very long lines stay cheap.
    look_back_end = max(0, cursor.ch - max(0, max_look_back_distance))
    for i in range(cursor.ch - 1, look_back_end - 1, -1):
        prev_char = editor.get_range(cursor.with_ch(i), cursor.with_ch(i + 1))
        if not char_predicate(prev_char):
            separator_char = prev_char
            break
        query = prev_char + query

    return WordMatch(query=query, separator_char=separator_char)
