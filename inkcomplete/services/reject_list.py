"""Persistent set of suggestion names the user never wants to see again."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, TypeVar

from inkcomplete.completion.suggestion import Suggestion
from inkcomplete.services.word_storage import read_lines, write_lines

logger = logging.getLogger(__name__)

_S = TypeVar("_S", bound=Suggestion)


class RejectList:
    def __init__(self, names: Iterable[str] = (), *, path: str | Path | None = None) -> None:
        self._names: frozenset[str] = frozenset(name for name in names if name)
        self.path = Path(path) if path is not None else None
        self.dirty = False

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def has(self, name: str) -> bool:
        return name in self._names

    def names(self) -> frozenset[str]:
        return self._names

    def filter_words(self, words: Iterable[str]) -> list[str]:
        return [word for word in words if word not in self._names]

    def filter_suggestions(self, suggestions: Iterable[_S]) -> list[_S]:
        return [item for item in suggestions if item.display_name not in self._names]

    # Mutation happens outside a suggestion cycle; readers always see a whole set.
    def add(self, name: str) -> bool:
        text = str(name or "")
        if not text or text in self._names:
            return False
        self._names = self._names | {text}
        self.dirty = True
        return True

    def remove(self, name: str) -> bool:
        if name not in self._names:
            return False
        self._names = self._names - {name}
        self.dirty = True
        return True

    def load(self) -> int:
        if self.path is None or not self.path.exists():
            return 0
        try:
            lines = read_lines(self.path)
        except OSError as exc:
            logger.warning("Could not read reject list %s: %s", self.path, exc)
            return 0
        self._names = frozenset(line.strip() for line in lines if line.strip())
        self.dirty = False
        return len(self._names)

    def save(self) -> None:
        if self.path is None:
            self.dirty = False
            return
        write_lines(self.path, sorted(self._names))
        self.dirty = False
