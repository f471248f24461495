from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from inkcomplete.ui.editor_surface import EditorSurface


class PeriodInserter:
    """Turns "word<space><space>" into "word. " right after a completion."""

    def __init__(self) -> None:
        self._allowed = False

    @property
    def can_insert_period(self) -> bool:
        return self._allowed

    def allow_insert_period(self) -> None:
        self._allowed = True

    def cancel_insert_period(self) -> None:
        self._allowed = False

    def attempt_insert_period(self, editor: "EditorSurface") -> bool:
        if not self._allowed:
            return False
        self._allowed = False

        cursor = editor.get_cursor()
        if cursor.ch < 2:
            return False
        line = editor.get_line(cursor.line)
        if line[cursor.ch - 1] != " " or line[cursor.ch - 2] == " ":
            return False

        editor.replace_range(". ", cursor.with_ch(cursor.ch - 1), cursor)
        editor.set_cursor(cursor.with_ch(cursor.ch + 1))
        return True
