"""Editing-surface contract used by the completion engine, plus two adapters.

``TextBufferSurface`` keeps text in memory (headless use, tests);
``PlainTextEditSurface`` drives a ``QPlainTextEdit`` document.
"""

from __future__ import annotations

from typing import Protocol

from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import QPlainTextEdit

from inkcomplete.completion.suggestion import EditorPosition


class EditorSurface(Protocol):
    def line_count(self) -> int:
        ...

    def get_line(self, line: int) -> str:
        ...

    def get_range(self, start: EditorPosition, end: EditorPosition) -> str:
        ...

    def replace_range(self, text: str, start: EditorPosition, end: EditorPosition | None = None) -> None:
        ...

    def get_cursor(self) -> EditorPosition:
        ...

    def set_cursor(self, pos: EditorPosition) -> None:
        ...


class TextBufferSurface:
    def __init__(self, text: str = "", cursor: EditorPosition | None = None) -> None:
        self._lines: list[str] = text.split("\n")
        self._cursor = self._clamp(cursor or EditorPosition(0, 0))

    def get_value(self) -> str:
        return "\n".join(self._lines)

    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, line: int) -> str:
        if 0 <= line < len(self._lines):
            return self._lines[line]
        return ""

    def _clamp(self, pos: EditorPosition) -> EditorPosition:
        line = max(0, min(int(pos.line), len(self._lines) - 1))
        ch = max(0, min(int(pos.ch), len(self._lines[line])))
        return EditorPosition(line, ch)

    def _offset(self, pos: EditorPosition) -> int:
        pos = self._clamp(pos)
        return sum(len(text) + 1 for text in self._lines[: pos.line]) + pos.ch

    def get_range(self, start: EditorPosition, end: EditorPosition) -> str:
        start, end = self._clamp(start), self._clamp(end)
        if end < start:
            return ""
        if start.line == end.line:
            return self._lines[start.line][start.ch : end.ch]
        parts = [self._lines[start.line][start.ch :]]
        parts.extend(self._lines[start.line + 1 : end.line])
        parts.append(self._lines[end.line][: end.ch])
        return "\n".join(parts)

    def replace_range(self, text: str, start: EditorPosition, end: EditorPosition | None = None) -> None:
        value = self.get_value()
        begin = self._offset(start)
        finish = self._offset(end) if end is not None else begin
        if finish < begin:
            begin, finish = finish, begin
        self._lines = (value[:begin] + text + value[finish:]).split("\n")
        self._cursor = self._clamp(self._cursor)

    def get_cursor(self) -> EditorPosition:
        return self._cursor

    def set_cursor(self, pos: EditorPosition) -> None:
        self._cursor = self._clamp(pos)


class PlainTextEditSurface:
    def __init__(self, editor: QPlainTextEdit) -> None:
        self._editor = editor

    @property
    def widget(self) -> QPlainTextEdit:
        return self._editor

    def _doc_pos(self, pos: EditorPosition) -> int:
        document = self._editor.document()
        block = document.findBlockByNumber(max(0, int(pos.line)))
        if not block.isValid():
            block = document.lastBlock()
        col = max(0, min(int(pos.ch), len(block.text())))
        return int(block.position() + col)

    def line_count(self) -> int:
        return int(self._editor.document().blockCount())

    def get_line(self, line: int) -> str:
        block = self._editor.document().findBlockByNumber(int(line))
        return block.text() if block.isValid() else ""

    def get_range(self, start: EditorPosition, end: EditorPosition) -> str:
        cursor = QTextCursor(self._editor.document())
        cursor.setPosition(self._doc_pos(start))
        cursor.setPosition(self._doc_pos(end), QTextCursor.KeepAnchor)
        # Qt returns U+2029 for block separators.
        return cursor.selectedText().replace("\u2029", "\n")

    def replace_range(self, text: str, start: EditorPosition, end: EditorPosition | None = None) -> None:
        begin = self._doc_pos(start)
        finish = self._doc_pos(end) if end is not None else begin
        cursor = QTextCursor(self._editor.document())
        cursor.beginEditBlock()
        cursor.setPosition(begin)
        cursor.setPosition(finish, QTextCursor.KeepAnchor)
        cursor.insertText(text)
        cursor.endEditBlock()

    def get_cursor(self) -> EditorPosition:
        cursor = self._editor.textCursor()
        return EditorPosition(int(cursor.blockNumber()), int(cursor.positionInBlock()))

    def set_cursor(self, pos: EditorPosition) -> None:
        cursor = self._editor.textCursor()
        cursor.setPosition(self._doc_pos(pos))
        self._editor.setTextCursor(cursor)
