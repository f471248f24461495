from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import QPlainTextEdit, QWidget

from inkcomplete.completion.controller import CompletionController
from inkcomplete.completion.popup_state import PopupCommand, PopupSnapshot
from inkcomplete.completion.suggestion import Suggestion
from inkcomplete.core.keybindings import chord_text_for_key, get_action_sequence
from inkcomplete.ui.editor_surface import PlainTextEditSurface
from inkcomplete.ui.widgets.completion_popup import CompletionPopup

_MODIFIER_KEYS = {
    int(Qt.Key_Control),
    int(Qt.Key_Shift),
    int(Qt.Key_Alt),
    int(Qt.Key_Meta),
    int(Qt.Key_unknown),
}


def event_to_chord_text(event: QKeyEvent) -> str:
    key = int(event.key())
    if key in _MODIFIER_KEYS:
        return ""
    mods = event.modifiers() & (Qt.ControlModifier | Qt.AltModifier | Qt.ShiftModifier | Qt.MetaModifier)
    return chord_text_for_key(key, mods)


class MarkdownEditor(QPlainTextEdit):
    """Plain-text Markdown editor with the inline completion popup attached."""

    generalActionRequested = Signal(str)  # action id from the "general" scope

    _GENERAL_ACTIONS = ("action.scan_documents", "action.reload_word_lists")

    def __init__(self, controller: CompletionController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._controller = controller
        self._has_file = False
        self.surface = PlainTextEditSurface(self)

        self._popup = CompletionPopup(self)
        self._popup.suggestionClicked.connect(self._on_suggestion_clicked)
        controller.popup.add_listener(self._on_popup_state)

        self.cursorPositionChanged.connect(self._on_cursor_position_changed)

    @property
    def controller(self) -> CompletionController:
        return self._controller

    @property
    def completion_popup(self) -> CompletionPopup:
        return self._popup

    def set_has_file(self, has_file: bool) -> None:
        self._has_file = bool(has_file)

    def request_completion(self) -> None:
        self._controller.request_completion(self.surface)

    def _matches_action(self, chord: str, action_id: str) -> bool:
        sequence = get_action_sequence(self._controller.settings.keybindings, scope="general", action_id=action_id)
        return bool(chord) and chord in sequence

    def keyPressEvent(self, event: QKeyEvent) -> None:
        chord = event_to_chord_text(event)

        if self._controller.popup.is_open:
            command = self._controller.popup.command_for_chord(chord)
            if self._controller.handle_chord(self.surface, chord):
                if command is PopupCommand.APPLY:
                    self._after_apply()
                event.accept()
                return

        if self._matches_action(chord, "action.trigger_completion"):
            self.request_completion()
            event.accept()
            return
        for action_id in self._GENERAL_ACTIONS:
            if self._matches_action(chord, action_id):
                self.generalActionRequested.emit(action_id)
                event.accept()
                return

        mods = event.modifiers()
        plain = not (mods & (Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier))
        if event.key() == Qt.Key_Space and plain and self._controller.on_space_typed(self.surface):
            event.accept()
            return

        super().keyPressEvent(event)

        text = event.text()
        typed = bool(text) and text.isprintable() and plain
        if typed or event.key() == Qt.Key_Backspace:
            self._controller.on_trigger(self.surface, has_file=self._has_file)

    def focusOutEvent(self, event) -> None:
        self._controller.popup.close()
        super().focusOutEvent(event)

    def _on_cursor_position_changed(self) -> None:
        self._controller.on_cursor_activity(self.surface)

    def _on_suggestion_clicked(self, suggestion: Suggestion) -> None:
        if self._controller.apply_suggestion(self.surface, suggestion) is not None:
            self._after_apply()
        self.setFocus()

    def _after_apply(self) -> None:
        # The splice is an edit of its own; its trigger consumes the just-closed guard.
        self._controller.on_trigger(self.surface, has_file=self._has_file)

    def _on_popup_state(self, snapshot: PopupSnapshot) -> None:
        self._popup.render_snapshot(snapshot)
        if self._popup.isVisible():
            self._position_popup()

    def _position_popup(self) -> None:
        cursor_rect = self.cursorRect()
        x = cursor_rect.left()
        y = cursor_rect.bottom() + 2
        h = self._popup.visible_height()
        w = max(240, min(520, int(self.viewport().width() * 0.6)))

        # keep popup inside editor viewport
        if y + h > self.viewport().height():
            y = max(0, cursor_rect.top() - h - 2)
        if x + w > self.viewport().width():
            x = max(0, self.viewport().width() - w - 2)

        self._popup.setGeometry(x, y, w, h)
