from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from inkcomplete.completion.popup_state import CloseReason, CompletionPopupState
from inkcomplete.completion.settings_schema import NormalizedCompletionConfig
from inkcomplete.completion.suggestion import EditorPosition, TriggerSpan
from inkcomplete.completion.text_matching import CharacterClass, match_word_backwards

if TYPE_CHECKING:
    from inkcomplete.ui.editor_surface import EditorSurface


@dataclass(frozen=True, slots=True)
class TriggerInfo:
    start: EditorPosition
    end: EditorPosition
    query: str
    separator_char: str | None

    @property
    def span(self) -> TriggerSpan:
        return TriggerSpan(self.start, self.end)


class TriggerDetector:
    """Finds the word being typed at the cursor.

    The popup's just-closed guard is consumed here: after a completion is
    applied or the popup is dismissed, the next trigger is swallowed once so
    the popup does not reopen on the edit it just made.
    """

    def __init__(
        self,
        settings: NormalizedCompletionConfig,
        popup: CompletionPopupState,
        *,
        on_close_request: Callable[[], None] | None = None,
    ) -> None:
        self._settings = settings
        self._popup = popup
        self._char_class = CharacterClass(settings.character_regex)
        self._on_close_request = on_close_request or (lambda: popup.close(CloseReason.INVALIDATED))

    @property
    def settings(self) -> NormalizedCompletionConfig:
        return self._settings

    def update_settings(self, settings: NormalizedCompletionConfig) -> None:
        self._settings = settings
        self._char_class.update(settings.character_regex)

    def on_trigger(self, editor: "EditorSurface", cursor: EditorPosition, *, manual: bool = False) -> TriggerInfo | None:
        if self._popup.consume_just_closed():
            return None

        if not self._settings.auto_trigger and not manual:
            self._on_close_request()
            return None

        match = match_word_backwards(
            editor,
            cursor,
            self._char_class,
            self._settings.max_look_back_distance,
        )
        return TriggerInfo(
            start=cursor.with_ch(cursor.ch - len(match.query)),
            end=cursor,
            query=match.query,
            separator_char=match.separator_char,
        )
