"""Selection state of the suggestion popup.

The state object owns the current suggestion tuple and the highlighted index
for one open cycle. Listeners get the same tuple object on every transition
until a new aggregation result is opened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping

from inkcomplete.completion.suggestion import Suggestion, TriggerSpan
from inkcomplete.core.keybindings import get_action_sequence, keybinding_actions_for_scope

logger = logging.getLogger(__name__)


class PopupPhase(Enum):
    CLOSED = "closed"
    OPEN_UNFOCUSED = "open_unfocused"
    OPEN_FOCUSED = "open_focused"


class SelectionDirection(Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    NONE = "none"


_DIRECTION_DELTA: dict[SelectionDirection, int] = {
    SelectionDirection.NEXT: 1,
    SelectionDirection.PREVIOUS: -1,
    SelectionDirection.NONE: 0,
}


def direction_delta(direction: SelectionDirection) -> int:
    return _DIRECTION_DELTA[direction]


class CloseReason(Enum):
    APPLIED = "applied"
    DISMISSED = "dismissed"
    INVALIDATED = "invalidated"
    EMPTY = "empty"


# Closing for these reasons suppresses the very next trigger.
_GUARDED_CLOSE_REASONS = frozenset({CloseReason.APPLIED, CloseReason.DISMISSED})


class PopupCommand(Enum):
    SELECT_NEXT = "action.popup_select_next"
    SELECT_PREVIOUS = "action.popup_select_previous"
    APPLY = "action.popup_apply"
    DISMISS = "action.popup_dismiss"
    REJECT = "action.popup_reject"


def popup_keymap(keybindings: Mapping[str, Mapping[str, list[str]]] | None) -> dict[str, PopupCommand]:
    """Chord text -> command, from the ``popup`` keybinding scope."""
    keymap: dict[str, PopupCommand] = {}
    for action in keybinding_actions_for_scope("popup"):
        try:
            command = PopupCommand(action.action_id)
        except ValueError:
            continue
        for chord in get_action_sequence(keybindings, scope="popup", action_id=action.action_id):
            # First action declaring a chord keeps it.
            keymap.setdefault(chord, command)
    return keymap


@dataclass(frozen=True, slots=True)
class PopupSnapshot:
    phase: PopupPhase
    suggestions: tuple[Suggestion, ...]
    selected_index: int
    span: TriggerSpan | None


PopupListener = Callable[[PopupSnapshot], None]


class CompletionPopupState:
    def __init__(self, keybindings: Mapping[str, Mapping[str, list[str]]] | None = None) -> None:
        self._phase = PopupPhase.CLOSED
        self._suggestions: tuple[Suggestion, ...] = ()
        self._selected = -1
        self._span: TriggerSpan | None = None
        self._just_closed = False
        self._listeners: list[PopupListener] = []
        self._keymap = popup_keymap(keybindings)

    # ---------- queries ----------

    @property
    def phase(self) -> PopupPhase:
        return self._phase

    @property
    def is_open(self) -> bool:
        return self._phase is not PopupPhase.CLOSED

    @property
    def is_focused(self) -> bool:
        return self._phase is PopupPhase.OPEN_FOCUSED

    @property
    def suggestions(self) -> tuple[Suggestion, ...]:
        return self._suggestions

    @property
    def selected_index(self) -> int:
        return self._selected if self.is_focused else -1

    @property
    def span(self) -> TriggerSpan | None:
        return self._span

    @property
    def just_closed(self) -> bool:
        return self._just_closed

    def selected(self) -> Suggestion | None:
        if not self.is_focused or not (0 <= self._selected < len(self._suggestions)):
            return None
        return self._suggestions[self._selected]

    def snapshot(self) -> PopupSnapshot:
        return PopupSnapshot(self._phase, self._suggestions, self.selected_index, self._span)

    # ---------- listeners ----------

    def add_listener(self, listener: PopupListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: PopupListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # ---------- keybindings ----------

    def update_keybindings(self, keybindings: Mapping[str, Mapping[str, list[str]]] | None) -> None:
        self._keymap = popup_keymap(keybindings)

    def command_for_chord(self, chord_text: str) -> PopupCommand | None:
        if not self.is_open:
            return None
        return self._keymap.get(str(chord_text or ""))

    # ---------- transitions ----------

    def open(self, suggestions: tuple[Suggestion, ...], span: TriggerSpan, *, auto_focus: bool) -> None:
        if not suggestions:
            self.close(CloseReason.EMPTY)
            return
        was_open = self.is_open
        keep_focus = self.is_focused
        self._suggestions = suggestions
        self._span = span
        if was_open:
            # New result while open: keep the focus mode, restart at the top.
            self._phase = PopupPhase.OPEN_FOCUSED if keep_focus else PopupPhase.OPEN_UNFOCUSED
        else:
            self._phase = PopupPhase.OPEN_FOCUSED if auto_focus else PopupPhase.OPEN_UNFOCUSED
        self._selected = 0 if self._phase is PopupPhase.OPEN_FOCUSED else -1
        self._notify()

    def navigate(self, direction: SelectionDirection) -> int:
        """Move the highlight; returns the new index or -1 when closed."""
        if not self.is_open:
            return -1
        count = len(self._suggestions)
        if self._phase is PopupPhase.OPEN_UNFOCUSED:
            self._phase = PopupPhase.OPEN_FOCUSED
            self._selected = count - 1 if direction is SelectionDirection.PREVIOUS else 0
        else:
            self._selected = (self._selected + direction_delta(direction)) % count
        # Navigating means the user is engaged; never suppress the next trigger.
        self._just_closed = False
        self._notify()
        return self._selected

    def close(self, reason: CloseReason = CloseReason.INVALIDATED) -> bool:
        if reason in _GUARDED_CLOSE_REASONS:
            self._just_closed = True
        if self._phase is PopupPhase.CLOSED:
            return False
        logger.debug("Closing suggestion popup: %s", reason.value)
        self._phase = PopupPhase.CLOSED
        self._suggestions = ()
        self._selected = -1
        self._span = None
        self._notify()
        return True

    def consume_just_closed(self) -> bool:
        flag = self._just_closed
        self._just_closed = False
        return flag
