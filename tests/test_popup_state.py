import pytest

from inkcomplete.completion.popup_state import (
    CloseReason,
    CompletionPopupState,
    PopupCommand,
    PopupPhase,
    SelectionDirection,
    direction_delta,
    popup_keymap,
)
from inkcomplete.completion.suggestion import EditorPosition, Suggestion, TriggerSpan
from inkcomplete.core.keybindings import default_keybindings

SPAN = TriggerSpan(EditorPosition(0, 0), EditorPosition(0, 3))


def _suggestions(*names):
    return tuple(Suggestion.from_string(n) for n in names)


def _open(auto_focus=True, names=("alpha", "beta", "gamma")):
    state = CompletionPopupState(default_keybindings())
    state.open(_suggestions(*names), SPAN, auto_focus=auto_focus)
    return state


def test_starts_closed():
    state = CompletionPopupState()
    assert state.phase is PopupPhase.CLOSED
    assert state.selected() is None
    assert state.navigate(SelectionDirection.NEXT) == -1


def test_open_with_auto_focus_selects_first():
    state = _open(auto_focus=True)
    assert state.phase is PopupPhase.OPEN_FOCUSED
    assert state.selected_index == 0
    assert state.selected().display_name == "alpha"


def test_open_without_auto_focus_is_unfocused():
    state = _open(auto_focus=False)
    assert state.phase is PopupPhase.OPEN_UNFOCUSED
    assert state.selected() is None


@pytest.mark.parametrize(
    "direction, expected",
    [
        (SelectionDirection.NEXT, 0),
        (SelectionDirection.PREVIOUS, 2),
        (SelectionDirection.NONE, 0),
    ],
)
def test_first_navigation_from_unfocused(direction, expected):
    state = _open(auto_focus=False)
    assert state.navigate(direction) == expected
    assert state.phase is PopupPhase.OPEN_FOCUSED


def test_wraps_in_both_directions():
    state = _open()
    assert state.navigate(SelectionDirection.PREVIOUS) == 2
    assert state.navigate(SelectionDirection.NEXT) == 0


def test_none_direction_keeps_index():
    state = _open()
    state.navigate(SelectionDirection.NEXT)
    assert state.navigate(SelectionDirection.NONE) == 1


def test_direction_deltas():
    assert direction_delta(SelectionDirection.NEXT) == 1
    assert direction_delta(SelectionDirection.PREVIOUS) == -1
    assert direction_delta(SelectionDirection.NONE) == 0


def test_empty_open_closes():
    state = _open()
    state.open((), SPAN, auto_focus=True)
    assert state.phase is PopupPhase.CLOSED
    assert not state.just_closed


@pytest.mark.parametrize(
    "reason, guarded",
    [
        (CloseReason.APPLIED, True),
        (CloseReason.DISMISSED, True),
        (CloseReason.INVALIDATED, False),
        (CloseReason.EMPTY, False),
    ],
)
def test_close_reasons_and_guard(reason, guarded):
    state = _open()
    assert state.close(reason)
    assert state.phase is PopupPhase.CLOSED
    assert state.suggestions == ()
    assert state.consume_just_closed() is guarded
    assert state.consume_just_closed() is False


def test_navigation_clears_guard():
    state = _open()
    state.close(CloseReason.DISMISSED)
    state.open(_suggestions("a", "b"), SPAN, auto_focus=True)
    state.navigate(SelectionDirection.NEXT)
    assert not state.just_closed


def test_listeners_see_the_same_list_until_new_result():
    state = CompletionPopupState()
    seen = []
    state.add_listener(seen.append)
    first = _suggestions("a", "b", "c")
    state.open(first, SPAN, auto_focus=True)
    state.navigate(SelectionDirection.NEXT)
    state.navigate(SelectionDirection.NEXT)
    assert all(snapshot.suggestions is first for snapshot in seen)
    assert [snapshot.selected_index for snapshot in seen] == [0, 1, 2]

    second = _suggestions("d")
    state.open(second, SPAN, auto_focus=True)
    assert seen[-1].suggestions is second


def test_reopen_keeps_focus_mode():
    state = _open(auto_focus=False)
    state.open(_suggestions("x", "y"), SPAN, auto_focus=True)
    assert state.phase is PopupPhase.OPEN_UNFOCUSED


def test_removed_listener_is_not_called():
    state = CompletionPopupState()
    seen = []
    state.add_listener(seen.append)
    state.remove_listener(seen.append)
    state.open(_suggestions("a"), SPAN, auto_focus=True)
    assert seen == []


def test_default_keymap():
    keymap = popup_keymap(default_keybindings())
    assert keymap["Down"] is PopupCommand.SELECT_NEXT
    assert keymap["Ctrl+P"] is PopupCommand.SELECT_PREVIOUS
    assert keymap["Return"] is PopupCommand.APPLY
    assert keymap["Tab"] is PopupCommand.APPLY
    assert keymap["Esc"] is PopupCommand.DISMISS
    assert keymap["Shift+Del"] is PopupCommand.REJECT


def test_chords_only_resolve_while_open():
    state = CompletionPopupState(default_keybindings())
    assert state.command_for_chord("Down") is None
    state.open(_suggestions("a"), SPAN, auto_focus=True)
    assert state.command_for_chord("Down") is PopupCommand.SELECT_NEXT
    assert state.command_for_chord("Ctrl+Q") is None


def test_custom_keybindings_replace_defaults():
    bindings = default_keybindings()
    bindings["popup"]["action.popup_apply"] = ["Ctrl+J"]
    state = CompletionPopupState(bindings)
    state.open(_suggestions("a"), SPAN, auto_focus=True)
    assert state.command_for_chord("Ctrl+J") is PopupCommand.APPLY
    assert state.command_for_chord("Return") is None
