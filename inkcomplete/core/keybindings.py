"""Keybinding models, defaults, normalization, and conflict helpers.

Each action maps to a list of alternative chords; any of them triggers the
action. Chords are stored in Qt portable text ("Ctrl+Space", "Esc").
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from PySide6.QtGui import QKeySequence

KeybindingScope = str


@dataclass(frozen=True, slots=True)
class KeybindingAction:
    scope: KeybindingScope
    action_id: str
    action_name: str
    default_sequence: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class KeybindingConflict:
    scope: KeybindingScope
    action_id: str
    action_name: str
    sequence_text: str


KEYBINDING_ACTIONS: tuple[KeybindingAction, ...] = (
    KeybindingAction("general", "action.trigger_completion", "Trigger Completion", ("Ctrl+Space",)),
    KeybindingAction("general", "action.scan_documents", "Scan Documents", ("Ctrl+Alt+S",)),
    KeybindingAction("general", "action.reload_word_lists", "Reload Word Lists", ("Ctrl+Alt+R",)),
    KeybindingAction("popup", "action.popup_select_next", "Select Next Suggestion", ("Down", "Ctrl+N")),
    KeybindingAction("popup", "action.popup_select_previous", "Select Previous Suggestion", ("Up", "Ctrl+P")),
    KeybindingAction("popup", "action.popup_apply", "Insert Selected Suggestion", ("Return", "Tab")),
    KeybindingAction("popup", "action.popup_dismiss", "Dismiss Suggestions", ("Esc",)),
    KeybindingAction("popup", "action.popup_reject", "Never Suggest Selected Again", ("Shift+Del",)),
)

_ACTION_BY_SCOPE_ID: dict[tuple[KeybindingScope, str], KeybindingAction] = {
    (entry.scope, entry.action_id): entry for entry in KEYBINDING_ACTIONS
}


def default_keybindings() -> dict[str, dict[str, list[str]]]:
    out: dict[str, dict[str, list[str]]] = {"general": {}, "popup": {}}
    for action in KEYBINDING_ACTIONS:
        out.setdefault(action.scope, {})[action.action_id] = list(action.default_sequence)
    return out


def keybinding_actions_for_scope(scope: KeybindingScope) -> list[KeybindingAction]:
    target = str(scope or "").strip().lower()
    return [entry for entry in KEYBINDING_ACTIONS if entry.scope == target]


def action_definition(scope: KeybindingScope, action_id: str) -> KeybindingAction | None:
    return _ACTION_BY_SCOPE_ID.get((str(scope or "").strip().lower(), str(action_id or "").strip()))


def _split_sequence_tokens(text: str) -> list[str]:
    raw = str(text or "").strip()
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def _manual_canonical_chord(text: str) -> str:
    raw = str(text or "").strip()
    if not raw:
        return ""
    parts = [part.strip() for part in raw.split("+") if part.strip()]
    if not parts:
        return ""

    has_ctrl = False
    has_alt = False
    has_shift = False
    has_meta = False
    key_token = ""
    for part in parts:
        low = part.lower()
        if low in {"ctrl", "control"}:
            has_ctrl = True
            continue
        if low == "alt":
            has_alt = True
            continue
        if low == "shift":
            has_shift = True
            continue
        if low in {"meta", "cmd", "command", "super", "win"}:
            has_meta = True
            continue
        key_token = part

    if not key_token:
        return ""
    if key_token.lower() in {"escape", "esc"}:
        key_token = "Esc"
    elif key_token.lower() in {"enter", "return"}:
        key_token = "Return"
    elif len(key_token) == 1 and key_token.isalpha():
        key_token = key_token.upper()

    out: list[str] = []
    if has_ctrl:
        out.append("Ctrl")
    if has_alt:
        out.append("Alt")
    if has_shift:
        out.append("Shift")
    if has_meta:
        out.append("Meta")
    out.append(key_token)
    return "+".join(out)


def _modifiers_from_chord(chord: str) -> set[str]:
    text = str(chord or "").strip()
    if not text:
        return set()
    parts = [part.strip() for part in text.split("+") if part.strip()]
    if len(parts) <= 1:
        return set()
    return {part for part in parts[:-1]}


def canonicalize_chord_text(text: str) -> str:
    chord_text = str(text or "").strip()
    if not chord_text:
        return ""
    manual = _manual_canonical_chord(chord_text)
    sequence = QKeySequence(chord_text)
    normalized = sequence.toString(QKeySequence.PortableText).strip()
    normalized_manual = _manual_canonical_chord(normalized)
    if not normalized:
        return manual or chord_text
    # Qt drops modifiers on some punctuation chords; keep the typed ones.
    if manual and _modifiers_from_chord(manual) and not _modifiers_from_chord(normalized_manual):
        return manual
    text_out = _split_sequence_tokens(normalized)[0] if "," in normalized else normalized
    normalized_text = _manual_canonical_chord(text_out)
    return normalized_text or text_out


def chord_text_for_key(key: int, modifiers: int) -> str:
    """Portable chord text for a pressed key, comparable with configured chords."""
    try:
        pressed = QKeySequence(int(getattr(modifiers, "value", modifiers)) | int(getattr(key, "value", key)))
    except (TypeError, ValueError):
        return ""
    return canonicalize_chord_text(pressed.toString(QKeySequence.PortableText))


def normalize_sequence(value: Any) -> list[str]:
    tokens: list[str] = []
    if isinstance(value, str):
        tokens.extend(_split_sequence_tokens(value))
    elif isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, str):
                tokens.extend(_split_sequence_tokens(item))
    normalized: list[str] = []
    for token in tokens:
        text = canonicalize_chord_text(token)
        if text and text not in normalized:
            normalized.append(text)
    return normalized


def normalize_keybindings(raw: Any) -> dict[str, dict[str, list[str]]]:
    merged = default_keybindings()
    if not isinstance(raw, Mapping):
        return merged

    for scope_key, scope_payload in raw.items():
        scope = str(scope_key or "").strip().lower()
        if not scope:
            continue
        if not isinstance(scope_payload, Mapping):
            continue
        scope_map = merged.setdefault(scope, {})
        for action_key, value in scope_payload.items():
            action_id = str(action_key or "").strip()
            if not action_id:
                continue
            normalized = normalize_sequence(value)
            if normalized:
                scope_map[action_id] = normalized
    return merged


def get_action_sequence(
    keybindings: Mapping[str, Mapping[str, list[str]]] | None,
    *,
    scope: KeybindingScope,
    action_id: str,
) -> list[str]:
    normalized = normalize_keybindings(keybindings)
    scope_key = str(scope or "").strip().lower()
    action_key = str(action_id or "").strip()
    from_scope = normalized.get(scope_key, {})
    if action_key in from_scope:
        return normalize_sequence(from_scope.get(action_key))
    spec = action_definition(scope_key, action_key)
    if spec is not None:
        return normalize_sequence(list(spec.default_sequence))
    return []


def find_conflicts(
    keybindings: Mapping[str, Mapping[str, list[str]]] | None,
    *,
    scope: KeybindingScope,
) -> list[KeybindingConflict]:
    """Chords bound to more than one action of the same scope."""
    normalized = normalize_keybindings(keybindings)
    target_scope = str(scope or "").strip().lower()
    owners: dict[str, str] = {}
    conflicts: list[KeybindingConflict] = []
    for action in keybinding_actions_for_scope(target_scope):
        sequence = get_action_sequence(normalized, scope=target_scope, action_id=action.action_id)
        for chord in sequence:
            owner = owners.get(chord)
            if owner is None:
                owners[chord] = action.action_id
                continue
            conflicts.append(
                KeybindingConflict(
                    scope=target_scope,
                    action_id=action.action_id,
                    action_name=action.action_name,
                    sequence_text=chord,
                )
            )
    return conflicts


__all__ = [
    "KeybindingScope",
    "KeybindingAction",
    "KeybindingConflict",
    "KEYBINDING_ACTIONS",
    "default_keybindings",
    "keybinding_actions_for_scope",
    "action_definition",
    "canonicalize_chord_text",
    "chord_text_for_key",
    "normalize_sequence",
    "normalize_keybindings",
    "get_action_sequence",
    "find_conflicts",
]
