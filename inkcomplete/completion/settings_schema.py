from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from inkcomplete.core.keybindings import normalize_keybindings
from inkcomplete.settings_models import (
    DEFAULT_CHARACTER_REGEX,
    WORD_INSERTION_MODES,
    CompletionSettings,
    default_completion_settings,
)


def _valid_character_class(value: Any, fallback: str) -> str:
    text = str(value or "")
    if not text:
        return fallback
    try:
        re.compile("[" + text + "]")
    except re.error:
        return fallback
    return text


def normalize_completion_settings(raw: Any) -> CompletionSettings:
    defaults = default_completion_settings()
    data = dict(defaults)
    if isinstance(raw, dict):
        for key, value in raw.items():
            data[str(key)] = value

    mode = str(data.get("word_insertion_mode", defaults["word_insertion_mode"]) or "").strip().lower()
    if mode not in WORD_INSERTION_MODES:
        mode = defaults["word_insertion_mode"]

    def _clamp_int(value: Any, low: int, high: int, fallback: int) -> int:
        try:
            return max(low, min(high, int(value)))
        except Exception:
            return fallback

    def _flag(key: str) -> bool:
        return bool(data.get(key, defaults[key]))

    return {
        "character_regex": _valid_character_class(data.get("character_regex"), DEFAULT_CHARACTER_REGEX),
        "max_look_back_distance": _clamp_int(data.get("max_look_back_distance"), 0, 1000, int(defaults["max_look_back_distance"])),
        "auto_focus": _flag("auto_focus"),
        "auto_trigger": _flag("auto_trigger"),
        "min_word_length": _clamp_int(data.get("min_word_length"), 1, 100, int(defaults["min_word_length"])),
        "min_word_trigger_length": _clamp_int(data.get("min_word_trigger_length"), 1, 100, int(defaults["min_word_trigger_length"])),
        "word_insertion_mode": mode,
        "ignore_diacritics_when_filtering": _flag("ignore_diacritics_when_filtering"),
        "insert_space_after_complete": _flag("insert_space_after_complete"),
        "insert_period_after_spaces": _flag("insert_period_after_spaces"),
        "file_scanner_provider_enabled": _flag("file_scanner_provider_enabled"),
        "file_scanner_scan_current": _flag("file_scanner_scan_current"),
        "word_list_provider_enabled": _flag("word_list_provider_enabled"),
        "callout_provider_enabled": _flag("callout_provider_enabled"),
        "snippets_enabled": _flag("snippets_enabled"),
        "keybindings": normalize_keybindings(data.get("keybindings")),
    }


@dataclass(slots=True, frozen=True)
class NormalizedCompletionConfig:
    character_regex: str
    max_look_back_distance: int
    auto_focus: bool
    auto_trigger: bool
    min_word_length: int
    min_word_trigger_length: int
    word_insertion_mode: str
    ignore_diacritics_when_filtering: bool
    insert_space_after_complete: bool
    insert_period_after_spaces: bool
    file_scanner_provider_enabled: bool
    file_scanner_scan_current: bool
    word_list_provider_enabled: bool
    callout_provider_enabled: bool
    snippets_enabled: bool
    keybindings: dict[str, dict[str, list[str]]] = field(default_factory=dict, compare=False)

    @property
    def ignore_case(self) -> bool:
        return self.word_insertion_mode != "match_case_replace"

    @classmethod
    def from_mapping(cls, data: Any) -> "NormalizedCompletionConfig":
        n = normalize_completion_settings(data)
        return cls(
            character_regex=str(n["character_regex"]),
            max_look_back_distance=int(n["max_look_back_distance"]),
            auto_focus=bool(n["auto_focus"]),
            auto_trigger=bool(n["auto_trigger"]),
            min_word_length=int(n["min_word_length"]),
            min_word_trigger_length=int(n["min_word_trigger_length"]),
            word_insertion_mode=str(n["word_insertion_mode"]),
            ignore_diacritics_when_filtering=bool(n["ignore_diacritics_when_filtering"]),
            insert_space_after_complete=bool(n["insert_space_after_complete"]),
            insert_period_after_spaces=bool(n["insert_period_after_spaces"]),
            file_scanner_provider_enabled=bool(n["file_scanner_provider_enabled"]),
            file_scanner_scan_current=bool(n["file_scanner_scan_current"]),
            word_list_provider_enabled=bool(n["word_list_provider_enabled"]),
            callout_provider_enabled=bool(n["callout_provider_enabled"]),
            snippets_enabled=bool(n["snippets_enabled"]),
            keybindings=n["keybindings"],
        )

    @classmethod
    def defaults(cls) -> "NormalizedCompletionConfig":
        return cls.from_mapping(default_completion_settings())
