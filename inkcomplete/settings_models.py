from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypedDict

from inkcomplete.core.keybindings import default_keybindings


WORD_INSERTION_MODES = (
    "match_case_replace",
    "ignore_case_replace",
    "ignore_case_append",
)

DEFAULT_CHARACTER_REGEX = "a-zA-ZöäüÖÄÜß"


class CompletionSettings(TypedDict, total=False):
    character_regex: str
    max_look_back_distance: int
    auto_focus: bool
    auto_trigger: bool
    min_word_length: int
    min_word_trigger_length: int
    word_insertion_mode: str  # match_case_replace | ignore_case_replace | ignore_case_append
    ignore_diacritics_when_filtering: bool
    insert_space_after_complete: bool
    insert_period_after_spaces: bool
    file_scanner_provider_enabled: bool
    file_scanner_scan_current: bool
    word_list_provider_enabled: bool
    callout_provider_enabled: bool
    snippets_enabled: bool
    keybindings: dict[str, dict[str, list[str]]]


@dataclass(slots=True, frozen=True)
class SettingsPaths:
    data_dir: Path
    settings_filename: str = "settings.json"
    word_lists_dirname: str = "word_lists"
    scanned_words_filename: str = "scanned_words.txt"
    rejected_filename: str = "rejected_suggestions.txt"
    settings_file: Path = field(init=False)
    word_lists_dir: Path = field(init=False)
    scanned_words_file: Path = field(init=False)
    rejected_file: Path = field(init=False)

    def __post_init__(self) -> None:
        data_dir = Path(self.data_dir).expanduser().resolve()
        object.__setattr__(self, "data_dir", data_dir)
        object.__setattr__(self, "settings_file", data_dir / self.settings_filename)
        object.__setattr__(self, "word_lists_dir", data_dir / self.word_lists_dirname)
        object.__setattr__(self, "scanned_words_file", data_dir / self.scanned_words_filename)
        object.__setattr__(self, "rejected_file", data_dir / self.rejected_filename)


def default_completion_settings() -> CompletionSettings:
    defaults: CompletionSettings = {
        "character_regex": DEFAULT_CHARACTER_REGEX,
        "max_look_back_distance": 50,
        "auto_focus": True,
        "auto_trigger": True,
        "min_word_length": 2,
        "min_word_trigger_length": 3,
        "word_insertion_mode": "ignore_case_replace",
        "ignore_diacritics_when_filtering": False,
        "insert_space_after_complete": False,
        "insert_period_after_spaces": False,
        "file_scanner_provider_enabled": True,
        "file_scanner_scan_current": True,
        "word_list_provider_enabled": True,
        "callout_provider_enabled": True,
        "snippets_enabled": True,
        "keybindings": default_keybindings(),
    }
    return deepcopy(defaults)
