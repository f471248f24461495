from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from inkcomplete.completion.settings_schema import NormalizedCompletionConfig, normalize_completion_settings
from inkcomplete.core.keybindings import find_conflicts
from inkcomplete.settings_models import SettingsPaths, default_completion_settings
from inkcomplete.settings_store import JsonSettingsStore

logger = logging.getLogger(__name__)


class SettingsManager:
    def __init__(self, data_dir: str | Path, *, persistent: bool = True) -> None:
        self.paths = SettingsPaths(data_dir=Path(data_dir))
        self.store = JsonSettingsStore(
            self.paths.settings_file,
            default_completion_settings(),
            persistent=persistent,
        )
        self._config = NormalizedCompletionConfig.defaults()

    @property
    def settings_path(self) -> Path:
        return self.paths.settings_file

    def load(self) -> NormalizedCompletionConfig:
        self.store.load()
        normalized = self._normalize()
        # Never overwrite a malformed settings file with regenerated defaults.
        if (normalized or self.store.dirty) and not self.store.last_error:
            self.save()
        return self._config

    def load_error(self) -> str:
        return str(self.store.last_error or "").strip()

    def config(self) -> NormalizedCompletionConfig:
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        return self.store.get(key, default)

    def set(self, key: str, value: Any) -> NormalizedCompletionConfig:
        if self.store.set(key, value):
            self._normalize()
        return self._config

    def save(self) -> None:
        self.store.save()

    def restore_defaults(self) -> NormalizedCompletionConfig:
        self.store.restore_defaults()
        self._normalize()
        return self._config

    def snapshot(self) -> dict[str, Any]:
        return self.store.snapshot()

    def _normalize(self) -> bool:
        before = self.store.snapshot()
        normalized = dict(normalize_completion_settings(before))
        changed = normalized != before
        if changed:
            self.store.data = normalized
            self.store.dirty = True

        self._config = NormalizedCompletionConfig.from_mapping(normalized)
        for conflict in find_conflicts(self._config.keybindings, scope="popup"):
            logger.warning(
                "Keybinding '%s' for '%s' is already bound to another popup action",
                conflict.sequence_text,
                conflict.action_name,
            )
        return changed
