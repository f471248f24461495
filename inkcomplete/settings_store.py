from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

from inkcomplete.services.word_storage import atomic_write_text

logger = logging.getLogger(__name__)


class SettingsStoreError(RuntimeError):
    """Raised when a settings file cannot be saved."""


def deep_merge_defaults(data: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Merge defaults into data without overwriting explicitly provided values."""
    merged = deepcopy(dict(data))
    for key, default_value in defaults.items():
        if key not in merged:
            merged[key] = deepcopy(default_value)
            continue
        current = merged[key]
        if isinstance(current, dict) and isinstance(default_value, dict):
            merged[key] = deep_merge_defaults(current, default_value)
    return merged


def dot_get(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    if not key:
        return data
    current: Any = data
    for part in key.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current


def dot_set(data: dict[str, Any], key: str, value: Any) -> None:
    if not key:
        raise ValueError("Key cannot be empty.")
    current: dict[str, Any] = data
    parts = key.split(".")
    for part in parts[:-1]:
        next_value = current.get(part)
        if not isinstance(next_value, dict):
            next_value = {}
            current[part] = next_value
        current = next_value
    current[parts[-1]] = value


class JsonSettingsStore:
    """JSON-backed mutable store with defaults and dot-key helpers."""

    def __init__(self, path: Path, defaults: Mapping[str, Any], *, persistent: bool = True) -> None:
        self.path = Path(path)
        self.defaults: dict[str, Any] = deepcopy(dict(defaults))
        self.data: dict[str, Any] = {}
        self.dirty: bool = False
        self.last_error: str | None = None
        self.persistent: bool = bool(persistent)

    def load(self) -> dict[str, Any]:
        if not self.persistent:
            self.data = deep_merge_defaults({}, self.defaults)
            self.dirty = False
            self.last_error = None
            return self.data

        missing = not self.path.exists()
        loaded: dict[str, Any] = {}
        self.last_error = None

        if not missing:
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                raw = None
                self.last_error = str(exc)
            if isinstance(raw, dict):
                loaded = raw
            elif self.last_error is None:
                self.last_error = (
                    f"Settings root in '{self.path}' must be a JSON object, "
                    f"found {type(raw).__name__}."
                )

        if self.last_error is not None:
            # Keep the invalid file untouched and run on defaults.
            logger.warning("Ignoring settings file %s: %s", self.path, self.last_error)
            self.data = deep_merge_defaults({}, self.defaults)
            self.dirty = False
            return self.data

        self.data = deep_merge_defaults(loaded, self.defaults)
        self.dirty = missing
        return self.data

    def save(self) -> None:
        if not self.persistent:
            self.dirty = False
            return
        try:
            atomic_write_text(self.path, json.dumps(self.data, indent=2, sort_keys=True))
        except OSError as exc:
            raise SettingsStoreError(f"Could not write settings file '{self.path}': {exc}") from exc
        self.dirty = False
        self.last_error = None

    def get(self, key: str, default: Any = None) -> Any:
        return dot_get(self.data, key, default)

    def set(self, key: str, value: Any) -> bool:
        current = self.get(key)
        if current == value:
            return False
        dot_set(self.data, key, value)
        self.dirty = True
        return True

    def restore_defaults(self) -> None:
        self.data = deepcopy(self.defaults)
        self.dirty = True

    def snapshot(self) -> dict[str, Any]:
        return deepcopy(self.data)
