"""Plain-text storage for word lists, scanned words and the reject list.

Every file is UTF-8, one entry per line.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

NEW_LINE_RE = re.compile(r"\r?\n")


def read_lines(path: str | Path, *, encoding: str = "utf-8") -> list[str]:
    return NEW_LINE_RE.split(Path(path).read_text(encoding=encoding))


def atomic_write_text(path: str | Path, text: str, *, encoding: str = "utf-8") -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(prefix=target.name + ".", suffix=".tmp", dir=str(target.parent))
    try:
        with os.fdopen(fd, "w", encoding=encoding) as handle:
            handle.write(text)
        os.replace(tmp_path, target)
    finally:
        if os.path.exists(tmp_path):
            try:
                os.unlink(tmp_path)
            except OSError:
                pass


def write_lines(path: str | Path, lines, *, encoding: str = "utf-8") -> None:
    atomic_write_text(path, "\n".join(lines), encoding=encoding)


def list_word_files(directory: str | Path) -> list[Path]:
    """Files directly inside ``directory``, creating it when missing."""
    root = Path(directory)
    root.mkdir(parents=True, exist_ok=True)
    return sorted(entry for entry in root.iterdir() if entry.is_file())


def import_word_list(directory: str | Path, name: str, text: str) -> bool:
    target = Path(directory) / Path(str(name or "")).name
    if not target.name or target.exists():
        return False
    atomic_write_text(target, text)
    return True


def delete_word_list(directory: str | Path, name: str) -> bool:
    target = Path(directory) / Path(str(name or "")).name
    if not target.name or not target.is_file():
        return False
    target.unlink()
    return True
