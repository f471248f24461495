from __future__ import annotations

import logging
import os
from functools import partial
from pathlib import Path
from typing import Callable

from PySide6.QtGui import QAction, QActionGroup, QKeySequence
from PySide6.QtWidgets import QFileDialog, QInputDialog, QMainWindow, QWidget

from inkcomplete.completion.aggregator import ProviderChain, SuggestionAggregator
from inkcomplete.completion.controller import CompletionController
from inkcomplete.completion.settings_schema import NormalizedCompletionConfig
from inkcomplete.providers import CalloutProvider, FileScannerProvider, WordListProvider
from inkcomplete.services.index_rebuild_controller import IndexRebuildController, RebuildJob
from inkcomplete.services.reject_list import RejectList
from inkcomplete.services.word_index import WordIndex
from inkcomplete.settings_manager import SettingsManager
from inkcomplete.settings_models import WORD_INSERTION_MODES
from inkcomplete.settings_store import SettingsStoreError
from inkcomplete.ui.widgets.markdown_editor import MarkdownEditor

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown", ".txt")


def default_data_dir() -> Path:
    override = os.environ.get("INKCOMPLETE_DATA_DIR", "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".inkcomplete"


def iter_markdown_files(root: Path) -> list[Path]:
    out: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if not name.startswith(".")]
        for name in filenames:
            if name.lower().endswith(MARKDOWN_SUFFIXES):
                out.append(Path(dirpath) / name)
    return sorted(out)


def read_documents(paths: list[Path]) -> list[str]:
    texts: list[str] = []
    for path in paths:
        try:
            texts.append(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable document %s: %s", path, exc)
    return texts


class MarkdownWindow(QMainWindow):
    APP_NAME = "inkcomplete"

    def __init__(self, data_dir: str | Path | None = None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.settings_manager = SettingsManager(data_dir if data_dir is not None else default_data_dir())
        cfg = self.settings_manager.load()
        if self.settings_manager.load_error():
            logger.warning("Running with default settings: %s", self.settings_manager.load_error())

        paths = self.settings_manager.paths
        self.reject_list = RejectList(path=paths.rejected_file)
        self.reject_list.load()

        self.callout_provider = CalloutProvider()
        self.scanner_provider = FileScannerProvider(paths.scanned_words_file)
        self.word_list_provider = WordListProvider(paths.word_lists_dir)
        chain = ProviderChain([self.callout_provider, self.scanner_provider, self.word_list_provider])
        self.controller = CompletionController(cfg, SuggestionAggregator(chain, self.reject_list))

        self.rebuilds = IndexRebuildController(self)
        self.rebuilds.statusMessage.connect(self._show_status)
        self.rebuilds.rebuildFinished.connect(self._on_rebuild_finished)

        self.editor = MarkdownEditor(self.controller, self)
        self.editor.generalActionRequested.connect(self._on_general_action)
        self.setCentralWidget(self.editor)

        self._file_path: Path | None = None
        self._build_menu()
        self._update_title()
        self.resize(900, 640)

        self.reload_word_lists()

    # ---------- properties ----------

    @property
    def config(self) -> NormalizedCompletionConfig:
        return self.controller.settings

    @property
    def file_path(self) -> Path | None:
        return self._file_path

    # ---------- menu ----------

    _SETTING_TOGGLES = (
        ("auto_trigger", "Suggest While Typing"),
        ("auto_focus", "Highlight First Suggestion"),
        ("insert_space_after_complete", "Insert Space After Completion"),
        ("insert_period_after_spaces", "Insert Period After Double Space"),
        ("ignore_diacritics_when_filtering", "Ignore Diacritics"),
        ("snippets_enabled", "Expand Snippets"),
        ("callout_provider_enabled", "Callout Suggestions"),
        ("word_list_provider_enabled", "Word List Suggestions"),
        ("file_scanner_provider_enabled", "Scanned Word Suggestions"),
        ("file_scanner_scan_current", "Scan Files When Opened"),
    )
    _INSERTION_MODE_LABELS = {
        "match_case_replace": "Match Case",
        "ignore_case_replace": "Ignore Case, Replace",
        "ignore_case_append": "Ignore Case, Append",
    }
    # Changing any of these invalidates the built word indexes.
    _INDEX_SETTINGS = {"min_word_length", "character_regex", "word_list_provider_enabled", "file_scanner_provider_enabled"}

    def _build_menu(self) -> None:
        file_menu = self.menuBar().addMenu("&File")
        open_action = QAction("&Open...", self)
        open_action.setShortcut(QKeySequence.Open)
        open_action.triggered.connect(self._prompt_open_file)
        file_menu.addAction(open_action)
        save_action = QAction("&Save", self)
        save_action.setShortcut(QKeySequence.Save)
        save_action.triggered.connect(self.save_file)
        file_menu.addAction(save_action)

        words_menu = self.menuBar().addMenu("&Words")
        for label, slot in (
            ("Scan Documents", self.scan_documents),
            ("Reload Word Lists", self.reload_word_lists),
            ("Delete Scanned Words", self.delete_scanned_words),
            (None, None),
            ("Import Word List...", self._prompt_import_word_list),
            ("Delete Word List...", self._prompt_delete_word_list),
            ("Restore Rejected Suggestion...", self._prompt_restore_rejected),
        ):
            if label is None:
                words_menu.addSeparator()
                continue
            action = QAction(label, self)
            action.triggered.connect(slot)
            words_menu.addAction(action)

        settings_menu = self.menuBar().addMenu("&Settings")
        self._setting_actions: dict[str, QAction] = {}
        for key, label in self._SETTING_TOGGLES:
            action = settings_menu.addAction(label)
            action.setCheckable(True)
            action.triggered.connect(lambda checked=False, setting=key: self.apply_setting(setting, bool(checked)))
            self._setting_actions[key] = action

        mode_menu = settings_menu.addMenu("Word Insertion")
        group = QActionGroup(mode_menu)
        group.setExclusive(True)
        self._insertion_mode_actions: dict[str, QAction] = {}
        for mode in WORD_INSERTION_MODES:
            action = mode_menu.addAction(self._INSERTION_MODE_LABELS.get(mode, mode))
            action.setCheckable(True)
            action.triggered.connect(lambda checked=False, value=mode: self.apply_setting("word_insertion_mode", value))
            group.addAction(action)
            self._insertion_mode_actions[mode] = action
        self._insertion_mode_group = group

        settings_menu.addSeparator()
        restore = settings_menu.addAction("Restore Defaults")
        restore.triggered.connect(lambda _checked=False: self.restore_default_settings())
        self._sync_setting_actions()

    def _sync_setting_actions(self) -> None:
        cfg = self.config
        for key, action in self._setting_actions.items():
            action.setChecked(bool(getattr(cfg, key)))
        for mode, action in self._insertion_mode_actions.items():
            action.setChecked(mode == cfg.word_insertion_mode)

    def _prompt_open_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Open Markdown File", "", "Markdown (*.md *.markdown *.txt)")
        if path:
            self.open_file(path)

    def _prompt_import_word_list(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Import Word List", "", "Word lists (*.txt);;All files (*)")
        if path:
            self.import_word_list(path)

    def _prompt_delete_word_list(self) -> None:
        names = [path.name for path in self.word_list_provider.word_list_files()]
        if not names:
            self._show_status("No word lists to delete")
            return
        name, ok = QInputDialog.getItem(self, "Delete Word List", "Word list:", names, 0, False)
        if ok and name:
            self.delete_word_list(name)

    def _prompt_restore_rejected(self) -> None:
        names = sorted(self.reject_list.names())
        if not names:
            self._show_status("No rejected suggestions")
            return
        name, ok = QInputDialog.getItem(self, "Restore Rejected Suggestion", "Suggestion:", names, 0, False)
        if ok and name:
            self.restore_rejected_suggestion(name)

    # ---------- settings ----------

    def apply_setting(self, key: str, value: object) -> NormalizedCompletionConfig:
        before = self.config
        cfg = self.settings_manager.set(key, value)
        self._commit_settings(cfg, rebuild=key in self._INDEX_SETTINGS and getattr(before, key, None) != getattr(cfg, key, None))
        return cfg

    def restore_default_settings(self) -> NormalizedCompletionConfig:
        before = self.config
        cfg = self.settings_manager.restore_defaults()
        self._commit_settings(cfg, rebuild=any(getattr(before, key) != getattr(cfg, key) for key in self._INDEX_SETTINGS))
        return cfg

    def _commit_settings(self, cfg: NormalizedCompletionConfig, *, rebuild: bool) -> None:
        try:
            self.settings_manager.save()
        except SettingsStoreError as exc:
            self._show_status(str(exc))
        self.controller.update_settings(cfg)
        self._sync_setting_actions()
        if rebuild:
            self.reload_word_lists()

    # ---------- documents ----------

    def open_file(self, path: str | Path) -> bool:
        target = Path(path).expanduser()
        try:
            text = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._show_status(f"Could not open {target.name}: {exc}")
            return False
        self._file_path = target
        self.editor.setPlainText(text)
        self.editor.set_has_file(True)
        self._update_title()
        if self.config.file_scanner_provider_enabled and self.config.file_scanner_scan_current:
            self._schedule_scan(lambda: [text], target.name, job_name=f"scan_document:{target}")
        return True

    def save_file(self) -> None:
        if self._file_path is None:
            path, _ = QFileDialog.getSaveFileName(self, "Save Markdown File", "", "Markdown (*.md)")
            if not path:
                return
            self._file_path = Path(path)
            self.editor.set_has_file(True)
            self._update_title()
        try:
            self._file_path.write_text(self.editor.toPlainText(), encoding="utf-8")
        except OSError as exc:
            self._show_status(f"Could not save {self._file_path.name}: {exc}")
            return
        self._show_status(f"Saved {self._file_path.name}")

    def documents_root(self) -> Path:
        if self._file_path is not None:
            return self._file_path.parent
        return Path.cwd()

    # ---------- index jobs ----------

    def scan_documents(self) -> None:
        root = self.documents_root()
        current = self.editor.toPlainText()

        def collect() -> list[str]:
            texts = read_documents(iter_markdown_files(root))
            if current:
                texts.append(current)
            return texts

        self._schedule_scan(collect, str(root), job_name="scan_documents")

    def _schedule_scan(self, collect: Callable[[], list[str]], label: str, *, job_name: str) -> None:
        """Queue a scan. Only a newer request with the same ``job_name`` replaces a pending one."""
        cfg = self.config
        provider = self.scanner_provider

        def build() -> WordIndex:
            # Read at run time so a load queued earlier has been published.
            return provider.scan_documents(collect(), cfg, self.reject_list, base=provider.index)

        self.rebuilds.schedule(
            RebuildJob(
                name=job_name,
                build=build,
                publish=self.scanner_provider.publish,
                status_text=f"Scanning {label}...",
            )
        )

    def reload_word_lists(self) -> None:
        cfg = self.config
        self.rebuilds.schedule(
            RebuildJob(
                name="word_lists",
                build=partial(self.word_list_provider.build_index, cfg, self.reject_list),
                publish=self.word_list_provider.publish,
                status_text="Loading word lists...",
            )
        )
        self.rebuilds.schedule(
            RebuildJob(
                name="scanned_words",
                build=partial(self.scanner_provider.load_index, cfg, self.reject_list),
                publish=self.scanner_provider.publish,
            )
        )

    def delete_scanned_words(self) -> None:
        self.scanner_provider.delete_scanned_words()
        self._show_status("Deleted scanned words")

    def import_word_list(self, path: str | Path) -> bool:
        source = Path(path).expanduser()
        try:
            text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._show_status(f"Could not read {source.name}: {exc}")
            return False
        if not self.word_list_provider.import_word_list(source.name, text):
            self._show_status(f"A word list named {source.name} already exists")
            return False
        logger.info("Imported word list %s", source.name)
        self.reload_word_lists()
        return True

    def delete_word_list(self, name: str) -> bool:
        if not self.word_list_provider.delete_word_list(name):
            self._show_status(f"No word list named {name}")
            return False
        logger.info("Deleted word list %s", name)
        self.reload_word_lists()
        return True

    def restore_rejected_suggestion(self, name: str) -> bool:
        if not self.reject_list.remove(name):
            return False
        try:
            self.reject_list.save()
        except OSError as exc:
            logger.warning("Could not save reject list: %s", exc)
        # Indexes were built without the word.
        self.reload_word_lists()
        return True

    def _on_rebuild_finished(self, payload: object) -> None:
        if not isinstance(payload, dict) or not payload.get("ok"):
            return
        name = str(payload.get("name") or "")
        index: WordIndex | None = None
        if name == "word_lists":
            index = self.word_list_provider.index
        elif name == "scanned_words" or name.startswith("scan_document"):
            index = self.scanner_provider.index
        if index is not None:
            label = name.split(":", 1)[0].replace("_", " ")
            self._show_status(f"Indexed {len(index)} words ({label})")

    def _on_general_action(self, action_id: str) -> None:
        if action_id == "action.scan_documents":
            self.scan_documents()
        elif action_id == "action.reload_word_lists":
            self.reload_word_lists()

    # ---------- misc ----------

    def _show_status(self, text: str) -> None:
        self.statusBar().showMessage(str(text or ""), 4000)

    def _update_title(self) -> None:
        name = self._file_path.name if self._file_path is not None else "Untitled"
        self.setWindowTitle(f"{name} - {self.APP_NAME}")

    def closeEvent(self, event) -> None:
        self.rebuilds.shutdown()
        if self.reject_list.dirty:
            try:
                self.reject_list.save()
            except OSError as exc:
                logger.warning("Could not save reject list: %s", exc)
        super().closeEvent(event)
