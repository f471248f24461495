import json
import threading
import time

import pytest

from inkcomplete.services.index_rebuild_controller import RebuildJob
from inkcomplete.ui.markdown_window import MarkdownWindow


def _wait_idle(qapp, window, timeout=5.0):
    deadline = time.monotonic() + timeout
    while window.rebuilds.is_busy and time.monotonic() < deadline:
        qapp.processEvents()
        window.rebuilds.drain_results()
        time.sleep(0.005)
    assert not window.rebuilds.is_busy


@pytest.fixture
def window(qapp, tmp_path):
    win = MarkdownWindow(tmp_path / "data")
    _wait_idle(qapp, win)
    yield win
    win.rebuilds.shutdown()
    win.close()


@pytest.fixture
def notes(tmp_path):
    root = tmp_path / "notes"
    root.mkdir()
    (root / "first.md").write_text("gardening tips", encoding="utf-8")
    (root / "other.md").write_text("orchard harvest", encoding="utf-8")
    (root / "second.md").write_text("greenhouse", encoding="utf-8")
    return root


def test_full_scan_survives_a_later_file_open(qapp, window, notes):
    window.open_file(notes / "first.md")
    _wait_idle(qapp, window)

    release = threading.Event()
    window.rebuilds.schedule(RebuildJob("hold", lambda: release.wait(5), lambda _: None))
    window.scan_documents()
    window.open_file(notes / "second.md")
    pending = window.rebuilds.pending_names()
    assert "scan_documents" in pending
    assert any(name.startswith("scan_document:") for name in pending)

    release.set()
    _wait_idle(qapp, window)
    words = set(window.scanner_provider.index.words())
    assert {"gardening", "orchard", "harvest", "greenhouse"} <= words


def test_import_and_delete_word_list(qapp, window, tmp_path):
    source = tmp_path / "garden.txt"
    source.write_text("tulip\ntulips\nthyme", encoding="utf-8")

    assert window.import_word_list(source)
    _wait_idle(qapp, window)
    assert window.word_list_provider.index.lookup("t") == ("tulip", "thyme", "tulips")
    assert not window.import_word_list(source)

    assert window.delete_word_list("garden.txt")
    _wait_idle(qapp, window)
    assert len(window.word_list_provider.index) == 0
    assert not window.delete_word_list("garden.txt")


def test_restore_rejected_suggestion_rebuilds_indexes(qapp, window, tmp_path):
    source = tmp_path / "garden.txt"
    source.write_text("tulip\nthyme", encoding="utf-8")
    window.reject_list.add("tulip")
    window.import_word_list(source)
    _wait_idle(qapp, window)
    assert window.word_list_provider.index.lookup("t") == ("thyme",)

    assert window.restore_rejected_suggestion("tulip")
    _wait_idle(qapp, window)
    assert "tulip" in window.word_list_provider.index.lookup("t")
    assert not window.settings_manager.paths.rejected_file.read_text(encoding="utf-8").strip()


def test_settings_changes_reach_controller_and_disk(qapp, window):
    window.apply_setting("auto_trigger", False)
    assert window.controller.settings.auto_trigger is False
    assert not window._setting_actions["auto_trigger"].isChecked()
    saved = json.loads(window.settings_manager.settings_path.read_text(encoding="utf-8"))
    assert saved["auto_trigger"] is False

    window.apply_setting("word_insertion_mode", "ignore_case_append")
    assert window.controller.settings.word_insertion_mode == "ignore_case_append"
    assert window._insertion_mode_actions["ignore_case_append"].isChecked()

    window.restore_default_settings()
    assert window.controller.settings.auto_trigger is True
    assert window.controller.settings.word_insertion_mode == "ignore_case_replace"
    assert window._setting_actions["auto_trigger"].isChecked()
