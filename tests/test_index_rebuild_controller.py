import threading
import time

import pytest

from inkcomplete.services.index_rebuild_controller import IndexRebuildController, RebuildJob
from inkcomplete.services.word_index import WordIndex


def _wait_idle(qapp, controller, timeout=5.0):
    deadline = time.monotonic() + timeout
    while controller.is_busy and time.monotonic() < deadline:
        qapp.processEvents()
        controller.drain_results()
        time.sleep(0.005)
    assert not controller.is_busy


@pytest.fixture
def rebuilds(qapp):
    controller = IndexRebuildController()
    yield controller
    controller.shutdown()


def test_publishes_on_the_calling_thread(qapp, rebuilds):
    published = []
    main_thread = threading.get_ident()
    job = RebuildJob(
        name="words",
        build=lambda: WordIndex({"a": ["alpha"]}),
        publish=lambda index: published.append((threading.get_ident(), index)),
    )
    rebuilds.schedule(job)
    _wait_idle(qapp, rebuilds)
    assert len(published) == 1
    assert published[0][0] == main_thread
    assert published[0][1].lookup("a") == ("alpha",)


def test_requests_for_a_running_name_are_coalesced(qapp, rebuilds):
    release = threading.Event()
    builds = []
    published = []

    def slow_build(tag):
        def _build():
            builds.append(tag)
            if tag == "first":
                release.wait(5)
            return tag

        return _build

    for tag in ("first", "second", "third"):
        rebuilds.schedule(RebuildJob("words", slow_build(tag), published.append))
    assert rebuilds.pending_names() == ["words"]
    release.set()
    _wait_idle(qapp, rebuilds)

    assert builds == ["first", "third"]
    assert published == ["first", "third"]


def test_jobs_never_run_in_parallel(qapp, rebuilds):
    active = []
    overlap = []
    lock = threading.Lock()

    def build():
        with lock:
            active.append(1)
            if len(active) > 1:
                overlap.append(True)
        time.sleep(0.01)
        with lock:
            active.pop()
        return None

    for name in ("a", "b", "c"):
        rebuilds.schedule(RebuildJob(name, build, lambda _: None))
    _wait_idle(qapp, rebuilds)
    assert overlap == []


def test_failed_build_keeps_old_index(qapp, rebuilds):
    published = []
    finished = []
    rebuilds.rebuildFinished.connect(finished.append)

    def broken():
        raise OSError("disk gone")

    rebuilds.schedule(RebuildJob("words", broken, published.append))
    _wait_idle(qapp, rebuilds)
    assert published == []
    assert finished[-1]["ok"] is False
    assert "disk gone" in finished[-1]["error"]


def test_shutdown_ignores_new_jobs(qapp):
    controller = IndexRebuildController()
    controller.shutdown()
    controller.schedule(RebuildJob("words", lambda: None, lambda _: None))
    assert not controller.is_busy


def test_distinct_names_behind_a_busy_job_all_run(qapp, rebuilds):
    release = threading.Event()
    published = []
    rebuilds.schedule(RebuildJob("word_lists", lambda: release.wait(5), lambda _: None))
    rebuilds.schedule(RebuildJob("scan_documents", lambda: "full", published.append))
    rebuilds.schedule(RebuildJob("scan_document:/notes/a.md", lambda: "a.md", published.append))
    assert rebuilds.pending_names() == ["scan_documents", "scan_document:/notes/a.md"]
    release.set()
    _wait_idle(qapp, rebuilds)
    assert published == ["full", "a.md"]
