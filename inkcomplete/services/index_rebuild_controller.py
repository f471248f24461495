"""Background word index rebuilds with publish-on-UI-thread.

Jobs run one at a time on a single worker thread. Each job builds a fresh
index and hands it back through a queue; a QTimer pump on the UI thread then
calls the job's ``publish`` callback, which swaps the provider's reference.
A request for a job name that is already running or queued replaces the
queued one instead of running in parallel.
"""

from __future__ import annotations

import concurrent.futures
import logging
import queue
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

from PySide6.QtCore import QObject, QTimer, Signal

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RebuildJob:
    name: str
    build: Callable[[], Any]
    publish: Callable[[Any], None]
    status_text: str = ""


class IndexRebuildController(QObject):
    rebuildFinished = Signal(object)  # {name, ok, error}
    statusMessage = Signal(str)

    def __init__(self, parent: QObject | None = None, *, pump_interval_ms: int = 16) -> None:
        super().__init__(parent)
        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="inkcomplete-index")
        self._result_queue: queue.Queue[tuple[RebuildJob, Any, BaseException | None]] = queue.Queue()
        self._pending: OrderedDict[str, RebuildJob] = OrderedDict()
        self._running: RebuildJob | None = None
        self._future: concurrent.futures.Future | None = None
        self._closed = False

        self._result_pump = QTimer(self)
        self._result_pump.setInterval(max(1, int(pump_interval_ms)))
        self._result_pump.timeout.connect(self.drain_results)
        self._result_pump.start()

    @property
    def is_busy(self) -> bool:
        return self._running is not None or bool(self._pending)

    def pending_names(self) -> list[str]:
        return list(self._pending)

    def schedule(self, job: RebuildJob) -> None:
        if self._closed:
            return
        # Latest request for a name wins; it keeps its place in the queue.
        self._pending[job.name] = job
        self._start_next()

    def _start_next(self) -> None:
        if self._running is not None or not self._pending or self._closed:
            return
        _, job = self._pending.popitem(last=False)
        self._running = job
        if job.status_text:
            self.statusMessage.emit(job.status_text)
        try:
            fut = self._executor.submit(job.build)
        except RuntimeError:
            logger.warning("Index rebuild '%s' could not be started", job.name, exc_info=True)
            self._running = None
            return
        self._future = fut
        fut.add_done_callback(lambda future, item=job: self._queue_result(item, future))

    def _queue_result(self, job: RebuildJob, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            self._result_queue.put((job, None, concurrent.futures.CancelledError()))
            return
        error = future.exception()
        self._result_queue.put((job, None if error else future.result(), error))

    def drain_results(self) -> None:
        while True:
            try:
                job, result, error = self._result_queue.get_nowait()
            except queue.Empty:
                return
            self._handle_result(job, result, error)

    def _handle_result(self, job: RebuildJob, result: Any, error: BaseException | None) -> None:
        if self._running is job:
            self._running = None
            self._future = None

        ok = error is None
        if ok:
            job.publish(result)
            logger.info("Published index rebuild '%s'", job.name)
        elif not isinstance(error, concurrent.futures.CancelledError):
            logger.error("Index rebuild '%s' failed", job.name, exc_info=error)
            self.statusMessage.emit(f"Rebuilding {job.name} failed.")

        self.rebuildFinished.emit({"name": job.name, "ok": ok, "error": "" if ok else str(error)})
        self._start_next()

    def shutdown(self) -> None:
        self._closed = True
        self._pending.clear()
        self._result_pump.stop()
        if self._future is not None:
            self._future.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._running = None
        self._future = None
