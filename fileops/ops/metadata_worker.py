from __future__ import annotations

from itertools import count
import logging

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

from fileops.ops.entry import Entry
from fileops.ops.inventory import DEFAULT_MAX_DEPTH, MetadataCanceled, metadata_for
from fileops.utils.config import ConfigStore, DEFAULT_DATE_FORMAT

_logger = logging.getLogger(__name__)
_request_ids = count(1)


class MetadataSignals(QObject):
    finished = Signal(int, str, object)
    failed = Signal(int, str, str)
    canceled = Signal(int, str)


class MetadataWorker(QRunnable):
    def __init__(
        self,
        entry: Entry,
        date_format: str = DEFAULT_DATE_FORMAT,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        super().__init__()
        self.signals = MetadataSignals()
        self.request_id = next(_request_ids)
        self._entry = entry
        self._date_format = date_format
        self._max_depth = max_depth
        self._cancel = False

    @property
    def entry(self) -> Entry:
        return self._entry

    @property
    def canceled(self) -> bool:
        return self._cancel

    def cancel(self) -> None:
        self._cancel = True

    def run(self) -> None:
        path = self._entry.path
        if self._cancel:
            self.signals.canceled.emit(self.request_id, path)
            return
        try:
            metadata = metadata_for(
                self._entry,
                should_cancel=lambda: self._cancel,
                date_format=self._date_format,
                max_depth=self._max_depth,
            )
        except MetadataCanceled:
            self.signals.canceled.emit(self.request_id, path)
            return
        except (OSError, ValueError, OverflowError) as exc:
            self.signals.failed.emit(self.request_id, path, str(exc))
            return
        self.signals.finished.emit(self.request_id, path, metadata)


class MetadataLoader(QObject):
    """Computes row metadata on a thread pool and reports it per path.

    Results for a path that was cancelled or re-requested in the meantime are
    dropped; ``ready`` and ``failed`` are delivered on the loader's thread.
    """

    ready = Signal(str, object)
    failed = Signal(str, str)

    def __init__(
        self,
        config: ConfigStore | None = None,
        pool: QThreadPool | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        if config is not None:
            self._date_format = config.date_format()
            self._max_depth = config.get_int("folder_size_max_depth", DEFAULT_MAX_DEPTH)
        else:
            self._date_format = DEFAULT_DATE_FORMAT
            self._max_depth = DEFAULT_MAX_DEPTH
        self._workers: dict[str, MetadataWorker] = {}

    def request(self, entry: Entry) -> MetadataWorker:
        previous = self._workers.pop(entry.path, None)
        if previous is not None:
            previous.cancel()
        worker = MetadataWorker(entry, date_format=self._date_format, max_depth=self._max_depth)
        worker.signals.finished.connect(self._on_finished)
        worker.signals.failed.connect(self._on_failed)
        worker.signals.canceled.connect(self._on_canceled)
        self._workers[entry.path] = worker
        self._pool.start(worker)
        return worker

    def request_all(self, entries) -> None:
        for entry in entries:
            self.request(entry)

    def cancel(self, path: str) -> None:
        worker = self._workers.pop(path, None)
        if worker is not None:
            worker.cancel()

    def cancel_all(self) -> None:
        for worker in self._workers.values():
            worker.cancel()
        self._workers.clear()

    def pending(self) -> list[str]:
        return list(self._workers)

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self._pool.waitForDone(msecs)

    def _is_current(self, request_id: int, path: str) -> bool:
        worker = self._workers.get(path)
        return worker is not None and worker.request_id == request_id

    @Slot(int, str, object)
    def _on_finished(self, request_id: int, path: str, metadata: object) -> None:
        if not self._is_current(request_id, path):
            return
        del self._workers[path]
        self.ready.emit(path, metadata)

    @Slot(int, str, str)
    def _on_failed(self, request_id: int, path: str, message: str) -> None:
        if not self._is_current(request_id, path):
            return
        del self._workers[path]
        _logger.debug("Metadata failed for %s: %s", path, message)
        self.failed.emit(path, message)

    @Slot(int, str)
    def _on_canceled(self, request_id: int, path: str) -> None:
        if self._is_current(request_id, path):
            del self._workers[path]
