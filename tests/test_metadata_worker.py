from __future__ import annotations

from pathlib import Path
import time

import pytest
from PySide6.QtCore import QThreadPool

from fileops.ops import metadata_worker
from fileops.ops.entry import Entry
from fileops.ops.inventory import EntryMetadata
from fileops.ops.metadata_worker import MetadataLoader, MetadataWorker


def _drain(qapp, predicate, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        qapp.processEvents()
        if predicate():
            return
        time.sleep(0.01)


@pytest.fixture
def pool():
    pool = QThreadPool()
    pool.setMaxThreadCount(2)
    yield pool
    pool.waitForDone(5000)


def test_worker_emits_metadata(qapp, workdir: Path) -> None:
    worker = MetadataWorker(Entry.from_path(workdir / "docs"))
    results: list[tuple] = []
    worker.signals.finished.connect(lambda request_id, path, metadata: results.append((request_id, path, metadata)))

    worker.run()

    assert len(results) == 1
    request_id, path, metadata = results[0]
    assert request_id == worker.request_id
    assert path == str(workdir / "docs")
    assert isinstance(metadata, EntryMetadata)
    assert metadata.size == 10
    assert metadata.item_count == 1


def test_worker_reports_failure_for_missing_entry(qapp, tmp_path: Path) -> None:
    worker = MetadataWorker(Entry(name="gone", path=str(tmp_path / "gone"), is_directory=False))
    failures: list[tuple] = []
    worker.signals.failed.connect(lambda request_id, path, message: failures.append((request_id, path, message)))

    worker.run()

    assert failures and failures[0][1] == str(tmp_path / "gone")


def test_worker_reports_unrepresentable_metadata(qapp, workdir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _overflow(entry, **kwargs):
        raise OverflowError("timestamp out of range for platform time_t")

    monkeypatch.setattr(metadata_worker, "metadata_for", _overflow)
    worker = MetadataWorker(Entry.from_path(workdir / "a.txt"))
    failures: list[tuple] = []
    finished: list[str] = []
    worker.signals.failed.connect(lambda request_id, path, message: failures.append((path, message)))
    worker.signals.finished.connect(lambda request_id, path, metadata: finished.append(path))

    worker.run()

    assert failures == [(str(workdir / "a.txt"), "timestamp out of range for platform time_t")]
    assert finished == []



def test_cancelled_worker_emits_nothing_but_canceled(qapp, workdir: Path) -> None:
    worker = MetadataWorker(Entry.from_path(workdir / "docs"))
    finished: list[str] = []
    canceled: list[str] = []
    worker.signals.finished.connect(lambda request_id, path, metadata: finished.append(path))
    worker.signals.canceled.connect(lambda request_id, path: canceled.append(path))

    worker.cancel()
    worker.run()

    assert finished == []
    assert len(canceled) == 1


def test_loader_delivers_results_per_path(qapp, pool, workdir: Path) -> None:
    loader = MetadataLoader(pool=pool)
    ready: dict[str, EntryMetadata] = {}
    loader.ready.connect(lambda path, metadata: ready.__setitem__(path, metadata))
    entries = [Entry.from_path(workdir / name) for name in ("a.txt", "b.txt", "docs")]

    loader.request_all(entries)
    assert loader.wait_for_done(5000)
    _drain(qapp, lambda: len(ready) == 3)

    assert ready[str(workdir / "a.txt")].size == 5
    assert ready[str(workdir / "b.txt")].size == 6
    assert ready[str(workdir / "docs")].details_line() == "10 B | Items: 1"
    assert loader.pending() == []


def test_loader_drops_cancelled_requests(qapp, pool, workdir: Path) -> None:
    loader = MetadataLoader(pool=pool)
    ready: list[str] = []
    loader.ready.connect(lambda path, metadata: ready.append(path))
    entry = Entry.from_path(workdir / "a.txt")

    loader.request(entry)
    loader.cancel(entry.path)
    loader.wait_for_done(5000)
    _drain(qapp, lambda: False, timeout=0.2)

    assert ready == []
    assert loader.pending() == []


def test_loader_keeps_only_latest_request(qapp, pool, workdir: Path) -> None:
    loader = MetadataLoader(pool=pool)
    ready: list[str] = []
    loader.ready.connect(lambda path, metadata: ready.append(path))
    entry = Entry.from_path(workdir / "b.txt")

    loader.request(entry)
    loader.request(entry)
    loader.wait_for_done(5000)
    _drain(qapp, lambda: False, timeout=0.2)

    assert ready == [entry.path]


def test_loader_reports_failures(qapp, pool, tmp_path: Path) -> None:
    loader = MetadataLoader(pool=pool)
    failed: list[str] = []
    loader.failed.connect(lambda path, message: failed.append(path))
    missing = Entry(name="gone", path=str(tmp_path / "gone"), is_directory=False)

    loader.request(missing)
    loader.wait_for_done(5000)
    _drain(qapp, lambda: bool(failed))

    assert failed == [missing.path]


def test_loader_uses_configured_date_format(qapp, pool, workdir: Path, config) -> None:
    config.set("date_format", "%Y")
    loader = MetadataLoader(config=config, pool=pool)
    ready: list[EntryMetadata] = []
    loader.ready.connect(lambda path, metadata: ready.append(metadata))

    loader.request(Entry.from_path(workdir / "a.txt"))
    loader.wait_for_done(5000)
    _drain(qapp, lambda: bool(ready))

    assert ready[0].modified_label == str(ready[0].modified.year)
