from __future__ import annotations

from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from fileops.ops.clipboard import MemoryClipboard
from fileops.ops.engine import SelectionEngine
from fileops.utils.config import ConfigStore
from fileops.utils.operation_log import OperationLog


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def config(tmp_path: Path) -> ConfigStore:
    store = ConfigStore(config_dir=tmp_path / "config")
    store.set("operation_log_path", str(tmp_path / "logs" / "operations.jsonl"))
    return store


@pytest.fixture
def op_log(config: ConfigStore) -> OperationLog:
    return OperationLog(config)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    root = tmp_path / "files"
    root.mkdir()
    (root / "a.txt").write_bytes(b"alpha")
    (root / "b.txt").write_bytes(b"bravo!")
    (root / "docs").mkdir()
    (root / "docs" / "note.md").write_bytes(b"x" * 10)
    return root


@pytest.fixture
def engine(workdir: Path, config: ConfigStore, op_log: OperationLog) -> SelectionEngine:
    engine = SelectionEngine(clipboard=MemoryClipboard(), config=config, operation_log=op_log)
    assert engine.load(workdir).ok
    return engine


@pytest.fixture
def entry_named(engine: SelectionEngine):
    def _find(name: str):
        for entry in engine.entries:
            if entry.name == name:
                return entry
        raise KeyError(name)

    return _find
