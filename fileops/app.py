import logging
import os
from pathlib import Path
import sys

from PySide6.QtCore import QCoreApplication

from fileops.ops.engine import SelectionEngine
from fileops.ops.metadata_worker import MetadataLoader
from fileops.utils.config import ConfigStore


def main() -> int:
    config = ConfigStore()
    setup_logging(config)
    app = QCoreApplication(sys.argv)
    app.setApplicationName("fileops")

    directory = sys.argv[1] if len(sys.argv) > 1 else os.getcwd()
    engine = SelectionEngine(config=config)
    result = engine.load(directory)
    if not result.ok:
        print(result.summary(), file=sys.stderr)
        return 1
    entries = result.entries or []
    if not entries:
        return 0

    names = {entry.path: entry.name for entry in entries}
    remaining = set(names)
    loader = MetadataLoader(config=config)

    def _row_done(path: str, line: str) -> None:
        print(f"{names[path]}\t{line}")
        remaining.discard(path)
        if not remaining:
            app.quit()

    loader.ready.connect(lambda path, metadata: _row_done(path, metadata.details_line()))
    loader.failed.connect(_row_done)
    loader.request_all(entries)
    return app.exec()


def setup_logging(config: ConfigStore | None = None) -> None:
    log_dir = Path.home() / ".cache/fileops/logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "fileops.log"
    debug = _load_debug_flag(config)
    handlers: list[logging.Handler] = [logging.FileHandler(log_path)]
    if debug:
        handlers.append(logging.StreamHandler())
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )


def _load_debug_flag(config: ConfigStore | None) -> bool:
    try:
        return (config or ConfigStore()).get_bool("debug_logging", False)
    except OSError:
        return False


if __name__ == "__main__":
    sys.exit(main())
