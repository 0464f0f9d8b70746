from __future__ import annotations

from enum import Enum
import logging
import os
from pathlib import Path
from typing import Iterable

from fileops.ops.clipboard import ClipboardSource, MemoryClipboard
from fileops.ops.entry import Entry, EntryDiff, diff_entries, remove_paths, replace_entry
from fileops.ops.inventory import entry_details, format_details, list_directory
from fileops.ops.mutations import copy_file_into, delete_entries, move_entries, rename_entry
from fileops.ops.results import InventoryError, OperationResult, ResultCode
from fileops.utils.config import ConfigStore
from fileops.utils.operation_log import OperationLog

_logger = logging.getLogger(__name__)


class Mode(str, Enum):
    BROWSING = "browsing"
    SELECTING = "selecting"


class SelectionEngine:
    """Selection state and file mutations for one listing.

    The engine owns the current view (an ordered list of entries) and the
    selection set keyed by path. It is meant to be driven from a single
    thread; every mutation returns an ``OperationResult`` whose ``entries``
    field is the revised view.
    """

    def __init__(
        self,
        entries: Iterable[Entry] = (),
        directory: str | Path | None = None,
        clipboard: ClipboardSource | None = None,
        config: ConfigStore | None = None,
        operation_log: OperationLog | None = None,
    ) -> None:
        self._config = config or ConfigStore()
        self._clipboard = clipboard or MemoryClipboard()
        self._op_log = operation_log or OperationLog(self._config)
        self._directory = _normalize(directory) if directory is not None else None
        self._entries: list[Entry] = list(entries)
        self._selected: dict[str, Entry] = {}
        self._mode = Mode.BROWSING

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def is_selecting(self) -> bool:
        return self._mode is Mode.SELECTING

    @property
    def directory(self) -> str | None:
        return self._directory

    @property
    def entries(self) -> list[Entry]:
        return list(self._entries)

    @property
    def selected(self) -> list[Entry]:
        return list(self._selected.values())

    @property
    def clipboard(self) -> ClipboardSource:
        return self._clipboard

    def is_selected(self, entry: Entry) -> bool:
        return entry.path in self._selected

    def set_entries(self, entries: Iterable[Entry]) -> EntryDiff:
        previous = self._entries
        self._entries = list(entries)
        by_path = {entry.path: entry for entry in self._entries}
        self._selected = {path: by_path[path] for path in self._selected if path in by_path}
        return diff_entries(previous, self._entries)

    def load(self, directory: str | Path) -> OperationResult:
        include_hidden = self._config.get_bool("show_hidden", True)
        try:
            entries = list_directory(directory, include_hidden=include_hidden)
        except InventoryError as exc:
            _logger.warning("Cannot list %s: %s", directory, exc)
            return OperationResult.failure("load", exc.code, str(exc))
        self._directory = _normalize(directory)
        self.set_entries(entries)
        return OperationResult.success("load", entries=self.entries)

    def refresh(self) -> OperationResult:
        if self._directory is None:
            return OperationResult.failure("load", ResultCode.NOT_A_DIRECTORY)
        return self.load(self._directory)

    def begin_selection(self, entry: Entry) -> bool:
        current = self._lookup(entry)
        if current is None:
            return False
        self._mode = Mode.SELECTING
        self._selected = {current.path: current}
        return True

    def enable_selection_mode(self) -> None:
        self._mode = Mode.SELECTING

    def tap(self, entry: Entry) -> bool:
        if not self.is_selecting:
            return False
        self.toggle(entry)
        return self._lookup(entry) is not None

    def toggle(self, entry: Entry) -> bool:
        if not self.is_selecting:
            return self.begin_selection(entry)
        current = self._lookup(entry)
        if current is None:
            return False
        if current.path in self._selected:
            del self._selected[current.path]
            return False
        self._selected[current.path] = current
        return True

    def select_all(self) -> None:
        self._mode = Mode.SELECTING
        self._selected = {entry.path: entry for entry in self._entries}

    def clear_selection(self) -> None:
        self._selected.clear()

    def cancel(self) -> None:
        self._mode = Mode.BROWSING
        self._selected.clear()

    def details(self) -> OperationResult:
        if not self._selected:
            return OperationResult.failure("details", ResultCode.NOTHING_SELECTED)
        details = entry_details(self.selected, date_format=self._config.date_format())
        return OperationResult.success(
            "details",
            [item.name for item in details],
            detail=format_details(details),
        )

    def delete(self) -> OperationResult:
        result = delete_entries(self.selected)
        if result.code is ResultCode.NOTHING_SELECTED:
            return result
        gone = [entry.path for entry in result.affected]
        gone.extend(
            failure.path for failure in result.failures if failure.code is ResultCode.SOURCE_MISSING
        )
        self._entries = remove_paths(self._entries, gone)
        self._log_items("delete", result)
        self.cancel()
        result.entries = self.entries
        _logger.info("%s", result.summary())
        return result

    def rename(self, new_name: str) -> OperationResult:
        if not self._selected:
            return OperationResult.failure("rename", ResultCode.NOTHING_SELECTED)
        if len(self._selected) > 1:
            return OperationResult.failure("rename", ResultCode.MULTIPLE_SELECTED)
        entry = self.selected[0]
        result = rename_entry(entry, new_name)
        if result.entry is not None:
            self._entries = replace_entry(self._entries, entry, result.entry)
            self._selected = {result.entry.path: result.entry}
            self._op_log.append("rename", [entry.path], [result.entry.path], success=True)
        elif result.code not in _VALIDATION_ONLY:
            self._op_log.append(
                "rename",
                [entry.path],
                [str(Path(entry.path).with_name(new_name))] if new_name else [],
                success=False,
                code=result.code.value,
                error=result.detail,
            )
        result.entries = self.entries
        return result

    def move(self, destination: str | Path) -> OperationResult:
        result = move_entries(
            self.selected,
            destination,
            preserve=self._config.get_bool("preserve_metadata", True),
        )
        if result.code is ResultCode.NOTHING_SELECTED:
            return result
        if _normalize(destination) != self._directory:
            self._entries = remove_paths(self._entries, [entry.path for entry in result.affected])
        self._log_items("move", result, destination=Path(destination))
        self.cancel()
        result.entries = self.entries
        _logger.info("%s", result.summary())
        return result

    def paste(self, destination: str | Path | None = None) -> OperationResult:
        target_dir = destination if destination is not None else self._directory
        if target_dir is None:
            return OperationResult.failure("paste", ResultCode.NOT_A_DIRECTORY)
        source = self._clipboard.read_path()
        result = copy_file_into(
            source,
            target_dir,
            preserve=self._config.get_bool("preserve_metadata", True),
        )
        if result.entry is not None:
            if _normalize(target_dir) == self._directory and self._lookup(result.entry) is None:
                self._entries.append(result.entry)
            self._op_log.append("copy", [str(source)], [result.entry.path], success=True)
        elif source and result.code is ResultCode.UNKNOWN_ERROR:
            self._op_log.append(
                "copy",
                [str(source)],
                [str(target_dir)],
                success=False,
                code=result.code.value,
                error=result.detail,
            )
        result.entries = self.entries
        return result

    def _lookup(self, entry: Entry) -> Entry | None:
        for candidate in self._entries:
            if candidate.path == entry.path:
                return candidate
        return None

    def _log_items(self, action: str, result: OperationResult, destination: Path | None = None) -> None:
        def targets(path: str) -> list[str]:
            if destination is None:
                return []
            return [str(destination / Path(path).name)]

        for entry in result.affected:
            self._op_log.append(action, [entry.path], targets(entry.path), success=True)
        for failure in result.failures:
            self._op_log.append(
                action,
                [failure.path],
                targets(failure.path),
                success=False,
                code=failure.code.value,
                error=failure.detail,
            )


_VALIDATION_ONLY = {
    ResultCode.EMPTY_NAME,
    ResultCode.INVALID_NAME,
    ResultCode.NO_CHANGE,
}


def _normalize(path: str | Path) -> str:
    return os.path.normcase(os.path.abspath(os.fspath(path)))
