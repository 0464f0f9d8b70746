from __future__ import annotations

import logging
import os
from pathlib import Path
import shutil
from typing import Iterable

from fileops.ops.entry import Entry
from fileops.ops.results import ItemFailure, OperationResult, ResultCode

_logger = logging.getLogger(__name__)

_BUFFER_SIZE = 1024 * 1024


def delete_entries(entries: Iterable[Entry]) -> OperationResult:
    """Remove every entry independently; one failure never stops the batch."""
    targets = list(entries)
    if not targets:
        return OperationResult.failure("delete", ResultCode.NOTHING_SELECTED)
    succeeded: list[str] = []
    affected: list[Entry] = []
    failures: list[ItemFailure] = []
    for entry in targets:
        path = Path(entry.path)
        if not _exists(path):
            failures.append(ItemFailure(entry.name, ResultCode.SOURCE_MISSING, path=entry.path))
            continue
        try:
            _remove_existing(path)
        except OSError as exc:
            _logger.warning("Failed to delete %s: %s", path, exc)
            failures.append(ItemFailure(entry.name, ResultCode.UNKNOWN_ERROR, str(exc), entry.path))
            continue
        succeeded.append(entry.name)
        affected.append(entry)
    return OperationResult.from_items("delete", succeeded, failures, affected=affected)


def rename_entry(entry: Entry, new_name: str) -> OperationResult:
    if not new_name or not new_name.strip():
        return OperationResult.failure("rename", ResultCode.EMPTY_NAME)
    if _invalid_name(new_name):
        return OperationResult.failure("rename", ResultCode.INVALID_NAME, new_name)
    if new_name == entry.name:
        return OperationResult.failure("rename", ResultCode.NO_CHANGE)
    source = Path(entry.path)
    if not source.exists():
        return OperationResult.failure("rename", ResultCode.SOURCE_MISSING, entry.name)
    if not source.is_file():
        return OperationResult.failure("rename", ResultCode.NOT_A_FILE, entry.name)
    target = source.with_name(new_name)
    if _exists(target) and not _case_only_rename(entry.name, new_name, source, target):
        return OperationResult.failure("rename", ResultCode.DESTINATION_EXISTS, new_name)
    try:
        source.rename(target)
    except OSError as exc:
        _logger.warning("Failed to rename %s to %s: %s", source, target, exc)
        return OperationResult.failure("rename", ResultCode.UNKNOWN_ERROR, str(exc))
    renamed = entry.renamed(target)
    _logger.info("Renamed %s to %s", source, target)
    return OperationResult.success("rename", [renamed.name], entry=renamed, affected=[entry])


def move_entries(entries: Iterable[Entry], destination: str | Path, preserve: bool = True) -> OperationResult:
    targets = list(entries)
    if not targets:
        return OperationResult.failure("move", ResultCode.NOTHING_SELECTED)
    dest_dir = Path(destination)
    succeeded: list[str] = []
    affected: list[Entry] = []
    failures: list[ItemFailure] = []
    for entry in targets:
        source = Path(entry.path)
        target = dest_dir / source.name
        code = _check_transfer(source, dest_dir, target)
        if code is not None:
            failures.append(ItemFailure(entry.name, code, path=entry.path))
            continue
        try:
            _move_file(source, target, preserve)
        except OSError as exc:
            _logger.warning("Failed to move %s: %s", source, exc)
            failures.append(ItemFailure(entry.name, ResultCode.UNKNOWN_ERROR, str(exc), entry.path))
            continue
        succeeded.append(entry.name)
        affected.append(entry)
    return OperationResult.from_items("move", succeeded, failures, affected=affected)


def copy_file_into(
    source_path: str | os.PathLike | None,
    destination: str | Path,
    preserve: bool = True,
) -> OperationResult:
    if not source_path:
        return OperationResult.failure("paste", ResultCode.EMPTY_CLIPBOARD)
    source = Path(source_path)
    dest_dir = Path(destination)
    target = dest_dir / source.name
    code = _check_transfer(source, dest_dir, target)
    if code is not None:
        return OperationResult.failure("paste", code, source.name)
    try:
        _copy_file(source, target, preserve)
    except OSError as exc:
        _logger.warning("Failed to paste %s into %s: %s", source, dest_dir, exc)
        return OperationResult.failure("paste", ResultCode.UNKNOWN_ERROR, str(exc))
    return OperationResult.success(
        "paste",
        [target.name],
        entry=Entry.from_path(target),
        affected=[Entry.from_path(source)],
    )


def _check_transfer(source: Path, dest_dir: Path, target: Path) -> ResultCode | None:
    if not source.exists():
        return ResultCode.SOURCE_MISSING
    if not source.is_file():
        return ResultCode.NOT_A_FILE
    if not dest_dir.is_dir():
        return ResultCode.NOT_A_DIRECTORY
    if _exists(target):
        return ResultCode.DESTINATION_EXISTS
    return None


def _invalid_name(name: str) -> bool:
    if name in {".", ".."}:
        return True
    if "\0" in name:
        return True
    return os.sep in name or bool(os.altsep and os.altsep in name)


def _exists(path: Path) -> bool:
    return path.exists() or path.is_symlink()


def _case_only_rename(old_name: str, new_name: str, source: Path, target: Path) -> bool:
    if old_name.casefold() != new_name.casefold() or target.is_symlink():
        return False
    try:
        if new_name in os.listdir(source.parent):
            return False
    except OSError:
        return False
    return _same_file(source, target)


def _same_file(source: Path, target: Path) -> bool:
    try:
        return os.path.samefile(source, target)
    except OSError:
        return False


def _remove_existing(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _same_filesystem(src: Path, dest: Path) -> bool:
    try:
        return src.stat().st_dev == dest.parent.stat().st_dev
    except OSError:
        return False


def _move_file(source: Path, target: Path, preserve: bool) -> None:
    if _same_filesystem(source, target):
        source.rename(target)
        return
    _copy_file(source, target, preserve)
    source.unlink()


def _copy_file(source: Path, target: Path, preserve: bool) -> None:
    created = False
    try:
        with source.open("rb") as src:
            with target.open("xb") as dst:
                created = True
                while True:
                    chunk = src.read(_BUFFER_SIZE)
                    if not chunk:
                        break
                    dst.write(chunk)
        if preserve:
            shutil.copystat(source, target, follow_symlinks=False)
    except OSError:
        # Never leave a truncated copy behind.
        if created:
            target.unlink(missing_ok=True)
        raise
