from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
import os
from pathlib import Path
from typing import Callable, Iterable

from fileops.ops.entry import Entry
from fileops.ops.results import AccessDenied, NotADirectory
from fileops.utils.config import DEFAULT_DATE_FORMAT

_logger = logging.getLogger(__name__)

_UNITS = ("KB", "MB", "GB")
DEFAULT_MAX_DEPTH = 64


class MetadataCanceled(RuntimeError):
    pass


@dataclass(frozen=True)
class EntryMetadata:
    size: int
    modified: datetime
    item_count: int | None
    size_label: str
    modified_label: str

    @property
    def count_label(self) -> str | None:
        if self.item_count is None:
            return None
        return f"Items: {self.item_count}"

    def details_line(self) -> str:
        if self.count_label is not None:
            return f"{self.size_label} | {self.count_label}"
        return f"{self.size_label} | {self.modified_label}"


@dataclass(frozen=True)
class EntryDetails:
    name: str
    path: str
    is_directory: bool
    size_label: str
    modified_label: str


def list_directory(directory: str | Path, include_hidden: bool = True) -> list[Entry]:
    root = Path(directory)
    try:
        is_directory = root.is_dir()
    except PermissionError as exc:
        raise AccessDenied(str(root), str(exc)) from exc
    if not is_directory:
        raise NotADirectory(str(root))
    entries: list[Entry] = []
    try:
        with os.scandir(root) as items:
            for item in items:
                if not include_hidden and item.name.startswith("."):
                    continue
                try:
                    is_dir = item.is_dir()
                except OSError:
                    is_dir = False
                entries.append(
                    Entry(
                        name=item.name,
                        path=os.path.abspath(item.path),
                        is_directory=is_dir,
                    )
                )
    except PermissionError as exc:
        raise AccessDenied(str(root), str(exc)) from exc
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise NotADirectory(str(root), str(exc)) from exc
    _logger.debug("Listed %d entries in %s", len(entries), root)
    return entries


def format_size(size: int) -> str:
    size = max(int(size), 0)
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in _UNITS:
        value /= 1024
        if value < 1024 or unit == _UNITS[-1]:
            return f"{value:.2f} {unit}"
    return f"{value:.2f} {_UNITS[-1]}"


def format_timestamp(timestamp: float, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    return datetime.fromtimestamp(timestamp).strftime(date_format)


def folder_size(
    root: str | Path,
    should_cancel: Callable[[], bool] | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> int:
    """Sum the sizes of every file below ``root``.

    Directories contribute only their descendants' bytes. Symlinks are never
    followed, subtrees deeper than ``max_depth`` are skipped and unreadable
    directories count as empty.
    """
    total = 0
    stack: list[tuple[Path, int]] = [(Path(root), 0)]
    while stack:
        if should_cancel is not None and should_cancel():
            raise MetadataCanceled(str(root))
        current, depth = stack.pop()
        try:
            with os.scandir(current) as items:
                for item in items:
                    try:
                        if item.is_symlink():
                            continue
                        if item.is_dir(follow_symlinks=False):
                            if depth < max_depth:
                                stack.append((Path(item.path), depth + 1))
                        elif item.is_file(follow_symlinks=False):
                            total += item.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except OSError:
            _logger.debug("Skipping unreadable directory %s", current)
            continue
    return total


def count_files(directory: str | Path) -> int:
    try:
        with os.scandir(directory) as items:
            return sum(1 for item in items if _is_plain_file(item))
    except OSError:
        return 0


def _is_plain_file(item: os.DirEntry) -> bool:
    try:
        return item.is_file()
    except OSError:
        return False


def metadata_for(
    entry: Entry,
    should_cancel: Callable[[], bool] | None = None,
    date_format: str = DEFAULT_DATE_FORMAT,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> EntryMetadata:
    info = os.stat(entry.path)
    if entry.is_directory:
        size = folder_size(entry.path, should_cancel=should_cancel, max_depth=max_depth)
        item_count: int | None = count_files(entry.path)
    else:
        size = info.st_size
        item_count = None
    return EntryMetadata(
        size=size,
        modified=datetime.fromtimestamp(info.st_mtime),
        item_count=item_count,
        size_label=format_size(size),
        modified_label=format_timestamp(info.st_mtime, date_format),
    )


def entry_details(
    entries: Iterable[Entry],
    date_format: str = DEFAULT_DATE_FORMAT,
) -> list[EntryDetails]:
    details: list[EntryDetails] = []
    for entry in entries:
        try:
            metadata = metadata_for(entry, date_format=date_format)
            size_label = metadata.size_label
            modified_label = metadata.modified_label
        except OSError:
            size_label = "--"
            modified_label = "--"
        details.append(
            EntryDetails(
                name=entry.name,
                path=entry.path,
                is_directory=os.path.isdir(entry.path),
                size_label=size_label,
                modified_label=modified_label,
            )
        )
    return details


def format_details(details: Iterable[EntryDetails]) -> str:
    blocks = []
    for item in details:
        blocks.append(
            "\n".join(
                [
                    f"Name: {item.name}",
                    f"Path: {item.path}",
                    f"Is Directory: {'true' if item.is_directory else 'false'}",
                    f"File Size: {item.size_label}",
                    f"Last Modified: {item.modified_label}",
                ]
            )
        )
    return "\n\n".join(blocks)
