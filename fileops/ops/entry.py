from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path
from typing import Iterable


@dataclass(frozen=True)
class Entry:
    name: str
    path: str
    is_directory: bool

    @classmethod
    def from_path(cls, path: str | Path) -> "Entry":
        absolute = os.path.abspath(os.fspath(path))
        return cls(
            name=os.path.basename(absolute),
            path=absolute,
            is_directory=os.path.isdir(absolute),
        )

    def renamed(self, new_path: str | Path) -> "Entry":
        absolute = os.path.abspath(os.fspath(new_path))
        return replace(self, name=os.path.basename(absolute), path=absolute)

    def same_row(self, other: "Entry") -> bool:
        return self.path == other.path


@dataclass(frozen=True)
class EntryDiff:
    added: list[Entry]
    removed: list[Entry]
    changed: list[Entry]

    @property
    def empty(self) -> bool:
        return not (self.added or self.removed or self.changed)


def diff_entries(old: Iterable[Entry], new: Iterable[Entry]) -> EntryDiff:
    """Compare two listings row by row.

    Rows are matched by ``path``; a matched row whose other fields differ is
    reported in ``changed`` with its new value.
    """
    old_by_path = {entry.path: entry for entry in old}
    new_list = list(new)
    new_paths = {entry.path for entry in new_list}
    added: list[Entry] = []
    changed: list[Entry] = []
    for entry in new_list:
        previous = old_by_path.get(entry.path)
        if previous is None:
            added.append(entry)
        elif previous != entry:
            changed.append(entry)
    removed = [entry for path, entry in old_by_path.items() if path not in new_paths]
    return EntryDiff(added=added, removed=removed, changed=changed)


def replace_entry(entries: Iterable[Entry], old: Entry, new: Entry) -> list[Entry]:
    return [new if entry.path == old.path else entry for entry in entries]


def remove_paths(entries: Iterable[Entry], paths: Iterable[str]) -> list[Entry]:
    doomed = set(paths)
    return [entry for entry in entries if entry.path not in doomed]
