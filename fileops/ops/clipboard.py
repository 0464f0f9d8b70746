from __future__ import annotations

import os
from typing import Optional, Protocol

from PySide6.QtCore import QUrl
from PySide6.QtGui import QGuiApplication


class ClipboardSource(Protocol):
    def read_path(self) -> Optional[str]:
        ...


class MemoryClipboard:
    def __init__(self, path: str | None = None) -> None:
        self._path = path

    def set_path(self, path: str | os.PathLike) -> None:
        self._path = os.fspath(path)

    def clear(self) -> None:
        self._path = None

    def read_path(self) -> Optional[str]:
        return self._path or None


class QtClipboardSource:
    """Reads a single file reference from the system clipboard.

    Only the first URL (or the first line of plain text) is considered.
    """

    def __init__(self, clipboard=None) -> None:
        self._clipboard = clipboard

    def read_path(self) -> Optional[str]:
        clipboard = self._clipboard or QGuiApplication.clipboard()
        if clipboard is None:
            return None
        mime = clipboard.mimeData()
        if mime is None:
            return None
        if mime.hasUrls():
            urls = mime.urls()
            if urls and urls[0].isLocalFile():
                return urls[0].toLocalFile() or None
            return None
        if not mime.hasText():
            return None
        lines = mime.text().strip().splitlines()
        if not lines:
            return None
        return _path_from_text(lines[0].strip())


def _path_from_text(text: str) -> Optional[str]:
    if text.startswith("file://"):
        return QUrl(text).toLocalFile() or None
    if os.path.isabs(text):
        return text
    return None
