from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QMimeData, QUrl

from fileops.ops.clipboard import MemoryClipboard, QtClipboardSource


class _FakeClipboard:
    def __init__(self, mime: QMimeData | None) -> None:
        self._mime = mime

    def mimeData(self):
        return self._mime


def _mime_with_urls(*urls: QUrl) -> QMimeData:
    mime = QMimeData()
    mime.setUrls(list(urls))
    return mime


def _mime_with_text(text: str) -> QMimeData:
    mime = QMimeData()
    mime.setText(text)
    return mime


def test_memory_clipboard_roundtrip(tmp_path: Path) -> None:
    clipboard = MemoryClipboard()
    assert clipboard.read_path() is None

    clipboard.set_path(tmp_path / "a.txt")
    assert clipboard.read_path() == str(tmp_path / "a.txt")

    clipboard.clear()
    assert clipboard.read_path() is None


def test_qt_clipboard_reads_first_local_url(qapp, tmp_path: Path) -> None:
    first = tmp_path / "first.txt"
    mime = _mime_with_urls(QUrl.fromLocalFile(str(first)), QUrl.fromLocalFile(str(tmp_path / "second.txt")))

    assert QtClipboardSource(_FakeClipboard(mime)).read_path() == str(first)


def test_qt_clipboard_ignores_remote_urls(qapp) -> None:
    mime = _mime_with_urls(QUrl("https://example.com/file.txt"))

    assert QtClipboardSource(_FakeClipboard(mime)).read_path() is None


def test_qt_clipboard_accepts_path_text(qapp, tmp_path: Path) -> None:
    path = tmp_path / "note.txt"

    assert QtClipboardSource(_FakeClipboard(_mime_with_text(f"{path}\nignored"))).read_path() == str(path)
    assert QtClipboardSource(_FakeClipboard(_mime_with_text(QUrl.fromLocalFile(str(path)).toString()))).read_path() == str(path)
    assert QtClipboardSource(_FakeClipboard(_mime_with_text("just words"))).read_path() is None


def test_qt_clipboard_handles_empty_data(qapp) -> None:
    assert QtClipboardSource(_FakeClipboard(None)).read_path() is None
    assert QtClipboardSource(_FakeClipboard(QMimeData())).read_path() is None
