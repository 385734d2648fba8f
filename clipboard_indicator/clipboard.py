import logging
from typing import Iterable, Optional, Tuple

from PySide6 import QtCore, QtGui

from .config import INTERNAL_MIME, MIMETYPES, Settings
from .entry import ClipboardEntry
from .registry import Registry

logger = logging.getLogger(__name__)


class QtClipboardBackend:
    """Reads and writes the system clipboard through a QClipboard."""

    def __init__(self, clipboard=None):
        self.clip = clipboard if clipboard is not None else QtGui.QGuiApplication.clipboard()

    def read_content(self, mimetypes: Iterable[str] = MIMETYPES) -> Optional[Tuple[str, bytes]]:
        md = self.clip.mimeData()
        if md is None:
            return None
        for mimetype in mimetypes:
            if not md.hasFormat(mimetype):
                continue
            data = bytes(md.data(mimetype).data())
            if not data:
                continue
            # Legacy X11 target; normalise so equal text compares equal
            if mimetype == "UTF8_STRING":
                mimetype = "text/plain;charset=utf-8"
            return mimetype, data
        return None

    def is_own_content(self) -> bool:
        md = self.clip.mimeData()
        try:
            return bool(md is not None and md.hasFormat(INTERNAL_MIME))
        except RuntimeError:
            return False

    def write_content(self, mimetype: str, data: bytes) -> None:
        md = QtCore.QMimeData()
        md.setData(mimetype, QtCore.QByteArray(data))
        md.setData(INTERNAL_MIME, QtCore.QByteArray(b"1"))
        self.clip.setMimeData(md)

    def clear(self) -> None:
        md = QtCore.QMimeData()
        md.setText("")
        md.setData(INTERNAL_MIME, QtCore.QByteArray(b"1"))
        self.clip.setMimeData(md)


def read_clipboard_entry(backend: QtClipboardBackend, settings: Settings, registry: Registry) -> Optional[ClipboardEntry]:
    """Wrap the current clipboard payload in an entry, or return None.

    Images are dropped when image caching is off; otherwise their blob is
    written straight away so the index never points at a missing file.
    """
    result = backend.read_content(MIMETYPES)
    if result is None:
        return None
    mimetype, data = result
    entry = ClipboardEntry(mimetype, data)
    if entry.is_image():
        if not settings.cache_images:
            return None
        registry.write_entry_file(entry)
    elif settings.strip_text:
        entry = entry.stripped()
    return entry
