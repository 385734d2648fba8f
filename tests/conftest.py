import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6 import QtCore, QtGui

from clipboard_indicator.config import Settings
from clipboard_indicator.entry import ClipboardEntry
from clipboard_indicator.history import HistoryStore
from clipboard_indicator.registry import Registry


@pytest.fixture(scope="session")
def qapp():
    app = QtGui.QGuiApplication.instance() or QtGui.QGuiApplication([])
    yield app


@pytest.fixture
def registry(tmp_path):
    return Registry(index_path=tmp_path / "registry.json", cache_dir=tmp_path / "blobs")


class FakeClipboardBackend:
    """Records what the store pushes to the clipboard."""

    def __init__(self):
        self.writes = []
        self.clears = 0

    def write_content(self, mimetype, data):
        self.writes.append((mimetype, data))

    def clear(self):
        self.clears += 1

    @property
    def last_text(self):
        if not self.writes:
            return None
        return self.writes[-1][1].decode("utf-8")


@pytest.fixture
def clipboard():
    return FakeClipboardBackend()


@pytest.fixture
def make_store(qapp, registry, clipboard):
    stores = []

    def _make_store(**overrides) -> HistoryStore:
        delay = overrides.pop("delay", 750)
        overrides.setdefault("cache_images", True)
        store = HistoryStore(registry, Settings(**overrides), clipboard, reselect_delay_ms=delay)
        stores.append(store)
        return store

    yield _make_store
    for s in stores:
        s.destroy()


@pytest.fixture
def store(make_store):
    return make_store()


def png_bytes(color=(255, 0, 0), size=4) -> bytes:
    img = QtGui.QImage(size, size, QtGui.QImage.Format.Format_ARGB32)
    img.fill(QtGui.QColor(*color))
    ba = QtCore.QByteArray()
    buf = QtCore.QBuffer(ba)
    buf.open(QtCore.QIODevice.OpenModeFlag.WriteOnly)
    img.save(buf, "PNG")
    buf.close()
    return bytes(ba.data())


@pytest.fixture
def text():
    return ClipboardEntry.from_text


@pytest.fixture
def image(qapp):
    def _image(color=(255, 0, 0), favorite=False) -> ClipboardEntry:
        return ClipboardEntry("image/png", png_bytes(color), favorite)

    return _image


@pytest.fixture
def png(qapp):
    return png_bytes


class FakeClipboard(QtCore.QObject):
    """Stands in for QClipboard: holds one QMimeData and signals on change."""

    dataChanged = QtCore.Signal()

    def __init__(self):
        super().__init__()
        self._md = None

    def mimeData(self):
        return self._md

    def setMimeData(self, md):
        self._md = md
        self.dataChanged.emit()

    def put(self, mimetype, data):
        md = QtCore.QMimeData()
        md.setData(mimetype, QtCore.QByteArray(data))
        self.setMimeData(md)


@pytest.fixture
def fake_clip(qapp):
    return FakeClipboard()
