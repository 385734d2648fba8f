import json
import logging
import re
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from PySide6 import QtCore, QtGui

from .config import CACHE_DIR, REGISTRY_PATH
from .entry import ClipboardEntry

logger = logging.getLogger(__name__)

INDEX_VERSION = 1
PLACEHOLDER_SIZE = 32

# Blob files are named by the sha256 hex digest of their bytes
BLOB_REF_RE = re.compile(r"[0-9a-f]{64}")


class RegistryError(Exception):
    pass


class RegistryWriteError(RegistryError):
    pass


def is_blob_ref(value) -> bool:
    return isinstance(value, str) and BLOB_REF_RE.fullmatch(value) is not None


def placeholder_image() -> QtGui.QImage:
    img = QtGui.QImage(PLACEHOLDER_SIZE, PLACEHOLDER_SIZE, QtGui.QImage.Format.Format_ARGB32)
    img.fill(QtGui.QColor(160, 160, 160))
    return img


def _commit_atomically(path: Path, payload: bytes) -> None:
    """Write ``payload`` to ``path`` through QSaveFile so readers only ever
    see the old file or the complete new one."""
    f = QtCore.QSaveFile(str(path))
    if not f.open(QtCore.QIODevice.OpenModeFlag.WriteOnly):
        raise RegistryWriteError(f"cannot open {path}: {f.errorString()}")
    if f.write(QtCore.QByteArray(payload)) != len(payload):
        err = f.errorString()
        f.cancelWriting()
        f.commit()
        raise RegistryWriteError(f"short write to {path}: {err}")
    if not f.commit():
        raise RegistryWriteError(f"cannot commit {path}: {f.errorString()}")


class Registry:
    """Owns the on-disk cache: one JSON index plus a directory of image blobs
    named by content hash."""

    def __init__(self, index_path: Optional[Path] = None, cache_dir: Optional[Path] = None):
        self.index_path = Path(index_path) if index_path else REGISTRY_PATH
        self.cache_dir = Path(cache_dir) if cache_dir else CACHE_DIR
        self.index_path.parent.mkdir(parents=True, exist_ok=True)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def blob_path(self, entry: ClipboardEntry) -> Path:
        return self.cache_dir / entry.hash

    # ---------- index ----------

    def read(self) -> List[ClipboardEntry]:
        if not self.index_path.exists():
            return []
        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            records = data["entries"] if isinstance(data, dict) else data
            if not isinstance(records, list):
                raise ValueError("index entries must be a list")
        except Exception:
            logger.warning("Corrupt registry index %s, starting empty", self.index_path, exc_info=True)
            return []

        entries: List[ClipboardEntry] = []
        for rec in records:
            entry = self._decode(rec)
            if entry is not None:
                entries.append(entry)
        return entries

    def _decode(self, rec) -> Optional[ClipboardEntry]:
        if not isinstance(rec, dict) or not rec.get("mimetype"):
            logger.warning("Skipping malformed registry record: %r", rec)
            return None
        mimetype = str(rec["mimetype"])
        favorite = bool(rec.get("favorite", False))
        blob = rec.get("blob")
        if blob:
            if not is_blob_ref(blob):
                logger.warning("Skipping registry record with invalid blob ref: %r", blob)
                return None
            try:
                data = (self.cache_dir / blob).read_bytes()
            except OSError:
                logger.warning("Missing blob %s for cached image", blob)
                data = b""
            return ClipboardEntry(mimetype, data, favorite, hash=blob)
        text = rec.get("text")
        if text is None:
            logger.warning("Skipping registry record without payload: %r", rec)
            return None
        return ClipboardEntry(mimetype, str(text).encode("utf-8"), favorite)

    @staticmethod
    def _encode(entry: ClipboardEntry) -> dict:
        rec = {"mimetype": entry.mimetype, "favorite": entry.favorite}
        if entry.is_image():
            rec["blob"] = entry.hash
        else:
            rec["text"] = entry.get_string_value()
        return rec

    def write(self, entries: Iterable[ClipboardEntry]) -> None:
        records = []
        for entry in entries:
            if entry.is_image() and entry.data:
                self.write_entry_file(entry)
            records.append(self._encode(entry))
        payload = json.dumps({"version": INDEX_VERSION, "entries": records}, ensure_ascii=False, indent=2)
        try:
            _commit_atomically(self.index_path, payload.encode("utf-8"))
        except RegistryWriteError:
            logger.exception("Failed to persist clipboard history")
            raise

    # ---------- blobs ----------

    def write_entry_file(self, entry: ClipboardEntry) -> bool:
        if not entry.is_image() or not entry.data:
            return False
        path = self.blob_path(entry)
        if path.exists():
            return True
        try:
            _commit_atomically(path, entry.data)
        except RegistryWriteError:
            logger.warning("Failed to write image blob %s", entry.hash, exc_info=True)
            return False
        return True

    def delete_entry_file(self, entry: ClipboardEntry) -> None:
        if not entry.is_image() or not is_blob_ref(entry.hash):
            return
        try:
            self.blob_path(entry).unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to delete image blob %s", entry.hash, exc_info=True)

    def load_image(self, entry: ClipboardEntry) -> QtGui.QImage:
        """Decode an image entry, falling back to a placeholder."""
        img = QtGui.QImage()
        if entry.is_image():
            if entry.data:
                img.loadFromData(QtCore.QByteArray(entry.data))
            elif is_blob_ref(entry.hash) and self.blob_path(entry).exists():
                img = QtGui.QImageReader(str(self.blob_path(entry))).read()
        if img.isNull():
            logger.debug("Using placeholder for undecodable entry %r", entry)
            return placeholder_image()
        return img

    def get_entry_as_image(self, entry: ClipboardEntry, callback: Callable[[QtGui.QImage], None]) -> None:
        """Decode on the next event loop turn and hand the image to ``callback``."""
        QtCore.QTimer.singleShot(0, lambda: callback(self.load_image(entry)))

    def clear_cache_folder(self) -> None:
        for p in self.cache_dir.glob("*"):
            try:
                p.unlink()
            except OSError:
                logger.warning("Failed to remove %s", p, exc_info=True)
        self.write([])

    def prune_orphans(self, referenced: Iterable[str]) -> List[Path]:
        """Delete blob files whose hash is not in ``referenced``.

        Only files named like a blob ref are considered.
        """
        keep = set(referenced)
        removed = []
        for p in self.cache_dir.iterdir():
            if not p.is_file() or p.name in keep or not is_blob_ref(p.name):
                continue
            try:
                p.unlink()
            except OSError:
                logger.warning("Failed to remove orphaned blob %s", p, exc_info=True)
                continue
            removed.append(p)
        if removed:
            logger.info("Removed %d orphaned image blob(s)", len(removed))
        return removed
