import logging
from typing import List, NamedTuple, Optional

from PySide6 import QtCore

from .config import DELAYED_SELECTION_MS, Settings
from .entry import ClipboardEntry, entry_label
from .registry import Registry

logger = logging.getLogger(__name__)


class IngestResult(NamedTuple):
    reused: bool
    entry: ClipboardEntry


class HistoryStore(QtCore.QObject):
    """Ordered clipboard history, newest first, with one exclusive selection.

    Favorites live in the same list as the rest; ``favorites()`` and
    ``history()`` are projections over it. Every mutation that changes what
    is durable ends with a full ``Registry.write``; a failed write propagates
    as ``RegistryWriteError`` once the in-memory state is already updated.
    """

    changed = QtCore.Signal()
    selection_changed = QtCore.Signal(object)
    notify = QtCore.Signal(str)

    def __init__(self, registry: Registry, settings: Optional[Settings] = None, clipboard=None,
                 reselect_delay_ms: int = DELAYED_SELECTION_MS, parent: Optional[QtCore.QObject] = None):
        super().__init__(parent)
        self.registry = registry
        self.settings = settings or Settings()
        self.clipboard = clipboard
        self._items: List[ClipboardEntry] = []
        self._selected: Optional[ClipboardEntry] = None
        self._suspended = False

        self._pending: Optional[ClipboardEntry] = None
        self._reselect_timer = QtCore.QTimer(self)
        self._reselect_timer.setSingleShot(True)
        self._reselect_timer.setInterval(reselect_delay_ms)
        self._reselect_timer.timeout.connect(self._on_reselect_timeout)

    # ---------- accessors ----------

    def items(self) -> List[ClipboardEntry]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def selected(self) -> Optional[ClipboardEntry]:
        return self._selected

    @property
    def suspended(self) -> bool:
        return self._suspended

    @property
    def pending_reselect(self) -> Optional[ClipboardEntry]:
        return self._pending

    def favorites(self) -> List[ClipboardEntry]:
        return [e for e in self._items if e.favorite]

    def history(self) -> List[ClipboardEntry]:
        return [e for e in self._items if not e.favorite]

    def ordered_items(self) -> List[ClipboardEntry]:
        """Favorites and history merged in display order."""
        if self.settings.pinned_on_bottom:
            return self.history() + self.favorites()
        return self.favorites() + self.history()

    def contains(self, entry: ClipboardEntry) -> bool:
        return any(e is entry for e in self._items)

    def find_by_text(self, text: str) -> Optional[ClipboardEntry]:
        for e in self._items:
            if e.is_text() and e.get_string_value() == text:
                return e
        return None

    def label(self, entry: ClipboardEntry) -> str:
        return entry_label(entry, self.settings.max_entry_preview_length)

    # ---------- lifecycle ----------

    def load(self, current: Optional[ClipboardEntry] = None) -> None:
        """Replace the in-memory history with the registry contents.

        ``current`` is the entry read from the clipboard at startup; the
        cached entry equal to it becomes the selection. Blobs no loaded entry
        refers to are deleted.
        """
        self._cancel_pending()
        self._items = self.registry.read()
        self._selected = None
        if current is not None:
            found = self._find_equal(current)
            if found is not None:
                self._selected = found
        removed = self._evict()
        self.selection_changed.emit(self._selected)
        self.changed.emit()
        if removed:
            self._persist()
        self.registry.prune_orphans(e.hash for e in self._items if e.is_image())

    def apply_config(self, settings: Settings) -> None:
        old = self.settings
        self.settings = settings
        removed = self._evict()
        if removed or old.pinned_on_bottom != settings.pinned_on_bottom:
            self.changed.emit()
        if removed or old.cache_only_favorites != settings.cache_only_favorites:
            self._persist()

    def set_suspended(self, suspended: bool) -> None:
        self._suspended = bool(suspended)
        if self._suspended:
            self._cancel_pending()

    def destroy(self) -> None:
        self._cancel_pending()
        self._items = []
        self._selected = None

    # ---------- ingest ----------

    def ingest(self, entry: Optional[ClipboardEntry]) -> Optional[IngestResult]:
        if self._suspended or entry is None:
            return None
        if self.settings.strip_text:
            entry = entry.stripped()
        if entry.is_text() and not entry.data:
            return None
        if entry.is_image() and not self.settings.cache_images:
            return None

        self._cancel_pending()
        existing = self._find_equal(entry)
        if existing is not None:
            self._set_selected(existing)
            moved = False
            if self.settings.move_item_first and not existing.favorite:
                moved = self._move_to_front(existing)
            self.changed.emit()
            if moved:
                self._persist()
            return IngestResult(True, existing)

        self._items.insert(0, entry)
        self._set_selected(entry)
        self._evict()
        self.changed.emit()
        if self.settings.notify_on_copy:
            self.notify.emit("Copied to clipboard")
        self._persist()
        return IngestResult(False, entry)

    # ---------- selection ----------

    def select(self, entry: ClipboardEntry) -> bool:
        """User activation: select ``entry`` and put it on the clipboard."""
        self._cancel_pending()
        if not self.contains(entry):
            return False
        self._set_selected(entry)
        self._set_clipboard(entry)
        moved = False
        if self.settings.move_item_first and not entry.favorite:
            moved = self._move_to_front(entry)
        self.changed.emit()
        if moved:
            self._persist()
        return True

    def select_next(self) -> Optional[ClipboardEntry]:
        return self._cycle(1)

    def select_previous(self) -> Optional[ClipboardEntry]:
        return self._cycle(-1)

    def _cycle(self, step: int) -> Optional[ClipboardEntry]:
        if self._suspended:
            return None
        self._cancel_pending()
        ordered = self.ordered_items()
        if not ordered:
            return None

        idx = next((i for i, e in enumerate(ordered) if e is self._selected), None)
        if idx is None:
            idx = 0 if step > 0 else len(ordered) - 1
        else:
            idx = (idx + step) % len(ordered)
        target = ordered[idx]

        if self.settings.notify_on_cycle:
            self.notify.emit(f"{idx + 1} / {len(ordered)}: {self.label(target)}")

        self._set_selected(target)
        if self.settings.move_item_first:
            # Only the highlight moves now; the clipboard write and reorder
            # wait until the user stops cycling.
            self._pending = target
            self._reselect_timer.start()
        else:
            self._set_clipboard(target)
        return target

    def _on_reselect_timeout(self) -> None:
        target, self._pending = self._pending, None
        if target is None or not self.contains(target):
            return
        self._set_selected(target)
        self._set_clipboard(target)
        moved = False
        if not target.favorite:
            moved = self._move_to_front(target)
        self.changed.emit()
        if moved:
            self._persist()

    def _cancel_pending(self) -> None:
        self._reselect_timer.stop()
        self._pending = None

    def reapply_selection(self) -> bool:
        """Push the selection back to the clipboard, or clear it if none."""
        if self._selected is not None:
            self._set_clipboard(self._selected)
            return True
        self._clear_clipboard()
        return False

    # ---------- favorites / removal ----------

    def toggle_favorite(self, entry: ClipboardEntry) -> bool:
        if not self.contains(entry):
            return False
        entry.favorite = not entry.favorite
        self._move_to_front(entry)
        self._evict()
        self.changed.emit()
        self._persist()
        return entry.favorite

    def remove_entry(self, entry: ClipboardEntry) -> bool:
        self._cancel_pending()
        if not self.contains(entry):
            return False
        if entry is self._selected:
            self._clear_clipboard()
        self._discard(entry)
        self.changed.emit()
        self._persist()
        return True

    def clear_history(self) -> int:
        """Drop every non-favorite entry."""
        self._cancel_pending()
        doomed = self.history()
        if self._selected is not None and any(e is self._selected for e in doomed):
            self._clear_clipboard()
        for e in doomed:
            self._discard(e)
        self.changed.emit()
        self._persist()
        return len(doomed)

    def cancel_last_copy(self) -> Optional[ClipboardEntry]:
        """Undo the newest ingest, restoring the previous entry."""
        self._cancel_pending()
        if not self._items:
            return None
        newest = self._items[0]
        if len(self._items) >= 2:
            previous = self._items[1]
            self._set_selected(previous)
            self._set_clipboard(previous)
        else:
            self._clear_clipboard()
        self._discard(newest)
        self.changed.emit()
        self._persist()
        return newest

    # ---------- internals ----------

    def _find_equal(self, entry: ClipboardEntry) -> Optional[ClipboardEntry]:
        for e in self._items:
            if e.equals(entry, strip_text=self.settings.strip_text):
                return e
        return None

    def _set_selected(self, entry: Optional[ClipboardEntry]) -> None:
        if self._selected is entry:
            return
        self._selected = entry
        self.selection_changed.emit(entry)

    def _move_to_front(self, entry: ClipboardEntry) -> bool:
        if self._items and self._items[0] is entry:
            return False
        self._items = [entry] + [e for e in self._items if e is not entry]
        return True

    def _discard(self, entry: ClipboardEntry) -> None:
        self._items = [e for e in self._items if e is not entry]
        if self._pending is entry:
            self._cancel_pending()
        if self._selected is entry:
            self._set_selected(None)
        if entry.is_image():
            self.registry.delete_entry_file(entry)

    def _evict(self) -> List[ClipboardEntry]:
        limit = max(0, self.settings.max_history_length)
        non_favorites = self.history()
        removed = []
        while len(non_favorites) > limit:
            oldest = non_favorites.pop()
            logger.debug("Evicting %r", oldest)
            self._discard(oldest)
            removed.append(oldest)
        return removed

    def _persist(self) -> None:
        entries = [e for e in self._items if not self.settings.cache_only_favorites or e.favorite]
        self.registry.write(entries)

    def _set_clipboard(self, entry: ClipboardEntry) -> None:
        if self.clipboard is not None:
            self.clipboard.write_content(entry.mimetype, entry.raw_bytes())

    def _clear_clipboard(self) -> None:
        if self.clipboard is not None:
            self.clipboard.clear()
