import logging
from typing import Callable, Optional

from PySide6 import QtCore

from .clipboard import QtClipboardBackend, read_clipboard_entry
from .history import HistoryStore, IngestResult
from .mode import ModeGate

logger = logging.getLogger(__name__)


class ClipboardWatcher(QtCore.QObject):
    """Feeds clipboard changes into the history store."""

    def __init__(self, clipboard, store: HistoryStore, gate: ModeGate,
                 foreground_app: Optional[Callable[[], Optional[str]]] = None):
        super().__init__()
        self.clip = clipboard
        self.backend = QtClipboardBackend(clipboard)
        self.store = store
        self.gate = gate
        self._foreground_app = foreground_app
        self._refresh_in_progress = False
        self.clip.dataChanged.connect(self._on_changed)

    @QtCore.Slot()
    def _on_changed(self):
        self.refresh()

    def _is_excluded(self) -> bool:
        if self._foreground_app is None or not self.store.settings.excluded_apps:
            return False
        try:
            app = self._foreground_app()
        except Exception:
            logger.warning("Foreground application lookup failed", exc_info=True)
            return False
        return bool(app) and app in self.store.settings.excluded_apps

    def refresh(self) -> Optional[IngestResult]:
        if not self.gate.accepts_clipboard_changes():
            logger.debug("Private mode, ignoring clipboard change")
            return None
        if self._is_excluded():
            logger.debug("Excluded application focused, ignoring clipboard change")
            return None
        if self._refresh_in_progress:
            # The next change triggers a fresh read; nothing is queued
            logger.debug("Dropping overlapping clipboard change")
            return None

        self._refresh_in_progress = True
        try:
            # Ignore our own programmatic copies
            if self.backend.is_own_content():
                return None
            entry = read_clipboard_entry(self.backend, self.store.settings, self.store.registry)
            if entry is None:
                return None
            return self.store.ingest(entry)
        except Exception:
            logger.exception("Failed to refresh clipboard history")
            return None
        finally:
            self._refresh_in_progress = False
