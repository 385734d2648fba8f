import logging

from PySide6 import QtCore

from .history import HistoryStore

logger = logging.getLogger(__name__)


class ModeGate(QtCore.QObject):
    """Private-mode switch.

    While active the store ignores ingests and cycling, the history views
    are hidden and the indicator shows nothing. Stored history is kept;
    leaving private mode pushes the previous selection back to the
    clipboard (or clears it when nothing was selected).
    """

    private_mode_changed = QtCore.Signal(bool)
    history_visible_changed = QtCore.Signal(bool)
    indicator_cleared = QtCore.Signal()

    def __init__(self, store: HistoryStore, parent=None):
        super().__init__(parent)
        self.store = store
        self._private = False

    @property
    def private_mode(self) -> bool:
        return self._private

    def accepts_clipboard_changes(self) -> bool:
        return not self._private

    def toggle(self) -> None:
        self.set_private_mode(not self._private)

    def set_private_mode(self, active: bool) -> bool:
        active = bool(active)
        if active == self._private:
            return False
        self._private = active
        self.store.set_suspended(active)

        if active:
            logger.info("Entering private mode")
            self.history_visible_changed.emit(False)
            self.indicator_cleared.emit()
        else:
            logger.info("Leaving private mode")
            self.store.reapply_selection()
            self.history_visible_changed.emit(True)

        self.private_mode_changed.emit(active)
        return True
