import logging
from typing import Callable, Optional

from PySide6 import QtCore, QtGui

from .clipboard import QtClipboardBackend, read_clipboard_entry
from .config import Settings, load_settings, save_settings
from .history import HistoryStore
from .mode import ModeGate
from .registry import Registry, RegistryWriteError
from .watcher import ClipboardWatcher

logger = logging.getLogger(__name__)


class AppController(QtCore.QObject):
    """Wires settings, registry, history, private mode and the watcher.

    ``excluded_apps`` only takes effect when ``foreground_app`` is given: a
    callable returning the focused application's identifier. ``main.py``
    passes none, since Qt has no portable query for it.
    """

    def __init__(self, app: QtGui.QGuiApplication, settings: Optional[Settings] = None,
                 registry: Optional[Registry] = None,
                 foreground_app: Optional[Callable[[], Optional[str]]] = None):
        super().__init__()
        self.app = app
        self.settings = settings or load_settings()
        self.registry = registry or Registry()
        if self.settings.excluded_apps and foreground_app is None:
            logger.warning("excluded_apps is set but no foreground application provider is available; ignoring it")
        if self.settings.clear_on_boot:
            self.registry.clear_cache_folder()

        clip = app.clipboard()
        self.backend = QtClipboardBackend(clip)
        self.store = HistoryStore(self.registry, self.settings, self.backend, parent=self)
        self.gate = ModeGate(self.store, parent=self)
        self.store.notify.connect(self._on_notify)

        current = read_clipboard_entry(self.backend, self.settings, self.registry)
        try:
            self.store.load(current)
        except RegistryWriteError:
            logger.warning("History loaded but could not be re-persisted")

        self.watcher = ClipboardWatcher(clip, self.store, self.gate, foreground_app)

    @QtCore.Slot(str)
    def _on_notify(self, message: str):
        if self.gate.private_mode:
            return
        logger.info("%s", message)

    def set_private_mode(self, active: bool) -> bool:
        return self.gate.set_private_mode(active)

    def apply_settings(self, settings: Settings, save: bool = True) -> None:
        self.settings = settings
        if save:
            try:
                save_settings(settings)
            except OSError:
                logger.exception("Failed to save settings")
        self.store.apply_config(settings)

    def quit(self):
        self.store.destroy()
        QtCore.QCoreApplication.quit()
