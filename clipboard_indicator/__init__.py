from .config import Settings
from .entry import ClipboardEntry, EntryKind
from .history import HistoryStore, IngestResult
from .mode import ModeGate
from .registry import Registry, RegistryError, RegistryWriteError

__version__ = "0.1.0"

__all__ = [
    "ClipboardEntry",
    "EntryKind",
    "HistoryStore",
    "IngestResult",
    "ModeGate",
    "Registry",
    "RegistryError",
    "RegistryWriteError",
    "Settings",
]
