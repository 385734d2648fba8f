import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

APP_NAME = "ClipboardIndicator"
APP_DIR = Path(os.environ.get("CLIPBOARD_INDICATOR_DIR", Path.home() / ".cache" / "clipboard-indicator"))
CACHE_DIR = APP_DIR / "blobs"
REGISTRY_PATH = APP_DIR / "registry.json"
SETTINGS_PATH = APP_DIR / "settings.json"

# Marker format attached to clipboard writes made by the application itself
INTERNAL_MIME = "application/x-clipboardindicator-internal"

# Tried in order; the first type with non-empty content wins
MIMETYPES = (
    "text/plain;charset=utf-8",
    "UTF8_STRING",
    "text/plain",
    "STRING",
    "image/gif",
    "image/png",
    "image/jpg",
    "image/jpeg",
    "image/webp",
    "image/svg+xml",
    "text/html",
)

DELAYED_SELECTION_MS = 750
MAX_HISTORY_LIMIT = 500


@dataclass(frozen=True)
class Settings:
    max_history_length: int = 15
    max_entry_preview_length: int = 50
    cache_only_favorites: bool = False
    move_item_first: bool = False
    strip_text: bool = False
    cache_images: bool = False
    excluded_apps: Tuple[str, ...] = field(default_factory=tuple)
    pinned_on_bottom: bool = False
    clear_on_boot: bool = False
    notify_on_copy: bool = True
    notify_on_cycle: bool = True


def _clamp(value, default: int, lo: int, hi: int) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return max(lo, min(hi, value))


def load_settings(path: Optional[Path] = None) -> Settings:
    path = Path(path) if path else SETTINGS_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        data = {}
    except Exception:
        logger.warning("Unreadable settings file %s, using defaults", path, exc_info=True)
        data = {}
    if not isinstance(data, dict):
        data = {}

    defaults = Settings()
    excluded = data.get("excluded_apps") or ()
    if not isinstance(excluded, (list, tuple)):
        excluded = ()
    return Settings(
        max_history_length=_clamp(data.get("max_history_length"), defaults.max_history_length, 1, MAX_HISTORY_LIMIT),
        max_entry_preview_length=_clamp(data.get("max_entry_preview_length"), defaults.max_entry_preview_length, 1, 10000),
        cache_only_favorites=bool(data.get("cache_only_favorites", defaults.cache_only_favorites)),
        move_item_first=bool(data.get("move_item_first", defaults.move_item_first)),
        strip_text=bool(data.get("strip_text", defaults.strip_text)),
        cache_images=bool(data.get("cache_images", defaults.cache_images)),
        excluded_apps=tuple(str(a) for a in excluded),
        pinned_on_bottom=bool(data.get("pinned_on_bottom", defaults.pinned_on_bottom)),
        clear_on_boot=bool(data.get("clear_on_boot", defaults.clear_on_boot)),
        notify_on_copy=bool(data.get("notify_on_copy", defaults.notify_on_copy)),
        notify_on_cycle=bool(data.get("notify_on_cycle", defaults.notify_on_cycle)),
    )


def save_settings(settings: Settings, path: Optional[Path] = None) -> None:
    path = Path(path) if path else SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    data = asdict(settings)
    data["excluded_apps"] = list(settings.excluded_apps)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
