import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

TEXT_MIMETYPES = ("text/plain;charset=utf-8", "UTF8_STRING", "text/plain", "STRING", "text/html")


class EntryKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"


def kind_for_mimetype(mimetype: str) -> EntryKind:
    if mimetype.startswith("image/"):
        return EntryKind.IMAGE
    return EntryKind.TEXT


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


@dataclass(eq=False)
class ClipboardEntry:
    """One clipboard payload.

    The payload (mimetype, bytes, hash) never changes after construction;
    only the ``favorite`` flag is flipped by the history store. Equality is
    content based and exposed through ``equals`` so that list membership
    keeps identity semantics.
    """

    mimetype: str
    data: bytes = b""
    favorite: bool = False
    hash: str = ""
    kind: EntryKind = field(init=False)

    def __post_init__(self):
        self.kind = kind_for_mimetype(self.mimetype)
        if not self.hash and self.kind == EntryKind.IMAGE:
            self.hash = content_hash(self.data)

    @classmethod
    def from_text(cls, text: str, favorite: bool = False) -> "ClipboardEntry":
        return cls("text/plain;charset=utf-8", text.encode("utf-8"), favorite)

    def is_text(self) -> bool:
        return self.kind == EntryKind.TEXT

    def is_image(self) -> bool:
        return self.kind == EntryKind.IMAGE

    def get_string_value(self) -> str:
        if self.is_image():
            return ""
        return self.data.decode("utf-8", errors="replace")

    def raw_bytes(self) -> bytes:
        return self.data

    def stripped(self) -> "ClipboardEntry":
        """Return a copy with surrounding whitespace trimmed (text only)."""
        if not self.is_text():
            return self
        value = self.get_string_value()
        if value == value.strip():
            return self
        return ClipboardEntry(self.mimetype, value.strip().encode("utf-8"), self.favorite)

    def equals(self, other: Optional["ClipboardEntry"], strip_text: bool = False) -> bool:
        if other is None or self.kind != other.kind:
            return False
        if self.is_image():
            return self.hash == other.hash
        a = self.get_string_value()
        b = other.get_string_value()
        if strip_text:
            a, b = a.strip(), b.strip()
        return a == b

    def __repr__(self) -> str:
        if self.is_image():
            return f"ClipboardEntry({self.mimetype!r}, hash={self.hash[:12]!r}, favorite={self.favorite})"
        return f"ClipboardEntry({self.mimetype!r}, {self.get_string_value()[:30]!r}, favorite={self.favorite})"


def entry_label(entry: ClipboardEntry, max_length: int) -> str:
    """Single-line preview; text is cut to at most ``max_length`` characters."""
    if entry.is_image():
        return f"[Image {entry.hash[:8]}]" if entry.hash else "[Image]"
    text = " ".join(entry.get_string_value().split())
    if len(text) > max_length:
        if max_length <= 3:
            return text[: max(0, max_length)]
        text = text[: max_length - 3] + "..."
    return text
