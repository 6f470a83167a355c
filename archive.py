"""Archive entries, descriptors, stat records and the error taxonomy."""

import logging
import mimetypes
from dataclasses import dataclass
from typing import Iterable

import vpath

logger = logging.getLogger(__name__)

PLACEHOLDER_FILE_NAME = "TEST.txt"
PLACEHOLDER_HEADER = "MPQ archive preview is not implemented yet."


class ArchiveError(Exception):
    """Base error for archive operations."""
    pass


class NotFoundError(ArchiveError):
    """Name does not resolve to a directory or file."""
    pass


class LoadFailedError(ArchiveError):
    """Archive source could not be read or parsed."""
    pass


class InvalidArgumentError(ArchiveError, ValueError):
    """Malformed input, such as an empty name."""
    pass


@dataclass(frozen=True)
class StatInfo:
    """Stat record shared by directory items, file items and views."""
    display_name: str
    size: int = 0
    is_container: bool = False
    content_type: str = "application/octet-stream"

    @classmethod
    def for_directory(cls, name: str) -> "StatInfo":
        return cls(display_name=name, size=0, is_container=True)

    @classmethod
    def for_entry(cls, entry: "ArchiveEntry") -> "StatInfo":
        name = vpath.basename(entry.path)
        ctype = mimetypes.guess_type(name)[0] or "application/octet-stream"
        return cls(display_name=name, size=entry.size, is_container=False, content_type=ctype)


@dataclass(frozen=True)
class ArchiveEntry:
    """One named record. The bytes are immutable and shared, never copied."""
    path: str
    data: bytes

    def __post_init__(self):
        if not self.path or not self.path.strip(vpath.SEPARATORS):
            raise InvalidArgumentError("Entry path must not be empty")
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_text(cls, path: str, text: str) -> "ArchiveEntry":
        return cls(path, text.encode("utf-8"))


class ArchiveDescriptor:
    """The ordered, immutable set of entries of one opened archive.

    Duplicate paths are allowed; lookups return the first match.
    """

    def __init__(self, entries: Iterable[ArchiveEntry]):
        self._entries = tuple(entries)
        self._total_size = sum(e.size for e in self._entries)
        # folded path -> index of the first entry with that path
        self._index: dict[str, int] = {}
        for i, entry in enumerate(self._entries):
            self._index.setdefault(vpath.fold(entry.path), i)
        logger.debug("Descriptor built: %d entries, %d bytes",
                     len(self._entries), self._total_size)

    @property
    def entries(self) -> tuple[ArchiveEntry, ...]:
        return self._entries

    @property
    def total_size(self) -> int:
        return self._total_size

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"<ArchiveDescriptor entries={len(self._entries)} size={self._total_size}>"

    def find_index(self, path: str) -> int | None:
        """Index of the first entry matching path, ignoring case and separator kind."""
        return self._index.get(vpath.fold(path))

    def find_entry(self, path: str) -> ArchiveEntry | None:
        index = self.find_index(path)
        return None if index is None else self._entries[index]

    @classmethod
    def from_records(cls, records: Iterable[tuple[str, bytes]]) -> "ArchiveDescriptor":
        """Build a descriptor from (path, bytes) pairs."""
        return cls(ArchiveEntry(path, data) for path, data in records)

    @classmethod
    def from_tree(cls, tree: dict) -> "ArchiveDescriptor":
        """Build a descriptor from a nested dict.

        Nested dicts are directories, bytes/str values are files. String
        values are encoded to UTF-8.

        Example:
            ArchiveDescriptor.from_tree({
                "readme.txt": "Hello, world!",
                "docs": {
                    "guide.txt": "A guide",
                }
            })
        """
        records = []

        def walk(node: dict, prefix: str):
            for name, value in node.items():
                path = vpath.join(prefix, name)
                if isinstance(value, dict):
                    walk(value, path)
                elif isinstance(value, str):
                    records.append((path, value.encode("utf-8")))
                else:
                    records.append((path, value))

        walk(tree, "")
        return cls.from_records(records)

    @classmethod
    def placeholder(cls, message: str) -> "ArchiveDescriptor":
        """Single-entry descriptor explaining why no real content is shown."""
        body = f"{PLACEHOLDER_HEADER}\r\n{message}\r\n"
        return cls([ArchiveEntry.from_text(PLACEHOLDER_FILE_NAME, body)])

    @classmethod
    def placeholder_from_path(cls, path: str, reason: str | None = None) -> "ArchiveDescriptor":
        message = f"Source archive path: {path}"
        if reason:
            message += f"\r\nReason: {reason}"
        return cls.placeholder(message)

    @classmethod
    def placeholder_from_stream(cls, length: int, reason: str | None = None) -> "ArchiveDescriptor":
        message = f"Source archive provided via stream ({length} bytes)."
        if reason:
            message += f"\r\nReason: {reason}"
        return cls.placeholder(message)
