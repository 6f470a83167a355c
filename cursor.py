"""Resumable, clonable enumeration over a snapshot of one view's children."""

import threading
from typing import Iterable

from archive import ArchiveDescriptor, ArchiveEntry, InvalidArgumentError, StatInfo
from listing import Listing


class EnumerationCursor:
    """Position-tracking cursor over an immutable item snapshot.

    Items are directory names (str) followed by file entries. Only the
    position changes; it is guarded by a lock so one cursor may be shared
    between threads. Use clone() to hand out independent positions instead.
    """

    def __init__(self, items: Iterable[str | ArchiveEntry], position: int = 0):
        self._items = tuple(items)
        if not 0 <= position <= len(self._items):
            raise InvalidArgumentError(f"Position out of range: {position}")
        self._position = position
        self._lock = threading.Lock()

    @classmethod
    def from_listing(cls, descriptor: ArchiveDescriptor, listing: Listing) -> "EnumerationCursor":
        files = tuple(descriptor.entries[i] for i in listing.files)
        return cls(listing.directories + files)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"<EnumerationCursor {self.position}/{len(self._items)}>"

    @property
    def position(self) -> int:
        with self._lock:
            return self._position

    @property
    def exhausted(self) -> bool:
        with self._lock:
            return self._position == len(self._items)

    def next(self, count: int = 1) -> tuple[list[StatInfo], bool]:
        """Emit up to count stat records and advance past them.

        The flag is False exactly when the end was reached before count
        items could be emitted.
        """
        _check_count(count)
        with self._lock:
            start = self._position
            stop = min(start + count, len(self._items))
            self._position = stop
        emitted = [_stat_for(item) for item in self._items[start:stop]]
        return emitted, len(emitted) == count

    def skip(self, count: int) -> bool:
        """Advance by count, clamped to the end. False if clamped."""
        _check_count(count)
        with self._lock:
            target = self._position + count
            if target > len(self._items):
                self._position = len(self._items)
                return False
            self._position = target
            return True

    def reset(self):
        with self._lock:
            self._position = 0

    def clone(self) -> "EnumerationCursor":
        """New cursor over the same snapshot, starting at the current position."""
        with self._lock:
            position = self._position
        return EnumerationCursor(self._items, position)


def _check_count(count: int):
    if count < 0:
        raise InvalidArgumentError(f"Count must not be negative: {count}")


def _stat_for(item: str | ArchiveEntry) -> StatInfo:
    if isinstance(item, str):
        return StatInfo.for_directory(item)
    return StatInfo.for_entry(item)
