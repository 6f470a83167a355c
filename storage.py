"""Storage views: read-only handles bound to one prefix of an archive."""

import io
import logging

import vpath
from archive import ArchiveDescriptor, ArchiveEntry, InvalidArgumentError, NotFoundError, StatInfo
from cursor import EnumerationCursor
from listing import Listing, find_directory, list_children, subtree_size

logger = logging.getLogger(__name__)


class EntryStream(io.BytesIO):
    """Read-only stream over an entry's bytes, with its own read position."""

    def __init__(self, entry: ArchiveEntry):
        super().__init__(entry.data)
        self.entry = entry
        self.name = entry.path

    def writable(self) -> bool:
        return False

    def write(self, b):
        raise io.UnsupportedOperation("Archive streams are read-only")

    def truncate(self, size=None):
        raise io.UnsupportedOperation("Archive streams are read-only")

    def writelines(self, lines):
        raise io.UnsupportedOperation("Archive streams are read-only")

    def stat(self) -> StatInfo:
        return StatInfo.for_entry(self.entry)


class StorageView:
    """A coordinate in the virtual tree: a shared descriptor plus a prefix.

    Views hold no cached children; every query walks the descriptor.
    """

    def __init__(self, descriptor: ArchiveDescriptor, prefix: str = "", display_name: str | None = None):
        self._descriptor = descriptor
        self._prefix = prefix
        self._display_name = display_name

    @property
    def descriptor(self) -> ArchiveDescriptor:
        return self._descriptor

    @property
    def prefix(self) -> str:
        return self._prefix

    def __repr__(self) -> str:
        return f"<StorageView prefix={self._prefix!r}>"

    def list_children(self) -> Listing:
        return list_children(self._descriptor, self._prefix)

    def open_child(self, name: str) -> "StorageView | EntryStream":
        """Open a child directory as a view, or a child file as a stream."""
        _require_name(name)
        try:
            return self.open_storage(name)
        except NotFoundError:
            return self.open_stream_by_path(name)

    def open_storage(self, name: str) -> "StorageView":
        """Open a synthesized child directory."""
        _require_name(name)
        directory = find_directory(self._descriptor, self._prefix, name)
        if directory is None:
            raise NotFoundError(f"Not a directory: {vpath.join(self._prefix, name)}")
        return StorageView(self._descriptor, vpath.join(self._prefix, directory))

    def open_stream_by_path(self, name: str) -> EntryStream:
        """Open the entry at prefix/name; name may contain separators."""
        _require_name(name)
        full = vpath.join(self._prefix, name)
        entry = self._descriptor.find_entry(full)
        if entry is None:
            logger.debug("No entry for %r", full)
            raise NotFoundError(f"Not found: {full}")
        return EntryStream(entry)

    def stat(self) -> StatInfo:
        name = self._display_name if self._display_name is not None else self._prefix
        return StatInfo(
            display_name=name,
            size=subtree_size(self._descriptor, self._prefix),
            is_container=True,
        )

    def enumerate(self) -> EnumerationCursor:
        """New cursor over a snapshot of this view's children."""
        return EnumerationCursor.from_listing(self._descriptor, self.list_children())


def open_root(descriptor: ArchiveDescriptor, display_name: str | None = None) -> StorageView:
    return StorageView(descriptor, "", display_name)


def _require_name(name: str):
    if not name or not name.strip(vpath.SEPARATORS):
        raise InvalidArgumentError("Name must not be empty")
