"""Provider state: which archive is currently open.

Each initialization builds a new descriptor and swaps it in whole. Views,
streams and cursors handed out earlier keep the descriptor they were built
from.
"""

import logging
import threading
from dataclasses import dataclass
from typing import BinaryIO

from archive import ArchiveDescriptor, LoadFailedError, NotFoundError
from loader import load_from_bytes, load_from_path
from storage import StorageView, open_root

logger = logging.getLogger(__name__)

STREAM_SOURCE_LABEL = "MPQ archive (stream source)"
CHUNK_SIZE = 8192


@dataclass(frozen=True)
class _ProviderState:
    descriptor: ArchiveDescriptor
    path: str | None = None

    @property
    def label(self) -> str:
        return self.path if self.path is not None else STREAM_SOURCE_LABEL


class ArchiveProvider:
    """Holds the current archive and hands out root views over it.

    Loading never fails outright: an unreadable archive is replaced by a
    placeholder descriptor describing the failure.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._state = _ProviderState(ArchiveDescriptor.placeholder("No archive has been loaded."))

    def _swap(self, state: _ProviderState) -> ArchiveDescriptor:
        with self._lock:
            self._state = state
        logger.debug("Provider state updated: %r", state.descriptor)
        return state.descriptor

    def initialize_with_path(self, path: str) -> ArchiveDescriptor:
        try:
            descriptor = load_from_path(path)
        except LoadFailedError as e:
            logger.warning("Archive load failed for %s: %s", path, e)
            descriptor = ArchiveDescriptor.placeholder_from_path(path, str(e))
        return self._swap(_ProviderState(descriptor, path=path))

    def initialize_with_bytes(self, data: bytes) -> ArchiveDescriptor:
        try:
            descriptor = load_from_bytes(data)
        except LoadFailedError as e:
            logger.warning("Archive load failed for %d-byte stream: %s", len(data), e)
            descriptor = ArchiveDescriptor.placeholder_from_stream(len(data), str(e))
        return self._swap(_ProviderState(descriptor))

    def initialize_with_stream(self, stream: BinaryIO) -> ArchiveDescriptor:
        """Read a whole stream from its start and load it."""
        if stream.seekable():
            stream.seek(0)
        chunks = []
        while True:
            chunk = stream.read(CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        return self.initialize_with_bytes(b"".join(chunks))

    @property
    def descriptor(self) -> ArchiveDescriptor:
        with self._lock:
            return self._state.descriptor

    @property
    def friendly_name(self) -> str:
        with self._lock:
            return self._state.label

    def current_file(self) -> str:
        """Path of the loaded archive. Raises NotFoundError for stream sources."""
        with self._lock:
            path = self._state.path
        if path is None:
            raise NotFoundError("Archive was not loaded from a file")
        return path

    def root(self) -> StorageView:
        with self._lock:
            state = self._state
        return open_root(state.descriptor, state.label)
