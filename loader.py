"""Pick a record source for an archive and build its descriptor."""

import io
import logging
import lzma
import os
import tarfile
import zipfile
import zlib

from archive import ArchiveDescriptor, LoadFailedError

logger = logging.getLogger(__name__)

# Extension -> (module, reader function)
SOURCES = {
    ".zip": ("source_zip", "read_zip"),
    ".tar": ("source_tar", "read_tar"),
    ".tar.gz": ("source_tar", "read_tar"),
    ".tgz": ("source_tar", "read_tar"),
    ".tar.bz2": ("source_tar", "read_tar"),
    ".tar.xz": ("source_tar", "read_tar"),
}

# Recognised, but the MPQ container format itself is not parsed.
MPQ_EXTENSIONS = (".mpq", ".w3m", ".w3x")
MPQ_MAGICS = (b"MPQ\x1a", b"MPQ\x1b")


def detect_source(path: str) -> tuple[str, str]:
    """Detect the record source from the file extension. Returns (module_name, function_name)."""
    lower = path.lower()
    if lower.endswith(MPQ_EXTENSIONS):
        raise LoadFailedError("MPQ archive parsing is not supported")
    # Check compound extensions first
    for ext in sorted(SOURCES, key=len, reverse=True):
        if lower.endswith(ext):
            return SOURCES[ext]
    raise LoadFailedError(
        f"Cannot detect archive type for '{path}'. "
        f"Supported extensions: {', '.join(sorted(SOURCES))}"
    )


def _reader(mod_name: str, func_name: str):
    module = __import__(mod_name)
    return getattr(module, func_name)


def load_from_path(path: str) -> ArchiveDescriptor:
    """Load the archive at path. Raises LoadFailedError."""
    logger.debug("Loading archive from path %s", path)
    if not os.path.isfile(path):
        raise LoadFailedError(f"{path} not found")
    read = _reader(*detect_source(path))
    return ArchiveDescriptor(read(path))


def load_from_bytes(data: bytes) -> ArchiveDescriptor:
    """Load an archive held in memory, detected by its signature. Raises LoadFailedError."""
    logger.debug("Loading archive from %d bytes", len(data))
    if not data:
        raise LoadFailedError("Archive stream is empty")
    if data[:4] in MPQ_MAGICS:
        raise LoadFailedError("MPQ archive parsing is not supported")

    buf = io.BytesIO(data)
    if zipfile.is_zipfile(buf):
        buf.seek(0)
        return ArchiveDescriptor(_reader("source_zip", "read_zip")(buf))

    buf.seek(0)
    try:
        with tarfile.open(fileobj=buf, mode="r:*"):
            pass
    except (tarfile.TarError, OSError, EOFError, zlib.error, lzma.LZMAError) as e:
        raise LoadFailedError(f"Unrecognised archive format: {e}") from e
    buf.seek(0)
    return ArchiveDescriptor(_reader("source_tar", "read_tar")(buf))
