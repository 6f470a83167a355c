"""TAR record source: read .tar, .tar.gz, .tar.bz2, .tar.xz containers."""

import logging
import lzma
import tarfile
import zlib
from typing import BinaryIO

from archive import ArchiveEntry, LoadFailedError

logger = logging.getLogger(__name__)


def read_tar(file: str | BinaryIO) -> list[ArchiveEntry]:
    """Return the regular file members of a TAR archive, in archive order.

    Links, devices and directory members are skipped.
    """
    try:
        if isinstance(file, str):
            tf = tarfile.open(file, "r:*")
        else:
            tf = tarfile.open(fileobj=file, mode="r:*")
    except (tarfile.TarError, FileNotFoundError, OSError, zlib.error, lzma.LZMAError, EOFError) as e:
        raise LoadFailedError(f"Cannot open TAR file: {e}") from e

    entries = []
    with tf:
        try:
            for member in tf:
                if not member.isfile():
                    continue
                f = tf.extractfile(member)
                if f is None:
                    continue
                with f:
                    entries.append(ArchiveEntry(member.name, f.read()))
        except (tarfile.TarError, OSError, EOFError, zlib.error, lzma.LZMAError) as e:
            raise LoadFailedError(f"Error reading from TAR: {e}") from e
    logger.debug("Read %d TAR members", len(entries))
    return entries
