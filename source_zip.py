"""ZIP record source: read a .zip container into archive entries."""

import logging
import lzma
import zipfile
import zlib
from typing import BinaryIO

from archive import ArchiveEntry, LoadFailedError

logger = logging.getLogger(__name__)


def read_zip(file: str | BinaryIO) -> list[ArchiveEntry]:
    """Return the regular file members of a ZIP archive, in archive order.

    Directory members are skipped; directories are synthesized from paths.
    """
    try:
        with zipfile.ZipFile(file, "r") as zf:
            entries = [
                ArchiveEntry(zi.filename, zf.read(zi))
                for zi in zf.infolist()
                if not zi.is_dir()
            ]
    except (zipfile.BadZipFile, zipfile.LargeZipFile, FileNotFoundError, OSError) as e:
        raise LoadFailedError(f"Cannot open ZIP file: {e}") from e
    except (zlib.error, lzma.LZMAError, EOFError) as e:
        # member data is damaged past its header
        raise LoadFailedError(f"Corrupt ZIP member: {e}") from e
    except (RuntimeError, NotImplementedError) as e:
        # encrypted members or unsupported compression methods
        raise LoadFailedError(f"Cannot read ZIP member: {e}") from e
    logger.debug("Read %d ZIP members", len(entries))
    return entries
