"""Synthesize directory listings from a flat entry list.

There is no tree index: every call walks all entries of the descriptor.
"""

from typing import NamedTuple

import vpath
from archive import ArchiveDescriptor


class Listing(NamedTuple):
    """Immediate children of one prefix."""
    directories: tuple[str, ...]
    files: tuple[int, ...]


def list_children(descriptor: ArchiveDescriptor, prefix: str) -> Listing:
    """Return the child directory names and child file indices under prefix.

    Directories are deduplicated case-insensitively, keeping the first-seen
    casing, and sorted case-insensitively. Files keep descriptor order.
    """
    seen: dict[str, str] = {}
    files = []
    for index, entry in enumerate(descriptor.entries):
        rest = vpath.relative(prefix, entry.path)
        if not rest:
            continue
        segment, remainder = vpath.split_first_segment(rest)
        if remainder:
            seen.setdefault(segment.lower(), segment)
        else:
            files.append(index)

    directories = sorted(seen.values(), key=lambda name: (name.lower(), name))
    return Listing(tuple(directories), tuple(files))


def find_directory(descriptor: ArchiveDescriptor, prefix: str, name: str) -> str | None:
    """Return the display casing of child directory name under prefix, if any."""
    key = vpath.fold(name)
    for directory in list_children(descriptor, prefix).directories:
        if directory.lower() == key:
            return directory
    return None


def subtree_size(descriptor: ArchiveDescriptor, prefix: str) -> int:
    """Sum of the sizes of every entry below prefix."""
    if not prefix:
        return descriptor.total_size
    return sum(
        entry.size
        for entry in descriptor.entries
        if vpath.relative(prefix, entry.path)
    )
