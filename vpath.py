"""Path helpers for virtual archive paths.

Archive paths use '/' as the canonical separator, but '\\' is accepted
anywhere a separator is expected. Containment tests are case-insensitive.
"""

import re

SEPARATORS = "/\\"

_SEP_RE = re.compile(r"[/\\]")


def canonical(path: str) -> str:
    """Return path with every back-slash turned into a forward slash."""
    return path.replace("\\", "/")


def fold(path: str) -> str:
    """Return the case-insensitive identity key of a path."""
    return canonical(path).strip("/").lower()


def join(prefix: str, name: str) -> str:
    """Join a directory prefix and a relative name with '/'."""
    if not prefix:
        return name
    return prefix.rstrip(SEPARATORS) + "/" + name.lstrip(SEPARATORS)


def relative(prefix: str, full_path: str) -> str | None:
    """Return the part of full_path below prefix, or None if it is not below it.

    The remainder has its leading and trailing separators stripped. With an
    empty prefix every path is below the root.
    """
    if not prefix:
        return full_path.strip(SEPARATORS)

    head = canonical(prefix).rstrip("/") + "/"
    if len(full_path) < len(head):
        return None
    if canonical(full_path[:len(head)]).lower() != head.lower():
        return None
    return full_path[len(head):].strip(SEPARATORS)


def split_first_segment(remainder: str) -> tuple[str, str]:
    """Split at the first separator of either kind.

    An empty rest means remainder names a direct child; otherwise segment
    names an intermediate directory.
    """
    parts = _SEP_RE.split(remainder, maxsplit=1)
    if len(parts) == 1:
        return remainder, ""
    return parts[0], parts[1]


def basename(path: str) -> str:
    """Final segment of a path."""
    return _SEP_RE.split(path.rstrip(SEPARATORS))[-1]
