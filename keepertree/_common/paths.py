"""Pure helpers for slash-delimited node paths.

Paths are plain strings: the root is ``"/"``, every other path starts
with ``/`` and has no trailing slash or empty segment.
"""

from typing import List

from ..errors import InvalidPathError


ROOT = "/"


def validate_path(path: str) -> str:
    """Check that ``path`` is an absolute node path and return it.

    Raises:
        InvalidPathError: For relative paths, trailing slashes, empty or
            dot segments
    """
    if not isinstance(path, str) or not path.startswith("/"):
        raise InvalidPathError(f"Path must be absolute: {path!r}")
    if path == ROOT:
        return path
    if path.endswith("/"):
        raise InvalidPathError(f"Path must not end with '/': {path!r}")
    for segment in path[1:].split("/"):
        if segment in ("", ".", ".."):
            raise InvalidPathError(f"Invalid path segment in {path!r}")
    return path


def validate_name(name: str) -> str:
    """Check a single node name (no slashes, not empty) and return it stripped."""
    name = (name or "").strip()
    if not name:
        raise InvalidPathError("Node name cannot be empty")
    if "/" in name:
        raise InvalidPathError(f"Node name must not contain '/': {name!r}")
    if name in (".", ".."):
        raise InvalidPathError(f"Invalid node name: {name!r}")
    return name


def join_path(parent: str, name: str) -> str:
    """Child path of ``parent``; the root has no doubled slash."""
    if parent == ROOT:
        return f"/{name}"
    return f"{parent}/{name}"


def parent_path(path: str) -> str:
    """Parent of ``path``. The root is its own parent."""
    if path == ROOT:
        return ROOT
    head = path.rsplit("/", 1)[0]
    return head or ROOT


def node_name(path: str) -> str:
    """Last segment of ``path`` (``"/"`` for the root)."""
    if path == ROOT:
        return ROOT
    return path.rsplit("/", 1)[1]


def path_depth(path: str) -> int:
    """Depth below the root (root is 0)."""
    if path == ROOT:
        return 0
    return path.count("/")


def is_ancestor(ancestor: str, path: str) -> bool:
    """True if ``ancestor`` is a strict ancestor of ``path``."""
    if ancestor == path:
        return False
    if ancestor == ROOT:
        return True
    return path.startswith(ancestor + "/")


def ancestors(path: str) -> List[str]:
    """Ancestors of ``path`` from the root down, excluding ``path`` itself."""
    chain = []
    current = path
    while current != ROOT:
        current = parent_path(current)
        chain.append(current)
    return list(reversed(chain))
