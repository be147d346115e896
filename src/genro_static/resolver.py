# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Resolver - maps a request path onto a file under the configured root.

Resolution steps:

    "/docs//guide/./"   -> segments ("docs", "guide"), directory-like
    "/docs/../secret"   -> PathForbidden (parent segment)
    "/a\\b", "/a\\x00"  -> PathForbidden (disallowed character)

    1. Normalize: drop empty and "." segments, refuse "..", NUL and "\\".
    2. Join the segments onto the root (LocalStorage node).
    3. Refuse candidates that resolve (symlinks followed) outside the root.
    4. Directory-like paths (trailing "/", empty path, or an existing
       directory) get the index filename appended.
    5. The final node must be a regular file, else PathNotFound.
    6. A symlink loop or an over-long name met in steps 3-5 is PathNotFound.

Only step 3-5 touch the disk. ``resolve`` is wrapped with smartasync, so the
pipeline awaits it off the event loop while sync callers get the value.
"""

from __future__ import annotations

import errno
from dataclasses import dataclass
from pathlib import Path

from smartasync import smartasync

from .exceptions import PathForbidden, PathNotFound
from .storage import LocalStorage, StorageNode

__all__ = ["ResolvedPath", "Resolver", "normalize_path"]

_DISALLOWED = ("\x00", "\\")

# errno values meaning "this name cannot exist here"
_UNRESOLVABLE = (errno.ENAMETOOLONG, errno.ELOOP)


@dataclass(frozen=True)
class ResolvedPath:
    """A validated file under the root.

    Attributes:
        node: Storage node of the file to serve.
        index_substituted: True if the request named a directory.
    """

    node: StorageNode
    index_substituted: bool = False

    @property
    def path(self) -> str:
        """Root-relative path of the file, "/"-separated."""
        return self.node.path

    @property
    def absolute_path(self) -> Path:
        return self.node.absolute_path


def normalize_path(request_path: str) -> tuple[tuple[str, ...], bool]:
    """Split a request path into safe segments.

    Args:
        request_path: Path as received, normally starting with "/".

    Returns:
        (segments, directory_like). directory_like is True for an empty
        path or a trailing separator.

    Raises:
        PathForbidden: on a ".." segment or a disallowed character.
    """
    for char in _DISALLOWED:
        if char in request_path:
            raise PathForbidden(request_path, "disallowed character")

    segments: list[str] = []
    for segment in request_path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise PathForbidden(request_path, "parent segment")
        segments.append(segment)

    directory_like = not segments or request_path.endswith("/")
    return tuple(segments), directory_like


class Resolver:
    """Resolves request paths against a LocalStorage root.

    Attributes:
        storage: Storage the paths are resolved in.
        index_filename: File substituted for directory requests.
    """

    __slots__ = ("storage", "index_filename")

    def __init__(self, storage: LocalStorage, index_filename: str = "index.html") -> None:
        self.storage = storage
        self.index_filename = index_filename

    @smartasync
    def resolve(self, request_path: str) -> ResolvedPath:
        """Resolve ``request_path`` to a file.

        Names the file system cannot resolve (a symlink loop, a segment
        longer than the platform limit) are reported as missing.

        Raises:
            PathForbidden: traversal, disallowed shape, or escape via symlink.
            PathNotFound: missing file, missing directory, missing index,
                unresolvable name.
            OSError: the file system lookup failed (e.g. permission denied).
        """
        segments, directory_like = normalize_path(request_path)
        try:
            return self._locate(request_path, segments, directory_like)
        except RuntimeError as e:
            # pathlib before 3.13 reports symlink loops as RuntimeError
            raise PathNotFound(request_path, "symlink loop") from e
        except OSError as e:
            if e.errno in _UNRESOLVABLE:
                raise PathNotFound(request_path, "unresolvable name") from e
            raise

    def _locate(self, request_path: str, segments: tuple[str, ...], directory_like: bool) -> ResolvedPath:
        node: StorageNode = self.storage.node(*segments)
        if not node.contained:
            raise PathForbidden(request_path, "outside root")

        index_substituted = False
        if directory_like or node.isdir:
            node = node.child(self.index_filename)
            index_substituted = True
            if not node.contained:
                raise PathForbidden(request_path, "index outside root")

        if not node.isfile:
            raise PathNotFound(request_path, "missing index" if index_substituted else "no such file")

        return ResolvedPath(node=node, index_substituted=index_substituted)

    def __repr__(self) -> str:
        return f"Resolver(root={str(self.storage.root)!r}, index={self.index_filename!r})"
