# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""LocalStorage - read-only filesystem access rooted at one directory.

The file-system layer the resolver and the assembler talk to. It only
knows how to name nodes under a root, stat them and read them; path
policy (traversal, index substitution) lives in the resolver.

Blocking calls are wrapped with ``smartasync``: called from sync code they
run inline, awaited from a coroutine they run in a worker thread so the event
loop is never blocked by disk I/O.

Usage:
    storage = LocalStorage("./public")
    node = storage.node("css", "site.css")
    node.isfile                     # True
    data = node.read_bytes()        # sync caller
    data = await node.read_bytes()  # async caller
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from smartasync import smartasync

__all__ = ["LocalStorage", "LocalStorageNode", "StorageNode"]


@runtime_checkable
class StorageNode(Protocol):
    """Interface of a node the pipeline can resolve and read."""

    @property
    def path(self) -> str:
        """Root-relative path, "/"-separated, "" for the root."""
        ...

    @property
    def absolute_path(self) -> Path:
        """Absolute filesystem path."""
        ...

    @property
    def basename(self) -> str:
        """Last segment of path."""
        ...

    @property
    def isfile(self) -> bool:
        """True if it's a regular file."""
        ...

    @property
    def isdir(self) -> bool:
        """True if it's a directory."""
        ...

    @property
    def contained(self) -> bool:
        """True if the node, symlinks followed, stays under the root."""
        ...

    def child(self, *parts: str) -> StorageNode:
        """Return a child node."""
        ...

    def read_bytes(self) -> bytes:
        """Read content as bytes."""
        ...


class LocalStorageNode:
    """A path under a LocalStorage root. Nodes are cheap and immutable."""

    __slots__ = ("_storage", "_path")

    def __init__(self, storage: LocalStorage, path: str) -> None:
        self._storage = storage
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    @property
    def absolute_path(self) -> Path:
        """Absolute filesystem path (symlinks not resolved)."""
        return self._storage.root / self._path if self._path else self._storage.root

    @property
    def basename(self) -> str:
        return self._path.rsplit("/", 1)[-1]

    @property
    def exists(self) -> bool:
        return self.absolute_path.exists()

    @property
    def isfile(self) -> bool:
        return self.absolute_path.is_file()

    @property
    def isdir(self) -> bool:
        return self.absolute_path.is_dir()

    @property
    def size(self) -> int:
        """Size in bytes. 0 if it isn't a file."""
        path = self.absolute_path
        return path.stat().st_size if path.is_file() else 0

    @property
    def contained(self) -> bool:
        real = self.absolute_path.resolve()
        return real == self._storage.root or real.is_relative_to(self._storage.root)

    def child(self, *parts: str) -> LocalStorageNode:
        """Return a child node."""
        child_path = "/".join([self._path, *parts]) if self._path else "/".join(parts)
        return LocalStorageNode(self._storage, child_path)

    @smartasync
    def read_bytes(self) -> bytes:
        """Read content as bytes."""
        return self.absolute_path.read_bytes()

    def __repr__(self) -> str:
        return f"LocalStorageNode({self._path!r})"


class LocalStorage:
    """Filesystem storage rooted at a single directory.

    Attributes:
        root: Absolute, symlink-resolved root directory.
    """

    __slots__ = ("root",)

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    @property
    def exists(self) -> bool:
        """True if the root directory exists."""
        return self.root.is_dir()

    def node(self, *parts: str) -> LocalStorageNode:
        """Create a node from "/"-free path segments.

        Examples:
            storage.node()                      # the root itself
            storage.node("css", "site.css")
        """
        return LocalStorageNode(self, "/".join(parts))

    def __repr__(self) -> str:
        return f"LocalStorage({str(self.root)!r})"


if __name__ == "__main__":
    import sys

    storage = LocalStorage(sys.argv[1] if len(sys.argv) > 1 else ".")
    for name in sys.argv[2:]:
        node = storage.node(*name.strip("/").split("/"))
        print(f"{node.path}: isfile={node.isfile} isdir={node.isdir} size={node.size}")
