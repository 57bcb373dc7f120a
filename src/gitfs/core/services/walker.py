from __future__ import annotations

"""
Filesystem Traversal.

Depth-first walk over anything exposing open(path, ctx) that returns
handles with stat() and readdir(). Children are visited in lexical order
so that two equal filesystems always produce the same sequence.
"""

import logging
from typing import Iterator, Optional, Protocol, Tuple

from gitfs.domain.context import RequestContext
from gitfs.domain.tree_models import FileInfo

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    def open(self, name: str, ctx: Optional[RequestContext] = None): ...


def join_path(parent: str, name: str) -> str:
    return f"{parent}/{name}" if parent else name


def walk(
        fs: FileSystem,
        root: str = "",
        ctx: Optional[RequestContext] = None
) -> Iterator[Tuple[str, FileInfo]]:
    """
    Yield (path, info) for `root` and everything below it.

    Args:
        fs: Filesystem to traverse.
        root: Path to start from; the empty string is the filesystem root.
        ctx: Context handed to every open() call.

    Yields:
        Tuple[str, FileInfo]: Normalized path and metadata, parents before
        children, siblings sorted by name.

    Raises:
        NotFoundError: `root` does not exist.
    """
    root = root.strip("/")
    with fs.open(root, ctx) as handle:
        info = handle.stat()
        children = handle.readdir(-1) if info.is_dir else []

    yield root, info
    for child in sorted(children, key=lambda c: c.name):
        path = join_path(root, child.name)
        if child.is_dir:
            yield from walk(fs, path, ctx)
        else:
            yield path, child


def list_files(fs: FileSystem, root: str = "", ctx: Optional[RequestContext] = None) -> Iterator[str]:
    """Yield the path of every regular file below `root`."""
    for path, info in walk(fs, root, ctx):
        if not info.is_dir:
            yield path
