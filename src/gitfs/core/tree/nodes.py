from __future__ import annotations

"""
Tree Node Types.

The closed pair of nodes a PathTree maps paths to: Directory, which keeps
an append-only list of its children, and LazyFile, which caches the
content produced by its loader the first time it is read.
"""

import logging
import threading
import time
from typing import List, Optional, Union

from gitfs.core.tree.handles import DirectoryHandle, FileHandle
from gitfs.domain.context import RequestContext
from gitfs.domain.tree_models import FileInfo, Loader

logger = logging.getLogger(__name__)


class Directory:
    """Directory node. Children are kept in insertion order."""

    is_dir = True

    def __init__(self, name: str) -> None:
        self.name = name
        self._children: List[Node] = []

    def add(self, child: Node) -> None:
        self._children.append(child)

    def stat(self) -> FileInfo:
        return FileInfo.for_directory(self.name)

    def readdir(self, n: int = -1) -> List[FileInfo]:
        """
        List child metadata.

        Args:
            n: Maximum number of entries; n <= 0 lists everything.

        Returns:
            List[FileInfo]: At most n entries, never an error on over-request.
        """
        children = self._children if n <= 0 else self._children[:n]
        return [child.stat() for child in children]

    def open(self, ctx: Optional[RequestContext] = None) -> DirectoryHandle:
        return DirectoryHandle(self)

    def __repr__(self) -> str:
        return f"Directory({self.name!r}, children={len(self._children)})"


class LazyFile:
    """
    File node with a one-time content cache.

    The loader is invoked under a per-file lock, so concurrent readers of
    the same file trigger it once while readers of other files never wait.
    A failed load leaves the cache empty and the next read retries.
    """

    is_dir = False

    def __init__(self, name: str, size: int, loader: Loader) -> None:
        self.name = name
        self.declared_size = int(size)
        self._loader = loader
        self._content: Optional[bytes] = None
        self._lock = threading.Lock()

    @property
    def cached(self) -> bool:
        return self._content is not None

    def load_content(self, ctx: RequestContext) -> bytes:
        with self._lock:
            if self._content is not None:
                return self._content
            start = time.monotonic()
            content = bytes(self._loader(ctx))
            self._content = content
            logger.debug(f"Loaded file {self.name} in {time.monotonic() - start:.1f}s")
            return content

    def stat(self) -> FileInfo:
        # Remote listings may be stale; once content is known it wins.
        content = self._content
        size = len(content) if content is not None else self.declared_size
        return FileInfo.for_file(self.name, size)

    def readdir(self, n: int = -1) -> List[FileInfo]:
        return []

    def open(self, ctx: Optional[RequestContext] = None) -> FileHandle:
        return FileHandle(self, ctx=ctx)

    def __repr__(self) -> str:
        return f"LazyFile({self.name!r}, size={self.declared_size})"


Node = Union[Directory, LazyFile]
