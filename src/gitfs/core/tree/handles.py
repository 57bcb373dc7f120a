from __future__ import annotations

"""
Open Node Handles.

A handle is the position-bearing view returned by open(). Directory
handles are stateless listings; file handles own a private cursor over the
content cached by their LazyFile, so two handles never share a read
position, even when one was derived from the other through with_context().
"""

import io
import threading
from typing import TYPE_CHECKING, List, Optional, Union

from gitfs.domain.context import RequestContext
from gitfs.domain.tree_models import FileInfo

if TYPE_CHECKING:
    from gitfs.core.tree.nodes import Directory, LazyFile


# ==============================================================================
# DIRECTORY HANDLE
# ==============================================================================

class DirectoryHandle:
    """Read-only handle over a Directory node."""

    def __init__(self, directory: Directory) -> None:
        self._dir = directory

    def stat(self) -> FileInfo:
        return self._dir.stat()

    def readdir(self, n: int = -1) -> List[FileInfo]:
        return self._dir.readdir(n)

    def read(self, size: int = -1) -> bytes:
        return b""

    def readinto(self, buffer: bytearray) -> int:
        return 0

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return 0

    def tell(self) -> int:
        return 0

    def close(self) -> None:
        return None

    def with_context(self, ctx: RequestContext) -> DirectoryHandle:
        # Listings never touch the network, nothing to rebind.
        return self

    def __enter__(self) -> DirectoryHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


# ==============================================================================
# FILE HANDLE
# ==============================================================================

class FileHandle:
    """
    Handle over a LazyFile with its own read cursor.

    The cursor is materialized on first byte access, after the shared
    content has been loaded under the bound request context.
    """

    def __init__(
            self,
            file: LazyFile,
            ctx: Optional[RequestContext] = None,
            offset: Optional[int] = None
    ) -> None:
        self._file = file
        self._ctx = ctx or RequestContext.background()
        # None until the first read/seek.
        self._offset: Optional[int] = offset
        self._lock = threading.Lock()

    @property
    def context(self) -> RequestContext:
        return self._ctx

    def stat(self) -> FileInfo:
        return self._file.stat()

    def readdir(self, n: int = -1) -> List[FileInfo]:
        return []

    def read(self, size: Optional[int] = -1) -> bytes:
        """
        Read up to `size` bytes from the cursor (everything left if negative).

        Raises:
            ContextCancelledError: The bound context is done.
            Exception: Whatever the file loader raised.
        """
        content = self._lazy()
        with self._lock:
            start = self._offset or 0
            if start >= len(content):
                self._offset = start
                return b""
            end = len(content) if size is None or size < 0 else min(len(content), start + size)
            self._offset = end
            return content[start:end]

    def readinto(self, buffer: bytearray) -> int:
        data = self.read(len(buffer))
        n = len(data)
        memoryview(buffer)[:n] = data
        return n

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        content = self._lazy()
        with self._lock:
            if whence == io.SEEK_SET:
                target = offset
            elif whence == io.SEEK_CUR:
                target = (self._offset or 0) + offset
            elif whence == io.SEEK_END:
                target = len(content) + offset
            else:
                raise ValueError(f"invalid whence ({whence})")
            if target < 0:
                raise ValueError("negative seek position")
            self._offset = target
            return target

    def tell(self) -> int:
        with self._lock:
            return self._offset or 0

    def close(self) -> None:
        """Reset cursor and context so the handle can be reused."""
        with self._lock:
            self._offset = None
            self._ctx = RequestContext.background()

    def with_context(self, ctx: RequestContext) -> FileHandle:
        """Return a new handle bound to `ctx` with a copy of this cursor."""
        with self._lock:
            return FileHandle(self._file, ctx=ctx, offset=self._offset)

    def _lazy(self) -> bytes:
        self._ctx.raise_if_cancelled()
        content = self._file.load_content(self._ctx)
        with self._lock:
            if self._offset is None:
                self._offset = 0
        return content

    def __enter__(self) -> FileHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


Handle = Union[DirectoryHandle, FileHandle]


def with_context(handle: Handle, ctx: RequestContext) -> Handle:
    """Rebind a handle to a new request context (for cancellation/timeouts)."""
    return handle.with_context(ctx)
