from __future__ import annotations

"""
File Tree Data Models.

Provides the metadata record returned by stat() and readdir() for every
node of a filesystem, and the loader signature used by lazy files.
"""

import stat
from dataclasses import dataclass
from typing import Callable

from gitfs.domain.context import RequestContext

# A loader returns the whole content of a file. It must raise when the
# given context is done.
Loader = Callable[[RequestContext], bytes]

# -----------------------------------------------------------------------------
# STRUCTURAL METADATA
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FileInfo:
    """
    Metadata of a single file or directory.

    Attributes:
        name: Base name of the node (empty string for the root).
        size: Size in bytes; always 0 for directories.
        is_dir: Whether the node is a directory.
        mod_time: Modification time. Not tracked, always 0.0.
        mode: stat.S_IFDIR for directories, 0 for files.
    """
    name: str
    size: int
    is_dir: bool
    mod_time: float = 0.0
    mode: int = 0

    @classmethod
    def for_directory(cls, name: str) -> FileInfo:
        return cls(name=name, size=0, is_dir=True, mode=stat.S_IFDIR)

    @classmethod
    def for_file(cls, name: str, size: int) -> FileInfo:
        return cls(name=name, size=size, is_dir=False)
