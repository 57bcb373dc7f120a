from __future__ import annotations

"""
Filesystem Comparison.

Compares two filesystems by structure and file content, independent of
how each one is implemented. Used to check that a remote tree, a local
checkout and a packed tree describe the same project.
"""

import difflib
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from gitfs.core.services.walker import FileSystem, walk
from gitfs.domain.context import RequestContext

logger = logging.getLogger(__name__)

MSG_ONLY_IN_A = "only in {a}"
MSG_ONLY_IN_B = "only in {b}"
MSG_A_FILE_B_DIR = "on {a} is file, on {b} directory"
MSG_A_DIR_B_FILE = "on {a} is directory, on {b} file"
MSG_CONTENT_DIFF = "content diff (-{a}, +{b}):"


@dataclass(frozen=True)
class PathDiff:
    """A difference at a single path. `diff` is a message template."""
    path: str
    diff: str
    diff_info: str = ""


@dataclass
class FileSystemDiff:
    """All differences between filesystems named `a` and `b`, ordered by path."""
    diffs: List[PathDiff] = field(default_factory=list)
    a: str = "a"
    b: str = "b"

    def __bool__(self) -> bool:
        return bool(self.diffs)

    def __len__(self) -> int:
        return len(self.diffs)

    def __str__(self) -> str:
        if not self.diffs:
            return ""
        lines = [f"Diff between {self.a} and {self.b}:"]
        for d in self.diffs:
            lines.append(f"[{d.path}]: {d.diff.format(a=self.a, b=self.b)}")
            if d.diff_info:
                lines.append(d.diff_info.rstrip("\n"))
        return "\n".join(lines) + "\n"


def _ls_recursive(fs: FileSystem, ctx: Optional[RequestContext]) -> List[str]:
    return sorted(path for path, _ in walk(fs, "", ctx))


def _read_all(fs: FileSystem, path: str, ctx: Optional[RequestContext]) -> bytes:
    with fs.open(path, ctx) as f:
        return f.read()


def _content_diff(
        a: FileSystem,
        b: FileSystem,
        path: str,
        names: FileSystemDiff,
        ctx: Optional[RequestContext]
) -> Optional[PathDiff]:
    with a.open(path, ctx) as fa:
        a_info = fa.stat()
    with b.open(path, ctx) as fb:
        b_info = fb.stat()

    if a_info.is_dir or b_info.is_dir:
        if not a_info.is_dir:
            return PathDiff(path, MSG_A_FILE_B_DIR)
        if not b_info.is_dir:
            return PathDiff(path, MSG_A_DIR_B_FILE)
        return None

    a_data = _read_all(a, path, ctx)
    b_data = _read_all(b, path, ctx)
    if a_data == b_data:
        return None

    delta = difflib.unified_diff(
        a_data.decode("utf-8", errors="replace").splitlines(keepends=True),
        b_data.decode("utf-8", errors="replace").splitlines(keepends=True),
        fromfile=f"{names.a}/{path}",
        tofile=f"{names.b}/{path}",
    )
    return PathDiff(path, MSG_CONTENT_DIFF, "".join(delta))


def diff_filesystems(
        a: FileSystem,
        b: FileSystem,
        ctx: Optional[RequestContext] = None,
        a_name: str = "a",
        b_name: str = "b"
) -> FileSystemDiff:
    """
    Compare two filesystems. Equal filesystems give an empty (falsy) result.

    Raises:
        GitFSError: Walking or reading either filesystem failed.
    """
    a_files = _ls_recursive(a, ctx)
    b_files = _ls_recursive(b, ctx)
    result = FileSystemDiff(a=a_name, b=b_name)

    i = j = 0
    while i < len(a_files) or j < len(b_files):
        if j >= len(b_files) or (i < len(a_files) and a_files[i] < b_files[j]):
            result.diffs.append(PathDiff(a_files[i], MSG_ONLY_IN_A))
            i += 1
        elif i >= len(a_files) or b_files[j] < a_files[i]:
            result.diffs.append(PathDiff(b_files[j], MSG_ONLY_IN_B))
            j += 1
        else:
            d = _content_diff(a, b, a_files[i], result, ctx)
            if d is not None:
                result.diffs.append(d)
            i += 1
            j += 1

    logger.debug(f"Compared {len(a_files)} and {len(b_files)} paths: {len(result.diffs)} differences")
    return result
