from __future__ import annotations

"""
Path-Indexed File Tree.

Maps normalized paths (no leading or trailing separators, root is the empty
string) to Directory and LazyFile nodes and serves them through open().
Every inserted path has all of its ancestors present as directories, and a
path never changes kind once inserted.
"""

import logging
from typing import Dict, Iterator, Optional

from gitfs.core.tree.handles import Handle
from gitfs.core.tree.nodes import Directory, LazyFile, Node
from gitfs.domain.context import RequestContext
from gitfs.domain.errors import InvalidRequestError, NotFoundError, PathConflictError
from gitfs.domain.tree_models import Loader

logger = logging.getLogger(__name__)


def clean_path(path: str) -> str:
    """Strip leading and trailing separators."""
    return path.strip("/")


class PathTree:
    """
    Read-only filesystem over an in-memory tree of nodes.

    The tree is populated once through add_directory()/add_file() and then
    only read. Insertions are not synchronized; concurrent builders must
    hold their own lock around them.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}

    # --------------------------------------------------------------------------
    # CONSTRUCTION
    # --------------------------------------------------------------------------

    def add_directory(self, path: str) -> Directory:
        """
        Add a directory and, recursively, all of its parent directories.

        Raises:
            PathConflictError: A file already exists at `path` or at one of
                its ancestors.
        """
        path = clean_path(path)
        existing = self._nodes.get(path)
        if existing is not None:
            if not isinstance(existing, Directory):
                raise PathConflictError(path, "file", "directory")
            return existing

        parent_path, _, name = path.rpartition("/")
        d = Directory(name)
        # The root has no parent to register with.
        if path == "":
            self._nodes[path] = d
            return d

        parent = self.add_directory(parent_path)
        self._nodes[path] = d
        parent.add(d)
        return d

    def add_file(self, path: str, size: int, loader: Loader) -> LazyFile:
        """
        Add a file and, recursively, all of its parent directories.

        Re-adding a file at an existing file path keeps the first one.

        Raises:
            PathConflictError: A directory already exists at `path`, or a
                file exists at one of its ancestors.
        """
        path = clean_path(path)
        existing = self._nodes.get(path)
        if existing is not None:
            if not isinstance(existing, LazyFile):
                raise PathConflictError(path, "directory", "file")
            return existing

        parent_path, _, name = path.rpartition("/")
        parent = self.add_directory(parent_path)
        f = LazyFile(name, size, loader)
        self._nodes[path] = f
        parent.add(f)
        return f

    # --------------------------------------------------------------------------
    # FILE INTERFACE
    # --------------------------------------------------------------------------

    def open(self, name: str, ctx: Optional[RequestContext] = None) -> Handle:
        """
        Open a path. A trailing separator asserts that it is a directory.

        Args:
            name: Path to open; leading/trailing separators are ignored.
            ctx: Optional request context the returned handle is bound to.

        Raises:
            NotFoundError: Nothing exists at the path.
            InvalidRequestError: `name` ends with a separator but is a file.
        """
        path = clean_path(name)
        node = self._nodes.get(path)
        if node is None:
            logger.debug(f"File {name} not found")
            raise NotFoundError(f"open {name}: file does not exist")
        if name.endswith("/") and not node.is_dir:
            logger.debug(f"File {name} is invalid")
            raise InvalidRequestError(f"open {name}: not a directory")
        return node.open(ctx)

    def get(self, path: str) -> Optional[Node]:
        return self._nodes.get(clean_path(path))

    def file_count(self) -> int:
        return sum(1 for node in self._nodes.values() if not node.is_dir)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and clean_path(path) in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)
