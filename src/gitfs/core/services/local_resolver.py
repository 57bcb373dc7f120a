from __future__ import annotations

"""
Local Checkout Resolution.

Serves a project from a git checkout on disk instead of the remote API.
The checkout is accepted only when one of its remote URLs names the same
project; the project sub path then selects the directory to expose. File
content is read from disk on first access.
"""

import logging
import os
import re
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from dulwich.config import ConfigFile

from gitfs.core.filters.glob import GlobPatterns
from gitfs.core.tree.path_tree import PathTree
from gitfs.domain.context import RequestContext
from gitfs.domain.errors import NotFoundError
from gitfs.domain.tree_models import Loader

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"

# scp-like remote syntax: git@github.com:owner/repo.git
_RE_SCP_URL = re.compile(r"^(?:[^@/]+@)?([^:/]+):(?!//)(.+)$")


# -----------------------------------------------------------------------------
# GIT CHECKOUT INSPECTION
# -----------------------------------------------------------------------------

def lookup_git_root(path: str) -> str:
    """
    Find the closest ancestor of `path` (inclusive) holding a .git entry.

    Raises:
        NotFoundError: No enclosing git checkout.
    """
    current = os.path.abspath(path)
    while True:
        if os.path.exists(os.path.join(current, GIT_DIR_NAME)):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            raise NotFoundError(f"git root not found for {path!r}")
        current = parent


def read_remote_urls(git_root: str) -> List[str]:
    """
    Collect every remote URL declared in the checkout's git config.

    A remote may list several 'url' entries; all of them are returned, in
    file order.
    """
    config_path = os.path.join(git_root, GIT_DIR_NAME, "config")
    if not os.path.isfile(config_path):
        return []

    try:
        config = ConfigFile.from_path(config_path)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not parse git config {config_path}: {e}")
        return []

    urls: List[str] = []
    for section in config.sections():
        if len(section) < 2 or section[0] != b"remote":
            continue
        for raw in config.get_multivar(section, b"url"):
            url = raw.decode("utf-8", errors="replace").strip()
            if url:
                urls.append(url)
    return urls


def url_project_name(url: str) -> str:
    """
    Reduce a remote URL to 'host/owner/repo'.

    Handles https://, ssh:// and scp-like 'git@host:owner/repo' forms.
    """
    url = url.strip()
    if "://" in url:
        parsed = urlparse(url)
        host = parsed.hostname or ""
        path = parsed.path
    else:
        m = _RE_SCP_URL.match(url)
        if m is None:
            return url
        host, path = m.group(1), "/" + m.group(2)

    path = path.rstrip("/")
    if path.endswith(".git"):
        path = path[:-len(".git")]
    return host + path


def compute_subdir(project_name: str, remote_urls: Iterable[str]) -> str:
    """
    Match a project identifier against remote URLs.

    Returns:
        str: Directory inside the checkout the project refers to ('' for root).

    Raises:
        NotFoundError: None of the remotes matches the project.
    """
    name = project_name.split("@", 1)[0].rstrip("/")
    for url in remote_urls:
        remote = url_project_name(url)
        if name == remote:
            return ""
        if name.startswith(remote + "/"):
            return name[len(remote) + 1:]
    raise NotFoundError(f"none of the remote URLs matched project {name!r}")


# -----------------------------------------------------------------------------
# TREE CONSTRUCTION
# -----------------------------------------------------------------------------

def _disk_loader(abs_path: str) -> Loader:
    def load(ctx: RequestContext) -> bytes:
        ctx.raise_if_cancelled()
        with open(abs_path, "rb") as f:
            return f.read()

    return load


def build_local_tree(root: str, glob: Optional[GlobPatterns] = None) -> PathTree:
    """
    Index a directory on disk into a PathTree with lazy disk loaders.

    The .git directory is never exposed.
    """
    glob = glob or GlobPatterns()
    tree = PathTree()
    tree.add_directory("")

    root_abs = os.path.abspath(root)
    for current, dirs, files in os.walk(root_abs):
        rel_dir = os.path.relpath(current, root_abs)
        rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/")

        kept = []
        for d in sorted(dirs):
            if d == GIT_DIR_NAME:
                continue
            rel = f"{rel_dir}/{d}" if rel_dir else d
            if glob.match(rel, True):
                tree.add_directory(rel)
                kept.append(d)
        # In-place pruning stops os.walk from descending into filtered dirs.
        dirs[:] = kept

        for name in sorted(files):
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if not glob.match(rel, False):
                continue
            abs_path = os.path.join(current, name)
            try:
                size = os.path.getsize(abs_path)
            except OSError as e:
                logger.warning(f"Skipping unreadable file {abs_path}: {e}")
                continue
            tree.add_file(rel, size, _disk_loader(abs_path))

    return tree


def open_local(
        project_name: str,
        local_path: str,
        glob: Optional[GlobPatterns] = None
) -> PathTree:
    """
    Build a tree for `project_name` from the checkout enclosing `local_path`.

    Raises:
        NotFoundError: No git root, no matching remote, or missing sub directory.
    """
    git_root = lookup_git_root(local_path)
    subdir = compute_subdir(project_name, read_remote_urls(git_root))
    target = os.path.join(git_root, *subdir.split("/")) if subdir else git_root
    if not os.path.isdir(target):
        raise NotFoundError(f"directory {subdir!r} not found in checkout {git_root}")

    logger.info(f"Using local checkout {target} for {project_name}")
    return build_local_tree(target, glob)
