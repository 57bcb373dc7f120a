from __future__ import annotations

"""
Read-only filesystem over a remote git repository.

    import gitfs

    fs = gitfs.new("github.com/owner/repo/docs@v1.2.0")
    with fs.open("index.md") as f:
        print(f.read().decode())
"""

from gitfs.core.engine import open_filesystem as new
from gitfs.core.services.diff import diff_filesystems
from gitfs.core.services.registry import BinaryRegistry
from gitfs.core.services.walker import walk
from gitfs.core.tree.handles import with_context
from gitfs.core.tree.path_tree import PathTree
from gitfs.domain.context import RequestContext
from gitfs.domain.errors import (
    AggregatedFailureError,
    ContextCancelledError,
    DeadlineExceededError,
    GitFSError,
    InvalidRequestError,
    NetworkError,
    NotFoundError,
    ParseError,
    PathConflictError,
    RegistrationError,
    UnsupportedEncodingError,
    UnsupportedVersionError,
)
from gitfs.infra.logging import LoggingConfig, configure_logging

__version__ = "0.1.0"

__all__ = [
    "new",
    "with_context",
    "walk",
    "diff_filesystems",
    "BinaryRegistry",
    "PathTree",
    "RequestContext",
    "LoggingConfig",
    "configure_logging",
    "GitFSError",
    "ParseError",
    "PathConflictError",
    "RegistrationError",
    "UnsupportedVersionError",
    "NotFoundError",
    "InvalidRequestError",
    "NetworkError",
    "UnsupportedEncodingError",
    "AggregatedFailureError",
    "ContextCancelledError",
    "DeadlineExceededError",
]
