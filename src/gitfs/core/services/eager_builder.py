from __future__ import annotations

"""
Eager (Prefetch) Tree Construction.

Walks the remote repository directory by directory with the shallow
contents API and downloads every matching file while walking. Directory
listings and downloads run as tasks on a bounded thread pool; a join
barrier counts the tasks still in flight and the build returns only after
all of them have settled. Any failure invalidates the whole build: the
first error is surfaced, later ones are logged.
"""

import logging
import posixpath
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from gitfs.core.filters.glob import GlobPatterns
from gitfs.core.services.resolver import ProjectRef
from gitfs.core.tree.path_tree import PathTree
from gitfs.domain.context import RequestContext
from gitfs.domain.errors import AggregatedFailureError, NetworkError
from gitfs.domain.tree_models import Loader
from gitfs.infra.network import GitHubClient, decode_transfer_content

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


# ==============================================================================
# SYNCHRONIZATION PRIMITIVES
# ==============================================================================

class _JoinBarrier:
    """Counts in-flight tasks. wait() blocks until the count drops to zero."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    def add(self, n: int = 1) -> None:
        with self._cond:
            self._count += n

    def done(self) -> None:
        with self._cond:
            self._count -= 1
            if self._count <= 0:
                self._cond.notify_all()

    def wait(self) -> None:
        with self._cond:
            while self._count > 0:
                self._cond.wait()


class _ErrorSink:
    """Keeps the first reported error. Later ones are logged, not surfaced."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._errors: List[BaseException] = []

    def report(self, err: BaseException) -> None:
        with self._lock:
            self._errors.append(err)
            if len(self._errors) > 1:
                logger.warning(f"Discarding additional prefetch error: {err}")

    @property
    def errors(self) -> List[BaseException]:
        with self._lock:
            return list(self._errors)


# ==============================================================================
# BUILDER
# ==============================================================================

class EagerTreeBuilder:
    """
    Builds a fully-downloaded tree with concurrent directory walks.

    Args:
        client: Remote API client.
        project: Project with a resolved ref.
        glob: Include patterns applied while discovering entries.
        max_workers: Upper bound on concurrent remote calls.
    """

    def __init__(
            self,
            client: GitHubClient,
            project: ProjectRef,
            glob: Optional[GlobPatterns] = None,
            max_workers: int = DEFAULT_MAX_WORKERS
    ) -> None:
        self._client = client
        self._project = project
        self._glob = glob or GlobPatterns()
        self._max_workers = max(1, int(max_workers))

    def build(self, ctx: Optional[RequestContext] = None) -> PathTree:
        """
        Walk and download the project.

        Raises:
            AggregatedFailureError: At least one listing or download failed.
        """
        run = _EagerRun(self, ctx or RequestContext.background())
        return run.execute()


class _EagerRun:
    """State of one build: the tree under construction and its guards."""

    def __init__(self, builder: EagerTreeBuilder, ctx: RequestContext) -> None:
        self._client = builder._client
        self._project = builder._project
        self._glob = builder._glob
        self._max_workers = builder._max_workers
        self._ctx = ctx

        self._tree = PathTree()
        self._tree_lock = threading.Lock()
        self._barrier = _JoinBarrier()
        self._sink = _ErrorSink()
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="PrefetchWorker"
        )

    def execute(self) -> PathTree:
        self._tree.add_directory("")
        with self._executor:
            self._spawn(self._list_directory, self._project.path)
            self._barrier.wait()

        errors = self._sink.errors
        if errors:
            raise AggregatedFailureError(errors) from errors[0]
        return self._tree

    # --------------------------------------------------------------------------
    # TASKS
    # --------------------------------------------------------------------------

    def _list_directory(self, repo_path: str) -> None:
        p = self._project
        logger.debug(f"Using get-contents API for path {repo_path!r}")
        contents = self._client.get_directory_contents(
            self._ctx, p.owner, p.repo, repo_path, p.short_ref
        )

        for entry in contents.entries:
            fs_path = self._relative(entry.path)
            if entry.type == "dir":
                if not self._glob.match(fs_path, True):
                    continue
                with self._tree_lock:
                    self._tree.add_directory(fs_path)
                self._spawn(self._list_directory, entry.path)
            elif entry.type == "file":
                if not self._glob.match(fs_path, False):
                    continue
                self._spawn(self._download_file, fs_path, entry.size, entry.download_url)

        # The contents API answers with a single record when the path is a file.
        single = contents.file
        if single is not None:
            fs_path = self._relative(single.path)
            if not self._glob.match(fs_path, False):
                return
            data = decode_transfer_content(single.encoding or "", single.content or "")
            with self._tree_lock:
                self._tree.add_file(fs_path, single.size, _resolved_loader(data))

    def _download_file(self, fs_path: str, size: int, download_url: Optional[str]) -> None:
        if not download_url:
            raise NetworkError("download", fs_path, "entry has no download URL")
        data = self._client.download(self._ctx, download_url)
        with self._tree_lock:
            self._tree.add_file(fs_path, size, _resolved_loader(data))

    # --------------------------------------------------------------------------
    # HELPERS
    # --------------------------------------------------------------------------

    def _spawn(self, fn: Callable[..., None], *args: Any) -> None:
        self._barrier.add()
        try:
            self._executor.submit(self._run, fn, *args)
        except RuntimeError as e:
            # Submission refused (interpreter shutting down).
            self._sink.report(e)
            self._barrier.done()

    def _run(self, fn: Callable[..., None], *args: Any) -> None:
        try:
            fn(*args)
        except Exception as e:
            self._sink.report(e)
        finally:
            self._barrier.done()

    def _relative(self, repo_path: str) -> str:
        rel = self._project.relative(repo_path)
        if rel is None:
            # The project sub path names a single file.
            return posixpath.basename(repo_path)
        return rel


def _resolved_loader(data: bytes) -> Loader:
    def load(ctx: RequestContext) -> bytes:
        ctx.raise_if_cancelled()
        return data

    return load
