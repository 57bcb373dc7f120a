from __future__ import annotations

"""
Metadata-First Tree Construction.

Builds a PathTree from a single recursive tree listing. File content is not
downloaded here: each file gets a loader that fetches its blob by id the
first time the file is read.
"""

import logging
from typing import Optional

from gitfs.core.filters.glob import GlobPatterns
from gitfs.core.services.resolver import ProjectRef
from gitfs.core.tree.path_tree import PathTree
from gitfs.domain.context import RequestContext
from gitfs.domain.tree_models import Loader
from gitfs.infra.network import GitHubClient, decode_transfer_content

logger = logging.getLogger(__name__)


class MetadataTreeBuilder:
    """
    Builds a lazily-loaded tree with one bulk metadata call.

    Args:
        client: Remote API client.
        project: Project with a resolved ref.
        glob: Include patterns applied while discovering entries.
    """

    def __init__(
            self,
            client: GitHubClient,
            project: ProjectRef,
            glob: Optional[GlobPatterns] = None
    ) -> None:
        self._client = client
        self._project = project
        self._glob = glob or GlobPatterns()

    def build(self, ctx: Optional[RequestContext] = None) -> PathTree:
        """
        List the remote tree and index every matching entry.

        Raises:
            NetworkError: The listing call failed.
            NotFoundError: Unknown repository or ref.
            PathConflictError: The listing contained inconsistent entries.
        """
        ctx = ctx or RequestContext.background()
        p = self._project
        git_tree = self._client.get_recursive_tree(ctx, p.owner, p.repo, p.ref)
        if git_tree.truncated:
            logger.warning(
                f"Tree listing of {p.name}@{p.ref} was truncated by the server; "
                f"use prefetch to walk it directory by directory."
            )

        tree = PathTree()
        tree.add_directory("")
        for entry in git_tree.entries:
            path = p.relative(entry.path)
            if not path:
                continue

            if entry.type == "tree":
                if self._glob.match(path, True):
                    tree.add_directory(path)
            elif entry.type == "blob":
                if self._glob.match(path, False):
                    tree.add_file(path, entry.size, self._blob_loader(entry.sha))

        logger.debug(f"Indexed {tree.file_count()} files of {p.name}@{p.ref}")
        return tree

    def _blob_loader(self, sha: str) -> Loader:
        client = self._client
        owner, repo = self._project.owner, self._project.repo

        def load(ctx: RequestContext) -> bytes:
            blob = client.get_blob(ctx, owner, repo, sha)
            return decode_transfer_content(blob.encoding, blob.content)

        return load
