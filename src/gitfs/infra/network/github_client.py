from __future__ import annotations

"""
Git-Hosting REST API Client.

Wraps the five remote operations a tree needs (default branch, recursive
tree, blob, shallow directory contents and raw download) on top of a
requests Session. Every call is made under a RequestContext: it is checked
before the request goes out and its deadline bounds the request timeout.
HTTP and transport failures come back as NetworkError/NotFoundError.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from gitfs.domain.context import RequestContext
from gitfs.domain.errors import NetworkError, NotFoundError
from gitfs.domain.remote_models import Blob, ContentEntry, DirectoryContents, GitTree, TreeEntry
from gitfs.infra.network.common import DEFAULT_TIMEOUT, GITHUB_API_URL, USER_AGENT

logger = logging.getLogger(__name__)


class GitHubClient:
    """
    Client for the GitHub v3 REST API (or any host exposing the same routes).

    Args:
        session: Optional pre-configured session, e.g. one carrying
            authentication. A plain session is created when omitted.
        api_base: Root URL of the API.
        token: Optional access token added as an Authorization header.
        timeout: Per-request timeout when the context has no deadline.
    """

    def __init__(
            self,
            session: Optional[requests.Session] = None,
            api_base: str = GITHUB_API_URL,
            token: Optional[str] = None,
            timeout: float = DEFAULT_TIMEOUT
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._headers: Dict[str, str] = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github.v3+json",
        }
        if token:
            self._headers["Authorization"] = f"token {token}"

    # ==========================================================================
    # REMOTE OPERATIONS
    # ==========================================================================

    def get_default_branch(self, ctx: RequestContext, owner: str, repo: str) -> str:
        data = self._get_json(ctx, "get repository", f"{owner}/{repo}", self._repo_url(owner, repo))
        branch = data.get("default_branch") if isinstance(data, dict) else None
        if not branch:
            raise NetworkError("get repository", f"{owner}/{repo}", "response has no default branch")
        return str(branch)

    def get_recursive_tree(self, ctx: RequestContext, owner: str, repo: str, ref: str) -> GitTree:
        url = f"{self._repo_url(owner, repo)}/git/trees/{quote(ref)}"
        data = self._get_json(ctx, "get git tree", ref, url, params={"recursive": "1"})
        entries = [TreeEntry.from_json(e) for e in data.get("tree", [])]
        return GitTree(entries=entries, truncated=bool(data.get("truncated", False)))

    def get_blob(self, ctx: RequestContext, owner: str, repo: str, sha: str) -> Blob:
        url = f"{self._repo_url(owner, repo)}/git/blobs/{quote(sha)}"
        data = self._get_json(ctx, "get blob", sha, url)
        return Blob(encoding=data.get("encoding", ""), content=data.get("content") or "")

    def get_directory_contents(
            self,
            ctx: RequestContext,
            owner: str,
            repo: str,
            path: str,
            ref: str = ""
    ) -> DirectoryContents:
        """
        List the immediate children of a directory (or describe a single file).

        Args:
            ref: Branch or tag name without the 'heads/' or 'tags/' prefix.
        """
        url = f"{self._repo_url(owner, repo)}/contents/{quote(path.strip('/'))}"
        params = {"ref": ref} if ref else None
        data = self._get_json(ctx, "get contents", path or "/", url, params=params)
        if isinstance(data, list):
            return DirectoryContents(entries=[ContentEntry.from_json(e) for e in data])
        return DirectoryContents(entries=[], file=ContentEntry.from_json(data))

    def download(self, ctx: RequestContext, url: str) -> bytes:
        response = self._request(ctx, "download", url, url, headers={"User-Agent": USER_AGENT})
        return response.content

    # ==========================================================================
    # PRIVATE HELPERS
    # ==========================================================================

    def _repo_url(self, owner: str, repo: str) -> str:
        return f"{self._api_base}/repos/{quote(owner)}/{quote(repo)}"

    def _get_json(
            self,
            ctx: RequestContext,
            operation: str,
            path: str,
            url: str,
            params: Optional[Dict[str, str]] = None
    ) -> Any:
        response = self._request(ctx, operation, path, url, params=params, headers=self._headers)
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(operation, path, f"invalid JSON response: {e}") from e

    def _request(
            self,
            ctx: RequestContext,
            operation: str,
            path: str,
            url: str,
            params: Optional[Dict[str, str]] = None,
            headers: Optional[Dict[str, str]] = None
    ) -> requests.Response:
        ctx.raise_if_cancelled()
        logger.debug(f"{operation}: GET {url}")
        try:
            response = self._session.get(
                url,
                params=params,
                headers=headers,
                timeout=ctx.remaining(self._timeout),
            )
        except requests.exceptions.RequestException as e:
            raise NetworkError(operation, path, str(e)) from e

        # A cancellation that raced the request still wins.
        ctx.raise_if_cancelled()

        if response.status_code == 404:
            raise NotFoundError(f"{operation} {path!r}: not found")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise NetworkError(operation, path, str(e), status_code=response.status_code) from e
        return response
