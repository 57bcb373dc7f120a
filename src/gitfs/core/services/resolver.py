from __future__ import annotations

"""
Project Identifier Resolution.

Parses identifiers of the form host/owner/repo(/subpath)?(@ref)? and
normalizes the ref to a 'heads/...' or 'tags/...' reference, asking the
remote for the default branch when no ref was given.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Optional, Protocol

from gitfs.domain.context import RequestContext
from gitfs.domain.errors import ParseError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GRAMMAR
# -----------------------------------------------------------------------------

_RE_PROJECT = re.compile(r"^([^@/]+)/([^@/]+)/([^@/]+)(/([^@]*))?(@(.+))?$")
_RE_SEMVER = re.compile(r"^v?\d+(\.\d+){0,2}$")

_REF_PREFIXES = ("heads/", "tags/")


class DefaultBranchSource(Protocol):
    def get_default_branch(self, ctx: RequestContext, owner: str, repo: str) -> str:
        ...


@dataclass(frozen=True)
class ProjectRef:
    """
    A parsed project identifier.

    Attributes:
        host: Hosting service, e.g. 'github.com'.
        owner: Repository owner.
        repo: Repository name.
        path: Sub path inside the repository, with a trailing '/' (or empty).
        ref: 'heads/<branch>', 'tags/<tag>', or empty until resolved.
    """
    host: str
    owner: str
    repo: str
    path: str = ""
    ref: str = ""

    @property
    def name(self) -> str:
        return f"{self.host}/{self.owner}/{self.repo}"

    @property
    def short_ref(self) -> str:
        """The ref without its 'heads/' or 'tags/' prefix."""
        for prefix in _REF_PREFIXES:
            if self.ref.startswith(prefix):
                return self.ref[len(prefix):]
        return self.ref

    def relative(self, path: str) -> Optional[str]:
        """
        Express a repository path relative to the project sub path.

        Returns:
            Optional[str]: The relative path, or None when outside the sub path.
        """
        if not self.path:
            return path
        if not path.startswith(self.path):
            return None
        return path[len(self.path):]


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def match_project(identifier: str) -> bool:
    return _RE_PROJECT.match(identifier) is not None


def parse_project(identifier: str) -> ProjectRef:
    """
    Split a project identifier into its components.

    Raises:
        ParseError: Malformed identifier, or a ref without a valid prefix.
    """
    m = _RE_PROJECT.match(identifier)
    if m is None:
        raise ParseError(f"bad project name: {identifier}")

    host, owner, repo = m.group(1), m.group(2), m.group(3)
    path = m.group(5) or ""
    ref = m.group(7) or ""

    if path and not path.endswith("/"):
        path += "/"

    if _RE_SEMVER.match(ref):
        ref = "tags/" + ref

    verify_ref(ref)
    return ProjectRef(host=host, owner=owner, repo=repo, path=path, ref=ref)


def verify_ref(ref: str) -> None:
    if ref and not ref.startswith(_REF_PREFIXES):
        raise ParseError(f"ref {ref!r} must have a 'heads/' or 'tags/' prefix")


def resolve_ref(
        project: ProjectRef,
        source: DefaultBranchSource,
        ctx: Optional[RequestContext] = None
) -> ProjectRef:
    """
    Fill an empty ref with the repository default branch (one remote call).
    """
    if project.ref:
        return project
    ctx = ctx or RequestContext.background()
    branch = source.get_default_branch(ctx, project.owner, project.repo)
    logger.debug(f"Resolved default branch of {project.name}: {branch}")
    return replace(project, ref="heads/" + branch)
