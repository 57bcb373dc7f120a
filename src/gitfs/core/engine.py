from __future__ import annotations

"""
Filesystem Construction Orchestrator.

Turns a project identifier into a ready PathTree:
1. A local checkout, when a local path is given.
2. A registered packed filesystem, when the registry knows the identifier.
3. The remote API of the identifier's host, either metadata-first (lazy
   blob loads) or eagerly (concurrent walk with every file downloaded).
"""

import logging
import time
from typing import Any, Dict, Iterable, Optional

import requests

from gitfs.core.filters.glob import GlobPatterns
from gitfs.core.services.eager_builder import EagerTreeBuilder
from gitfs.core.services.local_resolver import open_local
from gitfs.core.services.metadata_builder import MetadataTreeBuilder
from gitfs.core.services.registry import BinaryRegistry
from gitfs.core.services.resolver import match_project, parse_project, resolve_ref
from gitfs.core.tree.path_tree import PathTree
from gitfs.domain.config import get_default_config, validate_config
from gitfs.domain.context import RequestContext
from gitfs.domain.errors import ParseError
from gitfs.infra.network import GitHubClient

logger = logging.getLogger(__name__)


def open_filesystem(
        project: str,
        *,
        session: Optional[requests.Session] = None,
        local_path: Optional[str] = None,
        prefetch: Optional[bool] = None,
        glob_patterns: Optional[Iterable[str]] = None,
        ctx: Optional[RequestContext] = None,
        registry: Optional[BinaryRegistry] = None,
        config: Optional[Dict[str, Any]] = None,
) -> PathTree:
    """
    Open a read-only filesystem over a project.

    Args:
        project: Identifier 'host/owner/repo(/subpath)?(@ref)?'.
        session: requests Session used for every remote call (auth, proxies,
            test doubles).
        local_path: Serve from the git checkout enclosing this path instead.
        prefetch: Download every file during construction. Defaults to the
            'prefetch' config value.
        glob_patterns: Include patterns; empty means everything.
        ctx: Context bounding construction (not later reads).
        registry: Packed filesystems to consult before going remote.
        config: Settings dict (see gitfs.domain.config). Defaults are used
            when omitted.

    Raises:
        ParseError: Malformed identifier, bad glob pattern or unsupported host.
        NotFoundError: Unknown repository, ref, or unmatched local checkout.
        NetworkError: A remote call failed (metadata-first mode).
        AggregatedFailureError: A branch of the eager walk failed.
    """
    cfg, warnings = validate_config(config if config is not None else get_default_config())
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    ctx = ctx or RequestContext.background()
    patterns = list(glob_patterns) if glob_patterns is not None else cfg["glob_patterns"]
    glob = GlobPatterns(patterns)
    if prefetch is None:
        prefetch = cfg["prefetch"]

    start = time.monotonic()

    if local_path:
        tree = open_local(project, local_path, glob)
        _log_loaded(project, tree, start)
        return tree

    packed = registry.get(project) if registry is not None else None
    if packed is not None:
        logger.info(f"Using packed filesystem for {project}")
        return packed

    if not match_project(project):
        raise ParseError(f"project type not supported: {project}")

    ref = parse_project(project)
    api_base = cfg["api_hosts"].get(ref.host)
    if not api_base:
        raise ParseError(f"project type not supported: host {ref.host!r} is not configured")

    client = GitHubClient(
        session=session,
        api_base=api_base,
        token=cfg["token"] or None,
        timeout=cfg["timeout"],
    )
    ref = resolve_ref(ref, client, ctx)

    if prefetch:
        tree = EagerTreeBuilder(client, ref, glob, max_workers=cfg["max_workers"]).build(ctx)
    else:
        tree = MetadataTreeBuilder(client, ref, glob).build(ctx)

    _log_loaded(project, tree, start)
    return tree


def _log_loaded(project: str, tree: PathTree, start: float) -> None:
    elapsed = time.monotonic() - start
    logger.info(f"Loaded project {project!r} with {tree.file_count()} files in {elapsed:.1f}s")
