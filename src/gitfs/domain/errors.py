from __future__ import annotations

"""
Domain Error Hierarchy.

Defines the exception types raised while resolving projects, building
trees and serving file content. Every error derives from GitFSError so
that callers can trap the whole family with a single clause.
"""

from typing import List, Optional

# -----------------------------------------------------------------------------
# BASE
# -----------------------------------------------------------------------------

class GitFSError(Exception):
    """Root of all gitfs failures."""


# -----------------------------------------------------------------------------
# CONSTRUCTION ERRORS
# -----------------------------------------------------------------------------

class ParseError(GitFSError, ValueError):
    """Malformed project identifier, unsupported host or invalid ref prefix."""


class PathConflictError(GitFSError):
    """A path was re-inserted into a tree as a different kind of node."""

    def __init__(self, path: str, existing: str, requested: str) -> None:
        super().__init__(
            f"trying to override {existing} on path {path!r} with a {requested}"
        )
        self.path = path
        self.existing = existing
        self.requested = requested


class RegistrationError(GitFSError):
    """A packed filesystem could not be registered."""


class UnsupportedVersionError(GitFSError):
    """
    A serialized tree was produced by an unknown (future) encoder.

    Raised loudly instead of guessing at the layout of the payload.
    """

    def __init__(self, version: int, supported: int) -> None:
        super().__init__(
            f"Packed filesystem is from future version {version}. "
            f"This gitfs supports versions up to {supported}; please upgrade."
        )
        self.version = version
        self.supported = supported


# -----------------------------------------------------------------------------
# ACCESS ERRORS
# -----------------------------------------------------------------------------

class NotFoundError(GitFSError, FileNotFoundError):
    """Missing path on open, unknown repository or unmatched local checkout."""


class InvalidRequestError(GitFSError):
    """A directory-implying path resolved to a file."""


# -----------------------------------------------------------------------------
# REMOTE ERRORS
# -----------------------------------------------------------------------------

class NetworkError(GitFSError):
    """
    A remote call failed.

    Attributes:
        operation: Remote operation that was being performed.
        path: Repository path, object id or URL the call targeted.
        status_code: HTTP status when the server answered, else None.
    """

    def __init__(
            self,
            operation: str,
            path: str,
            message: str,
            status_code: Optional[int] = None
    ) -> None:
        super().__init__(f"{operation} {path!r}: {message}")
        self.operation = operation
        self.path = path
        self.status_code = status_code


class UnsupportedEncodingError(GitFSError):
    """The remote reported a blob transfer encoding we cannot decode."""


class AggregatedFailureError(GitFSError):
    """
    One or more concurrent branches of an eager build failed.

    Only the first recorded error is surfaced in the message and as the
    exception cause. The remaining ones are kept in `errors` for diagnostics.
    """

    def __init__(self, errors: List[BaseException]) -> None:
        first = errors[0]
        super().__init__(str(first))
        self.first = first
        self.errors = list(errors)


# -----------------------------------------------------------------------------
# CANCELLATION
# -----------------------------------------------------------------------------

class ContextCancelledError(GitFSError):
    """The request context was cancelled."""


class DeadlineExceededError(ContextCancelledError):
    """The request context deadline passed."""
