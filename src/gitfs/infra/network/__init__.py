from __future__ import annotations

"""
Network Communication Infrastructure.

Exposes the remote repository client and the transfer-decoding helpers
used by the tree builders.
"""

from gitfs.infra.network.common import (
    DEFAULT_TIMEOUT,
    GITHUB_API_URL,
    USER_AGENT,
    decode_transfer_content,
)
from gitfs.infra.network.github_client import GitHubClient

__all__ = [
    "GitHubClient",
    "decode_transfer_content",
    "DEFAULT_TIMEOUT",
    "GITHUB_API_URL",
    "USER_AGENT",
]
