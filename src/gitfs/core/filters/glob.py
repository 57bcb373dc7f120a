from __future__ import annotations

"""
Glob Path Filter.

Decides which repository entries make it into a tree. Files must fully
match one of the patterns; directories only need to match a prefix of one
(so that the directories leading to matching files stay listable).
Wildcards never cross a path separator: each pattern component is matched
against the path component at the same depth.
"""

import fnmatch
import posixpath
from typing import Iterable, List, Optional

from gitfs.domain.errors import ParseError

# -----------------------------------------------------------------------------
# PATTERN VALIDATION
# -----------------------------------------------------------------------------

def check_pattern(pattern: str) -> None:
    """
    Reject malformed glob patterns (unterminated classes, dangling escapes).

    Raises:
        ParseError: The pattern is invalid.
    """
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == "\\":
            if i + 1 >= n:
                raise ParseError(f"bad glob pattern {pattern!r}: trailing escape")
            i += 2
            continue
        if c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            # A leading ']' is part of the class.
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1
            if j >= n:
                raise ParseError(f"bad glob pattern {pattern!r}: unterminated character class")
            i = j + 1
            continue
        i += 1


# -----------------------------------------------------------------------------
# MATCHING
# -----------------------------------------------------------------------------

class GlobPatterns:
    """
    A set of glob include-patterns.

    An empty set matches everything.
    """

    def __init__(self, patterns: Optional[Iterable[str]] = None) -> None:
        self._patterns: List[str] = list(patterns or [])
        for p in self._patterns:
            check_pattern(p)
        self._split = [p.split("/") for p in self._patterns]

    @property
    def patterns(self) -> List[str]:
        return list(self._patterns)

    def match(self, path: str, is_dir: bool) -> bool:
        """
        Test whether a path is included.

        Args:
            path: Slash-separated path relative to the tree root.
            is_dir: True for a prefix (directory) test, False for a full match.
        """
        if not self._patterns:
            return True
        parts = _clean(path).split("/")
        if is_dir:
            return self._match_prefix(parts)
        return self._match_full(parts)

    def _match_full(self, parts: List[str]) -> bool:
        for pattern_parts in self._split:
            if len(pattern_parts) != len(parts):
                continue
            if all(fnmatch.fnmatchcase(name, pat) for name, pat in zip(parts, pattern_parts)):
                return True
        return False

    def _match_prefix(self, parts: List[str]) -> bool:
        for pattern_parts in self._split:
            if len(pattern_parts) < len(parts):
                continue
            if all(fnmatch.fnmatchcase(name, pat) for name, pat in zip(parts, pattern_parts)):
                return True
        return False

    def __bool__(self) -> bool:
        return bool(self._patterns)

    def __repr__(self) -> str:
        return f"GlobPatterns({self._patterns!r})"


def _clean(path: str) -> str:
    cleaned = posixpath.normpath(path or ".")
    return cleaned.strip("/")
