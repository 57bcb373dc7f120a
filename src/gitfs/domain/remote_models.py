from __future__ import annotations

"""
Remote Repository Data Models.

Data Transfer Objects describing what the git-hosting REST API returns:
recursive tree listings, blobs and shallow directory contents.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

# -----------------------------------------------------------------------------
# TREE LISTING (get-recursive-tree)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TreeEntry:
    """
    One entry of a recursive git tree listing.

    Attributes:
        path: Path from the repository root.
        type: "tree" for directories, "blob" for files.
        size: Blob size in bytes (0 for trees).
        sha: Git object id.
    """
    path: str
    type: str
    size: int
    sha: str

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> TreeEntry:
        return cls(
            path=data.get("path", ""),
            type=data.get("type", ""),
            size=int(data.get("size") or 0),
            sha=data.get("sha", ""),
        )


@dataclass(frozen=True)
class GitTree:
    entries: List[TreeEntry]
    truncated: bool = False


# -----------------------------------------------------------------------------
# BLOB (get-blob)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Blob:
    encoding: str
    content: str


# -----------------------------------------------------------------------------
# DIRECTORY CONTENTS (get-directory-contents)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ContentEntry:
    """
    One record of a shallow directory listing, or a single file record.

    Attributes:
        path: Path from the repository root.
        type: "dir" or "file" (other types such as symlinks are ignored).
        size: File size in bytes.
        download_url: Direct raw-content URL, None for directories.
        encoding: Transfer encoding of `content` on single-file records.
        content: Inline content on single-file records.
    """
    path: str
    type: str
    size: int
    download_url: Optional[str] = None
    encoding: Optional[str] = None
    content: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> ContentEntry:
        return cls(
            path=data.get("path", ""),
            type=data.get("type", ""),
            size=int(data.get("size") or 0),
            download_url=data.get("download_url"),
            encoding=data.get("encoding"),
            content=data.get("content"),
        )


@dataclass(frozen=True)
class DirectoryContents:
    """
    Result of a get-directory-contents call.

    Exactly one of `entries` (the path is a directory) or `file` (the path
    is a single file) is meaningful.
    """
    entries: List[ContentEntry]
    file: Optional[ContentEntry] = None
