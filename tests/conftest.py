from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. An in-memory fake of the GitHub v3 REST routes used by the client,
   served through a requests-compatible session object.
"""

import base64
import hashlib
import os
import sys
import threading
from typing import Any, Dict, List, Optional, Set

import pytest
import requests

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

API = "https://api.github.com"
RAW = "https://raw.example.com"


# -----------------------------------------------------------------------------
# Fake Remote
# -----------------------------------------------------------------------------
class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Any = None, content: bytes = b"") -> None:
        self.status_code = status_code
        self._payload = payload
        self.content = content

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


def blob_sha(path: str) -> str:
    return hashlib.sha1(path.encode("utf-8")).hexdigest()


class FakeGitHubSession:
    """
    Serves an in-memory repository through the GitHub routes.

    Attributes:
        files: Repository path -> content.
        refs: Refs the remote knows ('heads/main', 'tags/v1.0.0').
        calls: Every URL requested, in order.
        failures: URL substring -> HTTP status to answer with instead.
    """

    def __init__(
            self,
            files: Dict[str, bytes],
            owner: str = "owner",
            repo: str = "repo",
            default_branch: str = "main",
            refs: Optional[Set[str]] = None,
    ) -> None:
        self.files = dict(files)
        self.owner = owner
        self.repo = repo
        self.default_branch = default_branch
        self.refs = refs if refs is not None else {f"heads/{default_branch}", "tags/v1.0.0"}
        self.truncated = False
        self.calls: List[str] = []
        self.failures: Dict[str, int] = {}
        self._lock = threading.Lock()

    # --- structure helpers ---

    def _dirs(self) -> Set[str]:
        dirs: Set[str] = set()
        for path in self.files:
            parts = path.split("/")[:-1]
            for i in range(1, len(parts) + 1):
                dirs.add("/".join(parts[:i]))
        return dirs

    def _children(self, directory: str) -> List[str]:
        prefix = directory + "/" if directory else ""
        names = set()
        for path in list(self.files) + list(self._dirs()):
            if path.startswith(prefix) and path != directory:
                names.add(prefix + path[len(prefix):].split("/")[0])
        return sorted(names)

    def count(self, fragment: str) -> int:
        with self._lock:
            return sum(1 for url in self.calls if fragment in url)

    # --- requests.Session API ---

    def get(self, url: str, params: Optional[Dict[str, str]] = None,
            headers: Optional[Dict[str, str]] = None, timeout: Any = None) -> FakeResponse:
        with self._lock:
            self.calls.append(url)
        for fragment, status in self.failures.items():
            if fragment in url:
                return FakeResponse(status)

        params = params or {}
        if url.startswith(RAW + "/"):
            path = url[len(RAW) + 1:].split("/", 3)[-1]
            if path not in self.files:
                return FakeResponse(404)
            return FakeResponse(200, content=self.files[path])

        base = f"{API}/repos/{self.owner}/{self.repo}"
        if not url.startswith(base):
            return FakeResponse(404)
        route = url[len(base):]

        if route == "":
            return FakeResponse(200, {"default_branch": self.default_branch})
        if route.startswith("/git/trees/"):
            return self._tree(route[len("/git/trees/"):])
        if route.startswith("/git/blobs/"):
            return self._blob(route[len("/git/blobs/"):])
        if route.startswith("/contents"):
            return self._contents(route[len("/contents"):].strip("/"), params.get("ref", ""))
        return FakeResponse(404)

    def _tree(self, ref: str) -> FakeResponse:
        if ref not in self.refs:
            return FakeResponse(404)
        entries = [{"path": d, "type": "tree", "size": 0, "sha": blob_sha(d + "/")} for d in self._dirs()]
        entries += [
            {"path": p, "type": "blob", "size": len(c), "sha": blob_sha(p)}
            for p, c in self.files.items()
        ]
        entries.sort(key=lambda e: e["path"])
        return FakeResponse(200, {"tree": entries, "truncated": self.truncated})

    def _blob(self, sha: str) -> FakeResponse:
        for path, content in self.files.items():
            if blob_sha(path) == sha:
                encoded = base64.b64encode(content).decode("ascii")
                # The API wraps base64 payloads.
                wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60))
                return FakeResponse(200, {"encoding": "base64", "content": wrapped})
        return FakeResponse(404)

    def _contents(self, path: str, ref: str) -> FakeResponse:
        if ref and not ({f"heads/{ref}", f"tags/{ref}"} & self.refs):
            return FakeResponse(404)
        ref = ref or self.default_branch
        if path in self.files:
            content = self.files[path]
            return FakeResponse(200, {
                "path": path,
                "type": "file",
                "size": len(content),
                "encoding": "base64",
                "content": base64.b64encode(content).decode("ascii"),
                "download_url": f"{RAW}/{self.owner}/{self.repo}/{ref}/{path}",
            })
        if path and path not in self._dirs():
            return FakeResponse(404)

        records = []
        for child in self._children(path):
            if child in self.files:
                records.append({
                    "path": child,
                    "type": "file",
                    "size": len(self.files[child]),
                    "download_url": f"{RAW}/{self.owner}/{self.repo}/{ref}/{child}",
                })
            else:
                records.append({"path": child, "type": "dir", "size": 0, "download_url": None})
        return FakeResponse(200, records)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
SAMPLE_FILES: Dict[str, bytes] = {
    "README.md": b"# Sample\n",
    "setup.py": b"print('setup')\n",
    "docs/index.md": b"Index\n",
    "docs/guide/intro.md": b"Intro\nSecond line\n",
    "docs/guide/usage.txt": b"usage",
    "src/pkg/__init__.py": b"",
    "src/pkg/core.py": b"def f():\n    return 1\n",
}


@pytest.fixture
def sample_files() -> Dict[str, bytes]:
    return dict(SAMPLE_FILES)


@pytest.fixture
def fake_session(sample_files: Dict[str, bytes]) -> FakeGitHubSession:
    """A fake remote serving SAMPLE_FILES as github.com/owner/repo."""
    return FakeGitHubSession(sample_files)


@pytest.fixture
def make_tree():
    """Factory building a PathTree from {path: content}; paths ending in '/' are empty dirs."""
    from gitfs.core.tree.path_tree import PathTree

    def _const(data: bytes):
        return lambda ctx: data

    def build(entries: Dict[str, bytes]) -> PathTree:
        tree = PathTree()
        tree.add_directory("")
        for path, content in entries.items():
            if path.endswith("/"):
                tree.add_directory(path)
            else:
                tree.add_file(path, len(content), _const(content))
        return tree

    return build
