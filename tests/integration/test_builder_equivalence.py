from __future__ import annotations

"""
Integration tests across construction strategies.

The metadata-first builder, the eager builder, a local checkout and a
packed round trip of the same repository must all describe identical
filesystems, which diff_filesystems() confirms with an empty result.
"""

import json
from pathlib import Path

import pytest

from gitfs.core.engine import open_filesystem
from gitfs.core.services import codec
from gitfs.core.services.diff import MSG_CONTENT_DIFF, diff_filesystems
from gitfs.core.services.registry import BinaryRegistry, make_pack_record


@pytest.mark.parametrize("project", [
    "github.com/owner/repo@heads/main",
    "github.com/owner/repo/docs@v1.0.0",
    "github.com/owner/repo/src/pkg@heads/main",
])
def test_metadata_and_eager_agree(fake_session, project) -> None:
    """TC-01: Both remote strategies build the same tree."""
    lazy = open_filesystem(project, session=fake_session)
    eager = open_filesystem(project, session=fake_session, prefetch=True)

    diff = diff_filesystems(lazy, eager, a_name="metadata", b_name="eager")
    assert not diff, str(diff)


def test_glob_applies_to_both_strategies(fake_session) -> None:
    """TC-02: Filtering gives the same result in both modes."""
    patterns = ["docs/**", "docs/*/*.md", "*.py"]
    lazy = open_filesystem("github.com/owner/repo", session=fake_session, glob_patterns=patterns)
    eager = open_filesystem(
        "github.com/owner/repo", session=fake_session, glob_patterns=patterns, prefetch=True
    )
    assert not diff_filesystems(lazy, eager)


def test_local_checkout_matches_remote(tmp_path: Path, fake_session, sample_files) -> None:
    """TC-03: A checkout of the same content is indistinguishable."""
    root = tmp_path / "checkout"
    (root / ".git").mkdir(parents=True)
    (root / ".git" / "config").write_text(
        '[remote "origin"]\n\turl = git@github.com:owner/repo.git\n', encoding="utf-8"
    )
    for path, content in sample_files.items():
        target = root.joinpath(*path.split("/"))
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

    local = open_filesystem("github.com/owner/repo", local_path=str(root))
    remote = open_filesystem("github.com/owner/repo", session=fake_session)
    assert not diff_filesystems(local, remote)

    (root / "README.md").write_bytes(b"# Changed\n")
    local = open_filesystem("github.com/owner/repo", local_path=str(root))
    diff = diff_filesystems(local, remote, a_name="local", b_name="remote")
    assert [(d.path, d.diff) for d in diff.diffs] == [("README.md", MSG_CONTENT_DIFF)]
    assert "-# Changed" in diff.diffs[0].diff_info


def test_pack_round_trip(tmp_path: Path, fake_session) -> None:
    """TC-04: A packed tree served from the registry equals the remote one."""
    remote = open_filesystem("github.com/owner/repo", session=fake_session)
    pack = tmp_path / "repo.pack.json"
    pack.write_text(json.dumps(make_pack_record("github.com/owner/repo", codec.encode(remote))), encoding="utf-8")

    registry = BinaryRegistry()
    assert registry.load_pack(str(pack)) == ["github.com/owner/repo"]

    calls_before = len(fake_session.calls)
    packed = open_filesystem("github.com/owner/repo", session=fake_session, registry=registry)
    assert len(fake_session.calls) == calls_before
    assert not diff_filesystems(remote, packed)
