from __future__ import annotations

"""
Unit tests for the Packed Filesystem Registry.
"""

import json
from pathlib import Path

import pytest

from gitfs.core.services import codec
from gitfs.core.services.registry import BinaryRegistry, make_pack_record
from gitfs.domain.errors import ParseError, RegistrationError, UnsupportedVersionError

PROJECT = "github.com/owner/repo@v1.0.0"


@pytest.fixture
def encoded(make_tree) -> str:
    return codec.encode(make_tree({"README.md": b"packed"}))


def test_register_and_get(encoded: str) -> None:
    """TC-01: Registered projects are served from memory."""
    registry = BinaryRegistry()
    registry.register(PROJECT, 1, encoded)
    assert registry.contains(PROJECT)
    tree = registry.get(PROJECT)
    with tree.open("README.md") as f:
        assert f.read() == b"packed"


def test_lookup_is_exact(encoded: str) -> None:
    """TC-02: The ref is part of the key."""
    registry = BinaryRegistry()
    registry.register(PROJECT, 1, encoded)
    assert not registry.contains("github.com/owner/repo")
    assert registry.get("github.com/owner/repo@v2.0.0") is None


def test_duplicate_registration_fails(encoded: str) -> None:
    """TC-03: A project cannot be registered twice."""
    registry = BinaryRegistry()
    registry.register(PROJECT, 1, encoded)
    with pytest.raises(RegistrationError):
        registry.register(PROJECT, 1, encoded)


def test_future_version_fails(encoded: str) -> None:
    """TC-04: Registration of a newer pack format fails and registers nothing."""
    registry = BinaryRegistry()
    with pytest.raises(UnsupportedVersionError):
        registry.register(PROJECT, 99, encoded)
    assert registry.projects() == []


def test_registries_are_independent(encoded: str) -> None:
    """TC-05: Registries are plain objects without shared state."""
    a, b = BinaryRegistry(), BinaryRegistry()
    a.register(PROJECT, 1, encoded)
    assert not b.contains(PROJECT)


def test_load_pack_file(tmp_path: Path, encoded: str) -> None:
    """TC-06: Pack files hold one record or a list of records."""
    single = tmp_path / "single.json"
    single.write_text(json.dumps(make_pack_record(PROJECT, encoded)), encoding="utf-8")
    many = tmp_path / "many.json"
    many.write_text(json.dumps([
        make_pack_record("github.com/a/b", encoded),
        make_pack_record("github.com/c/d", encoded),
    ]), encoding="utf-8")

    registry = BinaryRegistry()
    assert registry.load_pack(str(single)) == [PROJECT]
    assert registry.load_pack(str(many)) == ["github.com/a/b", "github.com/c/d"]
    assert registry.projects() == sorted([PROJECT, "github.com/a/b", "github.com/c/d"])


def test_load_pack_rejects_malformed(tmp_path: Path) -> None:
    """TC-07: Invalid JSON and records without data raise ParseError."""
    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{", encoding="utf-8")
    no_data = tmp_path / "nodata.json"
    no_data.write_text(json.dumps({"project": PROJECT}), encoding="utf-8")

    registry = BinaryRegistry()
    with pytest.raises(ParseError):
        registry.load_pack(str(bad_json))
    with pytest.raises(ParseError):
        registry.load_pack(str(no_data))


@pytest.mark.parametrize("version", ["one", None, [1]])
def test_load_pack_rejects_invalid_version(tmp_path: Path, encoded: str, version) -> None:
    """TC-08: A non-numeric version is a ParseError and registers nothing."""
    pack = tmp_path / "bad_version.json"
    pack.write_text(json.dumps({"project": PROJECT, "version": version, "data": encoded}), encoding="utf-8")

    registry = BinaryRegistry()
    with pytest.raises(ParseError, match="invalid version"):
        registry.load_pack(str(pack))
    assert registry.projects() == []
