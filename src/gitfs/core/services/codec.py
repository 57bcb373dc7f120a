from __future__ import annotations

"""
Packed Filesystem Codec.

Serializes a whole filesystem (structure and every file's content) into a
single text blob, and rebuilds a PathTree from it. The payload layout is
versioned: decode() accepts every version up to ENCODE_VERSION and refuses
newer ones instead of guessing.

Version 1 layout: base64 of the UTF-8 JSON document
    {"dirs": ["a", "a/b"], "files": {"a/b/c.txt": "<base64 content>"}}
"""

import base64
import binascii
import json
import logging
from typing import Any, Callable, Dict, Optional

from gitfs.core.services.walker import FileSystem, walk
from gitfs.core.tree.path_tree import PathTree
from gitfs.domain.context import RequestContext
from gitfs.domain.errors import ParseError, UnsupportedVersionError
from gitfs.domain.tree_models import Loader

logger = logging.getLogger(__name__)

ENCODE_VERSION = 1


# -----------------------------------------------------------------------------
# ENCODING
# -----------------------------------------------------------------------------

def encode(fs: FileSystem, ctx: Optional[RequestContext] = None) -> str:
    """
    Walk `fs`, download every file and pack it at ENCODE_VERSION.

    Raises:
        GitFSError: Walking or loading a file failed.
    """
    dirs = []
    files: Dict[str, str] = {}
    for path, info in walk(fs, "", ctx):
        if path == "":
            continue
        if info.is_dir:
            dirs.append(path)
            continue
        with fs.open(path, ctx) as f:
            content = f.read()
        files[path] = base64.b64encode(content).decode("ascii")

    storage = {"dirs": dirs, "files": files}
    raw = json.dumps(storage, sort_keys=True, separators=(",", ":")).encode("utf-8")
    logger.debug(f"Encoded {len(files)} files and {len(dirs)} directories ({len(raw)} bytes)")
    return base64.b64encode(raw).decode("ascii")


# -----------------------------------------------------------------------------
# DECODING
# -----------------------------------------------------------------------------

def _static_loader(content: bytes) -> Loader:
    def load(ctx: RequestContext) -> bytes:
        ctx.raise_if_cancelled()
        return content

    return load


def _decode_v1(encoded: str) -> PathTree:
    try:
        raw = base64.b64decode(encoded, validate=True)
        storage: Any = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        raise ParseError(f"decoding packed filesystem: {e}") from e

    if not isinstance(storage, dict):
        raise ParseError("decoding packed filesystem: payload is not an object")

    tree = PathTree()
    tree.add_directory("")
    for path in storage.get("dirs", []):
        tree.add_directory(path)
    for path, data in storage.get("files", {}).items():
        try:
            content = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ParseError(f"decoding content of {path!r}: {e}") from e
        tree.add_file(path, len(content), _static_loader(content))
    return tree


_DECODERS: Dict[int, Callable[[str], PathTree]] = {
    1: _decode_v1,
}


def decode(encoded: str, version: int = ENCODE_VERSION) -> PathTree:
    """
    Rebuild a filesystem from a packed blob.

    Raises:
        UnsupportedVersionError: `version` is newer than this library knows.
        ParseError: The payload is corrupt or `version` is not a known one.
    """
    decoder = _DECODERS.get(version)
    if decoder is None:
        if version > ENCODE_VERSION:
            raise UnsupportedVersionError(version, ENCODE_VERSION)
        raise ParseError(f"unknown packed filesystem version {version}")
    return decoder(encoded)
