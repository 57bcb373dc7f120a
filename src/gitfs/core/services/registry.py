from __future__ import annotations

"""
Packed Filesystem Registry.

Holds filesystems decoded from packed blobs, keyed by the exact project
identifier they were packed for (ref included). The engine consults a
registry before going to the network, so a registered project is served
entirely from memory.
"""

import json
import logging
import threading
from typing import Any, Dict, List, Optional

from gitfs.core.services import codec
from gitfs.core.tree.path_tree import PathTree
from gitfs.domain.errors import ParseError, RegistrationError

logger = logging.getLogger(__name__)


class BinaryRegistry:
    """Thread-safe mapping of project identifier to decoded PathTree."""

    def __init__(self) -> None:
        self._data: Dict[str, PathTree] = {}
        self._lock = threading.Lock()

    def register(self, project: str, version: int, encoded: str) -> PathTree:
        """
        Decode and register a packed filesystem.

        Raises:
            RegistrationError: `project` is already registered.
            UnsupportedVersionError: The pack is from a newer version.
            ParseError: The pack is corrupt.
        """
        with self._lock:
            if project in self._data:
                raise RegistrationError(f"Project {project} registered multiple times")

        tree = codec.decode(encoded, version)

        with self._lock:
            if project in self._data:
                raise RegistrationError(f"Project {project} registered multiple times")
            self._data[project] = tree
        logger.debug(f"Registered packed filesystem for {project} ({tree.file_count()} files)")
        return tree

    def contains(self, project: str) -> bool:
        with self._lock:
            return project in self._data

    def get(self, project: str) -> Optional[PathTree]:
        with self._lock:
            return self._data.get(project)

    def projects(self) -> List[str]:
        with self._lock:
            return sorted(self._data)

    def load_pack(self, path: str) -> List[str]:
        """
        Register every record of a pack file written by `gitfs --out`.

        A pack file is JSON: a single {"project", "version", "data"} record
        or a list of them.

        Returns:
            List[str]: Registered project identifiers.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload: Any = json.load(f)
        except ValueError as e:
            raise ParseError(f"pack file {path} is not valid JSON: {e}") from e

        records = payload if isinstance(payload, list) else [payload]
        registered: List[str] = []
        for record in records:
            if not isinstance(record, dict) or "project" not in record or "data" not in record:
                raise ParseError(f"pack file {path} has a malformed record")
            project = str(record["project"])
            try:
                version = int(record.get("version", codec.ENCODE_VERSION))
            except (TypeError, ValueError) as e:
                raise ParseError(f"pack file {path} has an invalid version for {project}") from e
            self.register(project, version, record["data"])
            registered.append(project)

        logger.info(f"Loaded {len(registered)} packed project(s) from {path}")
        return registered


def make_pack_record(project: str, encoded: str, version: int = codec.ENCODE_VERSION) -> Dict[str, Any]:
    return {"project": project, "version": version, "data": encoded}
