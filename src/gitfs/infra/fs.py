from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Resolves the per-user data directory that holds the configuration file
and the optional log file.
"""

import os
from typing import Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "gitfs"
UNIX_APP_DIR_NAME = ".gitfs"
ENV_DATA_DIR = "GITFS_HOME"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir(create: bool = True) -> str:
    """
    Resolve the directory for persistent application data.

    Standards:
    - $GITFS_HOME when set
    - Windows: %LOCALAPPDATA%/gitfs
    - Linux/Mac: ~/.gitfs

    Args:
        create: Create the directory when missing.

    Returns:
        str: Absolute path to the application data directory.
    """
    path: Optional[str] = os.environ.get(ENV_DATA_DIR) or None

    if not path and os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    if create:
        try:
            os.makedirs(path, exist_ok=True)
        except OSError:
            pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Expand ~ and environment variables and make `path` absolute.

    Reverts to fallback if the input is empty.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))
