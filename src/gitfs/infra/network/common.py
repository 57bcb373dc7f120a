from __future__ import annotations

import base64
import binascii

from gitfs.domain.errors import UnsupportedEncodingError

USER_AGENT = "gitfs-python/0.1.0"
DEFAULT_TIMEOUT = 10
GITHUB_API_URL = "https://api.github.com"

def decode_transfer_content(encoding: str, content: str) -> bytes:
    """Decode blob content according to the transfer encoding the API reported."""
    if encoding == "base64":
        try:
            # The API wraps base64 payloads at 60 columns.
            return base64.b64decode(content.replace("\n", ""), validate=True)
        except (binascii.Error, ValueError) as e:
            raise UnsupportedEncodingError(f"malformed base64 content: {e}") from e
    if encoding in ("utf-8", "utf8"):
        return content.encode("utf-8")
    raise UnsupportedEncodingError(f"unexpected encoding: {encoding}")
