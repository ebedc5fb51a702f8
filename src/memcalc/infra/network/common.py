from __future__ import annotations

import hashlib

from memcalc.domain.constants import APP_VERSION

USER_AGENT = f"memcalc/{APP_VERSION}"
DEFAULT_TIMEOUT = 10
CHUNK_SIZE = 8192


def calculate_sha256(file_path: str) -> str:
    """Compute the SHA-256 hex digest of a local file."""
    sha256_hash = hashlib.sha256()
    with open(file_path, "rb") as f:
        for byte_block in iter(lambda: f.read(4096), b""):
            sha256_hash.update(byte_block)
    return sha256_hash.hexdigest()


def uri_digest(uri: str) -> str:
    """Stable cache key for a remote artifact location."""
    return hashlib.sha256(uri.encode("utf-8")).hexdigest()
