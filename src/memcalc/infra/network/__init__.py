from __future__ import annotations

"""
Network Communication Infrastructure.

Facade over the calculator repository client: index lookup, artifact
streaming and integrity helpers.
"""

from memcalc.infra.network.common import calculate_sha256, uri_digest
from memcalc.infra.network.repository_client import (
    download_binary_stream,
    fetch_repository_index,
    is_remote,
    local_path,
)

__all__ = [
    "calculate_sha256",
    "uri_digest",
    "download_binary_stream",
    "fetch_repository_index",
    "is_remote",
    "local_path",
]
