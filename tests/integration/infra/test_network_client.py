from __future__ import annotations

"""
Integration tests for Network Infrastructure.

Utilizes mocking to verify repository index retrieval and binary streaming
without making real network calls.
"""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from memcalc.domain.errors import CalculatorResolutionError
from memcalc.infra.network import (
    calculate_sha256,
    download_binary_stream,
    fetch_repository_index,
    is_remote,
    local_path,
)

# -----------------------------------------------------------------------------
# REPOSITORY INDEX TESTS
# -----------------------------------------------------------------------------

def test_fetch_remote_index() -> None:
    """TC-01: Verify the index is read from <root>/index.json over HTTP."""
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.json.return_value = {"3.6.1": "https://host/mc-3.6.1.tar.gz"}

    with patch("requests.get", return_value=mock_response) as mock_get:
        index = fetch_repository_index("https://host/memory-calculator/linux/x86_64/")

    assert index == {"3.6.1": "https://host/mc-3.6.1.tar.gz"}
    args, kwargs = mock_get.call_args
    assert args[0] == "https://host/memory-calculator/linux/x86_64/index.json"
    assert "User-Agent" in kwargs["headers"]


def test_fetch_remote_index_failure() -> None:
    """TC-02: Transport errors become CalculatorResolutionError."""
    with patch("requests.get", side_effect=requests.exceptions.ConnectionError("refused")):
        with pytest.raises(CalculatorResolutionError, match="unreachable"):
            fetch_repository_index("https://host/repo")


def test_fetch_local_index(tmp_path: Path) -> None:
    """TC-03: A local directory (or file:// URI) serves the index from disk."""
    (tmp_path / "index.json").write_text(json.dumps({"2.0.2": "/opt/mc"}), encoding="utf-8")

    assert fetch_repository_index(str(tmp_path)) == {"2.0.2": "/opt/mc"}
    assert fetch_repository_index(f"file://{tmp_path}") == {"2.0.2": "/opt/mc"}


def test_fetch_malformed_index(tmp_path: Path) -> None:
    """TC-04: Non-mapping indexes are rejected."""
    (tmp_path / "index.json").write_text("[\"3.0.0\"]", encoding="utf-8")

    with pytest.raises(CalculatorResolutionError, match="Malformed"):
        fetch_repository_index(str(tmp_path))


def test_location_helpers() -> None:
    """TC-05: Remote detection and file:// stripping."""
    assert is_remote("https://host/x")
    assert not is_remote("/srv/repo")
    assert local_path("file:///srv/repo") == "/srv/repo"
    assert local_path("/srv/repo") == "/srv/repo"

# -----------------------------------------------------------------------------
# DOWNLOAD & INTEGRITY TESTS
# -----------------------------------------------------------------------------

def test_download_binary_stream_success(tmp_path: Path) -> None:
    """TC-06: Verify buffered download of binary assets."""
    dest_path = tmp_path / "mc.tar.gz"
    mock_content = [b"chunk1", b"chunk2", b"chunk3"]

    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.headers = {"content-length": "18"}
    mock_response.iter_content.return_value = iter(mock_content)
    mock_response.__enter__.return_value = mock_response

    progress_calls = []

    def callback(p: float) -> None:
        """Track progress updates."""
        progress_calls.append(p)

    with patch("requests.get", return_value=mock_response):
        success, msg = download_binary_stream("https://host/mc.tar.gz", str(dest_path), callback)

    assert success is True
    assert dest_path.read_bytes() == b"chunk1chunk2chunk3"
    assert progress_calls[-1] == 100.0


def test_download_binary_stream_http_error(tmp_path: Path) -> None:
    """TC-07: HTTP errors are reported as (False, message)."""
    mock_response = MagicMock()
    mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("404 Not Found")
    mock_response.__enter__.return_value = mock_response

    with patch("requests.get", return_value=mock_response):
        success, msg = download_binary_stream("https://host/missing", str(tmp_path / "x"))

    assert success is False
    assert "404" in msg


def test_sha256_verification(tmp_path: Path) -> None:
    """TC-08: Verify local file integrity calculation."""
    f = tmp_path / "integrity.bin"
    f.write_bytes(b"data_to_hash")

    expected = "54e9a3fff273ffed2552165e6fb679a4cc3e0c3badb22dafd62c7dac289d2ef4"

    assert calculate_sha256(str(f)) == expected
