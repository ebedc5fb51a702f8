from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared configuration fixtures.
3. Builders for application trees and (nested) package archives.
"""

import io
import os
import sys
import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, Union

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

ArchiveContent = Dict[str, Union[bytes, str]]


# -----------------------------------------------------------------------------
# Archive Builders
# -----------------------------------------------------------------------------
def zip_bytes(entries: ArchiveContent) -> bytes:
    """Build a ZIP archive in memory; use the result as a nested entry."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def make_archive() -> Callable[[Path, ArchiveContent], Path]:
    """Return a helper writing a ZIP archive with the given entries to disk."""

    def _make(path: Path, entries: ArchiveContent) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(zip_bytes(entries))
        return path

    return _make


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """
    Return a valid, complete sizing configuration for testing.

    Mirrors the keys defined in 'memcalc.domain.config'.
    """
    return {
        "version": "3.+",
        "repository_root": None,
        "class_count": None,
        "stack_threads": 250,
        "vm_options": None,
    }


@pytest.fixture
def app_root(tmp_path: Path) -> Path:
    """Create an empty application directory."""
    root = tmp_path / "app"
    root.mkdir()
    return root
