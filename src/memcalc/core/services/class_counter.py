from __future__ import annotations

"""
Loaded Class Counting Service.

Estimates how many classes an application will load by walking its
directory tree and every package archive inside it, including archives
nested in other archives (a web archive bundling library jars).

Nested archives are extracted one at a time into a scratch directory that
is removed as soon as the nested count is known, so scratch space grows
with the nesting depth and never with the number of archives. Counting is
all-or-nothing: any unreadable archive aborts the whole count.
"""

import logging
import os
import shutil
import tempfile
import zipfile
import zlib
from enum import Enum
from typing import Set

from memcalc.domain.constants import (
    ARCHIVE_SUFFIXES,
    CLASS_UNIT_SUFFIXES,
    EXTRACTED_ARCHIVE_NAME,
)
from memcalc.domain.errors import ArchiveOpenError, ExtractionError

logger = logging.getLogger(__name__)

# Failures raised by zipfile while decompressing a single member
_MEMBER_READ_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, RuntimeError, EOFError)


class EntryKind(Enum):
    """Classification of a file or archive entry by its name."""
    CLASS_UNIT = "class-unit"
    PACKAGE_ARCHIVE = "package-archive"
    OTHER = "other"


def classify_entry(name: str) -> EntryKind:
    """
    Classify a file name or archive entry name by suffix.

    Args:
        name: Base name or path-like entry name.

    Returns:
        EntryKind: The entry classification.
    """
    if name.endswith(CLASS_UNIT_SUFFIXES):
        return EntryKind.CLASS_UNIT
    if name.endswith(ARCHIVE_SUFFIXES):
        return EntryKind.PACKAGE_ARCHIVE
    return EntryKind.OTHER

# ==============================================================================
# PUBLIC API
# ==============================================================================

def count_classes(root_directory: str) -> int:
    """
    Count the class-like units reachable from an application root.

    Args:
        root_directory: Existing, readable application directory.

    Returns:
        int: Number of '.class' and '.groovy' units, on disk and inside
             '.war'/'.jar' archives at any nesting depth.

    Raises:
        NotADirectoryError: If root_directory is not a directory.
        ArchiveOpenError: If any archive cannot be opened.
        ExtractionError: If a nested archive cannot be extracted.
    """
    root = os.path.abspath(root_directory)
    if not os.path.isdir(root):
        raise NotADirectoryError(f"Application root is not a directory: {root}")

    logger.debug(f"Counting loadable classes under {root}")
    count = _count_dir_classes(root, set())
    logger.info(f"Found {count} loadable classes in {root}")
    return count


def count_archive_classes(archive_path: str) -> int:
    """
    Count the class-like units inside a single package archive.

    Args:
        archive_path: Path of a '.war'/'.jar' (ZIP) archive.

    Returns:
        int: Class-like units in the archive and its nested archives.
    """
    return _count_archive(archive_path, archive_path)

# ==============================================================================
# TRAVERSAL
# ==============================================================================

def _count_dir_classes(directory: str, ancestors: Set[str]) -> int:
    """
    Depth-first directory walk.

    Symlinked directories are counted like their targets; only a link back
    to a directory on the current path (a cycle) is skipped.
    """
    real = os.path.realpath(directory)
    if real in ancestors:
        logger.debug(f"Skipping symlink cycle at {directory}")
        return 0

    with os.scandir(directory) as it:
        children = sorted(it, key=lambda e: e.name)

    ancestors.add(real)
    try:
        count = 0
        for child in children:
            if child.is_dir():
                count += _count_dir_classes(child.path, ancestors)
                continue

            if not child.is_file():
                continue

            kind = classify_entry(child.name)
            if kind is EntryKind.CLASS_UNIT:
                count += 1
            elif kind is EntryKind.PACKAGE_ARCHIVE:
                count += _count_archive(child.path, child.path)
    finally:
        ancestors.discard(real)

    return count


def _count_archive(archive_path: str, location: str) -> int:
    """Count one archive, recursing into nested archives."""
    try:
        zip_file = zipfile.ZipFile(archive_path)
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveOpenError("Cannot open package archive", location) from e

    count = 0
    with zip_file:
        for info in zip_file.infolist():
            if info.is_dir():
                continue

            kind = classify_entry(info.filename)
            if kind is EntryKind.CLASS_UNIT:
                count += 1
            elif kind is EntryKind.PACKAGE_ARCHIVE:
                count += _count_nested_archive(zip_file, info, f"{location}!/{info.filename}")

    logger.debug(f"{location}: {count} classes")
    return count


def _count_nested_archive(zip_file: zipfile.ZipFile, info: zipfile.ZipInfo, location: str) -> int:
    """Extract a nested archive to scratch space and count it."""
    with tempfile.TemporaryDirectory(prefix="memcalc-") as scratch:
        target = os.path.join(scratch, EXTRACTED_ARCHIVE_NAME)
        try:
            with zip_file.open(info) as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
        except (OSError,) + _MEMBER_READ_ERRORS as e:
            raise ExtractionError("Cannot extract nested archive", location) from e

        return _count_archive(target, location)
