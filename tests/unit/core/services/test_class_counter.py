from __future__ import annotations

"""
Unit tests for the Loaded Class Counting Service.

Verifies directory traversal, nested archive unwrapping, scratch space
cleanup and the all-or-nothing failure behaviour.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import zip_bytes
from memcalc.core.services.class_counter import (
    EntryKind,
    classify_entry,
    count_archive_classes,
    count_classes,
)
from memcalc.domain.errors import ArchiveOpenError, ClassCountError, ExtractionError


@pytest.fixture
def scratch_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect temporary directories so leftovers can be detected."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    return scratch


# -----------------------------------------------------------------------------
# CLASSIFICATION
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "name, expected",
    [
        ("Foo.class", EntryKind.CLASS_UNIT),
        ("scripts/build.groovy", EntryKind.CLASS_UNIT),
        ("WEB-INF/lib/spring.jar", EntryKind.PACKAGE_ARCHIVE),
        ("app.war", EntryKind.PACKAGE_ARCHIVE),
        ("Foo.java", EntryKind.OTHER),
        ("MANIFEST.MF", EntryKind.OTHER),
    ],
)
def test_classify_entry(name: str, expected: EntryKind) -> None:
    """TC-01: Verify suffix based classification."""
    assert classify_entry(name) is expected


# -----------------------------------------------------------------------------
# DIRECTORY TRAVERSAL
# -----------------------------------------------------------------------------

def test_empty_tree_counts_zero(app_root: Path) -> None:
    """TC-02: A tree without classes or archives yields 0."""
    (app_root / "static").mkdir()
    (app_root / "static" / "index.html").write_text("<html/>", encoding="utf-8")
    (app_root / "README.md").write_text("# app", encoding="utf-8")

    assert count_classes(str(app_root)) == 0


def test_counts_class_files_at_any_depth(app_root: Path) -> None:
    """TC-03: Every .class and .groovy file is counted once."""
    deep = app_root / "com" / "example" / "service"
    deep.mkdir(parents=True)
    (app_root / "Main.class").write_bytes(b"\xca\xfe\xba\xbe")
    (app_root / "com" / "Util.class").write_bytes(b"\xca\xfe\xba\xbe")
    (deep / "Service.class").write_bytes(b"\xca\xfe\xba\xbe")
    (deep / "Service$Inner.class").write_bytes(b"\xca\xfe\xba\xbe")
    (deep / "script.groovy").write_text("println 'hi'", encoding="utf-8")
    (deep / "Service.java").write_text("class Service {}", encoding="utf-8")

    assert count_classes(str(app_root)) == 5


def test_directory_named_like_archive_is_walked(app_root: Path) -> None:
    """TC-04: Classification follows the filesystem type, not the name."""
    exploded = app_root / "exploded.jar"
    exploded.mkdir()
    (exploded / "A.class").write_bytes(b"")
    (app_root / "odd.class").mkdir()

    assert count_classes(str(app_root)) == 1


def test_rejects_non_directory_root(tmp_path: Path) -> None:
    """TC-05: The root must be a directory."""
    f = tmp_path / "file.txt"
    f.write_text("x", encoding="utf-8")

    with pytest.raises(NotADirectoryError):
        count_classes(str(f))


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlink_cycle_terminates(app_root: Path) -> None:
    """TC-06: A link back to an ancestor does not recurse forever."""
    (app_root / "lib").mkdir()
    (app_root / "lib" / "A.class").write_bytes(b"")
    os.symlink(str(app_root), str(app_root / "lib" / "loop"))

    assert count_classes(str(app_root)) == 1


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlinks_count_like_their_targets(app_root: Path, make_archive) -> None:
    """TC-06b: Linked directories and archives are counted once per link."""
    lib = app_root / "lib"
    lib.mkdir()
    (lib / "A.class").write_bytes(b"")
    make_archive(lib / "x.jar", {"X.class": b""})
    os.symlink(str(lib), str(app_root / "lib2"))
    os.symlink(str(lib / "x.jar"), str(app_root / "y.jar"))

    # lib: 2, lib2 -> lib: 2, y.jar -> lib/x.jar: 1
    assert count_classes(str(app_root)) == 5


# ----
# -----------------------------------------------------------------------------

def test_archive_entries_are_counted(app_root: Path, make_archive) -> None:
    """TC-07: Class entries inside a jar are counted alongside loose files."""
    make_archive(app_root / "lib" / "util.jar", {
        "com/example/A.class": b"",
        "com/example/B.class": b"",
        "META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n",
    })
    (app_root / "Main.class").write_bytes(b"")

    assert count_classes(str(app_root)) == 3


def test_nested_archive_is_unwrapped(app_root: Path, make_archive, scratch_dir: Path) -> None:
    """TC-08: Outer count equals M outer classes plus K nested classes."""
    inner = zip_bytes({f"lib/C{i}.class": b"" for i in range(4)})
    make_archive(app_root / "app.war", {
        "WEB-INF/classes/Controller.class": b"",
        "WEB-INF/classes/Model.class": b"",
        "WEB-INF/classes/routes.groovy": "get '/'",
        "WEB-INF/lib/inner.jar": inner,
    })

    assert count_classes(str(app_root)) == 3 + 4
    assert list(scratch_dir.iterdir()) == []


def test_arbitrary_nesting_depth(tmp_path: Path, make_archive, scratch_dir: Path) -> None:
    """TC-09: Archives inside archives inside archives are all unwrapped."""
    level3 = zip_bytes({"L3.class": b""})
    level2 = zip_bytes({"L2.class": b"", "deeper/level3.jar": level3})
    level1 = make_archive(tmp_path / "level1.war", {"L1.class": b"", "level2.jar": level2})

    assert count_archive_classes(str(level1)) == 3
    assert list(scratch_dir.iterdir()) == []


def test_directory_entries_in_archive_are_skipped(tmp_path: Path, make_archive) -> None:
    """TC-10: A directory entry named like an archive is not extracted."""
    archive = make_archive(tmp_path / "app.jar", {
        "lib.jar/": b"",
        "lib.jar/A.class": b"",
    })

    assert count_archive_classes(str(archive)) == 1


def test_counting_is_idempotent(app_root: Path, make_archive, scratch_dir: Path) -> None:
    """TC-11: Repeated calls agree and leave no scratch files behind."""
    inner = zip_bytes({"X.class": b"", "Y.class": b""})
    make_archive(app_root / "app.war", {"A.class": b"", "WEB-INF/lib/x.jar": inner})
    (app_root / "B.groovy").write_text("", encoding="utf-8")

    first = count_classes(str(app_root))
    second = count_classes(str(app_root))

    assert first == second == 4
    assert list(scratch_dir.iterdir()) == []


# -----------------------------------------------------------------------------
# FAILURES
# -----------------------------------------------------------------------------

def test_corrupt_archive_aborts_count(app_root: Path) -> None:
    """TC-12: An unreadable archive raises instead of returning a partial count."""
    (app_root / "A.class").write_bytes(b"")
    (app_root / "broken.jar").write_bytes(b"this is not a zip file")
    (app_root / "Z.class").write_bytes(b"")

    with pytest.raises(ArchiveOpenError) as exc_info:
        count_classes(str(app_root))

    assert exc_info.value.location.endswith("broken.jar")
    assert "broken.jar" in str(exc_info.value)


def test_corrupt_nested_archive_reports_location(app_root: Path, make_archive, scratch_dir: Path) -> None:
    """TC-13: Nested failures name the entry inside its parent archive."""
    make_archive(app_root / "app.war", {
        "A.class": b"",
        "WEB-INF/lib/bad.jar": b"garbage",
    })

    with pytest.raises(ArchiveOpenError) as exc_info:
        count_classes(str(app_root))

    assert exc_info.value.location.endswith("app.war!/WEB-INF/lib/bad.jar")
    assert list(scratch_dir.iterdir()) == []


def test_extraction_failure_cleans_scratch(app_root: Path, make_archive, scratch_dir: Path) -> None:
    """TC-14: A failed extraction raises ExtractionError and removes scratch space."""
    make_archive(app_root / "app.war", {"WEB-INF/lib/x.jar": zip_bytes({"A.class": b""})})

    with patch(
        "memcalc.core.services.class_counter.shutil.copyfileobj",
        side_effect=OSError("No space left on device"),
    ):
        with pytest.raises(ExtractionError) as exc_info:
            count_classes(str(app_root))

    assert isinstance(exc_info.value, ClassCountError)
    assert isinstance(exc_info.value.__cause__, OSError)
    assert "x.jar" in exc_info.value.location
    assert list(scratch_dir.iterdir()) == []
