from __future__ import annotations

"""
Domain Constants.

Central definitions for file classification suffixes, calculator naming,
invocation tokens and configuration defaults.
"""

from typing import Tuple

APP_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# CLASSIFICATION
# -----------------------------------------------------------------------------
CLASS_UNIT_SUFFIXES: Tuple[str, ...] = (".class", ".groovy")
ARCHIVE_SUFFIXES: Tuple[str, ...] = (".war", ".jar")

# Name given to a nested archive entry once extracted to its scratch directory
EXTRACTED_ARCHIVE_NAME = "archive"

# -----------------------------------------------------------------------------
# INVOCATION
# -----------------------------------------------------------------------------
MEMORY_LIMIT_REF = "$MEMORY_LIMIT"
CALCULATED_MEMORY_VAR = "CALCULATED_MEMORY"

# -----------------------------------------------------------------------------
# CALCULATOR ARTIFACTS
# -----------------------------------------------------------------------------
CALCULATOR_BINARY_PREFIX = "java-buildpack-memory-calculator"
REPOSITORY_INDEX_NAME = "index.json"

# Artifacts from this major version onwards ship as tarballs
TARBALL_MIN_MAJOR = 2

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_VERSION_REQUIREMENT = "3.+"
DEFAULT_STACK_THREADS = 250
