from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides path normalization, shell-relative path qualification, and
directory preparation utilities shared by the installer, the pipeline and
the CLI.
"""

import os
from typing import Optional, Tuple

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "memcalc"
UNIX_APP_DIR_NAME = ".memcalc"
SHELL_PWD_REF = "$PWD"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/memcalc
    - Linux/Mac: ~/.memcalc

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def qualify_path(path: str, relative_to: Optional[str] = None) -> str:
    """
    Express a path relative to a working directory resolved by the shell.

    The result is '$PWD/<relative path>', so the command stays valid when
    the directory tree is relocated before execution. Without a base
    directory the absolute path is returned unchanged.

    Args:
        path: Filesystem path to qualify.
        relative_to: Directory the shell will be running in.

    Returns:
        str: The qualified path.
    """
    if not relative_to:
        return os.path.abspath(path)

    rel = os.path.relpath(os.path.abspath(path), os.path.abspath(relative_to))
    return f"{SHELL_PWD_REF}/{rel.replace(os.sep, '/')}"

# -----------------------------------------------------------------------------
# FILESYSTEM PREPARATION API
# -----------------------------------------------------------------------------

def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)
