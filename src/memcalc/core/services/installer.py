from __future__ import annotations

"""
Calculator Installation Service.

Resolves a calculator version against a repository index, acquires the
artifact (reusing a local download cache), and unpacks it into the
sandbox as an executable named after its version.
"""

import logging
import os
import platform
import shutil
import tarfile
from enum import Enum
from typing import Callable, Iterable, Optional, Tuple

from memcalc.domain.constants import CALCULATOR_BINARY_PREFIX, TARBALL_MIN_MAJOR
from memcalc.domain.errors import (
    CalculatorInstallError,
    CalculatorResolutionError,
    MemcalcError,
)
from memcalc.infra import network
from memcalc.infra.fs import get_user_data_dir, safe_mkdir

logger = logging.getLogger(__name__)

WILDCARD = "+"


# -----------------------------------------------------------------------------
# VERSION RESOLUTION
# -----------------------------------------------------------------------------

def parse_version(version: str) -> Tuple[int, ...]:
    """Turn '3.6.1' into (3, 6, 1); non-digit noise inside a part is ignored."""
    return tuple(int("".join(filter(str.isdigit, p)) or 0) for p in version.split("."))


def version_matches(candidate: str, requirement: str) -> bool:
    """
    Check a concrete version against a requirement.

    '+' matches everything, '3.+' matches '3' and '3.x...', anything else
    must match exactly.
    """
    requirement = requirement.strip()
    if requirement in ("", WILDCARD):
        return True
    if requirement.endswith("." + WILDCARD):
        prefix = requirement[:-2]
        return candidate == prefix or candidate.startswith(prefix + ".")
    return candidate == requirement


def resolve_version(candidates: Iterable[str], requirement: str) -> str:
    """
    Select the highest candidate satisfying the requirement.

    Raises:
        CalculatorResolutionError: If nothing matches.
    """
    matching = [c for c in candidates if version_matches(c, requirement)]
    if not matching:
        raise CalculatorResolutionError(f"No calculator version matches '{requirement}'")
    return max(matching, key=parse_version)


def calculator_binary_name(version: str) -> str:
    """Versioned executable name inside the sandbox 'bin' directory."""
    return f"{CALCULATOR_BINARY_PREFIX}-{version}"


def detect_platform() -> str:
    """Platform label used inside calculator tarballs."""
    return "darwin" if platform.system() == "Darwin" else "linux"


def download_progress_logger(uri: str) -> Callable[[float], None]:
    """Build a download progress callback that logs each quarter reached."""
    reported = [0]

    def _report(percent: float) -> None:
        step = int(percent // 25) * 25
        if step > reported[0]:
            reported[0] = step
            logger.debug(f"{uri}: {step}% downloaded")

    return _report


# -----------------------------------------------------------------------------
# INSTALL STATE DEFINITIONS
# -----------------------------------------------------------------------------

class InstallStatus(Enum):
    """Enumeration of the installation lifecycle states."""
    IDLE = "IDLE"
    RESOLVING = "RESOLVING"
    DOWNLOADING = "DOWNLOADING"
    UNPACKING = "UNPACKING"
    READY = "READY"
    ERROR = "ERROR"


# -----------------------------------------------------------------------------
# INSTALLER SERVICE
# -----------------------------------------------------------------------------

class CalculatorInstaller:
    """
    Installs one calculator version into a sandbox directory.

    Artifacts fetched over HTTP are kept in a cache directory keyed by the
    digest of their URI, so repeated installs of the same version do not
    download again.
    """

    def __init__(self, sandbox_dir: str, *, cache_dir: Optional[str] = None) -> None:
        """
        Args:
            sandbox_dir: Directory receiving 'bin/<calculator>'.
            cache_dir: Download cache. Defaults to '<user data dir>/cache'.
        """
        self._sandbox_dir = os.path.abspath(sandbox_dir)
        self._cache_dir = cache_dir or os.path.join(get_user_data_dir(), "cache")
        self._status = InstallStatus.IDLE
        self._version: str = ""
        self._installed_path: str = ""

    @property
    def status(self) -> InstallStatus:
        """Current lifecycle state."""
        return self._status

    @property
    def version(self) -> str:
        """Resolved version of the last install."""
        return self._version

    @property
    def installed_path(self) -> str:
        """Path of the installed executable, empty until READY."""
        return self._installed_path

    def calculator_path(self, version: str) -> str:
        """Location of the executable for a given version."""
        return os.path.join(self._sandbox_dir, "bin", calculator_binary_name(version))

    def install(
            self,
            version_requirement: str,
            repository_root: str,
            platform_name: Optional[str] = None,
    ) -> str:
        """
        Resolve, acquire, unpack and mark the calculator executable.

        Args:
            version_requirement: Exact version or wildcard ('3.+').
            repository_root: URL or directory containing index.json.
            platform_name: Tarball platform label; detected when omitted.

        Returns:
            str: Absolute path of the installed executable.

        Raises:
            CalculatorResolutionError: If no version matches.
            CalculatorInstallError: If acquisition or unpacking fails.
        """
        try:
            self._status = InstallStatus.RESOLVING
            index = network.fetch_repository_index(repository_root)
            version = resolve_version(index.keys(), version_requirement)
            logger.info(f"Memory calculator {version} selected (requested '{version_requirement}')")

            self._status = InstallStatus.DOWNLOADING
            artifact = self._acquire(index[version])

            self._status = InstallStatus.UNPACKING
            target = self.calculator_path(version)
            self._unpack(artifact, target, version, platform_name or detect_platform())
        except MemcalcError:
            self._status = InstallStatus.ERROR
            raise
        except OSError as e:
            self._status = InstallStatus.ERROR
            raise CalculatorInstallError(f"Calculator installation failed: {e}") from e

        self._version = version
        self._installed_path = target
        self._status = InstallStatus.READY
        logger.info(f"Memory calculator installed at {target}")
        return target

    @staticmethod
    def _ensure_dir(path: str) -> None:
        """Create a directory tree or fail the install."""
        ok, err = safe_mkdir(path)
        if not ok:
            raise CalculatorInstallError(f"Cannot create directory {path}: {err}")

    # -------------------------------------------------------------------------
    # ACQUISITION
    # -------------------------------------------------------------------------

    def _acquire(self, uri: str) -> str:
        """Return a local file holding the artifact behind uri."""
        if not network.is_remote(uri):
            path = network.local_path(uri)
            if not os.path.isfile(path):
                raise CalculatorInstallError(f"Calculator artifact not found: {path}")
            return path

        self._ensure_dir(self._cache_dir)
        cached = os.path.join(self._cache_dir, network.uri_digest(uri))
        if os.path.isfile(cached):
            logger.debug(f"Reusing cached artifact for {uri}")
            return cached

        partial = cached + ".part"
        logger.info(f"Downloading memory calculator from {uri}")
        success, msg = network.download_binary_stream(uri, partial, download_progress_logger(uri))
        if not success:
            if os.path.exists(partial):
                os.remove(partial)
            raise CalculatorInstallError(f"Calculator download failed from {uri}: {msg}")

        os.replace(partial, cached)
        logger.info(f"Downloaded {uri} (sha256 {network.calculate_sha256(cached)})")
        return cached

    # -------------------------------------------------------------------------
    # UNPACKING
    # -------------------------------------------------------------------------

    def _unpack(self, artifact: str, target: str, version: str, platform_name: str) -> None:
        """Place the executable at target and make it runnable."""
        try:
            self._ensure_dir(os.path.dirname(target))
            if parse_version(version)[0] < TARBALL_MIN_MAJOR:
                shutil.copyfile(artifact, target)
            else:
                self._unpack_tarball(artifact, target, platform_name)
            os.chmod(target, 0o755)
        except (OSError, tarfile.TarError) as e:
            raise CalculatorInstallError(f"Cannot unpack calculator artifact {artifact}: {e}") from e

    @staticmethod
    def _unpack_tarball(artifact: str, target: str, platform_name: str) -> None:
        """Copy the platform executable out of a gzipped tarball."""
        member_name = f"{CALCULATOR_BINARY_PREFIX}-{platform_name}"
        with tarfile.open(artifact, "r:gz") as tar:
            member = next(
                (m for m in tar.getmembers() if m.isfile() and os.path.basename(m.name) == member_name),
                None,
            )
            if member is None:
                raise CalculatorInstallError(f"'{member_name}' not found in {artifact}")

            src = tar.extractfile(member)
            if src is None:
                raise CalculatorInstallError(f"Cannot read '{member_name}' from {artifact}")
            with src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
