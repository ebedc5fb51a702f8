from __future__ import annotations

"""
Domain Exception Hierarchy.

Every failure memcalc raises on purpose derives from MemcalcError, so the
pipeline and CLI can turn it into a failed result without masking
programming errors.
"""


class MemcalcError(Exception):
    """Base exception for memcalc operations."""


# -----------------------------------------------------------------------------
# CLASS COUNTING
# -----------------------------------------------------------------------------

class ClassCountError(MemcalcError):
    """
    A class count could not be produced.

    Attributes:
        location: Archive location that failed, nested entries rendered
                  as 'outer.war!/WEB-INF/lib/inner.jar'.
    """

    def __init__(self, message: str, location: str) -> None:
        super().__init__(f"{message}: {location}")
        self.location = location


class ArchiveOpenError(ClassCountError):
    """A package archive could not be opened or parsed."""


class ExtractionError(ClassCountError):
    """A nested archive entry could not be extracted to scratch space."""


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------

class ConfigurationError(MemcalcError, ValueError):
    """A configuration value is malformed."""


# -----------------------------------------------------------------------------
# CALCULATOR LIFECYCLE
# -----------------------------------------------------------------------------

class CalculatorResolutionError(MemcalcError):
    """No calculator version satisfies the requested version."""


class CalculatorInstallError(MemcalcError):
    """The calculator artifact could not be downloaded or unpacked."""


class CalculatorExecutionError(MemcalcError):
    """The calculator exited with a non-zero status."""

    def __init__(self, returncode: int, stderr: str) -> None:
        detail = stderr.strip() or "no diagnostic output"
        super().__init__(f"Memory calculator exited with status {returncode}: {detail}")
        self.returncode = returncode
        self.stderr = stderr
