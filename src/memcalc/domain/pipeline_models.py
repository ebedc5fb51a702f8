from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the result object passed from the pipeline engine to the interface
layer, and the factories that build it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PipelineResult:
    """
    Outcome of a complete sizing preparation run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        app_root: Normalized application directory that was inspected.
        class_count: Loaded class estimate used in the invocation.
        class_count_source: 'override' or 'counted'.
        calculator_path: Path of the calculator executable.
        invocation: The calculator command line.
        command: The invocation wrapped for shell capture.
        memory_settings: Calculator output, when it was executed.
        summary: Additional execution metadata.
    """
    ok: bool
    error: str

    app_root: str

    class_count: int = 0
    class_count_source: str = ""

    calculator_path: str = ""
    invocation: str = ""
    command: str = ""
    memory_settings: str = ""

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        app_root: str,
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a failed pipeline result instance.

    No class count or invocation is carried, so a caller can never pick up
    a partial value from a failed run.

    Args:
        error: Detailed error description.
        app_root: The application directory targeted.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        PipelineResult: An immutable error result object.
    """
    return PipelineResult(
        ok=False,
        error=error,
        app_root=app_root,
        summary=summary_extra or {},
    )


def create_success_result(
        app_root: str,
        class_count: int,
        class_count_source: str,
        calculator_path: str,
        invocation: str,
        command: str,
        memory_settings: str = "",
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a successful pipeline result instance.

    Args:
        app_root: Normalized application directory.
        class_count: Loaded class estimate.
        class_count_source: Whether the count was configured or counted.
        calculator_path: Calculator executable path.
        invocation: Calculator command line.
        command: Shell capture form of the invocation.
        memory_settings: Calculator output, if it was run.
        summary_extra: Final execution metrics.

    Returns:
        PipelineResult: An immutable success result object.
    """
    return PipelineResult(
        ok=True,
        error="",
        app_root=app_root,
        class_count=class_count,
        class_count_source=class_count_source,
        calculator_path=calculator_path,
        invocation=invocation,
        command=command,
        memory_settings=memory_settings,
        summary=summary_extra or {},
    )
