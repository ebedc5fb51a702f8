from __future__ import annotations

"""
Calculator Invocation Builder.

Formats the command line handed to the external memory calculator. The
total-memory argument is a shell reference that is expanded when the
command runs, never resolved here.
"""

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from memcalc.core.services.class_counter import count_classes
from memcalc.domain.constants import CALCULATED_MEMORY_VAR, MEMORY_LIMIT_REF
from memcalc.domain.invocation_models import InvocationSpec

logger = logging.getLogger(__name__)

SOURCE_OVERRIDE = "override"
SOURCE_COUNTED = "counted"


def render_vm_options(vm_options: Optional[Mapping[str, Any]]) -> str:
    """
    Render the optional '-vmOptions' segment, leading space included.

    Args:
        vm_options: Ordered mapping of option name to value.

    Returns:
        str: ' -vmOptions="-<name><value> ..."' or '' when there are none.
    """
    if not vm_options:
        return ""
    options = " ".join(f"-{name}{value}" for name, value in vm_options.items())
    return f' -vmOptions="{options}"'


def build_invocation(
        executable_path: str,
        total_memory_ref: str,
        stack_threads: int,
        class_count: int,
        vm_options: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Format the calculator invocation string.

    Values are substituted verbatim; they are expected to be validated
    beforehand.

    Args:
        executable_path: Qualified calculator path.
        total_memory_ref: Shell reference to the memory limit.
        stack_threads: Thread stacks to budget for.
        class_count: Loaded class estimate.
        vm_options: Ordered tuning options, possibly empty.

    Returns:
        str: The complete command line.
    """
    return (
        f"{executable_path} "
        f"-totMemory={total_memory_ref} "
        f"-stackThreads={stack_threads} "
        f"-loadedClasses={class_count}"
        f"{render_vm_options(vm_options)}"
    )


def render_invocation(spec: InvocationSpec) -> str:
    """Format the invocation string of a resolved InvocationSpec."""
    return build_invocation(
        spec.executable_path,
        spec.total_memory_ref,
        spec.stack_threads,
        spec.class_count,
        spec.vm_options,
    )


def resolve_class_count(config: Mapping[str, Any], app_root: str) -> Tuple[int, str]:
    """
    Pick the configured class count, or count the application's classes.

    Args:
        config: Validated configuration.
        app_root: Application directory, only walked without an override.

    Returns:
        Tuple[int, str]: (class count, 'override' or 'counted').
    """
    override = config.get("class_count")
    if override is not None:
        logger.debug(f"Using configured class count {override}")
        return int(override), SOURCE_OVERRIDE
    return count_classes(app_root), SOURCE_COUNTED


def build_invocation_from_config(
        executable_path: str,
        config: Mapping[str, Any],
        app_root: str,
        total_memory_ref: str = MEMORY_LIMIT_REF,
) -> Tuple[InvocationSpec, str]:
    """
    Resolve an InvocationSpec from a validated configuration.

    Args:
        executable_path: Qualified calculator path.
        config: Validated configuration.
        app_root: Application directory.
        total_memory_ref: Shell reference to the memory limit.

    Returns:
        Tuple[InvocationSpec, str]: The spec and the class count source.
    """
    class_count, source = resolve_class_count(config, app_root)
    vm_options: Dict[str, str] = dict(config.get("vm_options") or {})
    spec = InvocationSpec(
        executable_path=executable_path,
        total_memory_ref=total_memory_ref,
        stack_threads=int(config["stack_threads"]),
        class_count=class_count,
        vm_options=vm_options,
    )
    return spec, source


def memory_calculation_command(invocation: str) -> str:
    """Wrap an invocation so the shell captures its output in a variable."""
    return f"{CALCULATED_MEMORY_VAR}=$({invocation})"
