from __future__ import annotations

"""
Invocation Domain Data Models.

Defines the resolved parameter set that feeds the calculator command line.
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class InvocationSpec:
    """
    Resolved parameters of one calculator invocation.

    Attributes:
        executable_path: Calculator path, already qualified for the shell.
        total_memory_ref: Literal token expanded by the shell at run time.
        stack_threads: Number of thread stacks to budget for.
        class_count: Loaded class estimate (override or counted).
        vm_options: Tuning options in emission order.
    """
    executable_path: str
    total_memory_ref: str
    stack_threads: int
    class_count: int
    vm_options: Dict[str, str] = field(default_factory=dict)
