from __future__ import annotations

"""
Calculator Execution Service.

Runs a calculator invocation once so the resulting memory settings can be
shown at install time. The invocation goes through the shell because it
carries references such as $MEMORY_LIMIT that only the shell expands.
"""

import logging
import subprocess
from typing import Mapping, Optional

from memcalc.domain.errors import CalculatorExecutionError

logger = logging.getLogger(__name__)


def show_settings(
        invocation: str,
        *,
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Execute the calculator and relay its output.

    Args:
        invocation: Calculator command line.
        cwd: Working directory ($PWD for qualified paths).
        env: Environment for the shell; inherits the current one if None.

    Returns:
        str: The calculated memory settings (stdout, stripped).

    Raises:
        CalculatorExecutionError: If the calculator exits non-zero.
    """
    logger.debug(f"Running memory calculator: {invocation}")
    completed = subprocess.run(
        invocation,
        shell=True,
        cwd=cwd,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=True,
    )

    if completed.stderr:
        for line in completed.stderr.splitlines():
            logger.warning(f"  {line}")

    if completed.returncode != 0:
        raise CalculatorExecutionError(completed.returncode, completed.stderr or "")

    settings = (completed.stdout or "").strip()
    logger.info(f"Memory Settings: {settings}")
    return settings
