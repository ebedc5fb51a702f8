from __future__ import annotations

"""
Core orchestration pipeline.

Coordinates a sizing preparation run:
1. Validates the configuration and the application root.
2. Optionally installs the calculator into a sandbox.
3. Qualifies the calculator path for the shell.
4. Builds the invocation (counting classes unless overridden).
5. Optionally runs the calculator to show the memory settings.
"""

import logging
import os
from typing import Any, Dict, Optional

from memcalc.core.pipeline.validator import validate_config
from memcalc.core.services.installer import CalculatorInstaller
from memcalc.core.services.invocation import (
    build_invocation_from_config,
    memory_calculation_command,
    render_invocation,
)
from memcalc.core.services.runner import show_settings
from memcalc.domain.errors import MemcalcError
from memcalc.domain.pipeline_models import (
    PipelineResult,
    create_error_result,
    create_success_result,
)
from memcalc.infra.fs import normalize_path, qualify_path

logger = logging.getLogger(__name__)


def run_pipeline(
        config: Optional[Dict[str, Any]],
        *,
        app_root: str,
        calculator_path: Optional[str] = None,
        sandbox_dir: Optional[str] = None,
        install: bool = False,
        execute: bool = False,
        relative_to: Optional[str] = None,
) -> PipelineResult:
    """
    Execute a full sizing preparation run.

    A counting, installation or execution failure yields a failed result;
    no fallback class count is ever substituted.

    Args:
        config: Raw or partial sizing configuration.
        app_root: Application directory to inspect.
        calculator_path: Installed calculator, when install is False.
        sandbox_dir: Install target, required when install is True.
        install: Fetch and unpack the calculator first.
        execute: Run the invocation and capture the memory settings.
        relative_to: Base directory for '$PWD/...' path qualification.

    Returns:
        PipelineResult: Object containing status, invocation and summary.
    """
    logger.info("Memory sizing preparation started.")

    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    root = normalize_path(app_root, os.getcwd())
    if not os.path.isdir(root):
        msg = f"Invalid application directory: {root}"
        logger.error(msg)
        return create_error_result(msg, root)

    try:
        if install:
            if not sandbox_dir or not cfg["repository_root"]:
                msg = "Installing the calculator requires a sandbox directory and a repository_root."
                logger.error(msg)
                return create_error_result(msg, root)
            installer = CalculatorInstaller(sandbox_dir)
            calculator_path = installer.install(cfg["version"], cfg["repository_root"])

        if not calculator_path:
            msg = "No calculator executable given and installation not requested."
            logger.error(msg)
            return create_error_result(msg, root)

        executable = qualify_path(calculator_path, relative_to)
        spec, source = build_invocation_from_config(executable, cfg, root)
        invocation = render_invocation(spec)
        logger.debug(f"Calculator invocation: {invocation}")

        memory_settings = ""
        if execute:
            memory_settings = show_settings(invocation, cwd=relative_to)

    except MemcalcError as e:
        logger.error(f"Memory sizing preparation failed: {e}")
        return create_error_result(str(e), root, summary_extra={"error_type": type(e).__name__})

    return create_success_result(
        app_root=root,
        class_count=spec.class_count,
        class_count_source=source,
        calculator_path=os.path.abspath(calculator_path),
        invocation=invocation,
        command=memory_calculation_command(invocation),
        memory_settings=memory_settings,
        summary_extra={
            "stack_threads": spec.stack_threads,
            "vm_options": dict(spec.vm_options),
            "warnings": list(warnings),
        },
    )
