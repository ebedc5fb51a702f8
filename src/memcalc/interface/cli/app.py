from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration loading
and merging (defaults, JSON file, command-line overrides), class counting
or the full sizing pipeline, and result rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from memcalc.core.pipeline.engine import run_pipeline
from memcalc.core.pipeline.validator import validate_config
from memcalc.core.services.class_counter import count_classes
from memcalc.domain.config import get_default_config, load_config
from memcalc.domain.errors import ConfigurationError, MemcalcError
from memcalc.domain.pipeline_models import PipelineResult
from memcalc.infra.logging import LoggingConfig, configure_logging, get_logger
from memcalc.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 bad input path).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    configure_logging(LoggingConfig.for_cli(args.debug, args.log_file))
    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    # 1. Base configuration (defaults vs persisted file)
    try:
        base_conf = get_default_config() if args.use_defaults else load_config(args.config_path)
    except ConfigurationError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    # 2. Merge command-line overrides and validate
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    # 3. Pre-flight application root verification
    app_root = os.path.abspath(args.app_root or os.getcwd())
    if not os.path.isdir(app_root):
        msg = f"Application directory does not exist: {app_root}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 2

    try:
        if args.count_only:
            return _run_count_only(app_root, args.json_output)

        result = run_pipeline(
            clean_conf,
            app_root=app_root,
            calculator_path=args.calculator_path,
            sandbox_dir=args.sandbox_dir,
            install=bool(args.install),
            execute=bool(args.run),
            relative_to=args.relative_to,
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return 130

    # 4. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result, print_command=bool(args.print_command))

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# ACTIONS
# -----------------------------------------------------------------------------

def _run_count_only(app_root: str, json_output: bool) -> int:
    """Count classes and print the number; counting errors exit with 1."""
    try:
        count = count_classes(app_root)
    except MemcalcError as e:
        logger.error(f"Class counting failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if json_output:
        print(json.dumps({"app_root": app_root, "class_count": count}))
    else:
        print(count)
    return 0

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge non-None overrides into the base configuration.

    Command-line tuning options extend the configured ones: existing names
    are replaced in place, new names are appended.

    Args:
        base: The loaded configuration dictionary.
        overrides: Values given on the command line.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k in ("class_count", "stack_threads", "version", "repository_root"):
        if overrides.get(k) is not None:
            out[k] = overrides[k]

    cli_options = overrides.get("vm_options")
    if cli_options:
        base_options = base.get("vm_options")
        merged_options = dict(base_options) if isinstance(base_options, dict) else {}
        merged_options.update(cli_options)
        out["vm_options"] = merged_options
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: PipelineResult, *, print_command: bool) -> None:
    """
    Print the pipeline result: the invocation on stdout, context on stderr.

    Keeping stdout to the bare command lets shell callers capture it.

    Args:
        result: The pipeline result to render.
        print_command: Print the CALCULATED_MEMORY capture form instead.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    print(
        f"Loaded classes: {result.class_count} ({result.class_count_source})",
        file=sys.stderr,
    )
    if result.memory_settings:
        print(f"Memory Settings: {result.memory_settings}", file=sys.stderr)

    print(result.command if print_command else result.invocation)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
