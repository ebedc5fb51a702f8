from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates parsed arguments into
configuration overrides understood by the validator.
"""

import argparse
from typing import Any, Dict, List, Optional

from memcalc.domain.constants import APP_VERSION

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the memcalc CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="memcalc",
        description="Count an application's loadable classes and build the memory calculator command.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    # --- Locations ---
    p.add_argument(
        "-a", "--app-root",
        dest="app_root",
        default=None,
        help="Application directory to inspect (default: current directory).",
    )
    p.add_argument(
        "-c", "--calculator",
        dest="calculator_path",
        default=None,
        help="Path of an installed memory calculator executable.",
    )
    p.add_argument(
        "--relative-to",
        dest="relative_to",
        default=None,
        help="Emit the calculator path as $PWD/<path relative to this directory>.",
    )

    # --- Sizing parameters ---
    p.add_argument(
        "--class-count",
        dest="class_count",
        type=int,
        default=None,
        help="Use this loaded class count instead of counting.",
    )
    p.add_argument(
        "--stack-threads",
        dest="stack_threads",
        type=int,
        default=None,
        help="Number of thread stacks to budget for.",
    )
    p.add_argument(
        "--vm-option",
        dest="vm_options",
        action="append",
        nargs=2,
        default=None,
        metavar=("NAME", "VALUE"),
        help="Tuning option forwarded as -NAMEVALUE, e.g. 'Xss 1M' or 'XX:MaxMetaspaceSize= 64m' (repeatable, order kept).",
    )

    # --- Calculator installation ---
    p.add_argument(
        "--install",
        action="store_true",
        help="Download and unpack the calculator into --sandbox first.",
    )
    p.add_argument(
        "--sandbox",
        dest="sandbox_dir",
        default=None,
        help="Directory receiving bin/<calculator> when installing.",
    )
    p.add_argument(
        "--version-requirement",
        dest="version",
        default=None,
        help="Calculator version to install, e.g. 3.6.1 or 3.+.",
    )
    p.add_argument(
        "--repository-root",
        dest="repository_root",
        default=None,
        help="URL or directory holding the calculator index.json.",
    )

    # --- Actions ---
    p.add_argument(
        "--run",
        action="store_true",
        help="Execute the calculator and print the memory settings.",
    )
    p.add_argument(
        "--count-only",
        action="store_true",
        help="Only print the loaded class count.",
    )
    p.add_argument(
        "--command",
        dest="print_command",
        action="store_true",
        help="Print the CALCULATED_MEMORY=$(...) form of the invocation.",
    )

    # --- Configuration and diagnostics ---
    p.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="JSON configuration file (default: ~/.memcalc/config.json when present).",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore configuration files and start from built-in defaults.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the result as JSON.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this rotating file.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides; None means 'not given'.
    """
    overrides: Dict[str, Any] = {}

    overrides["class_count"] = args.class_count
    overrides["stack_threads"] = args.stack_threads
    overrides["version"] = args.version
    overrides["repository_root"] = args.repository_root
    overrides["vm_options"] = _parse_options(args.vm_options)

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _parse_options(values: Optional[List[List[str]]]) -> Optional[Dict[str, str]]:
    """
    Convert repeated (NAME, VALUE) pairs into an ordered mapping.

    Only surrounding whitespace is stripped, so a name ending in '='
    renders as -NAME=VALUE and an empty value renders a bare flag.
    """
    if not values:
        return None
    options: Dict[str, str] = {}
    for name, value in values:
        name = name.strip()
        if name:
            options[name] = value.strip()
    return options or None
