from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper between raw configuration (JSON file, CLI overrides) and the
invocation builder. Coerces loosely typed values, fills defaults and
reports every correction as a warning; in strict mode the first problem
raises ConfigurationError instead.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from memcalc.domain.config import get_default_config
from memcalc.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a sizing configuration.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raise ConfigurationError instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          the list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if config is None:
        return defaults, warnings

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    unknown = [k for k in config if k not in defaults]
    for key in unknown:
        warnings.append(f"Unknown configuration key '{key}' ignored.")

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    merged["version"] = _as_str(merged.get("version"), defaults["version"], "version", warnings, strict)
    merged["repository_root"] = _as_optional_str(
        merged.get("repository_root"), "repository_root", warnings, strict
    )
    merged["class_count"] = _as_optional_int(
        merged.get("class_count"), "class_count", warnings, strict, minimum=0
    )
    merged["stack_threads"] = _as_int(
        merged.get("stack_threads"), defaults["stack_threads"], "stack_threads", warnings, strict, minimum=1
    )
    merged["vm_options"] = _as_options(merged.get("vm_options"), "vm_options", warnings, strict)

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _reject(msg: str, warnings: List[str], strict: bool) -> None:
    """Raise in strict mode, otherwise record the problem."""
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    _reject(f"Invalid field '{field}': expected str, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_optional_str(value: Any, field: str, warnings: List[str], strict: bool) -> Optional[str]:
    """Like _as_str, but an absent or blank value stays None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None

    _reject(f"Invalid field '{field}': expected str, received {type(value).__name__}.", warnings, strict)
    return None


def _coerce_int(value: Any, field: str, warnings: List[str], strict: bool) -> Optional[int]:
    """Return value as an int, or None when it cannot be one."""
    # bool is an int subclass but never a meaningful count
    if isinstance(value, bool):
        _reject(f"Invalid field '{field}': expected int, received bool.", warnings, strict)
        return None
    if isinstance(value, int):
        return value

    if isinstance(value, str) and not strict:
        s = value.strip()
        if s.isdigit():
            warnings.append(f"Field '{field}' converted from '{value}' to {int(s)}.")
            return int(s)

    _reject(f"Invalid field '{field}': expected int, received {type(value).__name__}.", warnings, strict)
    return None


def _as_int(
        value: Any, fallback: int, field: str, warnings: List[str], strict: bool, *, minimum: int
) -> int:
    """Coerce a mandatory integer with a lower bound."""
    if value is None:
        return fallback

    out = _coerce_int(value, field, warnings, strict)
    if out is None:
        return fallback
    if out < minimum:
        _reject(f"Invalid field '{field}': {out} is below {minimum}.", warnings, strict)
        return fallback
    return out


def _as_optional_int(
        value: Any, field: str, warnings: List[str], strict: bool, *, minimum: int
) -> Optional[int]:
    """Coerce an optional integer with a lower bound; invalid values become None."""
    if value is None:
        return None

    out = _coerce_int(value, field, warnings, strict)
    if out is not None and out < minimum:
        _reject(f"Invalid field '{field}': {out} is below {minimum}.", warnings, strict)
        return None
    return out


def _as_options(value: Any, field: str, warnings: List[str], strict: bool) -> Optional[Dict[str, str]]:
    """Normalize tuning options into an ordered str -> str mapping."""
    if value is None:
        return None

    if not isinstance(value, dict):
        _reject(f"Invalid field '{field}': expected mapping, received {type(value).__name__}.", warnings, strict)
        return None

    out: Dict[str, str] = {}
    for name, option_value in value.items():
        if not isinstance(name, str) or not name.strip():
            msg = f"Invalid option name in '{field}': {name!r}."
            if strict:
                raise ConfigurationError(msg)
            warnings.append(f"{msg} Option discarded.")
            continue
        if isinstance(option_value, (dict, list)):
            msg = f"Invalid value for '{field}.{name}': expected scalar."
            if strict:
                raise ConfigurationError(msg)
            warnings.append(f"{msg} Option discarded.")
            continue
        out[name.strip()] = "" if option_value is None else str(option_value)

    return out or None
