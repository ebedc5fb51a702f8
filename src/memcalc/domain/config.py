from __future__ import annotations

"""
Configuration Domain Management.

Defines the default sizing configuration and its JSON persistence. The
configuration is a plain dictionary; key order inside 'vm_options' is
significant because it is reproduced verbatim in the calculator
invocation.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from memcalc.domain.constants import DEFAULT_STACK_THREADS, DEFAULT_VERSION_REQUIREMENT
from memcalc.domain.errors import ConfigurationError
from memcalc.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """
    Generate the default sizing configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Calculator artifact
        "version": DEFAULT_VERSION_REQUIREMENT,
        "repository_root": None,

        # Sizing parameters
        "class_count": None,
        "stack_threads": DEFAULT_STACK_THREADS,
        "vm_options": None,
    }


def get_default_config_path() -> str:
    """Return the persistent configuration location in the user data dir."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the sizing configuration, merged over the defaults.

    An explicitly requested file must exist and contain a JSON object,
    otherwise ConfigurationError is raised. The implicit user file is
    optional: when it is missing or corrupted the defaults are used.

    Args:
        path: Explicit configuration file. Defaults to the user data dir.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    config = get_default_config()
    explicit = path is not None
    target = path if explicit else get_default_config_path()

    if not os.path.exists(target):
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {target}")
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(target, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        if explicit:
            raise ConfigurationError(f"Cannot read configuration file {target}: {e}") from e
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        if explicit:
            raise ConfigurationError(f"Configuration root must be a JSON object: {target}")
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    config.update(data)
    logger.debug(f"Configuration loaded from {target}")
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> str:
    """
    Persist a sizing configuration as JSON.

    Args:
        config: The configuration dictionary to save.
        path: Target file. Defaults to the user data dir.

    Returns:
        str: The path that was written.
    """
    target = path or get_default_config_path()
    os.makedirs(os.path.dirname(os.path.abspath(target)), exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        json.dump(config, f, ensure_ascii=False, indent=4)
    logger.debug(f"Configuration saved to {target}")
    return target
