"""Configuration loader module.

This module provides functions for loading configuration from various sources
and transforming it into a validated PeepholeConfig object.
"""

import os
import re
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .schema import PeepholeConfig

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

# Settings whose names contain an underscore and must not be split on it.
_COMPOUND_WORDS = ["auto_import", "cache_enabled", "check_signatures", "static_mask"]

_LIST_KEYS = {"static_mask"}


def merge_dicts(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with values that override the base

    Returns:
        Merged dictionary where override values take precedence
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def resolve_env_vars(config: Any) -> Any:
    """Replace ${VAR} patterns with environment variables.

    Args:
        config: Configuration value (dictionaries and lists are walked)

    Returns:
        Configuration with environment variables resolved
    """
    if isinstance(config, dict):
        return {key: resolve_env_vars(value) for key, value in config.items()}
    if isinstance(config, list):
        return [resolve_env_vars(item) for item in config]
    if isinstance(config, str):
        return _ENV_PATTERN.sub(lambda match: os.environ.get(match.group(1), ""), config)
    return config


def load_yaml_file(path: str) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary containing configuration from YAML

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {path} must be a mapping")
    return data


def _normalize_env_key(env_key: str) -> List[str]:
    """Normalize environment variable key to configuration path.

    Args:
        env_key: Environment variable key without prefix (e.g., "RESOLVER_AUTO_IMPORT")

    Returns:
        List of path segments (e.g., ["resolver", "auto_import"])
    """
    path = env_key.lower().split("_")

    i = 0
    while i < len(path) - 1:
        combined = f"{path[i]}_{path[i + 1]}"
        if combined in _COMPOUND_WORDS:
            path[i] = combined
            path.pop(i + 1)
        else:
            i += 1

    return path


def _convert_env_value(key: str, value: str) -> Any:
    if key in _LIST_KEYS:
        return [item.strip() for item in value.split(",") if item.strip()]
    if value.lower() in ("true", "yes", "1"):
        return True
    if value.lower() in ("false", "no", "0"):
        return False
    return value


def load_from_env(prefix: str = "PEEPHOLE") -> Dict[str, Any]:
    """Load configuration from environment variables with given prefix.

    Args:
        prefix: Prefix for environment variables to consider

    Returns:
        Dictionary containing configuration from environment
    """
    result: Dict[str, Any] = {}
    prefix_upper = f"{prefix.upper()}_"

    for key, value in os.environ.items():
        if not key.startswith(prefix_upper):
            continue
        env_key = key[len(prefix_upper):]
        # PEEPHOLE_CONFIG names the file, it is not a setting
        if env_key == "CONFIG":
            continue

        path = _normalize_env_key(env_key)

        current = result
        for part in path[:-1]:
            current = current.setdefault(part, {})
        current[path[-1]] = _convert_env_value(path[-1], value)

    return result


def load_config(
    file_path: Optional[str] = None,
    env_prefix: str = "PEEPHOLE",
) -> PeepholeConfig:
    """Load PeepholeConfig from file and environment.

    Args:
        file_path: Path to config file (defaults to PEEPHOLE_CONFIG from env or "peephole.yaml")
        env_prefix: Prefix for environment variables

    Returns:
        Validated PeepholeConfig instance

    Raises:
        ConfigError: On loading or validation failure
    """
    path = file_path or os.environ.get(f"{env_prefix}_CONFIG", "peephole.yaml")

    config_data: Dict[str, Any] = {}
    if os.path.exists(path):
        config_data = merge_dicts(config_data, load_yaml_file(path))

    # Environment overrides the file
    env_config = load_from_env(env_prefix)
    if env_config:
        config_data = merge_dicts(config_data, env_config)

    config_data = resolve_env_vars(config_data)

    try:
        return PeepholeConfig.model_validate(config_data)
    except ValidationError as e:
        raise ConfigError(f"Failed to load configuration: {e}") from e
