"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
validates that the matchmaking and analytics settings are usable.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

logger = logging.getLogger(__name__)


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    for section in ["global", "matchmaking"]:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    if "matchmaking" in config:
        m = config["matchmaking"] or {}

        default_limit = m.get("default_limit", 10)
        max_limit = m.get("max_limit", 50)
        if not isinstance(max_limit, int) or max_limit < 1:
            issues.append(f"matchmaking.max_limit must be a positive integer, got {max_limit}")
        elif not isinstance(default_limit, int) or not 1 <= default_limit <= max_limit:
            issues.append(
                f"matchmaking.default_limit must be in [1, {max_limit}], got {default_limit}"
            )

        workers = m.get("max_workers", 10)
        if not isinstance(workers, int) or workers < 1:
            issues.append(f"matchmaking.max_workers must be a positive integer, got {workers}")

        tolerance = m.get("failure_tolerance", 0.5)
        if not 0 <= tolerance <= 1:
            issues.append(f"matchmaking.failure_tolerance must be in [0, 1], got {tolerance}")

        timeout = m.get("timeout_seconds")
        if timeout is not None and timeout <= 0:
            issues.append(f"matchmaking.timeout_seconds must be positive, got {timeout}")

    if "analytics" in config:
        months = (config["analytics"] or {}).get("trend_months", 12)
        if not isinstance(months, int) or months < 1:
            issues.append(f"analytics.trend_months must be a positive integer, got {months}")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "matchmaking.max_workers")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
