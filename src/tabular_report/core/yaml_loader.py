"""YAML settings loader with environment variable interpolation."""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# ${VAR} and ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def interpolate_env_vars(value: Any) -> Any:
    """Recursively substitute environment variables into parsed YAML values.

    Strings may reference ``${VAR}`` (required) or ``${VAR:-default}``.
    Dicts and lists are walked; every other type is returned as-is.

    Raises:
        ValueError: If a required variable is unset and has no default
    """
    if isinstance(value, dict):
        return {key: interpolate_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    def _substitute(match: re.Match[str]) -> str:
        name, default = match.group(1), match.group(2)
        resolved = os.environ.get(name)
        if resolved is not None:
            return resolved
        if default is not None:
            return default
        raise ValueError(
            f"Environment variable '{name}' is not set and no default provided"
        )

    return ENV_VAR_PATTERN.sub(_substitute, value)


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Read a YAML settings file and interpolate environment variables.

    Args:
        config_path: Location of the YAML file

    Returns:
        Mapping of settings; empty when the file has no content

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If interpolation fails or the document is not a mapping
        yaml.YAMLError: If the document cannot be parsed
    """
    logger.debug(f"Reading settings from {config_path}")

    with open(config_path) as f:
        document = yaml.safe_load(f)

    if document is None:
        logger.warning(f"Settings file {config_path} is empty")
        return {}

    if not isinstance(document, dict):
        raise ValueError(
            f"Expected a mapping at the top of {config_path}, got {type(document).__name__}"
        )

    try:
        return interpolate_env_vars(document)
    except ValueError as e:
        logger.error(f"Environment variable interpolation failed for {config_path}: {e}")
        raise
