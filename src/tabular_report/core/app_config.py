"""Central package settings loaded from YAML."""

import logging
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from tabular_report.core.yaml_loader import load_yaml_config
from tabular_report.instructions import Backend

logger = logging.getLogger(__name__)

# app_config.py -> core -> tabular_report -> src -> project root
_project_root = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_PATH = _project_root / "config" / "app.yaml"
CONFIG_PATH_ENV_VAR = "TABULAR_REPORT_CONFIG"


class LogFormat(str, Enum):
    """Output format for log records."""

    TEXT = "text"
    JSON = "json"


class RenderingConfig(BaseModel):
    """Settings shared by instruction compilation and materialization."""

    backends: list[Backend] = Field(
        default_factory=lambda: [Backend.HTML, Backend.MARKDOWN],
        min_length=1,
    )
    missing_placeholder: str = ""
    level_indent: int = Field(default=4, ge=0, le=16)

    model_config = {"frozen": True}

    @field_validator("backends")
    @classmethod
    def unique_backends(cls, value: list[Backend]) -> list[Backend]:
        """Reject repeated backend names."""
        if len(set(value)) != len(value):
            raise ValueError("backends must not contain duplicates")
        return value


class FootnoteConfig(BaseModel):
    """Settings for footnote collation."""

    abbreviation_prefix: str = "Abbreviations: "
    abbreviation_separator: str = Field(default="; ", min_length=1)

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Settings consumed by setup_logging."""

    level: str = Field(default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: LogFormat = LogFormat.TEXT

    model_config = {"frozen": True}

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value: object) -> object:
        """Accept lowercase level names."""
        return value.upper() if isinstance(value, str) else value


class AppConfig(BaseModel):
    """Central package configuration loaded from YAML."""

    rendering: RenderingConfig = Field(default_factory=RenderingConfig)
    footnotes: FootnoteConfig = Field(default_factory=FootnoteConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def get_default_config() -> AppConfig:
    """Create AppConfig with defaults (no YAML file needed)."""
    return AppConfig()


def _resolve_config_path(config_path: Path | None) -> Path:
    if config_path is not None:
        return config_path
    override = os.environ.get(CONFIG_PATH_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_CONFIG_PATH


@lru_cache(maxsize=1)
def load_app_config(config_path: Path | None = None) -> AppConfig:
    """Load package configuration from a YAML file.

    Args:
        config_path: Path to YAML config file. If None, uses the
            TABULAR_REPORT_CONFIG environment variable or config/app.yaml.

    Returns:
        Validated AppConfig instance

    Note:
        Falls back to the default configuration when no file is found.
    """
    path = _resolve_config_path(config_path)

    if not path.exists():
        logger.info(f"Config file not found at {path}, using default configuration")
        return get_default_config()

    try:
        config = AppConfig.model_validate(load_yaml_config(path))
        logger.info(f"Loaded configuration from {path}")
        return config
    except Exception as e:
        logger.error(f"Failed to load configuration from {path}: {e}")
        raise


def get_app_config() -> AppConfig:
    """Get the cached package configuration."""
    return load_app_config()


def clear_config_cache() -> None:
    """Clear the configuration cache (useful for testing and hot reload)."""
    load_app_config.cache_clear()
