"""Pytest configuration for the tabular_report test suite.

This file is automatically loaded by pytest and sets up:
1. Loading of .env file for local overrides (LOG_LEVEL, LOG_FORMAT, config path)
2. Logging configuration from the ``logging`` section of config/app.yaml
"""

from pathlib import Path

from dotenv import load_dotenv

from tabular_report.core.app_config import clear_config_cache
from tabular_report.core.logging import setup_logging_from_config

_project_root = Path(__file__).resolve().parent.parent

_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

setup_logging_from_config()
clear_config_cache()
