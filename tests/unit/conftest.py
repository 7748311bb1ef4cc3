"""Unit test fixtures for payloads, settings and reports.

These fixtures provide:
- settings: default AppConfig, independent of config/app.yaml
- payload_factory: builds TabularPayloads with structural columns filled in
- stat_payload / stat_report: the four-column table used across scenarios
"""

from collections.abc import Callable
from typing import Any

import pytest

from tabular_report.core.app_config import AppConfig, clear_config_cache
from tabular_report.payload import TabularPayload
from tabular_report.renderers.registry import reset_materializer_registry
from tabular_report.report import ReportObject


@pytest.fixture(autouse=True)
def _reset_globals():
    """Isolate cached configuration and the global materializer registry."""
    clear_config_cache()
    reset_materializer_registry()
    yield
    clear_config_cache()
    reset_materializer_registry()


@pytest.fixture
def settings() -> AppConfig:
    """Default settings (no YAML file)."""
    return AppConfig()


# ---------------------------------------------------------------------------
# Payload Factories
# ---------------------------------------------------------------------------


@pytest.fixture
def payload_factory() -> Callable[..., TabularPayload]:
    """Factory for payloads from ``(variable, row_type, label, **values)`` rows.

    Returns:
        Function taking row dicts and returning a TabularPayload.
    """

    def _create(rows: list[dict[str, Any]], columns: list[str] | None = None) -> TabularPayload:
        return TabularPayload.from_records(rows, columns=columns)

    return _create


@pytest.fixture
def stat_payload(payload_factory) -> TabularPayload:
    """Payload with columns label, row_type, variable, stat."""
    return payload_factory(
        [
            {"label": "Age", "row_type": "label", "variable": "age", "stat": 47.0},
            {"label": "Grade", "row_type": "label", "variable": "grade", "stat": None},
            {"label": "I", "row_type": "level", "variable": "grade", "stat": 0.02},
            {"label": "II", "row_type": "level", "variable": "grade", "stat": 0.5},
        ],
        columns=["label", "row_type", "variable", "stat"],
    )


@pytest.fixture
def stat_report(stat_payload, settings) -> ReportObject:
    """Fresh report over stat_payload."""
    return ReportObject(stat_payload, settings=settings)


@pytest.fixture
def wide_payload(payload_factory) -> TabularPayload:
    """Payload with two value columns (estimate, p_value)."""
    return payload_factory(
        [
            {"label": "Age", "row_type": "label", "variable": "age", "estimate": 1.02, "p_value": 0.0004},
            {"label": "Marker", "row_type": "label", "variable": "marker", "estimate": 0.87, "p_value": 0.31},
        ],
        columns=["label", "row_type", "variable", "estimate", "p_value"],
    )


@pytest.fixture
def wide_report(wide_payload, settings) -> ReportObject:
    """Fresh report over wide_payload."""
    return ReportObject(wide_payload, settings=settings)
