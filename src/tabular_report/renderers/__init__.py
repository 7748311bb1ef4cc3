"""
Renderers
=========

Reference materializers that replay compiled instruction lists.

The backend is always passed explicitly; there is no process-wide
default print engine.

Example usage:
    from tabular_report.renderers import materialize

    html = materialize(report.render_instructions, report.payload, "html")
"""

from typing import Any

from tabular_report.core.app_config import AppConfig, get_app_config
from tabular_report.core.exceptions import UnknownBackendError
from tabular_report.instructions import Backend, RenderInstructionLists
from tabular_report.payload import TabularPayload
from tabular_report.renderers.html import HtmlMaterializer
from tabular_report.renderers.markdown import MarkdownMaterializer
from tabular_report.renderers.protocol import Materializer
from tabular_report.renderers.registry import (
    MaterializerRegistry,
    get_materializer_registry,
    reset_materializer_registry,
)


def materialize(
    instructions: RenderInstructionLists,
    payload: TabularPayload,
    backend: Backend | str,
    registry: MaterializerRegistry | None = None,
    settings: AppConfig | None = None,
) -> Any:
    """Replay one backend's instruction list against the payload.

    Raises:
        UnknownBackendError: If the backend has no compiled list or no materializer
    """
    registry = registry or get_materializer_registry()
    materializer = registry.get(backend)
    try:
        backend_instructions = instructions.for_backend(backend)
    except KeyError:
        raise UnknownBackendError(str(backend)) from None
    return materializer.materialize(backend_instructions, payload, settings or get_app_config())


__all__ = [
    "HtmlMaterializer",
    "MarkdownMaterializer",
    "Materializer",
    "MaterializerRegistry",
    "get_materializer_registry",
    "materialize",
    "reset_materializer_registry",
]
