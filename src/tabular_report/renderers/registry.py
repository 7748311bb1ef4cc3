"""
Materializer Registry
=====================

Central registry mapping each backend to the materializer that replays
its instruction lists.
"""

from tabular_report.core.exceptions import UnknownBackendError
from tabular_report.instructions import Backend
from tabular_report.renderers.html import HtmlMaterializer
from tabular_report.renderers.markdown import MarkdownMaterializer
from tabular_report.renderers.protocol import Materializer


class MaterializerRegistry:
    """Registry of materializers keyed by backend.

    Starts with the built-in HTML and Markdown materializers.

    Example:
        >>> registry = MaterializerRegistry()
        >>> registry.register(Backend.HTML, MyHtmlMaterializer(), replace=True)
        >>> registry.get(Backend.HTML)
    """

    def __init__(self) -> None:
        self._materializers: dict[Backend, Materializer] = {}
        self.register(Backend.HTML, HtmlMaterializer())
        self.register(Backend.MARKDOWN, MarkdownMaterializer())

    def register(
        self,
        backend: Backend | str,
        materializer: Materializer,
        replace: bool = False,
    ) -> None:
        """Register a materializer.

        Raises:
            ValueError: If the backend already has one and replace=False
        """
        backend = Backend(backend)
        if backend in self._materializers and not replace:
            raise ValueError(
                f"Materializer for '{backend}' already registered. "
                f"Use replace=True to override."
            )
        self._materializers[backend] = materializer

    def unregister(self, backend: Backend | str) -> bool:
        """Remove a backend's materializer; False if none was registered."""
        return self._materializers.pop(Backend(backend), None) is not None

    def get(self, backend: Backend | str) -> Materializer:
        """Get the materializer for a backend.

        Raises:
            UnknownBackendError: If the name is not a backend or has no materializer
        """
        try:
            return self._materializers[Backend(backend)]
        except (KeyError, ValueError):
            raise UnknownBackendError(str(backend)) from None

    def list_backends(self) -> list[Backend]:
        return list(self._materializers)

    def __len__(self) -> int:
        return len(self._materializers)

    def __contains__(self, backend: object) -> bool:
        try:
            return Backend(backend) in self._materializers
        except ValueError:
            return False


_global_registry: MaterializerRegistry | None = None


def get_materializer_registry() -> MaterializerRegistry:
    """Get the global materializer registry."""
    global _global_registry
    if _global_registry is None:
        _global_registry = MaterializerRegistry()
    return _global_registry


def reset_materializer_registry() -> None:
    """Reset the global materializer registry.

    Primarily for testing purposes.
    """
    global _global_registry
    _global_registry = None
