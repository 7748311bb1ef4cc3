"""
Materializer Protocol
=====================

Protocol for renderers that replay an instruction list against a
payload and produce a backend-native renderable.
"""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from tabular_report.core.app_config import AppConfig
from tabular_report.instructions import Backend, Instruction
from tabular_report.payload import TabularPayload


@runtime_checkable
class Materializer(Protocol):
    """Protocol for backend renderers.

    A materializer receives the instruction list compiled for its
    backend and replays it in order. It must not reorder instructions
    and must treat the first InitializeTable as the binding to the
    payload.

    Example:
        >>> class CsvMaterializer:
        ...     @property
        ...     def backend(self) -> Backend:
        ...         return Backend.MARKDOWN
        ...
        ...     def materialize(self, instructions, payload, settings):
        ...         columns = list(instructions[0].columns)
        ...         return payload.frame[columns].to_csv(index=False)
    """

    @property
    def backend(self) -> Backend:
        """Backend whose instruction list this materializer consumes."""
        ...

    def materialize(
        self,
        instructions: Sequence[Instruction],
        payload: TabularPayload,
        settings: AppConfig,
    ) -> Any:
        """Replay instructions against the payload.

        Returns:
            Backend-native renderable (an HTML or Markdown string for the
            built-in materializers)
        """
        ...
