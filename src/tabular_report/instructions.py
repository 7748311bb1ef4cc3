"""
Render Instructions
===================

Backend-specific render instruction records and the per-backend lists
compiled from column metadata.

This module provides:
- Backend: Supported rendering backends
- Operation: Tag naming the kind of each instruction
- LabelMode: How a renderer interprets a header label string
- Instruction records: InitializeTable, SetLabel, ApplyFormat, ApplyBold,
  AbbreviationFootnote, ColumnFootnote
- BackendDialect: Maps label interpreters onto a backend's label modes
- RenderInstructionLists: Immutable instruction lists keyed by backend

Every list starts with InitializeTable. The remaining instructions are
replayed in list order against the payload by a materializer.
"""

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union


class Backend(str, Enum):
    """Rendering backends that instruction lists are compiled for."""

    HTML = "html"
    MARKDOWN = "markdown"

    def __str__(self) -> str:
        return self.value


class RenderInterpreter(str, Enum):
    """How the author intends a header label string to be read."""

    TEXT = "text"
    MARKDOWN = "markdown"
    HTML = "html"

    def __str__(self) -> str:
        return self.value


class Operation(str, Enum):
    """Instruction tags, listed in replay order."""

    INITIALIZE = "initialize"
    SET_LABEL = "set_label"
    APPLY_FORMAT = "apply_format"
    APPLY_BOLD = "apply_bold"
    ABBREVIATION_FOOTNOTE = "abbreviation_footnote"
    COLUMN_FOOTNOTE = "column_footnote"

    def __str__(self) -> str:
        return self.value


class LabelMode(str, Enum):
    """Backend sub-operation used to place a label into a header cell."""

    ESCAPED = "escaped"
    VERBATIM = "verbatim"
    MARKDOWN = "markdown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class InitializeTable:
    """Bind a renderable to the payload, showing ``columns`` in order."""

    operation: ClassVar[Operation] = Operation.INITIALIZE

    columns: tuple[str, ...]

    @property
    def targets(self) -> tuple[str, ...]:
        return self.columns


@dataclass(frozen=True)
class SetLabel:
    """Set the header label of one column."""

    operation: ClassVar[Operation] = Operation.SET_LABEL

    column: str
    label: str
    mode: LabelMode = LabelMode.ESCAPED

    @property
    def targets(self) -> tuple[str, ...]:
        return (self.column,)


@dataclass(frozen=True)
class ApplyFormat:
    """Format every cell of one column through ``format_fn``."""

    operation: ClassVar[Operation] = Operation.APPLY_FORMAT

    column: str
    format_fn: Callable[[Any], str]

    @property
    def targets(self) -> tuple[str, ...]:
        return (self.column,)


@dataclass(frozen=True)
class ApplyBold:
    """Bold cells of one column whose numeric value is below ``threshold``."""

    operation: ClassVar[Operation] = Operation.APPLY_BOLD

    column: str
    threshold: float

    @property
    def targets(self) -> tuple[str, ...]:
        return (self.column,)


@dataclass(frozen=True)
class AbbreviationFootnote:
    """Single table note collating abbreviation texts from all columns."""

    operation: ClassVar[Operation] = Operation.ABBREVIATION_FOOTNOTE

    texts: tuple[str, ...]
    text: str

    @property
    def targets(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class ColumnFootnote:
    """Footnotes anchored to one column header."""

    operation: ClassVar[Operation] = Operation.COLUMN_FOOTNOTE

    column: str
    texts: tuple[str, ...]

    @property
    def targets(self) -> tuple[str, ...]:
        return (self.column,)


Instruction = Union[
    InitializeTable,
    SetLabel,
    ApplyFormat,
    ApplyBold,
    AbbreviationFootnote,
    ColumnFootnote,
]


@dataclass(frozen=True)
class BackendDialect:
    """Per-backend choice of label sub-operation for each interpreter."""

    backend: Backend
    label_modes: Mapping[RenderInterpreter, LabelMode]

    def label_mode(self, interpreter: RenderInterpreter) -> LabelMode:
        return self.label_modes.get(interpreter, LabelMode.ESCAPED)


DIALECTS: dict[Backend, BackendDialect] = {
    Backend.HTML: BackendDialect(
        backend=Backend.HTML,
        label_modes={
            RenderInterpreter.TEXT: LabelMode.ESCAPED,
            RenderInterpreter.MARKDOWN: LabelMode.MARKDOWN,
            RenderInterpreter.HTML: LabelMode.VERBATIM,
        },
    ),
    # Markdown cells accept both markdown and inline HTML as-is
    Backend.MARKDOWN: BackendDialect(
        backend=Backend.MARKDOWN,
        label_modes={
            RenderInterpreter.TEXT: LabelMode.ESCAPED,
            RenderInterpreter.MARKDOWN: LabelMode.VERBATIM,
            RenderInterpreter.HTML: LabelMode.VERBATIM,
        },
    ),
}


def get_dialect(backend: Backend | str) -> BackendDialect:
    """Look up the dialect for a backend name or enum member."""
    return DIALECTS[Backend(backend)]


class RenderInstructionLists(Mapping[Backend, tuple[Instruction, ...]]):
    """Immutable mapping of backend to its ordered instruction list.

    Instances are produced wholesale by the sync engine and never
    patched; two instances compare equal when every backend's list
    is equal.
    """

    def __init__(self, lists: Mapping[Backend, tuple[Instruction, ...]] | None = None):
        self._lists: dict[Backend, tuple[Instruction, ...]] = {}
        for backend, instructions in (lists or {}).items():
            instructions = tuple(instructions)
            if instructions and not isinstance(instructions[0], InitializeTable):
                raise ValueError(
                    f"Instruction list for '{backend}' must start with InitializeTable"
                )
            self._lists[Backend(backend)] = instructions

    @classmethod
    def empty(cls) -> "RenderInstructionLists":
        return cls()

    def __getitem__(self, backend: Backend | str) -> tuple[Instruction, ...]:
        try:
            return self._lists[Backend(backend)]
        except ValueError:
            raise KeyError(backend) from None

    def __iter__(self) -> Iterator[Backend]:
        return iter(self._lists)

    def __len__(self) -> int:
        return len(self._lists)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RenderInstructionLists):
            return self._lists == other._lists
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._lists.items()))

    def __repr__(self) -> str:
        sizes = ", ".join(f"{b.value}={len(i)}" for b, i in self._lists.items())
        return f"RenderInstructionLists({sizes})"

    @property
    def backends(self) -> list[Backend]:
        return list(self._lists)

    def for_backend(self, backend: Backend | str) -> tuple[Instruction, ...]:
        """Get one backend's list, raising KeyError for uncompiled backends."""
        return self[backend]

    def operations(self, backend: Backend | str) -> list[Operation]:
        """Get the operation tags of one backend's list, in replay order."""
        return [instruction.operation for instruction in self[backend]]
