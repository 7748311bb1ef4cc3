"""
Header Sync Engine
==================

Reconciles the column metadata table against the payload's columns and
regenerates every backend's render instruction list from scratch.

Compilation order is fixed for every backend:

1. InitializeTable with the visible columns
2. SetLabel per visible column, payload order
3. ApplyFormat per column with a format function
4. ApplyBold per column with a bold threshold
5. one AbbreviationFootnote (if any), then ColumnFootnote per column

Renderers rely on labels being placed before formatting, bolding and
footnotes are applied. The compiled lists depend only on the payload
columns and the metadata, never on the order in which metadata fields
were set.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from tabular_report.core.app_config import AppConfig, FootnoteConfig, get_app_config
from tabular_report.core.exceptions import DesynchronizationError, DuplicateColumnError
from tabular_report.formatting import FormatFunctionRegistry, derive_registry
from tabular_report.instructions import (
    AbbreviationFootnote,
    ApplyBold,
    ApplyFormat,
    Backend,
    ColumnFootnote,
    InitializeTable,
    Instruction,
    RenderInstructionLists,
    SetLabel,
    get_dialect,
)
from tabular_report.metadata import ColumnMetadata, ColumnMetadataTable
from tabular_report.payload import TabularPayload, find_duplicates

if TYPE_CHECKING:
    from tabular_report.report import ReportObject

logger = logging.getLogger(__name__)


def _unique(texts: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for text in texts:
        seen.setdefault(text, None)
    return list(seen)


def fill_missing(
    metadata: ColumnMetadataTable,
    payload_columns: Sequence[str],
) -> ColumnMetadataTable:
    """Add default records for payload columns the metadata does not track.

    Existing records keep their order and content; new records follow in
    payload column order with ``hide=True``. Calling it again with the
    same columns returns an equal table.

    Args:
        metadata: Current metadata table (not modified)
        payload_columns: Authoritative payload column names

    Returns:
        New metadata table covering every payload column

    Raises:
        DuplicateColumnError: If payload_columns repeats a name
    """
    duplicates = find_duplicates(payload_columns)
    if duplicates:
        raise DuplicateColumnError(duplicates)

    filled = metadata.copy()
    added = [column for column in payload_columns if column not in filled]
    for column in added:
        filled.add(ColumnMetadata(column=column))

    if added:
        logger.debug(f"Tracked {len(added)} new column(s): {added}")
    return filled


def set_header(metadata: ColumnMetadataTable, column: str, label: str) -> None:
    """Assign a display label, revealing the column unless hidden explicitly.

    Raises:
        ColumnNotFoundError: If the column has no metadata record
    """
    record = metadata.get(column)
    record.label = label
    if record.hide and not record.hide_overridden:
        record.hide = False


def check_synchronized(payload_columns: Sequence[str], metadata: ColumnMetadataTable) -> None:
    """Raise DesynchronizationError unless metadata covers exactly the payload columns."""
    known = set(payload_columns)
    orphaned = [column for column in metadata.columns if column not in known]
    untracked = [column for column in payload_columns if column not in metadata]
    if orphaned or untracked:
        logger.error(
            f"Metadata out of sync with payload | orphaned={orphaned} | untracked={untracked}"
        )
        raise DesynchronizationError(orphaned=orphaned, untracked=untracked)


def _compile_backend(
    backend: Backend,
    records: list[ColumnMetadata],
    footnotes: FootnoteConfig,
) -> tuple[Instruction, ...]:
    dialect = get_dialect(backend)
    visible = [record for record in records if not record.hide]

    instructions: list[Instruction] = [
        InitializeTable(columns=tuple(record.column for record in visible))
    ]
    instructions.extend(
        SetLabel(
            column=record.column,
            label=record.label if record.label is not None else record.column,
            mode=dialect.label_mode(record.interpreter),
        )
        for record in visible
    )
    instructions.extend(
        ApplyFormat(column=record.column, format_fn=record.format_fn)
        for record in records
        if record.format_fn is not None
    )
    instructions.extend(
        ApplyBold(column=record.column, threshold=record.bold_threshold)
        for record in records
        if record.bold_threshold is not None
    )

    abbreviations = _unique(
        text for record in records for text in record.footnote_abbreviations
    )
    if abbreviations:
        instructions.append(
            AbbreviationFootnote(
                texts=tuple(abbreviations),
                text=footnotes.abbreviation_prefix
                + footnotes.abbreviation_separator.join(abbreviations),
            )
        )
    instructions.extend(
        ColumnFootnote(column=record.column, texts=tuple(_unique(record.footnotes)))
        for record in records
        if record.footnotes
    )
    return tuple(instructions)


def compile_instructions(
    payload_columns: Sequence[str],
    metadata: ColumnMetadataTable,
    backends: Iterable[Backend] = (Backend.HTML, Backend.MARKDOWN),
    footnotes: FootnoteConfig | None = None,
) -> RenderInstructionLists:
    """Regenerate instruction lists for every backend.

    Pure function of the payload columns and the metadata. Records are
    visited in payload column order regardless of metadata order.

    Raises:
        DesynchronizationError: If metadata and payload columns differ
    """
    check_synchronized(payload_columns, metadata)
    footnotes = footnotes or FootnoteConfig()
    records = [metadata.get(column) for column in payload_columns]

    lists = {
        Backend(backend): _compile_backend(Backend(backend), records, footnotes)
        for backend in backends
    }
    for backend, instructions in lists.items():
        logger.debug(f"Compiled {len(instructions)} instruction(s) for backend '{backend}'")
    return RenderInstructionLists(lists)


class HeaderSyncEngine:
    """Keeps metadata, instruction lists and format registry consistent.

    The engine holds no report state; it is bound only to settings so
    one instance can serve any number of reports.

    Example:
        >>> engine = HeaderSyncEngine()
        >>> metadata = engine.fill_missing(ColumnMetadataTable(), payload.columns)
        >>> lists = engine.compile(payload, metadata)
    """

    def __init__(self, settings: AppConfig | None = None):
        self.settings = settings or get_app_config()

    @property
    def backends(self) -> list[Backend]:
        return list(self.settings.rendering.backends)

    def fill_missing(
        self,
        metadata: ColumnMetadataTable,
        payload_columns: Sequence[str],
    ) -> ColumnMetadataTable:
        return fill_missing(metadata, payload_columns)

    def set_header(self, metadata: ColumnMetadataTable, column: str, label: str) -> None:
        set_header(metadata, column, label)

    def compile(
        self,
        payload: TabularPayload,
        metadata: ColumnMetadataTable,
    ) -> tuple[RenderInstructionLists, FormatFunctionRegistry]:
        """Compile instruction lists and the format registry for a payload."""
        lists = compile_instructions(
            payload.columns,
            metadata,
            backends=self.backends,
            footnotes=self.settings.footnotes,
        )
        return lists, derive_registry(metadata)

    def sync_render_instructions(self, report: "ReportObject") -> RenderInstructionLists:
        """Track new payload columns, then regenerate a report's instruction lists.

        On failure the report's previous metadata, lists and registry stay in place.

        Raises:
            DesynchronizationError: If metadata names columns the payload lost
        """
        payload = report.payload
        metadata = self.fill_missing(report.metadata, payload.columns)
        lists, registry = self.compile(payload, metadata)
        report._commit(metadata, lists, registry)
        return lists
