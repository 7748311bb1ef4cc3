"""
Report Object
=============

Aggregate owning a payload, its column metadata, the derived format
registry and the compiled render instruction lists.

Every mutation follows the same path: validate the target columns,
apply the change to a copy of the metadata, recompile, then commit all
three derived structures together. A failed call leaves the report as
it was.

Example usage:
    from tabular_report import ReportObject, TabularPayload, style_pvalue

    report = ReportObject(TabularPayload.from_records(rows))
    report.set_column_header("stat", "**N (%)**", interpreter="markdown")
    report.set_column_format("p_value", style_pvalue())
    report.set_column_bold_threshold("p_value", 0.05)
    report.add_footnote("stat", "CI = Confidence Interval", is_abbreviation=True)

    html = report.materialize("html")
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

import pandas as pd

from tabular_report.core.app_config import AppConfig, get_app_config
from tabular_report.core.exceptions import ColumnNotFoundError, RowNotFoundError
from tabular_report.formatting import FormatFunctionRegistry, is_missing
from tabular_report.instructions import Backend, RenderInstructionLists, RenderInterpreter
from tabular_report.metadata import ColumnMetadataTable, FormatFunction
from tabular_report.payload import (
    LABEL_COLUMN,
    ROW_TYPE_COLUMN,
    ROW_TYPE_LABEL,
    ROW_TYPE_LEVEL,
    VARIABLE_COLUMN,
    TabularPayload,
)
from tabular_report.sync import HeaderSyncEngine, fill_missing, set_header

logger = logging.getLogger(__name__)


class ReportObject:
    """Declarative table report: payload plus per-column rendering rules.

    Attributes:
        settings: Package settings used for compilation and rendering
    """

    def __init__(
        self,
        payload: TabularPayload | pd.DataFrame | None = None,
        settings: AppConfig | None = None,
        engine: HeaderSyncEngine | None = None,
    ):
        self.settings = settings or get_app_config()
        self._engine = engine or HeaderSyncEngine(self.settings)
        self._payload: TabularPayload | None = None
        self._metadata = ColumnMetadataTable()
        self._render_instructions = RenderInstructionLists.empty()
        self._format_functions = FormatFunctionRegistry()
        if payload is not None:
            self.attach_payload(payload)

    @classmethod
    def from_metadata(
        cls,
        payload: TabularPayload,
        metadata: ColumnMetadataTable,
        settings: AppConfig | None = None,
    ) -> "ReportObject":
        """Build a report around existing metadata, filling gaps and compiling.

        Raises:
            DesynchronizationError: If metadata names columns the payload lacks
        """
        report = cls(settings=settings)
        metadata = fill_missing(metadata, payload.columns)
        lists, registry = report._engine.compile(payload, metadata)
        report._payload = payload
        report._commit(metadata, lists, registry)
        return report

    def __repr__(self) -> str:
        columns = self._payload.columns if self._payload is not None else []
        return f"ReportObject(columns={columns}, backends={self._render_instructions.backends})"

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def payload(self) -> TabularPayload:
        return self._require_payload()

    @property
    def metadata(self) -> ColumnMetadataTable:
        """Get a copy of the column metadata; use the set_* methods to change it."""
        return self._metadata.copy()

    @property
    def render_instructions(self) -> RenderInstructionLists:
        return self._render_instructions

    @property
    def format_functions(self) -> FormatFunctionRegistry:
        return self._format_functions

    @property
    def engine(self) -> HeaderSyncEngine:
        return self._engine

    def show_header_names(self) -> list[tuple[str, str | None, bool]]:
        """List ``(column, label, hide)`` for every column in payload order."""
        payload = self._require_payload()
        return [
            (record.column, record.label, record.hide)
            for record in (self._metadata.get(c) for c in payload.columns if c in self._metadata)
        ]

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def attach_payload(self, payload: TabularPayload | pd.DataFrame) -> None:
        """Bind a payload, resetting metadata to defaults for its columns."""
        if isinstance(payload, pd.DataFrame):
            payload = TabularPayload(payload)

        metadata = fill_missing(ColumnMetadataTable(), payload.columns)
        lists, registry = self._engine.compile(payload, metadata)
        self._payload = payload
        self._commit(metadata, lists, registry)
        logger.debug(f"Attached payload with {len(payload.columns)} column(s)")

    def sync_render_instructions(self) -> RenderInstructionLists:
        """Track any new payload columns, then regenerate every instruction list.

        Raises:
            DesynchronizationError: If metadata names columns the payload lost
        """
        self._require_payload()
        return self._engine.sync_render_instructions(self)

    def set_column_header(
        self,
        column: str,
        label: str,
        interpreter: RenderInterpreter | str | None = None,
    ) -> None:
        """Assign a display label; unhides the column unless hidden explicitly."""

        def _apply(metadata: ColumnMetadataTable) -> None:
            set_header(metadata, column, label)
            if interpreter is not None:
                metadata.get(column).interpreter = RenderInterpreter(interpreter)

        self._update([column], _apply)

    def set_column_headers(
        self,
        labels: Mapping[str, str],
        interpreter: RenderInterpreter | str | None = None,
    ) -> None:
        """Assign several labels with a single recompilation."""

        def _apply(metadata: ColumnMetadataTable) -> None:
            for column, label in labels.items():
                set_header(metadata, column, label)
                if interpreter is not None:
                    metadata.get(column).interpreter = RenderInterpreter(interpreter)

        self._update(list(labels), _apply)

    def set_column_hide(self, column: str, hide: bool) -> None:
        """Explicitly show or hide a column; later labels do not unhide it."""

        def _apply(metadata: ColumnMetadataTable) -> None:
            record = metadata.get(column)
            record.hide = hide
            record.hide_overridden = True

        self._update([column], _apply)

    def set_column_format(self, column: str, fn: FormatFunction | None) -> None:
        """Set (or clear with None) the column's format function."""
        if fn is not None and not callable(fn):
            raise TypeError(f"Format function for '{column}' must be callable")

        def _apply(metadata: ColumnMetadataTable) -> None:
            metadata.get(column).format_fn = fn

        self._update([column], _apply)

    def set_column_bold_threshold(self, column: str, threshold: float | None) -> None:
        """Bold cells whose value is below ``threshold`` (None clears it)."""

        def _apply(metadata: ColumnMetadataTable) -> None:
            metadata.get(column).bold_threshold = (
                None if threshold is None else float(threshold)
            )

        self._update([column], _apply)

    def add_footnote(self, column: str, text: str, is_abbreviation: bool = False) -> None:
        """Attach a footnote to a column, or an abbreviation to the table note."""

        def _apply(metadata: ColumnMetadataTable) -> None:
            record = metadata.get(column)
            target = record.footnote_abbreviations if is_abbreviation else record.footnotes
            target.append(text)

        self._update([column], _apply)

    def remove_footnotes(self, column: str, abbreviations: bool = False) -> None:
        """Drop a column's footnotes (or its abbreviation notes)."""

        def _apply(metadata: ColumnMetadataTable) -> None:
            record = metadata.get(column)
            if abbreviations:
                record.footnote_abbreviations.clear()
            else:
                record.footnotes.clear()

        self._update([column], _apply)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def inline_value(self, variable: str, column: str, level: str | None = None) -> str:
        """Pull one formatted cell for use in prose.

        Args:
            variable: Value of the ``variable`` column to look up
            column: Column to read
            level: For categorical variables, the ``label`` of the level row

        Raises:
            ColumnNotFoundError: If the column is not in the payload
            RowNotFoundError: If no row matches
        """
        payload = self._require_payload()
        if column not in payload:
            raise ColumnNotFoundError(column, payload.columns)

        candidates = [row for row in payload.rows() if row[VARIABLE_COLUMN] == variable]
        if level is not None:
            candidates = [
                row for row in candidates
                if row[ROW_TYPE_COLUMN] == ROW_TYPE_LEVEL and str(row[LABEL_COLUMN]) == level
            ]
        else:
            label_rows = [row for row in candidates if row[ROW_TYPE_COLUMN] == ROW_TYPE_LABEL]
            candidates = label_rows or candidates
        if not candidates:
            raise RowNotFoundError(variable, level)

        value = candidates[0][column]
        fn = self._format_functions.get(column)
        if fn is not None:
            return fn(value)
        if is_missing(value):
            return self.settings.rendering.missing_placeholder
        return str(value)

    def materialize(self, backend: Backend | str, registry: Any = None) -> Any:
        """Render through the materializer registered for ``backend``."""
        from tabular_report.renderers import materialize

        return materialize(
            self._render_instructions,
            self._require_payload(),
            backend,
            registry=registry,
            settings=self.settings,
        )

    def copy(self) -> "ReportObject":
        """Independent copy sharing only format function references."""
        clone = ReportObject(settings=self.settings, engine=self._engine)
        if self._payload is not None:
            clone._payload = self._payload.copy()
        clone._commit(self._metadata.copy(), self._render_instructions, self._format_functions)
        return clone

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_payload(self) -> TabularPayload:
        if self._payload is None:
            raise RuntimeError("No payload attached; call attach_payload() first")
        return self._payload

    def _update(
        self,
        columns: list[str],
        mutate: Callable[[ColumnMetadataTable], None],
    ) -> None:
        payload = self._require_payload()
        for column in columns:
            if column not in payload:
                raise ColumnNotFoundError(column, payload.columns)

        metadata = fill_missing(self._metadata, payload.columns)
        mutate(metadata)
        lists, registry = self._engine.compile(payload, metadata)
        self._commit(metadata, lists, registry)

    def _commit(
        self,
        metadata: ColumnMetadataTable,
        lists: RenderInstructionLists,
        registry: FormatFunctionRegistry,
    ) -> None:
        self._metadata = metadata
        self._render_instructions = lists
        self._format_functions = registry
