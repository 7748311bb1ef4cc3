"""
Instruction Replay
==================

Shared replay loop for the built-in materializers.

Instructions are applied in list order to a TableDraft. Backends only
decide how a label is placed into a header cell and how the finished
draft is written out.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from tabular_report.core.app_config import AppConfig
from tabular_report.core.exceptions import ColumnNotFoundError
from tabular_report.formatting import is_missing
from tabular_report.instructions import (
    AbbreviationFootnote,
    ApplyBold,
    ApplyFormat,
    Backend,
    ColumnFootnote,
    InitializeTable,
    Instruction,
    LabelMode,
    SetLabel,
)
from tabular_report.metadata import FormatFunction
from tabular_report.payload import LABEL_COLUMN, ROW_TYPE_COLUMN, ROW_TYPE_LEVEL, TabularPayload

logger = logging.getLogger(__name__)


@dataclass
class TableDraft:
    """Renderable state accumulated while replaying instructions."""

    columns: list[str]
    labels: dict[str, str] = field(default_factory=dict)
    formatters: dict[str, FormatFunction] = field(default_factory=dict)
    bold_thresholds: dict[str, float] = field(default_factory=dict)
    column_notes: dict[str, list[str]] = field(default_factory=dict)
    abbreviation_note: str | None = None

    def numbered_notes(self) -> tuple[list[str], dict[str, list[int]]]:
        """Number column footnotes for visible columns, sharing numbers for equal texts.

        Returns:
            (note texts in number order, column -> note numbers)
        """
        texts: list[str] = []
        markers: dict[str, list[int]] = {}
        for column, notes in self.column_notes.items():
            if column not in self.columns:
                continue
            for note in notes:
                if note not in texts:
                    texts.append(note)
                markers.setdefault(column, []).append(texts.index(note) + 1)
        return texts, markers


@dataclass
class Cell:
    """One body cell ready for a template."""

    text: str
    bold: bool = False
    indent: bool = False
    formatted: bool = False


class ReplayMaterializer:
    """Base for materializers that replay into a TableDraft.

    Subclasses set ``backend`` and implement ``place_label`` and
    ``write``.
    """

    backend: Backend

    def place_label(self, label: str, mode: LabelMode) -> str:
        raise NotImplementedError

    def write(self, draft: TableDraft, rows: list[list[Cell]], settings: AppConfig) -> Any:
        raise NotImplementedError

    def materialize(
        self,
        instructions: Sequence[Instruction],
        payload: TabularPayload,
        settings: AppConfig,
    ) -> Any:
        draft = self.replay(instructions, payload)
        rows = self.body(draft, payload, settings)
        logger.debug(
            f"Materialized {len(rows)} row(s) x {len(draft.columns)} column(s) "
            f"for backend '{self.backend}'"
        )
        return self.write(draft, rows, settings)

    def replay(self, instructions: Sequence[Instruction], payload: TabularPayload) -> TableDraft:
        """Apply instructions in order, starting from InitializeTable.

        Raises:
            ValueError: If the list does not start with InitializeTable
            ColumnNotFoundError: If an instruction targets a column the payload lacks
        """
        if not instructions or not isinstance(instructions[0], InitializeTable):
            raise ValueError("Instruction list must start with InitializeTable")

        draft: TableDraft | None = None
        for instruction in instructions:
            for column in instruction.targets:
                if column not in payload:
                    raise ColumnNotFoundError(column, payload.columns)

            if isinstance(instruction, InitializeTable):
                draft = TableDraft(columns=list(instruction.columns))
            elif isinstance(instruction, SetLabel):
                draft.labels[instruction.column] = self.place_label(
                    instruction.label, instruction.mode
                )
            elif isinstance(instruction, ApplyFormat):
                draft.formatters[instruction.column] = instruction.format_fn
            elif isinstance(instruction, ApplyBold):
                draft.bold_thresholds[instruction.column] = instruction.threshold
            elif isinstance(instruction, AbbreviationFootnote):
                draft.abbreviation_note = instruction.text
            elif isinstance(instruction, ColumnFootnote):
                draft.column_notes.setdefault(instruction.column, []).extend(instruction.texts)
            else:
                raise TypeError(f"Unsupported instruction: {instruction!r}")
        return draft

    def body(self, draft: TableDraft, payload: TabularPayload, settings: AppConfig) -> list[list[Cell]]:
        rows: list[list[Cell]] = []
        for record in payload.rows():
            is_level = record.get(ROW_TYPE_COLUMN) == ROW_TYPE_LEVEL
            rows.append([
                Cell(
                    text=self.cell_text(draft, column, record[column], settings),
                    bold=self.is_bold(draft, column, record[column]),
                    indent=is_level and column == LABEL_COLUMN,
                    formatted=column in draft.formatters,
                )
                for column in draft.columns
            ])
        return rows

    @staticmethod
    def cell_text(draft: TableDraft, column: str, value: Any, settings: AppConfig) -> str:
        fn = draft.formatters.get(column)
        if fn is not None:
            return fn(value)
        if is_missing(value):
            return settings.rendering.missing_placeholder
        return str(value)

    @staticmethod
    def is_bold(draft: TableDraft, column: str, value: Any) -> bool:
        threshold = draft.bold_thresholds.get(column)
        if threshold is None or is_missing(value) or isinstance(value, bool):
            return False
        try:
            return float(value) < threshold
        except (TypeError, ValueError):
            return False
