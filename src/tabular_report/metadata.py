"""
Column Metadata
===============

Per-column rendering rules: display label, visibility, format function,
conditional-bold threshold and footnotes.

The ColumnMetadataTable is the single source of truth for how a payload
column is rendered. Instruction lists and the format registry are
derived from it.
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Any

from tabular_report.core.exceptions import ColumnNotFoundError, DuplicateColumnError
from tabular_report.instructions import RenderInterpreter

FormatFunction = Callable[[Any], str]


@dataclass
class ColumnMetadata:
    """Rendering rules for one payload column.

    Attributes:
        column: Payload column name (unique key)
        label: Display label, None until assigned
        hide: Whether the column is left out of rendered output
        hide_overridden: True once visibility was set explicitly
        interpreter: How the label string is to be read by renderers
        format_fn: Function turning a cell value into display text
        bold_threshold: Cells with a numeric value below it are bolded
        footnote_abbreviations: Abbreviation notes collated table-wide
        footnotes: Notes anchored to this column's header
    """

    column: str
    label: str | None = None
    hide: bool = True
    hide_overridden: bool = False
    interpreter: RenderInterpreter = RenderInterpreter.TEXT
    format_fn: FormatFunction | None = None
    bold_threshold: float | None = None
    footnote_abbreviations: list[str] = field(default_factory=list)
    footnotes: list[str] = field(default_factory=list)

    def copy(self) -> "ColumnMetadata":
        """Copy with fresh footnote lists; the format function is shared."""
        return replace(
            self,
            footnote_abbreviations=list(self.footnote_abbreviations),
            footnotes=list(self.footnotes),
        )


class ColumnMetadataTable:
    """Ordered collection of ColumnMetadata records keyed by column name."""

    def __init__(self, records: Iterable[ColumnMetadata] = ()):
        self._records: dict[str, ColumnMetadata] = {}
        for record in records:
            self.add(record)

    def add(self, record: ColumnMetadata) -> None:
        """Append a record.

        Raises:
            DuplicateColumnError: If a record for the column already exists
        """
        if record.column in self._records:
            raise DuplicateColumnError([record.column])
        self._records[record.column] = record

    def get(self, column: str) -> ColumnMetadata:
        """Get the record for a column.

        Raises:
            ColumnNotFoundError: If no record exists for the column
        """
        try:
            return self._records[column]
        except KeyError:
            raise ColumnNotFoundError(column, self.columns) from None

    @property
    def columns(self) -> list[str]:
        return list(self._records)

    @property
    def records(self) -> list[ColumnMetadata]:
        return list(self._records.values())

    def __contains__(self, column: object) -> bool:
        return column in self._records

    def __iter__(self) -> Iterator[ColumnMetadata]:
        return iter(list(self._records.values()))

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ColumnMetadataTable):
            return self.records == other.records
        return NotImplemented

    def __repr__(self) -> str:
        return f"ColumnMetadataTable(columns={self.columns})"

    def copy(self) -> "ColumnMetadataTable":
        return ColumnMetadataTable(record.copy() for record in self._records.values())

    def renamed(self, mapping: dict[str, str]) -> "ColumnMetadataTable":
        """Copy with records re-keyed according to ``mapping``."""
        return ColumnMetadataTable(
            replace(record.copy(), column=mapping.get(record.column, record.column))
            for record in self._records.values()
        )
