"""
Tabular Payload
===============

Row-oriented data table displayed by a report.

The payload wraps a pandas DataFrame and enforces the structural
contract: the columns ``label``, ``row_type`` and ``variable`` must be
present and column names must be unique. Everything else is
author-defined value columns.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pandas as pd

from tabular_report.core.exceptions import (
    ColumnNotFoundError,
    DuplicateColumnError,
    PayloadValidationError,
)

logger = logging.getLogger(__name__)

LABEL_COLUMN = "label"
ROW_TYPE_COLUMN = "row_type"
VARIABLE_COLUMN = "variable"
STRUCTURAL_COLUMNS: tuple[str, ...] = (LABEL_COLUMN, ROW_TYPE_COLUMN, VARIABLE_COLUMN)

ROW_TYPE_LABEL = "label"
ROW_TYPE_LEVEL = "level"


def find_duplicates(names: Iterable[str]) -> list[str]:
    """Return names occurring more than once, in first-seen order."""
    counts = Counter(names)
    return [name for name, count in counts.items() if count > 1]


class TabularPayload:
    """Data table carrying structural and value columns.

    Example:
        >>> payload = TabularPayload.from_records([
        ...     {"variable": "age", "row_type": "label", "label": "Age", "stat": "47"},
        ... ])
        >>> payload.columns
        ['variable', 'row_type', 'label', 'stat']
    """

    def __init__(self, frame: pd.DataFrame):
        self._frame = self._validate(frame)

    @classmethod
    def from_records(
        cls,
        records: Sequence[Mapping[str, Any]],
        columns: Sequence[str] | None = None,
    ) -> "TabularPayload":
        """Build a payload from row dicts, optionally fixing column order."""
        frame = pd.DataFrame.from_records(list(records), columns=columns)
        return cls(frame)

    @staticmethod
    def _validate(frame: pd.DataFrame) -> pd.DataFrame:
        names = [str(name) for name in frame.columns]
        duplicates = find_duplicates(names)
        if duplicates:
            raise DuplicateColumnError(duplicates)

        missing = [name for name in STRUCTURAL_COLUMNS if name not in names]
        if missing:
            raise PayloadValidationError(
                f"Payload is missing required columns: {', '.join(missing)}",
                missing=missing,
            )

        frame = frame.copy()
        frame.columns = names
        return frame.reset_index(drop=True)

    @property
    def frame(self) -> pd.DataFrame:
        """Get a copy of the underlying DataFrame."""
        return self._frame.copy()

    @property
    def columns(self) -> list[str]:
        return list(self._frame.columns)

    @property
    def value_columns(self) -> list[str]:
        """Columns that are not part of the structural contract."""
        return [c for c in self._frame.columns if c not in STRUCTURAL_COLUMNS]

    def __len__(self) -> int:
        return len(self._frame)

    def __contains__(self, column: object) -> bool:
        return column in self._frame.columns

    def __repr__(self) -> str:
        return f"TabularPayload(rows={len(self)}, columns={self.columns})"

    def column_values(self, column: str) -> list[Any]:
        """Get the values of one column in row order."""
        if column not in self:
            raise ColumnNotFoundError(column, self.columns)
        return self._frame[column].tolist()

    def rows(self) -> list[dict[str, Any]]:
        """Get all rows as dicts in row order."""
        return self._frame.to_dict(orient="records")

    def add_column(self, name: str, values: Sequence[Any] | Any) -> None:
        """Append a value column.

        Raises:
            DuplicateColumnError: If the column already exists
        """
        if name in self:
            raise DuplicateColumnError([name])
        self._frame[name] = values
        logger.debug(f"Added payload column '{name}'")

    def append_rows(self, rows: Sequence[Mapping[str, Any]]) -> None:
        """Append rows; unknown keys raise, missing keys become null."""
        unknown = sorted({key for row in rows for key in row} - set(self.columns))
        if unknown:
            raise ColumnNotFoundError(unknown[0], self.columns)
        addition = pd.DataFrame.from_records(list(rows), columns=self.columns)
        self._frame = pd.concat([self._frame, addition], ignore_index=True)

    def replace_frame(self, frame: pd.DataFrame) -> None:
        """Swap in a transformed DataFrame, re-checking the structural contract."""
        self._frame = self._validate(frame)

    def copy(self) -> "TabularPayload":
        return TabularPayload(self._frame)
