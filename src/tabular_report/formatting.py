"""
Format Functions
================

Derived registry of per-column format functions plus a few built-in
formatters for common statistics.

Format functions take one cell value and return display text. They
must not fail on missing input; the built-ins return a placeholder for
None and NaN.
"""

from collections.abc import Iterator, Mapping
from typing import Any

import pandas as pd
from pandas.api.types import is_scalar

from tabular_report.metadata import ColumnMetadataTable, FormatFunction


class FormatFunctionRegistry(Mapping[str, FormatFunction]):
    """Read-only mapping of column name to format function.

    Built by derive_registry; edits belong on the metadata table, so the
    registry rejects item assignment.
    """

    def __init__(self, functions: Mapping[str, FormatFunction] | None = None):
        self._functions: dict[str, FormatFunction] = dict(functions or {})

    def __getitem__(self, column: str) -> FormatFunction:
        return self._functions[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __setitem__(self, column: str, fn: FormatFunction) -> None:
        raise TypeError("FormatFunctionRegistry is read-only; set format_fn on the metadata")

    def __repr__(self) -> str:
        return f"FormatFunctionRegistry(columns={list(self._functions)})"


def derive_registry(metadata: ColumnMetadataTable) -> FormatFunctionRegistry:
    """Build the registry from every record with a format function."""
    return FormatFunctionRegistry(
        {record.column: record.format_fn for record in metadata if record.format_fn is not None}
    )


def is_missing(value: Any) -> bool:
    """Check for None, NaN, NaT and pd.NA."""
    if value is None:
        return True
    if not is_scalar(value):
        return False
    return bool(pd.isna(value))


def _as_float(value: Any) -> float | None:
    if is_missing(value) or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def style_number(digits: int = 0, placeholder: str = "") -> FormatFunction:
    """Round to ``digits`` decimals with thousands separators."""

    def _format(value: Any) -> str:
        number = _as_float(value)
        if number is None:
            return placeholder if is_missing(value) else str(value)
        return f"{number:,.{digits}f}"

    return _format


def style_percent(digits: int = 0, placeholder: str = "") -> FormatFunction:
    """Format a proportion (0.123) as a percentage (12%)."""

    def _format(value: Any) -> str:
        number = _as_float(value)
        if number is None:
            return placeholder if is_missing(value) else str(value)
        return f"{number * 100:.{digits}f}%"

    return _format


def style_pvalue(digits: int = 3, placeholder: str = "") -> FormatFunction:
    """Format p-values, collapsing tiny and near-one values to bounds."""
    lower = 10 ** -digits
    upper = 1 - lower

    def _format(value: Any) -> str:
        number = _as_float(value)
        if number is None:
            return placeholder if is_missing(value) else str(value)
        if number < lower:
            return f"<{lower:.{digits}f}"
        if number > upper:
            return f">{upper:.{digits}f}"
        return f"{number:.{digits}f}"

    return _format


def style_ratio(digits: int = 2, placeholder: str = "") -> FormatFunction:
    """Format ratios (odds, hazard) so values near 1 keep enough precision."""

    def _format(value: Any) -> str:
        number = _as_float(value)
        if number is None:
            return placeholder if is_missing(value) else str(value)
        # one extra digit below 1
        shown = digits + 1 if abs(number) < 1 else digits
        return f"{number:.{shown}f}"

    return _format
