"""
Report Merging
==============

Combines two ReportObjects side by side or stacked.

Merges are structural: the merged report gets a fresh payload and
metadata table, and its instruction lists are compiled from scratch.
Neither input report is modified.
"""

import logging
from enum import Enum

import pandas as pd

from tabular_report.core.app_config import AppConfig
from tabular_report.core.exceptions import MergeConflictError
from tabular_report.metadata import ColumnMetadataTable
from tabular_report.payload import STRUCTURAL_COLUMNS, TabularPayload, find_duplicates
from tabular_report.report import ReportObject

logger = logging.getLogger(__name__)


class MergeStrategy(str, Enum):
    """How two reports are combined."""

    SIDE_BY_SIDE = "side_by_side"
    STACKED = "stacked"

    def __str__(self) -> str:
        return self.value


def _stack(
    report_a: ReportObject,
    report_b: ReportObject,
) -> tuple[TabularPayload, ColumnMetadataTable]:
    columns_a = report_a.payload.columns
    columns = columns_a + [c for c in report_b.payload.columns if c not in columns_a]
    frame = pd.concat(
        [report_a.payload.frame, report_b.payload.frame],
        ignore_index=True,
        sort=False,
    )[columns]

    metadata = report_a.metadata.copy()
    for record in report_b.metadata:
        if record.column not in metadata:
            metadata.add(record.copy())
    return TabularPayload(frame), metadata


def _disambiguate(
    report_a: ReportObject,
    report_b: ReportObject,
    suffixes: tuple[str, str] | None,
) -> tuple[dict[str, str], dict[str, str]]:
    values_a = report_a.payload.value_columns
    values_b = report_b.payload.value_columns
    collisions = [column for column in values_b if column in values_a]
    if not collisions:
        return {}, {}

    if suffixes is None:
        raise MergeConflictError(collisions)
    suffix_a, suffix_b = suffixes
    if suffix_a == suffix_b:
        raise MergeConflictError(
            collisions,
            message=f"Merge suffixes must differ, got {suffix_a!r} twice",
        )

    rename_a = {column: f"{column}{suffix_a}" for column in collisions}
    rename_b = {column: f"{column}{suffix_b}" for column in collisions}
    final_names = (
        list(STRUCTURAL_COLUMNS)
        + [rename_a.get(c, c) for c in values_a]
        + [rename_b.get(c, c) for c in values_b]
    )
    clashes = find_duplicates(final_names)
    if clashes:
        raise MergeConflictError(
            clashes,
            message=f"Disambiguated column names still collide: {', '.join(clashes)}",
        )
    return rename_a, rename_b


def _side_by_side(
    report_a: ReportObject,
    report_b: ReportObject,
    suffixes: tuple[str, str] | None,
) -> tuple[TabularPayload, ColumnMetadataTable]:
    rename_a, rename_b = _disambiguate(report_a, report_b, suffixes)
    keys = list(STRUCTURAL_COLUMNS)

    left = report_a.payload.frame.rename(columns=rename_a)
    right = report_b.payload.frame.rename(columns=rename_b)

    # each (label, row_type, variable) key must identify one row per side
    for frame in (left, right):
        repeated = frame.loc[frame.duplicated(subset=keys), keys]
        if not repeated.empty:
            row = repeated.iloc[0]
            raise MergeConflictError(
                keys,
                message=(
                    "Side-by-side merge needs unique rows per "
                    f"({', '.join(keys)}); repeated key: {tuple(row.tolist())}"
                ),
            )

    merged = left.merge(right, how="left", on=keys, sort=False)
    matched = right.merge(
        left[keys].drop_duplicates(),
        how="left",
        on=keys,
        indicator=True,
    )
    right_only = matched[matched["_merge"] == "left_only"].drop(columns="_merge")

    columns = list(left.columns) + [c for c in right.columns if c not in keys]
    frame = pd.concat([merged, right_only], ignore_index=True, sort=False)[columns]

    metadata = report_a.metadata.renamed(rename_a)
    for record in report_b.metadata.renamed(rename_b):
        if record.column not in keys:
            metadata.add(record)
    return TabularPayload(frame), metadata


def merge_reports(
    report_a: ReportObject,
    report_b: ReportObject,
    strategy: MergeStrategy | str,
    suffixes: tuple[str, str] | None = None,
    settings: AppConfig | None = None,
) -> ReportObject:
    """Combine two reports into a new one.

    Args:
        report_a: First report; its rows, columns and metadata take precedence
        report_b: Second report
        strategy: SIDE_BY_SIDE joins rows on the structural columns and keeps
            both sets of value columns; STACKED appends report_b's rows
        suffixes: Appended to colliding value columns of (report_a, report_b)
            in a side-by-side merge
        settings: Settings for the merged report (defaults to report_a's)

    Returns:
        New ReportObject with freshly compiled instruction lists

    Raises:
        MergeConflictError: If side-by-side value columns collide without
            usable suffixes, or either side repeats a structural row key
        DesynchronizationError: If either input's metadata is out of sync
    """
    strategy = MergeStrategy(strategy)
    if strategy is MergeStrategy.STACKED:
        payload, metadata = _stack(report_a, report_b)
    else:
        payload, metadata = _side_by_side(report_a, report_b, suffixes)

    merged = ReportObject.from_metadata(
        payload,
        metadata,
        settings=settings or report_a.settings,
    )
    logger.info(
        f"Merged reports | strategy={strategy} | columns={len(payload.columns)} | rows={len(payload)}"
    )
    return merged
