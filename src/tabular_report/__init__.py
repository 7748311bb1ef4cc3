"""
Tabular Report - a declarative table-reporting object model.

Keeps the data to print apart from the per-column rules for labeling,
formatting, bolding and footnoting, and compiles those rules into
ordered render instruction lists for each backend.

Quick Start
-----------

    from tabular_report import ReportObject, TabularPayload, style_pvalue

    payload = TabularPayload.from_records([
        {"variable": "age", "row_type": "label", "label": "Age", "stat": "47", "p": 0.03},
    ])
    report = ReportObject(payload)
    report.set_column_header("stat", "N (%)")
    report.set_column_header("p", "**p-value**", interpreter="markdown")
    report.set_column_format("p", style_pvalue())
    report.set_column_bold_threshold("p", 0.05)

    print(report.materialize("markdown"))

Public API Exports
------------------

Core:
    ReportObject, TabularPayload, ColumnMetadata, ColumnMetadataTable
Sync:
    HeaderSyncEngine, fill_missing, set_header, compile_instructions
Instructions:
    Backend, RenderInterpreter, LabelMode, Operation, RenderInstructionLists
Formatting:
    FormatFunctionRegistry, derive_registry, style_number, style_percent,
    style_pvalue, style_ratio
Merging:
    MergeStrategy, merge_reports
"""

__version__ = "0.1.0"

from tabular_report.core.exceptions import (
    ColumnNotFoundError,
    DesynchronizationError,
    DuplicateColumnError,
    MergeConflictError,
    PayloadValidationError,
    ReportError,
    RowNotFoundError,
    UnknownBackendError,
)
from tabular_report.formatting import (
    FormatFunctionRegistry,
    derive_registry,
    style_number,
    style_percent,
    style_pvalue,
    style_ratio,
)
from tabular_report.instructions import (
    AbbreviationFootnote,
    ApplyBold,
    ApplyFormat,
    Backend,
    ColumnFootnote,
    InitializeTable,
    LabelMode,
    Operation,
    RenderInstructionLists,
    RenderInterpreter,
    SetLabel,
)
from tabular_report.merge import MergeStrategy, merge_reports
from tabular_report.metadata import ColumnMetadata, ColumnMetadataTable
from tabular_report.payload import TabularPayload
from tabular_report.report import ReportObject
from tabular_report.sync import HeaderSyncEngine, compile_instructions, fill_missing, set_header

__all__ = [
    "__version__",
    # Core
    "ReportObject",
    "TabularPayload",
    "ColumnMetadata",
    "ColumnMetadataTable",
    # Sync
    "HeaderSyncEngine",
    "compile_instructions",
    "fill_missing",
    "set_header",
    # Instructions
    "AbbreviationFootnote",
    "ApplyBold",
    "ApplyFormat",
    "Backend",
    "ColumnFootnote",
    "InitializeTable",
    "LabelMode",
    "Operation",
    "RenderInstructionLists",
    "RenderInterpreter",
    "SetLabel",
    # Formatting
    "FormatFunctionRegistry",
    "derive_registry",
    "style_number",
    "style_percent",
    "style_pvalue",
    "style_ratio",
    # Merging
    "MergeStrategy",
    "merge_reports",
    # Errors
    "ReportError",
    "ColumnNotFoundError",
    "DesynchronizationError",
    "DuplicateColumnError",
    "MergeConflictError",
    "PayloadValidationError",
    "RowNotFoundError",
    "UnknownBackendError",
]
