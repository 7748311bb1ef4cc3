"""Unit tests for ReportObject composition operations."""

import pandas as pd
import pytest

from tabular_report.core.app_config import AppConfig, RenderingConfig
from tabular_report.core.exceptions import (
    ColumnNotFoundError,
    DesynchronizationError,
    RowNotFoundError,
    UnknownBackendError,
)
from tabular_report.formatting import style_number, style_pvalue
from tabular_report.instructions import (
    AbbreviationFootnote,
    ApplyBold,
    ApplyFormat,
    Backend,
    InitializeTable,
    LabelMode,
    Operation,
    RenderInterpreter,
    SetLabel,
)
from tabular_report.report import ReportObject
from tabular_report.sync import compile_instructions


def _pct(value) -> str:
    return "" if value is None else f"{value:.0%}"


class TestAttachPayload:
    """Tests for attaching a payload."""

    def test_metadata_covers_payload_and_is_hidden(self, stat_report, stat_payload) -> None:
        assert stat_report.metadata.columns == stat_payload.columns
        assert len(stat_report.metadata) == 4
        assert all(record.hide for record in stat_report.metadata)

    def test_lists_start_with_init(self, stat_report) -> None:
        for backend in (Backend.HTML, Backend.MARKDOWN):
            assert stat_report.render_instructions[backend] == (InitializeTable(columns=()),)

    def test_accepts_dataframe(self, settings) -> None:
        frame = pd.DataFrame({"label": ["A"], "row_type": ["label"], "variable": ["a"]})
        report = ReportObject(frame, settings=settings)
        assert report.payload.columns == ["label", "row_type", "variable"]

    def test_reattach_resets_metadata(self, stat_report, stat_payload) -> None:
        stat_report.set_column_header("stat", "N")
        stat_report.attach_payload(stat_payload)
        assert stat_report.metadata.get("stat").label is None
        assert stat_report.metadata.get("stat").hide is True

    def test_no_payload_raises(self, settings) -> None:
        report = ReportObject(settings=settings)
        with pytest.raises(RuntimeError, match="No payload attached"):
            report.set_column_header("stat", "N")

    def test_backends_follow_settings(self, stat_payload) -> None:
        settings = AppConfig(rendering=RenderingConfig(backends=[Backend.HTML]))
        report = ReportObject(stat_payload, settings=settings)
        assert report.render_instructions.backends == [Backend.HTML]


class TestSetColumnHeader:
    """Tests for set_column_header."""

    def test_scenario_single_label(self, stat_report) -> None:
        """Labeling stat reveals it and compiles init + one label."""
        stat_report.set_column_header("stat", "N (%)")
        record = stat_report.metadata.get("stat")
        assert record.hide is False
        assert record.label == "N (%)"
        for backend in (Backend.HTML, Backend.MARKDOWN):
            instructions = stat_report.render_instructions[backend]
            assert len(instructions) == 2
            assert isinstance(instructions[0], InitializeTable)
            assert instructions[1] == SetLabel(column="stat", label="N (%)", mode=LabelMode.ESCAPED)

    def test_interpreter(self, stat_report) -> None:
        stat_report.set_column_header("stat", "**N**", interpreter="markdown")
        assert stat_report.metadata.get("stat").interpreter is RenderInterpreter.MARKDOWN
        assert stat_report.render_instructions[Backend.HTML][1].mode is LabelMode.MARKDOWN

    def test_missing_column_leaves_state_unchanged(self, stat_report) -> None:
        stat_report.set_column_header("stat", "N")
        metadata_before = stat_report.metadata.copy()
        lists_before = stat_report.render_instructions

        with pytest.raises(ColumnNotFoundError) as exc_info:
            stat_report.set_column_header("missing", "Missing")

        assert exc_info.value.column == "missing"
        assert stat_report.metadata == metadata_before
        assert stat_report.render_instructions is lists_before

    def test_bulk_headers(self, stat_report) -> None:
        stat_report.set_column_headers({"label": "Characteristic", "stat": "N"})
        labels = [i.label for i in stat_report.render_instructions[Backend.HTML][1:]]
        assert labels == ["Characteristic", "N"]

    def test_bulk_headers_atomic(self, stat_report) -> None:
        with pytest.raises(ColumnNotFoundError):
            stat_report.set_column_headers({"stat": "N", "missing": "X"})
        assert stat_report.metadata.get("stat").label is None


class TestVisibility:
    """Tests for hide semantics."""

    def test_format_bold_footnote_do_not_change_hide(self, stat_report) -> None:
        stat_report.set_column_format("stat", _pct)
        stat_report.set_column_bold_threshold("stat", 0.05)
        stat_report.add_footnote("stat", "n (%)")
        stat_report.add_footnote("stat", "N = count", is_abbreviation=True)
        assert stat_report.metadata.get("stat").hide is True

    def test_explicit_hide_survives_labeling(self, stat_report) -> None:
        stat_report.set_column_hide("stat", True)
        stat_report.set_column_header("stat", "N")
        assert stat_report.metadata.get("stat").hide is True
        assert stat_report.render_instructions[Backend.HTML] == (InitializeTable(columns=()),)

    def test_explicit_show_without_label(self, stat_report) -> None:
        stat_report.set_column_hide("label", False)
        assert stat_report.render_instructions[Backend.HTML][1] == SetLabel(
            column="label", label="label"
        )

    def test_hide_labeled_column(self, stat_report) -> None:
        stat_report.set_column_header("stat", "N")
        stat_report.set_column_hide("stat", True)
        assert stat_report.render_instructions.operations(Backend.HTML) == [Operation.INITIALIZE]


class TestFormatBoldFootnotes:
    """Tests for the remaining metadata mutators."""

    def test_scenario_format_then_bold_order(self, stat_report) -> None:
        """Format set before bold still compiles label, format, bold."""
        fn = style_number(1)
        stat_report.set_column_header("stat", "N")
        stat_report.set_column_format("stat", fn)
        stat_report.set_column_bold_threshold("stat", 0.05)
        assert stat_report.render_instructions[Backend.HTML] == (
            InitializeTable(columns=("stat",)),
            SetLabel(column="stat", label="N"),
            ApplyFormat(column="stat", format_fn=fn),
            ApplyBold(column="stat", threshold=0.05),
        )

    def test_format_registry_derived(self, stat_report) -> None:
        stat_report.set_column_format("stat", _pct)
        assert dict(stat_report.format_functions) == {"stat": _pct}
        stat_report.set_column_format("stat", None)
        assert dict(stat_report.format_functions) == {}

    def test_format_must_be_callable(self, stat_report) -> None:
        with pytest.raises(TypeError):
            stat_report.set_column_format("stat", "style_number")

    def test_bold_threshold_cleared(self, stat_report) -> None:
        stat_report.set_column_bold_threshold("stat", 0.05)
        stat_report.set_column_bold_threshold("stat", None)
        assert Operation.APPLY_BOLD not in stat_report.render_instructions.operations(Backend.HTML)

    def test_same_abbreviation_two_columns(self, stat_report) -> None:
        stat_report.add_footnote("stat", "CI = Confidence Interval", is_abbreviation=True)
        stat_report.add_footnote("label", "CI = Confidence Interval", is_abbreviation=True)
        notes = [
            i for i in stat_report.render_instructions[Backend.HTML]
            if isinstance(i, AbbreviationFootnote)
        ]
        assert len(notes) == 1
        assert notes[0].texts == ("CI = Confidence Interval",)
        assert notes[0].text.count("CI = Confidence Interval") == 1

    def test_remove_footnotes(self, stat_report) -> None:
        stat_report.add_footnote("stat", "n (%)")
        stat_report.add_footnote("stat", "N = count", is_abbreviation=True)
        stat_report.remove_footnotes("stat")
        assert stat_report.metadata.get("stat").footnotes == []
        assert stat_report.metadata.get("stat").footnote_abbreviations == ["N = count"]
        stat_report.remove_footnotes("stat", abbreviations=True)
        assert stat_report.render_instructions.operations(Backend.HTML) == [Operation.INITIALIZE]


class TestOrderIndependence:
    """Compiled lists depend only on final metadata state."""

    def test_any_call_order_same_result(self, stat_payload, settings) -> None:
        fn = style_pvalue()
        forward = ReportObject(stat_payload, settings=settings)
        forward.set_column_header("stat", "p")
        forward.set_column_format("stat", fn)
        forward.set_column_bold_threshold("stat", 0.05)
        forward.add_footnote("stat", "Wilcoxon test")

        backward = ReportObject(stat_payload, settings=settings)
        backward.add_footnote("stat", "Wilcoxon test")
        backward.set_column_bold_threshold("stat", 0.05)
        backward.set_column_format("stat", fn)
        backward.set_column_header("stat", "p")

        assert forward.render_instructions == backward.render_instructions

    def test_matches_single_compilation(self, stat_report, stat_payload) -> None:
        stat_report.set_column_bold_threshold("stat", 0.01)
        stat_report.set_column_header("label", "Characteristic")
        stat_report.set_column_format("stat", _pct)
        expected = compile_instructions(
            stat_payload.columns,
            stat_report.metadata,
            backends=stat_report.settings.rendering.backends,
        )
        assert stat_report.render_instructions == expected


class TestPayloadGrowth:
    """Tests for payload columns added by external steps."""

    def test_new_column_tracked_on_mutation(self, stat_report) -> None:
        stat_report.payload.add_column("p_value", [0.01, None, 0.2, 0.7])
        stat_report.set_column_header("p_value", "p-value")
        assert stat_report.metadata.columns[-1] == "p_value"
        assert stat_report.metadata.get("p_value").hide is False

    def test_explicit_sync_tracks_new_column(self, stat_report) -> None:
        stat_report.payload.add_column("extra", 1)
        stat_report.sync_render_instructions()
        assert "extra" in stat_report.metadata
        assert stat_report.metadata.get("extra").hide is True

    def test_dropped_column_desynchronizes(self, stat_report) -> None:
        stat_report.set_column_header("stat", "N")
        lists_before = stat_report.render_instructions
        stat_report.payload.replace_frame(stat_report.payload.frame.drop(columns=["stat"]))

        with pytest.raises(DesynchronizationError) as exc_info:
            stat_report.set_column_header("label", "Characteristic")

        assert exc_info.value.orphaned == ["stat"]
        assert stat_report.render_instructions is lists_before
        assert stat_report.metadata.get("label").label is None


class TestInlineValue:
    """Tests for inline_value cross-referencing."""

    def test_label_row(self, stat_report) -> None:
        assert stat_report.inline_value("age", "stat") == "47.0"

    def test_uses_format_function(self, stat_report) -> None:
        stat_report.set_column_format("stat", style_number(0))
        assert stat_report.inline_value("age", "stat") == "47"

    def test_level_row(self, stat_report) -> None:
        stat_report.set_column_format("stat", style_pvalue(2))
        assert stat_report.inline_value("grade", "stat", level="I") == "0.02"

    def test_missing_value_placeholder(self, stat_report) -> None:
        assert stat_report.inline_value("grade", "stat") == ""

    def test_unknown_variable(self, stat_report) -> None:
        with pytest.raises(RowNotFoundError):
            stat_report.inline_value("height", "stat")

    def test_unknown_level(self, stat_report) -> None:
        with pytest.raises(RowNotFoundError) as exc_info:
            stat_report.inline_value("grade", "stat", level="IV")
        assert exc_info.value.details == {"variable": "grade", "level": "IV"}

    def test_unknown_column(self, stat_report) -> None:
        with pytest.raises(ColumnNotFoundError):
            stat_report.inline_value("age", "nope")


class TestShowAndCopy:
    """Tests for header listing, copying and materialization entry point."""

    def test_show_header_names(self, stat_report) -> None:
        stat_report.set_column_header("stat", "N")
        assert stat_report.show_header_names() == [
            ("label", None, True),
            ("row_type", None, True),
            ("variable", None, True),
            ("stat", "N", False),
        ]

    def test_copy_is_independent(self, stat_report) -> None:
        stat_report.set_column_header("stat", "N")
        clone = stat_report.copy()
        clone.set_column_header("stat", "Count")
        assert stat_report.metadata.get("stat").label == "N"
        assert clone.metadata.get("stat").label == "Count"
        assert clone.render_instructions != stat_report.render_instructions

    def test_materialize_unknown_backend(self, stat_report) -> None:
        with pytest.raises(UnknownBackendError):
            stat_report.materialize("latex")

    def test_materialize_uncompiled_backend(self, stat_payload) -> None:
        settings = AppConfig(rendering=RenderingConfig(backends=[Backend.HTML]))
        report = ReportObject(stat_payload, settings=settings)
        with pytest.raises(UnknownBackendError):
            report.materialize(Backend.MARKDOWN)
