"""Unit tests for format functions and the derived registry."""

import math

import pandas as pd
import pytest

from tabular_report.formatting import (
    FormatFunctionRegistry,
    derive_registry,
    is_missing,
    style_number,
    style_percent,
    style_pvalue,
    style_ratio,
)
from tabular_report.metadata import ColumnMetadata, ColumnMetadataTable


class TestDeriveRegistry:
    """Tests for derive_registry."""

    def test_only_columns_with_functions(self) -> None:
        metadata = ColumnMetadataTable(
            [ColumnMetadata(column="a", format_fn=str), ColumnMetadata(column="b")]
        )
        registry = derive_registry(metadata)
        assert list(registry) == ["a"]
        assert registry["a"] is str
        assert "b" not in registry

    def test_read_only(self) -> None:
        registry = derive_registry(ColumnMetadataTable())
        with pytest.raises(TypeError, match="read-only"):
            registry["a"] = str

    def test_not_reflected_back(self) -> None:
        metadata = ColumnMetadataTable([ColumnMetadata(column="a", format_fn=str)])
        registry = derive_registry(metadata)
        metadata.get("a").format_fn = None
        assert "a" in registry
        assert isinstance(registry, FormatFunctionRegistry)


class TestIsMissing:
    """Tests for is_missing."""

    @pytest.mark.parametrize("value", [None, float("nan"), pd.NA, pd.NaT])
    def test_missing(self, value) -> None:
        assert is_missing(value) is True

    @pytest.mark.parametrize("value", [0, "", "NA", [None]])
    def test_not_missing(self, value) -> None:
        assert is_missing(value) is False


class TestBuiltInFormatters:
    """Tests for style_* formatters."""

    def test_style_number(self) -> None:
        fmt = style_number(1)
        assert fmt(1234.56) == "1,234.6"
        assert fmt(None) == ""
        assert fmt("n/a") == "n/a"

    def test_style_number_placeholder(self) -> None:
        assert style_number(placeholder="--")(math.nan) == "--"

    def test_style_percent(self) -> None:
        assert style_percent()(0.123) == "12%"
        assert style_percent(1)(0.5) == "50.0%"
        assert style_percent()(None) == ""

    def test_style_pvalue(self) -> None:
        fmt = style_pvalue()
        assert fmt(0.0004) == "<0.001"
        assert fmt(0.0312) == "0.031"
        assert fmt(0.9996) == ">0.999"
        assert fmt(None) == ""

    def test_style_ratio(self) -> None:
        fmt = style_ratio()
        assert fmt(0.954) == "0.954"
        assert fmt(1.234) == "1.23"
        assert fmt(float("nan")) == ""

    def test_booleans_not_treated_as_numbers(self) -> None:
        assert style_number()(True) == "True"
