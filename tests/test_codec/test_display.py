"""Tests for cell display formatting."""

import pytest

from tableedit.codec.display import CHECKED, INDETERMINATE, UNCHECKED, format_cell


class TestFormatCell:
    """Test how raw values render."""

    def test_null_is_distinct_from_empty(self):
        null = format_cell(None, "VARCHAR")
        empty = format_cell("", "VARCHAR")

        assert (null.display, null.semantic_class, null.is_null) == ("NULL", "null", True)
        assert (empty.display, empty.semantic_class, empty.is_null) == ("", "empty", False)

    @pytest.mark.parametrize(
        "value, display, semantic_class",
        [
            (1, CHECKED, "boolean-true"),
            ("1", CHECKED, "boolean-true"),
            (0, UNCHECKED, "boolean-false"),
            (None, INDETERMINATE, "boolean-null"),
        ],
    )
    def test_boolean_glyphs(self, value, display, semantic_class):
        cell = format_cell(value, "BIT")

        assert cell.display == display
        assert cell.semantic_class == semantic_class

    def test_boolean_null_is_null(self):
        assert format_cell(None, "BIT").is_null is True

    def test_numbers_are_grouped(self):
        assert format_cell(1234, "INTEGER").display == "1,234"
        assert format_cell("1234.50", "NUMERIC").display == "1,234.5"

    def test_temporal_values_canonical(self):
        assert format_cell("2026-2-1", "DATE").display == "2026-02-01"
        assert format_cell("14:30:00.123", "TIME").display == "14:30:00"
        assert format_cell("2026-02-01 14:30:00.5", "TIMESTAMP").display == "2026-02-01 14:30:00"

    def test_unreadable_date_shown_raw(self):
        cell = format_cell("not a date", "DATE")

        assert cell.display == "not a date"
        assert cell.semantic_class == "date"

    def test_text(self):
        cell = format_cell("Alice", "VARCHAR")

        assert cell.display == "Alice"
        assert cell.semantic_class == "text"
