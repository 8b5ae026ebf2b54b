"""Tests for numeric and boolean conversion."""

from decimal import Decimal

import pytest

from tableedit.codec.numeric import format_numeric, parse_boolean, parse_numeric


class TestParseNumeric:
    """Test numeric input parsing."""

    def test_thousands_separators_stripped(self):
        result = parse_numeric("1,234.5")

        assert result.value == Decimal("1234.5")
        assert result.wire_value == 1234.5
        assert result.rounded is False

    def test_integer_column_rounds_half_up(self):
        """Fractions on integer columns round and are flagged."""
        result = parse_numeric("2.5", is_integer=True)

        assert result.value == 3
        assert result.rounded is True

    def test_negative_ties_round_away_from_zero(self):
        assert parse_numeric("-2.5", is_integer=True).value == -3

    def test_whole_number_on_integer_column_not_flagged(self):
        result = parse_numeric("42", is_integer=True)

        assert result.value == 42
        assert result.rounded is False

    def test_decimal_column_keeps_fraction(self):
        result = parse_numeric("2.75")

        assert result.wire_value == 2.75
        assert result.rounded is False

    def test_whole_decimal_goes_out_as_int(self):
        assert parse_numeric("1e3").wire_value == 1000
        assert isinstance(parse_numeric("7").wire_value, int)

    @pytest.mark.parametrize("text", [None, "", "  ", "abc", "1.2.3", "12a", "--1"])
    def test_unparseable(self, text):
        assert parse_numeric(text) is None


class TestFormatNumeric:
    """Test numeric display."""

    def test_integer_grouping(self):
        assert format_numeric(1234567, is_integer=True) == "1,234,567"

    def test_trailing_zeros_trimmed(self):
        assert format_numeric("1234.5000") == "1,234.5"

    def test_fraction_capped_at_ten_digits(self):
        assert format_numeric("0.123456789012345") == "0.123456789"

    def test_unreadable_value_passed_through(self):
        assert format_numeric("n/a") == "n/a"


class TestParseBoolean:
    """Test tri-state boolean reading."""

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_null(self, value):
        assert parse_boolean(value) is None

    @pytest.mark.parametrize("value", [1, "1", "true", "TRUE", True])
    def test_true(self, value):
        assert parse_boolean(value) is True

    @pytest.mark.parametrize("value", [0, "0", "false", "yes", False, 2])
    def test_false(self, value):
        assert parse_boolean(value) is False
