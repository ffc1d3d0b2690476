"""Tests for money parsing and formatting."""

from decimal import Decimal

import pytest

from duo_ledger.exceptions import InvalidAmountError
from duo_ledger.money import (
    format_amount,
    parse_amount,
    to_minor_units,
    to_plain_decimal,
)


class TestParseAmountSeparators:
    """Thousands-vs-decimal disambiguation."""

    def test_plain_integer(self):
        assert parse_amount("12500") == 1250000

    def test_dot_decimal(self):
        assert parse_amount("12500.50") == 1250050

    def test_dot_with_three_digits_is_thousands(self):
        """Three digits after the separator means it groups thousands."""
        assert parse_amount("12.500") == 1250000

    def test_comma_thousands_dot_decimal(self):
        assert parse_amount("12,500.50") == 1250050

    def test_dot_thousands_comma_decimal(self):
        assert parse_amount("12.500,50") == 1250050

    def test_single_decimal_digit_is_tenths(self):
        """One trailing digit is padded on the right: .5 means .50."""
        assert parse_amount("12.5") == 1250
        assert parse_amount("12,5") == 1250

    def test_multiple_thousands_separators(self):
        assert parse_amount("1.234.567") == 123456700
        assert parse_amount("1,234,567") == 123456700

    def test_multiple_thousands_with_decimal(self):
        assert parse_amount("1.234.567,89") == 123456789

    def test_whitespace_is_ignored(self):
        assert parse_amount("  12 500 ") == 1250000
        assert parse_amount("1 234,5") == 123450

    def test_small_amounts(self):
        assert parse_amount("0,05") == 5
        assert parse_amount("0") == 0
        assert parse_amount(".50") == 50

    def test_trailing_separator_without_digits(self):
        """A dangling separator is not a decimal point."""
        assert parse_amount("5.") == 500


class TestParseAmountInvalid:
    """Inputs that must raise InvalidAmountError."""

    @pytest.mark.parametrize(
        "raw",
        ["", "   ", "-5", "- 5", "abc", "12a", "1e3", ".", "+5", "5-", "١٢", "１２"],
    )
    def test_rejected(self, raw):
        with pytest.raises(InvalidAmountError):
            parse_amount(raw)

    def test_negative_message(self):
        with pytest.raises(InvalidAmountError, match="negative"):
            parse_amount("-12.500")

    def test_is_value_error(self):
        """Callers catching ValueError still recover from bad amounts."""
        with pytest.raises(ValueError):
            parse_amount("nope")

    def test_keeps_raw_input(self):
        with pytest.raises(InvalidAmountError) as exc_info:
            parse_amount("12x")
        assert exc_info.value.raw == "12x"


class TestFormatAmount:
    """Display formatting with "." thousands and "," decimals."""

    def test_grouping_and_decimals(self):
        assert format_amount(1250050) == "12.500,50"

    def test_zero(self):
        assert format_amount(0) == "0,00"

    def test_cents_only(self):
        assert format_amount(5) == "0,05"
        assert format_amount(99) == "0,99"

    def test_millions(self):
        assert format_amount(123456789) == "1.234.567,89"

    def test_no_grouping_below_thousand(self):
        assert format_amount(99999) == "999,99"

    def test_negative_is_symmetric(self):
        assert format_amount(-1250050) == "-12.500,50"
        assert format_amount(-5) == "-0,05"

    def test_half_minor_unit_rounds_half_up(self):
        """A half-cent share is rounded only at display time."""
        assert format_amount(Decimal("500.5")) == "5,01"
        assert format_amount(Decimal("500.4")) == "5,00"
        assert format_amount(Decimal("-500.5")) == "-5,01"

    def test_deterministic(self):
        assert format_amount(4242) == format_amount(4242)


class TestRoundTrip:
    """parse_amount reads back what format_amount writes."""

    @pytest.mark.parametrize(
        "cents", [0, 1, 10, 99, 100, 12345, 100000, 1250050, 99999999, 123456789]
    )
    def test_parse_of_format(self, cents):
        assert parse_amount(format_amount(cents)) == cents


class TestHelpers:
    def test_to_minor_units_rounds_half_up(self):
        assert to_minor_units(Decimal("12.345")) == 1235
        assert to_minor_units(Decimal("12.344")) == 1234

    def test_to_plain_decimal(self):
        assert to_plain_decimal(1250050) == "12500.50"
        assert to_plain_decimal(5) == "0.05"
        assert to_plain_decimal(-150) == "-1.50"
