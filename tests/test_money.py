"""Tests for money parsing, rounding and formatting."""

from decimal import Decimal

import pytest

from work_tracker.money import (
    decimal_places,
    format_amount,
    parse_decimal,
    round_to_cents,
    within_range,
)


class TestRoundToCents:
    """Rounding is ROUND_HALF_UP to two places."""

    def test_half_rounds_up(self):
        assert round_to_cents(Decimal("0.005")) == Decimal("0.01")
        assert round_to_cents(Decimal("2.675")) == Decimal("2.68")

    def test_below_half_rounds_down(self):
        assert round_to_cents(Decimal("1.004")) == Decimal("1.00")

    def test_negative_half_rounds_away_from_zero(self):
        assert round_to_cents(Decimal("-0.125")) == Decimal("-0.13")


class TestParseDecimal:
    """User input parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("50", Decimal("50")),
            (" 12.5 ", Decimal("12.5")),
            (7, Decimal("7")),
            (0.1, Decimal("0.1")),
            (Decimal("3.25"), Decimal("3.25")),
        ],
    )
    def test_numbers_parse(self, value, expected):
        assert parse_decimal(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", True, False, "NaN", "inf", [], {}])
    def test_non_numbers_are_none(self, value):
        assert parse_decimal(value) is None


class TestFormatAmount:
    """Display formatting."""

    def test_thousands_separator(self):
        assert format_amount(Decimal("1234.5")) == "$1,234.50"

    def test_signed_positive(self):
        assert format_amount(Decimal("450"), signed=True) == "+$450.00"

    def test_negative(self):
        assert format_amount(Decimal("-50")) == "-$50.00"

    def test_zero_signed(self):
        assert format_amount(Decimal("0"), signed=True) == "+$0.00"


class TestBounds:
    """Precision and magnitude checks."""

    @pytest.mark.parametrize(
        "value,places",
        [
            ("12", 0),
            ("12.50", 1),
            ("12.05", 2),
            ("0.000", 0),
            ("1E+2", 0),
            ("1.0000000000000000000000000000000000001", 37),
        ],
    )
    def test_decimal_places(self, value, places):
        assert decimal_places(Decimal(value)) == places

    def test_within_range(self):
        assert within_range(Decimal("1000000000"))
        assert within_range(Decimal("-1000000000"))
        assert not within_range(Decimal("1000000000.01"))
        assert not within_range(Decimal("1e27"))
