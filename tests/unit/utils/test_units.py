"""Tests for token unit conversion."""

from decimal import Decimal

import pytest

from src.seaport_market.utils.units import (
    format_units,
    fraction_digits,
    parse_amount,
    parse_units,
)


class TestFormatUnits:
    """Test smallest-unit to display conversion."""

    @pytest.mark.parametrize(
        ("raw", "decimals", "expected"),
        [
            ("1500000000000000000", 18, "1.5"),
            ("2000000", 6, "2"),
            ("42", 0, "42"),
            ("1", 18, "0.000000000000000001"),
            ("0", 18, "0"),
            (500000000000000000, 18, "0.5"),
        ],
    )
    def test_format_units(self, raw, decimals, expected):
        assert format_units(raw, decimals) == expected

    def test_format_units_rejects_non_integer(self):
        with pytest.raises(ValueError):
            format_units("1.5", 18)
        with pytest.raises(ValueError):
            format_units("-1", 18)

    def test_format_units_rejects_negative_decimals(self):
        with pytest.raises(ValueError):
            format_units("1", -1)


class TestParseUnits:
    """Test display to smallest-unit conversion."""

    @pytest.mark.parametrize(
        ("amount", "decimals", "expected"),
        [
            ("1.5", 18, 1500000000000000000),
            ("0.0001", 18, 100000000000000),
            ("2", 6, 2000000),
            (".5", 1, 5),
            ("1.50", 1, 15),
        ],
    )
    def test_parse_units(self, amount, decimals, expected):
        assert parse_units(amount, decimals) == expected

    def test_parse_units_rejects_excess_precision(self):
        """Amounts are never rounded."""
        with pytest.raises(ValueError):
            parse_units("1.123", 2)

    @pytest.mark.parametrize("amount", ["", ".", "abc", "1e18", "-1", "1.2.3"])
    def test_parse_units_rejects_invalid_input(self, amount):
        with pytest.raises(ValueError):
            parse_units(amount, 18)

    @pytest.mark.parametrize("decimals", range(19))
    def test_round_trip_beyond_float_precision(self, decimals):
        """Values above 2**53 must survive display and back exactly."""
        raw = str(2**53 + 1) + "123456789"
        assert parse_units(format_units(raw, decimals), decimals) == int(raw)


class TestAmountHelpers:
    """Test user-input helpers."""

    def test_fraction_digits_counts_as_typed(self):
        assert fraction_digits("1.0001") == 4
        assert fraction_digits("1.00010") == 5
        assert fraction_digits("3") == 0

    def test_parse_amount(self):
        assert parse_amount("0.5") == Decimal("0.5")
        assert parse_amount(" 2 ") == Decimal("2")
        assert parse_amount("abc") is None
        assert parse_amount("NaN") is None
        assert parse_amount("Infinity") is None
        assert parse_amount(None) is None
