"""Tests for amount parsing."""

from decimal import Decimal

import pytest
from envelopes.utils.amount_parser import parse_amount


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("$123.45", Decimal("123.45")),
        ("-$1,234.56", Decimal("-1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ("1234,56", Decimal("1234.56")),
        (" 1 234,56 EUR ", Decimal("1234.56")),
        ("USD -12.00", Decimal("-12.00")),
        ("0", Decimal("0")),
    ],
)
def test_parse_amount(raw, expected):
    """Test supported amount formats."""
    assert parse_amount(raw) == expected


def test_period_and_comma_treats_comma_as_thousands():
    """Test the comma is dropped whenever a period is also present."""
    assert parse_amount("1.234,56") == Decimal("1.23456")


@pytest.mark.parametrize(
    "raw", ["", "   ", "abc", "-", "1.2.3", "12-5", "--4", "١٢٣"]
)
def test_parse_amount_invalid(raw):
    """Test unparseable amounts raise ValueError."""
    with pytest.raises(ValueError):
        parse_amount(raw)
