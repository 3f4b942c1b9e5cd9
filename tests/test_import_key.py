"""Tests for the import key builder."""

from decimal import Decimal

from envelopes.utils.import_key import build_import_key


def test_known_key():
    """Test the key of a typical row."""
    key = build_import_key(
        date="2024-03-01",
        account="Everyday Checking",
        amount=Decimal("2500.00"),
        description="March salary",
        merchant="Acme Corp",
    )
    assert key == "imp_654f73cd"


def test_text_fields_are_case_insensitive():
    """Test account, description and merchant are lowercased."""
    lower = build_import_key("2024-03-01", "everyday checking", Decimal("2500"), "march salary", "acme corp")
    upper = build_import_key("2024-03-01", "EVERYDAY CHECKING", Decimal("2500"), "MARCH SALARY", "ACME CORP")
    assert lower == upper == "imp_654f73cd"


def test_amount_fixed_to_four_places():
    """Test equal amounts with different precision share a key."""
    assert build_import_key("2024-03-01", "A", Decimal("-5")) == build_import_key(
        "2024-03-01", "A", Decimal("-5.00000")
    )
    assert build_import_key("2024-03-01", "A", Decimal("-5")) != build_import_key(
        "2024-03-01", "A", Decimal("5")
    )


def test_missing_optional_fields_and_zero():
    """Test empty optional fields and negative zero."""
    assert build_import_key("", "", Decimal("0")) == "imp_74f33a7e"
    assert build_import_key("", "", Decimal("-0")) == "imp_74f33a7e"


def test_field_order_matters():
    """Test description and merchant are not interchangeable."""
    a = build_import_key("2024-03-01", "A", Decimal("1"), description="x", merchant="y")
    b = build_import_key("2024-03-01", "A", Decimal("1"), description="y", merchant="x")
    assert a != b
