"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

_NOT_AMOUNT_CHAR = re.compile(r"[^0-9\-.,]")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "1,234.56" (comma is a thousands separator when a period is present)
    - "1234,56" (a lone comma is the decimal separator)
    - "USD -12.00"

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    # Keep ASCII digits, minus, comma and period only
    cleaned = _NOT_AMOUNT_CHAR.sub("", amount_str.strip())

    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(",", "")
    else:
        cleaned = cleaned.replace(",", ".")

    if not any(ch.isdigit() for ch in cleaned):
        raise ValueError(f"Could not parse amount '{amount_str}'")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount
