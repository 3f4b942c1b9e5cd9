"""Import key builder used to recognize re-imported rows."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

IMPORT_KEY_PREFIX = "imp_"

_FOUR_PLACES = Decimal("0.0001")


def _utf16_code_units(text: str):
    for ch in text:
        code_point = ord(ch)
        if code_point > 0xFFFF:
            code_point -= 0x10000
            yield 0xD800 + (code_point >> 10)
            yield 0xDC00 + (code_point & 0x3FF)
        else:
            yield code_point


def build_import_key(
    date: str,
    account: str,
    amount: Decimal,
    description: Optional[str] = None,
    merchant: Optional[str] = None,
) -> str:
    """Build a short fingerprint of a transaction's defining fields.

    Collisions are not resolved: two different rows with the same key are
    treated as the same transaction.

    Args:
        date: Normalized date (YYYY-MM-DD)
        account: Account name
        amount: Signed amount
        description: Optional description
        merchant: Optional merchant name

    Returns:
        Key such as "imp_5f3a9c1e"
    """
    fixed_amount = amount.quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP)
    if amount.is_zero():
        # -0 and 0 are the same amount
        fixed_amount = abs(fixed_amount)
    base = "|".join(
        [
            date,
            account.lower(),
            f"{fixed_amount:f}",
            (description or "").lower(),
            (merchant or "").lower(),
        ]
    )

    h = 0
    for unit in _utf16_code_units(base):
        h = (h * 31 + unit) & 0xFFFFFFFF
    return f"{IMPORT_KEY_PREFIX}{h:x}"
