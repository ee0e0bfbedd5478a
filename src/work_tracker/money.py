"""Decimal parsing, rounding and display helpers for money amounts.

Rounding (applied everywhere, including effective pay rates):
- Internal compute keeps full Decimal precision
- Results are rounded to cents with ROUND_HALF_UP
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENTS = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Inputs are held to what the document format stores exactly as JSON numbers
MAX_AMOUNT = Decimal("1000000000")
MAX_PLACES = 2


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_decimal(value: Any) -> Decimal | None:
    """Parse a user-supplied number.

    Accepts Decimal, int, float and numeric strings (surrounding whitespace
    allowed). Returns None for anything else, including booleans, blank
    strings, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        # str() keeps floats at their shortest repr (0.1 -> "0.1")
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not result.is_finite():
        return None
    return result


def decimal_places(amount: Decimal) -> int:
    """Number of significant digits after the decimal point (12.50 -> 1)."""
    if not amount:
        return 0
    _, digits, exponent = amount.as_tuple()
    places = max(0, -exponent)
    index = len(digits) - 1
    while places and digits[index] == 0:
        places -= 1
        index -= 1
    return places


def within_range(amount: Decimal) -> bool:
    return abs(amount) <= MAX_AMOUNT


def format_amount(amount: Decimal, signed: bool = False) -> str:
    """Format an amount for display, e.g. ``$1,234.50`` or ``+$450.00``."""
    rounded = round_to_cents(amount)
    body = f"${abs(rounded):,.2f}"
    if rounded < 0:
        return f"-{body}"
    if signed:
        return f"+{body}"
    return body
