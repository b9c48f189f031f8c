"""Dollar amount parsing and formatting helpers."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")

# Digits with optional comma thousands groups and an optional 2-digit fraction.
AMOUNT_PATTERN = r"(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{2})?"

_AMOUNT_RE = re.compile(rf"^\s*\$?\s*({AMOUNT_PATTERN})\s*$")


def parse_amount(text: str) -> float | None:
    """Parse ``"$1,234.56"``-style text into a float.

    Returns ``None`` when *text* is not a well-formed amount.
    """
    if not isinstance(text, str):
        return None
    match = _AMOUNT_RE.match(text)
    if match is None:
        return None
    try:
        value = Decimal(match.group(1).replace(",", ""))
    except InvalidOperation:
        return None
    return float(value.quantize(CENTS, rounding=ROUND_HALF_UP))


def round_cents(value: float) -> float:
    """Round half-up to two decimal places."""
    return float(Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP))


def line_total(quantity: int, unit_price: float) -> float:
    return round_cents(quantity * unit_price)


def format_money(value: float) -> str:
    """Format *value* as ``$1,234.56`` (negative as ``-$1.00``)."""
    rounded = Decimal(str(round_cents(value)))
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.2f}"
