"""
Currency formatting for valuation output.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CURRENCY_SYMBOL = "₱"
_CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """
    Convert a price-like value to a finite Decimal.

    None, blanks, NaN, infinities and unparseable strings become zero so
    that an empty comparable set never leaks a not-a-number into output.
    """
    if value is None:
        return Decimal(0)
    if isinstance(value, str):
        value = value.replace(CURRENCY_SYMBOL, "").replace(",", "").strip()
        if not value:
            return Decimal(0)
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal(0)
    if not number.is_finite():
        return Decimal(0)
    return number


def format_currency(value: Any) -> str:
    """
    Format a value as Philippine pesos with two decimals.

    Examples:
        >>> format_currency(1234.5)
        '₱1,234.50'
        >>> format_currency(None)
        '₱0.00'
    """
    amount = to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(amount):,.2f}"
