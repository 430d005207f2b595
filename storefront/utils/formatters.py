"""
Formatting utilities for templates and JSON views.
Prices use the Turkish lira style: dot for thousands, comma for decimals.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union, Optional

Number = Union[int, float, Decimal, str, None]


def _group_thousands(integer_part: str) -> str:
    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i+3] for i in range(0, len(reversed_int), 3)]
    return '.'.join(groups)[::-1]


def format_amount(value: Number) -> str:
    """
    Format an amount with exactly 2 decimals, rounded half-up.

    Examples:
        format_amount(1234.56) -> "1.234,56"
        format_amount(99.9) -> "99,90"
        format_amount("0.125") -> "0,13"
        format_amount(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        num = Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    sign = "-" if num < 0 else ""
    integer_part, decimal_part = f"{abs(num):.2f}".split(".")
    return f"{sign}{_group_thousands(integer_part)},{decimal_part}"


def format_price(value: Number, symbol: Optional[str] = '₺') -> str:
    """
    Format a price for display, symbol first.

    Only the returned string is rounded; the value passed in is untouched.

    Examples:
        format_price(1000) -> "₺1.000,00"
        format_price(50000.99) -> "₺50.000,99"
        format_price(-5) -> "-₺5,00"
    """
    amount = format_amount(value)
    if amount == "-" or not symbol:
        return amount
    if amount.startswith("-"):
        return f"-{symbol}{amount[1:]}"
    return f"{symbol}{amount}"


def format_discount(percentage: Optional[int]) -> str:
    """Badge text for a discount: ``-20%``; empty when there is none."""
    if not percentage:
        return ""
    return f"-{percentage}%"
