"""
Price Input Parsing

The price field works like a calculator tape. Whatever the field shows
(the already formatted amount) is read back as raw text on every edit:
all digits are pushed together and the last two are always the cents.

    "0,00"  + "5"  -> "0,005"  -> 0.05
    "0,05"  + "3"  -> "0,053"  -> 0.53
    "0,53"  + "0"  -> "0,530"  -> 5.30

A minus sign anywhere before the remaining text makes the amount
negative (refunds). Parsing never fails: input without digits is 0.00.
"""

import re
from decimal import Decimal
from typing import Any

from splitledger.models.entry import quantize_cents, to_cents


_NON_DIGITS = re.compile(r"[^0-9]")
_SIGN_NOISE = re.compile(r"[0-9.,]")
_LAST_DIGIT = re.compile(r"[0-9](?=[^0-9]*$)")


def parse_price_input(display: str) -> Decimal:
    """
    Turn an edited display string into a signed two-decimal amount.

    Args:
        display: The raw text of the price field after an edit

    Returns:
        The amount; 0.00 when the text holds no digits
    """
    negative = _SIGN_NOISE.sub("", display).startswith("-")
    digits = _NON_DIGITS.sub("", display) or "0"
    # Building from a string is exact at any length; int() is not
    amount = quantize_cents(Decimal(f"{digits}E-2"))
    if negative and amount:
        amount = amount.copy_negate()
    return amount


def format_price_input(value: Any) -> str:
    """
    Render an amount the way the price field displays it.

    Period groups thousands, comma separates cents: -1234.5 -> "-1.234,50".
    The output parses back to the same amount.
    """
    amount = to_cents(value)
    text = format(amount.copy_abs(), ",f")
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-{text}" if amount < 0 else text


def push_digit(display: str, key: str) -> Decimal:
    """Keystroke: append `key` to the display and re-read it."""
    return parse_price_input(display + key)


def pop_digit(display: str) -> Decimal:
    """Backspace: drop the last digit of the display and re-read it."""
    return parse_price_input(_LAST_DIGIT.sub("", display, count=1))
