#!/usr/bin/env python3
"""
Currency Conversion Helpers

Receipt totals come from OCR or manual entry and charge amounts from
statement imports, usually as decimal strings ("23.45", "-12.00",
"$1,234.56"). They are turned into integer cents once, here, and only become
floats again as model features.
"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Union

_CENT = Decimal("0.01")
_BLANK_TOKENS = {"nan", "none", "null", "n/a"}


def _clean(text: str) -> str:
    return text.replace("$", "").replace(",", "").strip()


def cents_to_dollars_str(cents: int) -> str:
    """
    Render cents as a plain dollar string without a currency sign.

    Example:
        cents_to_dollars_str(-1250) -> "-12.50"
    """
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(int(cents)), 100)
    return f"{sign}{dollars}.{remainder:02d}"


def cents_to_dollars(cents: int) -> float:
    """Float dollars, for feature computation only."""
    return cents / 100


def parse_dollars_to_cents(dollars_str: str) -> int:
    """
    Strict dollar-string parser. Sub-cent digits are truncated.

    Raises:
        ValueError: If the string is not a number

    Examples:
        parse_dollars_to_cents("$12.34") -> 1234
        parse_dollars_to_cents("-12.5") -> -1250
    """
    clean = _clean(dollars_str)
    if not clean:
        return 0
    try:
        amount = Decimal(clean).quantize(_CENT, rounding=ROUND_DOWN)
    except InvalidOperation as e:
        raise ValueError(f"Not a dollar amount: {dollars_str!r}") from e
    return int(amount * 100)


def safe_currency_to_cents(value: Union[str, int, float, Decimal, None]) -> int | None:
    """
    Lenient conversion for partially-entered receipts.

    Integers are whole dollars. Blank, missing or unparseable input gives
    None, so "no amount yet" stays distinct from $0.00.

    Examples:
        safe_currency_to_cents("$45.99") -> 4599
        safe_currency_to_cents("n/a") -> None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value * 100

    text = str(value) if isinstance(value, (float, Decimal)) else _clean(str(value))
    if not text or text.lower() in _BLANK_TOKENS:
        return None
    try:
        return int((Decimal(text) * 100).to_integral_value())
    except (InvalidOperation, ValueError, OverflowError):
        return None
