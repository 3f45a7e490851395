#!/usr/bin/env python3
"""
Money Primitive Type

Receipt totals and charge amounts as integer cents. Charges can be negative
(credits); receipt amounts only participate in matching when positive.
"""

from dataclasses import dataclass
from decimal import Decimal

from .currency import (
    cents_to_dollars,
    cents_to_dollars_str,
    parse_dollars_to_cents,
    safe_currency_to_cents,
)


@dataclass(frozen=True, order=True)
class Money:
    """
    Immutable USD amount in cents.

    Examples:
        >>> Money.from_dollars("23.45")
        Money(cents=2345)
        >>> Money.from_cents(-1200).abs()
        Money(cents=1200)
    """

    cents: int

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        return cls(cents=cents)

    @classmethod
    def from_dollars(cls, dollars: str | int) -> "Money":
        """Strict parse of "$12.34"-style strings or whole-dollar integers."""
        if isinstance(dollars, int):
            return cls(cents=dollars * 100)
        return cls(cents=parse_dollars_to_cents(dollars))

    @classmethod
    def parse(cls, value: "Money | str | int | float | Decimal | None") -> "Money | None":
        """Lenient parse: None for missing or unparseable input."""
        if value is None or isinstance(value, Money):
            return value
        cents = safe_currency_to_cents(value)
        return None if cents is None else cls(cents=cents)

    def to_cents(self) -> int:
        return self.cents

    def to_dollars(self) -> float:
        return cents_to_dollars(self.cents)

    def to_decimal_str(self) -> str:
        """'23.45' with no currency sign (used in organized file names)."""
        return cents_to_dollars_str(self.cents)

    def is_positive(self) -> bool:
        return self.cents > 0

    def abs(self) -> "Money":
        """Magnitude, so a credit can be compared against a receipt total."""
        return Money(cents=abs(self.cents))

    def __str__(self) -> str:
        return f"${self.to_decimal_str()}"
