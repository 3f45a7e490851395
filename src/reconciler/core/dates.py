#!/usr/bin/env python3
"""
FinancialDate Primitive Type

Calendar date shared by receipts, charges and statement periods. OCR output
and statement imports deliver dates in a handful of shapes and parse() is the
single place they are normalized.
"""

from dataclasses import dataclass
from datetime import date, datetime

_ACCEPTED_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%Y/%m/%d")


@dataclass(frozen=True, order=True)
class FinancialDate:
    """Immutable date; ordering and equality follow the calendar."""

    date: date

    @classmethod
    def from_string(cls, date_str: str, format: str = "%Y-%m-%d") -> "FinancialDate":
        """
        Strict parse in one format.

        Raises:
            ValueError: If date_str doesn't match format
        """
        return cls(date=datetime.strptime(date_str, format).date())

    @classmethod
    def parse(cls, value: "FinancialDate | date | datetime | str | None") -> "FinancialDate | None":
        """
        Lenient conversion for partially-populated records.

        Accepts ISO strings (a time part is dropped), MM/DD/YYYY, MM/DD/YY,
        YYYY/MM/DD, and date or datetime objects. Blank or unparseable input
        yields None.
        """
        if value is None or isinstance(value, FinancialDate):
            return value
        if isinstance(value, datetime):
            return cls(date=value.date())
        if isinstance(value, date):
            return cls(date=value)

        text = str(value).strip().split("T", 1)[0]
        for fmt in _ACCEPTED_FORMATS:
            try:
                return cls.from_string(text, fmt)
            except ValueError:
                continue
        return None

    def to_iso_string(self) -> str:
        return self.date.isoformat()

    def days_between(self, other: "FinancialDate") -> int:
        """Absolute number of days between two dates."""
        return abs((other.date - self.date).days)

    def __str__(self) -> str:
        return self.to_iso_string()
