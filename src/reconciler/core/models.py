#!/usr/bin/env python3
"""
Core Data Models for the Receipt Reconciler

Receipts and charges are peers: neither owns the other. A match is a mutual
reference (receipt.matched_charge_id <-> charge.receipt_id) that the matching
service keeps consistent on both sides.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .dates import FinancialDate
from .money import Money


class ProcessingStatus(Enum):
    """OCR/entry processing state of a receipt."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"


class ReceiptField(Enum):
    """Receipt fields that drive matching decisions."""

    AMOUNT = "amount"
    DATE = "date"
    MERCHANT = "merchant"


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _clean_text(value: Any) -> str | None:
    """Blank strings from OCR or form entry are not data."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class Receipt:
    """
    User-submitted proof of purchase.

    Created with zero or more of merchant/amount/date populated and filled in
    incrementally as OCR or manual entry supplies more data.
    """

    id: str
    file_name: str

    # Extracted fields, all optional
    merchant: str | None = None
    amount: Money | None = None
    date: FinancialDate | None = None
    category: str | None = None

    # Storage
    file_url: str | None = None
    organized_path: str | None = None

    # Reconciliation state
    is_matched: bool = False
    matched_charge_id: str | None = None
    statement_id: str | None = None
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    needs_manual_review: bool = False
    notes: str | None = None

    # Metadata
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.merchant = _clean_text(self.merchant)
        self.category = _clean_text(self.category)
        self.amount = Money.parse(self.amount)
        self.date = FinancialDate.parse(self.date)
        if isinstance(self.processing_status, str):
            self.processing_status = ProcessingStatus(self.processing_status)

    def known_fields(self) -> set[ReceiptField]:
        """Which of amount/date/merchant carry usable data."""
        known = set()
        if self.amount is not None:
            known.add(ReceiptField.AMOUNT)
        if self.date is not None:
            known.add(ReceiptField.DATE)
        if self.merchant:
            known.add(ReceiptField.MERCHANT)
        return known

    @property
    def has_useful_data(self) -> bool:
        return bool(self.known_fields())

    @property
    def extension(self) -> str:
        """Lower-cased file extension without the dot, 'bin' when absent."""
        name = self.file_name or ""
        if "." not in name:
            return "bin"
        ext = name.rsplit(".", 1)[1].strip()
        return ext.lower() if ext else "bin"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "file_name": self.file_name,
            "merchant": self.merchant,
            "amount": self.amount.to_cents() if self.amount is not None else None,
            "date": self.date.to_iso_string() if self.date else None,
            "category": self.category,
            "file_url": self.file_url,
            "organized_path": self.organized_path,
            "is_matched": self.is_matched,
            "matched_charge_id": self.matched_charge_id,
            "statement_id": self.statement_id,
            "processing_status": self.processing_status.value,
            "needs_manual_review": self.needs_manual_review,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Receipt":
        """
        Create Receipt from dictionary.

        Integer amounts are cents (the to_dict() format); strings are parsed
        as dollars so hand-written fixtures can say "23.45".
        """
        amount = data.get("amount")
        return cls(
            id=data["id"],
            file_name=data.get("file_name", ""),
            merchant=data.get("merchant"),
            amount=Money.from_cents(amount) if isinstance(amount, int) else amount,
            date=data.get("date"),
            category=data.get("category"),
            file_url=data.get("file_url"),
            organized_path=data.get("organized_path"),
            is_matched=data.get("is_matched", False),
            matched_charge_id=data.get("matched_charge_id"),
            statement_id=data.get("statement_id"),
            processing_status=ProcessingStatus(data.get("processing_status", "pending")),
            needs_manual_review=data.get("needs_manual_review", False),
            notes=data.get("notes"),
            created_at=_parse_timestamp(data.get("created_at")),
            updated_at=_parse_timestamp(data.get("updated_at")),
        )


@dataclass
class Charge:
    """
    Line item from a credit-card statement.

    Amount is signed: negative amounts are credits.
    """

    id: str
    statement_id: str
    date: FinancialDate
    description: str
    amount: Money

    category: str | None = None
    is_matched: bool = False
    receipt_id: str | None = None
    is_personal_expense: bool = False
    no_receipt_required: bool = False
    is_non_amex: bool = False
    user_notes: str | None = None

    created_at: datetime | None = None

    def __post_init__(self) -> None:
        parsed_date = FinancialDate.parse(self.date)
        if parsed_date is None:
            raise ValueError(f"Charge {self.id} has no valid date: {self.date!r}")
        self.date = parsed_date

        parsed_amount = Money.parse(self.amount)
        if parsed_amount is None:
            raise ValueError(f"Charge {self.id} has no valid amount: {self.amount!r}")
        self.amount = parsed_amount
        self.category = _clean_text(self.category)

    @property
    def requires_receipt(self) -> bool:
        """Personal and no-receipt-required charges carry no reconciliation duty."""
        return not (self.is_personal_expense or self.no_receipt_required)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "statement_id": self.statement_id,
            "date": self.date.to_iso_string(),
            "description": self.description,
            "amount": self.amount.to_cents(),
            "category": self.category,
            "is_matched": self.is_matched,
            "receipt_id": self.receipt_id,
            "is_personal_expense": self.is_personal_expense,
            "no_receipt_required": self.no_receipt_required,
            "is_non_amex": self.is_non_amex,
            "user_notes": self.user_notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Charge":
        """Create Charge from dictionary (integer amounts are cents)."""
        amount = data["amount"]
        return cls(
            id=data["id"],
            statement_id=data["statement_id"],
            date=data["date"],
            description=data.get("description", ""),
            amount=Money.from_cents(amount) if isinstance(amount, int) else amount,
            category=data.get("category"),
            is_matched=data.get("is_matched", False),
            receipt_id=data.get("receipt_id"),
            is_personal_expense=data.get("is_personal_expense", False),
            no_receipt_required=data.get("no_receipt_required", False),
            is_non_amex=data.get("is_non_amex", False),
            user_notes=data.get("user_notes"),
            created_at=_parse_timestamp(data.get("created_at")),
        )


@dataclass
class Statement:
    """
    Named statement period covering [start_date, end_date], inclusive.
    """

    id: str
    period_name: str
    start_date: FinancialDate
    end_date: FinancialDate
    is_active: bool = False
    user_notes: str | None = None

    def __post_init__(self) -> None:
        start = FinancialDate.parse(self.start_date)
        end = FinancialDate.parse(self.end_date)
        if start is None or end is None:
            raise ValueError(f"Statement {self.id} needs both start and end dates")
        if end < start:
            raise ValueError(f"Statement {self.id} ends before it starts: {start} > {end}")
        self.start_date = start
        self.end_date = end

    def contains(self, when: FinancialDate) -> bool:
        """Inclusive on both ends."""
        return self.start_date <= when <= self.end_date

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "period_name": self.period_name,
            "start_date": self.start_date.to_iso_string(),
            "end_date": self.end_date.to_iso_string(),
            "is_active": self.is_active,
            "user_notes": self.user_notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Statement":
        """Create Statement from dictionary."""
        return cls(
            id=data["id"],
            period_name=data.get("period_name", data["id"]),
            start_date=data["start_date"],
            end_date=data["end_date"],
            is_active=data.get("is_active", False),
            user_notes=data.get("user_notes"),
        )


def validate_statement_periods(statements: list[Statement]) -> list[str]:
    """
    Report overlapping or gapped statement periods.

    The engine only consumes intervals; this is offered to whoever creates or
    edits statements and never enforced during matching.
    """
    problems: list[str] = []
    ordered = sorted(statements, key=lambda s: s.start_date)
    for previous, current in zip(ordered, ordered[1:]):
        if current.start_date <= previous.end_date:
            problems.append(f"{previous.period_name} overlaps {current.period_name}")
        elif previous.end_date.days_between(current.start_date) > 1:
            problems.append(f"Gap between {previous.period_name} and {current.period_name}")
    return problems


# Type aliases for common data structures
ReceiptList = list[Receipt]
ChargeList = list[Charge]
StatementList = list[Statement]
