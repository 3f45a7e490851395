#!/usr/bin/env python3
"""Tests for Receipt, Charge and Statement models."""

import pytest

from reconciler.core.dates import FinancialDate
from reconciler.core.models import (
    Charge,
    ProcessingStatus,
    Receipt,
    ReceiptField,
    Statement,
    validate_statement_periods,
)
from reconciler.core.money import Money


class TestReceipt:
    """Test partially-populated receipts."""

    def test_blank_fields_are_missing(self):
        receipt = Receipt(id="r1", file_name="r1.jpg", merchant="  ", amount="", date="")
        assert receipt.merchant is None
        assert receipt.amount is None
        assert receipt.date is None
        assert receipt.known_fields() == set()
        assert not receipt.has_useful_data

    def test_known_fields(self):
        receipt = Receipt(id="r1", file_name="r1.jpg", amount="5.95", merchant="Starbucks")
        assert receipt.known_fields() == {ReceiptField.AMOUNT, ReceiptField.MERCHANT}
        assert receipt.has_useful_data

    def test_values_are_parsed(self):
        receipt = Receipt(id="r1", file_name="r1.jpg", amount="23.45", date="08/15/2025", processing_status="completed")
        assert receipt.amount == Money.from_cents(2345)
        assert receipt.date == FinancialDate.from_string("2025-08-15")
        assert receipt.processing_status == ProcessingStatus.COMPLETED

    @pytest.mark.parametrize(
        "file_name, extension",
        [("receipt.PDF", "pdf"), ("scan.final.jpg", "jpg"), ("noext", "bin"), ("trailing.", "bin")],
    )
    def test_extension(self, file_name, extension):
        assert Receipt(id="r1", file_name=file_name).extension == extension

    def test_dict_round_trip_keeps_amount_in_cents(self):
        receipt = Receipt(id="r1", file_name="r1.jpg", amount="23.45", date="2025-08-15", merchant="Uber Eats")
        data = receipt.to_dict()
        assert data["amount"] == 2345

        restored = Receipt.from_dict(data)
        assert restored.amount == receipt.amount
        assert restored.date == receipt.date
        assert restored.merchant == "Uber Eats"

    def test_from_dict_string_amount_is_dollars(self):
        receipt = Receipt.from_dict({"id": "r1", "file_name": "a.pdf", "amount": "23.45"})
        assert receipt.amount == Money.from_cents(2345)


class TestCharge:
    def test_requires_valid_date_and_amount(self):
        with pytest.raises(ValueError):
            Charge(id="c1", statement_id="s", date="bogus", description="X", amount="1.00")
        with pytest.raises(ValueError):
            Charge(id="c1", statement_id="s", date="2025-08-01", description="X", amount="")

    def test_credit_amount_is_negative(self):
        charge = Charge(id="c1", statement_id="s", date="2025-08-01", description="Refund", amount="-12.00")
        assert charge.amount == Money.from_cents(-1200)

    def test_requires_receipt(self):
        charge = Charge(id="c1", statement_id="s", date="2025-08-01", description="X", amount="1.00")
        assert charge.requires_receipt
        charge.is_personal_expense = True
        assert not charge.requires_receipt

        charge.is_personal_expense = False
        charge.no_receipt_required = True
        assert not charge.requires_receipt


class TestStatement:
    def test_contains_is_inclusive(self, august):
        assert august.contains(FinancialDate.from_string("2025-08-01"))
        assert august.contains(FinancialDate.from_string("2025-08-31"))
        assert not august.contains(FinancialDate.from_string("2025-09-01"))

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            Statement(id="s", period_name="bad", start_date="2025-08-31", end_date="2025-08-01")

    def test_validate_periods_reports_overlap_and_gap(self, august, september):
        assert validate_statement_periods([september, august]) == []

        overlapping = Statement(id="x", period_name="Overlap", start_date="2025-08-20", end_date="2025-09-05")
        assert validate_statement_periods([august, overlapping]) == ["2025 - 08 Statement overlaps Overlap"]

        october = Statement(id="oct", period_name="October", start_date="2025-10-05", end_date="2025-10-31")
        assert validate_statement_periods([september, october]) == ["Gap between 2025 - 09 Statement and October"]
