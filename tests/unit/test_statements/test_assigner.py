#!/usr/bin/env python3
"""Tests for statement-period assignment."""

import pytest

from reconciler.core.errors import NotFoundError
from reconciler.statements.assigner import StatementAssigner


@pytest.fixture
def assigner(repository):
    return StatementAssigner(repository)


@pytest.mark.statements
class TestAssign:
    def test_assigns_containing_statement(self, assigner, repository, make_receipt):
        repository.save_receipt(make_receipt(date="2025-08-15"))
        assert assigner.assign("rcpt-1").statement_id == "stmt-aug"

    def test_boundaries_are_inclusive(self, assigner, repository, make_receipt):
        repository.save_receipt(make_receipt("first", date="2025-08-01"))
        repository.save_receipt(make_receipt("last", date="2025-08-31"))
        assert assigner.assign("first").statement_id == "stmt-aug"
        assert assigner.assign("last").statement_id == "stmt-aug"

    def test_corrected_date_moves_receipt(self, assigner, repository, make_receipt):
        repository.save_receipt(make_receipt(date="2025-09-03", statement_id="stmt-aug"))

        receipt = assigner.assign("rcpt-1")

        assert receipt.statement_id == "stmt-sep"
        assert repository.get_receipt("rcpt-1").statement_id == "stmt-sep"

    def test_no_date_leaves_receipt_alone(self, assigner, repository, make_receipt):
        repository.save_receipt(make_receipt(statement_id="stmt-aug"))
        assert assigner.assign("rcpt-1").statement_id == "stmt-aug"

    def test_date_outside_every_period(self, assigner, repository, make_receipt):
        repository.save_receipt(make_receipt(date="2024-01-15"))
        assert assigner.assign("rcpt-1").statement_id is None

    def test_date_corrected_outside_every_period_clears_statement(self, assigner, repository, make_receipt):
        repository.save_receipt(make_receipt(date="2026-03-01", statement_id="stmt-aug"))

        receipt = assigner.assign("rcpt-1")

        assert receipt.statement_id is None
        assert repository.get_receipt("rcpt-1").statement_id is None

    def test_matched_receipt_keeps_statement_outside_every_period(self, assigner, repository, make_receipt):
        repository.save_receipt(
            make_receipt(date="2026-03-01", statement_id="stmt-aug", is_matched=True, matched_charge_id="chg-uber")
        )
        assert assigner.assign("rcpt-1").statement_id == "stmt-aug"

    def test_unknown_receipt(self, assigner):
        with pytest.raises(NotFoundError):
            assigner.assign("missing")
