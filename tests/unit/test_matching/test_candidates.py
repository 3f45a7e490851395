#!/usr/bin/env python3
"""Tests for candidate generation."""

import pytest

from reconciler.core.models import Charge
from reconciler.matching.candidates import CandidateGenerator
from reconciler.matching.confidence import ConfidenceModel


def _charge(charge_id: str, description: str, amount: str, date: str = "2025-08-15", **fields) -> Charge:
    return Charge(id=charge_id, statement_id="stmt-aug", date=date, description=description, amount=amount, **fields)


@pytest.fixture
def generator(normalizer) -> CandidateGenerator:
    return CandidateGenerator(normalizer, ConfidenceModel())


@pytest.mark.matching
class TestGenerate:
    def test_best_candidate_per_receipt(self, generator, make_receipt, uber_charge):
        receipt = make_receipt(merchant="Uber Eats", amount="23.45", date="2025-08-15")
        starbucks = _charge("chg-sbux", "STARBUCKS STORE 1234", "5.95", date="2025-08-10")

        candidates = generator.generate([receipt], [starbucks, uber_charge])

        assert len(candidates) == 1
        best = candidates[0]
        assert best.charge.id == "chg-uber"
        assert best.rule_score == 100
        assert best.learned_score == 92
        assert best.confidence == 95

    def test_ineligible_receipts_skipped(self, generator, make_receipt, uber_charge):
        receipts = [
            make_receipt("no-amount", merchant="Uber Eats", date="2025-08-15"),
            make_receipt("zero", amount="0.00", merchant="Uber Eats"),
            make_receipt("matched", amount="23.45", is_matched=True, matched_charge_id="x"),
        ]
        assert generator.generate(receipts, [uber_charge]) == []

    def test_ineligible_charges_skipped(self, generator, make_receipt):
        receipt = make_receipt(amount="23.45", date="2025-08-15", merchant="Uber Eats")
        charges = [
            _charge("personal", "UBER EATS", "23.45", is_personal_expense=True),
            _charge("no-receipt", "UBER EATS", "23.45", no_receipt_required=True),
            _charge("taken", "UBER EATS", "23.45", is_matched=True, receipt_id="other"),
        ]
        assert generator.generate([receipt], charges) == []

    def test_low_confidence_excluded(self, generator, make_receipt, uber_charge):
        receipt = make_receipt(merchant="Home Depot", amount="500.00", date="2025-06-01")
        assert generator.generate([receipt], [uber_charge]) == []

    def test_ties_break_by_charge_id(self, generator, make_receipt):
        receipt = make_receipt(amount="12.00", date="2025-08-15", merchant="Chipotle")
        charges = [_charge("chg-b", "CHIPOTLE 0421", "12.00"), _charge("chg-a", "CHIPOTLE 0421", "12.00")]

        assert generator.generate([receipt], charges)[0].charge.id == "chg-a"

    def test_results_sorted_best_first(self, generator, make_receipt, uber_charge):
        exact = make_receipt("exact", merchant="Uber Eats", amount="23.45", date="2025-08-15")
        close = make_receipt("close", amount="23.00", date="2025-08-17")

        candidates = generator.generate([close, exact], [uber_charge])

        assert [c.receipt.id for c in candidates] == ["exact", "close"]
        assert candidates[0].confidence > candidates[1].confidence


@pytest.mark.matching
class TestSuggest:
    def test_top_n_for_one_receipt(self, generator, make_receipt):
        receipt = make_receipt(amount="12.00", date="2025-08-15", merchant="Chipotle")
        charges = [
            _charge("c1", "CHIPOTLE 0421", "12.00"),
            _charge("c2", "CHIPOTLE 0421", "12.50", date="2025-08-16"),
            _charge("c3", "CHIPOTLE 0421", "14.00", date="2025-08-18"),
        ]

        suggestions = generator.suggest(receipt, charges, limit=2)

        assert [s.charge.id for s in suggestions] == ["c1", "c2"]

    def test_partial_receipt_can_be_suggested(self, generator, make_receipt):
        receipt = make_receipt(merchant="Chipotle", amount="12.00")
        suggestions = generator.suggest(receipt, [_charge("c1", "CHIPOTLE 0421", "12.00")])
        assert len(suggestions) == 1
