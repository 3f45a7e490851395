#!/usr/bin/env python3
"""Tests for skip pattern analysis."""

from datetime import datetime, timedelta

import pytest

from reconciler.analysis.patterns import PatternAnalyzer
from reconciler.core.models import Charge
from reconciler.matching.features import MatchFeatures
from reconciler.matching.skip_ledger import SkipLedger


@pytest.fixture
def ledger():
    return SkipLedger()


@pytest.fixture
def analyzer(repository, ledger):
    return PatternAnalyzer(repository, ledger)


def record_many(ledger, count, prefix="r", **features):
    for i in range(count):
        ledger.record(f"{prefix}{i}", f"c{i}", MatchFeatures(**features))


@pytest.mark.unit
class TestSkipsDataframe:
    def test_empty_ledger(self, analyzer):
        df = analyzer.skips_dataframe()
        assert df.empty
        assert analyzer.analyze() == []

    def test_joins_receipt_and_charge(self, analyzer, repository, ledger, make_receipt, uber_charge):
        repository.save_receipt(make_receipt(merchant="Uber Eats"))
        repository.save_charge(uber_charge)
        ledger.record("rcpt-1", "chg-uber", MatchFeatures(amount_diff=1.5, date_diff=2))

        row = analyzer.skips_dataframe().iloc[0]

        assert row["receipt_merchant"] == "Uber Eats"
        assert row["charge_description"] == "UBER EATS help.uber.com CA"
        assert row["amount_diff"] == 1.5
        assert row["date_diff"] == 2

    def test_window_excludes_old_skips(self, analyzer, ledger):
        now = datetime.now()
        ledger.record("old", "c", MatchFeatures(), skipped_at=now - timedelta(days=45))
        ledger.record("new", "c", MatchFeatures(), skipped_at=now - timedelta(days=1))

        assert list(analyzer.skips_dataframe(days=30, now=now)["receipt_id"]) == ["new"]


@pytest.mark.unit
class TestPatternChecks:
    def test_merchant_mismatch_needs_more_than_ten(self, analyzer, ledger):
        record_many(ledger, 10, merchant_similarity=0.2)
        assert analyzer.analyze() == []

        ledger.record("r-extra", "c-extra", MatchFeatures(merchant_similarity=0.1))
        (insight,) = analyzer.analyze()

        assert insight.type == "merchant_mismatch"
        assert insight.frequency == 11

    def test_date_offset(self, analyzer, ledger):
        record_many(ledger, 11, date_diff=9)

        (insight,) = analyzer.analyze()

        assert insight.type == "date_offset"
        assert "Average offset: 9 days" in insight.recommendation
        assert insight.examples == [{"days_difference": 9, "occurrences": 11}]

    def test_tip_sized_amount_variance(self, analyzer, ledger):
        record_many(ledger, 16, amount_diff=7.0)

        (insight,) = analyzer.analyze()

        assert insight.type == "amount_variance"
        assert insight.examples == [{"amount_difference": "$7.00", "occurrences": 16}]

    def test_large_amount_gaps_are_not_tips(self, analyzer, ledger):
        record_many(ledger, 16, amount_diff=25.0)
        assert analyzer.analyze() == []

    def test_category_confusion(self, analyzer, repository, ledger, make_receipt):
        for i in range(4):
            repository.save_receipt(make_receipt(f"r{i}", category="Dining"))
            repository.save_charge(
                Charge(
                    id=f"c{i}",
                    statement_id="stmt-aug",
                    date="2025-08-10",
                    description="ACME",
                    amount="10.00",
                    category="Travel",
                )
            )
        record_many(ledger, 4)

        (insight,) = analyzer.analyze()

        assert insight.type == "category_confusion"
        assert insight.examples == [{"from": "Dining", "to": "Travel", "count": 4}]


@pytest.mark.unit
class TestProblematicMerchants:
    def _seed_pair(self, repository, ledger, make_receipt, prefix, merchant, description, diffs):
        for i, diff in enumerate(diffs):
            receipt_id = f"{prefix}-r{i}"
            charge_id = f"{prefix}-c{i}"
            repository.save_receipt(make_receipt(receipt_id, merchant=merchant))
            repository.save_charge(
                Charge(id=charge_id, statement_id="stmt-aug", date="2025-08-10", description=description, amount="5.00")
            )
            ledger.record(receipt_id, charge_id, MatchFeatures(amount_diff=diff, date_diff=1))

    def test_groups_repeated_pairs(self, analyzer, repository, ledger, make_receipt):
        self._seed_pair(repository, ledger, make_receipt, "sb", "Starbucks", "SQ *COFFEE", [2.0, 4.0, 6.0])
        self._seed_pair(repository, ledger, make_receipt, "one", "Target", "TGT 1234", [1.0])

        (mismatch,) = analyzer.problematic_merchants()

        assert mismatch.receipt_merchant == "Starbucks"
        assert mismatch.charge_description == "SQ *COFFEE"
        assert mismatch.frequency == 3
        assert mismatch.avg_amount_diff == 4.0
        assert mismatch.avg_date_diff == 1.0

    def test_alias_recommendation_after_four_failures(self, analyzer, repository, ledger, make_receipt):
        self._seed_pair(repository, ledger, make_receipt, "sb", "Starbucks", "SQ *COFFEE", [2.0] * 4)

        recommendations = analyzer.recommendations()

        assert 'Add alias mapping: "Starbucks" -> "SQ *COFFEE" (4 failed matches)' in recommendations
