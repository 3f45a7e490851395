#!/usr/bin/env python3
"""Tests for the in-memory and JSON-file repositories."""

import json
from datetime import datetime, timedelta

import pytest

from reconciler.core.models import Charge, Receipt, Statement
from reconciler.core.money import Money
from reconciler.storage.json_repository import JsonRepository
from reconciler.storage.repository import InMemoryRepository


@pytest.mark.unit
class TestInMemoryRepository:
    def test_reads_return_copies(self, repository, make_receipt):
        repository.save_receipt(make_receipt(merchant="Starbucks"))

        receipt = repository.get_receipt("rcpt-1")
        receipt.merchant = "Changed"

        assert repository.get_receipt("rcpt-1").merchant == "Starbucks"

    def test_save_stamps_timestamps(self, repository, make_receipt):
        saved = repository.save_receipt(make_receipt())
        assert saved.created_at is not None
        assert saved.updated_at >= saved.created_at

    def test_list_charges_by_statement(self, repository, uber_charge):
        repository.save_charge(uber_charge)
        repository.save_charge(
            Charge(id="chg-sep", statement_id="stmt-sep", date="2025-09-02", description="SHELL", amount="40.00")
        )

        assert [c.id for c in repository.list_charges(statement_id="stmt-aug")] == ["chg-uber"]
        assert len(repository.list_charges()) == 2

    def test_statements_sorted_by_start(self):
        repo = InMemoryRepository()
        repo.save_statement(Statement(id="b", period_name="B", start_date="2025-09-01", end_date="2025-09-30"))
        repo.save_statement(Statement(id="a", period_name="A", start_date="2025-08-01", end_date="2025-08-31"))
        assert [s.id for s in repo.list_statements()] == ["a", "b"]

    def test_delete(self, repository, make_receipt):
        repository.save_receipt(make_receipt())
        assert repository.delete_receipt("rcpt-1") is True
        assert repository.delete_receipt("rcpt-1") is False
        assert repository.get_receipt("rcpt-1") is None

    def test_matched_receipts_since(self, repository, make_receipt):
        repository.save_receipt(make_receipt("matched", is_matched=True, matched_charge_id="c"))
        repository.save_receipt(make_receipt("open"))

        recent = repository.matched_receipts_since(datetime.now() - timedelta(days=1))
        assert [r.id for r in recent] == ["matched"]
        assert repository.matched_receipts_since(datetime.now() + timedelta(days=1)) == []


@pytest.mark.unit
class TestJsonRepository:
    def test_new_repository_has_no_file(self, temp_dir):
        repo = JsonRepository(temp_dir / "data.json")
        assert not repo.exists()
        assert repo.item_count() is None
        assert repo.summary_text() == "No reconciliation data found"

    def test_mutations_survive_reload(self, temp_dir, august, uber_charge):
        path = temp_dir / "data.json"
        repo = JsonRepository(path)
        repo.save_statement(august)
        repo.save_charge(uber_charge)
        repo.save_receipt(Receipt(id="r1", file_name="a.pdf", merchant="Uber Eats", amount="23.45"))

        reloaded = JsonRepository(path)

        assert reloaded.get_statement("stmt-aug").period_name == "2025 - 08 Statement"
        assert reloaded.get_charge("chg-uber").amount == Money.from_cents(2345)
        assert reloaded.get_receipt("r1").amount == Money.from_cents(2345)
        assert reloaded.item_count() == 2
        assert reloaded.summary_text() == "1 statement(s), 1 charge(s), 1 receipt(s)"

    def test_amounts_stored_as_cents(self, temp_dir, uber_charge, august):
        path = temp_dir / "data.json"
        repo = JsonRepository(path)
        repo.save_statement(august)
        repo.save_charge(uber_charge)

        document = json.loads(path.read_text())
        assert document["charges"][0]["amount"] == 2345

    def test_import_records_accepts_dollar_strings(self, temp_dir):
        path = temp_dir / "data.json"
        repo = JsonRepository(path)
        repo.import_records(
            {
                "statements": [{"id": "s", "start_date": "2025-08-01", "end_date": "2025-08-31"}],
                "charges": [
                    {"id": "c", "statement_id": "s", "date": "2025-08-15", "description": "X", "amount": "-12.00"}
                ],
                "receipts": [{"id": "r", "file_name": "r.jpg", "amount": "12.00", "processing_status": "completed"}],
            }
        )

        reloaded = JsonRepository(path)
        assert reloaded.get_statement("s").period_name == "s"
        assert reloaded.get_charge("c").amount == Money.from_cents(-1200)
        assert reloaded.get_receipt("r").amount == Money.from_cents(1200)

    def test_invalid_document(self, temp_dir):
        path = temp_dir / "data.json"
        path.write_text(json.dumps({"receipts": [{"file_name": "missing-id.pdf"}]}))

        with pytest.raises(ValueError, match="Invalid repository document"):
            JsonRepository(path)
