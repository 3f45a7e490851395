#!/usr/bin/env python3
"""Tests for the skip ledger and matching datastores."""

import json
from datetime import datetime, timedelta

import pytest

from reconciler.matching.datastore import ModelWeightsStore, SkipLedgerStore
from reconciler.matching.features import UNKNOWN, MatchFeatures
from reconciler.matching.models import ModelWeights
from reconciler.matching.skip_ledger import SkipLedger


@pytest.mark.matching
class TestSkipLedger:
    def test_record_and_query_window(self):
        ledger = SkipLedger()
        now = datetime.now()
        ledger.record("r1", "c1", MatchFeatures(), skipped_at=now - timedelta(days=10))
        ledger.record("r2", "c2", MatchFeatures(), skipped_at=now - timedelta(days=2))
        ledger.record("r3", "c3", MatchFeatures())

        recent = ledger.events_since(now - timedelta(days=7))

        assert [e.receipt_id for e in recent] == ["r2", "r3"]
        assert ledger.count_since(now - timedelta(days=7)) == 2
        assert len(ledger) == 3

    def test_persisted_events_reload(self, tmp_path):
        store = SkipLedgerStore(tmp_path / "skips.json")
        SkipLedger(store).record("r1", "c1", MatchFeatures(amount_diff=2.5), reason="wrong trip")

        reloaded = SkipLedger(SkipLedgerStore(tmp_path / "skips.json")).events()

        assert len(reloaded) == 1
        assert reloaded[0].features.amount_diff == 2.5
        assert reloaded[0].features.date_diff is UNKNOWN
        assert reloaded[0].reason == "wrong trip"

    def test_persist_failure_is_swallowed(self, tmp_path, caplog):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        ledger = SkipLedger(SkipLedgerStore(blocker / "skips.json"))

        event = ledger.record("r1", "c1", MatchFeatures())

        assert event.receipt_id == "r1"
        assert len(ledger) == 1
        assert "Failed to persist skip event" in caplog.text


@pytest.mark.matching
class TestModelWeightsStore:
    def test_defaults_when_never_trained(self, tmp_path):
        store = ModelWeightsStore(tmp_path / "weights.json")
        assert not store.exists()
        assert store.load_or_default() == ModelWeights()
        assert "default" in store.summary_text()

    def test_save_and_load(self, tmp_path):
        store = ModelWeightsStore(tmp_path / "model" / "weights.json")
        weights = ModelWeights(amount_diff=-0.2, bias=0.1)
        store.save(weights)

        assert store.load() == weights
        assert store.item_count() == 1
        assert store.size_bytes() > 0
        assert store.age_days() == 0
        assert json.loads(store.path.read_text())["weights"]["amount_diff"] == -0.2

    def test_version_metadata_round_trips(self, tmp_path):
        store = ModelWeightsStore(tmp_path / "weights.json")
        weights = ModelWeights(bias=0.3, version=4, trained_at=datetime(2025, 9, 1, 8, 30))
        store.save(weights)

        assert store.load() == weights
        assert store.load().coefficients() == ModelWeights().coefficients()
        assert "v4" in store.summary_text()

    def test_no_temp_files_left_behind(self, tmp_path):
        store = ModelWeightsStore(tmp_path / "weights.json")
        store.save(ModelWeights())
        store.save(ModelWeights(bias=1.0))
        assert [p.name for p in tmp_path.iterdir()] == ["weights.json"]

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "weights.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError):
            ModelWeightsStore(path).load()
