#!/usr/bin/env python3
"""Tests for environment-driven configuration."""

import pytest

from reconciler.core.config import Config, Environment, MatchingConfig, get_config, reload_config


class TestConfigFromEnvironment:
    def test_test_environment_uses_configured_data_dir(self, tmp_path):
        config = Config.from_environment()

        assert config.environment == Environment.TEST
        assert config.data_dir == tmp_path / "data"
        assert config.data_dir.exists()
        assert config.storage.repository_file == config.data_dir / "reconciliation.json"
        assert config.storage.weights_file.parent == config.data_dir / "model"

    def test_matching_overrides(self, monkeypatch):
        monkeypatch.setenv("RECONCILER_INCLUSION_FLOOR", "40")
        monkeypatch.setenv("RECONCILER_MIN_TRAINING_SAMPLES", "3")
        monkeypatch.setenv("RECONCILER_LEARNING_RATE", "0.05")

        matching = Config.from_environment().matching
        assert matching.inclusion_floor == 40
        assert matching.min_training_samples == 3
        assert matching.learning_rate == 0.05

    def test_aliases_file_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("RECONCILER_ALIASES_FILE", str(tmp_path / "aliases.yaml"))
        assert Config.from_environment().storage.aliases_file == tmp_path / "aliases.yaml"

    def test_log_level_is_uppercased(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert Config.from_environment().log_level == "DEBUG"


class TestConfigValidation:
    def test_defaults_are_valid(self):
        assert Config.from_environment().validate() == []

    def test_blend_weights_must_sum_to_one(self):
        config = Config.from_environment()
        config.matching = MatchingConfig(rule_weight=0.5, learned_weight=0.6)
        assert "Rule and learned blend weights must sum to 1.0" in config.validate()

    def test_missing_tier_reported(self):
        config = Config.from_environment()
        config.matching = MatchingConfig(required_confidence={3: 75, 2: 85})
        assert "Required confidence must define tiers for 0-3 known fields" in config.validate()

    def test_get_config_rejects_invalid_environment_values(self, monkeypatch):
        monkeypatch.setenv("RECONCILER_INCLUSION_FLOOR", "150")
        with pytest.raises(ValueError, match="Inclusion floor"):
            get_config()


class TestGlobalConfig:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_reload_config_rebuilds(self):
        first = get_config()
        assert reload_config() is not first

