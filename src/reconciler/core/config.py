#!/usr/bin/env python3
"""
Configuration Management for the Receipt Reconciler

Handles environment-based configuration with secure defaults and validation.
Supports multiple environments (development, test, production). Matching
components never read the environment themselves; they receive the values
held here by injection.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class MatchingConfig:
    """Tunable matching and training parameters."""

    # Blend of rule-based and learned confidence (must sum to 1.0)
    rule_weight: float = 0.4
    learned_weight: float = 0.6

    # Candidates at or below this blended confidence are not suggested
    inclusion_floor: int = 25

    # Required confidence keyed by number of known receipt fields
    required_confidence: dict[int, int] = field(
        default_factory=lambda: {3: 75, 2: 85, 1: 95, 0: 100}
    )

    # Adaptive threshold tiers
    default_threshold: int = 70
    aggressive_threshold: int = 65
    conservative_threshold: int = 75
    aggressive_rate: float = 0.8
    balanced_rate: float = 0.6
    adaptive_window_days: int = 7

    # Training
    min_training_samples: int = 10
    training_iterations: int = 100
    learning_rate: float = 0.01
    training_window_days: int = 30
    training_sample_limit: int = 100

    # Suggestions shown per receipt
    suggestion_limit: int = 3


@dataclass
class StorageConfig:
    """File locations for engine-owned state."""

    repository_file: Path
    weights_file: Path
    skip_ledger_file: Path
    aliases_file: Path
    inbox_prefix: str = "/objects/Inbox_New"
    statements_prefix: str = "/objects/statements"


@dataclass
class Config:
    """
    Main configuration class for the reconciler.

    Loads configuration from environment variables with secure defaults
    and validation for each environment type.
    """

    environment: Environment

    # Core directories
    data_dir: Path

    # Component configurations
    matching: MatchingConfig
    storage: StorageConfig

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("RECONCILER_ENV", "development"))

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_reconciler"
            data_dir = Path(os.getenv("RECONCILER_DATA_DIR", str(default_test_dir)))
        else:
            data_dir = Path(os.getenv("RECONCILER_DATA_DIR", "./data")).expanduser().resolve()

        data_dir.mkdir(parents=True, exist_ok=True)

        matching = MatchingConfig(
            inclusion_floor=int(os.getenv("RECONCILER_INCLUSION_FLOOR", "25")),
            min_training_samples=int(os.getenv("RECONCILER_MIN_TRAINING_SAMPLES", "10")),
            training_iterations=int(os.getenv("RECONCILER_TRAINING_ITERATIONS", "100")),
            learning_rate=float(os.getenv("RECONCILER_LEARNING_RATE", "0.01")),
        )

        storage = StorageConfig(
            repository_file=data_dir / "reconciliation.json",
            weights_file=data_dir / "model" / "weights.json",
            skip_ledger_file=data_dir / "model" / "skip_events.json",
            aliases_file=Path(os.getenv("RECONCILER_ALIASES_FILE", str(data_dir / "merchant_aliases.yaml"))),
        )

        return cls(
            environment=env,
            data_dir=data_dir,
            matching=matching,
            storage=storage,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.data_dir.exists():
            errors.append(f"data_dir does not exist: {self.data_dir}")

        m = self.matching
        if abs(m.rule_weight + m.learned_weight - 1.0) > 1e-9:
            errors.append("Rule and learned blend weights must sum to 1.0")
        if not 0 <= m.inclusion_floor <= 100:
            errors.append("Inclusion floor must be 0-100")
        if m.min_training_samples < 1:
            errors.append("Minimum training samples must be positive")
        if m.training_iterations <= 0:
            errors.append("Training iterations must be positive")
        if m.learning_rate <= 0:
            errors.append("Learning rate must be positive")
        if not m.aggressive_threshold <= m.default_threshold <= m.conservative_threshold:
            errors.append("Adaptive thresholds must be ordered aggressive <= default <= conservative")
        if sorted(m.required_confidence) != [0, 1, 2, 3]:
            errors.append("Required confidence must define tiers for 0-3 known fields")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()

