#!/usr/bin/env python3
"""
Matching DataStores

File-backed persistence for the learned model weights and the skip ledger.
Both write through JsonFileStore, which replaces the file atomically.
"""

import logging
from pathlib import Path

from ..core.datastore import JsonFileStore
from .models import ModelWeights, SkipEvent

logger = logging.getLogger(__name__)


class ModelWeightsStore(JsonFileStore):
    """DataStore for the ConfidenceModel's trained weights."""

    def __init__(self, path: Path):
        super().__init__(path)

    def load(self) -> ModelWeights:
        """
        Load trained weights.

        Raises:
            FileNotFoundError: If no weights have been saved
            ValueError: If the weights file is malformed
        """
        document = self._read_document()
        if not isinstance(document, dict):
            raise ValueError(f"Invalid weights document in {self.path}")
        try:
            return ModelWeights.from_dict(document.get("weights", document))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid weights in {self.path}: {e}") from e

    def load_or_default(self) -> ModelWeights:
        """Trained weights if present, otherwise the built-in defaults."""
        if not self.exists():
            return ModelWeights()
        return self.load()

    def save(self, data: ModelWeights) -> None:
        self._write_document({"weights": data.to_dict()})
        logger.info("Saved model weights v%d to %s", data.version, self.path)

    def item_count(self) -> int | None:
        return 1 if self.exists() else None

    def summary_text(self) -> str:
        if not self.exists():
            return "Using default model weights (never trained)"
        weights = self.load()
        return f"Trained model weights v{weights.version} ({self.age_days()} day(s) old)"


class SkipLedgerStore(JsonFileStore):
    """DataStore for recorded SkipEvents (append-only in practice)."""

    def __init__(self, path: Path):
        super().__init__(path)

    def load(self) -> list[SkipEvent]:
        """
        Load all skip events.

        Raises:
            FileNotFoundError: If the ledger file doesn't exist
            ValueError: If the ledger file is malformed
        """
        document = self._read_document()
        if not isinstance(document, list):
            raise ValueError(f"Invalid skip ledger in {self.path}: expected a list")
        try:
            return [SkipEvent.from_dict(item) for item in document]
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid skip event in {self.path}: {e}") from e

    def save(self, data: list[SkipEvent]) -> None:
        self._write_document([event.to_dict() for event in data])

    def item_count(self) -> int | None:
        if not self.exists():
            return None
        return len(self.load())

    def summary_text(self) -> str:
        count = self.item_count()
        if count is None:
            return "No skip events recorded"
        return f"{count} skip event(s) recorded"
