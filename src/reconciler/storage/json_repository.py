#!/usr/bin/env python3
"""
JSON-file Repository

Keeps receipts, charges and statements in one JSON document so the CLI can
reconcile between invocations. Every mutation rewrites the document
atomically.
"""

import logging
from pathlib import Path
from typing import Any

from ..core.datastore import JsonFileStore
from ..core.models import Charge, Receipt, Statement
from .repository import InMemoryRepository

logger = logging.getLogger(__name__)


class JsonRepository(InMemoryRepository, JsonFileStore):
    """InMemoryRepository that loads from and saves to a JSON document."""

    def __init__(self, path: Path):
        InMemoryRepository.__init__(self)
        JsonFileStore.__init__(self, path)
        self._loading = False
        if self.exists():
            self.load()

    def load(self) -> None:
        """
        Replace in-memory state with the document on disk.

        Raises:
            FileNotFoundError: If the document doesn't exist
            ValueError: If a record in the document is invalid
        """
        document = self._read_document()
        self._loading = True
        try:
            self._receipts = {r["id"]: Receipt.from_dict(r) for r in document.get("receipts", [])}
            self._charges = {c["id"]: Charge.from_dict(c) for c in document.get("charges", [])}
            self._statements = {s["id"]: Statement.from_dict(s) for s in document.get("statements", [])}
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid repository document {self.path}: {e}") from e
        finally:
            self._loading = False

        logger.debug("Loaded repository from %s: %s", self.path, self.summary_text())

    def import_records(self, document: dict[str, Any]) -> None:
        """Merge statements, charges and receipts from an import document."""
        for data in document.get("statements", []):
            statement = Statement.from_dict(data)
            self._statements[statement.id] = statement
        for data in document.get("charges", []):
            charge = Charge.from_dict(data)
            self._charges[charge.id] = charge
        for data in document.get("receipts", []):
            receipt = Receipt.from_dict(data)
            self._receipts[receipt.id] = receipt
        self._persist()

    def item_count(self) -> int | None:
        if not self.exists():
            return None
        return len(self._receipts) + len(self._charges)

    def summary_text(self) -> str:
        if not self.exists():
            return "No reconciliation data found"
        return (
            f"{len(self._statements)} statement(s), {len(self._charges)} charge(s), "
            f"{len(self._receipts)} receipt(s)"
        )

    def _persist(self) -> None:
        if self._loading:
            return
        self._write_document(
            {
                "statements": [s.to_dict() for s in self._statements.values()],
                "charges": [c.to_dict() for c in self._charges.values()],
                "receipts": [r.to_dict() for r in self._receipts.values()],
            }
        )
