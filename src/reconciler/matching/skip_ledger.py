#!/usr/bin/env python3
"""
Skip Ledger

Append-only record of rejected suggestions. Skips feed the adaptive
threshold (as the "not accepted" side of the acceptance rate) and model
training (as negative samples).

Recording is fire-and-forget: the user has already moved on, so a failure to
persist is logged and swallowed rather than surfaced.
"""

import logging
import threading
from datetime import datetime

from .datastore import SkipLedgerStore
from .features import MatchFeatures
from .models import SkipEvent

logger = logging.getLogger(__name__)


class SkipLedger:
    """In-memory skip ledger with optional file persistence."""

    def __init__(self, store: SkipLedgerStore | None = None):
        self.store = store
        self._lock = threading.Lock()
        self._events: list[SkipEvent] = []
        if store is not None and store.exists():
            self._events = store.load()
            logger.debug("Loaded %d skip events from %s", len(self._events), store.path)

    def record(
        self,
        receipt_id: str,
        charge_id: str,
        features: MatchFeatures,
        reason: str | None = None,
        skipped_at: datetime | None = None,
    ) -> SkipEvent:
        """Append a skip event. Never raises on persistence failure."""
        event = SkipEvent(
            receipt_id=receipt_id,
            charge_id=charge_id,
            features=features,
            skipped_at=skipped_at or datetime.now(),
            reason=reason,
        )
        with self._lock:
            self._events.append(event)
            snapshot = list(self._events)

        logger.debug("Recorded skip of receipt %s / charge %s", receipt_id, charge_id)

        if self.store is not None:
            try:
                self.store.save(snapshot)
            except (OSError, TypeError, ValueError) as e:
                logger.warning("Failed to persist skip event for receipt %s: %s", receipt_id, e)
        return event

    def events(self) -> list[SkipEvent]:
        with self._lock:
            return list(self._events)

    def events_since(self, when: datetime) -> list[SkipEvent]:
        """Skip events recorded at or after the given time, oldest first."""
        with self._lock:
            return sorted((e for e in self._events if e.skipped_at >= when), key=lambda e: e.skipped_at)

    def count_since(self, when: datetime) -> int:
        return len(self.events_since(when))

    def __len__(self) -> int:
        return len(self._events)
