#!/usr/bin/env python3
"""
Reconciliation error taxonomy.

Only genuine caller or integrity errors are exceptions. A receipt that does
not auto-match is a normal outcome (AutoMatchResult.matched is False), and
training with too few samples is a logged no-op.
"""


class ReconciliationError(Exception):
    """Base class for reconciliation engine errors."""


class NotFoundError(ReconciliationError):
    """A receipt, charge or statement id is unknown."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class AlreadyMatchedError(ReconciliationError):
    """A commit would overwrite an existing match on either side."""

    def __init__(self, kind: str, record_id: str, counterpart_id: str | None):
        self.kind = kind
        self.record_id = record_id
        self.counterpart_id = counterpart_id
        super().__init__(f"{kind} {record_id} is already matched to {counterpart_id}")


class TrainingInProgressError(ReconciliationError):
    """ConfidenceModel.train() was invoked while another run is active."""


class FileMoveError(ReconciliationError):
    """The external file mover could not relocate a receipt's backing object."""
